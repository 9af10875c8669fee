"""Trace parameters and placeholder substitution.

Trace query text names its dynamic values with ``<name>`` placeholders. The
values travel next to the text as a closed set of types so substitution
always knows how to render them:

- ``str``: free-form user input, rendered with SQL quote escaping
- ``int``: rendered in decimal
- ``Identifier``: opaque ids, rendered verbatim
"""

import re
from collections.abc import Mapping
from typing import TypeAlias, Union

from pydantic import ConfigDict, RootModel, StrictInt, StrictStr

_PLACEHOLDER = re.compile(r"<([A-Za-z_][A-Za-z0-9_]*)>")


class Identifier(RootModel[str]):
    """Opaque identifier (session, cart, line or product id)."""

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.root


TraceValue: TypeAlias = Union[StrictStr, StrictInt, Identifier]


def render_value(value: str | int | Identifier) -> str:
    if isinstance(value, Identifier):
        return value.root
    if isinstance(value, bool):
        raise TypeError("Booleans are not valid trace values")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.replace("'", "''")
    raise TypeError(f"Unsupported trace value type: {type(value).__name__}")


def format_query(query_text: str, params: Mapping[str, str | int | Identifier] | None = None) -> str:
    """Substitute ``<name>`` placeholders with their rendered values.

    Placeholders without a matching parameter are left as they are.
    """
    if not params:
        return query_text

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in params:
            return match.group(0)
        return render_value(params[name])

    return _PLACEHOLDER.sub(_substitute, query_text)


def placeholders(query_text: str) -> list[str]:
    """Placeholder names in order of first appearance."""
    seen: dict[str, None] = {}
    for match in _PLACEHOLDER.finditer(query_text):
        seen.setdefault(match.group(1), None)
    return list(seen)
