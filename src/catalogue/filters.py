"""Product filter state: the complete snapshot of the listing controls.

``FilterState`` is a value: every change produces a new instance through
``replace``/``toggled``/``cleared``, so a state handed to the compiler can
never be mutated behind its back.
"""

import re

from pydantic import BaseModel, ConfigDict, field_validator

from storefront.errors import InvalidFilterError
from storefront.store.query import Direction, Sort

ALL_CATEGORIES = "All"
ALL_PRICES = "all"
DEFAULT_SORT = "name-asc"

CATEGORIES = ("All", "Smartphones", "Laptops", "Tablets", "Audio", "Wearables", "Desktops")
COLORS = ("Silver", "Space Black", "Natural Titanium", "Pink", "White", "Midnight", "Titanium")
STORAGE_OPTIONS = ("128GB", "256GB", "512GB", "1TB")
PRICE_RANGES = ("all", "0-500", "500-1000", "1000-2000", "2000+")

SORT_OPTIONS: dict[str, Sort] = {
    "name-asc": Sort(field="name", direction=Direction.ASC),
    "name-desc": Sort(field="name", direction=Direction.DESC),
    "price-asc": Sort(field="price", direction=Direction.ASC),
    "price-desc": Sort(field="price", direction=Direction.DESC),
}

_STORAGE_PATTERN = re.compile(r"^\s*(\d+)\s*(GB|TB)\s*$", re.IGNORECASE)
_GB_PER_UNIT = {"GB": 1, "TB": 1000}


def normalize_storage(value: str) -> int:
    """Convert a display capacity to gigabytes: ``"512GB"`` → 512, ``"1TB"`` → 1000."""
    match = _STORAGE_PATTERN.match(value)
    if match is None:
        raise InvalidFilterError(f"Unsupported storage value: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _GB_PER_UNIT[unit.upper()]


def resolve_sort(sort_by: str) -> Sort:
    """Look up a sort key; anything unrecognised sorts by name ascending."""
    return SORT_OPTIONS.get(sort_by, SORT_OPTIONS[DEFAULT_SORT])


def _unique(values: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


class FilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    search: str = ""
    category: str = ALL_CATEGORIES
    sort_by: str = DEFAULT_SORT
    price_range: str = ALL_PRICES
    colors: tuple[str, ...] = ()
    storage: tuple[str, ...] = ()

    @field_validator("colors")
    @classmethod
    def _dedupe_colors(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _unique(value)

    @field_validator("storage")
    @classmethod
    def _validate_storage(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for entry in value:
            normalize_storage(entry)
        return _unique(value)

    @classmethod
    def default(cls) -> "FilterState":
        return cls()

    def replace(self, **changes) -> "FilterState":
        return type(self).model_validate({**self.model_dump(), **changes})

    def cleared(self) -> "FilterState":
        return type(self)()

    def toggled(self, field: str, value: str) -> "FilterState":
        """Add ``value`` to a multi-select field, or remove it if present."""
        if field not in ("colors", "storage"):
            raise ValueError(f"{field} is not a multi-select filter")
        current: tuple[str, ...] = getattr(self, field)
        if value in current:
            updated = tuple(v for v in current if v != value)
        else:
            updated = (*current, value)
        return self.replace(**{field: updated})

    @property
    def sort(self) -> Sort:
        return resolve_sort(self.sort_by)

    @property
    def storage_gb(self) -> tuple[int, ...]:
        return tuple(normalize_storage(entry) for entry in self.storage)

    @property
    def active_filter_count(self) -> int:
        """Number of refinements shown on the filter badge (search and sort excluded)."""
        return (
            (1 if self.category != ALL_CATEGORIES else 0)
            + len(self.colors)
            + len(self.storage)
            + (1 if self.price_range != ALL_PRICES else 0)
        )
