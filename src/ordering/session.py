"""Anonymous, device-local session identity.

The session id is the only key used to find a visitor's cart. It is created
the first time it is needed and then kept for good under a single fixed key;
nothing in the cart layer ever rewrites it.
"""

import contextlib
import json
import os
import secrets
import tempfile
import time
from pathlib import Path
from typing import Protocol

import structlog

from storefront.errors import StoreUnavailableError

logger = structlog.get_logger(__name__)

CART_SESSION_KEY = "cart_session_id"


class SessionStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemorySessionStore:
    """Session slot that lives as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class FileSessionStore:
    """Session slot persisted as a small JSON document on disk."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        try:
            with self._path.open(encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreUnavailableError(f"Cannot read session file {self._path}: {exc}") from exc
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        tmp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=".session-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
            raise StoreUnavailableError(f"Cannot write session file {self._path}: {exc}") from exc


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def get_or_create_session_id(store: SessionStore) -> str:
    """Read the session id, creating and persisting it on first use."""
    session_id = store.get(CART_SESSION_KEY)
    if session_id:
        return session_id

    session_id = new_session_id()
    store.set(CART_SESSION_KEY, session_id)
    logger.info("Session identity created", session_id=session_id)
    return session_id
