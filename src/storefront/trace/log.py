"""Trace log: an observable history of the queries user actions issue.

The log is opt-in instrumentation, not an audit trail. While disabled it
drops everything; disabling discards the history, so enabling again always
starts empty. Every state change (enable, disable, log, clear) is broadcast
synchronously to all subscribers with the full ordered history.

One ``TraceLog`` is built per process by the application container and
handed to every component that records actions.
"""

import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from storefront.errors import TraceReentryError
from storefront.trace.params import Identifier, TraceValue, format_query

logger = structlog.get_logger(__name__)

TraceListener = Callable[[list["TraceEntry"]], None]


def _new_trace_id() -> str:
    return uuid.uuid4().hex


class TraceEntry(BaseModel):
    """One recorded action and the query it stands for."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_trace_id)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    action: str
    query_text: str
    params: dict[str, TraceValue] = Field(default_factory=dict)

    @field_validator("query_text")
    @classmethod
    def _strip_query_text(cls, value: str) -> str:
        return value.strip()

    @property
    def rendered(self) -> str:
        """Query text with every known placeholder substituted."""
        return format_query(self.query_text, self.params)


class TraceLog:
    def __init__(self, enabled: bool = False) -> None:
        self._enabled = enabled
        self._entries: list[TraceEntry] = []
        self._subscribers: dict[int, TraceListener] = {}
        self._next_token = 0
        self._dispatching = False

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._guard()
        self._enabled = True
        logger.debug("Trace log enabled")
        self._notify()

    def disable(self) -> None:
        """Stop capturing and discard the history."""
        self._guard()
        self._enabled = False
        self._entries = []
        logger.debug("Trace log disabled")
        self._notify()

    def toggle(self) -> bool:
        if self._enabled:
            self.disable()
        else:
            self.enable()
        return self._enabled

    def log_action(
        self,
        action: str,
        query_text: str,
        params: Mapping[str, str | int | Identifier] | None = None,
    ) -> TraceEntry | None:
        """Record an action. Returns the new entry, or None when nothing was recorded.

        Logging is best-effort: calls made while disabled, or from inside a
        subscriber, or with parameters outside str, int and Identifier, are
        dropped rather than raised.
        """
        if not self._enabled:
            return None
        if self._dispatching:
            logger.warning("Trace action dropped: logged from a trace subscriber", action=action)
            return None

        try:
            entry = TraceEntry(action=action, query_text=query_text, params=dict(params or {}))
        except ValidationError as exc:
            logger.warning("Trace action dropped: invalid parameters", action=action, error=str(exc))
            return None
        self._entries.append(entry)
        self._notify()
        return entry

    def history(self) -> list[TraceEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._guard()
        self._entries = []
        self._notify()

    def subscribe(self, listener: TraceListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = listener

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def __len__(self) -> int:
        return len(self._entries)

    def _guard(self) -> None:
        if self._dispatching:
            raise TraceReentryError("Trace log cannot be mutated while notifying subscribers")

    def _notify(self) -> None:
        # Listeners registered or removed mid-dispatch only see the next one
        listeners = list(self._subscribers.values())
        self._dispatching = True
        try:
            for listener in listeners:
                try:
                    listener(self.history())
                except Exception:
                    logger.exception("Trace subscriber failed", listener=repr(listener))
        finally:
            self._dispatching = False
