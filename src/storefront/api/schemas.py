"""Pydantic response schemas for the trace log API."""

from datetime import datetime

from pydantic import BaseModel

from storefront.trace import Identifier, TraceEntry


class TraceEntryResponse(BaseModel):
    id: str
    timestamp: datetime
    action: str
    query_text: str
    rendered: str
    params: dict[str, str | int]

    @classmethod
    def from_entry(cls, entry: TraceEntry) -> "TraceEntryResponse":
        return cls(
            id=entry.id,
            timestamp=entry.timestamp,
            action=entry.action,
            query_text=entry.query_text,
            rendered=entry.rendered,
            params={name: str(value) if isinstance(value, Identifier) else value for name, value in entry.params.items()},
        )


class TraceResponse(BaseModel):
    enabled: bool
    entries: list[TraceEntryResponse]
