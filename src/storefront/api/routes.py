"""FastAPI routes for the trace log ("student mode" sidebar)."""

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_storefront
from storefront.api.schemas import TraceEntryResponse, TraceResponse
from storefront.container import Storefront
from storefront.trace import TraceLog

trace_router = APIRouter(prefix="/trace", tags=["trace"])


def _snapshot(trace_log: TraceLog) -> TraceResponse:
    return TraceResponse(
        enabled=trace_log.is_enabled,
        entries=[TraceEntryResponse.from_entry(entry) for entry in trace_log.history()],
    )


@trace_router.get("", response_model=TraceResponse)
async def get_trace(storefront: Storefront = Depends(get_storefront)) -> TraceResponse:
    return _snapshot(storefront.trace_log)


@trace_router.post("/enable", response_model=TraceResponse)
async def enable_trace(storefront: Storefront = Depends(get_storefront)) -> TraceResponse:
    storefront.trace_log.enable()
    return _snapshot(storefront.trace_log)


@trace_router.post("/disable", response_model=TraceResponse)
async def disable_trace(storefront: Storefront = Depends(get_storefront)) -> TraceResponse:
    storefront.trace_log.disable()
    return _snapshot(storefront.trace_log)


@trace_router.post("/toggle", response_model=TraceResponse)
async def toggle_trace(storefront: Storefront = Depends(get_storefront)) -> TraceResponse:
    storefront.trace_log.toggle()
    return _snapshot(storefront.trace_log)


@trace_router.delete("", response_model=TraceResponse)
async def clear_trace(storefront: Storefront = Depends(get_storefront)) -> TraceResponse:
    storefront.trace_log.clear()
    return _snapshot(storefront.trace_log)
