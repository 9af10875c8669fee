from storefront.trace.log import TraceEntry, TraceListener, TraceLog
from storefront.trace.params import Identifier, TraceValue, format_query, placeholders

__all__ = [
    "Identifier",
    "TraceEntry",
    "TraceListener",
    "TraceLog",
    "TraceValue",
    "format_query",
    "placeholders",
]
