"""Storefront API package: trace log routes and shared HTTP plumbing."""

from storefront.api.error_handlers import register_exception_handlers
from storefront.api.routes import trace_router

__all__ = ["register_exception_handlers", "trace_router"]
