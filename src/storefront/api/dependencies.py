"""FastAPI dependencies resolving the application container."""

from fastapi import Request

from storefront.container import Storefront


def get_storefront(request: Request) -> Storefront:
    return request.app.state.storefront
