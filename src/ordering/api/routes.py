"""FastAPI routes for the Ordering domain: the session's cart."""

from fastapi import APIRouter, Depends

from ordering.api.schemas import (
    AddToCartRequest,
    CartResponse,
    CartSummaryResponse,
    UpdateCartQuantityRequest,
)
from ordering.cart.manager import CartState
from storefront.api.dependencies import get_storefront
from storefront.container import Storefront

cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(storefront: Storefront = Depends(get_storefront)) -> CartResponse:
    """Return the session's cart, initializing it if the manager is not ready yet."""
    if storefront.cart.state is not CartState.READY:
        await storefront.cart.initialize()
    return CartResponse.from_cart(storefront.cart.cart)


@cart_router.get("/summary", response_model=CartSummaryResponse)
async def get_cart_summary(storefront: Storefront = Depends(get_storefront)) -> CartSummaryResponse:
    summary = storefront.cart.summary(storefront.settings.tax_rate)
    return CartSummaryResponse.from_summary(summary)


@cart_router.post("/items", status_code=201, response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, storefront: Storefront = Depends(get_storefront)) -> CartResponse:
    cart = await storefront.cart.add_item(body.product_id)
    return CartResponse.from_cart(cart)


@cart_router.put("/items/{line_id}", response_model=CartResponse)
async def update_cart_quantity(
    line_id: str,
    body: UpdateCartQuantityRequest,
    storefront: Storefront = Depends(get_storefront),
) -> CartResponse:
    cart = await storefront.cart.set_quantity(line_id, body.quantity)
    return CartResponse.from_cart(cart)


@cart_router.delete("/items/{line_id}", response_model=CartResponse)
async def remove_from_cart(line_id: str, storefront: Storefront = Depends(get_storefront)) -> CartResponse:
    cart = await storefront.cart.remove_item(line_id)
    return CartResponse.from_cart(cart)
