"""Cart manager. Resolves the session's cart and applies cart mutations.

Lifecycle: UNINITIALIZED → INITIALIZING → READY, or INITIALIZING → FAILED
when the store cannot resolve the cart. A failed manager rejects cart
operations until ``initialize()`` succeeds.

Every mutation records its trace entry first, then writes to the store, then
re-reads the whole cart. The in-memory aggregate only ever comes from a
successful reload; nothing is patched optimistically. Trace entries are
intent, so they stay in the log even if the write that follows fails.

Mutations run one at a time per manager (FIFO through an ``asyncio.Lock``).
Quantity merging itself is the store's job: ``add_item`` is an upsert that
increments on the ``(cart_id, product_id)`` unique key, so concurrent
writers from other processes converge as well.
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

import structlog

from catalogue.compiler import PRODUCTS
from catalogue.products import primary_image_urls
from ordering.cart.cart import CartAggregate, CartLine, ProductSnapshot
from ordering.cart.summary import CartSummary, summarize
from ordering.session import SessionStore, get_or_create_session_id
from storefront.errors import (
    DuplicateKeyError,
    InvalidProductError,
    NotInitializedError,
    StoreUnavailableError,
)
from storefront.store import BackingStore, Query
from storefront.trace import Identifier, TraceLog

logger = structlog.get_logger(__name__)

CARTS = "carts"
CART_LINES = "cart_lines"

CartListener = Callable[[CartAggregate], None]


class CartState(Enum):
    UNINITIALIZED = "Uninitialized"
    INITIALIZING = "Initializing"
    READY = "Ready"
    FAILED = "Failed"


class CartManager:
    def __init__(self, store: BackingStore, session_store: SessionStore, trace_log: TraceLog) -> None:
        self._store = store
        self._session_store = session_store
        self._trace_log = trace_log
        self._state = CartState.UNINITIALIZED
        self._cart: CartAggregate | None = None
        self._lock = asyncio.Lock()
        self._listeners: dict[int, CartListener] = {}
        self._next_token = 0

    # -------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------
    @property
    def state(self) -> CartState:
        return self._state

    @property
    def cart(self) -> CartAggregate:
        return self._require_ready()

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return self._cart.lines if self._cart is not None else ()

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0"))

    def summary(self, tax_rate: Decimal) -> CartSummary:
        return summarize(self._require_ready(), tax_rate)

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call ``listener`` with the fresh aggregate after every successful load."""
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    # -------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------
    async def initialize(self) -> CartAggregate:
        """Find or create the session's cart and load its lines."""
        async with self._lock:
            if self._state is CartState.READY and self._cart is not None:
                return self._cart

            self._state = CartState.INITIALIZING
            try:
                session_id = get_or_create_session_id(self._session_store)
                cart_row = await self._resolve_cart(session_id)
                cart = await self._load(cart_row["id"], session_id)
            except Exception as exc:
                self._state = CartState.FAILED
                logger.warning("Cart initialization failed", error=str(exc))
                raise

            self._state = CartState.READY
            self._publish(cart)
            logger.info("Cart ready", cart_id=cart.cart_id, lines=len(cart.lines))
            return cart

    async def _resolve_cart(self, session_id: str) -> dict:
        self._trace_log.log_action(
            "Initialize Cart",
            "SELECT * FROM carts WHERE session_id = '<session_id>'",
            {"session_id": Identifier(session_id)},
        )
        lookup = Query().filter(session_id=session_id)
        cart_row = await self._store.find_one(CARTS, lookup)
        if cart_row is not None:
            return cart_row

        self._trace_log.log_action(
            "Create Cart",
            "INSERT INTO carts (session_id) VALUES ('<session_id>')",
            {"session_id": Identifier(session_id)},
        )
        try:
            return await self._store.insert(CARTS, {"session_id": session_id, "created_at": datetime.now(UTC)})
        except DuplicateKeyError:
            # Another bootstrap created the cart first; adopt it
            logger.info("Cart created concurrently, adopting existing cart", session_id=session_id)
            cart_row = await self._store.find_one(CARTS, lookup)
            if cart_row is None:
                raise StoreUnavailableError(f"Cart for session {session_id} conflicted but cannot be found") from None
            return cart_row

    async def _load(self, cart_id: str, session_id: str) -> CartAggregate:
        self._trace_log.log_action(
            "View Cart",
            "SELECT cart_lines.*, products.*\n"
            "FROM cart_lines\n"
            "JOIN products ON cart_lines.product_id = products.product_id\n"
            "WHERE cart_id = '<cart_id>'",
            {"cart_id": Identifier(cart_id)},
        )
        rows = await self._store.find(CART_LINES, Query().filter(cart_id=cart_id).order_by("added_at"))
        product_ids = [row["product_id"] for row in rows]

        products = {}
        images = {}
        if product_ids:
            product_rows = await self._store.find(PRODUCTS, Query().filter(product_id__in=product_ids))
            products = {row["product_id"]: row for row in product_rows}
            images = await primary_image_urls(self._store, product_ids)

        lines = []
        for row in rows:
            product = products.get(row["product_id"])
            if product is None:
                logger.warning("Cart line references a missing product", line_id=row["id"], product_id=row["product_id"])
                continue
            lines.append(
                CartLine(
                    line_id=row["id"],
                    product_id=row["product_id"],
                    quantity=row["quantity"],
                    product=ProductSnapshot(
                        product_id=product["product_id"],
                        name=product["name"],
                        price=product["price"],
                        slug=product["slug"],
                        image_url=images.get(product["product_id"]),
                    ),
                )
            )

        return CartAggregate(cart_id=cart_id, session_id=session_id, lines=tuple(lines))

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    async def add_item(self, product_id: str) -> CartAggregate:
        """Add one unit of ``product_id``, merging into an existing line."""
        self._require_ready()
        if not isinstance(product_id, str) or not product_id.strip():
            raise InvalidProductError("A product id is required")

        async with self._lock:
            cart = self._require_ready()
            if await self._store.find_one(PRODUCTS, Query().filter(product_id=product_id)) is None:
                raise InvalidProductError(f"Unknown product: {product_id}")

            self._trace_log.log_action(
                "Add to Cart",
                "INSERT INTO cart_lines (cart_id, product_id, quantity)\n"
                "VALUES ('<cart_id>', '<product_id>', 1)\n"
                "ON CONFLICT (cart_id, product_id)\n"
                "DO UPDATE SET quantity = cart_lines.quantity + 1",
                {"cart_id": Identifier(cart.cart_id), "product_id": Identifier(product_id)},
            )
            await self._store.upsert(
                CART_LINES,
                {
                    "cart_id": cart.cart_id,
                    "product_id": product_id,
                    "quantity": 1,
                    "added_at": datetime.now(UTC),
                },
                conflict_on=("cart_id", "product_id"),
                increment="quantity",
            )
            logger.info("Item added to cart", cart_id=cart.cart_id, product_id=product_id)
            return await self._refresh(cart)

    async def set_quantity(self, line_id: str, quantity: int) -> CartAggregate:
        """Set a line's quantity; zero or less removes the line."""
        cart = self._require_ready()
        if cart.line(line_id) is None:
            logger.debug("Ignoring quantity change for unknown cart line", line_id=line_id)
            return cart
        if quantity <= 0:
            return await self.remove_item(line_id)

        async with self._lock:
            cart = self._require_ready()
            line = cart.line(line_id)
            if line is None:
                return cart

            self._trace_log.log_action(
                "Update Cart Quantity",
                "UPDATE cart_lines\n"
                "SET quantity = <new_quantity>\n"
                "WHERE cart_id = '<cart_id>' AND product_id = '<product_id>'",
                {
                    "cart_id": Identifier(cart.cart_id),
                    "product_id": Identifier(line.product_id),
                    "new_quantity": quantity,
                },
            )
            await self._store.update(CART_LINES, line_id, {"quantity": quantity})
            logger.info("Cart quantity updated", cart_id=cart.cart_id, line_id=line_id, quantity=quantity)
            return await self._refresh(cart)

    async def remove_item(self, line_id: str) -> CartAggregate:
        cart = self._require_ready()
        if cart.line(line_id) is None:
            logger.debug("Ignoring removal of unknown cart line", line_id=line_id)
            return cart

        async with self._lock:
            cart = self._require_ready()
            line = cart.line(line_id)
            if line is None:
                return cart

            self._trace_log.log_action(
                "Remove from Cart",
                "DELETE FROM cart_lines\nWHERE cart_id = '<cart_id>' AND product_id = '<product_id>'",
                {"cart_id": Identifier(cart.cart_id), "product_id": Identifier(line.product_id)},
            )
            await self._store.delete(CART_LINES, line_id)
            logger.info("Item removed from cart", cart_id=cart.cart_id, line_id=line_id)
            return await self._refresh(cart)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _require_ready(self) -> CartAggregate:
        if self._state is not CartState.READY or self._cart is None:
            raise NotInitializedError(f"Cart is not ready (state: {self._state.value})")
        return self._cart

    async def _refresh(self, cart: CartAggregate) -> CartAggregate:
        fresh = await self._load(cart.cart_id, cart.session_id)
        self._publish(fresh)
        return fresh

    def _publish(self, cart: CartAggregate) -> None:
        self._cart = cart
        for listener in list(self._listeners.values()):
            try:
                listener(cart)
            except Exception:
                logger.exception("Cart listener failed", listener=repr(listener))
