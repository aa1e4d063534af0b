"""
Client Cart Store

Authoritative pre-checkout cart state for one shopper. The store is an
explicit object owned by the client shell: construct it once, call load()
on start, and every mutation saves the item list back to storage.

Failures (over-capacity quantities, unusable items) are reported as
CartNotice values to the notifier and never raised to the caller; public
mutators return True on success and False otherwise.
"""

import json
import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from ..core.config import settings
from ..errors import CapacityExceeded
from ..models.cart import CartItem, NewCartItem, PersistedCart, PersistedCartState
from ..models.checkout import CheckoutLine
from ..services.pricing import validate_cart_item
from .storage import CartStorage, MemoryStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartNotice:
    """Transient user-facing message about a cart operation"""
    level: str  # "success" or "error"
    message: str


def canonical_customizations(customizations: Optional[dict[str, Any]]) -> str:
    """Key-order independent form of a customization map; empty means none"""
    if not customizations:
        return ""
    return json.dumps(customizations, sort_keys=True, separators=(",", ":"), default=str)


def dedup_key(product_id: str, variant_id: Optional[str], customizations: Optional[dict]) -> tuple:
    return (product_id, variant_id, canonical_customizations(customizations))


def _log_notice(notice: CartNotice) -> None:
    if notice.level == "error":
        logger.warning(notice.message)
    else:
        logger.info(notice.message)


class CartStore:
    """Shopping cart state with local persistence"""

    def __init__(
        self,
        storage: Optional[CartStorage] = None,
        storage_key: str = settings.cart_storage_key,
        auto_close_delay: Optional[float] = settings.cart_auto_close_seconds,
        notify: Optional[Callable[[CartNotice], None]] = None,
    ):
        """
        Args:
            storage: Durable storage for the item list (in-memory if omitted)
            storage_key: Key the items are saved under
            auto_close_delay: Seconds the drawer stays open after an add; None disables
            notify: Receives a CartNotice for every user-visible outcome
        """
        self.storage = storage or MemoryStorage()
        self.storage_key = storage_key
        self.auto_close_delay = auto_close_delay
        self.notify = notify or _log_notice

        self._items: list[CartItem] = []
        self._is_open = False
        self._lock = threading.RLock()
        self._close_timer: Optional[threading.Timer] = None

    # ==================== State ====================

    @property
    def items(self) -> list[CartItem]:
        with self._lock:
            return list(self._items)

    @property
    def is_open(self) -> bool:
        return self._is_open

    # ==================== Persistence ====================

    def load(self) -> None:
        """Rehydrate items from storage; the drawer always starts closed"""
        with self._lock:
            self._is_open = False
            try:
                raw = self.storage.get_item(self.storage_key)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not read stored cart: {e}")
                raw = None

            if raw is None:
                self._items = []
                return

            try:
                self._items = PersistedCart.model_validate_json(raw).state.items
            except ValidationError as e:
                logger.warning(f"Discarding unreadable stored cart: {e.error_count()} errors")
                self._items = []

    def _persist(self) -> None:
        payload = PersistedCart(state=PersistedCartState(items=self._items))
        try:
            self.storage.set_item(self.storage_key, payload.model_dump_json(by_alias=True))
        except OSError as e:
            # Persistence is best-effort; in-memory state stays authoritative
            logger.warning(f"Failed to persist cart: {e}")

    # ==================== Mutations ====================

    def add_item(self, new_item: Union[NewCartItem, dict]) -> bool:
        """Add an item, merging it into an existing entry with the same dedup key"""
        if isinstance(new_item, dict):
            try:
                new_item = NewCartItem.model_validate(new_item)
            except ValidationError as e:
                self._emit("error", f"Invalid cart item: {e.error_count()} errors")
                return False

        problems = validate_cart_item(new_item.model_dump(exclude={"max_quantity"}))
        if problems:
            self._emit("error", "; ".join(problems))
            return False

        key = dedup_key(new_item.product_id, new_item.variant_id, new_item.customizations)

        with self._lock:
            index = next(
                (
                    i for i, item in enumerate(self._items)
                    if dedup_key(item.product_id, item.variant_id, item.customizations) == key
                ),
                None,
            )

            try:
                if index is not None:
                    existing = self._items[index]
                    new_quantity = existing.quantity + new_item.quantity
                    self._check_capacity(new_quantity, existing.max_quantity)
                    self._items[index] = existing.model_copy(update={"quantity": new_quantity})
                    message = "Updated quantity in cart"
                else:
                    self._check_capacity(new_item.quantity, new_item.max_quantity)
                    self._items.append(CartItem(**new_item.model_dump(), id=str(uuid.uuid4())))
                    message = f"{new_item.name} added to cart"
            except CapacityExceeded as e:
                self._emit("error", str(e))
                return False

            self._persist()

        self._emit("success", message)
        self.open_cart()
        self._schedule_auto_close()
        return True

    def remove_item(self, item_id: str) -> bool:
        """Remove an entry; unknown ids are ignored"""
        with self._lock:
            item = next((i for i in self._items if i.id == item_id), None)
            self._items = [i for i in self._items if i.id != item_id]
            self._persist()

        if item:
            self._emit("success", f"{item.name} removed from cart")
        return True

    def update_quantity(self, item_id: str, quantity: int) -> bool:
        """Set an entry's quantity; zero or less removes it"""
        if quantity <= 0:
            return self.remove_item(item_id)

        with self._lock:
            index = next((i for i, item in enumerate(self._items) if item.id == item_id), None)
            if index is None:
                return True

            item = self._items[index]
            try:
                self._check_capacity(quantity, item.max_quantity)
            except CapacityExceeded as e:
                self._emit("error", str(e))
                return False

            self._items[index] = item.model_copy(update={"quantity": quantity})
            self._persist()
        return True

    def clear_cart(self) -> None:
        with self._lock:
            self._items = []
            self._persist()
        self._emit("success", "Cart cleared")

    @staticmethod
    def _check_capacity(quantity: int, max_quantity: int) -> None:
        if quantity > max_quantity:
            raise CapacityExceeded(max_quantity)

    # ==================== Drawer visibility ====================

    def toggle_cart(self) -> None:
        with self._lock:
            self._is_open = not self._is_open

    def open_cart(self) -> None:
        with self._lock:
            self._is_open = True

    def close_cart(self) -> None:
        with self._lock:
            self._is_open = False

    def _schedule_auto_close(self) -> None:
        """Close the drawer a fixed delay after the most recent add"""
        if self.auto_close_delay is None:
            return
        with self._lock:
            if self._close_timer is not None:
                self._close_timer.cancel()
            self._close_timer = threading.Timer(self.auto_close_delay, self.close_cart)
            self._close_timer.daemon = True
            self._close_timer.start()

    def close(self) -> None:
        """Cancel pending timers; call when the owning shell shuts down"""
        with self._lock:
            if self._close_timer is not None:
                self._close_timer.cancel()
                self._close_timer = None

    # ==================== Derived values ====================

    def get_total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def get_total_price(self) -> float:
        return sum(item.price * item.quantity for item in self.items)

    def get_item_count(self, product_id: str, variant_id: Optional[str] = None) -> int:
        return sum(
            item.quantity for item in self.items
            if item.product_id == product_id and item.variant_id == variant_id
        )

    def has_item(self, product_id: str, variant_id: Optional[str] = None) -> bool:
        return any(
            item.product_id == product_id and item.variant_id == variant_id
            for item in self.items
        )

    def snapshot(self) -> list[CheckoutLine]:
        """Checkout lines for the current items"""
        return [
            CheckoutLine(
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                size=item.size,
                color=item.color,
                customizations=item.customizations,
            )
            for item in self.items
        ]

    def _emit(self, level: str, message: str) -> None:
        self.notify(CartNotice(level=level, message=message))
