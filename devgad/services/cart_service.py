# devgad/services/cart_service.py
# Session-scoped shopping carts, kept in process memory only

import logging
import secrets
import threading
import time
from dataclasses import dataclass, asdict
from typing import Callable, Dict, List, Optional, Tuple

from devgad.core.config import settings
from devgad.schemas.product import Product

logger = logging.getLogger(__name__)


@dataclass
class CartLine:
    id: str
    name: str
    name_marathi: str
    price: int
    weight: str
    quantity: int = 1

    def to_dict(self) -> dict:
        return asdict(self)


class Cart:
    """Product id -> line; lines keep insertion order and never hold quantity < 1."""

    def __init__(self):
        self._lines: Dict[str, CartLine] = {}

    @property
    def items(self) -> List[CartLine]:
        return list(self._lines.values())

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def total_price(self) -> int:
        return sum(line.quantity * line.price for line in self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def add(self, product: Product) -> CartLine:
        line = self._lines.get(product.id)
        if line is not None:
            line.quantity += 1
            return line
        line = CartLine(
            id=product.id,
            name=product.name,
            name_marathi=product.name_marathi,
            price=product.price,
            weight=product.weight,
        )
        self._lines[product.id] = line
        return line

    def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def set_quantity(self, product_id: str, quantity: int) -> None:
        if quantity < 1:
            self.remove(product_id)
            return
        line = self._lines.get(product_id)
        if line is not None:
            line.quantity = quantity

    def clear(self) -> None:
        self._lines.clear()

    def to_dict(self) -> dict:
        return {
            "items": [line.to_dict() for line in self.items],
            "total_items": self.total_items,
            "total_price": self.total_price,
        }


class CartRegistry:
    """
    Carts by opaque id. A cart is registered on the first add, never on a
    read, and is dropped after sitting idle for ``idle_seconds``.
    """

    def __init__(self, idle_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._lock = threading.Lock()
        self._carts: Dict[str, Cart] = {}
        self._touched: Dict[str, float] = {}
        self._idle_seconds = idle_seconds if idle_seconds is not None else settings.CART_IDLE_MINUTES * 60
        self._clock = clock

    def get(self, cart_id: Optional[str]) -> Optional[Cart]:
        with self._lock:
            now = self._clock()
            self._expire_idle(now)
            if not cart_id or cart_id not in self._carts:
                return None
            self._touched[cart_id] = now
            return self._carts[cart_id]

    def get_or_create(self, cart_id: Optional[str]) -> Tuple[str, Cart]:
        with self._lock:
            now = self._clock()
            self._expire_idle(now)
            if not cart_id or cart_id not in self._carts:
                # ids are always minted here; unknown client ids are not adopted
                cart_id = secrets.token_urlsafe(16)
                self._carts[cart_id] = Cart()
            self._touched[cart_id] = now
            return cart_id, self._carts[cart_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._carts)

    def reset(self) -> None:
        with self._lock:
            self._carts.clear()
            self._touched.clear()

    def _expire_idle(self, now: float) -> None:
        stale = [cart_id for cart_id, touched in self._touched.items() if now - touched > self._idle_seconds]
        for cart_id in stale:
            del self._carts[cart_id]
            del self._touched[cart_id]
        if stale:
            logger.info(f"Dropped {len(stale)} idle carts")


cart_registry = CartRegistry()
