"""
Menu price lookup used when an order is created.
"""

from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import MenuItem
from shared.utils.exceptions import MenuItemNotFoundError


class MenuPriceOracle(ABC):
    """Read-only source of current menu prices."""

    @abstractmethod
    def price_of(self, menu_id: int) -> int:
        """Current unit price in cents. Raises MenuItemNotFoundError."""


class SqlMenuPriceOracle(MenuPriceOracle):
    """Reads prices of live menu items from the database."""

    def __init__(self, db: Session):
        self._db = db

    def price_of(self, menu_id: int) -> int:
        price = self._db.scalar(
            select(MenuItem.price_cents).where(
                MenuItem.id == menu_id,
                MenuItem.is_active.is_(True),
            )
        )
        if price is None:
            raise MenuItemNotFoundError(menu_id)
        return price
