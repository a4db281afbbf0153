"""
Seed data for development and testing.
Creates a small dining room and menu so the API is usable right after startup.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import MenuItem, Table
from shared.config.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Seed data
# =============================================================================

DEFAULT_TABLE_COUNT = 8

# (name, price in cents)
DEFAULT_MENU = [
    ("Empanada de carne", 1200),
    ("Provoleta", 2800),
    ("Bife de chorizo", 9500),
    ("Milanesa napolitana", 7800),
    ("Ravioles de ricota", 6400),
    ("Ensalada mixta", 3200),
    ("Flan con dulce de leche", 2600),
    ("Agua mineral", 900),
    ("Copa de malbec", 2200),
    ("Cafe", 800),
]


def seed_tables(db: Session, count: int = DEFAULT_TABLE_COUNT) -> int:
    """Create tables T1..Tn when the dining room is empty. Returns rows added."""
    if db.scalar(select(Table.id).limit(1)):
        logger.info("Tables already seeded, skipping")
        return 0
    db.add_all(Table(name=f"T{number}") for number in range(1, count + 1))
    return count


def seed_menu(db: Session) -> int:
    """Create the default menu when it is empty. Returns rows added."""
    if db.scalar(select(MenuItem.id).limit(1)):
        logger.info("Menu already seeded, skipping")
        return 0
    db.add_all(MenuItem(name=name, price_cents=price) for name, price in DEFAULT_MENU)
    return len(DEFAULT_MENU)


def seed(db: Session) -> None:
    """
    Seed tables and menu.
    Idempotent: each part only inserts when its table is empty.
    """
    tables = seed_tables(db)
    menu_items = seed_menu(db)
    db.commit()
    if tables or menu_items:
        logger.info("Seed complete", tables=tables, menu_items=menu_items)
