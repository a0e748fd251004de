# src/infrastructure/repositories/menu_repository.py

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import String, cast, func, select

from src.domain.enums import MenuCategory
from src.infrastructure.db.models import MenuItem


@dataclass(frozen=True)
class MenuFilter:
    category: MenuCategory | None = None
    is_vegetarian: bool | None = None
    is_vegan: bool | None = None
    is_gluten_free: bool | None = None
    available_only: bool = False
    min_price: Decimal | None = None
    max_price: Decimal | None = None


class MenuRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, menu_item_id: str) -> MenuItem | None:
        stmt = select(MenuItem).where(MenuItem.id == menu_item_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def find_by_name(self, name: str, exclude_id: str | None = None) -> MenuItem | None:
        stmt = select(MenuItem).where(func.lower(MenuItem.name) == name.lower())
        if exclude_id:
            stmt = stmt.where(MenuItem.id != exclude_id)
        return self.db.execute(stmt).scalars().first()

    def list_items(self, filters: MenuFilter) -> list[MenuItem]:
        stmt = select(MenuItem)
        if filters.category:
            stmt = stmt.where(MenuItem.category == filters.category)
        if filters.is_vegetarian is not None:
            stmt = stmt.where(MenuItem.is_vegetarian.is_(filters.is_vegetarian))
        if filters.is_vegan is not None:
            stmt = stmt.where(MenuItem.is_vegan.is_(filters.is_vegan))
        if filters.is_gluten_free is not None:
            stmt = stmt.where(MenuItem.is_gluten_free.is_(filters.is_gluten_free))
        if filters.available_only:
            stmt = stmt.where(MenuItem.is_available.is_(True))
        if filters.min_price is not None:
            stmt = stmt.where(MenuItem.price >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(MenuItem.price <= filters.max_price)

        # by category name; a native Postgres enum would otherwise sort by declaration order
        stmt = stmt.order_by(cast(MenuItem.category, String), MenuItem.name)
        return list(self.db.execute(stmt).scalars().all())

    def add(self, item: MenuItem) -> MenuItem:
        self.db.add(item)
        return item
