import logging

from sqlalchemy.orm import Session

from src.domain.exceptions import DuplicateMenuItemError, MenuItemNotFoundError
from src.infrastructure.db.models import MenuItem
from src.infrastructure.repositories.menu_repository import MenuFilter, MenuRepository


logger = logging.getLogger(__name__)


class MenuService:
    """
    Menu maintenance. Items are never hard-deleted because order lines
    keep pointing at them; deleting only marks them unavailable.
    """

    def __init__(self, db: Session):
        self.db = db
        self.menu_repository = MenuRepository(db)

    def list_items(self, filters: MenuFilter) -> list[MenuItem]:
        return self.menu_repository.list_items(filters)

    def get_item(self, menu_item_id: str) -> MenuItem:
        item = self.menu_repository.get_by_id(menu_item_id)
        if not item:
            raise MenuItemNotFoundError(menu_item_id)
        return item

    def create_item(self, **fields) -> MenuItem:
        if self.menu_repository.find_by_name(fields["name"]):
            raise DuplicateMenuItemError(f"A menu item named '{fields['name']}' already exists")

        item = self.menu_repository.add(MenuItem(**fields))
        self.db.flush()

        logger.info("Menu item created. menu_item_id=%s name=%s", item.id, item.name)
        return item

    def update_item(self, menu_item_id: str, **fields) -> MenuItem:
        item = self.get_item(menu_item_id)
        if self.menu_repository.find_by_name(fields["name"], exclude_id=item.id):
            raise DuplicateMenuItemError(f"Another menu item named '{fields['name']}' already exists")

        for name, value in fields.items():
            setattr(item, name, value)
        self.db.flush()
        return item

    def retire_item(self, menu_item_id: str) -> MenuItem:
        item = self.get_item(menu_item_id)
        item.is_available = False
        self.db.flush()

        logger.info("Menu item marked unavailable. menu_item_id=%s", item.id)
        return item
