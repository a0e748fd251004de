# src/infrastructure/repositories/order_repository.py

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select

from src.domain.state_machine import OrderStatus
from src.infrastructure.db.models import MenuItem, Order, OrderItem


class OrderRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_with_items(self, order_id: str) -> Order | None:
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .options(
                selectinload(Order.customer),
                selectinload(Order.items).selectinload(OrderItem.menu_item),
            )
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_menu_item(self, menu_item_id: str) -> MenuItem | None:
        stmt = select(MenuItem).where(MenuItem.id == menu_item_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_order(self, customer_id: str, reservation_id: str | None = None) -> Order:
        order = Order(
            customer_id=customer_id,
            reservation_id=reservation_id,
            status=OrderStatus.DRAFT,
        )
        self.db.add(order)
        return order

    def update_status(self, order: Order, new_status: OrderStatus) -> None:
        order.status = new_status

    def add_item(
        self,
        order: Order,
        menu_item: MenuItem,
        quantity: int,
        special_instructions: str | None = None,
    ) -> OrderItem:
        # Price is captured at order time; later menu changes do not reprice the order.
        item = OrderItem(
            menu_item=menu_item,
            quantity=quantity,
            unit_price=menu_item.price,
            special_instructions=special_instructions,
        )
        order.items.append(item)
        return item
