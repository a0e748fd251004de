import logging

from sqlalchemy.orm import Session

from src.domain.enums import LoyaltyTransactionType, PaymentMethod
from src.domain.exceptions import (
    CustomerNotFoundError,
    InvalidOrderOperationError,
    MenuItemNotFoundError,
    OrderItemNotFoundError,
    OrderNotFoundError,
)
from src.domain.order_calculator import OrderTotalCalculator, tier_for_points
from src.domain.state_machine import OrderStateMachine, OrderStatus
from src.infrastructure.db.models import Order
from src.infrastructure.repositories.customer_repository import CustomerRepository
from src.infrastructure.repositories.order_repository import OrderRepository


logger = logging.getLogger(__name__)


class OrderService:
    """Application service coordinating the order workflow."""

    def __init__(self, db: Session):
        self.db = db
        self.order_repository = OrderRepository(db)
        self.customer_repository = CustomerRepository(db)

    def create_order(self, customer_id: str, reservation_id: str | None = None) -> Order:
        if not self.customer_repository.exists(customer_id):
            raise CustomerNotFoundError(customer_id)

        order = self.order_repository.create_order(
            customer_id=customer_id,
            reservation_id=reservation_id,
        )
        self.db.flush()
        return self._load(order.id)

    def get_order(self, order_id: str) -> Order:
        return self._load(order_id)

    def add_item(
        self,
        order_id: str,
        menu_item_id: str,
        quantity: int,
        special_instructions: str | None = None,
    ) -> Order:
        order = self._load(order_id)
        self._ensure_draft(order)

        if quantity <= 0:
            raise InvalidOrderOperationError("Quantity must be greater than 0")

        menu_item = self.order_repository.get_menu_item(menu_item_id)
        if not menu_item:
            raise MenuItemNotFoundError(menu_item_id)
        if not menu_item.is_available:
            raise InvalidOrderOperationError(f"{menu_item.name} is not available")

        self.order_repository.add_item(
            order,
            menu_item=menu_item,
            quantity=quantity,
            special_instructions=special_instructions,
        )
        OrderTotalCalculator.calculate_order_totals(order)
        self.db.flush()
        return order

    def remove_item(self, order_id: str, item_id: str) -> Order:
        order = self._load(order_id)
        self._ensure_draft(order)

        item = next((item for item in order.items if item.id == item_id), None)
        if not item:
            raise OrderItemNotFoundError(item_id)

        order.items.remove(item)
        OrderTotalCalculator.calculate_order_totals(order)
        self.db.flush()
        return order

    def submit_order(self, order_id: str, loyalty_points_to_redeem: int = 0) -> Order:
        """
        Finalizes a draft order. Redeemed points leave the customer's
        balance here; earned points are only granted on payment.
        """
        if loyalty_points_to_redeem < 0:
            raise ValueError("Loyalty points cannot be negative")

        order = self._load(order_id)
        self._ensure_draft(order)

        if not order.items:
            raise InvalidOrderOperationError("Cannot submit an order with no items")

        customer = order.customer
        if loyalty_points_to_redeem > 0:
            if not OrderTotalCalculator.validate_loyalty_redemption(customer, loyalty_points_to_redeem):
                raise InvalidOrderOperationError(
                    f"Customer has {customer.loyalty_points} points, "
                    f"cannot redeem {loyalty_points_to_redeem}"
                )
            customer.loyalty_points -= loyalty_points_to_redeem
            self.customer_repository.record_loyalty_change(
                customer,
                points_change=-loyalty_points_to_redeem,
                transaction_type=LoyaltyTransactionType.REDEEMED,
                description=f"Redeemed {loyalty_points_to_redeem} points on order",
                order_id=order.id,
            )

        OrderTotalCalculator.calculate_order_totals(order, loyalty_points_to_redeem)
        order.loyalty_points_redeemed = loyalty_points_to_redeem
        self._transition(order, OrderStatus.SUBMITTED)
        self.db.flush()

        logger.info(
            "Order submitted. order_id=%s subtotal=%s discount=%s tax=%s total=%s",
            order.id,
            order.subtotal,
            order.discount_amount,
            order.tax_amount,
            order.total_amount,
        )
        return order

    def pay_order(self, order_id: str, payment_method: PaymentMethod) -> Order:
        """
        Records payment for a submitted order. The payment itself is
        handled outside this system; only the method and outcome are stored.
        """
        order = self._load(order_id)
        if order.status != OrderStatus.SUBMITTED:
            raise InvalidOrderOperationError("Order must be submitted before payment")

        customer = order.customer
        points_earned = OrderTotalCalculator.calculate_loyalty_points_earned(order.total_amount)
        if points_earned > 0:
            customer.loyalty_points += points_earned
            self.customer_repository.record_loyalty_change(
                customer,
                points_change=points_earned,
                transaction_type=LoyaltyTransactionType.EARNED,
                description=f"Earned {points_earned} points from order ({order.total_amount:.2f})",
                order_id=order.id,
            )
        customer.membership_tier = tier_for_points(customer.loyalty_points)

        order.payment_method = payment_method
        self._transition(order, OrderStatus.COMPLETED)
        self.db.flush()

        logger.info(
            "Order paid. order_id=%s method=%s points_earned=%s",
            order.id,
            payment_method.value,
            points_earned,
        )
        return order

    def cancel_order(self, order_id: str) -> Order:
        order = self._load(order_id)
        self._transition(order, OrderStatus.CANCELLED)

        if order.loyalty_points_redeemed > 0:
            customer = order.customer
            customer.loyalty_points += order.loyalty_points_redeemed
            self.customer_repository.record_loyalty_change(
                customer,
                points_change=order.loyalty_points_redeemed,
                transaction_type=LoyaltyTransactionType.ADJUSTMENT,
                description=f"Refunded {order.loyalty_points_redeemed} points from cancelled order",
                order_id=order.id,
            )
            order.loyalty_points_redeemed = 0

        self.db.flush()
        return order

    def _load(self, order_id: str) -> Order:
        order = self.order_repository.get_with_items(order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def _ensure_draft(order: Order) -> None:
        if order.status != OrderStatus.DRAFT:
            raise InvalidOrderOperationError("Order has already been submitted")

    def _transition(self, order: Order, to_status: OrderStatus) -> None:
        OrderStateMachine.validate_transition(order.status, to_status)
        self.order_repository.update_status(order, to_status)
