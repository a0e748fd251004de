from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from src.domain.exceptions import CustomerNotFoundError
from src.infrastructure.db.models import Customer
from src.infrastructure.repositories.customer_repository import CustomerRepository


@dataclass(frozen=True)
class VisitStats:
    customer_id: str
    total_visits: int
    games_played: int
    total_spent: Decimal
    total_orders: int
    average_order_value: Decimal


class CustomerService:

    def __init__(self, db: Session):
        self.db = db
        self.customer_repository = CustomerRepository(db)

    def get_profile(self, customer_id: str) -> Customer:
        customer = self.customer_repository.get_by_id(customer_id)
        if not customer:
            raise CustomerNotFoundError(customer_id)
        return customer

    def update_profile(
        self,
        customer_id: str,
        first_name: str,
        last_name: str,
        phone: str | None = None,
    ) -> Customer:
        customer = self.get_profile(customer_id)
        customer.first_name = first_name
        customer.last_name = last_name
        customer.phone = phone
        self.db.flush()
        return customer

    def visit_stats(self, customer_id: str) -> VisitStats:
        """Games played counts distinct titles lent against the customer's reservations."""
        customer = self.get_profile(customer_id)
        total_orders, total_spent = self.customer_repository.completed_order_totals(customer_id)

        average = Decimal("0.00")
        if total_orders:
            average = (total_spent / total_orders).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

        return VisitStats(
            customer_id=customer.id,
            total_visits=customer.total_visits,
            games_played=self.customer_repository.count_games_played(customer_id),
            total_spent=total_spent.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            total_orders=total_orders,
            average_order_value=average,
        )
