# src/infrastructure/repositories/customer_repository.py

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import func, select

from src.domain.enums import LoyaltyTransactionType
from src.domain.state_machine import OrderStatus
from src.infrastructure.db.models import Customer, GameSession, LoyaltyPointsHistory, Order, Reservation


class CustomerRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, customer_id: str) -> Customer | None:
        stmt = select(Customer).where(Customer.id == customer_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def exists(self, customer_id: str) -> bool:
        stmt = select(Customer.id).where(Customer.id == customer_id)
        return self.db.execute(stmt).first() is not None

    def record_loyalty_change(
        self,
        customer: Customer,
        points_change: int,
        transaction_type: LoyaltyTransactionType,
        description: str,
        order_id: str | None = None,
    ) -> LoyaltyPointsHistory:
        entry = LoyaltyPointsHistory(
            customer_id=customer.id,
            order_id=order_id,
            points_change=points_change,
            transaction_type=transaction_type,
            description=description,
            transaction_date=datetime.now(timezone.utc),
        )
        self.db.add(entry)
        return entry

    def list_loyalty_history(self, customer_id: str) -> list[LoyaltyPointsHistory]:
        stmt = (
            select(LoyaltyPointsHistory)
            .where(LoyaltyPointsHistory.customer_id == customer_id)
            .order_by(LoyaltyPointsHistory.transaction_date.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_games_played(self, customer_id: str) -> int:
        stmt = (
            select(func.count(func.distinct(GameSession.game_id)))
            .select_from(GameSession)
            .join(Reservation, GameSession.reservation_id == Reservation.id)
            .where(Reservation.customer_id == customer_id)
        )
        return self.db.execute(stmt).scalar_one()

    def completed_order_totals(self, customer_id: str) -> tuple[int, Decimal]:
        stmt = (
            select(func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0))
            .where(Order.customer_id == customer_id)
            .where(Order.status == OrderStatus.COMPLETED)
        )
        count, total = self.db.execute(stmt).one()
        return count, Decimal(str(total))
