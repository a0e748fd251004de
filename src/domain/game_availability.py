# src/domain/game_availability.py

import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional


HOURLY_LATE_FEE = Decimal("2.00")
GRACE_PERIOD_MINUTES = 15


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _overdue_minutes(due_back_at: datetime, at: Optional[datetime]) -> float:
    at = _as_utc(at) if at is not None else datetime.now(timezone.utc)
    return (at - _as_utc(due_back_at)).total_seconds() / 60


class GameAvailability:
    """
    Copy counting and late-fee rules for lent games.

    A game is late once it is past due by more than the grace period;
    every started hour after the grace period costs HOURLY_LATE_FEE.
    """

    @classmethod
    def available_copies(cls, game) -> int:
        if game is None:
            raise ValueError("game is required")
        return max(0, game.copies_owned - game.copies_in_use)

    @classmethod
    def calculate_late_fee(cls, due_back_at: datetime, returned_at: Optional[datetime] = None) -> Decimal:
        overdue = _overdue_minutes(due_back_at, returned_at)
        if overdue <= GRACE_PERIOD_MINUTES:
            return Decimal("0.00")
        hours = math.ceil((overdue - GRACE_PERIOD_MINUTES) / 60)
        return HOURLY_LATE_FEE * hours

    @classmethod
    def is_overdue(cls, due_back_at: datetime, at: Optional[datetime] = None) -> bool:
        return _overdue_minutes(due_back_at, at) > GRACE_PERIOD_MINUTES
