# src/domain/enums.py

from enum import Enum


class MembershipTier(str, Enum):
    NONE = "NONE"
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"


class MenuCategory(str, Enum):
    COFFEE = "COFFEE"
    TEA = "TEA"
    SNACKS = "SNACKS"
    MEALS = "MEALS"
    DESSERTS = "DESSERTS"
    ALCOHOL = "ALCOHOL"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    LOYALTY_POINTS = "LOYALTY_POINTS"


class EventType(str, Enum):
    TOURNAMENT = "TOURNAMENT"
    GAME_NIGHT = "GAME_NIGHT"
    WORKSHOP = "WORKSHOP"
    RELEASE = "RELEASE"


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class LoyaltyTransactionType(str, Enum):
    EARNED = "EARNED"
    REDEEMED = "REDEEMED"
    ADJUSTMENT = "ADJUSTMENT"


class GameCategory(str, Enum):
    STRATEGY = "STRATEGY"
    PARTY = "PARTY"
    FAMILY = "FAMILY"
    COOPERATIVE = "COOPERATIVE"
    ABSTRACT = "ABSTRACT"


class GameCondition(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    DAMAGED = "DAMAGED"
