# src/domain/order_calculator.py

from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Dict, Optional

from src.domain.enums import MembershipTier, MenuCategory


CENTS = Decimal("0.01")

LOYALTY_POINT_VALUE = Decimal("0.01")  # 100 points = 1.00
FOOD_TAX_RATE = Decimal("0.08")
ALCOHOL_TAX_RATE = Decimal("0.10")

MEMBER_DISCOUNT_RATES: Dict[MembershipTier, Decimal] = {
    MembershipTier.NONE: Decimal("0"),
    MembershipTier.BRONZE: Decimal("0.05"),
    MembershipTier.SILVER: Decimal("0.10"),
    MembershipTier.GOLD: Decimal("0.15"),
}

SILVER_THRESHOLD = 500
GOLD_THRESHOLD = 2000


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TierProgress:
    tier: MembershipTier
    discount_rate: Decimal
    threshold: int
    next_tier: Optional[MembershipTier]
    next_tier_threshold: Optional[int]
    points_to_next_tier: Optional[int]


class OrderTotalCalculator:
    """
    Derives the monetary fields of an order from its line items and the
    customer's membership and loyalty status.

    Deterministic and side-effect free apart from writing the four money
    fields onto the order it is given.
    """

    @classmethod
    def calculate_order_totals(cls, order, loyalty_points_to_redeem: int = 0) -> None:
        """
        Recomputes subtotal, discount, tax and total wholesale.

        Calculation order:
        1. subtotal = sum of quantity * unit_price
        2. member discount = subtotal * tier rate
        3. loyalty discount = points * 0.01
        4. discount = member discount + loyalty discount
        5. tax on the original item prices, before any discount
        6. total = subtotal - discount + tax
        7. a negative total shrinks the discount until total is 0

        Tax is taken on undiscounted prices for tax reporting.
        """
        subtotal = sum(
            (_to_decimal(item.quantity) * _to_decimal(item.unit_price) for item in order.items),
            Decimal("0"),
        )

        customer = order.customer
        tier = customer.membership_tier if customer is not None else MembershipTier.NONE
        member_discount = subtotal * cls.member_discount_rate(tier)
        loyalty_discount = cls.calculate_loyalty_discount(loyalty_points_to_redeem)

        discount = _to_cents(member_discount + loyalty_discount)
        tax = _to_cents(
            sum(
                (
                    _to_decimal(item.quantity)
                    * _to_decimal(item.unit_price)
                    * cls.category_tax_rate(cls._item_category(item))
                    for item in order.items
                ),
                Decimal("0"),
            )
        )
        subtotal = _to_cents(subtotal)
        total = subtotal - discount + tax

        if total < 0:
            discount -= abs(total)
            total = subtotal - discount + tax

        order.subtotal = subtotal
        order.discount_amount = discount
        order.tax_amount = tax
        order.total_amount = total

    @classmethod
    def calculate_loyalty_discount(cls, loyalty_points: int) -> Decimal:
        if loyalty_points < 0:
            raise ValueError("Loyalty points cannot be negative")

        return loyalty_points * LOYALTY_POINT_VALUE

    @classmethod
    def calculate_loyalty_points_earned(cls, total_amount) -> int:
        """
        One point per whole currency unit spent, rounded down.
        """
        total_amount = _to_decimal(total_amount)
        if total_amount < 0:
            return 0

        return int(total_amount.to_integral_value(rounding=ROUND_FLOOR))

    @classmethod
    def validate_loyalty_redemption(cls, customer, points_to_redeem: int) -> bool:
        if points_to_redeem < 0:
            return False

        return customer.loyalty_points >= points_to_redeem

    @classmethod
    def member_discount_rate(cls, tier: Optional[MembershipTier]) -> Decimal:
        if tier is None:
            return MEMBER_DISCOUNT_RATES[MembershipTier.NONE]
        return MEMBER_DISCOUNT_RATES.get(tier, MEMBER_DISCOUNT_RATES[MembershipTier.NONE])

    @classmethod
    def category_tax_rate(cls, category: Optional[MenuCategory]) -> Decimal:
        if category == MenuCategory.ALCOHOL:
            return ALCOHOL_TAX_RATE
        return FOOD_TAX_RATE

    @staticmethod
    def _item_category(item) -> Optional[MenuCategory]:
        menu_item = getattr(item, "menu_item", None)
        if menu_item is None:
            return None
        return menu_item.category


def tier_for_points(points: int) -> MembershipTier:
    return tier_progress(points).tier


def tier_progress(points: int) -> TierProgress:
    """
    Membership tier earned by a loyalty balance, plus the distance to the next one.
    """
    if points >= GOLD_THRESHOLD:
        return TierProgress(
            tier=MembershipTier.GOLD,
            discount_rate=MEMBER_DISCOUNT_RATES[MembershipTier.GOLD],
            threshold=GOLD_THRESHOLD,
            next_tier=None,
            next_tier_threshold=None,
            points_to_next_tier=None,
        )
    if points >= SILVER_THRESHOLD:
        return TierProgress(
            tier=MembershipTier.SILVER,
            discount_rate=MEMBER_DISCOUNT_RATES[MembershipTier.SILVER],
            threshold=SILVER_THRESHOLD,
            next_tier=MembershipTier.GOLD,
            next_tier_threshold=GOLD_THRESHOLD,
            points_to_next_tier=GOLD_THRESHOLD - points,
        )
    if points > 0:
        return TierProgress(
            tier=MembershipTier.BRONZE,
            discount_rate=MEMBER_DISCOUNT_RATES[MembershipTier.BRONZE],
            threshold=0,
            next_tier=MembershipTier.SILVER,
            next_tier_threshold=SILVER_THRESHOLD,
            points_to_next_tier=SILVER_THRESHOLD - points,
        )
    return TierProgress(
        tier=MembershipTier.NONE,
        discount_rate=MEMBER_DISCOUNT_RATES[MembershipTier.NONE],
        threshold=0,
        next_tier=MembershipTier.BRONZE,
        next_tier_threshold=1,
        points_to_next_tier=1 - points,
    )
