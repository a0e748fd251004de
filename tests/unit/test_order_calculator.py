# tests/unit/test_order_calculator.py

from decimal import Decimal

import pytest

from src.domain.enums import MembershipTier, MenuCategory
from src.domain.order_calculator import OrderTotalCalculator, tier_for_points, tier_progress
from src.infrastructure.db.models import Customer, MenuItem, Order, OrderItem


def _item(category: MenuCategory, unit_price: str, quantity: int = 1) -> OrderItem:
    return OrderItem(
        menu_item=MenuItem(name=category.value, category=category, price=Decimal(unit_price)),
        quantity=quantity,
        unit_price=Decimal(unit_price),
    )


def _order(tier: MembershipTier, *items: OrderItem) -> Order:
    customer = Customer(email="calc@example.com", membership_tier=tier, loyalty_points=0)
    return Order(customer=customer, items=list(items))


def test_silver_member_with_alcohol_and_points():
    order = _order(
        MembershipTier.SILVER,
        _item(MenuCategory.SNACKS, "10.00", quantity=2),
        _item(MenuCategory.ALCOHOL, "6.50"),
    )

    OrderTotalCalculator.calculate_order_totals(order, loyalty_points_to_redeem=100)

    assert order.subtotal == Decimal("26.50")
    assert order.discount_amount == Decimal("3.65")
    # tax is taken before the discount
    assert order.tax_amount == Decimal("2.25")
    assert order.total_amount == Decimal("25.10")


def test_non_member_pays_tax_only():
    order = _order(MembershipTier.NONE, _item(MenuCategory.MEALS, "14.00"))

    OrderTotalCalculator.calculate_order_totals(order)

    assert order.discount_amount == Decimal("0.00")
    assert order.tax_amount == Decimal("1.12")
    assert order.total_amount == Decimal("15.12")


def test_total_never_goes_negative():
    order = _order(MembershipTier.NONE, _item(MenuCategory.SNACKS, "5.00"))

    OrderTotalCalculator.calculate_order_totals(order, loyalty_points_to_redeem=1000)

    assert order.total_amount == Decimal("0")
    assert order.discount_amount == Decimal("5.40")
    assert order.subtotal - order.discount_amount + order.tax_amount == order.total_amount


def test_amounts_round_half_up_to_cents():
    order = _order(MembershipTier.BRONZE, _item(MenuCategory.COFFEE, "0.90"))

    OrderTotalCalculator.calculate_order_totals(order)

    assert order.discount_amount == Decimal("0.05")
    assert order.tax_amount == Decimal("0.07")
    assert order.total_amount == Decimal("0.92")


def test_empty_order_totals_are_zero():
    order = Order(items=[])

    OrderTotalCalculator.calculate_order_totals(order)

    assert order.subtotal == Decimal("0")
    assert order.total_amount == Decimal("0")


def test_line_without_menu_item_is_taxed_as_food():
    order = _order(MembershipTier.NONE, OrderItem(quantity=1, unit_price=Decimal("10.00")))

    OrderTotalCalculator.calculate_order_totals(order)

    assert order.tax_amount == Decimal("0.80")


def test_loyalty_discount_and_earning():
    assert OrderTotalCalculator.calculate_loyalty_discount(250) == Decimal("2.50")
    assert OrderTotalCalculator.calculate_loyalty_points_earned(Decimal("25.99")) == 25
    assert OrderTotalCalculator.calculate_loyalty_points_earned(Decimal("-1")) == 0

    with pytest.raises(ValueError):
        OrderTotalCalculator.calculate_loyalty_discount(-1)


def test_redemption_limited_by_balance():
    customer = Customer(loyalty_points=300)

    assert OrderTotalCalculator.validate_loyalty_redemption(customer, 300)
    assert not OrderTotalCalculator.validate_loyalty_redemption(customer, 301)
    assert not OrderTotalCalculator.validate_loyalty_redemption(customer, -5)


@pytest.mark.parametrize(
    "points, tier",
    [
        (0, MembershipTier.NONE),
        (1, MembershipTier.BRONZE),
        (499, MembershipTier.BRONZE),
        (500, MembershipTier.SILVER),
        (2000, MembershipTier.GOLD),
    ],
)
def test_tier_for_points(points, tier):
    assert tier_for_points(points) == tier


def test_tier_progress_reports_distance_to_next_tier():
    progress = tier_progress(650)

    assert progress.tier == MembershipTier.SILVER
    assert progress.next_tier == MembershipTier.GOLD
    assert progress.points_to_next_tier == 1350

    assert tier_progress(2400).next_tier is None


@pytest.mark.parametrize("points", [0, 150])
@pytest.mark.parametrize("tier", list(MembershipTier))
def test_recalculating_gives_the_same_totals(tier, points):
    order = _order(
        tier,
        _item(MenuCategory.MEALS, "12.40", quantity=3),
        _item(MenuCategory.ALCOHOL, "7.25"),
    )

    OrderTotalCalculator.calculate_order_totals(order, loyalty_points_to_redeem=points)
    first = (order.subtotal, order.discount_amount, order.tax_amount, order.total_amount)
    OrderTotalCalculator.calculate_order_totals(order, loyalty_points_to_redeem=points)

    assert (order.subtotal, order.discount_amount, order.tax_amount, order.total_amount) == first


@pytest.mark.parametrize("points", [0, 100, 2500])
@pytest.mark.parametrize("tier", list(MembershipTier))
def test_tax_ignores_tier_and_points(tier, points):
    order = _order(
        tier,
        _item(MenuCategory.SNACKS, "20.00"),
        _item(MenuCategory.ALCOHOL, "10.00"),
    )

    OrderTotalCalculator.calculate_order_totals(order, loyalty_points_to_redeem=points)

    assert order.tax_amount == Decimal("2.60")


def test_silver_member_discount_stacks_with_points():
    order = _order(MembershipTier.SILVER, _item(MenuCategory.MEALS, "100.00"))

    OrderTotalCalculator.calculate_order_totals(order, loyalty_points_to_redeem=300)

    assert order.discount_amount == Decimal("13.00")
    assert order.tax_amount == Decimal("8.00")
    assert order.total_amount == Decimal("95.00")


@pytest.mark.parametrize(
    "tier, rate",
    [
        (MembershipTier.NONE, Decimal("0")),
        (MembershipTier.BRONZE, Decimal("0.05")),
        (MembershipTier.SILVER, Decimal("0.10")),
        (MembershipTier.GOLD, Decimal("0.15")),
        (None, Decimal("0")),
    ],
)
def test_member_discount_rate(tier, rate):
    assert OrderTotalCalculator.member_discount_rate(tier) == rate


@pytest.mark.parametrize(
    "points, discount",
    [
        (0, Decimal("0.00")),
        (100, Decimal("1.00")),
        (1000, Decimal("10.00")),
    ],
)
def test_loyalty_points_convert_at_one_cent(points, discount):
    assert OrderTotalCalculator.calculate_loyalty_discount(points) == discount


@pytest.mark.parametrize(
    "total, points",
    [
        (Decimal("50.99"), 50),
        (Decimal("0.99"), 0),
        (Decimal("100"), 100),
    ],
)
def test_points_earned_round_down(total, points):
    assert OrderTotalCalculator.calculate_loyalty_points_earned(total) == points


def test_huge_redemption_floors_total_at_zero():
    order = _order(MembershipTier.NONE, _item(MenuCategory.SNACKS, "5.00"))

    OrderTotalCalculator.calculate_order_totals(order, loyalty_points_to_redeem=10000)

    assert order.total_amount == Decimal("0")
    assert order.discount_amount == order.subtotal + order.tax_amount
