"""Tests for the price resolution engine."""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from catalogit.domain.entities import PricingType, TaxSetting
from catalogit.domain.errors import InvalidConfigError
from catalogit.domain.price_config import normalize_config
from catalogit.domain.price_engine import PriceContext, resolve_price, select_tier
from catalogit.domain.tax import resolve_tax

NO_TAX = TaxSetting.none()
GST_18 = TaxSetting(True, Decimal("18.00"))

TIERS = {
    "tiers": [
        {"upto": 5, "price": 250},
        {"upto": 10, "price": 240},
        {"upto": None, "price": 220},
    ]
}


def at(hour, minute=0):
    return PriceContext(current_time=datetime(2024, 6, 3, hour, minute))


class TestStatic:
    def test_base_price_with_tax(self, make_item):
        result = resolve_price(make_item(base_price=Decimal("300")), GST_18)
        assert result.base_price == Decimal("300.00")
        assert result.discount == Decimal("0.00")
        assert result.tax_amount == Decimal("54.00")
        assert result.grand_total == Decimal("354.00")
        assert result.is_available is True
        assert result.applied_pricing_rule.pricing_type is PricingType.STATIC

    def test_amount_ignored(self, make_item):
        """Test that base_price is authoritative over a stored amount."""
        item = make_item(base_price=Decimal("80"), pricing_config=normalize_config("STATIC", {"amount": 999}))
        assert resolve_price(item, NO_TAX).base_price == Decimal("80.00")


class TestTiered:
    """Tests for tier selection."""

    @pytest.mark.parametrize(
        "usage,expected",
        [(Decimal("5"), "250.00"), (Decimal("5.01"), "240.00"), (Decimal("10"), "240.00"), (Decimal("100"), "220.00"), (Decimal("0"), "250.00")],
    )
    def test_usage_selects_tier(self, make_item, usage, expected):
        item = make_item(pricing_config=normalize_config("TIERED", TIERS))
        result = resolve_price(item, NO_TAX, PriceContext(usage_hours=usage))
        assert result.base_price == Decimal(expected)
        assert result.is_available is True

    def test_missing_usage_uses_last_tier(self, make_item):
        item = make_item(pricing_config=normalize_config("TIERED", TIERS))
        result = resolve_price(item, NO_TAX)
        assert result.base_price == Decimal("220.00")
        assert "unbounded" in result.applied_pricing_rule.describe()

    def test_usage_beyond_bounded_tiers_uses_last(self, make_item):
        config = normalize_config("TIERED", {"tiers": [{"upto": 1, "price": 300}, {"upto": 2, "price": 500}]})
        result = resolve_price(make_item(pricing_config=config), NO_TAX, PriceContext(usage_hours=Decimal("7")))
        assert result.base_price == Decimal("500.00")

    def test_fractional_upto(self, make_item):
        config = normalize_config("TIERED", {"tiers": [{"upto": 5.5, "price": 250}, {"upto": None, "price": 200}]})
        item = make_item(pricing_config=config)
        inside = resolve_price(item, NO_TAX, PriceContext(usage_hours=Decimal("5.3")))
        beyond = resolve_price(item, NO_TAX, PriceContext(usage_hours=Decimal("5.6")))
        assert inside.base_price == Decimal("250.00")
        assert inside.applied_pricing_rule.describe() == "TIERED (upto 5.5h)"
        assert beyond.base_price == Decimal("200.00")

    def test_select_tier_empty(self):
        assert select_tier((), Decimal("1")) is None

    def test_missing_config_is_unavailable(self, make_item):
        """Test that a TIERED item without tiers degrades instead of raising."""
        result = resolve_price(make_item(pricing_type=PricingType.TIERED), GST_18)
        assert result.is_available is False
        assert result.grand_total == Decimal("0.00")


class TestComplimentary:
    def test_always_free_and_available(self, make_item):
        item = make_item(base_price=Decimal("999"), pricing_config=normalize_config("COMPLIMENTARY", {}))
        for context in (at(3), at(12), PriceContext(usage_hours=Decimal("40"))):
            result = resolve_price(item, GST_18, context)
            assert result.base_price == Decimal("0.00")
            assert result.tax_amount == Decimal("0.00")
            assert result.grand_total == Decimal("0.00")
            assert result.is_available is True


class TestDiscounted:
    """Tests for discounts."""

    def test_percentage_with_tax(self, make_item):
        """Test base 500, 30% off, 18% tax."""
        item = make_item(base_price=Decimal("500"), pricing_config=normalize_config("DISCOUNTED", {"val": 30, "is_perc": True}))
        result = resolve_price(item, GST_18)
        assert result.base_price == Decimal("500.00")
        assert result.discount == Decimal("150.00")
        assert result.tax_percentage == Decimal("18.00")
        assert result.tax_amount == Decimal("63.00")
        assert result.grand_total == Decimal("413.00")

    def test_flat_discount_clamped_to_base(self, make_item):
        """Test that a flat discount larger than the base never goes negative."""
        item = make_item(base_price=Decimal("100"), pricing_config=normalize_config("DISCOUNTED", {"val": 150, "is_perc": False}))
        result = resolve_price(item, GST_18)
        assert result.discount == Decimal("100.00")
        assert result.base_price - result.discount == Decimal("0.00")
        assert result.tax_amount == Decimal("0.00")
        assert result.grand_total == Decimal("0.00")

    def test_rounding_of_percentage(self, make_item):
        item = make_item(base_price=Decimal("99.99"), pricing_config=normalize_config("DISCOUNTED", {"val": 15, "is_perc": True}))
        result = resolve_price(item, NO_TAX)
        # 99.99 * 0.15 = 14.9985
        assert result.discount == Decimal("15.00")
        assert result.grand_total == Decimal("84.99")


class TestDynamic:
    """Tests for time-of-day pricing."""

    WINDOWS = {"windows": [{"start": "08:00", "end": "11:00", "price": 199}]}

    def test_inside_window(self, make_item):
        item = make_item(pricing_config=normalize_config("DYNAMIC", self.WINDOWS))
        result = resolve_price(item, NO_TAX, at(10, 59))
        assert result.base_price == Decimal("199.00")
        assert result.is_available is True
        assert result.applied_pricing_rule.describe() == "DYNAMIC (08:00-11:00)"

    def test_end_boundary_unavailable(self, make_item):
        item = make_item(pricing_config=normalize_config("DYNAMIC", self.WINDOWS))
        result = resolve_price(item, GST_18, at(11, 0))
        assert result.is_available is False
        assert result.base_price == Decimal("0.00")
        assert result.grand_total == Decimal("0.00")

    def test_start_boundary_matches(self, make_item):
        item = make_item(pricing_config=normalize_config("DYNAMIC", self.WINDOWS))
        assert resolve_price(item, NO_TAX, at(8, 0)).is_available is True

    def test_aware_time_read_in_utc(self, make_item):
        item = make_item(pricing_config=normalize_config("DYNAMIC", self.WINDOWS))
        ist = timezone(timedelta(hours=5, minutes=30))
        # 14:00 at +05:30 is 08:30 UTC
        inside = PriceContext(current_time=datetime(2024, 6, 3, 14, 0, tzinfo=ist))
        assert resolve_price(item, NO_TAX, inside).base_price == Decimal("199.00")
        # 10:00 at +05:30 is 04:30 UTC
        outside = PriceContext(current_time=datetime(2024, 6, 3, 10, 0, tzinfo=ist))
        assert resolve_price(item, NO_TAX, outside).is_available is False

    def test_overlapping_windows_rejected_before_pricing(self):
        with pytest.raises(InvalidConfigError):
            normalize_config(
                "DYNAMIC",
                {
                    "windows": [
                        {"start": "08:00", "end": "11:00", "price": 199},
                        {"start": "10:00", "end": "12:00", "price": 150},
                    ]
                },
            )


def test_tax_follows_category_change(make_item, make_subcategory, make_category):
    """Test an inheriting item picking up 18% and then 12% from its category."""
    item = make_item(subcategory_id=1, base_price=Decimal("100"))
    sub = make_subcategory()

    before = resolve_price(item, resolve_tax(item, sub, make_category(tax_percentage=Decimal("18"))))
    after = resolve_price(item, resolve_tax(item, sub, make_category(tax_percentage=Decimal("12"))))

    assert before.tax_percentage == Decimal("18.00")
    assert before.grand_total == Decimal("118.00")
    assert after.tax_percentage == Decimal("12.00")
    assert after.grand_total == Decimal("112.00")


def test_untaxed_reports_zero_percentage(make_item):
    result = resolve_price(make_item(), TaxSetting(False, Decimal("0")))
    assert result.tax_percentage == Decimal("0.00")
    assert result.tax_amount == Decimal("0.00")


@pytest.mark.parametrize("base", ["0.005", "1.005", "2.675", "33.333", "1234.565"])
def test_money_outputs_are_rounded_once(make_item, base):
    """Test that every money field is already at cent precision."""
    item = make_item(
        base_price=Decimal(base),
        pricing_config=normalize_config("DISCOUNTED", {"val": 7.5, "is_perc": True}),
    )
    result = resolve_price(item, TaxSetting(True, Decimal("17.50")))
    for value in (result.base_price, result.discount, result.tax_amount, result.grand_total):
        assert value == value.quantize(Decimal("0.01"))
