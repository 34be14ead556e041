"""Tests for pricing configuration normalization."""

import pytest
from decimal import Decimal

from catalogit.domain.entities import (
    ComplimentaryConfig,
    DiscountedConfig,
    DynamicConfig,
    PriceWindow,
    PricingType,
    StaticConfig,
    Tier,
    TieredConfig,
)
from catalogit.domain.errors import InvalidConfigError, ValidationError
from catalogit.domain.price_config import (
    config_from_storage,
    config_to_payload,
    config_to_storage,
    normalize_config,
    parse_pricing_type,
)


class TestParsePricingType:
    """Tests for parse_pricing_type."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("STATIC", PricingType.STATIC),
            ("tiered", PricingType.TIERED),
            (" Dynamic ", PricingType.DYNAMIC),
            ("C", PricingType.COMPLIMENTARY),
            ("D", PricingType.DISCOUNTED),
            (PricingType.TIERED, PricingType.TIERED),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_pricing_type(value) == expected

    @pytest.mark.parametrize("value", ["F", "free", "", None, 3])
    def test_invalid(self, value):
        with pytest.raises(InvalidConfigError, match="Unknown pricing type"):
            parse_pricing_type(value)


class TestStatic:
    def test_empty(self):
        assert normalize_config("STATIC", None) == StaticConfig()

    def test_amount_kept(self):
        assert normalize_config("STATIC", {"amount": 99.999}) == StaticConfig(amount=Decimal("100.00"))

    def test_negative_base_price(self):
        with pytest.raises(InvalidConfigError, match="base_price"):
            normalize_config("STATIC", {}, base_price=-1)


class TestTiered:
    """Tests for TIERED normalization."""

    def test_sorted_with_unbounded_last(self):
        config = normalize_config(
            "TIERED",
            {"tiers": [{"upto": None, "price": 220}, {"upto": 10, "price": 240}, {"upto": 5, "price": 250}]},
        )
        assert config == TieredConfig(
            tiers=(
                Tier(5, Decimal("250.00")),
                Tier(10, Decimal("240.00")),
                Tier(None, Decimal("220.00")),
            )
        )

    def test_fractional_upto_kept(self):
        config = normalize_config(
            "TIERED", {"tiers": [{"upto": 4.8, "price": 10}, {"upto": 4.2, "price": 12}, {"upto": 2.0, "price": 15}]}
        )
        assert [t.upto for t in config.tiers] == [2, Decimal("4.2"), Decimal("4.8")]
        assert isinstance(config.tiers[0].upto, int)

    def test_fractional_upto_survives_storage(self):
        config = normalize_config("TIERED", {"tiers": [{"upto": 5.5, "price": 250}, {"upto": None, "price": 200}]})
        assert config_to_payload(config)["tiers"][0]["upto"] == "5.5"
        assert config_from_storage(config_to_storage(config)) == config

    def test_empty_tiers(self):
        with pytest.raises(InvalidConfigError, match="non-empty 'tiers'"):
            normalize_config("TIERED", {"tiers": []})

    def test_missing_price(self):
        with pytest.raises(InvalidConfigError, match="requires 'upto'"):
            normalize_config("TIERED", {"tiers": [{"upto": 1}]})

    def test_two_unbounded(self):
        with pytest.raises(InvalidConfigError, match="unbounded"):
            normalize_config("TIERED", {"tiers": [{"upto": None, "price": 1}, {"upto": None, "price": 2}]})

    def test_duplicate_limits(self):
        with pytest.raises(InvalidConfigError, match="strictly increasing"):
            normalize_config("TIERED", {"tiers": [{"upto": 3, "price": 1}, {"upto": 3, "price": 2}]})

    def test_bad_upto(self):
        with pytest.raises(InvalidConfigError, match="number or null"):
            normalize_config("TIERED", {"tiers": [{"upto": "five", "price": 1}]})

    def test_negative_price(self):
        with pytest.raises(InvalidConfigError, match=">= 0"):
            normalize_config("TIERED", {"tiers": [{"upto": 1, "price": -5}]})


class TestComplimentary:
    def test_empty(self):
        assert normalize_config("COMPLIMENTARY", {}) == ComplimentaryConfig()

    def test_rejects_fields(self):
        with pytest.raises(InvalidConfigError, match="takes no configuration"):
            normalize_config("COMPLIMENTARY", {"price": 0})


class TestDiscounted:
    """Tests for DISCOUNTED normalization."""

    def test_percentage(self):
        assert normalize_config("DISCOUNTED", {"val": 30, "is_perc": True}) == DiscountedConfig(
            val=Decimal("30.00"), is_perc=True
        )

    def test_flat(self):
        config = normalize_config("DISCOUNTED", {"val": "12.5", "is_perc": False})
        assert config.val == Decimal("12.50")
        assert config.is_perc is False

    def test_rejects_base(self):
        with pytest.raises(InvalidConfigError, match="must not include 'base'"):
            normalize_config("DISCOUNTED", {"base": 100, "val": 10, "is_perc": False})

    def test_requires_fields(self):
        with pytest.raises(InvalidConfigError, match="requires 'val' and 'is_perc'"):
            normalize_config("DISCOUNTED", {"val": 10})

    def test_is_perc_must_be_bool(self):
        with pytest.raises(InvalidConfigError, match="true or false"):
            normalize_config("DISCOUNTED", {"val": 10, "is_perc": "yes"})

    def test_percentage_over_100(self):
        with pytest.raises(InvalidConfigError, match="between 0 and 100"):
            normalize_config("DISCOUNTED", {"val": 120, "is_perc": True})

    def test_unexpected_fields(self):
        with pytest.raises(InvalidConfigError, match="unexpected fields"):
            normalize_config("DISCOUNTED", {"val": 10, "is_perc": False, "cap": 5})


class TestDynamic:
    """Tests for DYNAMIC normalization."""

    def test_sorted_by_start(self):
        config = normalize_config(
            "DYNAMIC",
            {
                "windows": [
                    {"start": "17:00", "end": "19:00", "price": 150},
                    {"start": "08:00", "end": "11:00", "price": 199},
                ]
            },
        )
        assert config == DynamicConfig(
            windows=(
                PriceWindow("08:00", "11:00", Decimal("199.00")),
                PriceWindow("17:00", "19:00", Decimal("150.00")),
            )
        )

    def test_touching_windows_allowed(self):
        config = normalize_config(
            "DYNAMIC",
            {
                "windows": [
                    {"start": "06:00", "end": "10:00", "price": 1},
                    {"start": "10:00", "end": "12:00", "price": 2},
                ]
            },
        )
        assert len(config.windows) == 2

    def test_overlapping_windows_rejected(self):
        with pytest.raises(InvalidConfigError, match="overlap"):
            normalize_config(
                "DYNAMIC",
                {
                    "windows": [
                        {"start": "08:00", "end": "11:00", "price": 1},
                        {"start": "10:30", "end": "12:00", "price": 2},
                    ]
                },
            )

    @pytest.mark.parametrize("start,end", [("8:00", "11:00"), ("08:00", "24:00"), ("11:00", "11:00"), ("12:00", "09:00")])
    def test_bad_times(self, start, end):
        with pytest.raises(InvalidConfigError):
            normalize_config("DYNAMIC", {"windows": [{"start": start, "end": end, "price": 1}]})

    def test_missing_windows(self):
        with pytest.raises(InvalidConfigError, match="non-empty 'windows'"):
            normalize_config("DYNAMIC", {})


def test_payload_must_be_object():
    with pytest.raises(InvalidConfigError, match="must be an object"):
        normalize_config("TIERED", [1, 2])


def test_invalid_config_is_validation_error():
    """Test that config errors can be caught as validation errors."""
    with pytest.raises(ValidationError):
        normalize_config("DYNAMIC", {"windows": "all day"})


def test_storage_form():
    """Test that storage keeps the type and money as strings."""
    config = DiscountedConfig(val=Decimal("30.00"), is_perc=True)
    assert config_to_storage(config) == {"type": "DISCOUNTED", "config": {"val": "30.00", "is_perc": True}}
    assert config_from_storage(config_to_storage(config)) == config
    assert config_from_storage(None) is None


def test_payload_of_tiered():
    config = TieredConfig(tiers=(Tier(5, Decimal("250.00")), Tier(None, Decimal("220.00"))))
    assert config_to_payload(config) == {
        "tiers": [{"upto": 5, "price": "250.00"}, {"upto": None, "price": "220.00"}]
    }
