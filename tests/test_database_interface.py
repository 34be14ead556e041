"""Tests for Database interface returning domain models."""

import pytest
from datetime import datetime
from decimal import Decimal

from catalogit.database.factories import create_sqlite_database
from catalogit.domain import entities
from catalogit.domain.entities import BookingStatus, PricingType, TimeWindow
from catalogit.domain.errors import NotFoundError
from catalogit.domain.price_config import normalize_config


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_category_returns_domain_model(self, temp_db):
        """Test that get_category returns a domain Category entity."""
        category_id = temp_db.create_category(
            name="Pizza", tax_applicable=True, tax_percentage=Decimal("18")
        )

        category = temp_db.get_category(category_id)

        assert isinstance(category, entities.Category)
        assert category.id == category_id
        assert category.name == "Pizza"
        assert category.tax_percentage == Decimal("18.00")
        assert isinstance(category.created_at, datetime)

    def test_get_missing_returns_none(self, temp_db):
        assert temp_db.get_category(1) is None
        assert temp_db.get_subcategory(1) is None
        assert temp_db.get_item(1) is None
        assert temp_db.get_addon(1) is None
        assert temp_db.get_booking(1) is None

    def test_subcategory_by_name(self, temp_db):
        category_id = temp_db.create_category(name="Pizza")
        sub_id = temp_db.create_subcategory(category_id=category_id, name="Vegetarian")

        sub = temp_db.get_subcategory_by_name(category_id, "Vegetarian")
        assert isinstance(sub, entities.Subcategory)
        assert sub.id == sub_id
        assert temp_db.get_subcategory_by_name(category_id, "Vegan") is None

    def test_item_round_trips_config_and_availability(self, temp_db):
        """Test that JSON columns come back as domain values."""
        category_id = temp_db.create_category(name="Services")
        config = normalize_config("TIERED", {"tiers": [{"upto": 1, "price": 300}, {"upto": None, "price": 500}]})
        item_id = temp_db.create_item(
            name="Court",
            category_id=category_id,
            base_price=Decimal("300"),
            pricing_type=PricingType.TIERED,
            pricing_config=config,
            avl_days=("mon", "wed"),
            avl_times=(TimeWindow("09:00", "12:00"),),
            is_bookable=True,
        )

        item = temp_db.get_item(item_id)

        assert isinstance(item, entities.Item)
        assert item.pricing_type is PricingType.TIERED
        assert item.pricing_config == config
        assert item.avl_days == ("mon", "wed")
        assert item.avl_times == (TimeWindow("09:00", "12:00"),)
        assert item.is_bookable is True

    def test_find_item_by_name_respects_parent(self, temp_db):
        first = temp_db.create_category(name="Pizza")
        second = temp_db.create_category(name="Sides")
        item_id = temp_db.create_item(name="Garlic Bread", category_id=first)

        assert temp_db.find_item_by_name("Garlic Bread", first, None).id == item_id
        assert temp_db.find_item_by_name("Garlic Bread", second, None) is None

    def test_update_item_rejects_unknown_columns(self, temp_db):
        category_id = temp_db.create_category(name="Pizza")
        item_id = temp_db.create_item(name="Garlic Bread", category_id=category_id)
        with pytest.raises(ValueError, match="Cannot update"):
            temp_db.update_item(item_id, colour="red")

    def test_update_missing_raises_not_found(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_item(99, name="X")

    def test_list_items_with_subcategory_items(self, temp_db):
        category_id = temp_db.create_category(name="Pizza")
        sub_id = temp_db.create_subcategory(category_id=category_id, name="Vegetarian")
        temp_db.create_item(name="Garlic Bread", category_id=category_id)
        temp_db.create_item(name="Margherita", subcategory_id=sub_id)

        direct = temp_db.list_items(category_id=category_id)
        everything = temp_db.list_items(category_id=category_id, include_subcategory_items=True)

        assert [i.name for i in direct] == ["Garlic Bread"]
        assert [i.name for i in everything] == ["Garlic Bread", "Margherita"]

    def test_reset_inherited_tax_skips_explicit_rows(self, temp_db):
        category_id = temp_db.create_category(name="Pizza")
        inheriting = temp_db.create_item(
            name="A", category_id=category_id, tax_applicable=True, tax_percentage=Decimal("18")
        )
        explicit = temp_db.create_item(
            name="B", category_id=category_id, is_tax_inherit=False, tax_applicable=True,
            tax_percentage=Decimal("5"),
        )

        assert temp_db.reset_inherited_tax(category_id=category_id) == 1

        assert temp_db.get_item(inheriting).tax_percentage is None
        assert temp_db.get_item(explicit).tax_percentage == Decimal("5.00")

    def test_update_category_resets_inherited_tax(self, temp_db):
        category_id = temp_db.create_category(name="Pizza", tax_applicable=True, tax_percentage=Decimal("18"))
        sub_id = temp_db.create_subcategory(
            category_id=category_id, name="Veg", tax_applicable=True, tax_percentage=Decimal("18")
        )
        item_id = temp_db.create_item(
            name="Margherita", subcategory_id=sub_id, tax_applicable=True, tax_percentage=Decimal("18")
        )

        reset = temp_db.update_category(category_id, reset_inherited=True, tax_percentage=Decimal("12"))

        assert reset == 2
        other = create_sqlite_database(temp_db.database_path)
        assert other.get_category(category_id).tax_percentage == Decimal("12.00")
        assert other.get_subcategory(sub_id).tax_percentage is None
        assert other.get_item(item_id).tax_percentage is None
        other.disconnect()

    def test_update_category_and_reset_commit_together(self, temp_db, monkeypatch):
        """Test that a failing reset leaves the category row uncommitted."""
        category_id = temp_db.create_category(name="Pizza", tax_applicable=True, tax_percentage=Decimal("18"))

        def fail(**kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(temp_db, "_clear_inherited_tax", fail)
        with pytest.raises(RuntimeError):
            temp_db.update_category(category_id, reset_inherited=True, tax_percentage=Decimal("12"))

        other = create_sqlite_database(temp_db.database_path)
        assert other.get_category(category_id).tax_percentage == Decimal("18.00")
        other.disconnect()

    def test_update_subcategory_resets_inherited_items(self, temp_db):
        category_id = temp_db.create_category(name="Pizza")
        sub_id = temp_db.create_subcategory(category_id=category_id, name="Veg")
        item_id = temp_db.create_item(
            name="Margherita", subcategory_id=sub_id, tax_applicable=True, tax_percentage=Decimal("5")
        )

        assert temp_db.update_subcategory(sub_id, name="Vegetarian") == 0
        assert temp_db.get_item(item_id).tax_percentage == Decimal("5.00")

        reset = temp_db.update_subcategory(
            sub_id, reset_inherited=True, is_tax_inherit=False, tax_applicable=False, tax_percentage=Decimal("0")
        )
        assert reset == 1
        assert temp_db.get_item(item_id).tax_percentage is None

    def test_list_bookings_overlap_window(self, temp_db):
        """Test the half-open overlap filter and the cancelled filter."""
        category_id = temp_db.create_category(name="Services")
        item_id = temp_db.create_item(name="Court", category_id=category_id, is_bookable=True)
        nine = temp_db.create_booking(item_id, datetime(2030, 6, 3, 9), datetime(2030, 6, 3, 10))
        temp_db.create_booking(
            item_id, datetime(2030, 6, 3, 10), datetime(2030, 6, 3, 11), status=BookingStatus.CANCELLED
        )

        found = temp_db.list_bookings(item_id, start=datetime(2030, 6, 3, 9, 30), end=datetime(2030, 6, 3, 12))
        assert [b.id for b in found] == [nine]
        assert temp_db.list_bookings(item_id, start=datetime(2030, 6, 3, 10), end=datetime(2030, 6, 3, 12)) == []
        assert len(temp_db.list_bookings(item_id, include_cancelled=True)) == 2

        booking = temp_db.get_booking(nine)
        assert isinstance(booking, entities.Booking)
        assert booking.status is BookingStatus.CONFIRMED


def test_create_sqlite_database_uses_env(monkeypatch, tmp_path):
    """Test that CATALOGIT_DB_PATH is honoured."""
    db_path = tmp_path / "env.db"
    monkeypatch.setenv("CATALOGIT_DB_PATH", str(db_path))

    db = create_sqlite_database()

    assert db.database_url == f"sqlite:///{db_path}"
    db.disconnect()
