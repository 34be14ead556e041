"""Shared pytest fixtures for catalogit tests."""

import tempfile
import os
from datetime import datetime, UTC
from decimal import Decimal
import pytest

from catalogit.database.factories import create_sqlite_database
from catalogit.domain.addon import AddonService
from catalogit.domain.booking import BookingService
from catalogit.domain.category import CategoryService
from catalogit.domain.entities import Category, Item, PricingType, Subcategory
from catalogit.domain.item import ItemService
from catalogit.domain.subcategory import SubcategoryService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def subcategory_service(temp_db):
    """Create a SubcategoryService with a temporary database."""
    return SubcategoryService(temp_db)


@pytest.fixture
def item_service(temp_db):
    """Create an ItemService with a temporary database."""
    return ItemService(temp_db)


@pytest.fixture
def addon_service(temp_db):
    """Create an AddonService with a temporary database."""
    return AddonService(temp_db)


@pytest.fixture
def booking_service(temp_db):
    """Create a BookingService with a temporary database."""
    return BookingService(temp_db)


@pytest.fixture
def sample_catalog(temp_db):
    """Seed the sample catalog and return its name-to-ID mapping."""
    from catalogit.cli.commands.init_catalog import seed_catalog

    return seed_catalog(temp_db)


@pytest.fixture
def taxed_category(category_service):
    """A category taxed at 18%."""
    category_id = category_service.create_category(name="Pizza", tax_percentage=Decimal("18"))
    return category_service.get_category(category_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def make_item():
    """Factory for in-memory Item entities with sensible defaults."""

    def _make(**overrides) -> Item:
        fields = dict(
            id=1,
            name="Test Item",
            category_id=None,
            subcategory_id=None,
            description=None,
            base_price=Decimal("100.00"),
            pricing_type=PricingType.STATIC,
            pricing_config=None,
            is_tax_inherit=True,
            tax_applicable=None,
            tax_percentage=None,
            is_bookable=False,
            is_active=True,
            created_at=datetime.now(UTC),
        )
        fields.update(overrides)
        if "pricing_config" in overrides and overrides["pricing_config"] is not None and "pricing_type" not in overrides:
            fields["pricing_type"] = overrides["pricing_config"].pricing_type
        return Item(**fields)

    return _make


@pytest.fixture
def make_category():
    """Factory for in-memory Category entities."""

    def _make(**overrides) -> Category:
        fields = dict(
            id=1,
            name="Category",
            description=None,
            tax_applicable=True,
            tax_percentage=Decimal("18.00"),
            is_active=True,
            created_at=datetime.now(UTC),
        )
        fields.update(overrides)
        return Category(**fields)

    return _make


@pytest.fixture
def make_subcategory():
    """Factory for in-memory Subcategory entities (inheriting by default)."""

    def _make(**overrides) -> Subcategory:
        fields = dict(
            id=1,
            category_id=1,
            name="Subcategory",
            description=None,
            is_tax_inherit=True,
            tax_applicable=None,
            tax_percentage=None,
            is_active=True,
            created_at=datetime.now(UTC),
        )
        fields.update(overrides)
        return Subcategory(**fields)

    return _make
