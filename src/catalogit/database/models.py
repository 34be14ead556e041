"""SQLAlchemy models for catalogit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Category(Base):
    """Top-level catalog category."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    tax_applicable = Column(Boolean, default=False, nullable=False)
    tax_percentage = Column(Numeric(5, 2), default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    subcategories = relationship("Subcategory", back_populates="category")
    items = relationship("Item", back_populates="category")


class Subcategory(Base):
    """Subcategory model; tax columns are NULL while inheriting."""

    __tablename__ = "subcategories"

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_tax_inherit = Column(Boolean, default=True, nullable=False)
    tax_applicable = Column(Boolean, nullable=True)
    tax_percentage = Column(Numeric(5, 2), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Subcategory names are unique within a category
    __table_args__ = (UniqueConstraint("category_id", "name", name="uq_category_subcategory_name"),)

    # Relationships
    category = relationship("Category", back_populates="subcategories")
    items = relationship("Item", back_populates="subcategory")


class Item(Base):
    """Catalog item model."""

    __tablename__ = "items"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    subcategory_id = Column(Integer, ForeignKey("subcategories.id"), nullable=True)
    description = Column(String, nullable=True)
    base_price = Column(Numeric(10, 2), default=0, nullable=False)
    pricing_type = Column(String, default="STATIC", nullable=False)
    # {"type": ..., "config": {...}} as produced by config_to_storage
    pricing_config = Column(JSON, nullable=True)
    is_tax_inherit = Column(Boolean, default=True, nullable=False)
    tax_applicable = Column(Boolean, nullable=True)
    tax_percentage = Column(Numeric(5, 2), nullable=True)
    is_bookable = Column(Boolean, default=False, nullable=False)
    avl_days = Column(JSON, nullable=True)
    avl_times = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    category = relationship("Category", back_populates="items")
    subcategory = relationship("Subcategory", back_populates="items")
    addons = relationship("Addon", back_populates="item", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="item", cascade="all, delete-orphan")


class Addon(Base):
    """Add-on sold with an item."""

    __tablename__ = "addons"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    is_mandatory = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    item = relationship("Item", back_populates="addons")


class Booking(Base):
    """Booking of a bookable item. Times are stored as naive UTC."""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String, default="confirmed", nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    item = relationship("Item", back_populates="bookings")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
