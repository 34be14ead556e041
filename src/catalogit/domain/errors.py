"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or overlapping bookings."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class InvalidConfigError(ValidationError):
    """A pricing configuration payload violates a type-specific rule."""


class InvalidNumericInputError(ValidationError):
    """A monetary value cannot be coerced to money."""


class MissingParentForInheritanceError(ValidationError):
    """An entity set to inherit tax has no parent to inherit from."""


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def subcategory_not_found(subcategory_id: int) -> str:
    """Return message for missing subcategory by ID."""
    return f"Subcategory {subcategory_id} not found"


def item_not_found(item_id: int) -> str:
    """Return message for missing item by ID."""
    return f"Item {item_id} not found"


def addon_not_found(addon_id: int) -> str:
    """Return message for missing addon by ID."""
    return f"Addon {addon_id} not found"


def booking_not_found(booking_id: int) -> str:
    """Return message for missing booking by ID."""
    return f"Booking {booking_id} not found"


def duplicate_subcategory_name(name: str, category_id: int) -> str:
    """Return message for a subcategory name clash within its category."""
    return f"Subcategory '{name}' already exists in category {category_id}"


def duplicate_item_name(name: str) -> str:
    """Return message for an item name clash under the same parent."""
    return f"An item named '{name}' already exists under the same category or subcategory"


def item_has_two_parents() -> str:
    """Return message when both a category and a subcategory are given."""
    return "An item may belong to either a category or a subcategory, not both"


def missing_tax_parent(entity: str) -> str:
    """Return message when an inheriting entity has no parent."""
    return f"{entity} inherits tax but has no category or subcategory to inherit from"


def booking_overlap(start: str, end: str) -> str:
    """Return message when a booking collides with an existing one."""
    return f"Time slot is already booked ({start} - {end})"
