"""Booking domain service."""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from catalogit.database.base import Database
from catalogit.domain.entities import Booking, BookingStatus, Item, SlotAvailability, TimeSlot
from catalogit.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    booking_not_found,
    booking_overlap,
    item_not_found,
)
from catalogit.domain.visibility import is_effectively_active
from catalogit.utils.date_parser import to_naive_utc, utc_now
from catalogit.utils.time_windows import (
    MatchMode,
    find_containing_window,
    parse_hhmm,
    subtract_ranges,
    weekday_code,
)

logger = logging.getLogger(__name__)


class BookingService:
    """Service for booking bookable items into their availability windows.

    All times are handled as naive UTC. Aware datetimes are converted on the
    way in; weekday and HH:MM checks use the UTC wall clock.
    """

    def __init__(self, db: Database):
        """Initialize booking service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_item(self, item_id: int) -> Item:
        item = self.db.get_item(item_id)
        if item is None:
            raise NotFoundError(item_not_found(item_id))
        return item

    def _require_bookable(self, item: Item) -> None:
        if not item.is_bookable:
            raise ValidationError(f"Item {item.id} is not bookable")

        subcategory = self.db.get_subcategory(item.subcategory_id) if item.subcategory_id else None
        category = self.db.get_category(item.category_id) if item.category_id else None
        if not is_effectively_active(item, subcategory, category):
            raise ValidationError(f"Item {item.id} or its parent is not active")

    def create_booking(
        self,
        item_id: int,
        start_time: datetime,
        end_time: datetime,
        now: Optional[datetime] = None,
    ) -> int:
        """Book an item for a time range.

        Args:
            item_id: Item to book
            start_time: Start of the booking
            end_time: End of the booking (exclusive)
            now: Reference time for the "not in the past" check (defaults to now)

        Returns:
            Booking ID

        Raises:
            ValidationError: If the range is invalid, in the past, or outside
                the item's availability, or the item cannot be booked
            NotFoundError: If the item does not exist
            ConflictError: If the range overlaps a non-cancelled booking
        """
        start = to_naive_utc(start_time)
        end = to_naive_utc(end_time)
        reference = to_naive_utc(now) if now is not None else utc_now()

        if start >= end:
            raise ValidationError("start_time must be before end_time")
        if start < reference:
            raise ValidationError("Cannot book slots in the past")

        item = self._require_item(item_id)
        self._require_bookable(item)

        if not self._within_availability(item, start, end):
            days = ", ".join(item.avl_days) or "none"
            times = ", ".join(f"{w.start}-{w.end}" for w in item.avl_times) or "none"
            raise ValidationError(
                "Requested time slot is outside item availability windows "
                f"(days: {days}; times: {times})"
            )

        overlapping = self.db.list_bookings(item_id, start=start, end=end)
        if overlapping:
            clash = overlapping[0]
            raise ConflictError(
                booking_overlap(clash.start_time.isoformat(" "), clash.end_time.isoformat(" "))
            )

        booking_id = self.db.create_booking(item_id=item_id, start_time=start, end_time=end)
        logger.info("Booked item %s from %s to %s (booking %s)", item_id, start, end, booking_id)
        return booking_id

    @staticmethod
    def _within_availability(item: Item, start: datetime, end: datetime) -> bool:
        if weekday_code(start) not in item.avl_days:
            return False
        # Windows never cross midnight, so neither may a booking
        if end.date() != start.date():
            return False
        return find_containing_window(item.avl_times, (start, end), MatchMode.RANGE) is not None

    def get_available_slots(
        self, item_id: int, day: date, today: Optional[date] = None
    ) -> SlotAvailability:
        """Compute free slots for an item on a given day.

        Each availability window on that day minus the non-cancelled bookings
        overlapping it gives the free pieces, returned sorted by start.

        Args:
            item_id: Item ID
            day: The day to check (UTC)
            today: Reference date for the past-date check (defaults to today, UTC)

        Returns:
            SlotAvailability; empty with a message when the item is not
            available that weekday or defines no time windows

        Raises:
            ValidationError: If the day is in the past or the item cannot be booked
            NotFoundError: If the item does not exist
        """
        reference = today if today is not None else utc_now().date()
        if day < reference:
            raise ValidationError("Availability can't be checked for past dates")

        item = self._require_item(item_id)
        self._require_bookable(item)

        weekday = weekday_code(day)
        if weekday not in item.avl_days:
            return SlotAvailability(
                item_id=item_id,
                day=day,
                weekday=weekday,
                message=f"Item is not available on {weekday}",
                available_days=item.avl_days,
            )
        if not item.avl_times:
            return SlotAvailability(
                item_id=item_id,
                day=day,
                weekday=weekday,
                message="No time slots defined for this item",
                available_days=item.avl_days,
            )

        day_start = datetime.combine(day, time(0, 0))
        bookings = self.db.list_bookings(item_id, start=day_start, end=day_start + timedelta(days=1))
        taken = [(b.start_time, b.end_time) for b in bookings]

        free: list[tuple[datetime, datetime]] = []
        for window in item.avl_times:
            window_range = (
                datetime.combine(day, parse_hhmm(window.start)),
                datetime.combine(day, parse_hhmm(window.end)),
            )
            free.extend(subtract_ranges(window_range, taken))

        slots = tuple(TimeSlot(start=s, end=e) for s, e in sorted(free))
        return SlotAvailability(
            item_id=item_id,
            day=day,
            weekday=weekday,
            slots=slots,
            available_days=item.avl_days,
        )

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        """Get booking by ID."""
        return self.db.get_booking(booking_id)

    def require_booking(self, booking_id: int) -> Booking:
        """Get booking by ID, raising NotFoundError if it does not exist."""
        booking = self.db.get_booking(booking_id)
        if booking is None:
            raise NotFoundError(booking_not_found(booking_id))
        return booking

    def list_bookings(self, item_id: int, include_cancelled: bool = False) -> list[Booking]:
        """List bookings of an item ordered by start time.

        Raises:
            NotFoundError: If the item does not exist
        """
        self._require_item(item_id)
        return self.db.list_bookings(item_id, include_cancelled=include_cancelled)

    def cancel_booking(self, booking_id: int) -> None:
        """Cancel a confirmed booking, freeing its slot.

        Raises:
            NotFoundError: If the booking does not exist
            ValidationError: If the booking is not confirmed
        """
        self._transition(booking_id, BookingStatus.CANCELLED)

    def complete_booking(self, booking_id: int) -> None:
        """Mark a confirmed booking as completed.

        Raises:
            NotFoundError: If the booking does not exist
            ValidationError: If the booking is not confirmed
        """
        self._transition(booking_id, BookingStatus.COMPLETED)

    def _transition(self, booking_id: int, status: BookingStatus) -> None:
        booking = self.require_booking(booking_id)
        if booking.status is not BookingStatus.CONFIRMED:
            raise ValidationError(
                f"Booking {booking_id} is {booking.status.value}; only confirmed bookings can change"
            )
        self.db.update_booking_status(booking_id, status)
        logger.info("Booking %s is now %s", booking_id, status.value)

    def find_active_booking(self, item_id: int, at: datetime) -> Optional[Booking]:
        """Find the confirmed booking of an item covering an instant.

        Args:
            item_id: Item ID
            at: The instant; aware values are converted to naive UTC

        Returns:
            The booking with ``start <= at < end``, or None
        """
        moment = to_naive_utc(at)
        for booking in self.db.list_bookings(item_id, start=moment, end=moment + timedelta(microseconds=1)):
            if booking.status is BookingStatus.CONFIRMED and booking.start_time <= moment < booking.end_time:
                return booking
        return None
