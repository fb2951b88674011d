"""
Appointment slot availability.

Pure scheduling logic with no database or request access: callers pass in
a doctor's working-hours window for one day and the bookings already made
for that day, and get back the start times that are still free.

Times of day are handled as minutes since midnight (``0``..``1439``) and
rendered as zero padded ``HH:MM`` strings.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import time
from typing import Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_SLOT_MINUTES = 30
MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r'^([01]?\d|2[0-3]):([0-5]\d)$')


def time_to_minutes(value: Union[str, time]) -> int:
    """Convert ``HH:MM`` (or a :class:`datetime.time`) to minutes since midnight.

    Raises ``ValueError`` for anything that is not a valid 24-hour time.
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        raise ValueError(f"Not a time of day: {value!r}")
    match = _HHMM.match(value.strip())
    if not match:
        raise ValueError(f"Not a time of day: {value!r}")
    hours, minutes = match.groups()
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """Render minutes since midnight as ``HH:MM``."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def is_valid_time(value) -> bool:
    try:
        time_to_minutes(value)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class Interval:
    """
    An occupied span ``[start, start + duration)`` in minutes since midnight.

    Invariant: ``duration`` is positive.
    """
    start: int
    duration: int

    def __post_init__(self):
        if not 0 <= self.start < MINUTES_PER_DAY:
            raise ValueError(f"Interval start {self.start} is outside the day")
        if self.duration <= 0:
            raise ValueError(f"Interval duration {self.duration} must be positive")

    @property
    def end(self) -> int:
        return self.start + self.duration

    def contains(self, minute: int) -> bool:
        """True when ``minute`` falls inside the half-open span."""
        return self.start <= minute < self.end

    @classmethod
    def from_booking(cls, start_time, duration) -> "Interval":
        """Build an interval from a booking's ``HH:MM`` time and duration."""
        if duration is None:
            raise ValueError("Booking has no duration")
        return cls(start=time_to_minutes(start_time), duration=int(duration))


@dataclass(frozen=True)
class AvailabilityWindow:
    """
    A doctor's working hours for one calendar day.

    ``open >= close`` is allowed and simply yields no slots.
    """
    open: int
    close: int

    @classmethod
    def from_times(cls, start_time, end_time) -> Optional["AvailabilityWindow"]:
        """Parse a schedule's start/end times; ``None`` when either is malformed."""
        try:
            return cls(open=time_to_minutes(start_time), close=time_to_minutes(end_time))
        except ValueError:
            logger.warning("Ignoring malformed availability window %r-%r", start_time, end_time)
            return None

    def __str__(self) -> str:
        return f"{minutes_to_time(self.open)}-{minutes_to_time(self.close)}"


OccupiedEntry = Union[Interval, tuple, None]


def _coerce_interval(entry: OccupiedEntry) -> Optional[Interval]:
    if isinstance(entry, Interval):
        return entry
    if entry is None:
        return None
    try:
        start_time, duration = entry
        return Interval.from_booking(start_time, duration)
    except (TypeError, ValueError):
        logger.debug("Skipping booking without a usable time: %r", entry)
        return None


def compute_available_slots(
    window: Optional[AvailabilityWindow],
    occupied: Iterable[OccupiedEntry],
    slot_length_minutes: int = DEFAULT_SLOT_MINUTES,
) -> List[str]:
    """
    List the free appointment start times inside ``window``.

    Candidates start at ``window.open`` and step by ``slot_length_minutes``
    while the candidate *start* is before ``window.close``.  A candidate is
    dropped only when it lands inside an occupied interval; the slot's own
    length is not checked against later bookings, and the final slot may
    run past closing time.  Existing clients depend on both behaviours.

    ``occupied`` may mix :class:`Interval` objects and raw
    ``(time, duration)`` pairs.  Entries that cannot be read are skipped.

    Args:
        window: Working hours for the day, or ``None`` when there are none.
        occupied: Bookings already holding the doctor's time.
        slot_length_minutes: Step between candidate start times.

    Returns:
        Ascending list of ``HH:MM`` strings.

    Raises:
        ValueError: if ``slot_length_minutes`` is zero or negative.  Slot
            length comes from settings, never from request data.
    """
    if slot_length_minutes <= 0:
        raise ValueError("slot_length_minutes must be positive")
    if window is None or window.open >= window.close:
        return []

    intervals = [i for i in (_coerce_interval(e) for e in occupied) if i is not None]

    slots: List[str] = []
    for minute in range(window.open, window.close, slot_length_minutes):
        if any(interval.contains(minute) for interval in intervals):
            continue
        slots.append(minutes_to_time(minute))
    return slots
