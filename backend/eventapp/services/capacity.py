"""Attendee-cap policy against the system-wide ceiling."""
from typing import Optional

from eventapp.errors import CapacityExceeded


def validate_capacity(requested_max: Optional[int], ceiling: int) -> None:
    if requested_max is not None and requested_max > ceiling:
        raise CapacityExceeded(ceiling)


def resolve_capacity(requested_max: Optional[int], ceiling: int) -> int:
    """Capacity for a new event: the requested cap, or the ceiling when none was given."""
    validate_capacity(requested_max, ceiling)
    return requested_max if requested_max is not None else ceiling
