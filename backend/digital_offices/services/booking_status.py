# backend/digital_offices/services/booking_status.py
"""
Booking status state machine.

    PENDING   -> CONFIRMED | CANCELLED
    CONFIRMED -> COMPLETED | CANCELLED | NO_SHOW

COMPLETED, CANCELLED and NO_SHOW are terminal.
"""

from typing import Dict, FrozenSet, Union

from ..core.exceptions import (
    BookingStatusUnchangedException,
    ForbiddenException,
    InvalidStatusTransitionException,
)
from ..models.booking import Booking, BookingStatus

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)


def can_transition(current: Union[BookingStatus, str], requested: Union[BookingStatus, str]) -> bool:
    return BookingStatus(requested) in ALLOWED_TRANSITIONS[BookingStatus(current)]


def validate_transition(booking: Booking, requested: BookingStatus, actor_id: str) -> None:
    """
    Check that ``actor_id`` may move ``booking`` to ``requested``.

    The caller has already established that the actor participates in the
    booking. Checks run in order: unchanged status, client self-confirm,
    then the state machine edge.

    Raises:
        BookingStatusUnchangedException: Status is already ``requested``
        ForbiddenException: The client tries to confirm their own booking
        InvalidStatusTransitionException: Not an edge of the state machine
    """
    current = BookingStatus(booking.status)
    if current is requested:
        raise BookingStatusUnchangedException(current.value)
    if requested is BookingStatus.CONFIRMED and actor_id == booking.user_id:
        raise ForbiddenException(
            "Users cannot confirm their own bookings", code="SELF_CONFIRM_FORBIDDEN"
        )
    if not can_transition(current, requested):
        raise InvalidStatusTransitionException(current.value, requested.value)
