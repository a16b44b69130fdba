# backend/tests/services/test_booking_status.py
"""
Tests for the booking status state machine and BookingService.update_booking_status.
"""

from itertools import product
from unittest.mock import Mock

import pytest

from digital_offices.core.exceptions import (
    BookingStatusUnchangedException,
    ForbiddenException,
    InvalidStatusTransitionException,
    NotFoundException,
)
from digital_offices.models.booking import BookingStatus
from digital_offices.services.booking_service import BookingService
from digital_offices.services.booking_status import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    can_transition,
    validate_transition,
)
from tests.utils.builders import MONDAY, at

LEGAL_EDGES = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED),
    (BookingStatus.PENDING, BookingStatus.CANCELLED),
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    (BookingStatus.CONFIRMED, BookingStatus.NO_SHOW),
}


class TestStateMachine:
    @pytest.mark.parametrize("current,requested", list(product(BookingStatus, BookingStatus)))
    def test_can_transition_matches_edge_list(self, current, requested):
        assert can_transition(current, requested) == ((current, requested) in LEGAL_EDGES)

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {
            BookingStatus.COMPLETED,
            BookingStatus.CANCELLED,
            BookingStatus.NO_SHOW,
        }

    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(BookingStatus)

    def test_accepts_plain_strings(self):
        assert can_transition("PENDING", "CONFIRMED")
        assert not can_transition("CONFIRMED", "PENDING")


class TestValidateTransition:
    @staticmethod
    def _booking(status: BookingStatus):
        return Mock(status=status.value, user_id="user-1", expert_id="expert-1")

    def test_confirmed_back_to_pending_is_rejected(self):
        with pytest.raises(InvalidStatusTransitionException) as exc_info:
            validate_transition(self._booking(BookingStatus.CONFIRMED), BookingStatus.PENDING, "expert-1")
        assert exc_info.value.details == {"from": "CONFIRMED", "to": "PENDING"}

    def test_same_status_is_rejected_before_anything_else(self):
        with pytest.raises(BookingStatusUnchangedException):
            validate_transition(self._booking(BookingStatus.CANCELLED), BookingStatus.CANCELLED, "user-1")

    def test_client_cannot_confirm_own_booking(self):
        with pytest.raises(ForbiddenException) as exc_info:
            validate_transition(self._booking(BookingStatus.PENDING), BookingStatus.CONFIRMED, "user-1")
        assert exc_info.value.code == "SELF_CONFIRM_FORBIDDEN"

    def test_provider_can_confirm(self):
        validate_transition(self._booking(BookingStatus.PENDING), BookingStatus.CONFIRMED, "expert-1")

    def test_client_can_cancel(self):
        validate_transition(self._booking(BookingStatus.PENDING), BookingStatus.CANCELLED, "user-1")

    def test_terminal_status_cannot_be_left(self):
        with pytest.raises(InvalidStatusTransitionException):
            validate_transition(self._booking(BookingStatus.COMPLETED), BookingStatus.CANCELLED, "expert-1")


class TestUpdateBookingStatus:
    def test_pending_to_cancelled_then_repeat_fails(
        self, db, test_user, expert_service, make_booking
    ):
        booking = make_booking(expert_service, at(MONDAY, "10:00"))
        service = BookingService(db)

        updated = service.update_booking_status(booking.id, BookingStatus.CANCELLED, test_user.id)
        assert updated.status == BookingStatus.CANCELLED.value

        with pytest.raises(BookingStatusUnchangedException):
            service.update_booking_status(booking.id, BookingStatus.CANCELLED, test_user.id)

    def test_expert_walks_booking_to_completed(
        self, db, test_expert, expert_service, make_booking
    ):
        booking = make_booking(expert_service, at(MONDAY, "10:00"))
        service = BookingService(db)

        service.update_booking_status(booking.id, BookingStatus.CONFIRMED, test_expert.id)
        done = service.update_booking_status(booking.id, BookingStatus.COMPLETED, test_expert.id)

        db.expire_all()
        assert done.status == BookingStatus.COMPLETED.value

    def test_organization_can_mark_no_show(
        self, db, test_organization, organization_service, make_booking
    ):
        booking = make_booking(
            organization_service, at(MONDAY, "10:00"), status=BookingStatus.CONFIRMED
        )
        updated = BookingService(db).update_booking_status(
            booking.id, "NO_SHOW", test_organization.id
        )
        assert updated.status == BookingStatus.NO_SHOW.value

    def test_confirmed_cannot_return_to_pending(
        self, db, test_expert, expert_service, make_booking
    ):
        booking = make_booking(expert_service, at(MONDAY, "10:00"), status=BookingStatus.CONFIRMED)

        with pytest.raises(InvalidStatusTransitionException):
            BookingService(db).update_booking_status(booking.id, BookingStatus.PENDING, test_expert.id)

        db.expire_all()
        assert booking.status == BookingStatus.CONFIRMED.value

    def test_client_self_confirm_leaves_booking_pending(
        self, db, test_user, expert_service, make_booking
    ):
        booking = make_booking(expert_service, at(MONDAY, "10:00"))

        with pytest.raises(ForbiddenException):
            BookingService(db).update_booking_status(booking.id, BookingStatus.CONFIRMED, test_user.id)

        db.expire_all()
        assert booking.status == BookingStatus.PENDING.value

    def test_stranger_sees_not_found(self, db, other_user, expert_service, make_booking):
        booking = make_booking(expert_service, at(MONDAY, "10:00"))

        with pytest.raises(NotFoundException) as exc_info:
            BookingService(db).update_booking_status(booking.id, BookingStatus.CANCELLED, other_user.id)
        assert exc_info.value.code == "BOOKING_NOT_FOUND"

    def test_read_and_update_report_missing_alike(
        self, db, other_user, expert_service, make_booking
    ):
        booking = make_booking(expert_service, at(MONDAY, "10:00"))
        service = BookingService(db)

        with pytest.raises(NotFoundException) as read_exc:
            service.get_booking_for_actor(booking.id, other_user.id)
        with pytest.raises(NotFoundException) as update_exc:
            service.update_booking_status(booking.id, BookingStatus.CANCELLED, other_user.id)

        assert read_exc.value.message == update_exc.value.message
        assert read_exc.value.code == update_exc.value.code == "BOOKING_NOT_FOUND"

    def test_other_expert_sees_not_found(self, db, other_expert, expert_service, make_booking):
        booking = make_booking(expert_service, at(MONDAY, "10:00"))

        with pytest.raises(NotFoundException):
            BookingService(db).update_booking_status(
                booking.id, BookingStatus.CONFIRMED, other_expert.id
            )

    def test_unknown_booking(self, db, test_user):
        with pytest.raises(NotFoundException):
            BookingService(db).update_booking_status(
                "00000000-0000-0000-0000-000000000000", BookingStatus.CANCELLED, test_user.id
            )
