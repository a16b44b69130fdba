# backend/tests/services/test_booking_service.py
"""
BookingService tests.

Most tests run against the SQLite test database; the error-translation
tests swap in mocks to simulate Postgres-only failures.

Run with: pytest backend/tests/services/test_booking_service.py -v
"""

from contextlib import contextmanager
from datetime import timedelta, timezone
from decimal import Decimal
import random
from unittest.mock import MagicMock, Mock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from digital_offices.core.exceptions import (
    BookingConflictException,
    ConflictException,
    NotFoundException,
    OutsideWorkingHoursException,
    RepositoryException,
    ServiceException,
)
from digital_offices.domain.owner import ExpertOwner, OrganizationOwner
from digital_offices.models.booking import Booking, BookingStatus
from digital_offices.models.service import Service
from digital_offices.services.booking_service import OVERLAP_CONSTRAINT_NAME, BookingService
from digital_offices.services.service_catalog_service import ServiceCatalogService
from tests.utils.builders import MONDAY, SUNDAY, at


def _overlaps(a_start, a_end, b_start, b_end) -> bool:
    return a_start < b_end and b_start < a_end


class TestMondayScenario:
    """Expert works Mondays 09:00-17:00; service lasts 60 minutes."""

    def test_booking_sequence(self, db, test_user, expert_service, monday_hours):
        service = BookingService(db)

        booking_a = service.create_booking(test_user.id, expert_service.id, at(MONDAY, "10:00"))
        assert booking_a.status == BookingStatus.PENDING.value
        assert booking_a.end_time == at(MONDAY, "11:00")

        with pytest.raises(BookingConflictException):
            service.create_booking(test_user.id, expert_service.id, at(MONDAY, "10:30"))

        # Touches A at 11:00 but does not overlap it
        booking_c = service.create_booking(test_user.id, expert_service.id, at(MONDAY, "11:00"))
        assert booking_c.start_time == booking_a.end_time

        with pytest.raises(OutsideWorkingHoursException):
            service.create_booking(test_user.id, expert_service.id, at(MONDAY, "08:00"))

        assert db.query(Booking).count() == 2

    def test_last_slot_of_the_day_fits_exactly(self, db, test_user, expert_service, monday_hours):
        booking = BookingService(db).create_booking(
            test_user.id, expert_service.id, at(MONDAY, "16:00")
        )
        assert booking.end_time == at(MONDAY, "17:00")

    def test_running_past_closing_is_rejected(self, db, test_user, expert_service, monday_hours):
        with pytest.raises(OutsideWorkingHoursException) as exc_info:
            BookingService(db).create_booking(test_user.id, expert_service.id, at(MONDAY, "16:30"))
        assert exc_info.value.code == "OUTSIDE_WORKING_HOURS"

    def test_other_weekday_is_rejected(self, db, test_user, expert_service, monday_hours):
        tuesday = MONDAY + timedelta(days=1)
        with pytest.raises(OutsideWorkingHoursException):
            BookingService(db).create_booking(test_user.id, expert_service.id, at(tuesday, "10:00"))

    def test_expert_without_schedule_cannot_be_booked(self, db, test_user, expert_service):
        with pytest.raises(OutsideWorkingHoursException):
            BookingService(db).create_booking(test_user.id, expert_service.id, at(MONDAY, "10:00"))


class TestCreateBooking:
    def test_provider_and_price_copied_from_service(
        self, db, test_user, test_expert, expert_service, monday_hours
    ):
        booking = BookingService(db).create_booking(
            test_user.id, expert_service.id, at(MONDAY, "09:00"), notes="First session"
        )

        assert booking.expert_id == test_expert.id
        assert booking.organization_id is None
        assert booking.owner == ExpertOwner(test_expert.id)
        assert booking.total_price == Decimal("100.00")
        assert booking.notes == "First session"
        assert booking.user_id == test_user.id

    def test_price_is_a_snapshot(self, db, test_user, test_expert, expert_service, monday_hours):
        booking = BookingService(db).create_booking(
            test_user.id, expert_service.id, at(MONDAY, "09:00")
        )
        ServiceCatalogService(db).update_service(
            expert_service.id, test_expert.id, {"price": Decimal("180.00"), "duration_min": 90}
        )

        db.expire_all()
        stored = db.query(Booking).filter(Booking.id == booking.id).one()
        assert stored.total_price == Decimal("100.00")
        assert stored.end_time - stored.start_time == timedelta(minutes=60)

    def test_non_utc_start_is_normalized(self, db, test_user, expert_service, monday_hours):
        plus_two = timezone(timedelta(hours=2))
        start = at(MONDAY, "12:00").astimezone(plus_two)  # 14:00+02:00

        booking = BookingService(db).create_booking(test_user.id, expert_service.id, start)

        assert booking.start_time == at(MONDAY, "12:00")
        assert booking.start_time.utcoffset() == timedelta(0)

    def test_organization_is_always_available(self, db, test_user, organization_service):
        # Sunday at 03:00 with no schedule at all
        booking = BookingService(db).create_booking(
            test_user.id, organization_service.id, at(SUNDAY, "03:00")
        )
        assert booking.organization_id == organization_service.organization_id
        assert booking.expert_id is None

    def test_organization_bookings_still_cannot_overlap(
        self, db, test_user, organization_service
    ):
        service = BookingService(db)
        service.create_booking(test_user.id, organization_service.id, at(SUNDAY, "03:00"))
        with pytest.raises(BookingConflictException):
            service.create_booking(test_user.id, organization_service.id, at(SUNDAY, "03:15"))

    def test_inactive_service_is_not_found(self, db, test_user, expert_service, monday_hours):
        expert_service.deactivate()
        db.commit()

        with pytest.raises(NotFoundException) as exc_info:
            BookingService(db).create_booking(test_user.id, expert_service.id, at(MONDAY, "10:00"))
        assert exc_info.value.code == "SERVICE_NOT_FOUND"

    def test_unknown_service_is_not_found(self, db, test_user):
        with pytest.raises(NotFoundException):
            BookingService(db).create_booking(
                test_user.id, "00000000-0000-0000-0000-000000000000", at(MONDAY, "10:00")
            )

    def test_cancelled_booking_frees_the_slot(
        self, db, test_user, expert_service, monday_hours, make_booking
    ):
        make_booking(expert_service, at(MONDAY, "10:00"), status=BookingStatus.CANCELLED)

        booking = BookingService(db).create_booking(
            test_user.id, expert_service.id, at(MONDAY, "10:00")
        )
        assert booking.status == BookingStatus.PENDING.value

    @pytest.mark.parametrize(
        "status", [BookingStatus.COMPLETED, BookingStatus.NO_SHOW, BookingStatus.CANCELLED]
    )
    def test_only_active_bookings_block(
        self, db, test_user, expert_service, monday_hours, make_booking, status
    ):
        make_booking(expert_service, at(MONDAY, "10:00"), status=status)
        BookingService(db).create_booking(test_user.id, expert_service.id, at(MONDAY, "10:30"))

    def test_confirmed_booking_blocks(
        self, db, test_user, expert_service, monday_hours, make_booking
    ):
        make_booking(expert_service, at(MONDAY, "10:00"), status=BookingStatus.CONFIRMED)
        with pytest.raises(BookingConflictException):
            BookingService(db).create_booking(test_user.id, expert_service.id, at(MONDAY, "09:30"))

    def test_providers_do_not_block_each_other(
        self, db, test_user, expert_service, organization_service, monday_hours
    ):
        service = BookingService(db)
        service.create_booking(test_user.id, expert_service.id, at(MONDAY, "10:00"))
        service.create_booking(test_user.id, organization_service.id, at(MONDAY, "10:00"))
        assert db.query(Booking).count() == 2

    def test_conflict_reports_the_requested_interval(
        self, db, test_user, test_expert, expert_service, monday_hours
    ):
        service = BookingService(db)
        service.create_booking(test_user.id, expert_service.id, at(MONDAY, "10:00"))

        with pytest.raises(BookingConflictException) as exc_info:
            service.create_booking(test_user.id, expert_service.id, at(MONDAY, "10:59"))

        details = exc_info.value.details
        assert details["provider_type"] == "expert"
        assert details["provider_id"] == test_expert.id
        assert details["start_time"] == at(MONDAY, "10:59").isoformat()


class TestOverlapProperty:
    """Random request streams never leave two active bookings overlapping."""

    @pytest.mark.parametrize("seed", [3, 17, 2024])
    def test_random_requests_match_interval_arithmetic(
        self, db, test_user, test_organization, seed
    ):
        owner = OrganizationOwner(test_organization.id)
        services = []
        for duration in (15, 30, 45):
            svc = Service(
                owner=owner,
                title=f"Session {duration}",
                price=Decimal("10.00"),
                duration_min=duration,
            )
            db.add(svc)
            services.append(svc)
        db.commit()

        rng = random.Random(seed)
        booking_service = BookingService(db)
        accepted = []

        for _ in range(40):
            svc = rng.choice(services)
            start = at(MONDAY, "08:00") + timedelta(minutes=5 * rng.randrange(0, 72))
            end = start + timedelta(minutes=svc.duration_min)
            expected_ok = not any(_overlaps(start, end, s, e) for s, e in accepted)

            if expected_ok:
                booking = booking_service.create_booking(test_user.id, svc.id, start)
                assert (booking.start_time, booking.end_time) == (start, end)
                accepted.append((start, end))
            else:
                with pytest.raises(BookingConflictException):
                    booking_service.create_booking(test_user.id, svc.id, start)

        stored = sorted(
            (b.start_time, b.end_time)
            for b in db.query(Booking).filter(Booking.organization_id == owner.id)
        )
        assert stored == sorted(accepted)
        for (_, prev_end), (next_start, _) in zip(stored, stored[1:]):
            assert prev_end <= next_start


@contextmanager
def _busy_lock(owner, ttl_s=None, wait_s=None):
    yield False


class TestCreateBookingFailureTranslation:
    """Database and lock failures surface as booking conflicts."""

    @pytest.fixture
    def org_service(self):
        return Service(
            id="svc-1",
            owner=OrganizationOwner("org-1"),
            title="Team Workshop",
            price=Decimal("50.00"),
            duration_min=30,
        )

    @pytest.fixture
    def repository(self):
        repo = Mock()
        repo.has_overlap.return_value = False
        return repo

    @pytest.fixture
    def booking_service(self, repository, org_service):
        catalog = Mock()
        catalog.get_active_service.return_value = org_service
        return BookingService(
            MagicMock(),
            repository=repository,
            catalog_service=catalog,
            availability_service=Mock(),
        )

    @staticmethod
    def _orig(pgcode, constraint_name=None):
        orig = Mock()
        orig.pgcode = pgcode
        orig.diag.constraint_name = constraint_name
        return orig

    def test_exclusion_violation_is_a_conflict(self, booking_service, repository):
        error = IntegrityError(
            "INSERT INTO bookings", {}, self._orig("23P01", OVERLAP_CONSTRAINT_NAME)
        )
        repository.create.side_effect = error

        with pytest.raises(BookingConflictException) as exc_info:
            booking_service.create_booking("user-1", "svc-1", at(MONDAY, "10:00"))

        assert exc_info.value.__cause__ is error
        booking_service.db.rollback.assert_called()
        booking_service.db.commit.assert_not_called()

    def test_other_integrity_errors_are_not_conflicts(self, booking_service, repository):
        repository.create.side_effect = IntegrityError(
            "INSERT INTO bookings", {}, self._orig("23503", "bookings_user_id_fkey")
        )

        with pytest.raises(ServiceException):
            booking_service.create_booking("user-1", "svc-1", at(MONDAY, "10:00"))

    def test_deadlock_is_a_conflict(self, booking_service, repository):
        repository.create.side_effect = OperationalError(
            "INSERT INTO bookings", {}, self._orig("40P01")
        )

        with pytest.raises(BookingConflictException):
            booking_service.create_booking("user-1", "svc-1", at(MONDAY, "10:00"))

    def test_deadlock_on_the_overlap_read_is_a_conflict(self, booking_service, repository):
        error = RepositoryException("Failed to check booking overlap")
        error.__cause__ = OperationalError("SELECT FROM bookings", {}, self._orig("40P01"))
        repository.has_overlap.side_effect = error

        with pytest.raises(BookingConflictException) as exc_info:
            booking_service.create_booking("user-1", "svc-1", at(MONDAY, "10:00"))

        assert exc_info.value.__cause__ is error
        repository.create.assert_not_called()
        booking_service.db.rollback.assert_called()

    def test_deadlock_on_the_advisory_lock_is_a_conflict(self, booking_service, repository):
        deadlock = OperationalError("SELECT pg_advisory_xact_lock", {}, self._orig("40P01"))

        with patch(
            "digital_offices.services.booking_service.acquire_advisory_xact_lock",
            side_effect=deadlock,
        ):
            with pytest.raises(BookingConflictException):
                booking_service.create_booking("user-1", "svc-1", at(MONDAY, "10:00"))

        repository.has_overlap.assert_not_called()

    def test_other_read_failures_propagate(self, booking_service, repository):
        error = RepositoryException("Failed to check booking overlap")
        error.__cause__ = OperationalError("SELECT FROM bookings", {}, self._orig("08006"))
        repository.has_overlap.side_effect = error

        with pytest.raises(RepositoryException):
            booking_service.create_booking("user-1", "svc-1", at(MONDAY, "10:00"))

    def test_other_operational_errors_propagate(self, booking_service, repository):
        repository.create.side_effect = OperationalError(
            "INSERT INTO bookings", {}, self._orig("57014")
        )

        with pytest.raises(ServiceException):
            booking_service.create_booking("user-1", "svc-1", at(MONDAY, "10:00"))

    def test_busy_provider_is_reported_without_touching_the_database(
        self, booking_service, repository
    ):
        with patch("digital_offices.services.booking_service.provider_lock", _busy_lock):
            with pytest.raises(ConflictException) as exc_info:
                booking_service.create_booking("user-1", "svc-1", at(MONDAY, "10:00"))

        assert exc_info.value.code == "PROVIDER_BUSY"
        repository.has_overlap.assert_not_called()
        repository.create.assert_not_called()

    def test_organization_skips_the_availability_check(self, booking_service, repository):
        repository.create.return_value = Mock(id="booking-1")

        booking_service.create_booking("user-1", "svc-1", at(SUNDAY, "03:00"))

        booking_service.availability_service.is_within_availability.assert_not_called()
        kwargs = repository.create.call_args.kwargs
        assert kwargs["owner"] == OrganizationOwner("org-1")
        assert kwargs["end_time"] == at(SUNDAY, "03:30")
        assert kwargs["total_price"] == Decimal("50.00")
        assert kwargs["status"] == BookingStatus.PENDING.value

    def test_expert_is_checked_against_availability(self, repository):
        expert_svc = Service(
            id="svc-2",
            owner=ExpertOwner("expert-1"),
            title="Strategy Session",
            price=Decimal("100.00"),
            duration_min=60,
        )
        catalog = Mock()
        catalog.get_active_service.return_value = expert_svc
        availability = Mock()
        availability.is_within_availability.return_value = False
        service = BookingService(
            MagicMock(),
            repository=repository,
            catalog_service=catalog,
            availability_service=availability,
        )

        with pytest.raises(OutsideWorkingHoursException):
            service.create_booking("user-1", "svc-2", at(MONDAY, "10:00"))

        availability.is_within_availability.assert_called_once_with(
            "expert-1", at(MONDAY, "10:00"), 60
        )
        repository.create.assert_not_called()
