# backend/tests/repositories/test_booking_repository.py
"""
BookingRepository query tests against the SQLite test database.
"""

from datetime import timedelta
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import OperationalError
import pytest

from digital_offices.core.exceptions import RepositoryException
from digital_offices.domain.owner import ExpertOwner, OrganizationOwner
from digital_offices.models.booking import BookingStatus
from digital_offices.repositories import booking_repository as booking_repository_module
from digital_offices.repositories.booking_repository import BookingRepository
from tests.utils.builders import MONDAY, at


class TestFindOverlapping:
    def test_half_open_intervals(self, db, test_expert, expert_service, make_booking):
        booking = make_booking(expert_service, at(MONDAY, "10:00"))
        repo = BookingRepository(db)
        owner = ExpertOwner(test_expert.id)

        assert repo.find_overlapping(owner, at(MONDAY, "10:30"), at(MONDAY, "11:30")) == [booking]
        assert repo.find_overlapping(owner, at(MONDAY, "09:00"), at(MONDAY, "12:00")) == [booking]
        assert repo.find_overlapping(owner, at(MONDAY, "10:15"), at(MONDAY, "10:45")) == [booking]
        # Touching at either end is not an overlap
        assert repo.find_overlapping(owner, at(MONDAY, "11:00"), at(MONDAY, "12:00")) == []
        assert repo.find_overlapping(owner, at(MONDAY, "09:00"), at(MONDAY, "10:00")) == []

    def test_inactive_bookings_are_ignored(self, db, test_expert, expert_service, make_booking):
        make_booking(expert_service, at(MONDAY, "10:00"), status=BookingStatus.CANCELLED)
        make_booking(expert_service, at(MONDAY, "10:00"), status=BookingStatus.COMPLETED)
        make_booking(expert_service, at(MONDAY, "10:00"), status=BookingStatus.NO_SHOW)

        assert not BookingRepository(db).has_overlap(
            ExpertOwner(test_expert.id), at(MONDAY, "10:00"), at(MONDAY, "11:00")
        )

    def test_scoped_to_one_provider(
        self, db, test_expert, test_organization, expert_service, make_booking
    ):
        make_booking(expert_service, at(MONDAY, "10:00"))
        repo = BookingRepository(db)

        assert repo.has_overlap(ExpertOwner(test_expert.id), at(MONDAY, "10:00"), at(MONDAY, "11:00"))
        assert not repo.has_overlap(
            OrganizationOwner(test_organization.id), at(MONDAY, "10:00"), at(MONDAY, "11:00")
        )

    def test_results_ordered_by_start(self, db, test_expert, expert_service, make_booking):
        late = make_booking(expert_service, at(MONDAY, "13:00"))
        early = make_booking(expert_service, at(MONDAY, "09:00"))

        found = BookingRepository(db).find_overlapping(
            ExpertOwner(test_expert.id), at(MONDAY, "08:00"), at(MONDAY, "18:00")
        )
        assert found == [early, late]

    def test_database_error_keeps_its_cause(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("deadlock detected"))

        with pytest.raises(RepositoryException) as exc_info:
            BookingRepository(db).has_overlap(
                ExpertOwner("e-1"), at(MONDAY, "10:00"), at(MONDAY, "11:00")
            )

        assert isinstance(exc_info.value.__cause__, OperationalError)


class TestGetForActor:
    def test_participants_can_read(
        self, db, test_user, test_expert, other_user, expert_service, make_booking
    ):
        booking = make_booking(expert_service, at(MONDAY, "10:00"))
        repo = BookingRepository(db)

        assert repo.get_for_actor(booking.id, test_user.id) is booking
        assert repo.get_for_actor(booking.id, test_expert.id, for_update=True) is booking
        assert repo.get_for_actor(booking.id, other_user.id) is None

    def test_organization_participant(
        self, db, test_organization, organization_service, make_booking
    ):
        booking = make_booking(organization_service, at(MONDAY, "10:00"))
        assert BookingRepository(db).get_for_actor(booking.id, test_organization.id) is booking

    @pytest.mark.parametrize("row_locks", [True, False])
    def test_row_lock_follows_dialect_support(self, row_locks):
        db = MagicMock()
        query = db.query.return_value.filter.return_value

        with patch.object(booking_repository_module, "supports_row_locks", return_value=row_locks):
            BookingRepository(db).get_for_actor("b-1", "u-1", for_update=True)

        assert query.with_for_update.called is row_locks

    def test_shared_read_never_locks(self):
        db = MagicMock()
        query = db.query.return_value.filter.return_value

        with patch.object(booking_repository_module, "supports_row_locks", return_value=True):
            BookingRepository(db).get_for_actor("b-1", "u-1")

        query.with_for_update.assert_not_called()


class TestListings:
    def test_user_bookings_newest_first(
        self, db, test_user, other_user, expert_service, make_booking
    ):
        first = make_booking(expert_service, at(MONDAY, "09:00"))
        second = make_booking(expert_service, at(MONDAY + timedelta(days=7), "09:00"))
        make_booking(expert_service, at(MONDAY, "11:00"), user_id=other_user.id)

        listed = BookingRepository(db).list_for_user(test_user.id)

        assert [b.id for b in listed] == [second.id, first.id]
        assert listed[0].service.title == "Strategy Session"

    def test_provider_bookings(
        self, db, test_expert, other_user, expert_service, organization_service, make_booking
    ):
        mine = make_booking(expert_service, at(MONDAY, "09:00"))
        theirs = make_booking(expert_service, at(MONDAY, "12:00"), user_id=other_user.id)
        make_booking(organization_service, at(MONDAY, "09:00"))

        listed = BookingRepository(db).list_for_provider(ExpertOwner(test_expert.id))

        assert [b.id for b in listed] == [theirs.id, mine.id]

    def test_count_for_service(self, db, expert_service, make_booking):
        make_booking(expert_service, at(MONDAY, "09:00"))
        make_booking(expert_service, at(MONDAY, "09:00"), status=BookingStatus.CANCELLED)

        assert BookingRepository(db).count_for_service(expert_service.id) == 2
