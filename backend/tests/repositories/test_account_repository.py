# backend/tests/repositories/test_account_repository.py
"""
Role dispatch for the account repositories.
"""

import pytest

from digital_offices.core.enums import RoleName
from digital_offices.models.account import Admin, Expert, Organization, User
from digital_offices.repositories.account_repository import (
    AccountRepository,
    ExpertRepository,
    get_account_repository,
)
from digital_offices.repositories.factory import RepositoryFactory


@pytest.mark.parametrize(
    "role,model",
    [
        (RoleName.USER, User),
        (RoleName.EXPERT, Expert),
        (RoleName.ORGANIZATION, Organization),
        (RoleName.ADMIN, Admin),
    ],
)
def test_each_role_maps_to_its_table(db, role, model):
    repo = get_account_repository(db, role)

    assert isinstance(repo, AccountRepository)
    assert repo.role is role
    assert repo.model is model


def test_role_may_be_given_as_string(db):
    assert isinstance(RepositoryFactory.create_account_repository(db, "expert"), ExpertRepository)


def test_unknown_role_is_rejected(db):
    with pytest.raises(ValueError):
        get_account_repository(db, "superuser")


def test_lookup_is_confined_to_the_role_table(db, test_expert):
    assert get_account_repository(db, RoleName.EXPERT).find_by_id(test_expert.id) is test_expert
    assert get_account_repository(db, RoleName.USER).find_by_id(test_expert.id) is None


def test_find_by_id_without_id(db):
    assert get_account_repository(db, RoleName.USER).find_by_id(None) is None
    assert get_account_repository(db, RoleName.USER).find_by_id("") is None


def test_find_by_email_ignores_case(db, test_organization):
    repo = get_account_repository(db, RoleName.ORGANIZATION)

    found = repo.find_by_email(f"  {test_organization.email.upper()} ")

    assert found is test_organization
    assert repo.find_by_email("nobody@example.com") is None


def test_update_through_role_repository(db, test_user):
    repo = get_account_repository(db, RoleName.USER)

    updated = repo.update(test_user.id, name="Casey Renamed")

    assert updated is test_user
    assert repo.find_by_id(test_user.id).name == "Casey Renamed"
    assert repo.update("00000000-0000-0000-0000-000000000000", name="Nobody") is None
