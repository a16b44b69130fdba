# backend/digital_offices/repositories/account_repository.py
"""
Account repositories for the four identity tables.

Every role has the same lookup capability against its own table.
``get_account_repository`` picks the one for a role; the role set is
closed, so an unknown role is a programming error.
"""

import logging
from typing import Any, Dict, Optional, Type, Union, cast

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import RoleName
from ..core.exceptions import RepositoryException
from ..models.account import Admin, Expert, Organization, User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

Account = Union[User, Expert, Organization, Admin]


class AccountRepository(BaseRepository[Any]):
    """Lookups shared by all identity tables."""

    role: RoleName

    def find_by_id(self, account_id: Optional[str]) -> Optional[Account]:
        if not account_id:
            return None
        return cast(Optional[Account], self.get_by_id(str(account_id)))

    def find_by_email(self, email: str) -> Optional[Account]:
        """Case-insensitive email lookup."""
        try:
            return cast(
                Optional[Account],
                self.db.query(self.model)
                .filter(func.lower(self.model.email) == email.strip().lower())
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.role.value} by email: {str(e)}")
            raise RepositoryException(f"Failed to look up account: {str(e)}")


class UserRepository(AccountRepository):
    role = RoleName.USER

    def __init__(self, db: Session):
        super().__init__(db, User)


class ExpertRepository(AccountRepository):
    role = RoleName.EXPERT

    def __init__(self, db: Session):
        super().__init__(db, Expert)


class OrganizationRepository(AccountRepository):
    role = RoleName.ORGANIZATION

    def __init__(self, db: Session):
        super().__init__(db, Organization)


class AdminRepository(AccountRepository):
    role = RoleName.ADMIN

    def __init__(self, db: Session):
        super().__init__(db, Admin)


_REPOSITORIES_BY_ROLE: Dict[RoleName, Type[AccountRepository]] = {
    RoleName.USER: UserRepository,
    RoleName.EXPERT: ExpertRepository,
    RoleName.ORGANIZATION: OrganizationRepository,
    RoleName.ADMIN: AdminRepository,
}


def get_account_repository(db: Session, role: Union[RoleName, str]) -> AccountRepository:
    """
    Return the account repository for ``role``.

    Raises:
        ValueError: If ``role`` is not one of the known roles
    """
    return _REPOSITORIES_BY_ROLE[RoleName(role)](db)
