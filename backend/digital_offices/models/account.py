# backend/digital_offices/models/account.py
"""
Account models for the Digital Offices platform.

Identity is partitioned by role into four tables. Registration, login and
profile management live in the auth service; this backend only needs the
rows as foreign-key targets and to confirm that an authenticated actor
still exists.

Classes:
    User: Client who books services
    Expert: Individual provider with a weekly schedule
    Organization: Company provider without a weekly schedule
    Admin: Platform operator
"""

import logging

from sqlalchemy import Column, String

from ..database import Base
from .types import TimestampMixin, new_uuid

logger = logging.getLogger(__name__)


class AccountMixin(TimestampMixin):
    """Columns shared by every identity table."""

    id = Column(String(36), primary_key=True, default=new_uuid)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id} {self.email}>"


class User(AccountMixin, Base):
    __tablename__ = "users"


class Expert(AccountMixin, Base):
    __tablename__ = "experts"


class Organization(AccountMixin, Base):
    __tablename__ = "organizations"

    # Organizations present a company name rather than a person's name.
    company_name = Column(String(255), nullable=True)


class Admin(AccountMixin, Base):
    __tablename__ = "admins"
