# backend/digital_offices/api/dependencies/auth.py
"""
Authentication and role dependencies.

``get_current_actor`` turns a bearer token into an ``Actor`` after checking
that the account still exists in the table for its role. Routes then narrow
access with ``require_roles``.
"""

from dataclasses import dataclass
import logging
from typing import Any, Callable, Optional

from fastapi import Depends, HTTPException, status
import jwt
from sqlalchemy.orm import Session

from ...auth import decode_access_token, oauth2_scheme_optional, token_subject
from ...core.enums import PROVIDER_ROLES, RoleName
from ...domain.owner import Owner, ProviderType, make_owner
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """The authenticated caller."""

    id: str
    role: RoleName
    account: Any = None

    @property
    def is_provider(self) -> bool:
        return self.role in PROVIDER_ROLES

    def as_owner(self) -> Owner:
        """The caller as a service/booking owner; only valid for providers."""
        if not self.is_provider:
            raise ValueError(f"Role {self.role.value} does not own services")
        return make_owner(ProviderType(self.role.value), self.id)


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_actor(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> Actor:
    """
    Resolve the caller from the Authorization header.

    Raises:
        HTTPException: 401 when the token is missing or invalid, or the
            account no longer exists
    """
    if not token:
        raise _credentials_exception("Not authenticated")
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as e:
        logger.warning(f"JWT validation error: {str(e)}")
        raise _credentials_exception()

    subject = token_subject(payload)
    try:
        role = RoleName(payload.get("role"))
    except ValueError:
        role = None
    if subject is None or role is None:
        logger.warning("Token payload missing subject or role")
        raise _credentials_exception()

    account = RepositoryFactory.create_account_repository(db, role).find_by_id(subject)
    if account is None:
        logger.warning(f"Token subject {subject} not found for role {role.value}")
        raise _credentials_exception()

    return Actor(id=subject, role=role, account=account)


def require_roles(*roles: RoleName) -> Callable[..., Actor]:
    """
    Dependency factory restricting a route to the given roles.

    Usage:
        actor: Actor = Depends(require_roles(RoleName.USER))
    """
    allowed = frozenset(roles)

    def checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return actor

    return checker


get_current_user = require_roles(RoleName.USER)
get_current_expert = require_roles(RoleName.EXPERT)
get_current_provider = require_roles(RoleName.EXPERT, RoleName.ORGANIZATION)
get_booking_participant = require_roles(
    RoleName.USER, RoleName.EXPERT, RoleName.ORGANIZATION
)
