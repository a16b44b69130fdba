# backend/digital_offices/auth.py
"""
Access-token handling.

Tokens are issued by the external auth service. This backend verifies the
signature and reads two claims: the account id (``sub``, or ``id`` for
older tokens) and the ``role``. ``create_access_token`` mints tokens in the
same shape for local tooling and the test-suite.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi.security import OAuth2PasswordBearer
import jwt

from .core.config import settings

logger = logging.getLogger(__name__)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode an access token.

    Raises:
        jwt.PyJWTError: If the signature, expiry or format is invalid
    """
    payload_raw = jwt.decode(
        token,
        _secret_value(settings.secret_key),
        algorithms=[settings.algorithm],
        options={"verify_aud": False},
    )
    return cast(Dict[str, Any], payload_raw)


def token_subject(payload: Dict[str, Any]) -> Optional[str]:
    """The account id carried by a decoded token."""
    subject = payload.get("sub") or payload.get("id")
    return str(subject) if subject else None


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed access token.

    Args:
        data: Claims to encode; expected to hold ``sub`` and ``role``
        expires_delta: Optional lifetime, defaults to the configured one
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return cast(
        str,
        jwt.encode(to_encode, _secret_value(settings.secret_key), algorithm=settings.algorithm),
    )
