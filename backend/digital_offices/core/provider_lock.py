"""
Per-provider serialization for booking creation.

Two layers work together. A Redis mutex keyed by provider keeps concurrent
requests from piling onto the database; it fails open when Redis is down.
Inside the transaction a Postgres advisory lock serializes the availability
and overlap reads, and the exclusion constraint on ``bookings`` catches
anything that slips past both.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
import time
from typing import Iterator, Optional

from redis import Redis
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..database.session_utils import get_dialect_name
from ..domain.owner import Owner, lock_key
from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()
_POLL_INTERVAL_SECONDS = 0.05


def _mutex_key(owner: Owner) -> str:
    return f"provider:{lock_key(owner)}:booking-mutex"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=1,
            )
            client.ping()
        except Exception as exc:
            logger.warning("provider_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def acquire_provider_lock(owner: Owner, ttl_s: Optional[int] = None) -> bool:
    ttl = ttl_s or settings.provider_lock_ttl_seconds
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_provider_lock("acquire", "redis_unavailable")
        logger.warning("provider_lock_redis_unavailable", extra={"provider": lock_key(owner)})
        return True
    try:
        acquired = bool(client.set(_mutex_key(owner), str(time.time()), nx=True, ex=ttl))
        prometheus_metrics.record_provider_lock("acquire", "success" if acquired else "blocked")
        return acquired
    except Exception as exc:
        prometheus_metrics.record_provider_lock("acquire", "error")
        logger.warning(
            "provider_lock_acquire_failed",
            extra={
                "provider": lock_key(owner),
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
        return True


def release_provider_lock(owner: Owner) -> None:
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_provider_lock("release", "redis_unavailable")
        return
    try:
        deleted = client.delete(_mutex_key(owner))
        prometheus_metrics.record_provider_lock("release", "success" if deleted else "not_found")
    except Exception as exc:
        prometheus_metrics.record_provider_lock("release", "error")
        logger.warning(
            "provider_lock_release_failed",
            extra={
                "provider": lock_key(owner),
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )


@contextmanager
def provider_lock(
    owner: Owner, ttl_s: Optional[int] = None, wait_s: Optional[float] = None
) -> Iterator[bool]:
    """
    Hold the Redis mutex for ``owner`` for the duration of the block.

    Polls for up to ``wait_s`` seconds while another request holds it, then
    yields whether the mutex was acquired. When disabled in settings the
    block runs unguarded and ``True`` is yielded.
    """
    if not settings.provider_lock_enabled:
        yield True
        return
    wait = settings.provider_lock_wait_seconds if wait_s is None else wait_s
    deadline = time.monotonic() + wait
    acquired = acquire_provider_lock(owner, ttl_s=ttl_s)
    while not acquired and time.monotonic() < deadline:
        time.sleep(_POLL_INTERVAL_SECONDS)
        acquired = acquire_provider_lock(owner, ttl_s=ttl_s)
    try:
        yield acquired
    finally:
        if acquired:
            release_provider_lock(owner)


def acquire_advisory_xact_lock(db: Session, owner: Owner) -> bool:
    """
    Take a transaction-scoped Postgres advisory lock for ``owner``.

    Released automatically on commit or rollback. Returns False without
    doing anything on dialects that have no advisory locks.
    """
    if get_dialect_name(db) != "postgresql":
        return False
    db.execute(
        text("SELECT pg_advisory_xact_lock(hashtextextended(:key, 0))"),
        {"key": lock_key(owner)},
    )
    return True
