# backend/tests/core/test_provider_lock.py
"""
Redis provider mutex and Postgres advisory lock tests.

Redis is replaced by a MagicMock; nothing here needs a running server.
"""

from unittest.mock import MagicMock, patch

import pytest

from digital_offices.core import provider_lock as provider_lock_module
from digital_offices.core.config import settings
from digital_offices.core.provider_lock import (
    acquire_advisory_xact_lock,
    acquire_provider_lock,
    provider_lock,
)
from digital_offices.domain.owner import ExpertOwner

OWNER = ExpertOwner("expert-1")
MUTEX_KEY = "provider:expert:expert-1:booking-mutex"


@pytest.fixture
def lock_enabled(monkeypatch):
    monkeypatch.setattr(settings, "provider_lock_enabled", True)


@pytest.fixture
def fake_redis(monkeypatch):
    client = MagicMock()
    client.set.return_value = True
    client.delete.return_value = 1
    monkeypatch.setattr(provider_lock_module, "_get_sync_redis", lambda: client)
    return client


def test_disabled_lock_runs_unguarded(monkeypatch):
    monkeypatch.setattr(settings, "provider_lock_enabled", False)
    get_redis = MagicMock()
    monkeypatch.setattr(provider_lock_module, "_get_sync_redis", get_redis)

    with provider_lock(OWNER) as acquired:
        assert acquired is True

    get_redis.assert_not_called()


def test_acquire_and_release(lock_enabled, fake_redis):
    with provider_lock(OWNER, ttl_s=12) as acquired:
        assert acquired is True
        fake_redis.delete.assert_not_called()

    args, kwargs = fake_redis.set.call_args
    assert args[0] == MUTEX_KEY
    assert kwargs == {"nx": True, "ex": 12}
    fake_redis.delete.assert_called_once_with(MUTEX_KEY)


def test_held_lock_is_released_when_block_raises(lock_enabled, fake_redis):
    with pytest.raises(RuntimeError):
        with provider_lock(OWNER):
            raise RuntimeError("boom")

    fake_redis.delete.assert_called_once_with(MUTEX_KEY)


def test_busy_lock_yields_false_after_waiting(lock_enabled, fake_redis):
    fake_redis.set.return_value = False

    with provider_lock(OWNER, wait_s=0) as acquired:
        assert acquired is False

    # Someone else's lock must not be deleted
    fake_redis.delete.assert_not_called()


def test_lock_freed_while_waiting_is_taken(lock_enabled, fake_redis):
    fake_redis.set.side_effect = [False, False, True]

    with provider_lock(OWNER, wait_s=5) as acquired:
        assert acquired is True

    assert fake_redis.set.call_count == 3


def test_fails_open_without_redis(lock_enabled, monkeypatch):
    monkeypatch.setattr(provider_lock_module, "_get_sync_redis", lambda: None)

    assert acquire_provider_lock(OWNER) is True
    with provider_lock(OWNER) as acquired:
        assert acquired is True


def test_fails_open_on_redis_error(lock_enabled, fake_redis):
    fake_redis.set.side_effect = ConnectionError("redis went away")

    assert acquire_provider_lock(OWNER) is True


def test_default_ttl_comes_from_settings(lock_enabled, fake_redis):
    acquire_provider_lock(OWNER)
    assert fake_redis.set.call_args.kwargs["ex"] == settings.provider_lock_ttl_seconds


class TestAdvisoryLock:
    def test_noop_on_sqlite(self, db):
        assert acquire_advisory_xact_lock(db, OWNER) is False

    def test_postgres_takes_transaction_lock(self):
        session = MagicMock()
        with patch.object(provider_lock_module, "get_dialect_name", return_value="postgresql"):
            assert acquire_advisory_xact_lock(session, OWNER) is True

        statement, params = session.execute.call_args.args
        assert "pg_advisory_xact_lock" in str(statement)
        assert params == {"key": "expert:expert-1"}
