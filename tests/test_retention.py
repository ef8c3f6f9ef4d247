"""Tests for cap enforcement, age sweeps and purges."""

from __future__ import annotations

from datetime import timedelta

import pytest

from embed_gate.repositories.sql_repo import SqlGateRepository
from embed_gate.services.retention import RetentionManager
from tests.factories import FakeClock

ADDRESS = "203.0.113.7"
OTHER = "198.51.100.1"


@pytest.fixture()
def manager(repository: SqlGateRepository, clock: FakeClock) -> RetentionManager:
    return RetentionManager(repository, cap=100, max_age=timedelta(days=7), clock=clock)


def _insert_series(
    repository: SqlGateRepository, clock: FakeClock, address: str, count: int
) -> list[int]:
    ids = []
    for index in range(count):
        ids.append(repository.insert_message(address, f"{index:064x}", clock()))
        clock.advance(seconds=1)
    return ids


def test_enforce_cap_keeps_most_recent(
    manager: RetentionManager, repository: SqlGateRepository, clock: FakeClock
) -> None:
    ids = _insert_series(repository, clock, ADDRESS, 101)

    assert manager.enforce_cap(ADDRESS) == 1
    remaining = repository.list_message_ids(ADDRESS)
    assert len(remaining) == 100
    assert ids[0] not in remaining
    assert remaining == ids[1:]


def test_enforce_cap_is_idempotent(
    manager: RetentionManager, repository: SqlGateRepository, clock: FakeClock
) -> None:
    _insert_series(repository, clock, ADDRESS, 105)
    assert manager.enforce_cap(ADDRESS) == 5
    assert manager.enforce_cap(ADDRESS) == 0
    assert repository.count_messages(ADDRESS) == 100


def test_enforce_cap_is_per_address(
    manager: RetentionManager, repository: SqlGateRepository, clock: FakeClock
) -> None:
    _insert_series(repository, clock, ADDRESS, 3)
    _insert_series(repository, clock, OTHER, 3)
    assert manager.enforce_cap(ADDRESS, cap=1) == 2
    assert repository.count_messages(ADDRESS) == 1
    assert repository.count_messages(OTHER) == 3


def test_enforce_cap_breaks_timestamp_ties_by_insert_order(
    manager: RetentionManager, repository: SqlGateRepository, clock: FakeClock
) -> None:
    ids = [repository.insert_message(ADDRESS, "a" * 64, clock()) for _ in range(3)]
    manager.enforce_cap(ADDRESS, cap=2)
    assert repository.list_message_ids(ADDRESS) == ids[1:]


def test_sweep_removes_only_expired(
    manager: RetentionManager, repository: SqlGateRepository, clock: FakeClock
) -> None:
    now = clock()
    repository.insert_message(ADDRESS, "a" * 64, now - timedelta(days=8))
    fresh = repository.insert_message(OTHER, "b" * 64, now - timedelta(days=6))

    assert manager.sweep_expired() == 1
    assert repository.list_message_ids(ADDRESS) == []
    assert repository.list_message_ids(OTHER) == [fresh]


def test_sweep_with_explicit_max_age(
    manager: RetentionManager, repository: SqlGateRepository, clock: FakeClock
) -> None:
    repository.insert_message(ADDRESS, "a" * 64, clock() - timedelta(hours=2))
    assert manager.sweep_expired(timedelta(hours=1)) == 1


def test_purge_recent_deletes_newest(
    manager: RetentionManager, repository: SqlGateRepository, clock: FakeClock
) -> None:
    ids = _insert_series(repository, clock, ADDRESS, 8)
    assert manager.purge_recent(ADDRESS, 5) == 5
    assert repository.list_message_ids(ADDRESS) == ids[:3]


def test_purge_recent_with_zero_limit(
    manager: RetentionManager, repository: SqlGateRepository, clock: FakeClock
) -> None:
    _insert_series(repository, clock, ADDRESS, 2)
    assert manager.purge_recent(ADDRESS, 0) == 0
    assert repository.count_messages(ADDRESS) == 2
