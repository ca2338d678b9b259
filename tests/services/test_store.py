"""Tests for the SQLAlchemy-backed daily code store."""

import datetime as dt

import pytest
from sqlalchemy.exc import OperationalError

from daily_code.core.codes import encode
from daily_code.services.errors import (
    ConfigurationSaveError,
    StorageUnavailableError,
    TransientCollisionError,
)

DAY = dt.date(2026, 3, 10)


def _disk_error() -> OperationalError:
    return OperationalError("COMMIT", {}, Exception("disk I/O error"))


def test_empty_store(store):
    assert store.get_for_date(DAY) is None
    assert store.max_sequence_index() is None
    assert store.count() == 0
    assert store.get_policy() is None


def test_insert_and_read_back(store):
    row = store.insert(DAY, encode(1), 1, "front-desk")
    assert row.id is not None
    assert row.created_at is not None

    found = store.get_for_date(DAY)
    assert found is not None
    assert (found.code, found.sequence_index, found.created_by) == ("AAA24", 1, "front-desk")
    assert store.max_sequence_index() == 1
    assert store.count() == 1


def test_insert_same_date_collides(store):
    store.insert(DAY, encode(1), 1)
    with pytest.raises(TransientCollisionError):
        store.insert(DAY, encode(2), 2)
    # The session stays usable and the original row is untouched.
    assert store.get_for_date(DAY).sequence_index == 1
    assert store.count() == 1


def test_insert_same_index_collides(store):
    store.insert(DAY, encode(5), 5)
    with pytest.raises(TransientCollisionError):
        store.insert(DAY + dt.timedelta(days=1), encode(5), 5)


def test_codes_may_repeat_across_dates(store):
    store.insert(DAY, encode(3), 3)
    store.insert(DAY + dt.timedelta(days=1), encode(3 + 774144), 3 + 774144)
    assert store.count() == 2


def test_upsert_replaces_todays_row(store):
    store.insert(DAY, encode(1), 1)
    row = store.upsert_for_date(DAY, encode(2), 2, "manual")
    assert (row.code, row.sequence_index, row.created_by) == ("AAA25", 2, "manual")
    assert store.count() == 1
    assert store.max_sequence_index() == 2


def test_upsert_creates_missing_row(store):
    row = store.upsert_for_date(DAY, encode(9), 9)
    assert row.civil_date == DAY
    assert store.count() == 1


def test_commit_failure_is_storage_unavailable(store, mocker):
    mocker.patch.object(store.db, "commit", side_effect=_disk_error())
    with pytest.raises(StorageUnavailableError) as excinfo:
        store.insert(DAY, encode(1), 1)
    assert not isinstance(excinfo.value, TransientCollisionError)


def test_read_failure_is_storage_unavailable(store, mocker):
    mocker.patch.object(store.db, "scalars", side_effect=_disk_error())
    with pytest.raises(StorageUnavailableError):
        store.get_for_date(DAY)


def test_save_policy_upserts_single_row(store):
    first = store.save_policy(6, 30)
    second = store.save_policy(8, 15)
    assert first.id == second.id == 1
    policy = store.get_policy()
    assert (policy.reset_hour, policy.reset_minute) == (8, 15)


def test_save_policy_failure(store, mocker):
    mocker.patch.object(store.db, "commit", side_effect=_disk_error())
    with pytest.raises(ConfigurationSaveError):
        store.save_policy(9, 0)


def test_refresh_failure_after_insert_is_storage_unavailable(store, mocker):
    mocker.patch.object(store.db, "refresh", side_effect=_disk_error())
    with pytest.raises(StorageUnavailableError):
        store.insert(DAY, encode(1), 1)


def test_refresh_failure_after_upsert_is_storage_unavailable(store, mocker):
    store.insert(DAY, encode(1), 1)
    mocker.patch.object(store.db, "refresh", side_effect=_disk_error())
    with pytest.raises(StorageUnavailableError):
        store.upsert_for_date(DAY, encode(2), 2)


def test_refresh_failure_after_policy_save(store, mocker):
    mocker.patch.object(store.db, "refresh", side_effect=_disk_error())
    with pytest.raises(ConfigurationSaveError):
        store.save_policy(9, 0)


def test_upsert_stamps_new_issue_time(store, mocker):
    store.insert(DAY, encode(1), 1)
    reissued = dt.datetime(2026, 3, 10, 15, 0, tzinfo=dt.UTC)
    mocker.patch("daily_code.services.store.utcnow", return_value=reissued)

    row = store.upsert_for_date(DAY, encode(2), 2, "manual")

    # SQLite hands timestamps back without tzinfo.
    assert row.created_at.replace(tzinfo=None) == reissued.replace(tzinfo=None)
