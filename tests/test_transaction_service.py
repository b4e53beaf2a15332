"""TransactionService behavior against the in-memory collection."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest
from bson import ObjectId

from tests.fakes import FakeCollection
from transaction_service.errors import NotFoundError, StorageError, ValidationError
from transaction_service.models import truncate_to_millis
from transaction_service.services.transaction_service import TransactionService


def _service() -> tuple[TransactionService, FakeCollection]:
    collection = FakeCollection()
    return TransactionService(collection), collection


def test_create_forces_pending_status_and_current_timestamp() -> None:
    service, collection = _service()
    started = truncate_to_millis(datetime.now(timezone.utc))

    created = asyncio.run(
        service.create({"amount": 50, "transaction_type": "deposit", "user": "7", "status": "FAILED"})
    )

    assert created.status == "PENDING"
    assert created.user == 7
    assert created.timestamp >= started
    assert ObjectId.is_valid(created.id)
    assert len(collection.documents) == 1


def test_create_then_get_returns_same_caller_fields() -> None:
    service, _ = _service()

    created = asyncio.run(service.create({"amount": 12.5, "transaction_type": "withdrawal", "user": 3}))
    fetched = asyncio.run(service.get_by_id(created.id))

    assert fetched == created
    assert (fetched.amount, fetched.transaction_type, fetched.user) == (12.5, "withdrawal", 3)


def test_create_rejects_unparseable_user() -> None:
    service, collection = _service()

    with pytest.raises(ValidationError):
        asyncio.run(service.create({"amount": 5, "transaction_type": "deposit", "user": "seven"}))
    assert collection.documents == []


def test_list_by_user_returns_only_that_users_records() -> None:
    service, _ = _service()
    for user in (1, 1, 2, 1):
        asyncio.run(service.create({"amount": 1, "transaction_type": "deposit", "user": user}))

    records = asyncio.run(service.list_by_user("1"))

    assert len(records) == 3
    assert all(record.user == 1 for record in records)


def test_list_by_user_with_no_records_is_empty() -> None:
    service, _ = _service()
    assert asyncio.run(service.list_by_user("99")) == []


@pytest.mark.parametrize("user_id", [None, "", "0", "abc", "1.5"])
def test_list_by_user_rejects_missing_zero_or_invalid_ids(user_id) -> None:
    service, _ = _service()
    with pytest.raises(ValidationError, match="User ID is required and must be an integer"):
        asyncio.run(service.list_by_user(user_id))


def test_get_by_id_missing_and_malformed() -> None:
    service, _ = _service()

    with pytest.raises(NotFoundError):
        asyncio.run(service.get_by_id(str(ObjectId())))
    with pytest.raises(StorageError, match="Error fetching transaction"):
        asyncio.run(service.get_by_id("not-an-object-id"))


def test_update_status_persists_change() -> None:
    service, _ = _service()
    created = asyncio.run(service.create({"amount": 50, "transaction_type": "deposit", "user": 7}))

    updated = asyncio.run(service.update_status(created.id, {"status": "COMPLETED"}))
    fetched = asyncio.run(service.get_by_id(created.id))

    assert updated.status == "COMPLETED"
    assert fetched.status == "COMPLETED"
    assert fetched.timestamp == created.timestamp


def test_update_status_to_same_value_returns_record() -> None:
    service, _ = _service()
    created = asyncio.run(service.create({"amount": 50, "transaction_type": "deposit", "user": 7}))
    asyncio.run(service.update_status(created.id, {"status": "FAILED"}))

    again = asyncio.run(service.update_status(created.id, {"status": "FAILED"}))

    assert again.id == created.id
    assert again.status == "FAILED"


def test_update_status_allows_any_transition_between_terminal_states() -> None:
    service, _ = _service()
    created = asyncio.run(service.create({"amount": 50, "transaction_type": "deposit", "user": 7}))

    for status in ("COMPLETED", "FAILED", "COMPLETED"):
        assert asyncio.run(service.update_status(created.id, {"status": status})).status == status


def test_update_status_unknown_id_is_not_found() -> None:
    service, _ = _service()
    with pytest.raises(NotFoundError):
        asyncio.run(service.update_status(str(ObjectId()), {"status": "COMPLETED"}))


@pytest.mark.parametrize("transaction_id", ["bad-id", "000000000000000000000000"])
def test_update_status_invalid_status_fails_validation_for_any_id(transaction_id) -> None:
    service, _ = _service()
    with pytest.raises(ValidationError, match="Invalid status"):
        asyncio.run(service.update_status(transaction_id, {"status": "PENDING"}))


def test_storage_failures_become_storage_errors() -> None:
    service, collection = _service()
    created = asyncio.run(service.create({"amount": 1, "transaction_type": "deposit", "user": 1}))
    collection.failing = True

    with pytest.raises(StorageError, match="Error creating transaction"):
        asyncio.run(service.create({"amount": 1, "transaction_type": "deposit", "user": 1}))
    with pytest.raises(StorageError, match="Error fetching transactions"):
        asyncio.run(service.list_by_user(1))
    with pytest.raises(StorageError, match="Error fetching transaction"):
        asyncio.run(service.get_by_id(created.id))
    with pytest.raises(StorageError, match="Error updating transaction status"):
        asyncio.run(service.update_status(created.id, {"status": "FAILED"}))


def test_ensure_indexes_and_ping() -> None:
    service, collection = _service()

    asyncio.run(service.ensure_indexes())
    assert collection.indexes == [[("user", 1)]]
    assert asyncio.run(service.ping()) is True

    collection.database.reachable = False
    assert asyncio.run(service.ping()) is False


def test_ensure_indexes_failure_is_not_fatal() -> None:
    service, collection = _service()
    collection.failing = True

    asyncio.run(service.ensure_indexes())

    assert collection.indexes == []


def test_update_status_with_malformed_id_is_a_storage_error() -> None:
    service, _ = _service()
    with pytest.raises(StorageError, match="Error updating transaction status"):
        asyncio.run(service.update_status("not-an-object-id", {"status": "COMPLETED"}))


def test_created_record_matches_stored_record() -> None:
    service, collection = _service()

    created = asyncio.run(service.create({"amount": "50.25", "transaction_type": "deposit", "user": 7}))
    fetched = asyncio.run(service.get_by_id(created.id))
    listed = asyncio.run(service.list_by_user(7))

    assert fetched == created
    assert listed == [created]
    assert created.timestamp.microsecond % 1000 == 0
    assert created.amount == "50.25"
    assert collection.documents[0]["timestamp"] == created.timestamp


def test_out_of_range_user_ids_are_rejected() -> None:
    service, collection = _service()

    with pytest.raises(ValidationError, match="User ID is required and must be an integer"):
        asyncio.run(service.list_by_user("99999999999999999999"))
    with pytest.raises(ValidationError, match="user must be an integer"):
        asyncio.run(
            service.create({"amount": 1, "transaction_type": "deposit", "user": "99999999999999999999"})
        )
    with pytest.raises(ValidationError, match="amount must be numeric"):
        asyncio.run(service.create({"amount": 2 ** 64, "transaction_type": "deposit", "user": 1}))
    assert collection.documents == []
