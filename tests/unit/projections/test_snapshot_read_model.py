"""Tests for the snapshot read model."""

import pytest

from foldkit.domain import KernelError, UnsupportedOperation
from foldkit.projections import ReadModel, SnapshotReadModel
from foldkit.stores import Snapshot
from tests.fixtures.user_app import UserNameChanged, UserRegistered


@pytest.fixture
def read_model(snapshot_store, user_definition) -> SnapshotReadModel:
    return SnapshotReadModel(snapshot_store, user_definition)


def test_is_a_read_model(read_model):
    assert isinstance(read_model, ReadModel)
    assert read_model.is_initialized()


def test_stacked_events_are_persisted_as_snapshot(read_model, snapshot_store):
    read_model.stack(
        "apply",
        UserRegistered(payload={"id": "1", "name": "Alex"}),
        UserNameChanged(payload={"id": "1", "name": "Sascha"}),
    )
    read_model.persist()

    snapshot = snapshot_store.get("user", "1")
    assert snapshot.last_version == 2
    assert snapshot.aggregate_root == {"id": "1", "name": "Sascha", "version": 2}


def test_nothing_is_saved_before_persist(read_model, snapshot_store):
    read_model.stack("apply", UserRegistered(payload={"id": "1", "name": "Alex"}))
    assert snapshot_store.get("user", "1") is None


def test_one_snapshot_per_aggregate(read_model, snapshot_store):
    read_model.stack(
        "apply",
        UserRegistered(payload={"id": "1", "name": "Alex"}),
        UserRegistered(payload={"id": "2", "name": "Robin"}),
    )
    read_model.persist()

    assert snapshot_store.get("user", "1").aggregate_root["name"] == "Alex"
    assert snapshot_store.get("user", "2").aggregate_root["name"] == "Robin"


def test_folding_continues_from_stored_snapshot(read_model, snapshot_store):
    snapshot_store.save(Snapshot("user", "1", {"id": "1", "name": "Alex", "version": 1}, 1))

    read_model.stack("apply", UserNameChanged(payload={"id": "1", "name": "Sascha"}))
    read_model.persist()

    assert snapshot_store.get("user", "1").last_version == 2


def test_batches_are_independent(read_model, snapshot_store):
    read_model.stack("apply", UserRegistered(payload={"id": "1", "name": "Alex"}))
    read_model.persist()
    read_model.stack("apply", UserNameChanged(payload={"id": "1", "name": "Sascha"}))
    read_model.persist()

    assert snapshot_store.get("user", "1").aggregate_root == {
        "id": "1",
        "name": "Sascha",
        "version": 2,
    }


def test_stack_rejects_non_messages(read_model):
    with pytest.raises(TypeError, match="SnapshotReadModel"):
        read_model.stack("apply", {"id": "1"})


@pytest.mark.parametrize("operation", ["init", "reset", "delete"])
def test_lifecycle_operations_are_not_supported(read_model, operation):
    with pytest.raises(UnsupportedOperation) as exc_info:
        getattr(read_model, operation)()

    assert exc_info.value.operation == operation
    assert isinstance(exc_info.value, KernelError)
