from unittest.mock import Mock

import pytest

from orderdesk.application.services.bulk_mutation_executor import BulkMutationExecutor
from orderdesk.application.services.undo_manager import UndoManager
from orderdesk.domain.models import (
    AllInTabSelection,
    ExplicitSelection,
    OrderPatch,
    OrderQuery,
    OrderStatus,
    Predicate,
    Tab,
    TargetDescriptor,
)
from orderdesk.errors import TransportError, ValidationError


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def test_undo_of_trash_restores_exactly_the_original_set(repo, seed, order_factory, base_time, clock):
    seed([order_factory(i) for i in range(1, 6)] + [order_factory(9, deleted_at=base_time)])
    executor = BulkMutationExecutor(repo)
    undo = UndoManager(executor, clock=clock)

    selection = AllInTabSelection(Tab.ALL, frozenset({"o0005"}))
    result = executor.apply(selection, OrderPatch.soft_delete(base_time))
    undo.capture(result.descriptor, OrderPatch.restore())

    # Someone edits a trashed row before the undo
    repo.bulk_patch(Predicate.id_in({"o0002"}), OrderPatch.set_status(OrderStatus.DONE))

    restored = undo.commit()

    assert restored.affected_ids == {"o0001", "o0002", "o0003", "o0004"}
    trash = {o.id for o in repo.find_by_query(OrderQuery.for_tab(Tab.TRASH))}
    assert trash == {"o0009"}
    assert repo.get("o0002").status is OrderStatus.DONE
    assert not undo.available


def test_undo_of_mark_read_targets_rows_that_left_unread(repo, seed, order_factory, clock):
    seed(order_factory(i) for i in range(3))
    executor = BulkMutationExecutor(repo)
    undo = UndoManager(executor, clock=clock)

    result = executor.apply(AllInTabSelection(Tab.UNREAD), OrderPatch.mark_read(True))
    undo.capture(result.descriptor, OrderPatch.mark_read(False))
    undo.commit()

    assert repo.count(OrderQuery.for_tab(Tab.UNREAD)) == 3


def test_snapshot_expires_after_window(clock):
    undo = UndoManager(Mock(), window_sec=10.0, clock=clock)
    undo.capture(TargetDescriptor.of(ExplicitSelection(frozenset({"a"}))).pin({"a"}), OrderPatch.restore())

    clock.now += 9.5
    assert undo.available
    assert undo.seconds_left() == pytest.approx(0.5)

    clock.now += 0.5
    assert not undo.available
    with pytest.raises(ValidationError):
        undo.commit()


def test_capture_replaces_previous_snapshot(clock):
    undo = UndoManager(Mock(), clock=clock)
    descriptor = TargetDescriptor.of(ExplicitSelection(frozenset({"a"}))).pin({"a"})
    first = undo.capture(descriptor, OrderPatch.restore(), label="first")
    second = undo.capture(descriptor, OrderPatch.mark_read(False), label="second")

    assert undo.current is second
    with pytest.raises(ValidationError):
        undo.commit(first)


def test_failed_commit_keeps_snapshot(clock):
    executor = Mock()
    executor.apply.side_effect = TransportError("offline")
    undo = UndoManager(executor, clock=clock)
    undo.capture(TargetDescriptor.of(ExplicitSelection(frozenset({"a"}))).pin({"a"}), OrderPatch.restore())

    with pytest.raises(TransportError):
        undo.commit()
    assert undo.available


def test_discard(clock):
    undo = UndoManager(Mock(), clock=clock)
    undo.capture(TargetDescriptor.of(ExplicitSelection(frozenset({"a"}))).pin({"a"}), OrderPatch.restore())
    undo.discard()
    assert undo.current is None
    assert undo.seconds_left() == 0.0
