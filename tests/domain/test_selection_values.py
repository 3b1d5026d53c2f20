"""Selection variants and target descriptors."""

from datetime import timedelta

from orderdesk.domain.models import (
    EMPTY_SELECTION,
    AllInTabSelection,
    ExplicitSelection,
    Predicate,
    Tab,
    TargetDescriptor,
    predicate_for,
)


def test_explicit_selection_contains_listed_ids():
    selection = ExplicitSelection(frozenset({"a", "b"}))
    assert selection.contains("a")
    assert not selection.contains("c")
    assert not selection.is_empty
    assert EMPTY_SELECTION.is_empty


def test_all_in_tab_contains_everything_but_excluded():
    selection = AllInTabSelection(Tab.TRASH, frozenset({"x"}))
    assert selection.contains("anything")
    assert not selection.contains("x")
    assert not selection.is_empty


def test_all_in_tab_predicate_is_tab_filter_minus_excluded(order_factory, base_time):
    selection = AllInTabSelection(Tab.TRASH, frozenset({"o0001"}))
    predicate = selection.to_predicate()

    assert predicate == predicate_for(Tab.TRASH).excluding(frozenset({"o0001"}))
    assert not predicate.matches(order_factory(1, deleted_at=base_time))
    assert predicate.matches(order_factory(2, deleted_at=base_time))
    assert not predicate.matches(order_factory(3))


def test_pinned_descriptor_targets_only_pinned_ids(order_factory):
    descriptor = TargetDescriptor.of(AllInTabSelection(Tab.UNREAD)).pin({"o0001"})

    assert descriptor.is_pinned
    assert descriptor.to_predicate() == Predicate.id_in({"o0001"})
    # The pinned row still matches after it left the tab
    assert descriptor.to_predicate().matches(order_factory(1, is_read=True))


def test_narrowed_descriptor_adds_conditions(order_factory, base_time):
    cutoff = base_time
    descriptor = TargetDescriptor.of(AllInTabSelection(Tab.TRASH)).narrowed(Predicate().deleted_before(cutoff))
    predicate = descriptor.to_predicate()

    assert predicate.matches(order_factory(1, deleted_at=cutoff - timedelta(days=40)))
    assert not predicate.matches(order_factory(2, deleted_at=cutoff + timedelta(days=1)))


def test_selections_are_values():
    assert ExplicitSelection(frozenset({"a"})) == ExplicitSelection(frozenset({"a"}))
    assert AllInTabSelection(Tab.ALL) != AllInTabSelection(Tab.DONE)
