"""Tab filter predicates evaluated in memory."""

from datetime import timedelta

import pytest

from orderdesk.domain.models import (
    Condition,
    Field,
    Op,
    OrderStatus,
    Predicate,
    Tab,
    predicate_for,
    tabs_of,
)


def test_all_tab_excludes_trashed(order_factory, base_time):
    active = order_factory(1)
    trashed = order_factory(2, deleted_at=base_time)

    assert predicate_for(Tab.ALL).matches(active)
    assert not predicate_for(Tab.ALL).matches(trashed)
    assert predicate_for(Tab.TRASH).matches(trashed)
    assert not predicate_for(Tab.TRASH).matches(active)


@pytest.mark.parametrize(
    "tab, status",
    [
        (Tab.IN_PROGRESS, OrderStatus.IN_PROGRESS),
        (Tab.DONE, OrderStatus.DONE),
        (Tab.ARCHIVED, OrderStatus.ARCHIVED),
    ],
)
def test_status_tabs(order_factory, base_time, tab, status):
    assert predicate_for(tab).matches(order_factory(1, status=status))
    assert not predicate_for(tab).matches(order_factory(2, status=OrderStatus.NEW))
    assert not predicate_for(tab).matches(order_factory(3, status=status, deleted_at=base_time))


def test_unread_tab(order_factory, base_time):
    assert predicate_for(Tab.UNREAD).matches(order_factory(1, is_read=False))
    assert not predicate_for(Tab.UNREAD).matches(order_factory(2, is_read=True))
    assert not predicate_for(Tab.UNREAD).matches(order_factory(3, deleted_at=base_time))


def test_predicate_for_accepts_string():
    assert predicate_for("trash") == predicate_for(Tab.TRASH)


def test_tabs_of_lists_every_matching_tab(order_factory, base_time):
    order = order_factory(1, status=OrderStatus.DONE, is_read=False)
    assert tabs_of(order) == (Tab.ALL, Tab.UNREAD, Tab.DONE)
    assert tabs_of(order_factory(2, deleted_at=base_time)) == (Tab.TRASH,)


def test_trash_is_disjoint_from_other_tabs(order_factory, base_time):
    orders = [
        order_factory(i, status=status, is_read=bool(i % 2), deleted_at=base_time if i % 3 == 0 else None)
        for i, status in enumerate(list(OrderStatus) * 3)
    ]
    for order in orders:
        tabs = tabs_of(order)
        if Tab.TRASH in tabs:
            assert tabs == (Tab.TRASH,)
        else:
            assert Tab.ALL in tabs


def test_unknown_status_reads_as_new(order_factory):
    order = order_factory(1)
    order.status = OrderStatus.coerce("bogus")
    assert order.status is OrderStatus.NEW
    assert OrderStatus.coerce(None) is OrderStatus.NEW


def test_excluding_and_id_in(order_factory):
    a, b = order_factory(1), order_factory(2)
    predicate = predicate_for(Tab.ALL).excluding(frozenset({a.id}))
    assert not predicate.matches(a)
    assert predicate.matches(b)
    assert predicate_for(Tab.ALL).excluding(frozenset()) == predicate_for(Tab.ALL)
    assert Predicate.id_in({b.id}).matches(b)
    assert not Predicate.id_in(set()).matches(b)


def test_deleted_before_ignores_active_rows(order_factory, base_time):
    cutoff = base_time
    old = order_factory(1, deleted_at=base_time - timedelta(days=31))
    recent = order_factory(2, deleted_at=base_time + timedelta(minutes=1))
    active = order_factory(3)
    predicate = Predicate().deleted_before(cutoff)

    assert predicate.matches(old)
    assert not predicate.matches(recent)
    assert not predicate.matches(active)


def test_empty_predicate_matches_everything(order_factory):
    assert Predicate().matches(order_factory(1))


def test_condition_freezes_in_values():
    condition = Condition(Field.ID, Op.IN, ["a", "b", "a"])
    assert condition.value == frozenset({"a", "b"})
