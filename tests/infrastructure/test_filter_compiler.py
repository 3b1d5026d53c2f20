"""The SQL interpreter must agree with the in-memory one on every row."""

from datetime import timedelta

import pytest

from orderdesk.domain.models import Condition, Field, Op, OrderStatus, Predicate, Tab, predicate_for
from orderdesk.domain.models.core import format_timestamp
from orderdesk.infrastructure.db.filter_compiler import compile_predicate, encode_value


@pytest.fixture
def mixed_orders(seed, order_factory, base_time):
    orders = []
    statuses = list(OrderStatus)
    for i in range(40):
        orders.append(
            order_factory(
                i,
                status=statuses[i % len(statuses)],
                is_read=i % 3 == 0,
                deleted_at=base_time - timedelta(days=i) if i % 5 == 0 else None,
            )
        )
    return seed(orders)


def _sql_ids(pool, predicate):
    where, params = compile_predicate(predicate)
    with pool.connection() as conn:
        rows = conn.execute(f"SELECT id FROM orders WHERE {where}", params).fetchall()
    return {row["id"] for row in rows}


@pytest.mark.parametrize("tab", list(Tab))
def test_tab_predicates_agree(pool, repo, mixed_orders, tab):
    predicate = predicate_for(tab)
    expected = {order.id for order in mixed_orders if predicate.matches(order)}
    assert _sql_ids(pool, predicate) == expected


def test_excluded_and_cutoff_agree(pool, repo, mixed_orders, base_time):
    predicate = predicate_for(Tab.TRASH).excluding(frozenset({"o0005", "o0010"})).deleted_before(
        base_time - timedelta(days=12)
    )
    expected = {order.id for order in mixed_orders if predicate.matches(order)}
    assert expected
    assert _sql_ids(pool, predicate) == expected


def test_null_status_counts_as_new(pool, repo, base_time):
    with pool.connection() as conn:
        conn.execute(
            "INSERT INTO orders (id, created_at, status, is_read) VALUES (?, ?, NULL, 0)",
            ("legacy", format_timestamp(base_time)),
        )
    assert repo.get("legacy").status is OrderStatus.NEW
    new_only = Predicate((Condition(Field.STATUS, Op.EQ, OrderStatus.NEW),))
    assert "legacy" in _sql_ids(pool, new_only)


def test_empty_id_sets():
    assert compile_predicate(Predicate.id_in(set())) == ("(0)", [])
    assert compile_predicate(Predicate().excluding(frozenset())) == ("1", [])


def test_values_are_encoded_like_storage(base_time):
    assert encode_value(True) == 1
    assert encode_value(OrderStatus.DONE) == "done"
    assert encode_value(base_time) == "2024-03-01T12:00:00.000000+00:00"
