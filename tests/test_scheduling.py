from datetime import timedelta

import pytest

from mastery_tracker.mastery import new_mastery
from mastery_tracker.scheduling import (
    get_due_concepts, growth_factor, is_due, next_interval, next_review_date,
    overdue_days, review_priority,
)


def test_growth_factor_range():
    assert growth_factor(1) == pytest.approx(1.8)
    assert growth_factor(3) == pytest.approx(2.15)
    assert growth_factor(5) == pytest.approx(2.5)


def test_growth_factor_clamps_level():
    assert growth_factor(0) == growth_factor(1)
    assert growth_factor(9) == growth_factor(5)


def test_correct_stretches_interval():
    assert next_interval(4.0, "correct", 1) == pytest.approx(7.2)
    assert next_interval(4.0, "correct", 5) == pytest.approx(10.0)


def test_wrong_resets_interval():
    assert next_interval(30.0, "wrong", 5) == 1.0


def test_next_review_date(now):
    assert next_review_date(now, 2.5) == now + timedelta(days=2, hours=12)


def test_is_due(now):
    m = new_mastery("a", "Limits", now)
    assert not is_due(m, now)
    assert is_due(m, now + timedelta(days=1))
    assert overdue_days(m, now) == 0.0
    assert overdue_days(m, now + timedelta(days=3)) == pytest.approx(2.0)


def test_review_priority_weights_weakness_and_lateness(small_catalog, now):
    node = small_catalog.get_node("a")
    m = new_mastery("a", "Limits", now)
    m.retention_score = 0.5
    on_time = review_priority(m, node, now + timedelta(days=1))
    late = review_priority(m, node, now + timedelta(days=2))
    assert on_time == pytest.approx(0.45)
    assert late == pytest.approx(1.45)


def test_get_due_concepts_orders_by_priority(small_catalog, now):
    strong = new_mastery("a", "Limits", now)
    strong.retention_score = 0.9
    weak = new_mastery("b", "Derivatives", now)
    weak.retention_score = 0.1
    record = {"a": strong, "b": weak}
    assert get_due_concepts(record, small_catalog, now) == []
    due = get_due_concepts(record, small_catalog, now + timedelta(days=1))
    assert [m.concept_id for m in due] == ["b", "a"]


def test_get_due_concepts_skips_concepts_missing_from_catalog(small_catalog, now):
    record = {"retired": new_mastery("retired", "Old topic", now)}
    assert get_due_concepts(record, small_catalog, now + timedelta(days=5)) == []
