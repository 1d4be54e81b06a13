from datetime import timedelta

import pytest

from mastery_tracker.errors import InvalidEffortError, InvalidOutcomeError
from mastery_tracker.mastery import apply_decay, new_mastery, project_retention, record_outcome
from mastery_tracker.scheduling import growth_factor


def test_first_correct_high_effort(now):
    m = record_outcome(None, "phy_newton_laws", "Newtonian Dynamics", "correct", 0.9, now=now)
    assert m.retention_score == pytest.approx(0.6)
    assert m.adaptive_level == 2
    assert len(m.review_history) == 1
    assert m.last_reviewed == now


def test_first_wrong_low_effort(now):
    m = record_outcome(None, "phy_newton_laws", "Newtonian Dynamics", "wrong", 0.2, now=now)
    assert m.retention_score == pytest.approx(0.35)
    assert m.adaptive_level == 1
    assert len(m.review_history) == 1


def test_three_wrong_from_default(now):
    m = None
    for i in range(3):
        m = record_outcome(m, "a", "Limits", "wrong", 0.5, now=now + timedelta(hours=i))
    assert m.retention_score == pytest.approx(0.05)


def test_new_record_copies_identity_fields(now):
    m = record_outcome(None, "chem_bonding", "Covalent Synthesis", "correct", 0.5, difficulty="hard", now=now)
    assert m.concept_id == "chem_bonding"
    assert m.topic == "Covalent Synthesis"
    assert m.difficulty == "hard"


def test_correct_answers_never_decrease_retention_and_cap_at_one(now):
    m = None
    previous = 0.0
    for i in range(12):
        m = record_outcome(m, "a", "Limits", "correct", 0.4, now=now + timedelta(days=i))
        assert m.retention_score >= previous
        assert m.retention_score <= 1.0
        previous = m.retention_score
    assert m.retention_score == pytest.approx(1.0)


def test_wrong_answers_never_increase_retention_and_floor_at_zero(now):
    m = None
    previous = 1.0
    for i in range(6):
        m = record_outcome(m, "a", "Limits", "wrong", 0.9, now=now + timedelta(days=i))
        assert m.retention_score <= previous
        assert m.retention_score >= 0.0
        previous = m.retention_score
    assert m.retention_score == 0.0


def test_history_is_append_only(now):
    m = None
    outcomes = ["correct", "wrong", "correct", "correct", "wrong"]
    for i, outcome in enumerate(outcomes):
        m = record_outcome(m, "a", "Limits", outcome, 0.5, now=now + timedelta(hours=i))
        assert len(m.review_history) == i + 1
    assert [e.outcome for e in m.review_history] == outcomes
    assert m.review_history[0].date == now


def test_adaptive_level_ratchets_within_bounds(now):
    m = None
    levels = []
    sequence = [("correct", 0.9)] * 7 + [("wrong", 0.1)] * 4 + [("correct", 0.2)]
    for i, (outcome, effort) in enumerate(sequence):
        m = record_outcome(m, "a", "Limits", outcome, effort, now=now + timedelta(hours=i))
        levels.append(m.adaptive_level)
    assert levels == sorted(levels)
    assert min(levels) >= 1
    assert max(levels) == 5


def test_level_requires_effort_above_threshold(now):
    m = record_outcome(None, "a", "Limits", "correct", 0.7, now=now)
    assert m.adaptive_level == 1
    m = record_outcome(m, "a", "Limits", "correct", 0.71, now=now)
    assert m.adaptive_level == 2


def test_identical_fresh_calls_are_reproducible(now):
    first = record_outcome(None, "a", "Limits", "correct", 0.8, now=now)
    second = record_outcome(None, "a", "Limits", "correct", 0.8, now=now)
    assert first.retention_score == second.retention_score
    assert first.adaptive_level == second.adaptive_level
    assert first.review_history is not second.review_history


def test_back_to_back_calls_log_two_events(now):
    m = record_outcome(None, "a", "Limits", "correct", 0.8, now=now)
    m = record_outcome(m, "a", "Limits", "correct", 0.8, now=now)
    assert len(m.review_history) == 2


def test_input_record_is_not_mutated(now):
    original = record_outcome(None, "a", "Limits", "correct", 0.5, now=now)
    updated = record_outcome(original, "a", "Limits", "wrong", 0.5, now=now + timedelta(days=1))
    assert original.retention_score == pytest.approx(0.6)
    assert len(original.review_history) == 1
    assert updated.retention_score == pytest.approx(0.45)
    assert len(updated.review_history) == 2


def test_correct_answer_grows_interval(now):
    m = record_outcome(None, "a", "Limits", "correct", 0.9, now=now)
    assert m.interval == pytest.approx(growth_factor(2), abs=0.01)
    assert m.scheduled_next_review == now + timedelta(days=m.interval)


def test_wrong_answer_resets_interval(now):
    m = None
    for i in range(4):
        m = record_outcome(m, "a", "Limits", "correct", 0.5, now=now + timedelta(days=i))
    assert m.interval > 5
    later = now + timedelta(days=10)
    m = record_outcome(m, "a", "Limits", "wrong", 0.5, now=later)
    assert m.interval == 1.0
    assert m.scheduled_next_review == later + timedelta(days=1)


def test_interval_keeps_growing_with_streak(now):
    m = None
    intervals = []
    for i in range(5):
        m = record_outcome(m, "a", "Limits", "correct", 0.5, now=now + timedelta(days=i))
        intervals.append(m.interval)
    assert intervals == sorted(intervals)
    assert intervals[0] < intervals[-1]


@pytest.mark.parametrize("outcome", ["right", "CORRECT", "", None])
def test_invalid_outcome_rejected(now, outcome):
    with pytest.raises(InvalidOutcomeError, match="invalid outcome tag"):
        record_outcome(None, "a", "Limits", outcome, 0.5, now=now)


@pytest.mark.parametrize("effort", [-0.1, 1.01, float("nan"), "0.5", None, True])
def test_invalid_effort_rejected(now, effort):
    with pytest.raises(InvalidEffortError):
        record_outcome(None, "a", "Limits", "correct", effort, now=now)


def test_validation_errors_are_value_errors(now):
    with pytest.raises(ValueError):
        record_outcome(None, "a", "Limits", "maybe", 0.5, now=now)


def test_effort_bounds_are_inclusive(now):
    record_outcome(None, "a", "Limits", "correct", 0.0, now=now)
    record_outcome(None, "a", "Limits", "correct", 1.0, now=now)
    record_outcome(None, "a", "Limits", "correct", 1, now=now)


def test_new_mastery_defaults(now):
    m = new_mastery("a", "Limits", now)
    assert m.retention_score == 0.5
    assert m.interval == 1.0
    assert m.adaptive_level == 1
    assert m.scheduled_next_review == now + timedelta(days=1)
    assert m.review_history == []


def test_project_retention_decays_with_time(now):
    m = record_outcome(None, "a", "Limits", "wrong", 0.5, now=now)
    assert m.interval == 1.0
    assert project_retention(m, now) == pytest.approx(0.35)
    assert project_retention(m, now + timedelta(days=4)) == pytest.approx(0.15)
    assert project_retention(m, now + timedelta(days=40)) == 0.0


def test_apply_decay_leaves_stored_record_alone(now):
    m = record_outcome(None, "a", "Limits", "correct", 0.5, now=now)
    record = {"a": m}
    decayed = apply_decay(record, now + timedelta(days=30))
    assert decayed["a"].retention_score < m.retention_score
    assert record["a"].retention_score == pytest.approx(0.6)
