"""Mastery update algorithm."""
import math
from dataclasses import replace
from datetime import datetime, timedelta
from numbers import Real

from loguru import logger

from mastery_tracker.errors import InvalidEffortError, InvalidOutcomeError
from mastery_tracker.models import CORRECT, OUTCOMES, ConceptMastery, ReviewEvent
from mastery_tracker.scheduling import MAX_LEVEL, next_interval, next_review_date

INITIAL_RETENTION = 0.5
INITIAL_INTERVAL = 1.0
INITIAL_LEVEL = 1

CORRECT_GAIN = 0.1
# Forgetting costs more than a correct answer earns
WRONG_PENALTY = 0.15
LEVEL_UP_EFFORT = 0.7

DECAY_RATE = 0.1


def validate_event(outcome: str, effort_score: float) -> None:
    if outcome not in OUTCOMES:
        raise InvalidOutcomeError(outcome)
    if (
        isinstance(effort_score, bool)
        or not isinstance(effort_score, Real)
        or math.isnan(effort_score)
        or not 0.0 <= effort_score <= 1.0
    ):
        raise InvalidEffortError(effort_score)


def new_mastery(concept_id: str, topic: str, now: datetime, difficulty: str = "medium") -> ConceptMastery:
    return ConceptMastery(
        concept_id=concept_id,
        topic=topic,
        difficulty=difficulty,
        retention_score=INITIAL_RETENTION,
        last_reviewed=now,
        scheduled_next_review=now + timedelta(days=INITIAL_INTERVAL),
        interval=INITIAL_INTERVAL,
        adaptive_level=INITIAL_LEVEL,
    )


def record_outcome(
    current: ConceptMastery | None,
    concept_id: str,
    topic: str,
    outcome: str,
    effort_score: float,
    difficulty: str = "medium",
    now: datetime | None = None,
) -> ConceptMastery:
    """Apply one graded practice event and return the next mastery state.

    Args:
        current: Existing mastery for the concept, or None on first practice
        concept_id: Catalog id of the concept
        topic: Display topic, used only when creating a new record
        outcome: "correct" or "wrong"
        effort_score: Engagement quality in [0, 1]
        difficulty: Difficulty copied onto a new record
        now: Event time, defaults to the current time

    Returns:
        A new ConceptMastery. ``current`` is left untouched.

    Raises:
        InvalidOutcomeError: outcome is not a known tag
        InvalidEffortError: effort_score is not a number in [0, 1]
    """
    validate_event(outcome, effort_score)
    if now is None:
        now = datetime.now()
    if current is None:
        logger.debug(f"Initializing mastery for {concept_id}")
        current = new_mastery(concept_id, topic, now, difficulty)

    history = list(current.review_history)
    history.append(ReviewEvent(date=now, outcome=outcome, effort_score=effort_score))

    retention = current.retention_score
    level = current.adaptive_level
    if outcome == CORRECT:
        retention = min(1.0, retention + CORRECT_GAIN)
        if effort_score > LEVEL_UP_EFFORT:
            level = min(MAX_LEVEL, level + 1)
    else:
        retention = max(0.0, retention - WRONG_PENALTY)

    interval = next_interval(current.interval, outcome, level)
    return replace(
        current,
        retention_score=round(retention, 4),
        adaptive_level=level,
        interval=interval,
        last_reviewed=now,
        scheduled_next_review=next_review_date(now, interval),
        review_history=history,
    )


def project_retention(mastery: ConceptMastery, now: datetime) -> float:
    """Retention after forgetting since the last review.

    Loses 0.1 for every two intervals that pass without practice.
    """
    days_since = max(0.0, (now - mastery.last_reviewed).total_seconds() / 86400)
    decay = (days_since / (max(mastery.interval, 1.0) * 2)) * DECAY_RATE
    return round(max(0.0, mastery.retention_score - decay), 4)


def apply_decay(record: dict, now: datetime) -> dict:
    """Copy of a mastery record with every retention score projected to ``now``."""
    return {
        concept_id: replace(m, retention_score=project_retention(m, now))
        for concept_id, m in record.items()
    }
