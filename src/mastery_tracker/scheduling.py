"""Spaced repetition interval policy and due-date helpers."""
from datetime import datetime, timedelta

from mastery_tracker.models import CORRECT, ConceptMastery, ConceptNode

MIN_GROWTH = 1.8
MAX_GROWTH = 2.5
MAX_LEVEL = 5


def growth_factor(adaptive_level: int) -> float:
    """Interval multiplier for a correct review, 1.8 at level 1 up to 2.5 at level 5."""
    level = max(1, min(MAX_LEVEL, adaptive_level))
    step = (MAX_GROWTH - MIN_GROWTH) / (MAX_LEVEL - 1)
    return round(MIN_GROWTH + (level - 1) * step, 3)


def next_interval(interval: float, outcome: str, adaptive_level: int) -> float:
    """Calculate the next spacing interval in days.

    A correct review stretches the interval by the growth factor for the
    concept's adaptive level. A wrong review resets it to one day.
    """
    if outcome == CORRECT:
        return round(interval * growth_factor(adaptive_level), 2)
    return 1.0


def next_review_date(last_reviewed: datetime, interval: float) -> datetime:
    return last_reviewed + timedelta(days=interval)


def is_due(mastery: ConceptMastery, now: datetime) -> bool:
    return mastery.scheduled_next_review <= now


def overdue_days(mastery: ConceptMastery, now: datetime) -> float:
    delta = now - mastery.scheduled_next_review
    return max(0.0, delta.total_seconds() / 86400)


def review_priority(mastery: ConceptMastery, node: ConceptNode, now: datetime) -> float:
    """Higher means review sooner.

    Weak, important concepts rank first; being overdue by a whole interval
    adds one full point on top.
    """
    weakness = node.importance_score * (1 - mastery.retention_score)
    overdue_ratio = overdue_days(mastery, now) / max(mastery.interval, 1.0)
    return round(weakness + overdue_ratio, 4)


def get_due_concepts(record: dict, catalog, now: datetime) -> list:
    """Mastery entries that are due at ``now``, highest priority first.

    Entries whose concept is no longer in the catalog are skipped.
    """
    due = []
    for concept_id, mastery in record.items():
        if concept_id not in catalog or not is_due(mastery, now):
            continue
        node = catalog.get_node(concept_id)
        due.append((review_priority(mastery, node, now), mastery))
    due.sort(key=lambda pair: (-pair[0], pair[1].scheduled_next_review))
    return [mastery for _, mastery in due]
