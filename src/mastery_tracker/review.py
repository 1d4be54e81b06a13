"""Prerequisite gating, weak concept detection and study recommendations."""
from datetime import datetime

from mastery_tracker.scheduling import get_due_concepts

LOCKED = "Locked"
READY = "Ready"
REVIEW = "Review"
MASTERED = "Mastered"

MASTERED_THRESHOLD = 0.8
REVIEW_THRESHOLD = 0.4
UNLOCK_THRESHOLD = 0.6


def get_node_status(record: dict, catalog, concept_id: str) -> str:
    """Status of one concept for a learner.

    A concept is Locked until every prerequisite has been practised and holds
    a retention of at least 0.6. Practised concepts report Mastered or Review
    when their own retention is past those thresholds.
    """
    node = catalog.get_node(concept_id)
    mastery = record.get(concept_id)
    if mastery and mastery.retention_score > MASTERED_THRESHOLD:
        return MASTERED
    if mastery and mastery.retention_score < REVIEW_THRESHOLD:
        return REVIEW
    for pre_id in node.prerequisites:
        pre = record.get(pre_id)
        if pre is None or pre.retention_score < UNLOCK_THRESHOLD:
            return LOCKED
    return READY


def is_unlocked(record: dict, catalog, concept_id: str) -> bool:
    return get_node_status(record, catalog, concept_id) != LOCKED


def get_curriculum_map(record: dict, catalog, nodes=None) -> list[dict]:
    """Status row for every node, in catalog order."""
    if nodes is None:
        nodes = list(catalog)
    rows = []
    for node in nodes:
        mastery = record.get(node.id)
        rows.append({
            "concept_id": node.id,
            "topic": node.topic,
            "subject": node.subject,
            "difficulty": node.difficulty,
            "status": get_node_status(record, catalog, node.id),
            "retention_score": mastery.retention_score if mastery else None,
            "adaptive_level": mastery.adaptive_level if mastery else None,
        })
    return rows


def get_unlockable_concepts(record: dict, catalog) -> list:
    """Nodes the learner has not practised yet whose prerequisites are satisfied."""
    return [
        n for n in catalog
        if n.id not in record and get_node_status(record, catalog, n.id) == READY
    ]


def get_weak_concepts(record: dict, threshold: float = REVIEW_THRESHOLD) -> list[dict]:
    """Practised concepts with retention below threshold (weakest first)."""
    weak = [m for m in record.values() if m.retention_score < threshold]
    weak.sort(key=lambda m: (m.retention_score, m.concept_id))
    return [
        {
            "concept_id": m.concept_id,
            "topic": m.topic,
            "retention_score": m.retention_score,
            "reviews": len(m.review_history),
            "errors": sum(1 for e in m.review_history if e.outcome == "wrong"),
        }
        for m in weak
    ]


def get_next_focus(record: dict, catalog, now: datetime, nodes=None) -> tuple:
    """Pick the single concept the learner should work on next.

    Returns a (ConceptNode, status) pair, or None when there are no nodes
    to choose from. Concepts needing review come first, then concepts due
    under the review schedule, then the most important Ready concept, then
    the first Locked one.
    """
    if nodes is None:
        nodes = list(catalog)
    if not nodes:
        return None
    allowed = {n.id for n in nodes}
    statuses = [(n, get_node_status(record, catalog, n.id)) for n in nodes]

    for node, status in statuses:
        if status == REVIEW:
            return node, status

    due = [m for m in get_due_concepts(record, catalog, now) if m.concept_id in allowed]
    if due:
        node = catalog.get_node(due[0].concept_id)
        return node, get_node_status(record, catalog, node.id)

    ready = [(n, s) for n, s in statuses if s == READY]
    if ready:
        ready.sort(key=lambda pair: -pair[0].importance_score)
        return ready[0]

    for node, status in statuses:
        if status == LOCKED:
            return node, status
    return nodes[0], get_node_status(record, catalog, nodes[0].id)
