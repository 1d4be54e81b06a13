"""Readiness dashboard scoring and statistics."""
from datetime import datetime

from mastery_tracker.db import get_connection
from mastery_tracker.effort import average_effort as mean_effort

MASTERED_RETENTION = 0.7

ADMISSION = "Admission"
EXPLORATION = "Exploration"
SKILL_ACQUISITION = "Skill Acquisition"
MASTERY = "Mastery"
EXAM_READY = "Ready"


def get_readiness_label(score: float) -> str:
    if score >= 80:
        return "READY"
    elif score >= 65:
        return "LIKELY"
    elif score >= 50:
        return "NEEDS WORK"
    return "NOT READY"


def get_readiness_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 65:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def _mastered_count(record: dict) -> int:
    return sum(1 for m in record.values() if m.retention_score > MASTERED_RETENTION)


def calc_readiness_score(record: dict, catalog, average_effort: float = 0.5) -> int:
    if not record or not len(catalog):
        return 0
    avg_retention = sum(m.retention_score for m in record.values()) / len(record)
    mastered_share = _mastered_count(record) / len(catalog)
    # Weighted: mastered share 50%, retention 30%, effort 20%
    score = mastered_share * 50 + avg_retention * 30 + average_effort * 20
    return min(100, round(score))


def get_lifecycle_stage(record: dict, catalog, average_effort: float = 0.5) -> str:
    mastered = _mastered_count(record)
    rate = mastered / len(catalog) if len(catalog) else 0.0
    if rate > 0.85 and average_effort > 0.8:
        return EXAM_READY
    if rate > 0.6:
        return MASTERY
    if mastered >= 2:
        return SKILL_ACQUISITION
    if mastered >= 1:
        return EXPLORATION
    return ADMISSION


def get_subject_scores(record: dict, catalog, subjects: list) -> list[dict]:
    results = []
    for subject in subjects:
        nodes = catalog.find_nodes_for_subjects([subject])
        practised = [record[n.id] for n in nodes if n.id in record]
        retention = (sum(m.retention_score for m in practised) / len(nodes) * 100) if nodes else 0.0
        results.append({
            "subject": subject,
            "concepts": len(nodes),
            "practised": len(practised),
            "score": round(retention, 1),
            "label": get_readiness_label(retention),
        })
    return results


def get_mastery_stats(db_path: str, learner_id: str, now: datetime | None = None) -> dict:
    if now is None:
        now = datetime.now()
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT retention_score, scheduled_next_review FROM concept_mastery WHERE learner_id = ?",
        (learner_id,),
    ).fetchall()
    events = conn.execute(
        """SELECT COUNT(*) as t, SUM(CASE WHEN outcome = 'correct' THEN 1 ELSE 0 END) as c
        FROM review_events WHERE learner_id = ?""",
        (learner_id,),
    ).fetchone()
    efforts = [r["effort_score"] for r in conn.execute(
        "SELECT effort_score FROM review_events WHERE learner_id = ?", (learner_id,)
    ).fetchall()]
    conn.close()
    avg_retention = round(sum(r["retention_score"] for r in rows) / len(rows) * 100, 1) if rows else 0.0
    accuracy = round(events["c"] / events["t"] * 100, 1) if events["t"] else 0.0
    due = sum(1 for r in rows if datetime.fromisoformat(r["scheduled_next_review"]) <= now)
    return {
        "concepts_practised": len(rows),
        "reviews_logged": events["t"],
        "accuracy": accuracy,
        "avg_retention": avg_retention,
        "average_effort": mean_effort(efforts),
        "due_now": due,
    }
