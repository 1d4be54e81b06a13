"""Persistence of learners and their mastery records."""
from datetime import datetime

from loguru import logger

from mastery_tracker.catalog import get_default_catalog, get_subjects_for_track
from mastery_tracker.db import get_connection
from mastery_tracker.effort import average_effort
from mastery_tracker.errors import StaleSnapshotError, UnknownLearnerError
from mastery_tracker.mastery import record_outcome
from mastery_tracker.models import ConceptMastery, Learner, ReviewEvent


def create_learner(db_path: str, learner_id: str, name: str, track: str) -> Learner:
    get_subjects_for_track(track)  # rejects unknown tracks
    created_at = datetime.now().isoformat()
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO learners (id, name, track, created_at) VALUES (?, ?, ?, ?)"
        " ON CONFLICT(id) DO UPDATE SET name=excluded.name, track=excluded.track",
        (learner_id, name, track, created_at),
    )
    conn.commit()
    conn.close()
    logger.info(f"Saved learner {learner_id} ({track})")
    return get_learner(db_path, learner_id)


def get_learner(db_path: str, learner_id: str) -> Learner:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM learners WHERE id = ?", (learner_id,)).fetchone()
    conn.close()
    if row is None:
        raise UnknownLearnerError(learner_id)
    return Learner(id=row["id"], name=row["name"], track=row["track"], created_at=row["created_at"])


def learner_exists(db_path: str, learner_id: str) -> bool:
    conn = get_connection(db_path)
    row = conn.execute("SELECT 1 FROM learners WHERE id = ?", (learner_id,)).fetchone()
    conn.close()
    return row is not None


def _timestamp(value: datetime) -> str:
    """Stored form of a timestamp: naive local time with fixed microsecond precision.

    Aware values are converted to local time first so that stored strings
    sort in time order.
    """
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value.isoformat(timespec="microseconds")


def _row_to_mastery(row, events: list) -> ConceptMastery:
    return ConceptMastery(
        concept_id=row["concept_id"],
        topic=row["topic"],
        difficulty=row["difficulty"],
        retention_score=row["retention_score"],
        last_reviewed=datetime.fromisoformat(row["last_reviewed"]),
        scheduled_next_review=datetime.fromisoformat(row["scheduled_next_review"]),
        interval=row["interval"],
        adaptive_level=row["adaptive_level"],
        review_history=[
            ReviewEvent(
                date=datetime.fromisoformat(e["reviewed_at"]),
                outcome=e["outcome"],
                effort_score=e["effort_score"],
                event_id=e["event_id"],
            )
            for e in events
        ],
    )


def get_mastery(db_path: str, learner_id: str, concept_id: str) -> ConceptMastery | None:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM concept_mastery WHERE learner_id = ? AND concept_id = ?",
        (learner_id, concept_id),
    ).fetchone()
    if row is None:
        conn.close()
        return None
    events = conn.execute(
        "SELECT * FROM review_events WHERE learner_id = ? AND concept_id = ? ORDER BY reviewed_at, id",
        (learner_id, concept_id),
    ).fetchall()
    conn.close()
    return _row_to_mastery(row, events)


def get_mastery_record(db_path: str, learner_id: str) -> dict:
    """Full concept_id -> ConceptMastery mapping for a learner."""
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM concept_mastery WHERE learner_id = ? ORDER BY concept_id", (learner_id,)
    ).fetchall()
    events = conn.execute(
        "SELECT * FROM review_events WHERE learner_id = ? ORDER BY concept_id, reviewed_at, id", (learner_id,)
    ).fetchall()
    conn.close()
    by_concept = {}
    for e in events:
        by_concept.setdefault(e["concept_id"], []).append(e)
    return {r["concept_id"]: _row_to_mastery(r, by_concept.get(r["concept_id"], [])) for r in rows}


def save_mastery(db_path: str, learner_id: str, mastery: ConceptMastery) -> bool:
    """Persist a mastery snapshot. Returns False when a newer one is already stored.

    Writes are last-write-wins on ``last_reviewed``. Review events are only
    ever appended and are matched by ``event_id``, so events another writer
    stored first are kept and this snapshot's own events are added next to them.
    """
    conn = get_connection(db_path)
    cur = conn.execute(
        """INSERT INTO concept_mastery
        (learner_id, concept_id, topic, difficulty, retention_score, last_reviewed,
         scheduled_next_review, interval, adaptive_level)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(learner_id, concept_id) DO UPDATE SET
            retention_score=excluded.retention_score,
            last_reviewed=excluded.last_reviewed,
            scheduled_next_review=excluded.scheduled_next_review,
            interval=excluded.interval,
            adaptive_level=excluded.adaptive_level
        WHERE excluded.last_reviewed >= concept_mastery.last_reviewed""",
        (
            learner_id, mastery.concept_id, mastery.topic, mastery.difficulty,
            mastery.retention_score, _timestamp(mastery.last_reviewed),
            _timestamp(mastery.scheduled_next_review), mastery.interval, mastery.adaptive_level,
        ),
    )
    if cur.rowcount == 0:
        conn.close()
        logger.warning(f"Stale mastery snapshot for {learner_id}/{mastery.concept_id} ignored")
        return False
    for event in mastery.review_history:
        conn.execute(
            """INSERT OR IGNORE INTO review_events
            (learner_id, concept_id, event_id, reviewed_at, outcome, effort_score)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (learner_id, mastery.concept_id, event.event_id, _timestamp(event.date), event.outcome, event.effort_score),
        )
    conn.commit()
    conn.close()
    return True


def record_practice(
    db_path: str,
    learner_id: str,
    concept_id: str,
    outcome: str,
    effort_score: float,
    catalog=None,
    now: datetime | None = None,
) -> ConceptMastery:
    """Grade one practice event against the catalog and persist the result.

    Raises StaleSnapshotError when the event is older than the stored
    mastery, which is then left unchanged.
    """
    if catalog is None:
        catalog = get_default_catalog()
    node = catalog.get_node(concept_id)
    get_learner(db_path, learner_id)
    current = get_mastery(db_path, learner_id, concept_id)
    updated = record_outcome(
        current, node.id, node.topic, outcome, effort_score,
        difficulty=node.difficulty, now=now,
    )
    if not save_mastery(db_path, learner_id, updated):
        raise StaleSnapshotError(learner_id, concept_id)
    logger.info(
        f"{learner_id} {concept_id}: {outcome} (effort {effort_score:.2f}) -> "
        f"retention {updated.retention_score:.2f}, level {updated.adaptive_level}, "
        f"next review {updated.scheduled_next_review:%Y-%m-%d}"
    )
    return updated


def get_average_effort(db_path: str, learner_id: str) -> float:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT effort_score FROM review_events WHERE learner_id = ?", (learner_id,)
    ).fetchall()
    conn.close()
    return average_effort([r["effort_score"] for r in rows])


def reset_learner(db_path: str, learner_id: str) -> None:
    """Delete all mastery state and review events for a learner."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM review_events WHERE learner_id = ?", (learner_id,))
    conn.execute("DELETE FROM concept_mastery WHERE learner_id = ?", (learner_id,))
    conn.commit()
    conn.close()
    logger.info(f"Reset mastery for {learner_id}")
