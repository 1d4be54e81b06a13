"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = str(Path.home() / ".mastery_tracker" / "mastery.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS learners (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    track TEXT NOT NULL,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS concept_mastery (
    learner_id TEXT NOT NULL REFERENCES learners(id),
    concept_id TEXT NOT NULL,
    topic TEXT NOT NULL,
    difficulty TEXT DEFAULT 'medium',
    retention_score REAL DEFAULT 0.5,
    last_reviewed TEXT NOT NULL,
    scheduled_next_review TEXT NOT NULL,
    interval REAL DEFAULT 1.0,
    adaptive_level INTEGER DEFAULT 1,
    PRIMARY KEY (learner_id, concept_id)
);

CREATE TABLE IF NOT EXISTS review_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    learner_id TEXT NOT NULL REFERENCES learners(id),
    concept_id TEXT NOT NULL,
    event_id TEXT NOT NULL UNIQUE,
    reviewed_at TEXT NOT NULL,
    outcome TEXT NOT NULL,
    effort_score REAL NOT NULL
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()

