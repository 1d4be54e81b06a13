from datetime import datetime

import pytest

from mastery_tracker.catalog import Catalog, get_default_catalog
from mastery_tracker.db import init_db
from mastery_tracker.models import NATURAL_SCIENCE, ConceptNode
from mastery_tracker.store import create_learner


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_mastery.db")
    return db_path


@pytest.fixture
def learner_db(tmp_db):
    """Initialized database with one Natural Science learner called 'ada'."""
    init_db(tmp_db)
    create_learner(tmp_db, "ada", "Ada", NATURAL_SCIENCE)
    return tmp_db


@pytest.fixture
def now():
    return datetime(2026, 3, 2, 9, 30)


@pytest.fixture
def catalog():
    return get_default_catalog()


@pytest.fixture
def small_catalog():
    return Catalog((
        ConceptNode(id="a", subject="Mathematics", topic="Limits", importance_score=0.9),
        ConceptNode(id="b", subject="Mathematics", topic="Derivatives",
                    prerequisites=frozenset({"a"}), importance_score=0.6),
    ))
