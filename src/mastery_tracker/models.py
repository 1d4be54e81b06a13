"""Data classes for the mastery domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4

CORRECT = "correct"
WRONG = "wrong"
OUTCOMES = (CORRECT, WRONG)

DIFFICULTIES = ("easy", "medium", "hard")

NATURAL_SCIENCE = "Natural Science"
SOCIAL_SCIENCE = "Social Science"


@dataclass(frozen=True)
class ConceptNode:
    id: str
    subject: str
    topic: str
    difficulty: str = "medium"
    prerequisites: frozenset = frozenset()
    importance_score: float = 0.5
    description: str = ""


@dataclass(frozen=True)
class ReviewEvent:
    date: datetime
    outcome: str
    effort_score: float
    event_id: str = field(default_factory=lambda: uuid4().hex)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "date": self.date.isoformat(),
            "outcome": self.outcome,
            "effort_score": self.effort_score,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReviewEvent":
        return cls(
            date=datetime.fromisoformat(data["date"]),
            outcome=data["outcome"],
            effort_score=data["effort_score"],
            event_id=data.get("event_id") or uuid4().hex,
        )


@dataclass
class ConceptMastery:
    concept_id: str
    topic: str
    last_reviewed: datetime
    scheduled_next_review: datetime
    difficulty: str = "medium"
    retention_score: float = 0.5
    interval: float = 1.0  # days
    adaptive_level: int = 1
    review_history: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "concept_id": self.concept_id,
            "topic": self.topic,
            "difficulty": self.difficulty,
            "retention_score": self.retention_score,
            "last_reviewed": self.last_reviewed.isoformat(),
            "scheduled_next_review": self.scheduled_next_review.isoformat(),
            "interval": self.interval,
            "adaptive_level": self.adaptive_level,
            "review_history": [e.to_dict() for e in self.review_history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConceptMastery":
        return cls(
            concept_id=data["concept_id"],
            topic=data["topic"],
            difficulty=data.get("difficulty", "medium"),
            retention_score=data["retention_score"],
            last_reviewed=datetime.fromisoformat(data["last_reviewed"]),
            scheduled_next_review=datetime.fromisoformat(data["scheduled_next_review"]),
            interval=data["interval"],
            adaptive_level=data["adaptive_level"],
            review_history=[ReviewEvent.from_dict(e) for e in data.get("review_history", [])],
        )


@dataclass
class Learner:
    id: str
    name: str
    track: str
    created_at: Optional[str] = None
