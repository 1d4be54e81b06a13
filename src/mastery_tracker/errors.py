"""Exception types raised by the mastery tracker."""


class MasteryError(Exception):
    """Base class for all mastery tracker errors."""


class InvalidOutcomeError(MasteryError, ValueError):
    def __init__(self, outcome):
        super().__init__(f"invalid outcome tag: {outcome!r}")
        self.outcome = outcome


class InvalidEffortError(MasteryError, ValueError):
    def __init__(self, effort_score):
        super().__init__(f"effort score must be within [0, 1], got {effort_score!r}")
        self.effort_score = effort_score


class UnknownConceptError(MasteryError, LookupError):
    def __init__(self, concept_id: str):
        super().__init__(f"unknown concept id: {concept_id!r}")
        self.concept_id = concept_id


class UnknownTrackError(MasteryError, LookupError):
    def __init__(self, track: str):
        super().__init__(f"unknown track: {track!r}")
        self.track = track


class UnknownLearnerError(MasteryError, LookupError):
    def __init__(self, learner_id: str):
        super().__init__(f"unknown learner: {learner_id!r}")
        self.learner_id = learner_id


class CatalogError(MasteryError):
    """The curriculum catalog is malformed (bad field, dangling prerequisite, cycle)."""


class StaleSnapshotError(MasteryError):
    def __init__(self, learner_id: str, concept_id: str):
        super().__init__(f"a newer mastery snapshot is already stored for {learner_id}/{concept_id}")
        self.learner_id = learner_id
        self.concept_id = concept_id
