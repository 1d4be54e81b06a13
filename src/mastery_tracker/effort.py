"""Effort scoring for a single question attempt."""


def compute_effort(time_spent_seconds: float, revision_count: int, is_correct: bool) -> float:
    """Turn raw behavioural signals into an effort score.

    Args:
        time_spent_seconds: Time between showing the question and the final answer
        revision_count: Number of times the learner changed their answer
        is_correct: Whether the final answer was right

    Returns:
        Effort score clamped to [0, 1]. Adjustments are additive.
    """
    if time_spent_seconds < 0:
        raise ValueError(f"time_spent_seconds must be non-negative, got {time_spent_seconds}")
    if revision_count < 0:
        raise ValueError(f"revision_count must be non-negative, got {revision_count}")

    score = 0.5
    if time_spent_seconds > 20:
        score += 0.2
    if time_spent_seconds < 5:
        # Fast answers look like guesses
        score -= 0.3
    if revision_count > 0:
        score += 0.15
    if is_correct and time_spent_seconds > 10:
        score += 0.1
    return round(max(0.0, min(1.0, score)), 2)


def average_effort(scores: list) -> float:
    """Mean of a list of effort scores, 0.5 when there is nothing to average."""
    if not scores:
        return 0.5
    return round(sum(scores) / len(scores), 2)
