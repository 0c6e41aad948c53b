from typing import Optional, Sequence

from ..models.domain import RoundResult, SessionSummary
from .geo import round_half_up
from .scoring import MAX_SCORE, session_performance


def average_distance(results: Sequence[RoundResult], include_timeouts: bool = True) -> float:
    """
    Mean distance over a set of rounds, rounded to the nearest kilometer.

    Args:
        results: Round outcomes in any order
        include_timeouts: When False, rounds that ended on the timer are left
            out so their sentinel distance does not skew the mean

    Returns:
        Average distance in kilometers, 0 when there is nothing to average
    """
    distances = [r.distance_km for r in results if include_timeouts or not r.timed_out]
    if not distances:
        return 0.0
    return float(round_half_up(sum(distances) / len(distances)))


def best_round(results: Sequence[RoundResult]) -> Optional[RoundResult]:
    """Highest scoring round; the earliest one wins a tie."""
    best = None
    for result in results:
        if best is None or result.score > best.score:
            best = result
    return best


def accuracy_percent(total_score: int, total_rounds: int) -> float:
    """Share of the maximum attainable score, as a percentage."""
    if total_rounds <= 0:
        return 0.0
    return total_score / (total_rounds * MAX_SCORE) * 100


def summarize(
    results: Sequence[RoundResult],
    total_rounds: int,
    include_timeouts: bool = True,
) -> SessionSummary:
    """Build the final-screen summary for a sequence of rounds."""
    total_score = sum(r.score for r in results)
    accuracy = accuracy_percent(total_score, total_rounds)
    return SessionSummary(
        total_score=total_score,
        total_rounds=total_rounds,
        rounds_played=len(results),
        average_distance_km=average_distance(results, include_timeouts=include_timeouts),
        best_round=best_round(results),
        accuracy_percent=accuracy,
        timed_out_rounds=sum(1 for r in results if r.timed_out),
        performance=session_performance(accuracy),
    )
