from typing import List, Tuple

from ..models.domain import PerformanceLabel, PerformanceTier
from .geo import round_half_up

MAX_SCORE = 5000
# Maximum meaningful distance on Earth, in kilometers
MAX_DISTANCE_KM = 20000.0
# Anything closer than this (but not exactly on target) keeps 99%
NEAR_MISS_KM = 1.0

# (minimum percentage, tier, message), checked top to bottom
ROUND_LABELS: List[Tuple[float, str, str]] = [
    (95, "incredible", "🎯 Incredible! Almost perfect!"),
    (85, "excellent", "🌟 Excellent guess!"),
    (70, "great", "👍 Great job!"),
    (50, "good", "👌 Good effort!"),
    (30, "not-bad", "🤔 Not bad!"),
    (0, "keep-trying", "💪 Keep trying!"),
]

SESSION_TIERS: List[Tuple[float, str, str]] = [
    (90, "Legendary", "You're a geography master!"),
    (75, "Excellent", "Impressive knowledge of the world!"),
    (60, "Great", "You know your way around!"),
    (40, "Good", "Nice effort, keep exploring!"),
    (0, "Keep Learning", "Every explorer starts somewhere!"),
]


def calculate_score(distance_km: float, max_points: int = MAX_SCORE) -> int:
    """
    Calculate score based on distance from actual location.

    Scoring system (quadratic decay):
    - Exact guess (0 km): max_points
    - Under 1 km: 99% of max_points
    - Otherwise: max_points * (1 - d / 20000)^2, reaching 0 at 20000 km

    Args:
        distance_km: Distance in kilometers
        max_points: Maximum possible points

    Returns:
        Score (0 to max_points)
    """
    if distance_km <= 0:
        return max_points
    elif distance_km < NEAR_MISS_KM:
        return round_half_up(max_points * 0.99)

    normalized = min(distance_km / MAX_DISTANCE_KM, 1.0)
    score = round_half_up(max_points * (1 - normalized) ** 2)
    return min(max(score, 0), max_points)


def format_distance(km: float) -> str:
    """Human readable distance: meters below 1 km, one decimal below 10 km."""
    if km < 1:
        return f"{round_half_up(km * 1000)}m"
    elif km < 10:
        return f"{round_half_up(km * 10) / 10:.1f}km"
    return f"{round_half_up(km):,}km"


def performance_label(score: int, max_score: int = MAX_SCORE) -> PerformanceLabel:
    """Map a round score to one of six feedback tiers."""
    percentage = score * 100 / max_score if max_score else 0
    for threshold, tier, message in ROUND_LABELS:
        if percentage >= threshold:
            return PerformanceLabel(tier=tier, message=message)
    # Negative scores never happen, but fall through to the lowest tier
    _, tier, message = ROUND_LABELS[-1]
    return PerformanceLabel(tier=tier, message=message)


def session_performance(accuracy_percent: float) -> PerformanceTier:
    """Map a session's accuracy percentage to a final-screen title."""
    for threshold, title, message in SESSION_TIERS:
        if accuracy_percent >= threshold:
            return PerformanceTier(title=title, message=message)
    _, title, message = SESSION_TIERS[-1]
    return PerformanceTier(title=title, message=message)
