from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from .domain import Difficulty, GameMode, SessionState


class StartRequest(BaseModel):
    """Request to start a new game session."""
    mode: GameMode = GameMode.CLASSIC
    time_limit_sec: Optional[int] = Field(default=None, gt=0)


class GuessRequest(BaseModel):
    """Request for submitting a guess.

    Longitude is not range checked: map widgets report wrapped values and
    the session normalizes them. NaN and infinities are rejected.
    """
    latitude: float = Field(ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(allow_inf_nan=False)


class TargetView(BaseModel):
    """What the player may see of the round in play (no coordinates)."""
    round_number: int
    image_reference: str
    provider: str
    difficulty: Difficulty


class RoundResultResponse(BaseModel):
    """Response after a round is resolved."""
    round_number: int
    distance_km: float
    distance_label: str
    score: int
    timed_out: bool
    actual_latitude: float
    actual_longitude: float
    guess_latitude: float
    guess_longitude: float
    performance: str
    message: str
    location_name: Optional[str] = None


class GameSessionResponse(BaseModel):
    """Response with game session details."""
    mode: Optional[GameMode] = None
    time_limit_sec: Optional[int] = None
    time_left_sec: Optional[int] = None
    state: SessionState
    current_round: int
    total_rounds: int
    total_score: int
    current_target: Optional[TargetView] = None
    results: List[RoundResultResponse] = []


class SummaryResponse(BaseModel):
    """Final results of a finished session."""
    total_score: int
    total_rounds: int
    rounds_played: int
    average_distance_km: float
    average_distance_label: str
    accuracy_percent: float
    timed_out_rounds: int
    best_round: Optional[RoundResultResponse] = None
    title: str
    message: str
    eligible: bool
    week_id: int


class LocationResponse(BaseModel):
    """A random round target, coordinates included."""
    provider: str
    image_reference: str
    latitude: float
    longitude: float
    difficulty: Difficulty
    name: Optional[str] = None


class LeaderboardEntry(BaseModel):
    """Leaderboard entry."""
    player_identity: str
    score: int
    rounds: int
    average_distance_km: float
    mode: str
    week_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class LeaderboardResponse(BaseModel):
    """Response with leaderboard."""
    week_id: int
    entries: List[LeaderboardEntry]
