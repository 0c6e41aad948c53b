"""Value types shared by the scoring engine and the session state machine.

Everything here is immutable: results and summaries are created once and
only ever replaced, never edited.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class GameMode(str, Enum):
    CLASSIC = "classic"
    NO_MOVE = "no-move"
    TIME_ATTACK = "time-attack"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_GUESS = "awaiting-guess"
    ROUND_COMPLETE = "round-complete"
    SESSION_COMPLETE = "session-complete"


class Coordinate(BaseModel):
    """A point on the globe in degrees.

    Range checks are the caller's job; see ``services.geo``.
    """
    lat: float
    lon: float

    class Config:
        frozen = True


class RoundTarget(BaseModel):
    """Ground truth for one round, as handed out by a location source."""
    coordinate: Coordinate
    image_reference: str
    difficulty: Difficulty = Difficulty.MEDIUM
    provider: str = "static"
    name: Optional[str] = None
    country: Optional[str] = None

    class Config:
        frozen = True


class RoundResult(BaseModel):
    """Outcome of a single round."""
    round_number: int = Field(ge=1)
    target: Coordinate
    guess: Coordinate
    distance_km: float = Field(ge=0)
    score: int = Field(ge=0, le=5000)
    timed_out: bool = False

    class Config:
        frozen = True


class GameConfig(BaseModel):
    """Mode selection for a session.

    Only time-attack carries a time limit; any other combination is rejected
    at construction.
    """
    mode: GameMode
    time_limit_sec: Optional[int] = Field(default=None, gt=0)

    class Config:
        frozen = True

    @model_validator(mode="after")
    def check_time_limit(self) -> "GameConfig":
        if self.mode == GameMode.TIME_ATTACK and self.time_limit_sec is None:
            raise ValueError("time-attack requires time_limit_sec")
        if self.mode != GameMode.TIME_ATTACK and self.time_limit_sec is not None:
            raise ValueError(f"{self.mode.value} does not take a time limit")
        return self

    @classmethod
    def for_mode(
        cls,
        mode: GameMode,
        time_limit_sec: Optional[int] = None,
        default_time_limit: int = 60,
    ) -> "GameConfig":
        """Build a config, filling in the default countdown for time-attack."""
        mode = GameMode(mode)
        if mode == GameMode.TIME_ATTACK and time_limit_sec is None:
            time_limit_sec = default_time_limit
        return cls(mode=mode, time_limit_sec=time_limit_sec)


class PerformanceLabel(BaseModel):
    """Qualitative feedback for a single round."""
    tier: str
    message: str

    class Config:
        frozen = True


class PerformanceTier(BaseModel):
    """Qualitative feedback for a finished session."""
    title: str
    message: str

    class Config:
        frozen = True


class SessionSummary(BaseModel):
    """Derived view over a finished (or partially played) session."""
    total_score: int
    total_rounds: int
    rounds_played: int
    average_distance_km: float
    best_round: Optional[RoundResult] = None
    accuracy_percent: float
    timed_out_rounds: int = 0
    performance: PerformanceTier

    class Config:
        frozen = True
