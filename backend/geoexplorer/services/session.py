"""Round-by-round lifecycle of a single game session.

States run ``idle -> awaiting-guess -> round-complete`` and then either back
to ``awaiting-guess`` for the next round or on to ``session-complete``.

The session is driven entirely by its caller: a guess, a timer tick or a
request for the next round. Calls made in the wrong state are ignored rather
than raised, since a UI routinely races its countdown against a click. The
caller must not run two operations on the same session at once; nothing here
takes a lock.
"""
import logging
import random
from typing import List, Optional, Sequence, Tuple

from ..models.domain import (
    Coordinate, GameConfig, GameMode, RoundResult, RoundTarget, SessionState,
    SessionSummary,
)
from .aggregation import summarize
from .geo import antipode, distance_km, normalize_coordinate
from .scoring import calculate_score
from .targets import TargetProvider, gather_targets

logger = logging.getLogger(__name__)

DEFAULT_TOTAL_ROUNDS = 5


class GameSession:
    """State machine for one player's game."""

    def __init__(
        self,
        total_rounds: int = DEFAULT_TOTAL_ROUNDS,
        provider: Optional[TargetProvider] = None,
        imagery_timeout_sec: float = 8.0,
        rng: Optional[random.Random] = None,
    ):
        self.total_rounds = total_rounds
        self.provider = provider
        self.imagery_timeout_sec = imagery_timeout_sec
        self.rng = rng
        self.ignored_transitions = 0
        self._clear()

    def _clear(self) -> None:
        self.state = SessionState.IDLE
        self.config: Optional[GameConfig] = None
        self.targets: List[RoundTarget] = []
        self._results: List[RoundResult] = []
        self.current_round_index = 0
        self.total_score = 0
        self.time_left_sec: Optional[int] = None

    # Read helpers

    @property
    def results(self) -> Tuple[RoundResult, ...]:
        return tuple(self._results)

    @property
    def mode(self) -> Optional[GameMode]:
        return self.config.mode if self.config else None

    @property
    def time_limit_sec(self) -> Optional[int]:
        return self.config.time_limit_sec if self.config else None

    @property
    def is_timed(self) -> bool:
        return self.mode == GameMode.TIME_ATTACK

    @property
    def is_complete(self) -> bool:
        return self.state == SessionState.SESSION_COMPLETE

    @property
    def current_target(self) -> Optional[RoundTarget]:
        """Target of the round in play, None while idle."""
        if self.state == SessionState.IDLE or not self.targets:
            return None
        return self.targets[self.current_round_index - 1]

    def summary(self, include_timeouts: bool = True) -> SessionSummary:
        return summarize(self._results, self.total_rounds, include_timeouts=include_timeouts)

    # Transitions

    def _ignore(self, operation: str) -> None:
        self.ignored_transitions += 1
        logger.debug("Ignoring %s while session is %s", operation, self.state.value)

    async def start(self, config: GameConfig) -> None:
        """
        Start a new session, replacing whatever was in progress.

        Targets for every round are requested up front; rounds the imagery
        provider cannot serve are filled from the curated location list.
        """
        targets = await gather_targets(
            self.provider,
            self.total_rounds,
            timeout_sec=self.imagery_timeout_sec,
            rng=self.rng,
        )
        self.begin(config, targets)

    def begin(self, config: GameConfig, targets: Sequence[RoundTarget]) -> None:
        """Start a new session with targets the caller already holds."""
        if len(targets) != self.total_rounds:
            raise ValueError(f"expected {self.total_rounds} targets, got {len(targets)}")
        self._clear()
        self.config = config
        self.targets = list(targets)
        self.current_round_index = 1
        self.time_left_sec = config.time_limit_sec if self.is_timed else None
        self.state = SessionState.AWAITING_GUESS
        logger.info(
            "Session started: mode=%s time_limit=%s rounds=%d",
            config.mode.value, config.time_limit_sec, self.total_rounds,
        )

    def _complete_round(self, guess: Coordinate, timed_out: bool) -> RoundResult:
        target = self.current_target.coordinate
        distance = distance_km(target, guess)
        result = RoundResult(
            round_number=self.current_round_index,
            target=target,
            guess=guess,
            distance_km=distance,
            score=0 if timed_out else calculate_score(distance),
            timed_out=timed_out,
        )
        self._results.append(result)
        self.total_score += result.score
        self.state = SessionState.ROUND_COMPLETE
        return result

    def submit_guess(self, coordinate: Coordinate) -> Optional[RoundResult]:
        """Score a guess for the round in play; ignored outside awaiting-guess."""
        if self.state != SessionState.AWAITING_GUESS:
            self._ignore("submit_guess")
            return None
        return self._complete_round(normalize_coordinate(coordinate), timed_out=False)

    def tick(self) -> Optional[RoundResult]:
        """
        Count down one second of a time-attack round.

        When the clock runs out the round is closed with zero points. The
        recorded guess is the antipode of the target, a placeholder meaning
        "no guess"; the ``timed_out`` flag is what identifies these rounds.

        Returns:
            The timeout result if this tick ended the round, else None
        """
        if not self.is_timed or self.state != SessionState.AWAITING_GUESS:
            self._ignore("tick")
            return None
        self.time_left_sec = max((self.time_left_sec or 0) - 1, 0)
        if self.time_left_sec > 0:
            return None
        logger.debug("Round %d timed out", self.current_round_index)
        return self._complete_round(antipode(self.current_target.coordinate), timed_out=True)

    def advance_round(self) -> SessionState:
        """Move past a finished round, either to the next one or to the end."""
        if self.state != SessionState.ROUND_COMPLETE:
            self._ignore("advance_round")
            return self.state
        if self.current_round_index < self.total_rounds:
            self.current_round_index += 1
            if self.is_timed:
                self.time_left_sec = self.time_limit_sec
            self.state = SessionState.AWAITING_GUESS
        else:
            self.state = SessionState.SESSION_COMPLETE
            logger.info(
                "Session complete: mode=%s score=%d",
                self.config.mode.value, self.total_score,
            )
        return self.state

    def reset(self) -> None:
        """Drop all session data and return to idle."""
        self._clear()
