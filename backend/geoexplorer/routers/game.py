from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..database.session import get_db
from ..dependencies import SessionRegistry, get_player_identity, get_registry, get_target_provider
from ..exceptions import InvalidTransition
from ..models.domain import Coordinate, GameConfig, RoundResult, SessionState
from ..models.game import (
    StartRequest, GuessRequest, GameSessionResponse, RoundResultResponse,
    SummaryResponse, TargetView, LeaderboardEntry, LeaderboardResponse,
)
from ..services.eligibility import is_eligible
from ..services.leaderboard import LeaderboardStore, week_id
from ..services.scoring import format_distance, performance_label
from ..services.session import GameSession
from ..services.targets import TargetProvider

router = APIRouter(prefix="/game", tags=["Game"])

leaderboard = LeaderboardStore()


def _result_response(session: GameSession, result: RoundResult) -> RoundResultResponse:
    label = performance_label(result.score)
    target = session.targets[result.round_number - 1]
    return RoundResultResponse(
        round_number=result.round_number,
        distance_km=result.distance_km,
        distance_label=format_distance(result.distance_km),
        score=result.score,
        timed_out=result.timed_out,
        actual_latitude=result.target.lat,
        actual_longitude=result.target.lon,
        guess_latitude=result.guess.lat,
        guess_longitude=result.guess.lon,
        performance=label.tier,
        message=label.message,
        location_name=target.name,
    )


def _session_response(session: GameSession) -> GameSessionResponse:
    current_target = None
    # Coordinates stay hidden; only the imagery is exposed while guessing
    if session.state == SessionState.AWAITING_GUESS:
        target = session.current_target
        current_target = TargetView(
            round_number=session.current_round_index,
            image_reference=target.image_reference,
            provider=target.provider,
            difficulty=target.difficulty,
        )
    return GameSessionResponse(
        mode=session.mode,
        time_limit_sec=session.time_limit_sec,
        time_left_sec=session.time_left_sec,
        state=session.state,
        current_round=session.current_round_index,
        total_rounds=session.total_rounds,
        total_score=session.total_score,
        current_target=current_target,
        results=[_result_response(session, r) for r in session.results],
    )


@router.post("/start", response_model=GameSessionResponse, status_code=status.HTTP_201_CREATED)
async def start_game(
    request: StartRequest,
    player: str = Depends(get_player_identity),
    registry: SessionRegistry = Depends(get_registry),
    provider: Optional[TargetProvider] = Depends(get_target_provider),
    settings: Settings = Depends(get_settings),
):
    """Start a new game session, replacing any session in progress."""
    try:
        config = GameConfig.for_mode(
            request.mode,
            request.time_limit_sec,
            default_time_limit=settings.TIME_ATTACK_LIMIT_SEC,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=str(e.errors()[0]["msg"]),
        )

    session = GameSession(
        total_rounds=settings.ROUNDS_PER_GAME,
        provider=provider,
        imagery_timeout_sec=settings.IMAGERY_TIMEOUT_SEC,
    )
    await session.start(config)
    registry.put(player, session)
    return _session_response(session)


@router.get("/current", response_model=GameSessionResponse)
async def get_current_game(
    player: str = Depends(get_player_identity),
    registry: SessionRegistry = Depends(get_registry),
):
    """Get the current game session."""
    return _session_response(registry.get(player))


@router.post("/guess", response_model=RoundResultResponse)
async def submit_guess(
    guess: GuessRequest,
    player: str = Depends(get_player_identity),
    registry: SessionRegistry = Depends(get_registry),
):
    """Submit a guess for the current round."""
    session = registry.get(player)
    result = session.submit_guess(Coordinate(lat=guess.latitude, lon=guess.longitude))
    if result is None:
        raise InvalidTransition("guess", session.state.value)
    return _result_response(session, result)


@router.post("/tick", response_model=GameSessionResponse)
async def tick(
    player: str = Depends(get_player_identity),
    registry: SessionRegistry = Depends(get_registry),
):
    """Advance the time-attack countdown by one second."""
    session = registry.get(player)
    session.tick()
    return _session_response(session)


@router.post("/next", response_model=GameSessionResponse)
async def next_round(
    player: str = Depends(get_player_identity),
    registry: SessionRegistry = Depends(get_registry),
):
    """Move on to the next round, or finish the game after the last one."""
    session = registry.get(player)
    session.advance_round()
    return _session_response(session)


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    player: str = Depends(get_player_identity),
    registry: SessionRegistry = Depends(get_registry),
):
    """Final results for a finished game."""
    session = registry.get(player)
    if not session.is_complete:
        raise InvalidTransition("summary", session.state.value)

    summary = session.summary()
    best = _result_response(session, summary.best_round) if summary.best_round else None
    return SummaryResponse(
        total_score=summary.total_score,
        total_rounds=summary.total_rounds,
        rounds_played=summary.rounds_played,
        average_distance_km=summary.average_distance_km,
        average_distance_label=format_distance(summary.average_distance_km),
        accuracy_percent=round(summary.accuracy_percent, 1),
        timed_out_rounds=summary.timed_out_rounds,
        best_round=best,
        title=summary.performance.title,
        message=summary.performance.message,
        eligible=is_eligible(session.mode, session.time_limit_sec),
        week_id=week_id(),
    )


@router.post("/submit", response_model=LeaderboardEntry, status_code=status.HTTP_201_CREATED)
async def submit_score(
    player: str = Depends(get_player_identity),
    registry: SessionRegistry = Depends(get_registry),
    db: AsyncSession = Depends(get_db),
):
    """Record a finished game on the leaderboard, once per game."""
    session = registry.get(player)
    if not session.is_complete:
        raise InvalidTransition("submit", session.state.value)
    if registry.is_submitted(player):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This game has already been submitted."
        )
    record = await leaderboard.submit(db, session.summary(), session.config, player)
    registry.mark_submitted(player)
    return LeaderboardEntry.model_validate(record)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: int = 10,
    week: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    """Get the weekly ranked leaderboard (current week by default)."""
    week = week_id() if week is None else week
    entries = await leaderboard.top(db, limit=limit, week=week)
    return LeaderboardResponse(
        week_id=week,
        entries=[LeaderboardEntry.model_validate(e) for e in entries]
    )


@router.delete("/current", status_code=status.HTTP_204_NO_CONTENT)
async def delete_current_game(
    player: str = Depends(get_player_identity),
    registry: SessionRegistry = Depends(get_registry),
):
    """Abandon the current game."""
    registry.remove(player)
    return None
