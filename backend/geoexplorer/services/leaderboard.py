import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.models import ScoreRecord
from ..models.domain import GameConfig, SessionSummary
from .eligibility import is_eligible

logger = logging.getLogger(__name__)

WEEK_MS = 7 * 24 * 60 * 60 * 1000
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def week_id(moment: Optional[datetime] = None) -> int:
    """Number of whole weeks since the Unix epoch, used to bucket scores."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    millis = int((moment - EPOCH) / timedelta(milliseconds=1))
    return millis // WEEK_MS


def week_bounds(week: int) -> Tuple[datetime, datetime]:
    """First and last millisecond of a week, in UTC."""
    start = EPOCH + timedelta(milliseconds=week * WEEK_MS)
    end = EPOCH + timedelta(milliseconds=(week + 1) * WEEK_MS - 1)
    return start, end


class LeaderboardStore:
    """Persists finished sessions and answers ranking queries."""

    async def submit(
        self,
        db: AsyncSession,
        summary: SessionSummary,
        config: GameConfig,
        player_identity: str,
        moment: Optional[datetime] = None,
    ) -> ScoreRecord:
        """
        Record a finished session.

        Every session is stored; only those passing the eligibility rule are
        flagged as ranked.

        Args:
            db: Database session
            summary: Summary of the finished session
            config: Mode the session was played in
            player_identity: Who played it, resolved by the caller
            moment: Submission time, defaults to now

        Returns:
            The stored record
        """
        moment = moment or datetime.now(timezone.utc)
        record = ScoreRecord(
            player_identity=player_identity,
            score=summary.total_score,
            rounds=summary.rounds_played,
            average_distance_km=summary.average_distance_km,
            mode=config.mode.value,
            time_limit_sec=config.time_limit_sec,
            ranked=is_eligible(config.mode, config.time_limit_sec),
            week_id=week_id(moment),
            created_at=moment,
        )
        db.add(record)
        await db.commit()
        await db.refresh(record)
        logger.info(
            "Score submitted: player=%s score=%d ranked=%s week=%d",
            player_identity, record.score, record.ranked, record.week_id,
        )
        return record

    async def top(
        self,
        db: AsyncSession,
        limit: int = 10,
        week: Optional[int] = None,
        ranked_only: bool = True,
    ) -> List[ScoreRecord]:
        """Highest scores, earliest submission first on a tie."""
        query = select(ScoreRecord)
        if week is not None:
            query = query.where(ScoreRecord.week_id == week)
        if ranked_only:
            query = query.where(ScoreRecord.ranked == True)  # noqa: E712
        query = query.order_by(
            desc(ScoreRecord.score), ScoreRecord.created_at, ScoreRecord.id
        ).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def rank_of(self, db: AsyncSession, player_identity: str, week: int) -> Optional[int]:
        """1-based weekly rank of a player's best ranked score, or None."""
        result = await db.execute(
            select(ScoreRecord).where(
                ScoreRecord.week_id == week,
                ScoreRecord.ranked == True,  # noqa: E712
            ).order_by(desc(ScoreRecord.score), ScoreRecord.created_at, ScoreRecord.id)
        )
        seen = set()
        rank = 0
        for record in result.scalars():
            if record.player_identity in seen:
                continue
            seen.add(record.player_identity)
            rank += 1
            if record.player_identity == player_identity:
                return rank
        return None
