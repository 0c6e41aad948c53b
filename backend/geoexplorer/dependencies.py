from typing import Dict, Optional, Set

from fastapi import Depends, Header

from .config import Settings, get_settings
from .exceptions import SessionNotFound
from .services.mapillary import MapillaryClient
from .services.session import GameSession
from .services.targets import TargetProvider


class SessionRegistry:
    """In-process store of one game session per player."""

    def __init__(self):
        self._sessions: Dict[str, GameSession] = {}
        self._submitted: Set[str] = set()

    def get(self, player_identity: str) -> GameSession:
        session = self._sessions.get(player_identity)
        if session is None:
            raise SessionNotFound(player_identity)
        return session

    def put(self, player_identity: str, session: GameSession) -> None:
        self._sessions[player_identity] = session
        self._submitted.discard(player_identity)

    def remove(self, player_identity: str) -> GameSession:
        session = self.get(player_identity)
        session.reset()
        del self._sessions[player_identity]
        self._submitted.discard(player_identity)
        return session

    def is_submitted(self, player_identity: str) -> bool:
        return player_identity in self._submitted

    def mark_submitted(self, player_identity: str) -> None:
        """Flag the player's session as stored on the leaderboard."""
        self._submitted.add(player_identity)


registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    return registry


def get_target_provider(settings: Settings = Depends(get_settings)) -> Optional[TargetProvider]:
    """Imagery provider for new sessions; None means curated locations only."""
    if not settings.MAPILLARY_TOKEN:
        return None
    return MapillaryClient(
        settings.MAPILLARY_API_URL,
        settings.MAPILLARY_TOKEN,
        timeout=settings.IMAGERY_TIMEOUT_SEC,
        attempts=settings.IMAGERY_ATTEMPTS,
    )


async def get_player_identity(x_player_id: str = Header(..., min_length=1, max_length=100)) -> str:
    """Player identity, resolved upstream and passed in the X-Player-Id header."""
    return x_player_id.strip()
