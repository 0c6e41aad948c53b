from typing import Optional

from ..models.domain import GameMode

# The one configuration that counts for the weekly leaderboard. This is a
# product rule: new modes stay unranked until added here explicitly.
RANKED_MODE = GameMode.TIME_ATTACK
RANKED_TIME_LIMIT_SEC = 30


def is_eligible(mode: GameMode, time_limit_sec: Optional[int]) -> bool:
    """Whether a finished session may be submitted for ranking."""
    try:
        mode = GameMode(mode)
    except ValueError:
        return False
    return mode == RANKED_MODE and time_limit_sec == RANKED_TIME_LIMIT_SEC
