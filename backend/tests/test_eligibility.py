import pytest

from geoexplorer.models.domain import GameMode
from geoexplorer.services.eligibility import is_eligible


def test_ranked_configuration():
    assert is_eligible(GameMode.TIME_ATTACK, 30) is True
    assert is_eligible("time-attack", 30) is True


@pytest.mark.parametrize("mode, limit", [
    (GameMode.CLASSIC, None),
    ("classic", None),
    (GameMode.NO_MOVE, None),
    (GameMode.TIME_ATTACK, 60),
    (GameMode.TIME_ATTACK, 15),
    (GameMode.TIME_ATTACK, None),
    (GameMode.CLASSIC, 30),
    ("speedrun", 30),
])
def test_everything_else_is_unranked(mode, limit):
    assert is_eligible(mode, limit) is False
