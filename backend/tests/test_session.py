import asyncio
from math import degrees

import pytest

from geoexplorer.models.domain import Coordinate, GameConfig, GameMode, SessionState
from geoexplorer.services.eligibility import is_eligible
from geoexplorer.services.geo import EARTH_RADIUS_KM
from geoexplorer.services.session import GameSession


def classic():
    return GameConfig.for_mode(GameMode.CLASSIC)


def time_attack(limit=30):
    return GameConfig.for_mode(GameMode.TIME_ATTACK, limit)


@pytest.fixture()
def session(targets):
    s = GameSession()
    s.begin(classic(), targets)
    return s


def test_new_session_is_idle():
    s = GameSession()
    assert s.state == SessionState.IDLE
    assert s.results == ()
    assert s.total_score == 0
    assert s.current_target is None


def test_begin_opens_first_round(session, targets):
    assert session.state == SessionState.AWAITING_GUESS
    assert session.current_round_index == 1
    assert session.current_target == targets[0]
    assert session.time_left_sec is None


def test_begin_requires_one_target_per_round(targets):
    with pytest.raises(ValueError):
        GameSession().begin(classic(), targets[:3])


def test_exact_guess(session, targets):
    result = session.submit_guess(targets[0].coordinate)
    assert result.score == 5000
    assert result.distance_km == 0
    assert result.timed_out is False
    assert result.round_number == 1
    assert session.state == SessionState.ROUND_COMPLETE
    assert session.results == (result,)


def test_guess_5000_km_away(targets):
    s = GameSession()
    start = Coordinate(lat=0, lon=0)
    targets[0] = targets[0].model_copy(update={"coordinate": start})
    s.begin(classic(), targets)
    result = s.submit_guess(Coordinate(lat=0, lon=degrees(5000 / EARTH_RADIUS_KM)))
    assert result.distance_km == 5000
    assert result.score == 2813


def test_wrapped_longitude_guess_is_normalized(targets):
    s = GameSession()
    s.begin(classic(), targets)
    target = targets[0].coordinate
    result = s.submit_guess(Coordinate(lat=target.lat, lon=target.lon + 360))
    assert result.distance_km == 0
    assert result.guess.lon == pytest.approx(target.lon)


def test_duplicate_guess_is_ignored(session, targets):
    session.submit_guess(targets[0].coordinate)
    assert session.submit_guess(Coordinate(lat=0, lon=0)) is None
    assert len(session.results) == 1
    assert session.total_score == 5000
    assert session.ignored_transitions == 1


def test_guess_while_idle_is_ignored():
    s = GameSession()
    assert s.submit_guess(Coordinate(lat=0, lon=0)) is None
    assert s.state == SessionState.IDLE
    assert s.ignored_transitions == 1


def test_advance_only_after_round_completes(session, targets):
    assert session.advance_round() == SessionState.AWAITING_GUESS
    assert session.current_round_index == 1
    assert session.ignored_transitions == 1

    session.submit_guess(targets[0].coordinate)
    assert session.advance_round() == SessionState.AWAITING_GUESS
    assert session.current_round_index == 2
    assert session.current_target == targets[1]


def test_tick_is_ignored_outside_time_attack(session):
    assert session.tick() is None
    assert session.time_left_sec is None
    assert session.state == SessionState.AWAITING_GUESS


def test_results_and_total_stay_consistent(session, targets):
    guesses = [
        Coordinate(lat=48.0, lon=2.0),
        Coordinate(lat=30.0, lon=130.0),
        Coordinate(lat=-12.0464, lon=-77.0428),
        Coordinate(lat=10.0, lon=10.0),
        Coordinate(lat=-40.0, lon=170.0),
    ]
    for n, guess in enumerate(guesses, 1):
        session.submit_guess(guess)
        assert len(session.results) == n
        assert session.current_round_index == n
        assert session.total_score == sum(r.score for r in session.results)
        session.advance_round()
    assert session.state == SessionState.SESSION_COMPLETE
    assert session.current_round_index == session.total_rounds


def test_time_attack_countdown_and_timeout(targets):
    s = GameSession()
    s.begin(time_attack(5), targets)
    assert s.time_left_sec == 5
    for remaining in (4, 3, 2, 1):
        assert s.tick() is None
        assert s.time_left_sec == remaining
    result = s.tick()
    assert s.time_left_sec == 0
    assert result.timed_out is True
    assert result.score == 0
    assert result.distance_km == 20015
    assert s.state == SessionState.ROUND_COMPLETE

    # Late timer callbacks do nothing
    assert s.tick() is None
    assert len(s.results) == 1

    s.advance_round()
    assert s.time_left_sec == 5


def test_guess_beats_timer(targets):
    s = GameSession()
    s.begin(time_attack(2), targets)
    s.tick()
    s.submit_guess(targets[0].coordinate)
    assert s.tick() is None
    assert s.results[0].timed_out is False
    assert s.time_left_sec == 1


def test_time_attack_full_game(targets):
    s = GameSession()
    config = time_attack(30)
    s.begin(config, targets)

    # Round 1: spot on
    first = s.submit_guess(targets[0].coordinate)
    assert first.score == 5000
    assert first.distance_km == 0
    s.advance_round()

    # Round 2: let the clock run out
    for _ in range(30):
        s.tick()
    assert s.results[1].score == 0
    assert s.results[1].timed_out is True
    s.advance_round()

    # Rounds 3-5: some guess
    for _ in range(3):
        s.submit_guess(Coordinate(lat=0, lon=0))
        s.advance_round()

    assert s.state == SessionState.SESSION_COMPLETE
    assert len(s.results) == 5
    assert s.total_score == sum(r.score for r in s.results)
    assert is_eligible(s.mode, s.time_limit_sec)

    summary = s.summary()
    assert summary.total_score == s.total_score
    assert summary.best_round == first
    assert summary.timed_out_rounds == 1


def test_reset_from_any_state(session, targets):
    session.submit_guess(targets[0].coordinate)
    session.reset()
    assert session.state == SessionState.IDLE
    assert session.results == ()
    assert session.total_score == 0
    assert session.current_round_index == 0
    assert session.config is None
    session.reset()
    assert session.state == SessionState.IDLE


def test_game_config_rejects_invalid_combinations():
    with pytest.raises(ValueError):
        GameConfig(mode=GameMode.CLASSIC, time_limit_sec=30)
    with pytest.raises(ValueError):
        GameConfig(mode=GameMode.TIME_ATTACK)
    assert GameConfig.for_mode("time-attack").time_limit_sec == 60
    assert GameConfig.for_mode("no-move").time_limit_sec is None


class ListProvider:
    def __init__(self, targets):
        self.remaining = list(targets)

    async def get_random_target(self):
        await asyncio.sleep(0)
        return self.remaining.pop(0)


class BrokenProvider:
    async def get_random_target(self):
        raise RuntimeError("imagery down")


@pytest.mark.anyio
async def test_start_uses_provider_targets(targets):
    s = GameSession(provider=ListProvider(targets))
    await s.start(time_attack(30))
    assert s.targets == targets
    assert s.state == SessionState.AWAITING_GUESS
    assert s.time_left_sec == 30


@pytest.mark.anyio
async def test_start_falls_back_when_imagery_fails():
    s = GameSession(provider=BrokenProvider())
    await s.start(classic())
    assert len(s.targets) == 5
    assert all(t.provider == "static" for t in s.targets)
    assert len({t.image_reference for t in s.targets}) == 5
    assert s.state == SessionState.AWAITING_GUESS


@pytest.mark.anyio
async def test_start_replaces_previous_game(targets):
    s = GameSession()
    s.begin(classic(), targets)
    s.submit_guess(targets[0].coordinate)
    await s.start(classic())
    assert s.results == ()
    assert s.total_score == 0
    assert s.current_round_index == 1
