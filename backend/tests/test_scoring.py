from geoexplorer.services.scoring import (
    MAX_SCORE, calculate_score, format_distance, performance_label, session_performance,
)


def test_exact_guess_scores_max():
    assert calculate_score(0) == 5000


def test_near_miss_keeps_99_percent():
    assert calculate_score(0.2) == 4950
    assert calculate_score(0.999) == 4950


def test_far_guesses_score_zero():
    assert calculate_score(20000) == 0
    assert calculate_score(20015) == 0
    assert calculate_score(40000) == 0


def test_quadratic_curve():
    # (1 - 0.25)^2 = 0.5625 -> 2812.5 rounds up
    assert calculate_score(5000) == 2813
    assert calculate_score(10000) == 1250
    assert calculate_score(2) == 4999


def test_score_never_increases_with_distance():
    previous = calculate_score(0)
    for km in range(1, 20001):
        current = calculate_score(km)
        assert current <= previous
        assert 0 <= current <= MAX_SCORE
        previous = current


def test_custom_max_points():
    assert calculate_score(0, max_points=1000) == 1000
    assert calculate_score(10000, max_points=1000) == 250


def test_format_distance():
    assert format_distance(0) == "0m"
    assert format_distance(0.5) == "500m"
    assert format_distance(1) == "1.0km"
    assert format_distance(5.25) == "5.3km"
    assert format_distance(9.94) == "9.9km"
    assert format_distance(10) == "10km"
    assert format_distance(1234.4) == "1,234km"
    assert format_distance(20015) == "20,015km"


def test_performance_label_tiers():
    assert performance_label(5000, 5000).tier == "incredible"
    assert performance_label(4750, 5000).tier == "incredible"
    assert performance_label(4749, 5000).tier == "excellent"
    assert performance_label(3500, 5000).tier == "great"
    assert performance_label(2500, 5000).tier == "good"
    assert performance_label(1500, 5000).tier == "not-bad"
    assert performance_label(1499, 5000).tier == "keep-trying"
    assert performance_label(0, 5000).message == "💪 Keep trying!"
    assert performance_label(5000, 5000).message == "🎯 Incredible! Almost perfect!"


def test_session_performance_tiers():
    assert session_performance(100).title == "Legendary"
    assert session_performance(90).title == "Legendary"
    assert session_performance(89.9).title == "Excellent"
    assert session_performance(60).title == "Great"
    assert session_performance(40).title == "Good"
    assert session_performance(0).title == "Keep Learning"
