import random
from typing import List, Optional

from ..models.domain import Coordinate, Difficulty, RoundTarget


def _location(name: str, country: str, lat: float, lon: float, difficulty: Difficulty) -> RoundTarget:
    slug = name.lower().replace(" ", "-").replace(",", "")
    return RoundTarget(
        coordinate=Coordinate(lat=lat, lon=lon),
        image_reference=f"static/{slug}.jpg",
        difficulty=difficulty,
        provider="static",
        name=name,
        country=country,
    )


# Pre-vetted places with shipped panoramas, used whenever the imagery
# provider cannot supply a round.
CURATED_LOCATIONS = (
    _location("Eiffel Tower", "France", 48.8584, 2.2945, Difficulty.EASY),
    _location("Times Square", "United States", 40.7580, -73.9855, Difficulty.EASY),
    _location("Shibuya Crossing", "Japan", 35.6595, 139.7005, Difficulty.EASY),
    _location("Sydney Opera House", "Australia", -33.8568, 151.2153, Difficulty.EASY),
    _location("Copacabana", "Brazil", -22.9711, -43.1822, Difficulty.MEDIUM),
    _location("Red Square", "Russia", 55.7539, 37.6208, Difficulty.EASY),
    _location("Table Mountain Road", "South Africa", -33.9628, 18.4098, Difficulty.MEDIUM),
    _location("Reykjavik Harbour", "Iceland", 64.1503, -21.9420, Difficulty.MEDIUM),
    _location("Old Town Square", "Czechia", 50.0875, 14.4213, Difficulty.MEDIUM),
    _location("Marina Bay", "Singapore", 1.2834, 103.8607, Difficulty.MEDIUM),
    _location("Plaza de Mayo", "Argentina", -34.6083, -58.3712, Difficulty.MEDIUM),
    _location("Queenstown Waterfront", "New Zealand", -45.0312, 168.6626, Difficulty.HARD),
    _location("Jemaa el-Fnaa", "Morocco", 31.6258, -7.9891, Difficulty.MEDIUM),
    _location("Gamla Stan", "Sweden", 59.3251, 18.0711, Difficulty.MEDIUM),
    _location("Zocalo", "Mexico", 19.4326, -99.1332, Difficulty.MEDIUM),
    _location("Bukchon Hanok Village", "South Korea", 37.5826, 126.9830, Difficulty.HARD),
    _location("Alfama", "Portugal", 38.7118, -9.1300, Difficulty.HARD),
    _location("Banff Avenue", "Canada", 51.1784, -115.5708, Difficulty.HARD),
    _location("Chandni Chowk", "India", 28.6506, 77.2303, Difficulty.HARD),
    _location("Route 66, Seligman", "United States", 35.3256, -112.8766, Difficulty.HARD),
)


def sample_locations(count: int, rng: Optional[random.Random] = None) -> List[RoundTarget]:
    """
    Draw curated locations for a session.

    Locations are sampled without replacement while the list lasts; a
    request larger than the list is topped up with repeats.

    Args:
        count: Number of locations wanted
        rng: Optional random source, for reproducible draws

    Returns:
        List of exactly ``count`` targets
    """
    rng = rng or random.Random()
    pool = list(CURATED_LOCATIONS)
    if count <= len(pool):
        return rng.sample(pool, count)
    picked = rng.sample(pool, len(pool))
    picked.extend(rng.choice(pool) for _ in range(count - len(pool)))
    return picked
