import os
import tempfile

import pytest

# Point the app at a throwaway database before anything reads the settings
_DB_DIR = tempfile.mkdtemp(prefix="geoexplorer-tests-")
_DB_PATH = os.path.join(_DB_DIR, "test.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ.pop("MAPILLARY_TOKEN", None)

from geoexplorer.models.domain import Coordinate, Difficulty, RoundTarget  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


def make_target(name: str, lat: float, lon: float, provider: str = "test") -> RoundTarget:
    return RoundTarget(
        coordinate=Coordinate(lat=lat, lon=lon),
        image_reference=f"img-{name}",
        difficulty=Difficulty.MEDIUM,
        provider=provider,
        name=name,
    )


@pytest.fixture()
def targets():
    return [
        make_target("paris", 48.8566, 2.3522),
        make_target("tokyo", 35.6762, 139.6503),
        make_target("lima", -12.0464, -77.0428),
        make_target("nairobi", -1.2921, 36.8219),
        make_target("auckland", -36.8485, 174.7633),
    ]


class FixedProvider:
    """Hands out the given targets in call order, wrapping around."""

    def __init__(self, targets):
        self.targets = list(targets)
        self.calls = 0

    async def get_random_target(self):
        target = self.targets[self.calls % len(self.targets)]
        self.calls += 1
        return target


@pytest.fixture()
def provider(targets):
    return FixedProvider(targets)


@pytest.fixture()
def client(provider):
    from fastapi.testclient import TestClient

    from geoexplorer.database.session import dispose_db
    from geoexplorer.dependencies import SessionRegistry, get_registry, get_target_provider
    from geoexplorer.main import app

    registry = SessionRegistry()
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_target_provider] = lambda: provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    if os.path.exists(_DB_PATH):
        os.remove(_DB_PATH)
