import logging
import random
from math import cos, radians
from typing import Any, Dict, List, Optional

import httpx

from ..models.domain import Coordinate, Difficulty, RoundTarget

logger = logging.getLogger(__name__)

# Regions with good Mapillary coverage, as (name, lat_min, lat_max, lon_min, lon_max)
REGIONS = [
    # Europe
    ("Western Europe", 43, 55, -5, 15),
    ("Northern Europe", 55, 70, 5, 30),
    ("Eastern Europe", 45, 55, 15, 35),
    ("Southern Europe", 35, 45, -10, 25),
    # Americas
    ("USA East", 25, 45, -90, -70),
    ("USA West", 32, 48, -125, -105),
    ("USA Central", 30, 48, -105, -90),
    ("Canada", 45, 55, -130, -60),
    ("Brazil", -25, 0, -55, -35),
    ("Argentina", -40, -25, -70, -55),
    # Asia
    ("Japan", 30, 45, 128, 145),
    ("South Korea", 33, 38, 125, 130),
    ("Southeast Asia", -10, 20, 95, 125),
    ("India", 8, 30, 70, 90),
    # Oceania
    ("Australia East", -40, -20, 140, 155),
    ("Australia West", -35, -20, 115, 140),
    ("New Zealand", -47, -34, 166, 178),
    # Africa
    ("South Africa", -35, -22, 16, 33),
    ("North Africa", 25, 37, -10, 35),
]

# Half the side of the search box around a sampled point, in degrees
SEARCH_RADIUS_DEG = 0.05


class MapillaryClient:
    """Client for finding street-level imagery through the Mapillary Graph API."""

    def __init__(
        self,
        api_url: str,
        access_token: Optional[str],
        timeout: float = 8.0,
        attempts: int = 12,
        rng: Optional[random.Random] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip('/')
        self.access_token = access_token
        self.timeout = timeout
        self.attempts = attempts
        self.rng = rng or random.Random()
        self.transport = transport
        self.headers = {"Accept": "application/json"}

    def _pick_regions(self) -> List[tuple]:
        """Pick one region per attempt, avoiding repeats until all are used."""
        regions = list(REGIONS)
        self.rng.shuffle(regions)
        picked = []
        while len(picked) < self.attempts:
            picked.extend(regions[: self.attempts - len(picked)])
        return picked

    @staticmethod
    def _nearest_image(images: List[Dict[str, Any]], lat: float, lon: float) -> Optional[Dict[str, Any]]:
        """Closest image to (lat, lon) using an equirectangular approximation."""
        best = None
        best_d2 = None
        for image in images:
            geometry = image.get("computed_geometry") or image.get("geometry") or {}
            coords = geometry.get("coordinates")
            if not image.get("id") or not coords or len(coords) < 2:
                continue
            ilon, ilat = float(coords[0]), float(coords[1])
            dx = (ilon - lon) * cos(radians((ilat + lat) / 2))
            dy = ilat - lat
            d2 = dx * dx + dy * dy
            if best_d2 is None or d2 < best_d2:
                best = {"id": str(image["id"]), "lat": ilat, "lon": ilon}
                best_d2 = d2
        return best

    async def search_images(self, client: httpx.AsyncClient, lat: float, lon: float) -> List[Dict[str, Any]]:
        """
        Search for images in a small box around a point.

        Args:
            client: Open HTTP client
            lat, lon: Center of the search box (degrees)

        Returns:
            Raw image records from the Graph API
        """
        bbox = ",".join(
            f"{v:.6f}" for v in (
                lon - SEARCH_RADIUS_DEG,
                lat - SEARCH_RADIUS_DEG,
                lon + SEARCH_RADIUS_DEG,
                lat + SEARCH_RADIUS_DEG,
            )
        )
        response = await client.get(
            f"{self.api_url}/images",
            headers=self.headers,
            params={
                "access_token": self.access_token,
                "fields": "id,computed_geometry,geometry",
                "bbox": bbox,
                "limit": 50,
            },
        )
        response.raise_for_status()
        payload = response.json()
        return payload.get("data", []) if isinstance(payload, dict) else []

    async def get_random_target(self) -> Optional[RoundTarget]:
        """
        Find imagery at a random location inside a well covered region.

        Each attempt samples a different region. Errors on one attempt are
        logged and the next region is tried.

        Returns:
            A round target, or None if no attempt found an image
        """
        if not self.access_token:
            logger.info("No Mapillary token configured, skipping imagery lookup")
            return None

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for attempt, (name, lat_min, lat_max, lon_min, lon_max) in enumerate(self._pick_regions(), 1):
                lat = self.rng.uniform(lat_min, lat_max)
                lon = self.rng.uniform(lon_min, lon_max)
                logger.debug("Try %d (%s): lat=%.2f, lon=%.2f", attempt, name, lat, lon)
                try:
                    images = await self.search_images(client, lat, lon)
                except httpx.HTTPError as e:
                    logger.warning("Mapillary request failed on try %d: %s", attempt, e)
                    continue
                except ValueError as e:
                    logger.warning("Mapillary returned malformed data on try %d: %s", attempt, e)
                    continue

                best = self._nearest_image(images, lat, lon)
                if best:
                    logger.debug("Found image %s in %s", best["id"], name)
                    return RoundTarget(
                        coordinate=Coordinate(lat=best["lat"], lon=best["lon"]),
                        image_reference=best["id"],
                        difficulty=Difficulty.MEDIUM,
                        provider="mapillary",
                    )

        logger.info("No Mapillary imagery found after %d tries", self.attempts)
        return None
