from math import radians, sin, cos, sqrt, atan2, floor

from ..models.domain import Coordinate

# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (towards +inf)."""
    return int(floor(value + 0.5))


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """
    Calculate the great circle distance between two points on Earth.

    Coordinates must already be within [-90, 90] / [-180, 180]; anything
    else gives an unspecified (but finite) result.

    Args:
        a: First point (degrees)
        b: Second point (degrees)

    Returns:
        Distance in kilometers, rounded to the nearest whole kilometer
    """
    # Haversine formula
    dlat = radians(b.lat - a.lat)
    dlon = radians(b.lon - a.lon)

    h = sin(dlat / 2)**2 + cos(radians(a.lat)) * cos(radians(b.lat)) * sin(dlon / 2)**2
    # Float error can push h a hair outside [0, 1] near antipodes
    h = min(max(h, 0.0), 1.0)
    c = 2 * atan2(sqrt(h), sqrt(1 - h))

    return float(round_half_up(EARTH_RADIUS_KM * c))


def normalize_coordinate(coordinate: Coordinate) -> Coordinate:
    """
    Bring a coordinate reported by a map widget back into range.

    Longitudes already in [-180, 180] are kept as they are, anything else
    is wrapped into [-180, 180). Latitude is clamped to [-90, 90].
    """
    lat = min(max(coordinate.lat, -90.0), 90.0)
    lon = coordinate.lon
    if lon < -180.0 or lon > 180.0:
        lon = ((lon + 180.0) % 360.0) - 180.0
    if lat == coordinate.lat and lon == coordinate.lon:
        return coordinate
    return Coordinate(lat=lat, lon=lon)


def antipode(coordinate: Coordinate) -> Coordinate:
    """Return the point diametrically opposite on the globe."""
    lon = coordinate.lon + 180.0 if coordinate.lon <= 0 else coordinate.lon - 180.0
    return Coordinate(lat=-coordinate.lat, lon=lon)
