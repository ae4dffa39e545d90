"""
Coordinate helpers shared by the zone, polygon and routing services.
"""
import math


def is_valid_coordinates(latitude, longitude) -> bool:
    """
    True for finite numbers with latitude in [-90, 90] and longitude in [-180, 180].

    Examples:
        >>> is_valid_coordinates(36.85, -118.95)
        True
        >>> is_valid_coordinates(-90, 180)  # Bounds are inclusive
        True
        >>> is_valid_coordinates(90.01, 0)
        False
        >>> is_valid_coordinates(float('nan'), 0)
        False
    """
    try:
        values = (float(latitude), float(longitude))
    except (TypeError, ValueError):
        return False

    if not all(math.isfinite(v) for v in values):
        return False

    lat, lon = values
    return abs(lat) <= 90 and abs(lon) <= 180


def normalize_longitude(longitude: float) -> float:
    """
    Wrap a longitude into [-180, 180].

    Polygon vertices around a zone close to the antimeridian can land just
    past +/-180; values already in range are returned unchanged.

    Examples:
        >>> normalize_longitude(180.02)
        -179.98...
        >>> normalize_longitude(-180)
        -180.0
    """
    if -180 <= longitude <= 180:
        return float(longitude)
    wrapped = (longitude + 180) % 360 - 180
    return float(wrapped)


def clamp_latitude(latitude: float) -> float:
    """Clamp latitude to [-90, 90]."""
    return max(-90.0, min(90.0, float(latitude)))


def bounding_box(points):
    """
    Bounding box of (lat, lon) pairs as ((min_lon, min_lat), (max_lon, max_lat)).

    Returns None for an empty sequence.
    """
    points = list(points)
    if not points:
        return None
    lats, lons = zip(*points)
    return ((min(lons), min(lats)), (max(lons), max(lats)))
