"""
Great-circle distance for hazard zone and route proximity checks.

Zone radii, the proximity audit's warning band and route extents are all
expressed in kilometers against this one function, so every "how close is
the route to the fire" decision uses the same sphere.
"""
import math
from functools import lru_cache

# Mean Earth radius (km), spherical model
EARTH_RADIUS_KM = 6371.0


@lru_cache(maxsize=10000)
def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Haversine distance in kilometers between two WGS84 points.

    Memoized: the audit evaluates every route vertex against every zone
    center, and polylines often repeat vertices at segment joins.

    Examples:
        >>> round(haversine_distance(0, 0, 0, 1), 2)
        111.19
        >>> haversine_distance(36.85, -118.95, 36.85, -118.95)
        0.0

    Note:
        Inputs are not range-checked; callers pass Coordinate values,
        which validate on construction.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    half_dphi = (phi2 - phi1) / 2
    half_dlambda = math.radians(lon2 - lon1) / 2

    h = math.sin(half_dphi) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(half_dlambda) ** 2
    # Rounding can push h a hair past 1 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))


def clear_distance_cache() -> None:
    """Drop all memoized distances (tests use this for clean statistics)."""
    haversine_distance.cache_clear()


def get_cache_info() -> dict:
    """Memoization statistics as a plain dict for health/debug output."""
    stats = haversine_distance.cache_info()
    return {
        'hits': stats.hits,
        'misses': stats.misses,
        'maxsize': stats.maxsize,
        'currsize': stats.currsize
    }
