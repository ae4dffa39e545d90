"""
Avoidance polygon generation for routing engine "avoid area" input.

Circles are approximated with an equirectangular (flat-earth) projection:
one degree of latitude is 111.32 km and a degree of longitude shrinks with
cos(latitude). This is accurate for the single-digit kilometer radii fire
zones produce. It is not corrected for large radii or high latitudes;
zones beyond APPROXIMATION_MAX_RADIUS_KM or APPROXIMATION_MAX_LATITUDE are
still generated but logged and flagged as approximate.
"""
import logging
import math
from typing import Iterable, List

from services.models import AvoidancePolygon, Coordinate, HazardZone
from utils.geo import clamp_latitude, normalize_longitude

logger = logging.getLogger(__name__)

KM_PER_DEGREE = 111.32

DEFAULT_POINT_COUNT = 32
MIN_POINT_COUNT = 8

APPROXIMATION_MAX_RADIUS_KM = 50.0
APPROXIMATION_MAX_LATITUDE = 80.0


def to_polygon(zone: HazardZone, point_count: int = DEFAULT_POINT_COUNT) -> AvoidancePolygon:
    """
    Create a closed ring approximating a hazard zone's circle.

    Args:
        zone: Hazard zone (center + radius in km)
        point_count: Number of equally spaced vertices, at least 8

    Returns:
        AvoidancePolygon whose ring has point_count vertices plus the
        repeated first vertex

    Raises:
        ValueError: If point_count is below 8
    """
    if point_count < MIN_POINT_COUNT:
        raise ValueError(f"point_count must be at least {MIN_POINT_COUNT}, got {point_count}")

    center = zone.center
    radius_deg_lat = zone.radius_km / KM_PER_DEGREE
    cos_lat = math.cos(math.radians(center.lat))
    # Degenerate at the poles; fall back to a tiny positive scale
    radius_deg_lon = zone.radius_km / (KM_PER_DEGREE * max(cos_lat, 1e-6))

    ring = []
    for i in range(point_count):
        angle = 2 * math.pi * i / point_count
        lat = center.lat + radius_deg_lat * math.sin(angle)
        lon = center.lon + radius_deg_lon * math.cos(angle)
        ring.append(Coordinate(clamp_latitude(lat), normalize_longitude(lon)))
    ring.append(ring[0])

    approximate = (zone.radius_km > APPROXIMATION_MAX_RADIUS_KM
                   or abs(center.lat) > APPROXIMATION_MAX_LATITUDE)
    if approximate:
        logger.warning(
            f"Avoidance polygon for {zone.radius_km:.1f} km zone at latitude {center.lat:.1f} "
            f"exceeds the flat projection's accuracy range"
        )

    return AvoidancePolygon(ring=tuple(ring), zone=zone, approximate=approximate)


def to_polygons(zones: Iterable[HazardZone], point_count: int = DEFAULT_POINT_COUNT) -> List[AvoidancePolygon]:
    """Build one polygon per zone, in zone order."""
    return [to_polygon(zone, point_count) for zone in zones]
