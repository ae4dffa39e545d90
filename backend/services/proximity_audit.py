"""
Post-hoc proximity audit of a computed route against hazard zones.

Avoid-area requests to routing engines are best-effort: when no alternative
exists the engine may still return a path through or next to a fire. The
audit walks the returned geometry and reports at most one warning per zone.

Severity comes from the first point in the 1.5x band, not the closest one.
A dense engine polyline crossing a zone usually samples the band before the
center, so such a route will typically report 'high' rather than 'critical'.
"""
import logging
from typing import List, Sequence

from services.models import Coordinate, HazardZone, RouteWarning
from utils.distance import haversine_distance

logger = logging.getLogger(__name__)

# Warning band around a zone, as a multiple of its radius
WARNING_BAND_FACTOR = 1.5

WARNING_KIND = 'fire_zone'


def audit(geometry: Sequence[Coordinate], zones: Sequence[HazardZone]) -> List[RouteWarning]:
    """
    Scan a route geometry for proximity violations.

    For each zone, the first route point (in polyline order) within
    1.5 x radius of the zone center produces one warning and ends the scan
    for that zone: 'critical' when the point is strictly inside the radius,
    'high' when it lies in the 1.0x-1.5x band.

    Args:
        geometry: Route points in travel order
        zones: Hazard zones for this planning request

    Returns:
        Warnings in zone order; empty when nothing is close
    """
    warnings = []
    if not geometry or not zones:
        return warnings

    for zone in zones:
        threshold_km = zone.radius_km * WARNING_BAND_FACTOR
        for point in geometry:
            distance_km = haversine_distance(point.lat, point.lon, zone.center.lat, zone.center.lon)
            if distance_km <= threshold_km:
                warnings.append(RouteWarning(
                    kind=WARNING_KIND,
                    message=f"Route passes within {round(distance_km * 1000)}m of a fire zone",
                    severity='critical' if distance_km < zone.radius_km else 'high'
                ))
                break

    if warnings:
        logger.info(f"Proximity audit found {len(warnings)} of {len(zones)} zones near the route")
    return warnings
