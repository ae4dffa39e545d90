"""
Hazard zone construction from fire detections.

Each detection becomes a circular avoidance zone whose radius grows with the
fire's thermal intensity and the detection confidence. Every zone keeps a
fixed floor radius so even a faint, low-confidence hotspot has a non-trivial
footprint.
"""
import logging
from typing import Iterable, List

from services.models import HazardDetection, HazardZone

logger = logging.getLogger(__name__)

# Floor radius in kilometers for every detection
BASE_RADIUS_KM = 0.5

# Brightness (Kelvin) at which a detection starts growing beyond the floor
INTENSITY_BASELINE = 300.0

# Kelvin above baseline per extra kilometer of radius at 100% confidence
INTENSITY_SCALE = 100.0


def zone_radius_km(intensity: float, confidence: float) -> float:
    """
    Radius of the danger perimeter around a detection.

    radius = BASE_RADIUS_KM + max(0, (intensity - baseline) / scale) * confidence / 100

    Non-decreasing in both intensity and confidence. Confidence is clamped to
    0-100 so out-of-range feed values cannot shrink a zone below the floor.

    Examples:
        >>> zone_radius_km(280, 90)
        0.5
        >>> zone_radius_km(400, 100)
        1.5
    """
    intensity_factor = max(0.0, (float(intensity) - INTENSITY_BASELINE) / INTENSITY_SCALE)
    confidence_factor = min(max(float(confidence), 0.0), 100.0) / 100.0
    return BASE_RADIUS_KM + intensity_factor * confidence_factor


def build_zone(detection: HazardDetection) -> HazardZone:
    return HazardZone(
        center=detection.coordinate,
        radius_km=zone_radius_km(detection.intensity, detection.confidence),
        acquisition_date=detection.acquisition_date
    )


def build_zones(detections: Iterable[HazardDetection]) -> List[HazardZone]:
    """Convert detections into hazard zones, preserving input order."""
    zones = [build_zone(d) for d in detections]
    if zones:
        largest = max(z.radius_km for z in zones)
        logger.debug(f"Built {len(zones)} hazard zones (largest radius {largest:.2f} km)")
    return zones
