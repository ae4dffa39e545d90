"""
Value objects for hazard-aware route planning.

Every object here is immutable and scoped to a single planning request:
zones, polygons and results are rebuilt from the current hazard feed each
time a route is planned and are never cached or merged across requests.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from shapely.geometry import Polygon

from utils.geo import is_valid_coordinates

SEVERITY_LEVELS = ('low', 'medium', 'high', 'critical')
SEVERITY_RANK = {level: rank for rank, level in enumerate(SEVERITY_LEVELS)}


def highest_severity(warnings) -> Optional[str]:
    """Severity that determines a route's overall risk classification."""
    if not warnings:
        return None
    return max(warnings, key=lambda w: SEVERITY_RANK[w.severity]).severity


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float

    def __post_init__(self):
        if not is_valid_coordinates(self.lat, self.lon):
            raise ValueError(
                f"Invalid coordinate ({self.lat}, {self.lon}): latitude must be between -90 and 90, "
                f"longitude between -180 and 180"
            )
        object.__setattr__(self, 'lat', float(self.lat))
        object.__setattr__(self, 'lon', float(self.lon))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Coordinate':
        """Build from {"lat", "lon"}; "lng" is accepted for longitude."""
        lon = data['lon'] if 'lon' in data else data['lng']
        return cls(float(data['lat']), float(lon))

    def to_dict(self) -> Dict[str, float]:
        return {'lat': self.lat, 'lon': self.lon}

    def as_lon_lat(self) -> List[float]:
        """GeoJSON / OpenRouteService order."""
        return [self.lon, self.lat]


@dataclass(frozen=True)
class HazardDetection:
    """
    A raw fire observation from the hazard feed.

    intensity is the thermal brightness in Kelvin as reported by NASA FIRMS,
    confidence a percentage between 0 and 100.
    """

    coordinate: Coordinate
    intensity: float
    confidence: float
    acquisition_date: str = ''
    satellite: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HazardDetection':
        if 'coordinate' in data:
            coordinate = Coordinate.from_dict(data['coordinate'])
        else:
            lat = data.get('latitude', data.get('lat'))
            lon = data.get('longitude', data.get('lon', data.get('lng')))
            coordinate = Coordinate(float(lat), float(lon))
        return cls(
            coordinate=coordinate,
            intensity=float(data.get('intensity', data.get('brightness', 0))),
            confidence=float(data.get('confidence', 0)),
            acquisition_date=str(data.get('acquisition_date', data.get('date', '')) or ''),
            satellite=data.get('satellite')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'latitude': self.coordinate.lat,
            'longitude': self.coordinate.lon,
            'intensity': self.intensity,
            'confidence': self.confidence,
            'acquisition_date': self.acquisition_date,
            'satellite': self.satellite
        }


@dataclass(frozen=True)
class HazardZone:
    """Circular danger perimeter around a detection."""

    center: Coordinate
    radius_km: float
    acquisition_date: str = ''


@dataclass(frozen=True)
class AvoidancePolygon:
    """
    Closed ring approximating a hazard zone's circle.

    The ring repeats its first coordinate as the last one, so it holds
    vertex_count + 1 coordinates. approximate is set when the zone is outside
    the range where the flat projection is accurate.
    """

    ring: Tuple[Coordinate, ...]
    zone: HazardZone
    approximate: bool = False

    @property
    def vertex_count(self) -> int:
        return len(self.ring) - 1

    @property
    def is_closed(self) -> bool:
        return len(self.ring) > 1 and self.ring[0] == self.ring[-1]

    def exterior(self) -> List[List[float]]:
        """Ring in [lon, lat] order."""
        return [c.as_lon_lat() for c in self.ring]

    @property
    def __geo_interface__(self) -> Dict[str, Any]:
        return {'type': 'Polygon', 'coordinates': [self.exterior()]}

    def to_shapely(self) -> Polygon:
        return Polygon([(c.lon, c.lat) for c in self.ring])


@dataclass(frozen=True)
class RouteWarning:
    kind: str
    message: str
    severity: str

    def __post_init__(self):
        if self.severity not in SEVERITY_RANK:
            raise ValueError(f"Unknown severity '{self.severity}', expected one of {SEVERITY_LEVELS}")

    def to_dict(self) -> Dict[str, str]:
        return {'type': self.kind, 'message': self.message, 'severity': self.severity}


@dataclass(frozen=True)
class RouteInstruction:
    text: str
    distance: float
    duration: float
    maneuver_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'distance': self.distance,
            'duration': self.duration,
            'type': self.maneuver_type
        }


@dataclass(frozen=True)
class Waypoint:
    name: str
    coordinate: Coordinate

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'coordinates': self.coordinate.to_dict()}


BoundingBox = Tuple[Tuple[float, float], Tuple[float, float]]


@dataclass(frozen=True)
class NormalizedRoute:
    """Routing engine response with engine-specific fields dropped."""

    distance: float
    duration: float
    geometry: Tuple[Coordinate, ...]
    instructions: Tuple[RouteInstruction, ...] = ()
    bounding_box: Optional[BoundingBox] = None


@dataclass(frozen=True)
class RouteResult:
    """
    Final route handed to the display layer.

    distance is in meters, duration in seconds. bounding_box is
    ((min_lon, min_lat), (max_lon, max_lat)). warnings is empty when the
    proximity audit found nothing; to_dict() then omits the key entirely.
    """

    distance: float
    duration: float
    geometry: Tuple[Coordinate, ...]
    instructions: Tuple[RouteInstruction, ...]
    waypoints: Tuple[Waypoint, Waypoint]
    bounding_box: Optional[BoundingBox] = None
    warnings: Tuple[RouteWarning, ...] = ()

    @property
    def start(self) -> Waypoint:
        return self.waypoints[0]

    @property
    def end(self) -> Waypoint:
        return self.waypoints[1]

    @property
    def risk_level(self) -> Optional[str]:
        """Severity of the worst warning, or None for a clear route."""
        return highest_severity(self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'distance': self.distance,
            'duration': self.duration,
            'geometry': {
                'type': 'LineString',
                'coordinates': [c.as_lon_lat() for c in self.geometry]
            },
            'instructions': [i.to_dict() for i in self.instructions],
            'waypoints': [w.to_dict() for w in self.waypoints],
            'boundingBox': [list(corner) for corner in self.bounding_box] if self.bounding_box else None
        }
        if self.warnings:
            result['warnings'] = [w.to_dict() for w in self.warnings]
            result['risk_level'] = self.risk_level
        return result


@dataclass(frozen=True)
class PlannerConfig:
    """
    Per-request planning options.

    Passed explicitly into every plan_route() call; core services never read
    environment variables or module-level settings.
    """

    polygon_points: int = 32
    country: str = 'US'
    profile: str = 'driving-car'
    preference: str = 'fastest'
    exclude_zones_at_endpoints: bool = True
    language: str = 'en'

    def __post_init__(self):
        if self.polygon_points < 8:
            raise ValueError(f"polygon_points must be at least 8, got {self.polygon_points}")
