"""
Route Planner - hazard-aware route generation pipeline

Runs one planning request as a sequential pipeline:

    geocode -> build zones -> build polygons -> request route -> audit -> assemble

Each external call (geocoding, directions) is a suspension point with its
own timeout. Zones, polygons and results are request-scoped values, so a
planner instance can serve concurrent requests without locking.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from shapely.geometry import Point

from services import avoidance_polygon, hazard_zone_builder, proximity_audit, route_assembler
from services.errors import NotFound
from services.models import AvoidancePolygon, Coordinate, HazardDetection, PlannerConfig, RouteResult
from utils.secure_logging import redact_coordinates

logger = logging.getLogger(__name__)

Location = Union[str, Coordinate]


class RoutePlanner:
    """
    Hazard-aware route planner.

    Usage:
        planner = RoutePlanner(geocoder=GeocodingService(creds), router=RouteCalculationService(creds))
        result = planner.plan_route(Coordinate(36.70, -119.40), "Bishop, CA", detections)
        if result.warnings:
            print(result.risk_level)

    Failures surface as RoutePlanningError subclasses:
        NotFound              - destination text resolved to nothing
        RouteUnavailable      - no route, possibly because zones block every path
        AuthenticationFailure - credential missing or rejected
        ServiceUnavailable    - transient network/HTTP failure
    """

    def __init__(self, geocoder, router):
        """
        Args:
            geocoder: Object with resolve(text, country=None) -> Coordinate | None
            router: Object with plan(start, end, avoid, profile=, preference=, language=)
        """
        self.geocoder = geocoder
        self.router = router

    def plan_route(
        self,
        start: Location,
        destination: Location,
        detections: Iterable[HazardDetection] = (),
        config: Optional[PlannerConfig] = None
    ) -> RouteResult:
        """
        Plan a route from start to destination avoiding current fire zones.

        Args:
            start: Coordinate or address text
            destination: Coordinate or address text
            detections: Current hazard feed snapshot for this request
            config: Per-request options (defaults to PlannerConfig())

        Returns:
            RouteResult; warnings is empty when the route stays clear of every zone

        Raises:
            NotFound, RouteUnavailable, AuthenticationFailure, ServiceUnavailable
        """
        config = config or PlannerConfig()

        start_coord = self._resolve(start, 'Start location', config)
        end_coord = self._resolve(destination, 'Destination', config)

        zones = hazard_zone_builder.build_zones(detections)
        polygons = avoidance_polygon.to_polygons(zones, config.polygon_points)
        if config.exclude_zones_at_endpoints:
            polygons = self._exclude_endpoint_polygons(polygons, start_coord, end_coord)

        normalized = self.router.plan(
            start_coord,
            end_coord,
            polygons,
            profile=config.profile,
            preference=config.preference,
            language=config.language
        )

        # Audit runs only once the engine's geometry is known
        warnings = proximity_audit.audit(normalized.geometry, zones)

        result = route_assembler.assemble(normalized, warnings, start_coord, end_coord)
        logger.info(
            f"Planned route: {result.distance / 1000.0:.1f} km, {len(zones)} zones considered, "
            f"risk level {result.risk_level or 'none'}"
        )
        return result

    def _resolve(self, location: Location, label: str, config: PlannerConfig) -> Coordinate:
        if isinstance(location, Coordinate):
            return location

        coordinate = self.geocoder.resolve(location, country=config.country)
        if coordinate is None:
            raise NotFound(f"{label} not found")
        return coordinate

    def _exclude_endpoint_polygons(
        self,
        polygons: Sequence[AvoidancePolygon],
        start: Coordinate,
        end: Coordinate
    ) -> List[AvoidancePolygon]:
        """
        Drop polygons containing the start or destination.

        A user already inside a fire zone has to route OUT of it, and the
        engine rejects requests whose endpoints lie in an avoid area. Those
        zones are still audited, so the route is reported as critical.
        """
        endpoints: Tuple[Point, Point] = (Point(start.lon, start.lat), Point(end.lon, end.lat))
        kept = []
        for polygon in polygons:
            shape = polygon.to_shapely()
            if any(shape.contains(point) for point in endpoints):
                lat, lon = redact_coordinates(polygon.zone.center.lat, polygon.zone.center.lon)
                logger.info(f"Excluding zone at ({lat}, {lon}) from avoidance - route endpoint is inside it")
                continue
            kept.append(polygon)
        return kept
