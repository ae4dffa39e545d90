"""
Route Calculation Service for Hazard-Aware Navigation

Requests driving routes from the OpenRouteService (ORS) directions API while
instructing the engine to treat fire avoidance polygons as no-go areas, and
normalizes the engine's GeoJSON response into the planner's route shape.

Features:
- Single fastest drivable route (ORS driving-car profile by default)
- All avoidance polygons sent as one GeoJSON MultiPolygon
- Every failure classified at the call site (RouteUnavailable,
  AuthenticationFailure, ServiceUnavailable)
- Independent request timeout, no automatic retry

Avoidance is best-effort: when no alternative exists ORS may still return a
path crossing a polygon, so routes must be audited afterwards.
"""

import logging
from typing import Any, Dict, Sequence

import requests

from services.errors import AuthenticationFailure, RouteUnavailable, ServiceUnavailable
from services.models import AvoidancePolygon, Coordinate, NormalizedRoute, RouteInstruction
from utils.geo import bounding_box
from utils.secure_logging import redact_coordinates

# Configure logging
logger = logging.getLogger(__name__)


class RouteCalculationService:
    """
    Service for calculating hazard-aware routes using OpenRouteService API.

    Provides methods to:
    - Build ORS directions payloads with avoid_polygons
    - Call the directions API and classify failures
    - Parse the GeoJSON response into a NormalizedRoute
    """

    # ORS API Configuration
    ORS_BASE_URL = "https://api.openrouteservice.org/v2/directions"
    ORS_TIMEOUT_SECONDS = 30

    # ORS error codes meaning "no route exists for this request"
    # 2004: request exceeds limits (e.g. avoid area too large)
    # 2009: route could not be found between the points
    # 2010: no routable point near a coordinate
    ROUTE_NOT_FOUND_CODES = {2004, 2009, 2010}

    # ORS instruction type codes
    MANEUVER_TYPES = {
        0: 'left',
        1: 'right',
        2: 'sharp_left',
        3: 'sharp_right',
        4: 'slight_left',
        5: 'slight_right',
        6: 'straight',
        7: 'enter_roundabout',
        8: 'exit_roundabout',
        9: 'uturn',
        10: 'arrive',
        11: 'depart',
        12: 'keep_left',
        13: 'keep_right'
    }

    def __init__(self, credentials, timeout: float = ORS_TIMEOUT_SECONDS, base_url: str = ORS_BASE_URL):
        """
        Initialize the Route Calculation Service.

        Args:
            credentials: Provider with a get_api_key() method
            timeout: Directions request timeout in seconds
            base_url: Directions endpoint root (overridable for self-hosted ORS)
        """
        self.credentials = credentials
        self.timeout = timeout
        self.base_url = base_url.rstrip('/')

    def plan(
        self,
        start: Coordinate,
        end: Coordinate,
        avoid: Sequence[AvoidancePolygon] = (),
        profile: str = 'driving-car',
        preference: str = 'fastest',
        language: str = 'en'
    ) -> NormalizedRoute:
        """
        Request a route from start to end avoiding the given polygons.

        Args:
            start: Route origin
            end: Route destination
            avoid: Avoidance polygons treated as no-go areas
            profile: ORS routing profile
            preference: ORS weighting ('fastest', 'shortest', 'recommended')
            language: Instruction language

        Returns:
            NormalizedRoute with distance (m), duration (s), geometry,
            instructions and bounding box

        Raises:
            RouteUnavailable: If the engine returns no candidate route
            AuthenticationFailure: If the API key cannot be obtained or is rejected
            ServiceUnavailable: If the engine cannot be reached or fails transiently
        """
        start_lat, start_lon = redact_coordinates(start.lat, start.lon)
        end_lat, end_lon = redact_coordinates(end.lat, end.lon)
        logger.info(
            f"Requesting route from ({start_lat}, {start_lon}) to ({end_lat}, {end_lon}) "
            f"avoiding {len(avoid)} polygons"
        )

        api_key = self.credentials.get_api_key()
        payload = self.build_ors_request(start, end, avoid, preference=preference, language=language)

        try:
            response = requests.post(
                f"{self.base_url}/{profile}/geojson",
                json=payload,
                headers={
                    'Authorization': api_key,
                    'Content-Type': 'application/json',
                    'Accept': 'application/geo+json'
                },
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"ORS API request timed out after {self.timeout}s")
            raise ServiceUnavailable("Routing service timed out") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"ORS API request failed: {e}")
            raise ServiceUnavailable("Routing service unreachable") from e

        ors_data = self._classify_response(response)

        try:
            route = self.parse_ors_response(ors_data)
        except ValueError as e:
            logger.warning(f"No usable route in ORS response: {e}")
            raise RouteUnavailable() from e

        logger.info(f"Route found: {route.distance / 1000.0:.1f} km in {route.duration / 60:.0f} min")
        return route

    def build_ors_request(
        self,
        start: Coordinate,
        end: Coordinate,
        avoid: Sequence[AvoidancePolygon] = (),
        preference: str = 'fastest',
        language: str = 'en'
    ) -> Dict[str, Any]:
        """
        Build OpenRouteService API request payload.

        Notes:
            - Coordinates are converted to [lon, lat] format for ORS
            - Polygons are merged into a single GeoJSON MultiPolygon
            - options is omitted entirely when there is nothing to avoid
        """
        payload = {
            "coordinates": [start.as_lon_lat(), end.as_lon_lat()],
            "instructions": True,
            "instructions_format": "text",
            "language": language,
            "geometry": True,
            "elevation": False,
            "preference": preference,
            "units": "m"
        }

        if avoid:
            payload["options"] = {
                "avoid_polygons": {
                    "type": "MultiPolygon",
                    "coordinates": [[polygon.exterior()] for polygon in avoid]
                }
            }
            logger.debug(f"Added {len(avoid)} avoidance polygons to request")

        return payload

    def parse_ors_response(self, response_json: Dict[str, Any]) -> NormalizedRoute:
        """
        Parse OpenRouteService GeoJSON response into a NormalizedRoute.

        Only the first feature is used: the planner requests a single
        fastest route.

        Raises:
            ValueError: If the response contains no usable route
        """
        features = response_json.get('features') or []
        if not isinstance(features, list) or not features:
            raise ValueError("ORS response contains no features")

        feature = features[0]
        if not isinstance(feature, dict):
            raise ValueError("ORS route feature is not an object")

        try:
            properties = feature.get('properties') or {}
            summary = properties.get('summary') or {}
            raw_geometry = feature['geometry']['coordinates']
            geometry = tuple(Coordinate(point[1], point[0]) for point in raw_geometry)
            distance = float(summary.get('distance', 0))
            duration = float(summary.get('duration', 0))
        except (AttributeError, KeyError, TypeError, IndexError) as e:
            raise ValueError(f"Malformed ORS route: {e}")

        if not geometry:
            raise ValueError("ORS route has an empty geometry")

        instructions = []
        try:
            for segment in properties.get('segments') or []:
                for step in segment.get('steps') or []:
                    instructions.append(self._parse_step(step))
        except (AttributeError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed ORS route instructions: {e}")

        bbox = feature.get('bbox') or response_json.get('bbox')
        if isinstance(bbox, list) and len(bbox) >= 4:
            route_bbox = ((bbox[0], bbox[1]), (bbox[2], bbox[3]))
        else:
            route_bbox = bounding_box((c.lat, c.lon) for c in geometry)

        return NormalizedRoute(
            distance=distance,
            duration=duration,
            geometry=geometry,
            instructions=tuple(instructions),
            bounding_box=route_bbox
        )

    # ========== Private Helper Methods ==========

    def _classify_response(self, response) -> Dict[str, Any]:
        """Map HTTP status and ORS error payloads onto the error taxonomy."""
        if response.status_code in (401, 403):
            logger.error(f"ORS API rejected credentials: {response.status_code}")
            raise AuthenticationFailure("Routing service rejected the API key")

        if response.status_code == 429:
            logger.error("ORS API rate limit exceeded")
            raise ServiceUnavailable("Routing service rate limit exceeded")

        try:
            ors_data = response.json()
        except ValueError as e:
            logger.error(f"Failed to parse ORS API response (status {response.status_code}): {e}")
            raise ServiceUnavailable("Routing service returned an invalid response") from e

        error = ors_data.get('error') if isinstance(ors_data, dict) else None
        if error:
            error_code = error.get('code') if isinstance(error, dict) else None
            error_msg = error.get('message', 'Unknown error') if isinstance(error, dict) else str(error)
            logger.warning(f"ORS error {error_code}: {error_msg}")

            if error_code in self.ROUTE_NOT_FOUND_CODES or 400 <= response.status_code < 500:
                raise RouteUnavailable()
            raise ServiceUnavailable(f"Routing service error {error_code}")

        if response.status_code >= 500:
            logger.error(f"ORS API server error: {response.status_code}")
            raise ServiceUnavailable(f"Routing service returned status {response.status_code}")

        if response.status_code != 200:
            logger.warning(f"ORS API returned status {response.status_code}")
            raise RouteUnavailable()

        if not isinstance(ors_data, dict):
            raise ServiceUnavailable("Routing service returned an invalid response")

        return ors_data

    def _parse_step(self, step: Dict[str, Any]) -> RouteInstruction:
        step_type = step.get('type')
        if isinstance(step_type, int):
            maneuver = self.MANEUVER_TYPES.get(step_type, str(step_type))
        elif step_type is None:
            maneuver = 'unknown'
        else:
            maneuver = str(step_type)

        text = step.get('instruction') or self._generate_instruction(maneuver, step.get('name', ''))

        return RouteInstruction(
            text=text,
            distance=float(step.get('distance', 0)),
            duration=float(step.get('duration', 0)),
            maneuver_type=maneuver
        )

    def _generate_instruction(self, maneuver: str, street: str = '') -> str:
        """Fallback text when ORS omits the instruction for a step."""
        templates = {
            'depart': 'Start your route',
            'arrive': 'Arrive at your destination',
            'straight': 'Continue straight',
            'uturn': 'Make a U-turn',
            'enter_roundabout': 'Enter roundabout',
            'exit_roundabout': 'Exit roundabout'
        }
        text = templates.get(maneuver, maneuver.replace('_', ' ').capitalize())
        if street and street != '-' and maneuver not in ('depart', 'arrive'):
            text = f"{text} onto {street}"
        return text
