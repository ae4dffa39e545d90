"""
Validation utilities for route planning requests.

Provides centralized validation logic for:
- Coordinate ranges (latitude/longitude)
- Route endpoints given as coordinates or address text
- Hazard detection records supplied with a planning request
"""
import math
from typing import Any, Dict, Optional, Tuple


class CoordinateValidator:
    """Validator for geographic coordinates."""

    @staticmethod
    def validate_coordinates(lat: float, lon: float) -> bool:
        """
        Validate latitude and longitude ranges.

        Examples:
            >>> CoordinateValidator.validate_coordinates(36.70, -119.40)
            True
            >>> CoordinateValidator.validate_coordinates(91, 0)  # Invalid latitude
            False
            >>> CoordinateValidator.validate_coordinates(0, 181)  # Invalid longitude
            False
        """
        try:
            latitude = float(lat)
            longitude = float(lon)
            if math.isnan(latitude) or math.isnan(longitude):
                return False
            return -90 <= latitude <= 90 and -180 <= longitude <= 180
        except (TypeError, ValueError):
            return False

    @staticmethod
    def validate_coordinate_dict(coord: Dict[str, float]) -> bool:
        """
        Validate coordinate dictionary with 'lat' and 'lon' (or 'lng') keys.

        Examples:
            >>> CoordinateValidator.validate_coordinate_dict({'lat': 36.70, 'lon': -119.40})
            True
            >>> CoordinateValidator.validate_coordinate_dict({'lat': 36.70, 'lng': -119.40})
            True
            >>> CoordinateValidator.validate_coordinate_dict({'invalid': 'keys'})
            False
        """
        try:
            lat = coord['lat']
            lon = coord['lon'] if 'lon' in coord else coord['lng']
            return CoordinateValidator.validate_coordinates(lat, lon)
        except (KeyError, TypeError):
            return False


class RouteRequestValidator:
    """Validator for /api/routes/plan request bodies."""

    MAX_ADDRESS_LENGTH = 200
    MAX_DETECTIONS = 500
    MIN_POLYGON_POINTS = 8
    MAX_POLYGON_POINTS = 128

    @staticmethod
    def validate_location(value: Any, field: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a route endpoint given as {"lat", "lon"} or address text.

        Examples:
            >>> RouteRequestValidator.validate_location({'lat': 36.7, 'lon': -119.4}, 'start')
            (True, None)
            >>> RouteRequestValidator.validate_location('   ', 'destination')
            (False, 'destination must not be empty')
        """
        if isinstance(value, str):
            if not value.strip():
                return False, f'{field} must not be empty'
            if len(value) > RouteRequestValidator.MAX_ADDRESS_LENGTH:
                return False, f'{field} must be at most {RouteRequestValidator.MAX_ADDRESS_LENGTH} characters'
            return True, None

        if isinstance(value, dict):
            if 'lat' not in value or ('lon' not in value and 'lng' not in value):
                return False, f'{field} must include lat and lon'
            if not CoordinateValidator.validate_coordinate_dict(value):
                return False, (f'Invalid {field} coordinates: Latitude must be between -90 and 90, '
                               f'Longitude must be between -180 and 180')
            return True, None

        return False, f'{field} is required (address text or {{"lat", "lon"}})'

    @staticmethod
    def validate_detection(data: Any) -> Tuple[bool, Optional[str]]:
        """
        Validate one hazard detection record.

        Checks:
        - latitude/longitude present and in range
        - intensity (or brightness) is a non-negative number
        - confidence is a number between 0 and 100

        Examples:
            >>> RouteRequestValidator.validate_detection(
            ...     {'latitude': 36.85, 'longitude': -118.95, 'intensity': 400, 'confidence': 99})
            (True, None)
            >>> RouteRequestValidator.validate_detection(
            ...     {'latitude': 36.85, 'longitude': -118.95, 'intensity': 400, 'confidence': 120})
            (False, 'confidence must be between 0 and 100')
        """
        if not isinstance(data, dict):
            return False, 'Each detection must be an object'

        missing = [f for f in ('latitude', 'longitude', 'confidence') if f not in data]
        if 'intensity' not in data and 'brightness' not in data:
            missing.append('intensity')
        if missing:
            return False, f'Missing required detection fields: {", ".join(missing)}'

        if not CoordinateValidator.validate_coordinates(data['latitude'], data['longitude']):
            return False, 'Detection latitude/longitude out of range'

        try:
            intensity = float(data.get('intensity', data.get('brightness')))
            if math.isnan(intensity) or intensity < 0:
                return False, 'intensity must be a non-negative number'
        except (ValueError, TypeError):
            return False, 'intensity must be a number'

        try:
            confidence = float(data['confidence'])
            if not (0 <= confidence <= 100):
                return False, 'confidence must be between 0 and 100'
        except (ValueError, TypeError):
            return False, 'confidence must be a number'

        return True, None

    @staticmethod
    def validate_plan_request(data: Dict) -> Tuple[bool, Optional[str]]:
        """
        Validate a complete planning request body.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not isinstance(data, dict):
            return False, 'Request body must be a JSON object'

        for field in ('start', 'destination'):
            is_valid, error = RouteRequestValidator.validate_location(data.get(field), field)
            if not is_valid:
                return False, error

        detections = data.get('detections', [])
        if not isinstance(detections, list):
            return False, 'detections must be a list'
        if len(detections) > RouteRequestValidator.MAX_DETECTIONS:
            return False, f'At most {RouteRequestValidator.MAX_DETECTIONS} detections are supported'
        for index, detection in enumerate(detections):
            is_valid, error = RouteRequestValidator.validate_detection(detection)
            if not is_valid:
                return False, f'detections[{index}]: {error}'

        if 'point_count' in data:
            point_count = data['point_count']
            if isinstance(point_count, bool) or not isinstance(point_count, int):
                return False, 'point_count must be an integer'
            if not (RouteRequestValidator.MIN_POLYGON_POINTS <= point_count <= RouteRequestValidator.MAX_POLYGON_POINTS):
                return False, (f'point_count must be between {RouteRequestValidator.MIN_POLYGON_POINTS} '
                               f'and {RouteRequestValidator.MAX_POLYGON_POINTS}')

        return True, None
