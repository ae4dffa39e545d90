"""
Geocoding Service - Forward Geocoding with OpenRouteService

Converts a free-text destination into coordinates for route planning.

Features:
- OpenRouteService geocode search (Pelias) restricted to one country
- Always takes the single best-ranked match
- Distinguishes "no match" (normal outcome) from operational failures
- Independent request timeout, no automatic retries (paid third-party API)
"""

import logging
from typing import Dict, List, Optional

import requests

from services.errors import AuthenticationFailure, ServiceUnavailable
from services.models import Coordinate
from utils.secure_logging import redact_coordinates, safe_log_dict

logger = logging.getLogger(__name__)


class GeocodingService:
    """
    Forward geocoding service using the OpenRouteService search API

    Usage:
        service = GeocodingService(StaticCredentialProvider(key), country='US')
        coordinate = service.resolve("Bishop, CA")
        # Returns: Coordinate(lat=37.36, lon=-118.39) or None when nothing matches
    """

    BASE_URL = "https://api.openrouteservice.org/geocode/search"
    TIMEOUT_SECONDS = 10

    def __init__(self, credentials, country: str = 'US', timeout: float = TIMEOUT_SECONDS,
                 base_url: str = BASE_URL):
        """
        Initialize geocoding service

        Args:
            credentials: Provider with a get_api_key() method
            country: ISO country code limiting the search scope
            timeout: Request timeout in seconds
            base_url: Search endpoint (overridable for self-hosted Pelias)
        """
        self.credentials = credentials
        self.country = country
        self.timeout = timeout
        self.base_url = base_url

    def resolve(self, address_text: str, country: Optional[str] = None) -> Optional[Coordinate]:
        """
        Convert address text to coordinates

        Args:
            address_text: Non-empty free-text address or place name
            country: Overrides the service's country filter for this call

        Returns:
            Coordinate of the top match, or None if the search found nothing

        Raises:
            ValueError: If address_text is empty
            AuthenticationFailure: If the API key cannot be obtained or is rejected
            ServiceUnavailable: If the search API cannot be reached or errors
        """
        matches = self.search(address_text, country=country, size=1)
        if not matches:
            logger.info("Geocoding returned no results for destination")
            return None

        coordinate = matches[0]['coordinate']
        lat, lon = redact_coordinates(coordinate.lat, coordinate.lon)
        logger.info(f"Geocoded destination to ({lat}, {lon})")
        return coordinate

    def search(self, text: str, country: Optional[str] = None, size: int = 1) -> List[Dict]:
        """
        Run an address search and return ranked matches

        Returns:
            List of {'coordinate': Coordinate, 'confidence': float, 'label': str},
            best match first
        """
        if not text or not text.strip():
            raise ValueError("Address text must not be empty")

        api_key = self.credentials.get_api_key()
        params = {
            'text': text.strip(),
            'boundary.country': country or self.country,
            'size': size
        }
        logger.debug(f"Geocoding search params: {safe_log_dict(params)}")

        try:
            response = requests.get(
                self.base_url,
                params=params,
                headers={'Authorization': api_key, 'Accept': 'application/json'},
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Geocoding request timed out after {self.timeout}s")
            raise ServiceUnavailable("Geocoding service timed out") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Geocoding request failed: {e}")
            raise ServiceUnavailable("Geocoding service unreachable") from e

        if response.status_code in (401, 403):
            logger.error(f"Geocoding API rejected credentials: {response.status_code}")
            raise AuthenticationFailure("Geocoding service rejected the API key")

        if response.status_code != 200:
            logger.warning(f"Geocoding API error: {response.status_code}")
            raise ServiceUnavailable(f"Geocoding service returned status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Geocoding API returned invalid JSON: {e}")
            raise ServiceUnavailable("Geocoding service returned an invalid response") from e

        if not isinstance(data, dict):
            raise ServiceUnavailable("Geocoding service returned an invalid response")

        return self._parse_search_response(data)

    def _parse_search_response(self, data: Dict) -> List[Dict]:
        """
        Extract coordinates from a GeoJSON FeatureCollection

        Features with missing or out-of-range coordinates are skipped.
        """
        matches = []
        for feature in data.get('features') or []:
            try:
                lon, lat = feature['geometry']['coordinates'][:2]
                coordinate = Coordinate(lat, lon)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed geocoding feature: {e}")
                continue

            properties = feature.get('properties') or {}
            matches.append({
                'coordinate': coordinate,
                'confidence': properties.get('confidence'),
                'label': properties.get('label', '')
            })

        return matches
