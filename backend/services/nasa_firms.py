"""
NASA FIRMS Wildfire Data Integration
Fetches active fire/thermal anomaly detections from NASA's Fire Information for Resource Management System (FIRMS)
and converts them into HazardDetection records for route planning.
Documentation: https://firms.modaps.eosdis.nasa.gov/
"""
import logging
from typing import List

import requests

from services.errors import AuthenticationFailure, ServiceUnavailable
from services.models import HazardDetection
from utils.geo import is_valid_coordinates

logger = logging.getLogger(__name__)


class NASAFirmsService:
    """Service to fetch wildfire detections from NASA FIRMS"""

    # Use the Area API endpoint for precise geographic filtering
    BASE_URL = "https://firms.modaps.eosdis.nasa.gov/api/area"
    TIMEOUT_SECONDS = 30

    DEFAULT_SOURCE = 'MODIS_C6_1'

    # California (west,south,east,north)
    DEFAULT_BBOX = '-124.5,32.5,-114.0,42.0'

    # VIIRS reports confidence as low/nominal/high instead of a percentage
    VIIRS_CONFIDENCE = {'l': 30.0, 'n': 60.0, 'h': 90.0}

    def __init__(self, credentials, timeout: float = TIMEOUT_SECONDS, base_url: str = BASE_URL):
        """
        Args:
            credentials: Provider with a get_api_key() method returning the FIRMS MAP_KEY
            timeout: Request timeout in seconds
        """
        self.credentials = credentials
        self.timeout = timeout
        self.base_url = base_url

    def get_detections(self, bbox: str = DEFAULT_BBOX, days: int = 1,
                       source: str = DEFAULT_SOURCE) -> List[HazardDetection]:
        """
        Fetch fire detections inside a bounding box

        Args:
            bbox: "west,south,east,north" in decimal degrees
            days: Number of days of data to retrieve (1-10 supported by API)
            source: FIRMS product, e.g. MODIS_C6_1 or VIIRS_SNPP_NRT

        Returns:
            list: HazardDetection records, empty when FIRMS has no data for the area

        Raises:
            AuthenticationFailure: If the MAP_KEY is missing or rejected
            ServiceUnavailable: If FIRMS cannot be reached or errors
        """
        days = min(max(int(days), 1), 10)
        api_key = self.credentials.get_api_key()

        # Format: /api/area/csv/[MAP_KEY]/[SOURCE]/[AREA]/[DAYS]
        url = f"{self.base_url}/csv/{api_key}/{source}/{bbox}/{days}"
        logger.info(f"NASA FIRMS: Fetching {source} detections for bounding box {bbox}, {days} day(s)")

        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"NASA FIRMS ERROR: Request exception: {e}")
            raise ServiceUnavailable("NASA FIRMS unreachable") from e

        logger.info(f"NASA FIRMS: Status code: {response.status_code}")

        if response.status_code == 404:
            logger.info(f"NASA FIRMS: No data for region {bbox}")
            return []

        if response.status_code in (401, 403):
            raise AuthenticationFailure("NASA FIRMS rejected the MAP_KEY")

        if response.status_code != 200:
            raise ServiceUnavailable(f"NASA FIRMS returned status {response.status_code}")

        csv_data = response.text.strip()
        if csv_data.startswith('Invalid'):
            logger.error(f"NASA FIRMS: {csv_data[:80]}")
            raise AuthenticationFailure("NASA FIRMS rejected the request")

        detections = self.parse_csv(csv_data)
        logger.info(f"NASA FIRMS: Parsed {len(detections)} detections")
        return detections

    def parse_csv(self, csv_data: str) -> List[HazardDetection]:
        """
        Parse a FIRMS area CSV into detections

        Handles both MODIS (brightness, numeric confidence) and VIIRS
        (bright_ti4, l/n/h confidence) column layouts. Malformed rows are skipped.
        """
        lines = csv_data.strip().split('\n')
        if len(lines) < 2:
            return []

        header = [column.strip() for column in lines[0].split(',')]
        detections = []

        for line in lines[1:]:
            if not line.strip():
                continue

            values = line.split(',')
            if len(values) < len(header):
                continue

            data = dict(zip(header, (v.strip() for v in values)))

            try:
                latitude = float(data['latitude'])
                longitude = float(data['longitude'])
                brightness = float(data.get('brightness') or data.get('bright_ti4') or 0)
                confidence = self._parse_confidence(data.get('confidence', ''))
            except (KeyError, ValueError):
                continue

            if not is_valid_coordinates(latitude, longitude):
                continue

            detections.append(HazardDetection.from_dict({
                'latitude': latitude,
                'longitude': longitude,
                'intensity': brightness,
                'confidence': confidence,
                'acquisition_date': data.get('acq_date', ''),
                'satellite': data.get('satellite') or None
            }))

        return detections

    def _parse_confidence(self, raw: str) -> float:
        """
        Convert FIRMS confidence to a 0-100 percentage

        Raises:
            ValueError: If the value is neither numeric nor a VIIRS class
        """
        raw = raw.strip().lower()
        if raw in self.VIIRS_CONFIDENCE:
            return self.VIIRS_CONFIDENCE[raw]
        return min(max(float(raw), 0.0), 100.0)
