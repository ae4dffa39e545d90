"""
Log redaction for location data and API credentials.

Route planning handles users' precise start positions, destination text and
third-party API keys. None of them should reach log files verbatim.

Usage:
    from utils.secure_logging import redact_coordinates, safe_log_dict

    lat, lon = redact_coordinates(start.lat, start.lon)
    logger.info(f"Planning route from ({lat}, {lon})")
    # Output: "Planning route from (36.70, -119.40)"

    logger.debug(f"Geocoding params: {safe_log_dict(params)}")
    # Output: "Geocoding params: {'text': '[REDACTED]', 'boundary.country': 'US', 'size': 1}"
"""

import re
from typing import Optional

REDACTED = '[REDACTED]'

# Order matters: precise coordinates are removed before the IP pattern runs
_PII_PATTERNS = [
    (re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'), '[EMAIL_REDACTED]'),
    # 1-3 decimals (city/neighborhood level) are kept for debugging
    (re.compile(r'-?\d{1,3}\.\d{4,}'), '[COORD_REDACTED]'),
    (re.compile(r'\b(?:\d{1,3}\.){3}\d{1,3}\b'), '[IP_REDACTED]'),
]

DEFAULT_REDACT_KEYS = [
    'api_key', 'apikey', 'authorization', 'token', 'secret', 'password',
    'email', 'address', 'text', 'latitude', 'longitude'
]


def redact_pii(text: str) -> str:
    """
    Scrub emails, building-level coordinates and IP addresses from a message.

    Examples:
        >>> redact_pii("Key requested by jane@example.com")
        'Key requested by [EMAIL_REDACTED]'

        >>> redact_pii("Start: 36.7378, -119.7871")
        'Start: [COORD_REDACTED], [COORD_REDACTED]'
    """
    if not text:
        return text

    for pattern, replacement in _PII_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def redact_coordinates(lat: Optional[float], lon: Optional[float], precision: int = 2) -> tuple[str, str]:
    """
    Format a position rounded for logs.

    Two decimals (~1.1 km) is enough to tell which fire a route went near
    without pinpointing a user's home.

    Examples:
        >>> redact_coordinates(36.7378, -119.7871)
        ('36.74', '-119.79')

        >>> redact_coordinates(None, None)
        ('[REDACTED]', '[REDACTED]')
    """
    if lat is None or lon is None:
        return (REDACTED, REDACTED)

    return (f"{lat:.{precision}f}", f"{lon:.{precision}f}")


def _sanitize(value, redact_keys):
    if isinstance(value, dict):
        return safe_log_dict(value, redact_keys)
    if isinstance(value, list):
        return [_sanitize(item, redact_keys) for item in value]
    return value


def safe_log_dict(data: dict, redact_keys: Optional[list[str]] = None) -> dict:
    """
    Copy of data with sensitive keys replaced by '[REDACTED]'.

    Keys match case-insensitively by substring, so 'apiKey' and an
    'Authorization' header are both caught by the defaults. Nested dicts and
    lists are sanitized recursively; the input is not modified.

    Examples:
        >>> safe_log_dict({'apiKey': 'secret123', 'size': 1})
        {'apiKey': '[REDACTED]', 'size': 1}
    """
    if redact_keys is None:
        redact_keys = DEFAULT_REDACT_KEYS

    return {
        key: REDACTED if any(k in str(key).lower() for k in redact_keys) else _sanitize(value, redact_keys)
        for key, value in data.items()
    }
