"""
Tests for secure logging utilities with location and credential redaction.
"""

from utils.secure_logging import (
    redact_pii,
    redact_coordinates,
    safe_log_dict
)


class TestRedactPII:
    """Tests for PII redaction function"""

    def test_redact_email_addresses(self):
        """Email addresses should be redacted"""
        text = "Key requested by john.doe@example.com"
        result = redact_pii(text)
        assert result == "Key requested by [EMAIL_REDACTED]"
        assert "@example.com" not in result

    def test_redact_precise_coordinates(self):
        """Precise coordinates (4+ decimals) should be redacted"""
        text = "Start: 36.7378, -119.7871"
        result = redact_pii(text)
        assert result == "Start: [COORD_REDACTED], [COORD_REDACTED]"

    def test_keep_rough_coordinates(self):
        """Rough coordinates (1-3 decimals) should be preserved for debugging"""
        text = "Zone near 36.85, -118.95"
        assert redact_pii(text) == "Zone near 36.85, -118.95"

    def test_redact_ipv4_addresses(self):
        """IPv4 addresses should be redacted"""
        assert redact_pii("Request from 192.168.1.100") == "Request from [IP_REDACTED]"

    def test_empty_text_passthrough(self):
        """Empty or None input is returned unchanged"""
        assert redact_pii("") == ""
        assert redact_pii(None) is None


class TestRedactCoordinates:
    """Tests for coordinate rounding"""

    def test_default_precision(self):
        assert redact_coordinates(36.7378, -119.7871) == ('36.74', '-119.79')

    def test_custom_precision(self):
        assert redact_coordinates(36.7378, -119.7871, precision=1) == ('36.7', '-119.8')

    def test_missing_values(self):
        assert redact_coordinates(None, None) == ('[REDACTED]', '[REDACTED]')
        assert redact_coordinates(36.7, None) == ('[REDACTED]', '[REDACTED]')


class TestSafeLogDict:
    """Tests for dictionary sanitization"""

    def test_redacts_api_keys_case_insensitive(self):
        """Credential-like keys are caught regardless of case"""
        result = safe_log_dict({'apiKey': 'secret123', 'Authorization': 'abc', 'size': 1})
        assert result == {'apiKey': '[REDACTED]', 'Authorization': '[REDACTED]', 'size': 1}

    def test_redacts_address_text(self):
        """Geocoding search text is user location data"""
        result = safe_log_dict({'text': '123 Main St', 'boundary.country': 'US'})
        assert result['text'] == '[REDACTED]'
        assert result['boundary.country'] == 'US'

    def test_nested_structures(self):
        """Nested dicts and lists of dicts are sanitized recursively"""
        data = {
            'headers': {'Authorization': 'key'},
            'detections': [{'latitude': 36.85, 'confidence': 99}]
        }
        result = safe_log_dict(data)
        assert result['headers']['Authorization'] == '[REDACTED]'
        assert result['detections'][0]['latitude'] == '[REDACTED]'
        assert result['detections'][0]['confidence'] == 99

    def test_custom_redact_keys(self):
        result = safe_log_dict({'token': 'x', 'profile': 'driving-car'}, redact_keys=['profile'])
        assert result == {'token': 'x', 'profile': '[REDACTED]'}

    def test_original_not_modified(self):
        data = {'api_key': 'secret'}
        safe_log_dict(data)
        assert data['api_key'] == 'secret'
