"""
Test suite for the hazard-aware routing backend.

This package contains:
- test_route_planner.py: End-to-end planning pipeline with fake geocoder/router
- test_proximity_audit.py: Warning severity and one-warning-per-zone rules
- test_avoidance_polygon.py / test_hazard_zone_builder.py: Zone and polygon geometry
- test_route_calculation_service.py / test_geocoding_service.py: ORS clients (mocked HTTP)
- test_api.py: Flask endpoints and error-to-status mapping

Run tests:
    pip install -e ".[test]"
    python -m pytest

Run specific test file:
    python -m pytest backend/tests/test_route_planner.py
"""
