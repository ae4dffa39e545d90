"""
API tests for the route planning endpoints

Planner and FIRMS services are replaced with mocks; these tests cover
request validation and the mapping of planning outcomes to HTTP statuses.
"""
import pytest
from unittest.mock import MagicMock

import app as app_module
from services.errors import AuthenticationFailure, NotFound, RouteUnavailable, ServiceUnavailable
from services.models import (
    Coordinate, HazardDetection, RouteInstruction, RouteResult, RouteWarning, Waypoint
)

START = Coordinate(36.70, -119.40)
END = Coordinate(37.00, -118.50)


def _route_result(warnings=()):
    return RouteResult(
        distance=85000.0,
        duration=3600.0,
        geometry=(START, END),
        instructions=(RouteInstruction('Head east', 85000.0, 3600.0, 'depart'),),
        waypoints=(Waypoint('Start', START), Waypoint('Destination', END)),
        bounding_box=((-119.40, 36.70), (-118.50, 37.00)),
        warnings=tuple(warnings)
    )


@pytest.fixture
def planner(monkeypatch):
    planner = MagicMock()
    planner.plan_route.return_value = _route_result()
    monkeypatch.setattr(app_module, 'route_planner', planner)
    return planner


@pytest.fixture
def firms(monkeypatch):
    firms = MagicMock()
    firms.get_detections.return_value = [
        HazardDetection(Coordinate(36.85, -118.95), 400.0, 99.0, '2025-08-01', 'Terra')
    ]
    monkeypatch.setattr(app_module, 'firms_service', firms)
    return firms


@pytest.fixture
def client():
    app_module.app.config['TESTING'] = True
    app_module.limiter.enabled = False
    with app_module.app.test_client() as client:
        yield client


@pytest.fixture
def plan_body():
    return {
        'start': {'lat': 36.70, 'lon': -119.40},
        'destination': {'lat': 37.00, 'lon': -118.50},
        'detections': []
    }


class TestHealth:

    def test_health(self, client):
        response = client.get('/api/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'

    def test_health_reports_distance_cache(self, client):
        cache = client.get('/api/health').get_json()['distance_cache']
        assert set(cache) == {'hits', 'misses', 'maxsize', 'currsize'}
        assert cache['maxsize'] == 10000

    def test_security_headers(self, client):
        response = client.get('/api/health')
        assert response.headers['X-Frame-Options'] == 'DENY'
        assert response.headers['X-Content-Type-Options'] == 'nosniff'


class TestPlanRoute:

    def test_clear_route(self, client, planner, plan_body):
        response = client.post('/api/routes/plan', json=plan_body)

        assert response.status_code == 200
        data = response.get_json()
        assert data['route']['distance'] == 85000.0
        assert 'warnings' not in data['route']
        assert data['advisory'] is None
        start, destination, detections, config = planner.plan_route.call_args[0]
        assert start == START
        assert destination == END
        assert detections == []
        assert config.polygon_points == 32

    def test_route_with_warnings(self, client, planner, plan_body):
        planner.plan_route.return_value = _route_result([
            RouteWarning('fire_zone', 'Route passes within 120m of a fire zone', 'critical')
        ])
        plan_body['detections'] = [{'latitude': 36.85, 'longitude': -118.95, 'intensity': 400, 'confidence': 99}]

        response = client.post('/api/routes/plan', json=plan_body)

        assert response.status_code == 200
        data = response.get_json()
        assert data['route']['warnings'][0]['severity'] == 'critical'
        assert data['route']['risk_level'] == 'critical'
        assert data['advisory'].startswith('WARNING')
        detections = planner.plan_route.call_args[0][2]
        assert detections[0].intensity == 400.0

    def test_text_destination_passed_through(self, client, planner, plan_body):
        plan_body['destination'] = '  Bishop, CA '
        client.post('/api/routes/plan', json=plan_body)
        assert planner.plan_route.call_args[0][1] == 'Bishop, CA'

    def test_point_count_forwarded(self, client, planner, plan_body):
        plan_body['point_count'] = 16
        client.post('/api/routes/plan', json=plan_body)
        assert planner.plan_route.call_args[0][3].polygon_points == 16

    def test_live_feed_detections_added(self, client, planner, firms, plan_body):
        plan_body['use_live_feed'] = True
        response = client.post('/api/routes/plan', json=plan_body)

        assert response.status_code == 200
        firms.get_detections.assert_called_once()
        assert len(planner.plan_route.call_args[0][2]) == 1
        assert response.get_json()['calculation_metadata']['detections_considered'] == 1

    def test_live_feed_capped_to_strongest(self, client, planner, firms, plan_body):
        """A busy fire day cannot push the request past the detection limit"""
        firms.get_detections.return_value = [
            HazardDetection(Coordinate(36.0 + i * 0.001, -119.0), 300.0 + i, 80.0)
            for i in range(600)
        ]
        plan_body['detections'] = [{'latitude': 36.85, 'longitude': -118.95, 'intensity': 400, 'confidence': 99}]
        plan_body['use_live_feed'] = True

        response = client.post('/api/routes/plan', json=plan_body)

        assert response.status_code == 200
        detections = planner.plan_route.call_args[0][2]
        assert len(detections) == 500
        # User-supplied detection kept, then the hottest live detections
        assert detections[0].intensity == 400.0
        assert detections[1].intensity == 899.0
        assert min(d.intensity for d in detections[1:]) == 401.0

    def test_live_feed_unconfigured(self, client, planner, plan_body, monkeypatch):
        monkeypatch.setattr(app_module, 'firms_service', None)
        plan_body['use_live_feed'] = True
        response = client.post('/api/routes/plan', json=plan_body)
        assert response.status_code == 503

    def test_empty_destination_rejected(self, client, planner, plan_body):
        plan_body['destination'] = ''
        response = client.post('/api/routes/plan', json=plan_body)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'destination must not be empty'
        planner.plan_route.assert_not_called()

    def test_invalid_detection_rejected(self, client, planner, plan_body):
        plan_body['detections'] = [{'latitude': 36.85, 'longitude': -118.95, 'intensity': 400, 'confidence': 150}]
        response = client.post('/api/routes/plan', json=plan_body)
        assert response.status_code == 400
        assert response.get_json()['error'].startswith('detections[0]')

    def test_missing_body(self, client, planner):
        response = client.post('/api/routes/plan', data='not json', content_type='text/plain')
        assert response.status_code == 400

    @pytest.mark.parametrize('error,status,kind', [
        (NotFound(), 404, 'NotFound'),
        (RouteUnavailable(), 422, 'RouteUnavailable'),
        (AuthenticationFailure(), 502, 'AuthenticationFailure'),
        (ServiceUnavailable(), 503, 'ServiceUnavailable')
    ])
    def test_planning_errors_mapped(self, client, planner, plan_body, error, status, kind):
        planner.plan_route.side_effect = error

        response = client.post('/api/routes/plan', json=plan_body)

        assert response.status_code == status
        data = response.get_json()
        assert data['kind'] == kind
        assert data['message'] == error.message

    def test_unexpected_error(self, client, planner, plan_body):
        planner.plan_route.side_effect = RuntimeError('boom')
        response = client.post('/api/routes/plan', json=plan_body)
        assert response.status_code == 500
        assert 'boom' not in response.get_json()['error']

    def test_planner_not_configured(self, client, plan_body, monkeypatch):
        monkeypatch.setattr(app_module, 'route_planner', None)
        response = client.post('/api/routes/plan', json=plan_body)
        assert response.status_code == 503


class TestWildfires:

    def test_list_detections(self, client, firms):
        response = client.get('/api/public-data/wildfires?days=2')

        assert response.status_code == 200
        data = response.get_json()
        assert data[0]['latitude'] == 36.85
        assert data[0]['satellite'] == 'Terra'
        assert firms.get_detections.call_args[1]['days'] == 2

    def test_days_clamped(self, client, firms):
        client.get('/api/public-data/wildfires?days=99')
        assert firms.get_detections.call_args[1]['days'] == 10

    def test_invalid_bbox(self, client, firms):
        response = client.get('/api/public-data/wildfires?bbox=everywhere')
        assert response.status_code == 400
        firms.get_detections.assert_not_called()

    def test_feed_errors_mapped(self, client, firms):
        firms.get_detections.side_effect = AuthenticationFailure('NASA FIRMS rejected the MAP_KEY')
        response = client.get('/api/public-data/wildfires')
        assert response.status_code == 502

    def test_not_configured(self, client, monkeypatch):
        monkeypatch.setattr(app_module, 'firms_service', None)
        response = client.get('/api/public-data/wildfires')
        assert response.status_code == 503
