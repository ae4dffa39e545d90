from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
import re
import logging
from datetime import datetime, timezone
from config import config
from services.credentials import KeyEndpointCredentialProvider, StaticCredentialProvider
from services.errors import RoutePlanningError
from services.geocoding_service import GeocodingService
from services.models import Coordinate, HazardDetection, PlannerConfig
from services.nasa_firms import NASAFirmsService
from services.route_assembler import risk_summary
from services.route_calculation_service import RouteCalculationService
from services.route_planner import RoutePlanner
from utils.distance import get_cache_info
from utils.secure_logging import redact_pii
from utils.validators import RouteRequestValidator

app_config = config.get(os.getenv('FLASK_ENV', 'default'), config['default'])

app = Flask(__name__)
app.config.from_object(app_config)
logger = logging.getLogger(__name__)

# Planning requests are small JSON bodies
app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024  # 1 MB

# CORS Configuration - Environment-aware origin restriction
if os.getenv('FLASK_ENV') == 'production':
    FRONTEND_URL = os.getenv('FRONTEND_URL')
    if not FRONTEND_URL:
        raise ValueError("FRONTEND_URL must be set in production environment")
    ALLOWED_ORIGINS = [FRONTEND_URL]
else:
    ALLOWED_ORIGINS = list(app_config.CORS_ORIGINS) + ['http://127.0.0.1:3000']

ALLOWED_ORIGINS = [origin for origin in ALLOWED_ORIGINS if origin]

CORS(app, origins=ALLOWED_ORIGINS, supports_credentials=True)


@app.after_request
def set_security_headers(response):
    """
    Add security headers to all responses.

    - HSTS in production only
    - X-Frame-Options / X-Content-Type-Options
    - CSP limited to the routing, geocoding and FIRMS APIs the front end may call
    """
    if os.getenv('FLASK_ENV') == 'production':
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains; preload'

    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'

    csp_directives = [
        "default-src 'self'",
        "img-src 'self' data: https:",  # Map tiles from any HTTPS source
        "connect-src 'self' https://api.openrouteservice.org https://firms.modaps.eosdis.nasa.gov",
        "frame-ancestors 'none'"
    ]
    response.headers['Content-Security-Policy'] = "; ".join(csp_directives)
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
    response.headers['Permissions-Policy'] = 'geolocation=(self), camera=(), microphone=(), payment=()'

    return response


# Rate Limiting Configuration
# Geocoding and directions are paid third-party calls; keep per-client volume bounded
limiter = Limiter(
    app=app,
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"],
    storage_uri=app_config.RATE_LIMIT_STORAGE_URI
)

# HTTP status per planning failure kind
ERROR_STATUS = {
    'NotFound': 404,
    'RouteUnavailable': 422,
    'AuthenticationFailure': 502,
    'ServiceUnavailable': 503
}

BBOX_PATTERN = re.compile(r'^-?\d+(\.\d+)?(,-?\d+(\.\d+)?){3}$')


def _build_ors_credentials():
    """Key-retrieval endpoint wins over a static key; None when neither is configured."""
    if app_config.ORS_KEY_ENDPOINT:
        return KeyEndpointCredentialProvider(
            app_config.ORS_KEY_ENDPOINT,
            bearer_token=app_config.ORS_KEY_ENDPOINT_TOKEN
        )
    if app_config.ORS_API_KEY:
        return StaticCredentialProvider(app_config.ORS_API_KEY)
    return None


# Initialize routing services
route_planner = None
ors_credentials = _build_ors_credentials()
if ors_credentials:
    route_planner = RoutePlanner(
        geocoder=GeocodingService(
            ors_credentials,
            country=app_config.GEOCODE_COUNTRY,
            timeout=app_config.GEOCODE_TIMEOUT_SECONDS,
            base_url=app_config.ORS_GEOCODE_URL
        ),
        router=RouteCalculationService(
            ors_credentials,
            timeout=app_config.ORS_TIMEOUT_SECONDS,
            base_url=app_config.ORS_DIRECTIONS_URL
        )
    )
    logger.info("RoutePlanner initialized successfully")
else:
    logger.warning("Neither ORS_API_KEY nor ORS_KEY_ENDPOINT set - route planning will be unavailable")

firms_service = None
if app_config.NASA_FIRMS_API_KEY:
    firms_service = NASAFirmsService(
        StaticCredentialProvider(app_config.NASA_FIRMS_API_KEY),
        timeout=app_config.FIRMS_TIMEOUT_SECONDS
    )
else:
    logger.warning("NASA_FIRMS_API_KEY not set. Live wildfire data will not be available.")


def _planning_error_response(error: RoutePlanningError):
    """Translate a classified planning failure into a JSON error response."""
    status = ERROR_STATUS.get(error.kind, 500)
    if error.is_operational:
        logger.error(f"Route planning failed ({error.kind}): {redact_pii(error.message)}")
    else:
        logger.info(f"Route planning outcome {error.kind}: {redact_pii(error.message)}")
    body = error.to_dict()
    body['error'] = error.message
    return jsonify(body), status


def _cap_live_detections(live_detections, already_supplied):
    """
    Keep the strongest live detections within the per-request detection limit.

    Every detection becomes an avoid polygon; past the limit ORS rejects the
    request as too large (error 2004), which would read as "no safe route".
    """
    slots = max(RouteRequestValidator.MAX_DETECTIONS - already_supplied, 0)
    if len(live_detections) <= slots:
        return list(live_detections)

    logger.warning(
        f"Live feed returned {len(live_detections)} detections; keeping the {slots} "
        f"strongest (limit {RouteRequestValidator.MAX_DETECTIONS} per request)"
    )
    ranked = sorted(live_detections, key=lambda d: (d.intensity * d.confidence), reverse=True)
    return ranked[:slots]


def _parse_location(value):
    if isinstance(value, str):
        return value.strip()
    return Coordinate.from_dict(value)


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'fireroute-api',
        'route_planning': route_planner is not None,
        'live_wildfire_feed': firms_service is not None,
        'distance_cache': get_cache_info()
    })


# ================================================================================
# HAZARD-AWARE ROUTE PLANNING
# ================================================================================

@app.route('/api/routes/plan', methods=['POST'])
@limiter.limit(lambda: app_config.ROUTE_RATE_LIMIT)
def plan_route():
    """
    Plan a route that avoids current fire zones.

    Request Body:
        start (dict | str): {"lat": float, "lon": float} or address text
        destination (dict | str): {"lat": float, "lon": float} or address text
        detections (list, optional): Hazard detections
            [{latitude, longitude, intensity, confidence, acquisition_date}]
        use_live_feed (bool, optional): Add current NASA FIRMS detections (default: False)
        point_count (int, optional): Vertices per avoidance polygon (8-128)

    Returns:
        200: {route: RouteResult, advisory: str | null, calculation_metadata: {...}}
        400: Invalid parameters
        404: Destination not found
        422: No safe route avoiding current fire zones
        502: Routing credentials missing or rejected
        503: Route planning not configured or upstream service unavailable
        500: Server error
    """
    try:
        if not route_planner:
            return jsonify({
                'error': 'Route planning service not available. Check ORS_API_KEY configuration.'
            }), 503

        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'Request body is required'}), 400

        is_valid, error_message = RouteRequestValidator.validate_plan_request(data)
        if not is_valid:
            return jsonify({'error': error_message}), 400

        start = _parse_location(data['start'])
        destination = _parse_location(data['destination'])
        detections = [HazardDetection.from_dict(d) for d in data.get('detections', [])]

        if data.get('use_live_feed'):
            if not firms_service:
                return jsonify({'error': 'Live wildfire feed not available. Check NASA_FIRMS_API_KEY configuration.'}), 503
            live_detections = firms_service.get_detections(
                bbox=app_config.FIRMS_BBOX,
                source=app_config.FIRMS_SOURCE
            )
            detections.extend(_cap_live_detections(live_detections, len(detections)))

        planner_config = PlannerConfig(
            polygon_points=data.get('point_count', app_config.AVOID_POLYGON_POINTS),
            country=app_config.GEOCODE_COUNTRY,
            profile=app_config.ROUTING_PROFILE
        )

        logger.info(f"Planning route with {len(detections)} hazard detections")
        result = route_planner.plan_route(start, destination, detections, planner_config)

        return jsonify({
            'route': result.to_dict(),
            'advisory': risk_summary(result),
            'calculation_metadata': {
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'detections_considered': len(detections),
                'polygon_points': planner_config.polygon_points
            }
        }), 200

    except RoutePlanningError as e:
        return _planning_error_response(e)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error planning route: {e}", exc_info=True)
        return jsonify({'error': 'Failed to plan route'}), 500


@app.route('/api/public-data/wildfires', methods=['GET'])
def get_wildfires():
    """
    Current NASA FIRMS detections for the configured (or requested) area.

    Query Parameters:
        days (int, optional): 1-10, default 1
        bbox (str, optional): "west,south,east,north"
    """
    if not firms_service:
        return jsonify({'error': 'Live wildfire feed not available. Check NASA_FIRMS_API_KEY configuration.'}), 503

    days = request.args.get('days', default=1, type=int)
    days = min(max(days, 1), 10)
    bbox = request.args.get('bbox', default=app_config.FIRMS_BBOX, type=str)
    if not BBOX_PATTERN.match(bbox):
        return jsonify({'error': 'bbox must be "west,south,east,north" in decimal degrees'}), 400

    try:
        detections = firms_service.get_detections(bbox=bbox, days=days, source=app_config.FIRMS_SOURCE)
    except RoutePlanningError as e:
        return _planning_error_response(e)

    response = jsonify([d.to_dict() for d in detections])
    response.headers['Cache-Control'] = 'public, max-age=300'
    return response


# ===== ERROR HANDLERS =====

@app.errorhandler(413)
def request_entity_too_large(error):
    """Handle requests that exceed MAX_CONTENT_LENGTH."""
    return jsonify({
        'error': 'Request payload too large',
        'max_size': '1 MB'
    }), 413


@app.errorhandler(400)
def bad_request(error):
    """Handle malformed requests."""
    return jsonify({
        'error': 'Bad request',
        'message': str(error)
    }), 400


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    debug_mode = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    app.run(debug=debug_mode, host='0.0.0.0', port=5001)
