"""
Configuration file for the hazard-aware routing backend.

Only this module (and app.py, which wires services from it) reads the
environment. Core services receive keys through credential providers and
per-request options through PlannerConfig.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration"""
    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'True').lower() == 'true'

    # OpenRouteService (geocoding + directions)
    # Either a static key or a key-retrieval endpoint returning {"apiKey": ...}
    ORS_API_KEY = os.getenv('ORS_API_KEY')
    ORS_KEY_ENDPOINT = os.getenv('ORS_KEY_ENDPOINT')
    ORS_KEY_ENDPOINT_TOKEN = os.getenv('ORS_KEY_ENDPOINT_TOKEN')
    ORS_DIRECTIONS_URL = os.getenv('ORS_DIRECTIONS_URL', 'https://api.openrouteservice.org/v2/directions')
    ORS_GEOCODE_URL = os.getenv('ORS_GEOCODE_URL', 'https://api.openrouteservice.org/geocode/search')

    # NASA FIRMS hazard feed
    NASA_FIRMS_API_KEY = os.getenv('NASA_FIRMS_API_KEY')
    FIRMS_SOURCE = os.getenv('FIRMS_SOURCE', 'MODIS_C6_1')
    FIRMS_BBOX = os.getenv('FIRMS_BBOX', '-124.5,32.5,-114.0,42.0')

    # Timeouts (seconds), one per external call
    GEOCODE_TIMEOUT_SECONDS = float(os.getenv('GEOCODE_TIMEOUT_SECONDS', '10'))
    ORS_TIMEOUT_SECONDS = float(os.getenv('ORS_TIMEOUT_SECONDS', '30'))
    FIRMS_TIMEOUT_SECONDS = float(os.getenv('FIRMS_TIMEOUT_SECONDS', '30'))

    # Planning defaults
    GEOCODE_COUNTRY = os.getenv('GEOCODE_COUNTRY', 'US')
    AVOID_POLYGON_POINTS = int(os.getenv('AVOID_POLYGON_POINTS', '32'))
    ROUTING_PROFILE = os.getenv('ROUTING_PROFILE', 'driving-car')

    # CORS
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',')

    # Rate Limiting
    RATE_LIMIT_STORAGE_URI = os.getenv('REDIS_URL', 'memory://')
    ROUTE_RATE_LIMIT = os.getenv('ROUTE_RATE_LIMIT', '10 per minute')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
