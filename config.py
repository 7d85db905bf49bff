#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'melodix-dev-secret'

    # Environment; production hides internal error messages
    APP_ENV = (os.getenv('APP_ENV') or 'development').strip().lower()
    IS_PRODUCTION = APP_ENV == 'production'

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'melodix', 'database', 'instance', 'melodix.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Spotify API (catalog provider)
    SPOTIPY_CLIENT_ID = os.environ.get('SPOTIPY_CLIENT_ID') or os.environ.get('SPOTIFY_CLIENT_ID')
    SPOTIPY_CLIENT_SECRET = os.environ.get('SPOTIPY_CLIENT_SECRET') or os.environ.get('SPOTIFY_CLIENT_SECRET')
    SPOTIFY_TIMEOUT_SECONDS = max(1, _get_int('SPOTIFY_TIMEOUT_SECONDS', 10))
    CATALOG_PLAYLIST_SEARCH_LIMIT = max(1, min(50, _get_int('CATALOG_PLAYLIST_SEARCH_LIMIT', 20)))
    # Thread pool size for independent playlist track fetches
    CATALOG_FETCH_WORKERS = max(1, _get_int('CATALOG_FETCH_WORKERS', 4))

    # Shazam (recognition provider, RapidAPI style)
    SHAZAM_API_URL = os.getenv('SHAZAM_API_URL', 'https://shazam-api-free.p.rapidapi.com/shazam/recognize/')
    SHAZAM_API_KEY = os.getenv('SHAZAM_API_KEY')
    SHAZAM_API_HOST = os.getenv('SHAZAM_API_HOST', 'shazam-api-free.p.rapidapi.com')
    SHAZAM_TIMEOUT_SECONDS = max(1, _get_int('SHAZAM_TIMEOUT_SECONDS', 30))

    # Ticketmaster (events provider)
    TICKETMASTER_API_KEY = os.getenv('TICKETMASTER_API_KEY')
    TICKETMASTER_API_URL = os.getenv(
        'TICKETMASTER_API_URL', 'https://app.ticketmaster.com/discovery/v2/events.json'
    )
    TICKETMASTER_TIMEOUT_SECONDS = max(1, _get_int('TICKETMASTER_TIMEOUT_SECONDS', 10))
    CONCERTS_DEFAULT_LIMIT = max(1, _get_int('CONCERTS_DEFAULT_LIMIT', 20))
    CONCERTS_MAX_LIMIT = max(1, _get_int('CONCERTS_MAX_LIMIT', 200))

    # Uploads
    MAX_AUDIO_UPLOAD_MB = max(1, _get_int('MAX_AUDIO_UPLOAD_MB', 10))
    MAX_CONTENT_LENGTH = MAX_AUDIO_UPLOAD_MB * 1024 * 1024

    # Personalisation
    FEATURED_PLAYLIST_NAMES = _get_csv_list(
        'FEATURED_PLAYLIST_NAMES', 'BEST HITS 2025,Lagu Pop Indonesia Hits 2025'
    )
    FOR_YOU_MATCH_LIMIT = max(1, _get_int('FOR_YOU_MATCH_LIMIT', 10))
    TOP_SONGS_LIMIT = max(1, _get_int('TOP_SONGS_LIMIT', 4))

    # HTTP surface
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', '*')

    # Observability (optional)
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    OTEL_EXPORTER_OTLP_HEADERS = os.getenv('OTEL_EXPORTER_OTLP_HEADERS')
    OTEL_EXPORTER_OTLP_INSECURE = _get_bool('OTEL_EXPORTER_OTLP_INSECURE', True)
    OTEL_SERVICE_NAME = os.getenv('OTEL_SERVICE_NAME', 'melodix-api')

    # Runtime behavior
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    LOG_DIR = os.getenv('LOG_DIR') or os.path.join(basedir, 'melodix', 'log')
    PORT = _get_int('PORT', 3000)
