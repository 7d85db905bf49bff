import os
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, g
from flask_cors import CORS

from config import Config
from melodix.settings import load_app_settings
from melodix.database.db_manager import initialize_database
from melodix.auth import init_auth
from melodix.domain.catalog import SpotifyCatalog
from melodix.domain.concerts import ConcertService, TicketmasterClient
from melodix.domain.playlists import CatalogImportService
from melodix.domain.recognition import RecognitionPipeline, ShazamClient
from melodix.interfaces.http.errors import register_error_handlers
from melodix.interfaces.http.routes import (
    users_bp,
    songs_bp,
    artists_bp,
    playlists_bp,
    health_bp,
)
from melodix.observability import configure_structured_logging, metrics_blueprint, init_tracing


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is set
      - Werkzeug/Flask loggers routed to root

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_path = os.path.join(log_dir, f"log-{timestamp}")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def build_services(app, settings) -> None:
    """Wire provider clients and domain services into ``app.extensions``."""
    catalog = SpotifyCatalog(
        spotify_client_id=settings.spotify_client_id,
        spotify_client_secret=settings.spotify_client_secret,
        requests_timeout=settings.spotify_timeout,
    )
    recognizer = ShazamClient(
        api_url=settings.shazam_url,
        api_key=settings.shazam_key,
        api_host=settings.shazam_host,
        timeout=settings.shazam_timeout,
    )
    events = TicketmasterClient(
        api_key=settings.ticketmaster_key,
        api_url=settings.ticketmaster_url,
        timeout=settings.ticketmaster_timeout,
    )

    app.extensions['app_settings'] = settings
    app.extensions['spotify_catalog'] = catalog
    app.extensions['recognition_pipeline'] = RecognitionPipeline(recognizer, catalog)
    app.extensions['concert_service'] = ConcertService(
        events,
        default_limit=settings.concerts_default_limit,
        max_limit=settings.concerts_max_limit,
    )
    app.extensions['catalog_import'] = CatalogImportService(
        catalog,
        search_limit=settings.playlist_search_limit,
        workers=settings.catalog_fetch_workers,
    )


def create_app(config_overrides=None, settings_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    configure_structured_logging(app)
    init_tracing(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    origins = [o for o in app.config.get('CORS_ALLOWED_ORIGINS') or [] if o]
    CORS(
        app,
        resources={r"/*": {"origins": "*" if not origins or "*" in origins else origins}},
        expose_headers=["X-Request-ID"],
    )

    initialize_database(app)
    init_auth(app)
    register_error_handlers(app)

    settings = load_app_settings(settings_overrides)
    build_services(app, settings)

    # --- Register Blueprints ---
    app.register_blueprint(health_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(songs_bp)
    app.register_blueprint(artists_bp)
    app.register_blueprint(playlists_bp)
    app.register_blueprint(metrics_blueprint)

    return app


if __name__ == '__main__':
    debug_mode = bool(Config.DEBUG)
    # With the reloader, only the child process writes a log file
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(Config.LOG_DIR)
        logger.info("File logging initialized at %s", log_file_path)

    if not Config.SPOTIPY_CLIENT_ID or not Config.SPOTIPY_CLIENT_SECRET:
        logger.warning("Spotify client credentials missing; recognition results will not be enriched.")
    if not Config.SHAZAM_API_KEY:
        logger.warning("SHAZAM_API_KEY is not set; /songs/recognize will fail upstream.")
    if not Config.TICKETMASTER_API_KEY:
        logger.warning("TICKETMASTER_API_KEY is not set; concert lookups will return empty lists.")

    app = create_app()
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Melodix API on port %s", Config.PORT)
    app.run(debug=debug_mode, host='0.0.0.0', port=Config.PORT, threaded=True)
