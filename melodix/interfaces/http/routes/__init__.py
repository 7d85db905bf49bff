"""Route blueprints exposed via Flask."""

from .users import users_bp
from .songs import songs_bp
from .artists import artists_bp
from .playlists import playlists_bp
from .health import health_bp

__all__ = [
    "users_bp",
    "songs_bp",
    "artists_bp",
    "playlists_bp",
    "health_bp",
]
