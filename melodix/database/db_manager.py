# database/db_manager.py
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
import os
import logging
from datetime import datetime
from sqlalchemy.engine import make_url

from melodix.support.identity import new_object_id

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)


def _iso(value):
    return value.isoformat() if value else None


class Artist(db.Model):
    __tablename__ = 'artists'

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    name = db.Column(db.String(255), nullable=False, index=True)
    slug = db.Column(db.String(255), nullable=True)
    # Spotify identifiers are optional; artists created from a bare name have none
    spotify_id = db.Column(db.String(64), nullable=True, index=True)
    spotify_url = db.Column(db.String(500), nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<Artist {self.name}>'

    def to_dict(self):
        return {
            '_id': self.id,
            'name': self.name,
            'slug': self.slug,
            'spotify_id': self.spotify_id,
            'spotify_url': self.spotify_url,
            'image_url': self.image_url,
        }


class Song(db.Model):
    __tablename__ = 'songs'

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    # Not unique: duplicate checks happen in the application before insert
    isrc = db.Column(db.String(32), nullable=True, index=True)
    shazam_key = db.Column(db.String(64), nullable=True, index=True)
    spotify_song_id = db.Column(db.String(64), nullable=True, index=True)

    title = db.Column(db.String(255), nullable=False)
    artist_subtitle = db.Column(db.String(500), nullable=True)
    artist_ids = db.Column(db.JSON, nullable=False, default=list)  # list[str]
    album = db.Column(db.String(255), nullable=True)
    cover_art_url = db.Column(db.String(500), nullable=True)
    duration_ms = db.Column(db.Integer, nullable=True)

    spotify_url = db.Column(db.String(500), nullable=True)
    spotify_uri = db.Column(db.String(128), nullable=True)
    apple_music_id = db.Column(db.String(64), nullable=True)
    apple_music_url = db.Column(db.String(500), nullable=True)
    preview_url = db.Column(db.String(500), nullable=True)
    youtube_url = db.Column(db.String(500), nullable=True)

    genre = db.Column(db.String(128), nullable=True)
    release_date = db.Column(db.String(32), nullable=True)
    popularity = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<Song {self.title} ({self.isrc or self.spotify_song_id})>'

    def to_dict(self):
        """Raw stored record; API responses use the song view instead."""
        return {
            '_id': self.id,
            'isrc': self.isrc,
            'shazam_key': self.shazam_key,
            'spotify_song_id': self.spotify_song_id,
            'title': self.title,
            'artist_subtitle': self.artist_subtitle,
            'artist_ids': list(self.artist_ids or []),
            'album': self.album,
            'cover_art_url': self.cover_art_url,
            'duration_ms': self.duration_ms,
            'spotify_url': self.spotify_url,
            'spotify_uri': self.spotify_uri,
            'apple_music_id': self.apple_music_id,
            'apple_music_url': self.apple_music_url,
            'preview_url': self.preview_url,
            'youtube_url': self.youtube_url,
            'genre': self.genre,
            'release_date': self.release_date,
            'popularity': self.popularity,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class DeviceUser(UserMixin, db.Model):
    """A user known only by the device identifier the client presents."""

    __tablename__ = "users"

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    device_id = db.Column(db.String(255), unique=True, nullable=False, index=True)
    # UserMixin owns ``is_anonymous``; the stored flag lives under another attribute
    anonymous = db.Column('is_anonymous', db.Boolean, default=True, nullable=False)
    search_history = db.Column(db.JSON, nullable=False, default=list)  # list[str] of song ids
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def get_id(self) -> str:
        return self.device_id

    def to_dict(self) -> dict:
        return {
            "user_id": self.id,
            "_id": self.id,
            "device_id": self.device_id,
            "is_anonymous": self.anonymous,
            "search_history": list(self.search_history or []),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<DeviceUser {self.device_id}>"


class Playlist(db.Model):
    """User-created playlists and playlists imported from the Spotify catalog."""

    __tablename__ = 'playlists'

    SOURCE_USER = 'user'
    SOURCE_CATALOG = 'catalog'

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    source = db.Column(db.String(16), nullable=False, default=SOURCE_USER, index=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    # Encoded track references; see melodix.domain.playlists.track_refs
    tracks = db.Column(db.JSON, nullable=False, default=list)

    # User playlists
    owner_device_id = db.Column(db.String(255), nullable=True, index=True)
    device_ids = db.Column(db.JSON, nullable=False, default=list)

    # Catalog playlists
    spotify_playlist_id = db.Column(db.String(64), nullable=True, index=True)
    spotify_track_id = db.Column(db.String(64), nullable=True)
    base_song_title = db.Column(db.String(255), nullable=True)
    base_song_artist = db.Column(db.String(500), nullable=True)
    base_song_isrc = db.Column(db.String(32), nullable=True)
    owner_name = db.Column(db.String(255), nullable=True)
    cover_image_url = db.Column(db.String(500), nullable=True)
    total_tracks = db.Column(db.Integer, nullable=True)
    spotify_url = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<Playlist {self.name} ({self.source})>'

    def to_dict(self, tracks=None) -> dict:
        """Serialize the playlist; ``tracks`` replaces the stored references when given."""
        payload = {
            '_id': self.id,
            'source': self.source,
            'playlist_name': self.name,
            'description': self.description,
            'owner_device_id': self.owner_device_id,
            'device_ids': list(self.device_ids or []),
            'tracks': tracks if tracks is not None else list(self.tracks or []),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
        if self.source == self.SOURCE_CATALOG:
            payload.update({
                'spotify_playlist_id': self.spotify_playlist_id,
                'owner': self.owner_name,
                'cover_image': self.cover_image_url,
                'total_tracks': self.total_tracks,
                'spotify_url': self.spotify_url,
                'base_song': {
                    'title': self.base_song_title,
                    'artist': self.base_song_artist,
                    'isrc': self.base_song_isrc,
                    'spotify_track_id': self.spotify_track_id,
                },
            })
        return payload


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance
    and creates all database tables if they don't already exist.
    """
    db.init_app(app)
    # Ensure the instance folder exists for SQLite database file
    instance_path = app.instance_path
    if not os.path.exists(instance_path):
        os.makedirs(instance_path)
        logger.info("Created instance folder: %s", instance_path)

    # Ensure the directory for the configured SQLite file exists
    try:
        uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if uri:
            url = make_url(uri)
            # Only handle file-based SQLite (not :memory:)
            if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
                db_dir = os.path.dirname(url.database)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    logger.info("Created SQLite DB directory: %s", db_dir)
    except Exception as e:
        # Don't block app startup on path parsing issues; log and continue
        logger.warning("Could not ensure SQLite directory exists: %s", e)

    with app.app_context():
        db.create_all()
        logger.info("Database tables created or already exist.")
