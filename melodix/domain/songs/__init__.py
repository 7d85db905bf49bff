"""Song store: lookups, submissions and the shared song view."""

from .service import apple_music_url, find_existing_song, get_song, submit_song, top_songs, youtube_search_url
from .views import UNKNOWN_ARTIST, load_artists, load_songs, song_view, song_views

__all__ = [
    "UNKNOWN_ARTIST",
    "apple_music_url",
    "find_existing_song",
    "get_song",
    "load_artists",
    "load_songs",
    "song_view",
    "song_views",
    "submit_song",
    "top_songs",
    "youtube_search_url",
]
