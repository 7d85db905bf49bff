import importlib
import os
from unittest.mock import patch

import pytest
from hypothesis import given, strategies as st


def _reload_settings():
    import config as _config
    importlib.reload(_config)
    import melodix.settings as settings
    importlib.reload(settings)
    return _config, settings


@pytest.fixture(autouse=True)
def _restore_modules(monkeypatch):
    yield
    monkeypatch.undo()
    _reload_settings()


@pytest.mark.unit
def test_env_precedence_for_provider_fields(monkeypatch):
    monkeypatch.setenv("SPOTIPY_CLIENT_ID", "cid")
    monkeypatch.setenv("SPOTIPY_CLIENT_SECRET", "csec")
    monkeypatch.setenv("SHAZAM_API_KEY", "skey")
    monkeypatch.setenv("SHAZAM_TIMEOUT_SECONDS", "12")
    monkeypatch.setenv("TICKETMASTER_API_KEY", "tkey")
    monkeypatch.setenv("FEATURED_PLAYLIST_NAMES", " Top 50 ,, Chill ")

    _config, settings = _reload_settings()
    s = settings.load_app_settings()

    assert s.spotify_client_id == _config.Config.SPOTIPY_CLIENT_ID == "cid"
    assert s.spotify_configured is True
    assert s.shazam_key == "skey"
    assert s.shazam_timeout == 12
    assert s.ticketmaster_key == "tkey"
    assert s.featured_playlist_names == ["Top 50", "Chill"]


@pytest.mark.unit
def test_spotify_alias_variables_are_accepted(monkeypatch):
    monkeypatch.delenv("SPOTIPY_CLIENT_ID", raising=False)
    monkeypatch.delenv("SPOTIPY_CLIENT_SECRET", raising=False)
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "alias-id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "alias-secret")

    _, settings = _reload_settings()
    s = settings.load_app_settings()
    assert s.spotify_client_id == "alias-id"
    assert s.spotify_client_secret == "alias-secret"


@pytest.mark.unit
def test_missing_spotify_credentials_mark_catalog_unconfigured():
    import melodix.settings as settings
    s = settings.load_app_settings({"spotify_client_id": None})
    assert s.spotify_configured is False


@pytest.mark.unit
def test_overrides_are_validated():
    import melodix.settings as settings
    s = settings.load_app_settings({
        "playlist_search_limit": 500,
        "top_songs_limit": "0",
        "for_you_match_limit": "many",
        "featured_playlist_names": ["A", " ", "B "],
    })
    assert s.playlist_search_limit == 50
    assert s.top_songs_limit == 1
    assert s.for_you_match_limit == 1
    assert s.featured_playlist_names == ["A", "B"]


@pytest.mark.unit
@given(
    search_limit=st.integers(min_value=-10, max_value=200),
    workers=st.integers(min_value=-3, max_value=32),
)
def test_property_based_env_permutations(search_limit, workers):
    with patch.dict(os.environ, {
        "CATALOG_PLAYLIST_SEARCH_LIMIT": str(search_limit),
        "CATALOG_FETCH_WORKERS": str(workers),
    }, clear=False):
        _, settings = _reload_settings()
        s = settings.load_app_settings()
        assert 1 <= s.playlist_search_limit <= 50
        assert s.playlist_search_limit == max(1, min(search_limit, 50))
        assert s.catalog_fetch_workers == max(1, workers)
