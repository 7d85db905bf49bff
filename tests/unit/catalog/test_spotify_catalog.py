import pytest
from spotipy.exceptions import SpotifyException

from melodix.domain.catalog import EnrichmentResult, SpotifyCatalog, slugify
from melodix.errors import CatalogError
from tests.support.stubs import SpotipySearchStub


def _catalog(stub):
    return SpotifyCatalog(spotify_client_id="id", spotify_client_secret="secret", spotify_client=stub)


@pytest.mark.unit
@pytest.mark.parametrize("name, expected", [
    ("The  Weeknd", "the-weeknd"),
    ("  Daft Punk ", "daft-punk"),
    ("", "unknown"),
    (None, "unknown"),
])
def test_slugify(name, expected):
    assert slugify(name) == expected


@pytest.mark.unit
def test_find_track_by_isrc_found():
    stub = SpotipySearchStub({"tracks": {"items": [{
        "id": "trk",
        "uri": "spotify:track:trk",
        "duration_ms": 1234,
        "popularity": 80,
        "external_urls": {"spotify": "https://open.spotify.com/track/trk"},
        "album": {"name": "LP", "release_date": "2021-02-03", "images": [{"url": "http://img/lp.jpg"}]},
    }]}})

    result = _catalog(stub).find_track_by_isrc("USRC1")

    assert result.status == EnrichmentResult.FOUND
    assert result.value("album") == "LP"
    assert result.value("duration_ms") == 1234
    assert result.value("spotify_uri") == "spotify:track:trk"
    assert result.value("cover_art_url") == "http://img/lp.jpg"
    assert stub.calls == [{"q": "isrc:USRC1", "type": "track", "limit": 1}]


@pytest.mark.unit
def test_find_track_by_isrc_not_found_and_failed():
    assert _catalog(SpotipySearchStub({"tracks": {"items": []}})).find_track_by_isrc("X").status == "not_found"

    failed = _catalog(SpotipySearchStub(error=SpotifyException(401, -1, "bad token"))).find_track_by_isrc("X")
    assert failed.status == EnrichmentResult.FAILED
    assert failed.value("album", "fallback") == "fallback"
    assert "bad token" in failed.error


@pytest.mark.unit
def test_unconfigured_catalog_fails_enrichment_without_raising(monkeypatch):
    monkeypatch.setattr("config.Config.SPOTIPY_CLIENT_ID", None)
    monkeypatch.setattr("config.Config.SPOTIPY_CLIENT_SECRET", None)
    catalog = SpotifyCatalog()
    assert catalog.sp is None
    assert catalog.find_artist("Anyone").status == EnrichmentResult.FAILED
    with pytest.raises(CatalogError):
        catalog.search_playlists("x")


@pytest.mark.unit
def test_find_artist_found():
    stub = SpotipySearchStub({"artists": {"items": [{
        "id": "art", "images": [{"url": "http://img/art.jpg"}],
        "external_urls": {"spotify": "https://open.spotify.com/artist/art"},
    }]}})
    result = _catalog(stub).find_artist("Band")
    assert result.found
    assert result.value("image_url") == "http://img/art.jpg"
    assert result.value("spotify_id") == "art"


@pytest.mark.unit
def test_search_track_falls_back_to_title_query():
    stub = SpotipySearchStub({"tracks": {"items": []}})
    assert _catalog(stub).search_track(isrc="US1", title="Song", artist="Band") is None
    assert [c["q"] for c in stub.calls] == ["isrc:US1", "track:Song artist:Band"]

    hit = SpotipySearchStub({"tracks": {"items": [{"id": "t9", "name": "Song"}]}})
    assert _catalog(hit).search_track(title="Song") == {"id": "t9", "name": "Song"}


@pytest.mark.unit
def test_search_playlists_drops_null_items_and_rejects_bad_payload():
    stub = SpotipySearchStub({"playlists": {"items": [None, {"id": "p1"}]}})
    assert _catalog(stub).search_playlists("Song", limit=7) == [{"id": "p1"}]
    assert stub.calls[0] == {"q": "Song", "type": "playlist", "limit": 7}

    with pytest.raises(CatalogError):
        _catalog(SpotipySearchStub({})).search_playlists("Song")


@pytest.mark.unit
def test_playlist_tracks_are_normalized():
    stub = SpotipySearchStub(playlist_items={"items": [
        {"track": None},
        {"track": {
            "id": "t1",
            "name": "One",
            "external_ids": {"isrc": "US0000000001"},
            "external_urls": {"spotify": "https://open.spotify.com/track/t1"},
            "artists": [{"id": "a1", "name": "Big Band", "external_urls": {"spotify": "https://x/a1"}}],
            "album": {"name": "LP", "release_date": "2020", "images": []},
        }},
    ]})
    catalog = _catalog(stub)

    tracks = catalog.playlist_tracks("p1")
    assert len(tracks) == 1
    track = tracks[0]
    assert track["isrc"] == "US0000000001"
    assert track["spotify_song_id"] == "t1"
    assert track["popularity"] == 0
    assert track["artists"] == [{"name": "Big Band", "slug": "big-band", "spotify_id": "a1", "spotify_url": "https://x/a1"}]
    assert track["album"] == {"name": "LP", "release_date": "2020", "cover_art_url": None}

    assert catalog.playlist_track_ids("p1") == ["t1"]
