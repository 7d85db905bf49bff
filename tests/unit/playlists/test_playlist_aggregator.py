from datetime import datetime

import pytest

from melodix.domain.playlists import playlist_summary, playlists_for_you, resolve_tracks
from melodix.domain.playlists.aggregator import safe_resolve_tracks


@pytest.mark.unit
def test_resolve_tracks_keeps_order_and_prefers_oldest_isrc_match(db_session, factories):
    older = factories.SongFactory(isrc="USDUP0000001", title="Older", created_at=datetime(2020, 1, 1))
    factories.SongFactory(isrc="USDUP0000001", title="Newer")
    by_id = factories.SongFactory(title="By Id")

    views = resolve_tracks([
        {"kind": "legacy", "isrc": "USDUP0000001", "song_name": "Dup"},
        by_id.id,
    ])
    assert [v["title"] for v in views] == ["Older", "By Id"]
    assert views[0]["_id"] == older.id


@pytest.mark.unit
def test_legacy_without_match_uses_stored_name(db_session):
    views = resolve_tracks([{"isrc": "", "song_name": "Orphan"}])
    assert views == [{
        "isrc": "",
        "song_name": "Orphan",
        "title": "Orphan",
        "artist": "Unknown Artist",
        "cover_art_url": None,
        "duration_ms": 0,
    }]


@pytest.mark.unit
def test_unreadable_refs_produce_empty_tracks(db_session, factories):
    playlist = factories.PlaylistFactory(tracks=[{"kind": "mystery"}])
    assert safe_resolve_tracks(playlist) == []


@pytest.mark.unit
def test_summary_limits_cover_grid(db_session, factories):
    songs = [factories.SongFactory(cover_art_url=f"http://img/{i}.jpg") for i in range(6)]
    playlist = factories.PlaylistFactory(tracks=[s.id for s in songs])

    summary = playlist_summary(playlist)
    assert summary["song_count"] == 6
    assert summary["cover_images"] == [f"http://img/{i}.jpg" for i in range(4)]
    assert "tracks" not in summary


@pytest.mark.unit
def test_for_you_respects_match_limit_and_owner(db_session, factories):
    heard = factories.SongFactory()
    factories.CatalogPlaylistFactory(
        name="Mine", tracks=[heard.id], owner_device_id="dev-1", created_at=datetime(2020, 1, 1)
    )
    for i in range(3):
        factories.CatalogPlaylistFactory(name=f"Match {i}", tracks=[heard.id])

    picked = playlists_for_you("dev-1", [heard.id], match_limit=2, featured_names=[])
    names = [p["playlist_name"] for p in picked]
    assert len(names) == 2
    assert "Mine" not in names


@pytest.mark.unit
def test_for_you_without_history_returns_featured_only(db_session, factories):
    factories.CatalogPlaylistFactory(name="Other")
    featured = factories.CatalogPlaylistFactory(name="BEST HITS 2025")

    picked = playlists_for_you("dev-1", [], featured_names=["BEST HITS 2025"])
    assert [p["_id"] for p in picked] == [featured.id]
