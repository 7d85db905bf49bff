import pytest
from sqlalchemy.exc import OperationalError

from melodix.database.db_manager import Artist, DeviceUser, Song
from melodix.domain.recognition import RecognitionPipeline
from melodix.errors import MissingAudioError
from tests.support.stubs import CatalogStub, ShazamStub, shazam_track


@pytest.mark.unit
def test_missing_audio_is_rejected_before_calling_provider(db_session):
    recognizer = ShazamStub()
    with pytest.raises(MissingAudioError):
        RecognitionPipeline(recognizer, CatalogStub()).recognize(b"")
    assert recognizer.calls == []


@pytest.mark.unit
def test_new_song_is_stored_with_one_artist_per_name(db_session, factories):
    factories.ArtistFactory(name="Artist Two", image_url="http://img/two.jpg")
    recognizer = ShazamStub(shazam_track(subtitle="Artist One & Artist Two, , Artist One"))
    catalog = CatalogStub()

    outcome = RecognitionPipeline(recognizer, catalog).recognize(b"audio")

    assert outcome.created is True
    song = db_session.get(Song, outcome.song["_id"])
    names = [db_session.get(Artist, i).name for i in song.artist_ids]
    assert names == ["Artist One", "Artist Two"]
    assert Artist.query.filter_by(name="Artist Two").count() == 1
    assert ("artist", "Artist Two") not in catalog.calls
    # Enrichment misses fall back to defaults
    assert song.duration_ms == 0
    assert song.spotify_url == ""
    assert song.apple_music_url == "https://music.apple.com/song/1440857781"
    assert song.youtube_url.startswith("https://www.youtube.com/results?search_query=")


@pytest.mark.unit
def test_enrichment_failure_degrades_to_recognition_data(db_session):
    catalog = CatalogStub()
    catalog.fail_enrichment = True

    outcome = RecognitionPipeline(ShazamStub(), catalog).recognize(b"audio")

    assert outcome.created is True
    assert outcome.song["spotify_url"] == ""
    assert outcome.song["title"] == "Song Title"
    artists = Artist.query.order_by(Artist.name).all()
    assert [a.name for a in artists] == ["Artist One", "Artist Two"]
    assert all(a.image_url is None for a in artists)


@pytest.mark.unit
def test_artist_reused_by_catalog_id(db_session, factories):
    existing = factories.ArtistFactory(name="The Band", spotify_id="sp-band")
    catalog = CatalogStub()
    catalog.artists_by_name["Band"] = {"spotify_id": "sp-band"}

    outcome = RecognitionPipeline(ShazamStub(shazam_track(subtitle="Band")), catalog).recognize(b"audio")

    assert outcome.song["artist_ids"] == [existing.id]


@pytest.mark.unit
def test_song_without_isrc_dedups_on_shazam_key(db_session):
    recognizer = ShazamStub(shazam_track(isrc=None))
    pipeline = RecognitionPipeline(recognizer, CatalogStub())

    first = pipeline.recognize(b"audio")
    second = pipeline.recognize(b"audio")

    assert first.created is True
    assert second.created is False
    assert second.song["_id"] == first.song["_id"]


@pytest.mark.unit
def test_history_is_appended_once_for_known_device(db_session, factories):
    user = factories.DeviceUserFactory(device_id="dev-1")
    pipeline = RecognitionPipeline(ShazamStub(), CatalogStub())

    first = pipeline.recognize(b"audio", device_id="dev-1")
    pipeline.recognize(b"audio", device_id="dev-1")
    pipeline.recognize(b"audio", device_id="unknown-device")

    db_session.refresh(user)
    assert user.search_history == [first.song["_id"]]


@pytest.mark.unit
def test_history_failure_does_not_fail_recognition(db_session, factories, monkeypatch):
    factories.DeviceUserFactory(device_id="dev-1")

    def broken(*args, **kwargs):
        raise OperationalError("UPDATE users", {}, Exception("locked"))

    monkeypatch.setattr("melodix.domain.recognition.pipeline.append_history", broken)
    outcome = RecognitionPipeline(ShazamStub(), CatalogStub()).recognize(b"audio", device_id="dev-1")

    assert outcome.created is True
    assert db_session.get(Song, outcome.song["_id"]) is not None
    assert DeviceUser.query.filter_by(device_id="dev-1").one().search_history == []
