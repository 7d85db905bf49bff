import pytest

from melodix.domain.playlists.track_refs import (
    LegacyTrack,
    SongRef,
    TrackRefError,
    decode,
    decode_all,
    encode_all,
)


@pytest.mark.unit
@pytest.mark.parametrize("raw, expected", [
    ("a" * 24, SongRef("a" * 24)),
    ({"kind": "ref", "song_id": "b" * 24}, SongRef("b" * 24)),
    ({"kind": "legacy", "isrc": "US1", "song_name": "One"}, LegacyTrack("US1", "One")),
    ({"isrc": "US2", "song_name": "Two"}, LegacyTrack("US2", "Two")),
    ({"song_name": "No Isrc"}, LegacyTrack("", "No Isrc")),
])
def test_decode_accepts_tagged_and_untagged_rows(raw, expected):
    assert decode(raw) == expected


@pytest.mark.unit
@pytest.mark.parametrize("raw", [None, 42, {}, {"kind": "mystery"}, ["a"]])
def test_decode_rejects_unknown_shapes(raw):
    with pytest.raises(TrackRefError):
        decode(raw)


@pytest.mark.unit
def test_encoding_is_always_tagged():
    refs = decode_all(["c" * 24, {"isrc": "US3", "song_name": "Three"}])
    assert encode_all(refs) == [
        {"kind": "ref", "song_id": "c" * 24},
        {"kind": "legacy", "isrc": "US3", "song_name": "Three"},
    ]
    assert decode_all(encode_all(refs)) == refs
