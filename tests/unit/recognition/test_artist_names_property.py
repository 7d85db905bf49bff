import pytest
from hypothesis import given, strategies as st

from melodix.domain.artists import split_artist_names

_names = st.text(
    alphabet=st.characters(blacklist_characters="&,", blacklist_categories=("Cs",)),
    min_size=1,
    max_size=20,
).filter(lambda s: s.strip())


@pytest.mark.unit
@given(st.lists(_names, min_size=1, max_size=5), st.lists(st.sampled_from([" & ", ", ", "&", ","]), min_size=4, max_size=4))
def test_joined_names_split_back_trimmed(names, separators):
    subtitle = names[0]
    for name, sep in zip(names[1:], separators):
        subtitle += sep + name
    assert split_artist_names(subtitle) == [n.strip() for n in names]


@pytest.mark.unit
@given(st.text(max_size=40))
def test_split_never_yields_blank_or_delimited_names(subtitle):
    for name in split_artist_names(subtitle):
        assert name == name.strip()
        assert name
        assert "&" not in name and "," not in name


@pytest.mark.unit
def test_split_handles_empty_input():
    assert split_artist_names(None) == []
    assert split_artist_names(" & , ") == []
