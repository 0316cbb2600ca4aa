import pytest

from state import PAUSED, ScrobbleState, Track, is_eligible, scrobble_threshold, track_identity


@pytest.mark.parametrize(
    ("duration", "expected"),
    [(60, 30), (200, 100), (1000, 240), (480, 240), (481, 240), (61, 30), (0, 0)],
)
def test_threshold_is_half_capped_at_four_minutes(duration: int, expected: int) -> None:
    assert scrobble_threshold(duration) == expected


def test_identity_is_artist_name_album() -> None:
    track = Track(name="X", artist="Y", album="Z")
    assert track.identity == "Y|X|Z" == track_identity("Y", "X", "Z")
    assert Track(name="X", artist="Y").identity == "Y|X|"


def test_identity_is_exact_match() -> None:
    assert Track(name="x", artist="Y", album="Z").identity != Track(name="X", artist="Y", album="Z").identity


def test_merged_only_overwrites_given_fields() -> None:
    current = Track(name="X", artist="Y", album="Z", duration=200, position=10)
    update = Track(name="X", artist="Y", album="Z", duration=0, position=42, player_state=PAUSED)

    merged = current.merged(update, {"name", "artist", "album", "position"})

    assert merged.position == 42
    assert merged.duration == 200
    assert merged.player_state == "playing"


def test_eligibility_requires_playing_and_threshold() -> None:
    track = Track(name="X", artist="Y", album="Z", duration=200)
    state = ScrobbleState(identity=track.identity, start_time=1000.0)

    assert not is_eligible(track, state, 1099.9)
    assert is_eligible(track, state, 1100.0)
    assert not is_eligible(Track(name="X", artist="Y", album="Z", duration=200, player_state=PAUSED),
                           state, 1200.0)
    assert not is_eligible(None, state, 1200.0)
    assert not is_eligible(track, None, 1200.0)


def test_scrobbled_state_is_never_eligible_again() -> None:
    track = Track(name="X", artist="Y", duration=60)
    state = ScrobbleState(identity=track.identity, start_time=0.0, scrobbled=True)
    assert not is_eligible(track, state, 10_000.0)


def test_unknown_duration_is_eligible_immediately() -> None:
    track = Track(name="X", artist="Y")
    state = ScrobbleState(identity=track.identity, start_time=50.0)
    assert is_eligible(track, state, 50.0)


def test_timestamp_is_floored_start_time() -> None:
    assert ScrobbleState(identity="a|b|c", start_time=1718000000.9).timestamp == 1718000000
