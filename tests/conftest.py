from __future__ import annotations

import pytest


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLastFM:
    """Records calls; raises queued errors from scrobble()."""

    def __init__(self) -> None:
        self.now_playing: list[dict] = []
        self.scrobbles: list[dict] = []
        self.scrobble_errors: list[Exception] = []
        self.now_playing_ok = True

    def update_now_playing(self, **kwargs) -> bool:
        self.now_playing.append(kwargs)
        return self.now_playing_ok

    def scrobble(self, **kwargs) -> None:
        self.scrobbles.append(kwargs)
        if self.scrobble_errors:
            raise self.scrobble_errors.pop(0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def lastfm() -> FakeLastFM:
    return FakeLastFM()
