from dataclasses import dataclass, field, replace

PLAYING = "playing"
PAUSED = "paused"
STOPPED = "stopped"

# Last.fm guideline: scrobble at halfway or 240s (4min), whichever comes first.
MAX_THRESHOLD = 240

TRACK_FIELDS = frozenset({"name", "artist", "album", "duration", "position", "player_state"})


# -------------------------
# Stateless identity for a track
# -------------------------
@dataclass(frozen=True)
class Track:
    name: str
    artist: str
    album: str = ""
    duration: int = 0       # seconds, 0 = unknown
    position: int = 0       # seconds
    player_state: str = PLAYING

    @property
    def identity(self) -> str:
        return track_identity(self.artist, self.name, self.album)

    def merged(self, update: "Track", fields) -> "Track":
        """Copy of this track with only `fields` taken from `update`."""
        changes = {f: getattr(update, f) for f in fields if f in TRACK_FIELDS}
        return replace(self, **changes)


def track_identity(artist: str, name: str, album: str) -> str:
    return f"{artist}|{name}|{album}"


@dataclass
class ScrobbleState:
    """Bookkeeping for one occurrence of a track."""
    identity: str
    start_time: float            # epoch seconds
    scrobbled: bool = field(default=False)

    def elapsed(self, now: float) -> int:
        return max(0, int(now - self.start_time))

    @property
    def timestamp(self) -> int:
        return int(self.start_time)


def scrobble_threshold(duration: int) -> int:
    """Seconds of listening required; unknown duration (0) yields 0."""
    return int(min(duration * 0.5, MAX_THRESHOLD))


def is_eligible(track: Track | None, state: ScrobbleState | None, now: float) -> bool:
    if track is None or state is None:
        return False
    if track.player_state != PLAYING:
        return False
    if state.scrobbled:
        return False
    return state.elapsed(now) >= scrobble_threshold(track.duration)
