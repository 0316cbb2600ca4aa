"""
Messages consumed by the playback session, and the normalizer that turns raw
listener output into them.

Raw events are one JSON object per line:

    {"type": "music_event", "timestamp": 1718000000.5,
     "data": {"name": ..., "artist": ..., "album": ..., "playerState": "Playing",
              "totalTime": 200000, "elapsedTime": 1500}}

`track_info` and `player_state` are older event kinds that carry only the
metadata half or only the state half of a `music_event`.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass

from state import PLAYING, STOPPED, ScrobbleState, Track

log = logging.getLogger("events")

MUSIC_EVENT = "music_event"
LEGACY_TRACK_INFO = "track_info"
LEGACY_PLAYER_STATE = "player_state"

_METADATA_KEYS = ("name", "artist", "album", "totalTime", "elapsedTime",
                  "totalTimeMillis", "elapsedTimeMillis")


# -------------------------
# Session messages
# -------------------------
@dataclass(frozen=True)
class TrackData:
    track: Track
    fields: frozenset[str]  # Track fields this update sets


@dataclass(frozen=True)
class StateChanged:
    state: str


@dataclass(frozen=True)
class TrackStopped:
    pass


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class ScrobbleCompleted:
    state: ScrobbleState
    ok: bool


@dataclass(frozen=True)
class ObserverExited:
    returncode: int | None
    reason: str = ""


Message = TrackData | StateChanged | TrackStopped | Tick | ScrobbleCompleted | ObserverExited


class MalformedEvent(ValueError):
    pass


# -------------------------
# Normalization
# -------------------------
def _text(data: dict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedEvent(f"{key} must be a string, got {type(value).__name__}")
    return value


def _millis(data: dict, *keys: str) -> int | None:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise MalformedEvent(f"{key} must be a number, got {type(value).__name__}")
        return max(0, int(value // 1000))
    return None


def _select(kind: str, data: dict) -> dict:
    """Reduce a payload to the part its event kind is allowed to carry."""
    if kind == LEGACY_TRACK_INFO:
        return {k: v for k, v in data.items() if k in _METADATA_KEYS}
    if kind == LEGACY_PLAYER_STATE:
        return {"playerState": data.get("playerState")}
    return data


def normalize(event) -> list[Message]:
    """Turn one decoded raw event into session messages. Raises MalformedEvent."""
    if not isinstance(event, dict):
        raise MalformedEvent("event is not an object")
    kind = event.get("type")
    if kind not in (MUSIC_EVENT, LEGACY_TRACK_INFO, LEGACY_PLAYER_STATE):
        log.debug("Ignoring event type %r", kind)
        return []

    data = event.get("data")
    if data is None:
        return []
    if not isinstance(data, dict):
        raise MalformedEvent("data is not an object")
    data = _select(kind, data)

    messages: list[Message] = []
    player_state = _text(data, "playerState")
    if player_state:
        player_state = player_state.lower()
        if player_state == STOPPED:
            return [TrackStopped()]
        messages.append(StateChanged(player_state))

    name = _text(data, "name")
    artist = _text(data, "artist")
    album = _text(data, "album")
    duration = _millis(data, "totalTime", "totalTimeMillis")
    position = _millis(data, "elapsedTime", "elapsedTimeMillis")

    if name and artist:
        # player_state defaults to playing, so it is always part of the update
        fields = {"name", "artist", "album", "player_state"}
        if duration is not None:
            fields.add("duration")
        if position is not None:
            fields.add("position")
        track = Track(
            name=name,
            artist=artist,
            album=album or "",
            duration=duration or 0,
            position=position or 0,
            player_state=player_state or PLAYING,
        )
        messages.append(TrackData(track, frozenset(fields)))

    return messages


def parse_line(line: str) -> list[Message]:
    """Decode and normalize one listener line. Malformed lines yield no messages."""
    line = line.strip()
    if not line:
        return []
    try:
        return normalize(json.loads(line))
    except (ValueError, TypeError) as e:
        # json.JSONDecodeError and MalformedEvent are both ValueErrors
        log.warning("Dropping malformed event line %r: %s", line[:200], e)
        return []
