"""
Playback session: owns the current track and its scrobble bookkeeping.

Everything that can change the session arrives as a message on one asyncio
queue (listener lines, periodic ticks, completions of Last.fm calls), so the
state is only ever touched by the consuming coroutine. Blocking pylast calls
run in the loop's default executor and report back through the same queue.
"""

from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import replace
from typing import Callable

from events import (
    Message, ObserverExited, ScrobbleCompleted, StateChanged, Tick,
    TrackData, TrackStopped, parse_line,
)
from lastfm_client import LastFMAuthError, LastFMError, LastFMUnknownError
from state import PLAYING, ScrobbleState, Track, is_eligible, scrobble_threshold

log = logging.getLogger("session")


def _no_alert(level: str, title: str, message: str, extra: dict | None = None):
    pass


class PlaybackSession:
    """Idle (no track) or Tracking (track + ScrobbleState)."""

    def __init__(self, client, *, alert: Callable = _no_alert,
                 clock: Callable[[], float] = time.time, tick_interval: float = 10):
        self.client = client
        self.alert = alert
        self.clock = clock
        self.tick_interval = tick_interval

        self.track: Track | None = None
        self.scrobble: ScrobbleState | None = None

        self._queue: asyncio.Queue[Message] = asyncio.Queue()
        self._in_flight: ScrobbleState | None = None
        self._calls: set[asyncio.Future] = set()
        self._tasks: list[asyncio.Task] = []

    # -------- inbound --------
    def submit(self, message: Message) -> None:
        self._queue.put_nowait(message)

    def feed_line(self, line: str) -> None:
        for message in parse_line(line):
            self.submit(message)

    def observer_exited(self, returncode: int | None, reason: str = "") -> None:
        self.submit(ObserverExited(returncode, reason))

    @property
    def is_tracking(self) -> bool:
        return self.track is not None and self.scrobble is not None

    # -------- state machine --------
    def handle(self, message: Message) -> None:
        if isinstance(message, TrackData):
            self._on_track_data(message)
        elif isinstance(message, StateChanged):
            self._on_state_changed(message.state)
        elif isinstance(message, TrackStopped):
            self._on_track_stopped()
        elif isinstance(message, Tick):
            self.check_scrobble()
        elif isinstance(message, ScrobbleCompleted):
            self._on_scrobble_completed(message)
        elif isinstance(message, ObserverExited):
            self._on_observer_exited(message)
        else:
            log.warning("Unhandled message %r", message)

    def _on_track_data(self, message: TrackData) -> None:
        new = message.track
        if self.track is not None and self.track.identity == new.identity:
            self.track = self.track.merged(new, message.fields)
            return
        self._start_tracking(new)

    def _start_tracking(self, track: Track) -> None:
        self.track = track
        self.scrobble = ScrobbleState(identity=track.identity, start_time=self.clock())
        log.info("Now playing: %s — %s%s (%ss)", track.artist, track.name,
                 f" [{track.album}]" if track.album else "", track.duration)
        self._spawn(self._now_playing(track))

    def _on_state_changed(self, state: str) -> None:
        if self.track is None:
            return
        if state != self.track.player_state:
            log.info("Playback %s", state)
        self.track = replace(self.track, player_state=state)

    def _on_track_stopped(self) -> None:
        if self.track is not None:
            log.info("Playback stopped, clearing state")
        self.track = None
        self.scrobble = None

    def check_scrobble(self) -> bool:
        """Periodic eligibility check. Returns True when a scrobble call was issued."""
        track, state = self.track, self.scrobble
        if track is None or state is None or track.player_state != PLAYING:
            return False
        now = self.clock()
        if not is_eligible(track, state, now):
            if not state.scrobbled:
                log.debug("Progress: %s/%ss until scrobble", state.elapsed(now),
                          scrobble_threshold(track.duration))
            return False
        if self._in_flight is state:
            log.debug("Scrobble already in flight for %s", state.identity)
            return False
        log.info("Scrobbling: %s — %s", track.artist, track.name)
        self._in_flight = state
        self._spawn(self._scrobble(track, state))
        return True

    def _on_scrobble_completed(self, message: ScrobbleCompleted) -> None:
        if self._in_flight is message.state:
            self._in_flight = None
        if message.state is not self.scrobble:
            log.debug("Ignoring late scrobble result for %s", message.state.identity)
            return
        if message.ok:
            message.state.scrobbled = True

    def _on_observer_exited(self, message: ObserverExited) -> None:
        log.error("Player observer exited (code=%s) %s", message.returncode, message.reason)
        self._notify("ERROR", "Player observer stopped",
                     message.reason or f"Listener exited with code {message.returncode}")
        self._on_track_stopped()

    # -------- remote calls --------
    def _spawn(self, aw) -> asyncio.Future:
        task = asyncio.ensure_future(aw)
        self._calls.add(task)
        task.add_done_callback(self._calls.discard)
        return task

    def _notify(self, level: str, title: str, message: str, extra: dict | None = None) -> None:
        # Notifiers do blocking HTTP
        loop = asyncio.get_running_loop()
        self._spawn(loop.run_in_executor(None, self.alert, level, title, message, extra))

    async def _now_playing(self, track: Track) -> None:
        loop = asyncio.get_running_loop()
        ok = await loop.run_in_executor(None, lambda: self.client.update_now_playing(
            artist=track.artist, title=track.name, album=track.album,
            duration=track.duration or None,
        ))
        if ok:
            log.info("Updated \"Now Playing\" on Last.fm")
        else:
            log.warning("\"Now Playing\" update failed for %s — %s", track.artist, track.name)

    async def _scrobble(self, track: Track, state: ScrobbleState) -> None:
        payload = dict(
            artist=track.artist,
            title=track.name,
            album=track.album,
            duration=track.duration or None,
            timestamp=state.timestamp,
        )
        loop = asyncio.get_running_loop()
        ok = False
        try:
            await loop.run_in_executor(None, lambda: self.client.scrobble(**payload))
            ok = True
            log.info("Scrobbled: %s — %s%s", track.artist, track.name,
                     f" [{track.album}]" if track.album else "")
        except LastFMAuthError as e:
            log.error("Scrobble failed (auth): %s", e)
            self._notify("ERROR", "Last.fm authentication failed", str(e), payload)
        except LastFMUnknownError as e:
            log.warning("Unknown Last.fm error, will retry: %s", e)
            self._notify("WARNING", "Last.fm scrobble error", str(e), payload)
        except LastFMError as e:
            log.warning("Scrobble failed, will retry: %s", e)
        except Exception:
            log.exception("Unexpected scrobble failure, will retry")
        finally:
            self.submit(ScrobbleCompleted(state, ok))

    # -------- lifecycle --------
    async def run(self) -> None:
        """Consume messages in arrival order until cancelled."""
        while True:
            message = await self._queue.get()
            self.handle(message)

    async def _ticker(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            self.submit(Tick())

    def start(self) -> None:
        loop = asyncio.get_running_loop()
        self._tasks = [loop.create_task(self.run()), loop.create_task(self._ticker())]

    async def settle(self) -> None:
        """Wait for in-flight calls and handle everything queued so far."""
        while True:
            if self._calls:
                await asyncio.gather(*list(self._calls), return_exceptions=True)
            if self._queue.empty() and not self._calls:
                return
            while not self._queue.empty():
                self.handle(self._queue.get_nowait())

    async def stop(self) -> None:
        """Cancel the ticker, the consumer and pending calls; late results are dropped."""
        tasks = self._tasks + list(self._calls)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks = []
        self._calls.clear()
        self._in_flight = None
