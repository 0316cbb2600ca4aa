import pylast
import logging

log = logging.getLogger("lastfm")

# 4=Auth failed, 9=Invalid session, 14=Token unauthorized, 15=Token expired
_AUTH_STATUSES = {4, 9, 14, 15}
_RATE_LIMIT_STATUSES = {29}  # Rate limit exceeded


# Custom error classes so callers can branch
class LastFMError(Exception): ...
class LastFMAuthError(LastFMError): ...
class LastFMRateLimitError(LastFMError): ...
class LastFMNetworkError(LastFMError): ...
class LastFMUnknownError(LastFMError): ...


def _status(e: pylast.WSError) -> int | None:
    try:
        return int(getattr(e, "status", None))
    except (TypeError, ValueError):
        return None


def build_network(api_key: str, api_secret: str, session_key: str | None = None,
                  username: str | None = None, password_md5: str | None = None) -> pylast.LastFMNetwork:
    if session_key:
        log.info("Using Last.fm session key auth")
        return pylast.LastFMNetwork(
            api_key=api_key,
            api_secret=api_secret,
            session_key=session_key,
        )
    if username and password_md5:
        log.info("Using Last.fm username + MD5 password auth")
        return pylast.LastFMNetwork(
            api_key=api_key,
            api_secret=api_secret,
            username=username,
            password_hash=password_md5,
        )
    raise ValueError("Missing Last.fm credentials")


class LastFMClient:
    """Thin wrapper over pylast for update-now-playing + scrobbling.

    Both calls block on HTTP; the session runs them off the event loop.
    """

    def __init__(self, network: pylast.LastFMNetwork):
        self.network = network

    @classmethod
    def from_credentials(cls, *, api_key: str, api_secret: str, session_key: str | None,
                         username: str | None, password_md5: str | None) -> "LastFMClient":
        return cls(build_network(api_key, api_secret, session_key, username, password_md5))

    def update_now_playing(self, *, artist: str, title: str, album: str | None = None,
                           duration: int | None = None) -> bool:
        """Push a Now Playing update. Non-fatal on failure."""
        try:
            self.network.update_now_playing(
                artist=artist, title=title, album=album or None, duration=duration or None
            )
        except pylast.WSError as e:
            # NOW PLAYING failures aren't critical
            log.warning("update_now_playing failed: status=%s msg=%s", _status(e), e)
            return False
        except Exception as e:
            log.warning("update_now_playing network error: %s", e)
            return False
        return True

    def scrobble(self, *, artist: str, title: str, album: str | None = None,
                 duration: int | None = None, timestamp: int):
        """Submit a scrobble to Last.fm with a start timestamp (unix seconds)."""
        try:
            self.network.scrobble(
                artist=artist, title=title, album=album or None,
                duration=duration or None, timestamp=timestamp,
            )
        except pylast.WSError as e:
            status = _status(e)
            msg = str(e)
            if status in _AUTH_STATUSES:
                raise LastFMAuthError(msg) from e
            if status in _RATE_LIMIT_STATUSES:
                raise LastFMRateLimitError(msg) from e
            raise LastFMUnknownError(f"Last.fm API error {status}: {msg}") from e
        except Exception as e:
            raise LastFMNetworkError(str(e)) from e
