"""Configuration via environment variables (a local .env file is loaded first)."""

from __future__ import annotations
import os
import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

APP_DIR = Path(__file__).resolve().parent
LISTENER_SCRIPT = APP_DIR / "listener.py"

DEFAULT_CHECK_INTERVAL = 10


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def default_observer_command() -> list[str]:
    return [sys.executable, "-u", str(LISTENER_SCRIPT)]


@dataclass
class Settings:
    api_key: str | None = None
    api_secret: str | None = None
    session_key: str | None = None
    username: str | None = None
    password_md5: str | None = None
    check_interval: int = DEFAULT_CHECK_INTERVAL
    observer_command: list[str] = field(default_factory=default_observer_command)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: str | os.PathLike | None = None) -> "Settings":
        # Variables already in the environment win over .env
        load_dotenv(dotenv_path or Path.cwd() / ".env", override=False)
        command = os.getenv("OBSERVER_COMMAND")
        return cls(
            api_key=os.getenv("LASTFM_API_KEY") or None,
            api_secret=os.getenv("LASTFM_API_SECRET") or None,
            session_key=os.getenv("LASTFM_SESSION_KEY") or None,
            username=os.getenv("LASTFM_USERNAME") or None,
            password_md5=os.getenv("LASTFM_PASSWORD_MD5") or None,
            check_interval=max(1, _int_env("SCROBBLE_CHECK_INTERVAL", DEFAULT_CHECK_INTERVAL)),
            observer_command=shlex.split(command) if command else default_observer_command(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """Fail fast with a readable message on missing Last.fm credentials."""
        if not self.api_key or not self.api_secret:
            raise SystemExit("LASTFM_API_KEY and LASTFM_API_SECRET are required")
        if not (self.session_key or (self.username and self.password_md5)):
            raise SystemExit(
                "Provide LASTFM_SESSION_KEY or LASTFM_USERNAME + LASTFM_PASSWORD_MD5 "
                "(run `python app/auth.py` to obtain a session key)"
            )
