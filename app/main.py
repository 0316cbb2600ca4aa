import asyncio
import logging

from config import Settings
from lastfm_client import LastFMClient
from notifier import Alerts
from observer import PlayerObserver
from session import PlaybackSession

log = logging.getLogger("music-lastfm")


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,  # ensure our config is used even if libs pre-configure logging
    )
    # pylast logs every request at INFO
    logging.getLogger("pylast").setLevel(logging.WARNING)


async def run(settings: Settings, alert: Alerts):
    lfm = LastFMClient.from_credentials(
        api_key=settings.api_key,
        api_secret=settings.api_secret,
        session_key=settings.session_key,
        username=settings.username,
        password_md5=settings.password_md5,
    )
    session = PlaybackSession(lfm, alert=alert, tick_interval=settings.check_interval)
    observer = PlayerObserver(
        settings.observer_command,
        on_line=session.feed_line,
        on_exit=session.observer_exited,
    )

    log.info("Starting Music → Last.fm bridge. Scrobble check interval: %ss", settings.check_interval)
    session.start()
    try:
        await observer.run()
        # Listener is gone; keep the session alive (Idle) until interrupted
        await asyncio.Event().wait()
    finally:
        observer.stop()
        await session.stop()


def main():
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    settings.validate()
    alerts = Alerts.from_env()
    alerts("INFO", "Bridge started", f"Listening with: {' '.join(settings.observer_command)}")
    asyncio.run(run(settings, alerts))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        log.info("Shutting down…")
