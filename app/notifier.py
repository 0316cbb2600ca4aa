"""
Best-effort alert notifiers.

- WebhookNotifier: POST a JSON body to NOTIFY_WEBHOOK_URL (Slack/Discord-style hooks work).
- GotifyNotifier: POST /message on a Gotify server with an app token.
- Alerts: fans one alert out to every configured notifier.

Unconfigured notifiers stay silent. Send failures are logged, never raised.
"""

from __future__ import annotations
import os
import logging
import requests

log = logging.getLogger("notifier")

_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40, "CRITICAL": 50}
DEFAULT_APP_TAG = "Music→Last.fm"


def _level(name: str | None, default: int = 30) -> int:
    return _LEVELS.get((name or "").upper(), default)


class WebhookNotifier:
    def __init__(self, webhook_url: str | None, min_level: str = "WARNING", app_tag: str = DEFAULT_APP_TAG):
        self.webhook_url = webhook_url.strip() if webhook_url else None
        self.min_level = _level(min_level)
        self.app_tag = app_tag

    def send(self, level: str, title: str, message: str, extra: dict | None = None):
        if not self.webhook_url or _level(level) < self.min_level:
            return
        payload = {
            "level": level.upper(),
            "title": f"{self.app_tag}: {title}",
            "message": message,
            "extra": extra or {},
        }
        try:
            requests.post(self.webhook_url, json=payload, timeout=5)
        except requests.RequestException as e:
            log.debug("Webhook send failed: %s", e)


class GotifyNotifier:
    def __init__(self, url: str | None, token: str | None, min_level: str = "WARNING",
                 default_priority: int = 5, app_tag: str = DEFAULT_APP_TAG):
        self.url = url.rstrip("/") if url else None
        self.token = token.strip() if token else None
        self.min_level = _level(min_level)
        self.default_priority = default_priority
        self.app_tag = app_tag

    def send(self, level: str, title: str, message: str, extra: dict | None = None,
             priority: int | None = None):
        if not self.url or not self.token or _level(level) < self.min_level:
            return
        body = {
            "title": f"{self.app_tag}: {title}",
            "message": message if not extra else f"{message}\n\n{extra}",
            "priority": priority if priority is not None else self.default_priority,
        }
        try:
            requests.post(f"{self.url}/message", json=body,
                          headers={"X-Gotify-Key": self.token}, timeout=5)
        except requests.RequestException as e:
            log.debug("Gotify send failed: %s", e)


class Alerts:
    def __init__(self, *notifiers):
        self.notifiers = list(notifiers)

    def __call__(self, level: str, title: str, message: str, extra: dict | None = None):
        for notifier in self.notifiers:
            notifier.send(level, title, message, extra)

    @classmethod
    def from_env(cls) -> "Alerts":
        app_tag = os.getenv("APP_TAG", DEFAULT_APP_TAG)
        try:
            priority = int(os.getenv("GOTIFY_PRIORITY", "5"))
        except ValueError:
            priority = 5
        return cls(
            WebhookNotifier(
                webhook_url=os.getenv("NOTIFY_WEBHOOK_URL"),
                min_level=os.getenv("NOTIFY_MIN_LEVEL", "WARNING"),
                app_tag=app_tag,
            ),
            GotifyNotifier(
                os.getenv("GOTIFY_URL"),
                os.getenv("GOTIFY_TOKEN"),
                min_level=os.getenv("GOTIFY_MIN_LEVEL", "WARNING"),
                default_priority=priority,
                app_tag=app_tag,
            ),
        )
