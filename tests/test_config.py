import sys

import pytest

from config import LISTENER_SCRIPT, Settings

ENV_VARS = (
    "LASTFM_API_KEY", "LASTFM_API_SECRET", "LASTFM_SESSION_KEY", "LASTFM_USERNAME",
    "LASTFM_PASSWORD_MD5", "SCROBBLE_CHECK_INTERVAL", "OBSERVER_COMMAND", "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so values loaded from .env are undone after the test
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


def test_defaults(tmp_path) -> None:
    settings = Settings.from_env()

    assert settings.check_interval == 10
    assert settings.observer_command == [sys.executable, "-u", str(LISTENER_SCRIPT)]
    assert settings.log_level == "INFO"
    assert settings.session_key is None


def test_reads_dotenv_without_overriding_environment(tmp_path, monkeypatch) -> None:
    (tmp_path / ".env").write_text(
        "LASTFM_API_KEY=from-file\nLASTFM_API_SECRET=secret\nSCROBBLE_CHECK_INTERVAL=5\n"
    )
    monkeypatch.setenv("LASTFM_API_KEY", "from-env")

    settings = Settings.from_env()

    assert settings.api_key == "from-env"
    assert settings.api_secret == "secret"
    assert settings.check_interval == 5


def test_interval_and_command_parsing(monkeypatch) -> None:
    monkeypatch.setenv("SCROBBLE_CHECK_INTERVAL", "0")
    monkeypatch.setenv("OBSERVER_COMMAND", "swift 'now playing.swift'")
    settings = Settings.from_env()
    assert settings.check_interval == 1
    assert settings.observer_command == ["swift", "now playing.swift"]

    monkeypatch.setenv("SCROBBLE_CHECK_INTERVAL", "soon")
    assert Settings.from_env().check_interval == 10


def test_validate_requires_credentials() -> None:
    with pytest.raises(SystemExit, match="LASTFM_API_KEY"):
        Settings().validate()
    with pytest.raises(SystemExit, match="LASTFM_SESSION_KEY"):
        Settings(api_key="k", api_secret="s").validate()

    Settings(api_key="k", api_secret="s", session_key="sk").validate()
    Settings(api_key="k", api_secret="s", username="u", password_md5="md5").validate()
