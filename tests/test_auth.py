import auth


class FakeGenerator:
    def __init__(self, network) -> None:
        self.network = network

    def get_web_auth_url(self) -> str:
        return "http://www.last.fm/api/auth/?api_key=key&token=tok"

    def get_web_auth_session_key(self, url: str) -> str:
        assert url.endswith("token=tok")
        return "session-123"


def test_get_session_key_waits_for_authorization(monkeypatch, capsys) -> None:
    prompts = []
    monkeypatch.setattr(auth.pylast, "SessionKeyGenerator", FakeGenerator)

    key = auth.get_session_key(object(), wait=prompts.append)

    assert key == "session-123"
    assert len(prompts) == 1
    assert "token=tok" in capsys.readouterr().out
