from __future__ import annotations

import logging
from typing import Any, Callable, List

import httpx
import pytest

from botdetector import NAMESPACE, BotDetectorMiddleware, LRUDetector, compile_ruleset


class DummyApp:
    def __init__(self) -> None:
        self.calls: int = 0

    def __call__(self, environ: dict, start_response: Callable[..., Any]) -> List[bytes]:
        self.calls += 1
        start_response("200 OK", [("Content-Type", "text/plain")])
        return [f"ok-{self.calls}".encode()]


EXTRA_CONFIG = {
    NAMESPACE: {
        "deny": ["a", "b"],
        "allow": ["c"],
        "patterns": [r"facebookexternalhit/\d+\.\d+"],
        "cache_size": 100,
    }
}


def _client(app: Any) -> httpx.Client:
    return httpx.Client(transport=httpx.WSGITransport(app=app), base_url="http://testserver")


@pytest.fixture
def app() -> DummyApp:
    return DummyApp()


def test_bots_are_forbidden(app: DummyApp) -> None:
    wrapped = BotDetectorMiddleware.from_extra_config(app, EXTRA_CONFIG)
    assert isinstance(wrapped, BotDetectorMiddleware)

    with _client(wrapped) as client:
        for ua in ("a", "b", "facebookexternalhit/1.1"):
            r = client.get("/", headers={"User-Agent": ua})
            assert r.status_code == 403, ua

    assert app.calls == 0


def test_humans_pass_through(app: DummyApp) -> None:
    wrapped = BotDetectorMiddleware.from_extra_config(app, EXTRA_CONFIG)

    with _client(wrapped) as client:
        r1 = client.get("/", headers={"User-Agent": "c"})
        r2 = client.get("/", headers={"User-Agent": "Mozilla/5.0"})

    assert r1.status_code == 200
    assert r1.text == "ok-1"
    assert r2.text == "ok-2"
    assert app.calls == 2


def test_empty_user_agent_policy(app: DummyApp) -> None:
    extra = {NAMESPACE: {"reject_if_empty": True}}
    wrapped = BotDetectorMiddleware.from_extra_config(app, extra)

    with _client(wrapped) as client:
        r = client.get("/", headers={"User-Agent": ""})

    assert r.status_code == 403
    assert app.calls == 0


def test_missing_config_leaves_app_unwrapped(app: DummyApp) -> None:
    assert BotDetectorMiddleware.from_extra_config(app, {}) is app


def test_invalid_config_leaves_app_unwrapped(app: DummyApp, caplog: pytest.LogCaptureFixture) -> None:
    extra = {NAMESPACE: {"patterns": ["(broken"]}}

    with caplog.at_level(logging.WARNING, logger="botdetector.middleware"):
        assert BotDetectorMiddleware.from_extra_config(app, extra) is app

    assert "unable to create the detector" in caplog.text


def test_rejection_is_logged(app: DummyApp, caplog: pytest.LogCaptureFixture) -> None:
    wrapped = BotDetectorMiddleware(app, LRUDetector(compile_ruleset(deny=["a"]), 10))

    with caplog.at_level(logging.ERROR, logger="botdetector.middleware"):
        with _client(wrapped) as client:
            client.get("/", headers={"User-Agent": "a"})

    assert "bot rejected" in caplog.text


def test_non_mapping_extra_config_leaves_app_unwrapped(app: DummyApp) -> None:
    assert BotDetectorMiddleware.from_extra_config(app, None) is app  # type: ignore[arg-type]


def test_non_ascii_user_agent_through_wsgi(app: DummyApp) -> None:
    """WSGI hands header values over latin-1 decoded; they still match verbatim."""
    extra = {NAMESPACE: {"deny": ["caf\xe9bot"], "cache_size": 10}}
    wrapped = BotDetectorMiddleware.from_extra_config(app, extra)
    statuses: List[str] = []

    def start_response(status: str, headers: list) -> None:
        statuses.append(status)

    wrapped({"PATH_INFO": "/", "HTTP_USER_AGENT": "caf\xe9bot"}, start_response)
    body = wrapped({"PATH_INFO": "/", "HTTP_USER_AGENT": "caf\xe9"}, start_response)

    assert statuses == ["403 Forbidden", "200 OK"]
    assert body == [b"ok-1"]
    assert app.calls == 1
