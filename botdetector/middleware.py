from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from .config import parse_config
from .detector import USER_AGENT_HEADER, BotDetector, new_detector
from .exceptions import ConfigError, NoConfigError

logger = logging.getLogger(__name__)

WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]

FORBIDDEN_STATUS = "403 Forbidden"


class WSGIRequest:
    """Request view exposing the User-Agent of a WSGI environ as headers."""

    __slots__ = ("headers",)

    def __init__(self, environ: dict) -> None:
        user_agent = environ.get("HTTP_USER_AGENT")
        self.headers = {USER_AGENT_HEADER: user_agent} if user_agent is not None else {}


class BotDetectorMiddleware:
    """
    WSGI middleware rejecting bot requests with 403 Forbidden.

    Requests classified as human reach the wrapped app untouched.
    """

    def __init__(self, app: WSGIApp, detector: BotDetector) -> None:
        self.app = app
        self.detector = detector

    @classmethod
    def from_extra_config(
        cls,
        app: WSGIApp,
        extra_config: Mapping[str, Any],
        **overrides: Any,
    ) -> WSGIApp:
        """
        Wrap app with a detector built from a host's extra config.

        If the detector is not configured, or its config is invalid, the app
        is returned unwrapped and requests are not filtered.
        """
        try:
            config = parse_config(extra_config, **overrides)
            detector = new_detector(config)
        except NoConfigError as e:
            logger.debug(f"botdetector: {e}")
            return app
        except ConfigError as e:
            logger.warning(f"botdetector: unable to create the detector: {e}")
            return app

        logger.debug("botdetector: the bot detector has been registered successfully")
        return cls(app, detector)

    def __call__(self, environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        if self.detector.is_bot(WSGIRequest(environ)):
            logger.error(
                "bot rejected",
                extra={"user_agent": environ.get("HTTP_USER_AGENT", ""), "path": environ.get("PATH_INFO", "")},
            )
            start_response(FORBIDDEN_STATUS, [("Content-Type", "text/plain"), ("Content-Length", "0")])
            return [b""]

        return self.app(environ, start_response)
