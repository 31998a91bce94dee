"""
Shared test doubles for the provider HTTP session.
"""

import json
import threading
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import requests


def make_response(
    status: int = 200,
    payload: Any = None,
    text: Optional[str] = None,
    reason: str = "OK",
) -> MagicMock:
    """Build a mocked requests.Response."""
    response = MagicMock()
    response.status_code = status
    response.reason = reason
    response.text = text if text is not None else json.dumps(payload)
    if payload is None and text is not None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = payload
    return response


class FakeProvider:
    """
    Stand-in for the provider behind requests.Session.post.

    Localizes each value as "[<target>] <value>" unless a custom handler
    is supplied. Records every request body.
    """

    def __init__(
        self,
        handler: Optional[Callable[[str, Dict[str, Any]], MagicMock]] = None,
        locale: str = "en",
    ) -> None:
        self._handler = handler
        self._locale = locale
        self._lock = threading.Lock()
        self.calls: List[Dict[str, Any]] = []
        self.urls: List[str] = []

    def __call__(self, url: str, data: bytes = b"", timeout: Any = None) -> MagicMock:
        body = json.loads(data.decode("utf-8"))
        with self._lock:
            self.calls.append(body)
            self.urls.append(url)

        if self._handler is not None:
            return self._handler(url, body)

        if url.endswith("/recognize"):
            return make_response(payload={"locale": self._locale})

        target = body["locale"]["target"]
        translated = {key: f"[{target}] {value}" for key, value in body["data"].items()}
        return make_response(payload={"data": translated})

    @property
    def localize_calls(self) -> List[Dict[str, Any]]:
        return [body for body, url in zip(self.calls, self.urls) if url.endswith("/i18n")]


def make_session(provider: Callable) -> requests.Session:
    """A real Session whose post() is routed to a fake provider."""
    session = requests.Session()
    session.post = MagicMock(side_effect=provider)
    return session
