"""
HTTP client for the localization provider.

Issues the two provider calls (chunk localization and locale recognition)
and normalizes the provider's error shapes into ProviderRequestError.
Failed calls are never retried.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from lingo_engine.config import EngineConfig
from lingo_engine.errors import (
    LOCALIZATION_ABORTED,
    RECOGNITION_ABORTED,
    CancellationError,
    ProviderRequestError,
)
from lingo_engine.utils.cancellation import CancellationToken, raise_if_cancelled

logger = logging.getLogger(__name__)

LOCALIZE_PATH = "/i18n"
RECOGNIZE_PATH = "/recognize"


def _is_success(response: requests.Response) -> bool:
    """Only 2xx counts; requests' ``ok`` also accepts 3xx."""
    return 200 <= response.status_code < 300


class ProviderClient:
    """
    Client for the provider's ``/i18n`` and ``/recognize`` endpoints.

    One ``requests.Session`` is held per client; it carries the bearer
    API key and JSON content type on every request.
    """

    def __init__(
        self,
        config: EngineConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the provider client.

        Args:
            config: Engine configuration (API key, URL, timeout)
            session: Optional pre-built session, mainly for tests
        """
        self._config = config
        self._session = session or requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json; charset=utf-8",
            "Authorization": f"Bearer {config.api_key}",
        })

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    # ------------------------------------------------------------------
    # Public calls
    # ------------------------------------------------------------------

    def translate_chunk(
        self,
        source_locale: Optional[str],
        target_locale: str,
        data: Dict[str, Any],
        reference: Optional[Dict[str, Dict[str, Any]]],
        workflow_id: str,
        fast: bool,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Localize one chunk.

        Args:
            source_locale: Source locale code, or None to auto-detect
            target_locale: Target locale code
            data: Chunk entries to localize
            reference: Approved translations keyed by locale, sent as context
            workflow_id: Correlation token shared by all chunks of a call
            fast: Provider-side fast mode
            cancel_token: Optional cancellation token

        Returns:
            Localized entries (empty when the provider returned no data)

        Raises:
            CancellationError: If the token was cancelled
            ProviderRequestError: On a failed or malformed response
        """
        body = {
            "params": {"workflowId": workflow_id, "fast": fast},
            "locale": {"source": source_locale, "target": target_locale},
            "data": data,
            "reference": reference,
        }

        response = self._post(LOCALIZE_PATH, body, cancel_token, LOCALIZATION_ABORTED)

        if not _is_success(response):
            if response.status_code == 400:
                raise ProviderRequestError(
                    f"Invalid request: {response.reason}",
                    status_code=response.status_code,
                    body=response.text,
                )
            raise ProviderRequestError(
                response.text,
                status_code=response.status_code,
                body=response.text,
            )

        payload = self._decode(response)

        # Streaming endpoints report failures inside a successful response
        if payload.get("data") is None and payload.get("error"):
            raise ProviderRequestError(
                str(payload["error"]),
                status_code=response.status_code,
                body=response.text,
            )

        result = payload.get("data") or {}
        if not isinstance(result, dict):
            raise ProviderRequestError(
                f"Provider returned non-object data: {type(result).__name__}",
                status_code=response.status_code,
                body=response.text,
            )
        return result

    def recognize_locale(
        self,
        text: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """
        Ask the provider which locale a text is written in.

        Args:
            text: Text to analyze
            cancel_token: Optional cancellation token

        Returns:
            Locale code such as "en" or "es"
        """
        response = self._post(RECOGNIZE_PATH, {"text": text}, cancel_token, RECOGNITION_ABORTED)

        if not _is_success(response):
            raise ProviderRequestError(
                f"Error recognizing locale: {response.reason}",
                status_code=response.status_code,
                body=response.text,
            )

        payload = self._decode(response)
        locale = payload.get("locale")
        if not isinstance(locale, str) or not locale:
            raise ProviderRequestError(
                "Provider response did not include a locale",
                status_code=response.status_code,
                body=response.text,
            )
        return locale

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _post(
        self,
        path: str,
        body: Dict[str, Any],
        cancel_token: Optional[CancellationToken],
        aborted_message: str,
    ) -> requests.Response:
        """POST a JSON body, mapping cancellation and transport failures."""
        raise_if_cancelled(cancel_token, aborted_message)

        url = f"{self._config.base_url}{path}"
        logger.debug(f"POST {url}")

        try:
            response = self._session.post(
                url,
                data=json.dumps(body, ensure_ascii=False).encode("utf-8"),
                timeout=self._config.request_timeout,
            )
        except requests.exceptions.RequestException as exc:
            if cancel_token is not None and cancel_token.is_cancelled:
                raise CancellationError(aborted_message) from exc
            raise ProviderRequestError(f"Request to {url} failed: {exc}") from exc

        # A response that arrives after cancellation is discarded
        raise_if_cancelled(cancel_token, aborted_message)
        return response

    @staticmethod
    def _decode(response: requests.Response) -> Dict[str, Any]:
        """Decode a JSON object body."""
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderRequestError(
                "Provider returned a malformed JSON response",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        if not isinstance(payload, dict):
            raise ProviderRequestError(
                "Provider returned a malformed JSON response",
                status_code=response.status_code,
                body=response.text,
            )
        return payload
