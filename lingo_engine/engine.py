"""
Localization engine facade.

Public entry points for localizing objects, text, chat transcripts and
HTML documents, and for recognizing the locale of a text. Each entry point
adapts its content shape onto the flat payload contract and runs it
through the batch orchestrator.
"""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import requests

from lingo_engine.adapters import (
    ChatAdapter,
    ContentAdapter,
    HtmlAdapter,
    ObjectAdapter,
    TextAdapter,
)
from lingo_engine.batching.orchestrator import BatchOrchestrator
from lingo_engine.config import EngineConfig
from lingo_engine.errors import RECOGNITION_ABORTED, ValidationError
from lingo_engine.models import (
    BatchLocalizationParams,
    ChatMessage,
    LocalizationParams,
    ProgressCallback,
)
from lingo_engine.provider.client import ProviderClient
from lingo_engine.utils.cancellation import CancellationToken, raise_if_cancelled

logger = logging.getLogger(__name__)

ParamsLike = Union[LocalizationParams, Mapping[str, Any]]


class LocalizationEngine:
    """
    Batch localization against the remote provider.

    Example:
        with LocalizationEngine(api_key="...") as engine:
            params = LocalizationParams(source_locale="en", target_locale="es")
            engine.localize_text("Hello", params)
    """

    def __init__(
        self,
        config: Optional[Union[EngineConfig, Mapping[str, Any]]] = None,
        session: Optional[requests.Session] = None,
        **options: Any,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: EngineConfig, or a mapping of configuration values
            session: Optional HTTP session shared with the provider client
            **options: Configuration values merged over a mapping config

        Raises:
            ValidationError: If the configuration is invalid
        """
        if isinstance(config, EngineConfig):
            if options:
                raise ValidationError("Pass either an EngineConfig or keyword options, not both")
            self._config = config
        else:
            data: Dict[str, Any] = dict(config or {})
            data.update(options)
            self._config = EngineConfig.from_dict(data)

        self._client = ProviderClient(self._config, session=session)
        self._orchestrator = BatchOrchestrator(
            self._client,
            batch_size=self._config.batch_size,
            ideal_batch_item_size=self._config.ideal_batch_item_size,
        )

    @property
    def config(self) -> EngineConfig:
        return self._config

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "LocalizationEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def localize_object(
        self,
        obj: Mapping[str, Any],
        params: ParamsLike,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Localize the values of a flat object.

        Args:
            obj: Key -> value mapping to localize
            params: Source/target locales, fast mode, reference translations
            progress_callback: Called after each chunk with
                (percent, source_chunk, translated_chunk)
            cancel_token: Optional cancellation token

        Returns:
            Mapping with the same keys and localized values
        """
        params = LocalizationParams.coerce(params)
        return self._run(ObjectAdapter(obj), params, progress_callback, cancel_token)

    def localize_text(
        self,
        text: str,
        params: ParamsLike,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """
        Localize a single string.

        Returns:
            The localized string, or "" if the provider returned none
        """
        params = LocalizationParams.coerce(params)
        return self._run(TextAdapter(text), params, progress_callback, cancel_token)

    def batch_localize_text(
        self,
        text: str,
        params: Union[BatchLocalizationParams, Mapping[str, Any]],
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[str]:
        """
        Localize one string into several target locales concurrently.

        Every target runs as an independent localize_text call with its own
        cancellation token derived from the caller's. The first failure
        cancels the remaining calls and is re-raised.

        Args:
            text: String to localize
            params: Source locale, target locales and fast mode
            cancel_token: Optional cancellation token

        Returns:
            Localized strings in the order of ``params.target_locales``
        """
        raise_if_cancelled(cancel_token)
        params = BatchLocalizationParams.coerce(params)
        if not isinstance(text, str):
            raise ValidationError(f"Text must be a string, got {type(text).__name__}")

        targets = list(params.target_locales)
        if not targets:
            return []

        fan_out = cancel_token.create_child() if cancel_token is not None else CancellationToken()
        results: List[Optional[str]] = [None] * len(targets)

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=len(targets),
            thread_name_prefix="lingo-fan-out",
        ) as executor:
            futures = {
                executor.submit(
                    self.localize_text,
                    text,
                    params.for_target(target),
                    None,
                    fan_out.create_child(),
                ): i
                for i, target in enumerate(targets)
            }

            try:
                for future in concurrent.futures.as_completed(futures):
                    results[futures[future]] = future.result()
            except BaseException:
                fan_out.cancel()
                raise

        return results

    def localize_chat(
        self,
        chat: Iterable[Union[ChatMessage, Mapping[str, Any]]],
        params: ParamsLike,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[ChatMessage]:
        """
        Localize a chat transcript while preserving speaker names.

        Args:
            chat: Messages with ``name`` and ``text``
            params: Source/target locales and options
            progress_callback: Optional progress callback
            cancel_token: Optional cancellation token

        Returns:
            Localized messages in transcript order
        """
        params = LocalizationParams.coerce(params)
        return self._run(ChatAdapter(chat), params, progress_callback, cancel_token)

    def localize_html(
        self,
        html: str,
        params: ParamsLike,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """
        Localize an HTML document in place.

        Text content and localizable attributes (meta content, img alt,
        input placeholder, a title) are translated; script and style
        content is left alone. The root ``lang`` attribute is set to the
        target locale.

        Returns:
            The serialized localized document
        """
        raise_if_cancelled(cancel_token)
        params = LocalizationParams.coerce(params)
        adapter = HtmlAdapter(html, params.target_locale)
        return self._run(adapter, params, progress_callback, cancel_token)

    def recognize_locale(
        self,
        text: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """
        Detect the locale of a text.

        Returns:
            Locale code such as "en", "es" or "fr"
        """
        raise_if_cancelled(cancel_token, RECOGNITION_ABORTED)
        if not isinstance(text, str):
            raise ValidationError(f"Text must be a string, got {type(text).__name__}")
        return self._client.recognize_locale(text, cancel_token)

    # ------------------------------------------------------------------

    def _run(
        self,
        adapter: ContentAdapter,
        params: LocalizationParams,
        progress_callback: Optional[ProgressCallback],
        cancel_token: Optional[CancellationToken],
    ) -> Any:
        payload = adapter.to_flat_payload()
        localized = self._orchestrator.localize(payload, params, progress_callback, cancel_token)
        return adapter.from_flat_payload(localized)
