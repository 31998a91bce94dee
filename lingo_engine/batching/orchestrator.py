"""
Sequential batch orchestration.

Drives the chunk sequence of one localization call through the provider,
one chunk at a time, reporting progress after each chunk and honoring
cooperative cancellation between chunks.
"""

from __future__ import annotations

import logging
import math
import time
import uuid
from typing import Any, Dict, Optional, TYPE_CHECKING

from lingo_engine.batching.chunker import PayloadChunker
from lingo_engine.models import (
    LocalizationParams,
    Payload,
    ProgressCallback,
    validate_payload,
)
from lingo_engine.utils.cancellation import CancellationToken, raise_if_cancelled

if TYPE_CHECKING:
    from lingo_engine.provider.client import ProviderClient

logger = logging.getLogger(__name__)


def new_workflow_id() -> str:
    """Mint a correlation token for one top-level localization call."""
    return uuid.uuid4().hex


def percent_complete(done: int, total: int) -> int:
    """Percentage of chunks done, rounded half up."""
    return int(math.floor(100 * done / total + 0.5))


class BatchOrchestrator:
    """
    Run a payload through the provider in size-bounded chunks.

    Chunks are dispatched strictly sequentially so that progress is
    monotonic and each call puts a bounded load on the provider. All
    chunks of a call share one workflow id.
    """

    def __init__(
        self,
        client: "ProviderClient",
        batch_size: int,
        ideal_batch_item_size: int,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            client: Provider client used for each chunk
            batch_size: Maximum entries per chunk
            ideal_batch_item_size: Word-count cap per chunk
        """
        self._client = client
        self._chunker = PayloadChunker(batch_size, ideal_batch_item_size)

    def localize(
        self,
        payload: Payload,
        params: LocalizationParams,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Localize a flat payload.

        Args:
            payload: Flat key -> value mapping
            params: Locale pair, fast flag and reference translations
            progress_callback: Called after each chunk with
                (percent, source_chunk, translated_chunk)
            cancel_token: Optional cancellation token

        Returns:
            Merged translations of all chunks

        Raises:
            CancellationError: If cancelled before or between chunks
            ValidationError: If payload or params are malformed
            ProviderRequestError: If any chunk request fails
        """
        raise_if_cancelled(cancel_token)

        entries = validate_payload(payload)
        params = LocalizationParams.coerce(params)

        chunks = self._chunker.chunk(entries)
        workflow_id = new_workflow_id()
        start_time = time.time()

        logger.debug(
            f"Workflow {workflow_id}: {len(entries)} entries in {len(chunks)} chunks "
            f"({params.source_locale or 'auto'} -> {params.target_locale})"
        )

        aggregated: Dict[str, Any] = {}
        for i, chunk in enumerate(chunks):
            raise_if_cancelled(cancel_token)

            translated = self._client.translate_chunk(
                params.source_locale,
                params.target_locale,
                chunk,
                params.reference,
                workflow_id,
                params.fast,
                cancel_token,
            )

            if progress_callback is not None:
                progress_callback(percent_complete(i + 1, len(chunks)), chunk, translated)

            aggregated.update(translated)

        logger.debug(
            f"Workflow {workflow_id} finished in {(time.time() - start_time) * 1000:.0f}ms"
        )
        return aggregated
