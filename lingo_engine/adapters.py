"""
Content adapters.

Each adapter converts one content shape into the flat payload consumed by
the batch orchestrator, and converts the localized payload back. Adapters
are created per call and may hold the original content between the two
conversions.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Union

from lingo_engine.errors import ValidationError
from lingo_engine.html.extractor import DocumentExtractor
from lingo_engine.models import ChatMessage, Payload, validate_payload

logger = logging.getLogger(__name__)

CHAT_KEY_PREFIX = "chat_"


class ContentAdapter(ABC):
    """Two-way mapping between a content shape and a flat payload."""

    @abstractmethod
    def to_flat_payload(self) -> Payload:
        """Flatten the content into key -> value entries."""
        pass

    @abstractmethod
    def from_flat_payload(self, payload: Payload) -> Any:
        """Rebuild the content shape from localized entries."""
        pass


class ObjectAdapter(ContentAdapter):
    """Objects are sent as-is."""

    def __init__(self, obj: Mapping[str, Any]) -> None:
        self._obj = validate_payload(obj)

    def to_flat_payload(self) -> Payload:
        return dict(self._obj)

    def from_flat_payload(self, payload: Payload) -> Dict[str, Any]:
        return payload


class TextAdapter(ContentAdapter):
    """A single string travels under the ``text`` key."""

    KEY = "text"

    def __init__(self, text: str) -> None:
        if not isinstance(text, str):
            raise ValidationError(f"Text must be a string, got {type(text).__name__}")
        self._text = text

    def to_flat_payload(self) -> Payload:
        return {self.KEY: self._text}

    def from_flat_payload(self, payload: Payload) -> str:
        return payload.get(self.KEY) or ""


class ChatAdapter(ContentAdapter):
    """
    Chat transcripts are keyed ``chat_<index>``.

    Speaker names stay local and are re-attached by index; messages the
    provider did not return are dropped from the result.
    """

    def __init__(self, chat: Iterable[Union[ChatMessage, Mapping[str, Any]]]) -> None:
        if isinstance(chat, (str, bytes, Mapping)):
            raise ValidationError("Chat must be a sequence of messages")
        self._messages = [ChatMessage.coerce(message) for message in chat]

    @staticmethod
    def key_for(index: int) -> str:
        return f"{CHAT_KEY_PREFIX}{index}"

    def to_flat_payload(self) -> Payload:
        return {self.key_for(i): message.text for i, message in enumerate(self._messages)}

    def from_flat_payload(self, payload: Payload) -> List[ChatMessage]:
        result: List[ChatMessage] = []
        for i, message in enumerate(self._messages):
            key = self.key_for(i)
            if key not in payload:
                logger.debug(f"Provider returned no translation for {key}")
                continue
            result.append(ChatMessage(name=message.name, text=payload[key]))
        return result


class HtmlAdapter(ContentAdapter):
    """HTML documents go through the DomPath codec."""

    def __init__(self, html: str, target_locale: str) -> None:
        if not isinstance(html, str):
            raise ValidationError(f"HTML must be a string, got {type(html).__name__}")
        self._extractor = DocumentExtractor(html)
        self._target_locale = target_locale

    def to_flat_payload(self) -> Payload:
        return self._extractor.extract()

    def from_flat_payload(self, payload: Payload) -> str:
        self._extractor.set_lang(self._target_locale)
        applied = self._extractor.apply(payload)
        logger.debug(f"Applied {applied}/{len(payload)} localized HTML entries")
        return self._extractor.serialize()
