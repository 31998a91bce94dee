"""
Data models shared by the engine components.

Provides:
    - LocalizationParams: locale pair, fast flag and reference translations
    - BatchLocalizationParams: one source locale fanned out to many targets
    - ChatMessage: a single speaker/text pair of a chat transcript
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from lingo_engine.errors import ValidationError

# Flat key -> value mapping exchanged with the provider
Payload = Dict[str, Any]

# progress (0-100), source chunk, translated chunk
ProgressCallback = Callable[[int, Payload, Payload], None]

_PARAM_KEY_ALIASES = {
    "sourceLocale": "source_locale",
    "targetLocale": "target_locale",
    "targetLocales": "target_locales",
}


def _normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {_PARAM_KEY_ALIASES.get(key, key): value for key, value in data.items()}


def _check_locale(name: str, value: Any, allow_none: bool = False) -> None:
    if value is None and allow_none:
        return
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty locale code, got {value!r}")


def validate_payload(payload: Any) -> Payload:
    """
    Check that a payload is a mapping keyed by strings.

    Returns:
        A plain dict copy preserving insertion order

    Raises:
        ValidationError: If the payload has the wrong shape
    """
    if not isinstance(payload, Mapping):
        raise ValidationError(
            f"Payload must be a mapping, got {type(payload).__name__}"
        )
    for key in payload:
        if not isinstance(key, str):
            raise ValidationError(f"Payload keys must be strings, got {key!r}")
    return dict(payload)


@dataclass(frozen=True)
class LocalizationParams:
    """Parameters of a single-target localization call."""

    source_locale: Optional[str]  # None means auto-detect
    target_locale: str
    fast: bool = False
    # Previously approved translations, keyed by locale code
    reference: Optional[Dict[str, Payload]] = None

    def __post_init__(self) -> None:
        _check_locale("source_locale", self.source_locale, allow_none=True)
        _check_locale("target_locale", self.target_locale)
        if not isinstance(self.fast, bool):
            raise ValidationError(f"fast must be a boolean, got {self.fast!r}")
        if self.reference is not None:
            if not isinstance(self.reference, Mapping):
                raise ValidationError("reference must be a mapping of locale code to payload")
            for locale, entries in self.reference.items():
                _check_locale("reference locale", locale)
                validate_payload(entries)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LocalizationParams":
        """Build params from a mapping with snake_case or camelCase keys."""
        values = _normalize_keys(data)
        if "target_locale" not in values:
            raise ValidationError("target_locale is required")
        return cls(
            source_locale=values.get("source_locale"),
            target_locale=values["target_locale"],
            fast=values.get("fast", False),
            reference=values.get("reference"),
        )

    @classmethod
    def coerce(cls, params: Union["LocalizationParams", Mapping[str, Any]]) -> "LocalizationParams":
        if isinstance(params, cls):
            return params
        if isinstance(params, Mapping):
            return cls.from_dict(params)
        raise ValidationError(f"Unsupported localization params: {params!r}")


@dataclass(frozen=True)
class BatchLocalizationParams:
    """Parameters for localizing one text into several target locales."""

    source_locale: Optional[str]
    target_locales: List[str] = field(default_factory=list)
    fast: bool = False

    def __post_init__(self) -> None:
        _check_locale("source_locale", self.source_locale, allow_none=True)
        if isinstance(self.target_locales, str) or not isinstance(self.target_locales, (list, tuple)):
            raise ValidationError("target_locales must be a list of locale codes")
        for locale in self.target_locales:
            _check_locale("target_locales entry", locale)
        if not isinstance(self.fast, bool):
            raise ValidationError(f"fast must be a boolean, got {self.fast!r}")

    def for_target(self, target_locale: str) -> LocalizationParams:
        return LocalizationParams(
            source_locale=self.source_locale,
            target_locale=target_locale,
            fast=self.fast,
        )

    @classmethod
    def coerce(
        cls, params: Union["BatchLocalizationParams", Mapping[str, Any]]
    ) -> "BatchLocalizationParams":
        if isinstance(params, cls):
            return params
        if isinstance(params, Mapping):
            values = _normalize_keys(params)
            return cls(
                source_locale=values.get("source_locale"),
                target_locales=values.get("target_locales", []),
                fast=values.get("fast", False),
            )
        raise ValidationError(f"Unsupported batch localization params: {params!r}")


@dataclass(frozen=True)
class ChatMessage:
    """A chat message; only ``text`` is ever sent for localization."""

    name: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "text": self.text}

    @classmethod
    def coerce(cls, message: Union["ChatMessage", Mapping[str, Any]]) -> "ChatMessage":
        if isinstance(message, cls):
            return message
        if isinstance(message, Mapping) and "name" in message and "text" in message:
            return cls(name=str(message["name"]), text=str(message["text"]))
        raise ValidationError(
            f"Chat messages need 'name' and 'text' fields, got {message!r}"
        )
