"""Translation of raw platform error text into actionable hints.

The platform repeats a subset of the client-side checks and answers with
free-form ``detail`` strings (typically ``HTTP 422: ...``). The rules below
classify those strings by case-insensitive substring matching. Order matters:
the first matching rule wins, so more specific rules sit above their generic
fallbacks. Text no rule recognizes is returned unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

Predicate = Callable[[str], bool]


def contains_all(*needles: str) -> Predicate:
    return lambda text: all(needle in text for needle in needles)


def contains_any(*needles: str) -> Predicate:
    return lambda text: any(needle in text for needle in needles)


def both(first: Predicate, second: Predicate) -> Predicate:
    return lambda text: first(text) and second(text)


@dataclass(frozen=True)
class TranslationRule:
    """A classification rule: when ``matches`` holds, show ``message``.

    Attributes:
        name: Stable identifier, used in logs and tests
        matches: Predicate over the lowercased raw error text
        message: User-facing remediation text
    """

    name: str
    matches: Predicate
    message: str


_APP_NAME = contains_all("app_name")
_STORAGE = contains_any("persistent_volume_size", "storage")
_MOUNT = contains_any("persistent_volume_mount_path", "mount")
_INVALID_FORMAT = contains_any("invalid", "format")

TRANSLATION_RULES: tuple[TranslationRule, ...] = (
    TranslationRule(
        "app-name-too-short",
        both(_APP_NAME, contains_all("at least 3 characters")),
        "App name must be at least 3 characters long. "
        "Use --name to specify one (e.g., --name my-app)",
    ),
    TranslationRule(
        "app-name-too-long",
        both(_APP_NAME, contains_any("at most 30 characters", "no more than 30")),
        "App name must be no more than 30 characters long",
    ),
    TranslationRule(
        "app-name-charset",
        both(_APP_NAME, contains_any("lowercase", "letters", "hyphens")),
        "App name must contain only lowercase letters, numbers, and hyphens",
    ),
    TranslationRule(
        "app-name",
        _APP_NAME,
        "Invalid app name. Use --name to specify one "
        "(3-30 chars, lowercase letters/numbers/hyphens only)",
    ),
    TranslationRule(
        "ports-both-set",
        contains_any("both http_port and tcp_port", "both ports"),
        "Cannot specify both --http-port and --tcp-port. Choose one type of port",
    ),
    TranslationRule(
        "port-range",
        contains_any("http_port", "tcp_port", "port"),
        "Port must be a valid number between 1 and 65535",
    ),
    TranslationRule(
        "cpu-format",
        both(contains_all("cpu"), _INVALID_FORMAT),
        "Invalid CPU value. Use format like '100m' or '0.5'",
    ),
    TranslationRule(
        "memory-format",
        both(contains_all("memory"), _INVALID_FORMAT),
        "Invalid memory value. Use format like '128Mi' or '1Gi'",
    ),
    TranslationRule(
        "image-empty",
        contains_all("image", "at least 1"),
        "Image name cannot be empty",
    ),
    TranslationRule(
        "storage-pairing",
        both(_STORAGE, contains_any("together")),
        "When using persistent storage, both --storage-size and "
        "--storage-path are required",
    ),
    TranslationRule(
        "storage-size-format",
        both(_STORAGE, contains_any("format", "10gi", "500mi")),
        "Storage size must be in format like '1Gi', '500Mi', '10Gi'",
    ),
    TranslationRule(
        "storage",
        _STORAGE,
        "Invalid storage configuration. Use --storage-size and --storage-path together",
    ),
    TranslationRule(
        "mount-path-absolute",
        both(_MOUNT, contains_any("absolute", "starting with")),
        "Storage path must be an absolute path starting with '/' "
        "(e.g., '/data', '/var/lib/mysql')",
    ),
    TranslationRule(
        "mount-path",
        _MOUNT,
        "Invalid storage path. Must be absolute path like '/data' or '/var/lib/mysql'",
    ),
    TranslationRule(
        "validation",
        contains_any("422", "validation"),
        "Validation error: Please check your input parameters",
    ),
)


def match_rule(raw_message: str) -> TranslationRule | None:
    """Return the first rule matching ``raw_message``, if any."""
    lowered = raw_message.lower()
    for rule in TRANSLATION_RULES:
        if rule.matches(lowered):
            return rule
    return None


def translate(raw_message: str) -> str:
    """Translate a raw backend error into a user-facing message.

    Args:
        raw_message: Error text as produced by the API client

    Returns:
        Remediation text, or ``raw_message`` itself when no rule applies
    """
    rule = match_rule(raw_message)
    return rule.message if rule else raw_message
