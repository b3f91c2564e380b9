"""Language-code helpers used for grouping and ordering tracks."""

from __future__ import annotations

from ytd_dash.core.tables import (
    LANGUAGE_NAMES,
    SECOND_PRIORITY_LANGUAGES,
    TOP_PRIORITY_LANGUAGES,
)


def normalize_language_code(language_code: str | None) -> str:
    """Normalize to BCP 47 spelling: hyphens, lower-case primary subtag.

    ``"es_419"`` → ``"es-419"``, ``"EN-US"`` → ``"en-US"``, empty or
    ``None`` → ``"und"``.
    """
    if not language_code:
        return "und"
    primary, sep, rest = language_code.replace("_", "-").partition("-")
    return f"{primary.lower()}{sep}{rest}"


def language_priority(language_code: str | None) -> int:
    """Return the priority class of a language (lower sorts first).

    ``0`` for original/undetermined audio, ``1`` for English, ``2`` for
    everything else.
    """
    normalized = normalize_language_code(language_code)
    if normalized in TOP_PRIORITY_LANGUAGES:
        return 0
    if normalized in SECOND_PRIORITY_LANGUAGES:
        return 1
    return 2


def language_sort_key(language_code: str | None) -> tuple[int, str]:
    """Sort key: priority class, then normalized code alphabetically."""
    return (
        language_priority(language_code),
        normalize_language_code(language_code),
    )


def compare_language_priority(lang_a: str | None, lang_b: str | None) -> int:
    """Three-way comparator matching :func:`language_sort_key`."""
    key_a = language_sort_key(lang_a)
    key_b = language_sort_key(lang_b)
    return (key_a > key_b) - (key_a < key_b)


def language_display_name(language_code: str | None) -> str:
    """Friendly name for a language, or its upper-cased code."""
    normalized = normalize_language_code(language_code)
    return LANGUAGE_NAMES.get(normalized, normalized.upper())
