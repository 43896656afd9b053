"""Helpers for canonicalising tag names."""

from __future__ import annotations

import re
import unicodedata

import emoji as emoji_lib


_NON_TAG_CHARS = re.compile(r"[^a-z0-9-]+")
_MULTI_DASH = re.compile(r"-{2,}")
_EMOJI_SHORTCODE = re.compile(r"^:[a-z0-9_+\-]+:$", re.IGNORECASE)

_VS16 = 0xFE0F
_VS15 = 0xFE0E

MAX_TAG_LENGTH = 64


def _canonicalize_emoji_tag(raw: str) -> str | None:
    value = unicodedata.normalize("NFC", str(raw or "").strip())
    if not value or any(ch.isspace() for ch in value):
        return None
    # Variation selectors are dropped so equivalent emoji map to one tag.
    cleaned = "".join(ch for ch in value if ord(ch) not in (_VS15, _VS16))
    if not cleaned or not emoji_lib.purely_emoji(cleaned):
        return None
    return cleaned[:MAX_TAG_LENGTH]


def _expand_emoji_shortcode(raw: str) -> str | None:
    value = str(raw or "").strip()
    if not value or not _EMOJI_SHORTCODE.fullmatch(value):
        return None
    for language in ("alias", "en"):
        expanded = emoji_lib.emojize(value, language=language)
        if expanded != value:
            return expanded
    return None


def canonicalize(raw: str) -> str:
    """Return the canonical representation of a tag (kebab-case or emoji)."""

    raw_value = str(raw or "").strip()
    expanded = _expand_emoji_shortcode(raw_value)
    if expanded:
        emoji = _canonicalize_emoji_tag(expanded)
        if emoji:
            return emoji
    elif _EMOJI_SHORTCODE.fullmatch(raw_value):
        raise ValueError("Unknown emoji shortcode")

    emoji = _canonicalize_emoji_tag(raw_value)
    if emoji:
        return emoji

    value = raw_value.lower()
    if not value:
        raise ValueError("Empty tag")
    value = re.sub(r"[\s_]+", "-", value)
    value = _NON_TAG_CHARS.sub("", value)
    value = _MULTI_DASH.sub("-", value).strip("-")
    value = value[:MAX_TAG_LENGTH].strip("-")
    if not value:
        raise ValueError("Empty tag")
    return value


def canonicalize_all(values) -> frozenset[str]:
    """Canonicalise every tag in ``values``, skipping ones that are empty."""

    tags: set[str] = set()
    for raw in values or ():
        try:
            tags.add(canonicalize(raw))
        except ValueError:
            continue
    return frozenset(tags)


__all__ = ["canonicalize", "canonicalize_all", "MAX_TAG_LENGTH"]
