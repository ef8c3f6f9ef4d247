"""Content normalization used for duplicate fingerprints."""

from __future__ import annotations

import re

from embed_gate.schemas.embed import Embed

PART_SEPARATOR = "|"

_WHITESPACE_RE = re.compile(r"\s+")
# Latin and Cyrillic letters, digits and whitespace survive; everything else
# (punctuation, emoji, the part separator) is dropped.
_DISALLOWED_RE = re.compile(r"[^a-z0-9а-яё\s]")


def normalize_text(text: str) -> str:
    """Canonicalize free text into its comparable form.

    Lowercases, collapses whitespace runs to one space, trims, then strips
    every character that is not a letter, digit or whitespace. The steps run
    in that order, so punctuation between two spaces leaves a double space.
    """
    lowered = text.lower()
    collapsed = _WHITESPACE_RE.sub(" ", lowered).strip()
    return _DISALLOWED_RE.sub("", collapsed)


def embed_parts(embed: Embed) -> list[str]:
    """Return the meaningful text of an embed in canonical order."""
    parts = [embed.title, embed.description]
    if embed.color:
        parts.append(str(embed.color))
    for field in embed.fields:
        parts.append(field.name)
        parts.append(field.value)
    return parts


def normalize_embed(embed: Embed) -> str:
    """Normalize an embed so trivially obfuscated copies compare equal."""
    return normalize_text(PART_SEPARATOR.join(embed_parts(embed)))
