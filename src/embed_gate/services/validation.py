"""Structural and content validation of inbound webhook payloads.

Validation never raises: every payload maps to a `ValidationResult` that is
either a parsed `Embed` or a short, user-facing rejection reason.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from embed_gate.core.policy import GatePolicy
from embed_gate.schemas.embed import Embed, EmbedField

INVALID_EMBEDS = "Invalid embeds array"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one payload."""

    embed: Embed | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.embed is not None

    @classmethod
    def success(cls, embed: Embed) -> ValidationResult:
        return cls(embed=embed)

    @classmethod
    def failure(cls, reason: str) -> ValidationResult:
        return cls(reason=reason)


def find_blacklisted(field: EmbedField, blacklist: tuple[str, ...]) -> str | None:
    """Return the first blacklisted word found in a field's name or value."""
    name = field.name.lower()
    value = field.value.lower()
    for word in blacklist:
        if word in name or word in value:
            return word
    return None


def validate_embed(embed: Embed, policy: GatePolicy) -> ValidationResult:
    """Apply the allow-lists and blacklist to a structurally valid embed."""
    if len(embed.fields) < policy.min_embed_fields:
        return ValidationResult.failure(INVALID_EMBEDS)

    if embed.color is not None and embed.color not in policy.allowed_colors:
        return ValidationResult.failure(f"Invalid embed color: {embed.color}")

    for field in embed.fields:
        if field.name not in policy.allowed_field_names:
            return ValidationResult.failure(f"Invalid field: {field.name}")
        word = find_blacklisted(field, policy.blacklist)
        if word is not None:
            return ValidationResult.failure(f"Blacklisted word detected: {word}")

    return ValidationResult.success(embed)


def validate_payload(payload: Any, policy: GatePolicy) -> ValidationResult:
    """Validate a decoded JSON body of the form ``{"embeds": [embed, ...]}``.

    Only the first embed is inspected; it is also the only one forwarded.
    Checks run in a fixed order (title, description, field count, color, then
    each field in turn) and the first failing one names the rejection.
    """
    if not isinstance(payload, Mapping):
        return ValidationResult.failure(INVALID_EMBEDS)

    embeds = payload.get("embeds")
    if not isinstance(embeds, list) or not embeds or not isinstance(embeds[0], Mapping):
        return ValidationResult.failure(INVALID_EMBEDS)

    raw = embeds[0]
    try:
        embed = Embed.model_validate(raw)
    except ValidationError as exc:
        return ValidationResult.failure(_describe_error(raw, exc, policy))

    return validate_embed(embed, policy)


def _describe_error(raw: Mapping[str, Any], exc: ValidationError, policy: GatePolicy) -> str:
    locs = [error["loc"] for error in exc.errors()]
    if any(not loc or loc[0] in ("title", "description") or loc == ("fields",) for loc in locs):
        return INVALID_EMBEDS

    raw_fields = raw.get("fields")
    if not isinstance(raw_fields, list) or len(raw_fields) < policy.min_embed_fields:
        return INVALID_EMBEDS

    if any(loc[0] == "color" for loc in locs):
        return f"Invalid embed color: {raw.get('color')}"

    failing = {loc[1]: loc[2:] for loc in reversed(locs) if loc[0] == "fields" and len(loc) >= 2}
    for index in range(len(raw_fields)):
        name = _raw_field_name(raw, index)
        if not isinstance(name, str) or name not in policy.allowed_field_names:
            return f"Invalid field: {name}"
        if index in failing:
            if failing[index][:1] == ("inline",):
                return f"Invalid inline value in: {name}"
            return f"Invalid field: {name}"
        # Fields before the first broken one are complete and can be screened.
        word = find_blacklisted(EmbedField.model_validate(raw_fields[index]), policy.blacklist)
        if word is not None:
            return f"Blacklisted word detected: {word}"
    return INVALID_EMBEDS


def _raw_field_name(raw: Mapping[str, Any], index: int) -> Any:
    try:
        return raw["fields"][index].get("name")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
