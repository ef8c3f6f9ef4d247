"""Embed payload schemas."""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)


class EmbedField(BaseModel):
    """A single name/value row of an embed."""

    # Unknown keys are dropped so they are never forwarded downstream.
    model_config = ConfigDict(extra="ignore")

    name: StrictStr
    value: StrictStr
    inline: StrictBool | None = None

    @field_validator("inline", mode="before")
    @classmethod
    def reject_null_inline(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("inline must be a boolean when present")
        return value


class Embed(BaseModel):
    """The one embed a notification is allowed to carry."""

    model_config = ConfigDict(extra="ignore")

    title: StrictStr = Field(..., min_length=1)
    description: StrictStr = Field(..., min_length=1)
    color: StrictInt | None = None
    fields: list[EmbedField]

    @field_validator("color", mode="before")
    @classmethod
    def reject_null_color(cls, value: Any) -> Any:
        """Treat an explicit null as a present, non-integer color."""
        if value is None:
            raise ValueError("color must be an integer when present")
        return value

    def to_webhook_payload(self) -> dict[str, Any]:
        """Return the JSON body forwarded to the notification channel."""
        return {"embeds": [self.model_dump(exclude_none=True)]}
