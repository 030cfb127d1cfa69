from __future__ import annotations
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorSource(BaseModel):
    pointer: str | None = None
    parameter: str | None = None
    header: str | None = None


class ErrorObject(BaseModel):
    """Single entry of an ``errors`` array. Every member is optional."""
    model_config = ConfigDict(extra="allow")
    id: str | None = None
    status: str | None = None
    code: str | None = None
    title: str | None = None
    detail: str | None = None
    source: ErrorSource | None = None
    meta: dict[str, Any] | None = None

    @field_validator("status", "code", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        # some backends send numeric statuses
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ErrorDocument(BaseModel):
    model_config = ConfigDict(extra="allow")
    errors: list[ErrorObject] = Field(default_factory=list)
    meta: dict[str, Any] | None = None
