from __future__ import annotations
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class LinkObject(BaseModel):
    href: str
    meta: dict[str, Any] | None = None


class Links(BaseModel):
    """Links member of a document, resource or relationship.

    Each link may be a bare URL or a ``{"href": ..., "meta": ...}`` object.
    """
    model_config = ConfigDict(extra="allow")
    self: str | LinkObject | None = None
    related: str | LinkObject | None = None
    first: str | LinkObject | None = None
    last: str | LinkObject | None = None
    prev: str | LinkObject | None = None
    next: str | LinkObject | None = None

    def href(self, name: str) -> str | None:
        """Return the URL behind link ``name`` whatever form it was sent in."""
        if name in type(self).model_fields:
            link = getattr(self, name)
        else:
            link = (self.model_extra or {}).get(name)
        if isinstance(link, LinkObject):
            return link.href
        if isinstance(link, dict):
            return link.get("href")
        return link


class ResourceIdentifier(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)
    type: str
    id: str
    meta: Optional[dict[str, Any]] = None


class Relationship(BaseModel):
    """Minimal JSON:API relationship object."""
    links: Optional[Links] = None
    data: Optional[ResourceIdentifier | list[ResourceIdentifier]] = None
    meta: Optional[dict[str, Any]] = None


class Resource(BaseModel):
    """
    Generic JSON:API resource.
    Attributes stay an open mapping; inventory schemas vary per endpoint.
    """
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)   # for unknown fields
    type: str
    id: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    links: Links | None = None
    relationships: dict[str, Relationship] | None = None
    meta: dict[str, Any] | None = None

class Document(BaseModel):
    model_config = ConfigDict(extra="allow")
    jsonapi: dict[str, Any] | None = None
    data: Resource | list[Resource] | None = None
    included: list[Resource] = Field(default_factory=list)
    meta: dict[str, Any] | None = None
    links: Links | None = None

    def next_page_url(self) -> str | None:
        return self.links.href("next") if self.links else None
