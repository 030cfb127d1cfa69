"""Rehydrate JSON:API relationship references from a document's ``included`` pool.

The functions here work on plain decoded JSON (``dict``/``list``) and never
raise on malformed input: a relationship whose target was not side-loaded
degrades to the bare ``{"type", "id"}`` identifier (``resolve``), to ``None``
(``get_related``) or is left out (``get_related_list``).
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from jsonapi_resolver.logging_config import get_logger

logger = get_logger(__name__)

ResourceKey = tuple[Any, Any]

IDENTIFIER_KEYS = frozenset({"type", "id", "meta"})


class MissingPolicy(str, Enum):
    """Replacement for a relationship target absent from ``included``."""

    KEEP_IDENTIFIER = "keep_identifier"
    NULL = "null"
    DROP = "drop"


_DROPPED = object()


def is_resource(value: Any) -> bool:
    return isinstance(value, Mapping) and "type" in value and "id" in value


def is_identifier_only(value: Any) -> bool:
    """True for an unresolved reference, i.e. nothing beyond ``type``/``id``/``meta``."""
    return is_resource(value) and set(value).issubset(IDENTIFIER_KEYS)


def resource_key(value: Any) -> ResourceKey | None:
    if not is_resource(value):
        return None
    key = (value["type"], value["id"])
    try:
        hash(key)
    except TypeError:
        return None
    return key


def index_included(included: Iterable[Any] | None) -> dict[ResourceKey, Mapping[str, Any]]:
    """Map ``(type, id)`` to the side-loaded resource; the first duplicate wins."""
    index: dict[ResourceKey, Mapping[str, Any]] = {}
    for candidate in included or ():
        key = resource_key(candidate)
        if key is not None:
            index.setdefault(key, candidate)
    return index


class _Resolution:
    """State for one top-level call: lookup table plus the resources on the current path."""

    def __init__(self, included: Any, on_missing: MissingPolicy) -> None:
        pool = included if isinstance(included, (list, tuple)) else []
        self.has_included = bool(pool)
        self.index = index_included(pool)
        self.on_missing = MissingPolicy(on_missing)
        self.path: set[ResourceKey] = set()

    def value(self, data: Any) -> Any:
        if data is None:
            return None
        if isinstance(data, (list, tuple)):
            return [self.value(item) for item in data]
        if is_resource(data):
            return self.resource(data)
        return data

    def resource(self, resource: Mapping[str, Any]) -> dict[str, Any]:
        attributes = resource.get("attributes")
        result: dict[str, Any] = {"id": resource["id"], "type": resource["type"]}
        if isinstance(attributes, Mapping):
            result.update(attributes)
        result["attributes"] = attributes if attributes is not None else {}

        relationships = resource.get("relationships")
        if not relationships or not isinstance(relationships, Mapping) or not self.has_included:
            return result

        key = resource_key(resource)
        entered = key is not None and key not in self.path
        if entered:
            self.path.add(key)
        try:
            for name, relationship in relationships.items():
                if not isinstance(relationship, Mapping):
                    continue
                linkage = relationship.get("data")
                if isinstance(linkage, (list, tuple)):
                    linked = [self.link(name, identifier) for identifier in linkage]
                    result[name] = [item for item in linked if item is not _DROPPED]
                elif isinstance(linkage, Mapping):
                    linked = self.link(name, linkage)
                    if linked is not _DROPPED:
                        result[name] = linked
        finally:
            if entered:
                self.path.discard(key)
        return result

    def find(self, identifier: Any) -> tuple[ResourceKey | None, Mapping[str, Any] | None]:
        key = resource_key(identifier)
        if key is None:
            return None, None
        return key, self.index.get(key)

    def link(self, name: str, identifier: Any) -> Any:
        key, target = self.find(identifier)
        if target is None:
            logger.debug(
                "jsonapi_relationship_unresolved",
                relationship=name,
                target=key,
                policy=self.on_missing.value,
            )
            if self.on_missing is MissingPolicy.NULL:
                return None
            if self.on_missing is MissingPolicy.DROP:
                return _DROPPED
            return identifier
        if key in self.path:
            logger.debug("jsonapi_relationship_cycle", relationship=name, target=key)
            return identifier
        return self.resource(target)

    def related(self, owner: Mapping[str, Any], identifier: Any) -> dict[str, Any] | None:
        key, target = self.find(identifier)
        if target is None:
            return None
        owner_key = resource_key(owner)
        if owner_key is not None and owner_key != key:
            self.path.add(owner_key)
        return self.resource(target)


def resolve(
    data: Any,
    included: Any = None,
    *,
    on_missing: MissingPolicy = MissingPolicy.KEEP_IDENTIFIER,
) -> Any:
    """Flatten ``data`` and replace relationship identifiers with included resources.

    ``data`` may be a resource, a list of them, ``None`` or any other value;
    values that are not resource-shaped come back unchanged. Each resolved
    resource becomes ``{"id", "type", **attributes, "attributes": attributes}``
    plus one key per relationship when ``included`` is non-empty. A reference
    back to a resource already being resolved is left as its identifier.
    """
    return _Resolution(included, on_missing).value(data)


def resolve_document(
    document: Any,
    *,
    on_missing: MissingPolicy = MissingPolicy.KEEP_IDENTIFIER,
) -> Any:
    """Return a copy of ``document`` whose ``data`` has been resolved.

    ``meta``, ``links``, ``included`` and any other top-level member are
    carried over as-is. Documents without ``data`` are returned untouched.
    """
    if not isinstance(document, Mapping) or "data" not in document:
        return document
    resolved = dict(document)
    resolved["data"] = resolve(document["data"], document.get("included"), on_missing=on_missing)
    return resolved


def _linkage(resource: Any, relationship_name: str) -> Any:
    if not isinstance(resource, Mapping):
        return None
    relationships = resource.get("relationships")
    if not isinstance(relationships, Mapping):
        return None
    relationship = relationships.get(relationship_name)
    if not isinstance(relationship, Mapping):
        return None
    return relationship.get("data")


def get_related(resource: Any, relationship_name: str, included: Any = None) -> dict[str, Any] | None:
    """Return the single object behind ``relationship_name``, or ``None``.

    A to-many relationship is reduced to its first identifier; use
    ``get_related_list`` for all of them.
    """
    linkage = _linkage(resource, relationship_name)
    if not linkage or not included:
        return None
    identifier = linkage[0] if isinstance(linkage, (list, tuple)) else linkage
    return _Resolution(included, MissingPolicy.KEEP_IDENTIFIER).related(resource, identifier)


def get_related_list(resource: Any, relationship_name: str, included: Any = None) -> list[dict[str, Any]]:
    """Return every resolved object behind ``relationship_name``; unmatched ones are skipped."""
    linkage = _linkage(resource, relationship_name)
    if not isinstance(linkage, (list, tuple)):
        related = get_related(resource, relationship_name, included)
        return [related] if related is not None else []
    if not included:
        return []
    resolution = _Resolution(included, MissingPolicy.KEEP_IDENTIFIER)
    found = (resolution.related(resource, identifier) for identifier in linkage)
    return [item for item in found if item is not None]
