from __future__ import annotations
from typing import Any, Optional
from pydantic import BaseModel
from jsonapi_resolver.models.base import ResourceIdentifier


class RelationshipPayload(BaseModel):
    data: Optional[ResourceIdentifier | list[ResourceIdentifier]] = None

    def linkage(self) -> dict[str, str] | list[dict[str, str]] | None:
        if self.data is None:
            return None
        if isinstance(self.data, list):
            return [{"type": ref.type, "id": ref.id} for ref in self.data]
        return {"type": self.data.type, "id": self.data.id}


class ResourcePayload(BaseModel):
    type: str
    id: str | None = None
    attributes: dict[str, Any]
    relationships: dict[str, RelationshipPayload] | None = None


def build_payload(
    resource_type: str,
    attributes: dict[str, Any],
    resource_id: str | None = None,
    relationships: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Wrap form values into a ``{"data": {...}}`` request body.

    Attributes set to ``None`` are left out so partial updates do not blank
    fields on the server. ``relationships`` maps a name to an identifier,
    a list of identifiers, or ``None`` to clear a to-one link.
    """
    payload = ResourcePayload(
        type=resource_type,
        id=resource_id,
        attributes={key: value for key, value in attributes.items() if value is not None},
        relationships=(
            {name: RelationshipPayload(data=linkage) for name, linkage in relationships.items()}
            if relationships
            else None
        ),
    )
    data: dict[str, Any] = {"type": payload.type}
    if payload.id is not None:
        data["id"] = payload.id
    data["attributes"] = payload.attributes
    if payload.relationships:
        data["relationships"] = {
            name: {"data": rel.linkage()} for name, rel in payload.relationships.items()
        }
    return {"data": data}
