from __future__ import annotations

import urllib.parse
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import requests
from pydantic import ValidationError

from jsonapi_resolver.config import ClientSettings
from jsonapi_resolver.errors import InvalidDocumentError
from jsonapi_resolver.logging_config import get_logger
from jsonapi_resolver.models.base import Document
from jsonapi_resolver.models.payloads import build_payload
from jsonapi_resolver.query import QueryParams, build_query_params, include_param
from jsonapi_resolver.resolver import resolve_document

logger = get_logger(__name__)

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


class JsonApiClient:
    """Thin ``requests`` wrapper that hands back resolved JSON:API documents."""

    def __init__(self, settings: ClientSettings | None = None, session: requests.Session | None = None) -> None:
        self.settings = settings or ClientSettings.load()
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": JSONAPI_MEDIA_TYPE, "Content-Type": JSONAPI_MEDIA_TYPE}
        if self.settings.token:
            headers["Authorization"] = f"Bearer {self.settings.token}"
        return headers

    def url(self, path: str) -> str:
        """Absolute URLs pass through; anything else hangs off the API root."""
        if path.startswith(("http://", "https://")):
            return path
        prefix = self.settings.api_prefix
        if prefix and path.startswith(f"{prefix}/"):
            return f"{self.settings.base_url}{path}"
        return f"{self.settings.api_root}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: QueryParams | Mapping[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        url = self.url(path)
        response = self.session.request(
            method,
            url,
            headers=self._headers(),
            params=params,
            json=body,
            timeout=self.settings.timeout_seconds,
        )
        try:
            response.raise_for_status()
        except requests.HTTPError:
            logger.warning("jsonapi_request_failed", method=method, url=url, status=response.status_code)
            raise
        if response.status_code == 204 or not response.content:
            return None
        try:
            payload = response.json()
        except ValueError as exc:
            raise InvalidDocumentError(f"{method} {url} returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise InvalidDocumentError(f"{method} {url} returned {type(payload).__name__}, expected an object")
        return payload

    def get_document(
        self,
        path: str,
        *,
        params: QueryParams | Mapping[str, Any] | None = None,
        resolve: bool = True,
    ) -> dict[str, Any]:
        """
        GET a document. With ``resolve`` the primary data comes back flattened
        and with relationships rehydrated from ``included``.
        """
        document = self._request("GET", path, params=params)
        if document is None or "data" not in document:
            raise InvalidDocumentError(f"GET {path} returned no primary data")
        return resolve_document(document) if resolve else document

    def list_page(
        self,
        collection: str,
        *,
        filters: Mapping[str, Any] | None = None,
        sort_by: str | None = None,
        sort_direction: str = "asc",
        page: int | None = None,
        page_size: int | None = None,
        include: str | Iterable[str] | None = None,
    ) -> dict[str, Any]:
        params = build_query_params(
            filters=filters,
            sort_by=sort_by,
            sort_direction=sort_direction,
            page=page,
            page_size=self.settings.default_page_size if page_size is None else page_size,
            include=include,
            max_page_size=self.settings.max_page_size,
        )
        return self.get_document(collection, params=params)

    def get(self, collection: str, resource_id: str, *, include: str | Iterable[str] | None = None) -> Any:
        joined = include_param(include)
        params = [("include", joined)] if joined else None
        return self.get_document(self._member_path(collection, resource_id), params=params)["data"]

    def iter_pages(
        self,
        collection: str,
        *,
        filters: Mapping[str, Any] | None = None,
        sort_by: str | None = None,
        sort_direction: str = "asc",
        page_size: int | None = None,
        include: str | Iterable[str] | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield one resolved document per page, following ``links.next``."""
        document = self.list_page(
            collection,
            filters=filters,
            sort_by=sort_by,
            sort_direction=sort_direction,
            page=1,
            page_size=page_size,
            include=include,
        )
        seen: set[str] = set()
        while True:
            yield document
            next_url = _next_link(document)
            if not next_url or next_url in seen:
                return
            seen.add(next_url)
            logger.debug("jsonapi_follow_next_page", collection=collection, url=next_url)
            document = self.get_document(next_url)

    def list_all(self, collection: str, **kwargs: Any) -> list[Any]:
        items: list[Any] = []
        for document in self.iter_pages(collection, **kwargs):
            data = document.get("data")
            if isinstance(data, list):
                items.extend(data)
            elif data is not None:
                items.append(data)
        return items

    def create(
        self,
        collection: str,
        attributes: dict[str, Any],
        relationships: dict[str, Any] | None = None,
        *,
        resource_type: str | None = None,
    ) -> Any:
        body = build_payload(resource_type or collection, attributes, relationships=relationships)
        return self._write("POST", collection, body)

    def update(
        self,
        collection: str,
        resource_id: str,
        attributes: dict[str, Any],
        relationships: dict[str, Any] | None = None,
        *,
        resource_type: str | None = None,
    ) -> Any:
        body = build_payload(resource_type or collection, attributes, resource_id, relationships)
        return self._write("PATCH", self._member_path(collection, resource_id), body)

    def delete(self, collection: str, resource_id: str) -> None:
        self._request("DELETE", self._member_path(collection, resource_id))

    def _write(self, method: str, path: str, body: dict[str, Any]) -> Any:
        document = self._request(method, path, body=body)
        if document is None:
            return None
        if "data" not in document:
            raise InvalidDocumentError(f"{method} {path} returned no primary data")
        return resolve_document(document)["data"]

    @staticmethod
    def _member_path(collection: str, resource_id: str) -> str:
        encoded_id = urllib.parse.quote(str(resource_id), safe="")  # URL-encode the ID
        return f"{collection.strip('/')}/{encoded_id}"


def _next_link(document: Mapping[str, Any]) -> str | None:
    links = document.get("links")
    if not isinstance(links, Mapping):
        return None
    try:
        return Document.model_validate({"links": links}).next_page_url()
    except ValidationError:
        logger.warning("jsonapi_links_invalid", links=sorted(links))
        return None
