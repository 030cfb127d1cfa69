"""Turn failed API calls into messages a form or toast can show.

Accepts ``requests`` exceptions, already decoded error documents
(``{"errors": [...]}``) or any other exception.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

import requests
from pydantic import BaseModel, ValidationError

from jsonapi_resolver.logging_config import get_logger
from jsonapi_resolver.models.errors import ErrorDocument

logger = get_logger(__name__)

ATTRIBUTE_POINTER_PREFIX = "/data/attributes/"

UNKNOWN_ERROR = "UNKNOWN_ERROR"
NETWORK_ERROR = "NETWORK_ERROR"

UNKNOWN_MESSAGE = "Unknown error"
UNEXPECTED_MESSAGE = "An unexpected error occurred"
CONNECTION_MESSAGE = "Connection error. Check your internet connection."
OFFLINE_MESSAGE = "No internet connection. Check your connection."
FORBIDDEN_MESSAGE = "You do not have permission to perform this action."
VALIDATION_MESSAGE = "Please correct the errors in the form."
RELATIONSHIP_MESSAGE = "This record cannot be deleted because other records are related to it."

RELATIONSHIP_KEYWORDS = (
    "foreign key",
    "constraint",
    "referenced",
    "products",
    "relación",
    "asociado",
    "vinculado",
)
# backend messages come in English or Spanish
PRODUCT_WORDS = ("product", "producto")
ENTITY_WORDS = {
    "category": ("category", "categoría"),
    "brand": ("brand", "marca"),
    "unit": ("unit", "unidad"),
}
COUNT_PATTERN = re.compile(r"(\d+)\s*(product|producto|item|registro|record)")


class InvalidDocumentError(ValueError):
    """A successful response whose body is not a usable JSON:API document."""


class ParsedError(BaseModel):
    message: str
    field: str | None = None
    code: str | None = None


class ErrorKind(str, Enum):
    RELATIONSHIP = "relationship"
    VALIDATION = "validation"
    NETWORK = "network"
    AUTH = "auth"
    UNKNOWN = "unknown"


class RelationshipErrorDetails(BaseModel):
    has_details: bool = False
    affected_entity: str | None = None
    count: int | None = None
    suggestion: str | None = None


class ErrorSummary(BaseModel):
    message: str
    kind: ErrorKind
    can_retry: bool
    has_actions: bool = False
    relationship_details: RelationshipErrorDetails | None = None


def _response(error: Any) -> requests.Response | None:
    return getattr(error, "response", None) if isinstance(error, requests.RequestException) else None


def _status(error: Any) -> int | None:
    response = _response(error)
    return response.status_code if response is not None else None


def _error_body(error: Any) -> Any:
    if isinstance(error, Mapping):
        return error
    response = _response(error)
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _error_objects(body: Any) -> list[ParsedError]:
    if not isinstance(body, Mapping) or not body.get("errors"):
        return []
    try:
        document = ErrorDocument.model_validate(body)
    except ValidationError as exc:
        logger.warning("jsonapi_error_document_invalid", error_count=exc.error_count())
        return [ParsedError(message=UNKNOWN_MESSAGE, code=UNKNOWN_ERROR)]

    parsed = []
    for item in document.errors:
        pointer = item.source.pointer if item.source else None
        parsed.append(
            ParsedError(
                message=item.detail or item.title or UNKNOWN_MESSAGE,
                field=pointer.replace(ATTRIBUTE_POINTER_PREFIX, "", 1) if pointer else None,
                code=item.status,
            )
        )
    return parsed


def parse_errors(error: Any) -> list[ParsedError]:
    if isinstance(error, Mapping) or _response(error) is not None:
        return _error_objects(_error_body(error))
    if isinstance(error, requests.RequestException):
        return [ParsedError(message=CONNECTION_MESSAGE, code=NETWORK_ERROR)]
    if isinstance(error, BaseException):
        return [ParsedError(message=str(error) or UNEXPECTED_MESSAGE, code=UNKNOWN_ERROR)]
    return [ParsedError(message=UNEXPECTED_MESSAGE, code=UNKNOWN_ERROR)]


def first_error_message(error: Any) -> str:
    parsed = parse_errors(error)
    return parsed[0].message if parsed else UNKNOWN_MESSAGE


def field_errors(error: Any) -> dict[str, str]:
    """Map attribute name to message; later errors for a field win."""
    return {item.field: item.message for item in parse_errors(error) if item.field}


def is_network_error(error: Any) -> bool:
    return isinstance(error, requests.RequestException) and _response(error) is None


def is_auth_error(error: Any) -> bool:
    return _status(error) in (401, 403)


def is_validation_error(error: Any) -> bool:
    if _status(error) == 422:
        return True
    return any(item.code == "422" for item in parse_errors(error))


def _mentions(message: str, words: tuple[str, ...]) -> bool:
    return any(word in message for word in words)


def is_relationship_error(error: Any) -> bool:
    """409/422 whose messages talk about foreign keys or constraints."""
    if _status(error) not in (409, 422):
        return False
    for item in parse_errors(error):
        message = item.message.lower()
        if _mentions(message, RELATIONSHIP_KEYWORDS):
            return True
    return False


def relationship_error_message(error: Any) -> str:
    for item in parse_errors(error):
        message = item.message.lower()
        if _mentions(message, PRODUCT_WORDS):
            for entity, words in ENTITY_WORDS.items():
                if _mentions(message, words):
                    return (
                        f"The {entity} cannot be deleted because products are assigned to it. "
                        f"Delete the products or move them to another {entity} first."
                    )
        if _mentions(message, ("cannot delete", "no se puede eliminar")):
            return "The record cannot be deleted because other records depend on it."
        if _mentions(message, ("integrity constraint", "violación de integridad")):
            return "Deleting this record would break data integrity. Remove the dependent records first."
        if _mentions(message, ("referenced", "referenciado")):
            return "This record is referenced by other records. Remove those references first."
        if _mentions(message, ("foreign key", "constraint", "clave foránea")):
            return "This record is in use by other records. Remove the references before continuing."
    return RELATIONSHIP_MESSAGE


def relationship_error_details(error: Any) -> RelationshipErrorDetails:
    for item in parse_errors(error):
        message = item.message.lower()
        match = COUNT_PATTERN.search(message)
        if match:
            count = int(match.group(1))
            noun = "related record" if count == 1 else "related records"
            return RelationshipErrorDetails(
                has_details=True,
                count=count,
                suggestion=f"There {'is' if count == 1 else 'are'} {count} {noun}. Review them before deleting.",
            )
        for entity, words in ENTITY_WORDS.items():
            if _mentions(message, words):
                return RelationshipErrorDetails(
                    has_details=True,
                    affected_entity="products",
                    suggestion=f"Reassign the products to another {entity} first.",
                )
    return RelationshipErrorDetails()


def error_message(error: Any) -> str:
    if is_network_error(error):
        return OFFLINE_MESSAGE
    if is_auth_error(error):
        return FORBIDDEN_MESSAGE
    if is_validation_error(error):
        return VALIDATION_MESSAGE
    if is_relationship_error(error):
        return relationship_error_message(error)
    return first_error_message(error)


def describe_error(error: Any) -> ErrorSummary:
    message = error_message(error)
    if is_relationship_error(error):
        details = relationship_error_details(error)
        return ErrorSummary(
            message=message,
            kind=ErrorKind.RELATIONSHIP,
            can_retry=False,
            has_actions=details.has_details,
            relationship_details=details,
        )
    if is_network_error(error):
        return ErrorSummary(message=message, kind=ErrorKind.NETWORK, can_retry=True)
    if is_validation_error(error):
        return ErrorSummary(message=message, kind=ErrorKind.VALIDATION, can_retry=True)
    if is_auth_error(error):
        return ErrorSummary(message=message, kind=ErrorKind.AUTH, can_retry=False)
    return ErrorSummary(message=message, kind=ErrorKind.UNKNOWN, can_retry=True)
