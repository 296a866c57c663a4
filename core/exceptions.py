import logging
from typing import Any, Dict, Optional

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Base exception for business-rule and storage errors of the inventory system."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"
    default_message = "Request could not be processed."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_payload(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}

    def as_response(self) -> Response:
        return Response(self.as_payload(), status=self.status_code)


class NotFound(InventoryError):
    """Raised when an item, project, supplier or transaction does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found."


class InvalidInput(InventoryError):
    """Raised when a request violates type or range constraints."""

    code = "invalid_input"
    default_message = "Invalid input."


class InvalidState(InventoryError):
    """Raised when a stock adjustment would leave a counter negative."""

    code = "invalid_state"
    default_message = "Stock cannot become negative."


class InsufficientStock(InventoryError):
    """Raised when an out movement asks for more than the item holds."""

    code = "insufficient_stock"
    default_message = "Insufficient stock available"

    def __init__(self, available: int, requested: int, message: Optional[str] = None) -> None:
        self.available = available
        self.requested = requested
        super().__init__(message)

    def as_payload(self) -> Dict[str, Any]:
        payload = super().as_payload()
        payload["available"] = self.available
        payload["requested"] = self.requested
        return payload


class HasDependents(InventoryError):
    """Raised when a delete is blocked by rows that still reference the target."""

    code = "has_dependents"
    default_message = "Cannot delete a record that is still referenced."

    def __init__(self, message: Optional[str] = None, dependents: int = 0) -> None:
        self.dependents = dependents
        super().__init__(message)

    def as_payload(self) -> Dict[str, Any]:
        payload = super().as_payload()
        payload["dependents"] = self.dependents
        return payload


class StorageFailure(InventoryError):
    """Raised when the database fails while a request is being handled."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "storage_failure"
    default_message = "Server error"


def api_exception_handler(exc, context):
    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception("Storage failure in %s", view.__class__.__name__ if view else "unknown view")
        exc = StorageFailure()
    if isinstance(exc, InventoryError):
        return exc.as_response()
    return exception_handler(exc, context)
