"""Domain errors raised by the services and mapped to HTTP responses."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from fastapi import status


class InventoryError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"error": self.message}


class ValidationError(InventoryError):
    def __init__(self, fields: Mapping[str, str], message: Optional[str] = None):
        self.fields = dict(fields)
        if message is None:
            message = "; ".join(self.fields.values()) or "Invalid input"
        super().__init__(message)

    def to_payload(self) -> dict:
        return {"error": self.message, "fields": self.fields}


class NotFoundError(InventoryError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(InventoryError):
    status_code = status.HTTP_409_CONFLICT


class MalformedInputError(InventoryError):
    pass


class SchemaMismatchError(InventoryError):
    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__("Missing required headers: {}".format(", ".join(self.missing)))

    def to_payload(self) -> dict:
        return {"error": self.message, "missingColumns": self.missing}


class NoValidRowsError(InventoryError):
    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors)
        super().__init__("No products were uploaded. Please check your CSV format.")

    def to_payload(self) -> dict:
        return {"error": self.message, "details": self.errors}


class UnauthenticatedError(InventoryError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class StorageFailureError(InventoryError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


__all__ = [
    "ConflictError",
    "InventoryError",
    "MalformedInputError",
    "NoValidRowsError",
    "NotFoundError",
    "SchemaMismatchError",
    "StorageFailureError",
    "UnauthenticatedError",
    "ValidationError",
]
