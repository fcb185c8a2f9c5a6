from __future__ import annotations

from typing import Iterable, Optional


class SocialError(Exception):
    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class BadRequestError(SocialError):
    status_code = 400


class UnauthorizedError(SocialError):
    status_code = 401


class NotFoundError(SocialError):
    status_code = 404


class ConflictError(SocialError):
    status_code = 409


class StorageError(SocialError):
    status_code = 500


class MissingFieldsError(BadRequestError):
    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(
            "Missing required fields",
            detail=f"Required: {', '.join(self.fields)}",
        )


class InvalidIdError(BadRequestError):
    def __init__(self, entity: str, value: str):
        super().__init__(f"Invalid {entity} ID format", detail=f"Got: {value!r}")
        self.entity = entity
        self.value = value


class EntityNotFoundError(NotFoundError):
    def __init__(self, entity: str, entity_id: Optional[str] = None):
        super().__init__(f"{entity} not found", detail=f"id={entity_id}" if entity_id else None)
        self.entity = entity
        self.entity_id = entity_id


class RepositoryError(StorageError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Storage error during {operation}", detail=reason)
        self.operation = operation
        self.reason = reason


class DuplicateEmailError(ConflictError):
    def __init__(self, email: Optional[str] = None, detail: Optional[str] = None):
        super().__init__("Email already registered", detail=detail)
        self.email = email
