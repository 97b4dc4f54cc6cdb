"""Exceptions raised by the service layer."""

from typing import Any


class ServiceError(Exception):
    """Base exception for service errors."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class NotFoundError(ServiceError):
    """A referenced record does not exist."""

    status_code = 404

    def __init__(self, model: str, record_id: str):
        super().__init__(f"{model} {record_id} not found", details={"id": record_id})
        self.model = model
        self.record_id = record_id


class InvalidInputError(ServiceError):
    """Input failed validation."""

    pass
