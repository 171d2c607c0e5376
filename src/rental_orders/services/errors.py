"""Custom service layer errors."""

from __future__ import annotations

from typing import Iterable


class ServiceError(Exception):
    """Base error for service-layer failures."""


class ValidationError(ServiceError):
    """Raised when a business rule validation fails."""


class DraftValidationError(ValidationError):
    """Raised when an order draft is not ready for submission."""

    def __init__(self, issues: Iterable[object]) -> None:
        self.issues = list(issues)
        messages = [getattr(issue, "message", str(issue)) for issue in self.issues]
        super().__init__(" ".join(messages) or "Order draft is invalid.")


class NotFoundError(ServiceError):
    """Raised when an entity is not found."""
