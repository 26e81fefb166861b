"""Domain-specific exception hierarchy for the calculator suite."""

from __future__ import annotations

from typing import Any

__all__ = [
    "DomainError",
    "ValidationError",
    "ImportFormatError",
    "InvalidRangeError",
    "InvalidScaleError",
    "NotFoundError",
    "WorkspaceNotFoundError",
    "ConflictError",
    "ScaleTooSmallError",
    "SchemaMismatchError",
    "ExportError",
    "HelpAssistantError",
]


class DomainError(Exception):
    """Base class for recoverable domain-level errors."""

    status_code: int = 400
    error_code: str = "domain_error"
    default_message: str = "Domain error"

    def __init__(
        self,
        message: str | None = None,
        *,
        detail: Any | None = None,
        status_code: int | None = None,
    ) -> None:
        final_message = message or self.default_message
        super().__init__(final_message)
        self.message = final_message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DomainError, ValueError):
    """Raised when a tool configuration is malformed beyond coercion."""

    error_code = "validation_error"
    default_message = "Invalid input"


class ImportFormatError(ValidationError):
    """Raised when an imported table is empty or cannot be parsed."""

    error_code = "import_format_error"
    default_message = "The file could not be read as a table"


class InvalidRangeError(DomainError, ValueError):
    """Raised when a Cronbach subset covers fewer than two items."""

    error_code = "invalid_range"
    status_code = 422
    default_message = "Invalid range: at least two items are required"


class InvalidScaleError(DomainError, ValueError):
    """Raised when a rating scale has no spread between min and max."""

    error_code = "invalid_scale"
    status_code = 422
    default_message = "The rating scale needs distinct minimum and maximum values"


class NotFoundError(DomainError):
    """Base class for missing resources."""

    error_code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class WorkspaceNotFoundError(NotFoundError):
    error_code = "workspace_not_found"
    default_message = "Workspace not found"


class ConflictError(DomainError):
    """Base class for state conflicts."""

    error_code = "conflict"
    status_code = 409
    default_message = "State conflict"


class ScaleTooSmallError(ConflictError):
    """Raised when removing an option would leave fewer than two."""

    error_code = "scale_too_small"
    default_message = "A rating scale needs at least two options"


class SchemaMismatchError(ConflictError):
    """Raised when imported data does not match the declared structure.

    ``detail`` carries ``detected_columns`` and ``expected_columns`` so the
    caller can ask the user to confirm a truncating/padding load.
    """

    error_code = "schema_mismatch"
    default_message = "The file columns do not match the survey structure"

    def __init__(self, detected_columns: int, expected_columns: int) -> None:
        super().__init__(
            detail={
                "detected_columns": detected_columns,
                "expected_columns": expected_columns,
            }
        )
        self.detected_columns = detected_columns
        self.expected_columns = expected_columns


class ExportError(DomainError):
    """Raised when an export collaborator fails to produce its output."""

    error_code = "export_failed"
    status_code = 500
    default_message = "Export failed"


class HelpAssistantError(DomainError):
    """Raised by the model-backed help client; always downgraded to FAQ answers."""

    error_code = "help_assistant_unavailable"
    status_code = 503
    default_message = "Help assistant unavailable"
