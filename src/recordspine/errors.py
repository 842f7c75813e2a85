"""
Structured error types for recordspine.

Every failure a record model can report maps onto one of four kinds, each
with a different contract for the caller:

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                      RecordSpineError                           │
        │                 (category, context, cause)                      │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                 │
        │  InvalidArgumentError   RecordValidationError   ConfigurationError │
        │  (ARGUMENT)             (VALIDATION)            (CONFIG)        │
        │  raised, no storage     returned as Err,        raised, table   │
        │  interaction            write returns False     misconfigured   │
        │                                                                 │
        │  StorageError                                                   │
        │  (STORAGE)                                                      │
        │  raised by the storage collaborator, cause chained              │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> err = InvalidArgumentError("limit must be a non-negative integer")
    >>> err.category
    <ErrorCategory.ARGUMENT: 'ARGUMENT'>

    >>> err = RecordValidationError({"email": ["email is required"]})
    >>> err.errors["email"]
    ['email is required']

Guardrails:
    ❌ DON'T: Raise RecordValidationError out of insert()/update()
    ✅ DO: Return False and keep the error map on the model (``model.errors``)

    ❌ DON'T: Swallow the driver exception behind StorageError
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, recordspine
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    ARGUMENT = "ARGUMENT"         # Malformed filter/order/limit/id arguments
    VALIDATION = "VALIDATION"     # Field-level rule violations
    CONFIG = "CONFIG"             # Table, hook or schema misconfiguration
    STORAGE = "STORAGE"           # Driver / database failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


class RecordSpineError(Exception):
    """
    Base exception for all recordspine errors.

    Carries a category, a free-form context mapping (table, method, field...)
    and the underlying cause when one exists. Subclasses set
    ``default_category``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RecordSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigurationError("No columns").with_context(table="users")
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class InvalidArgumentError(RecordSpineError, ValueError):
    """Malformed filter, order, limit or identifier argument.

    Raised synchronously, before any storage interaction.
    """

    default_category = ErrorCategory.ARGUMENT


class RecordValidationError(RecordSpineError):
    """Field-level validation failure.

    ``errors`` maps each failing field to one or more human-readable messages.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        errors: dict[str, list[str]],
        message: str = "Record failed validation",
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.errors = errors

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errors"] = self.errors
        return result


class ConfigurationError(RecordSpineError):
    """The model, its table or its hooks are misconfigured. Never transient."""

    default_category = ErrorCategory.CONFIG


class StorageError(RecordSpineError):
    """The storage collaborator failed to execute a statement."""

    default_category = ErrorCategory.STORAGE

    def __init__(self, message: str, *, sql: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.sql = sql

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.sql:
            result["sql"] = self.sql
        return result


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, RecordSpineError):
        return error.category
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.ARGUMENT
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "RecordSpineError",
    "InvalidArgumentError",
    "RecordValidationError",
    "ConfigurationError",
    "StorageError",
    "categorize_error",
]
