"""
Error taxonomy for the combat engine.

Every failure that aborts an action is raised as a CombatError subclass. The
exception carries a kind tag, a reason string, and a context mapping, and can
be turned into the structured failure shape returned to API callers.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError


class ErrorKind(Enum):
    """Enumeration of the failure kinds an action can end with."""

    NOT_FOUND = "not_found"
    TENANCY_VIOLATION = "tenancy_violation"
    INSUFFICIENT_RESOURCE = "insufficient_resource"
    VALIDATION_FAILURE = "validation_failure"
    PERSISTENCE_FAILURE = "persistence_failure"


class CombatError(Exception):
    """Base class for all errors raised by the combat engine."""

    kind: ErrorKind = ErrorKind.PERSISTENCE_FAILURE

    def __init__(self, reason: str, context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(reason)
        self.reason: str = reason
        self.context: dict[str, Any] = context or {}

    def to_dict(self) -> dict[str, Any]:
        """
        Returns the structured failure shape handed back to callers.

        Returns:
            dict[str, Any]: The error kind, reason and context.

        """
        return {
            "error": self.kind.value,
            "reason": self.reason,
            "context": dict(self.context),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.reason!r})"


class NotFoundError(CombatError):
    """Raised when a shot, actor or relationship cannot be found."""

    kind = ErrorKind.NOT_FOUND


class TenancyViolationError(CombatError):
    """Raised when a shot does not belong to the fight being acted on."""

    kind = ErrorKind.TENANCY_VIOLATION


class InsufficientResourceError(CombatError):
    """Raised when an actor cannot pay the cost of an action."""

    kind = ErrorKind.INSUFFICIENT_RESOURCE


class ValidationFailureError(CombatError):
    """Raised when a record would break one of its invariants."""

    kind = ErrorKind.VALIDATION_FAILURE


class PersistenceFailureError(CombatError):
    """Raised when the store rejects a write for infrastructure reasons."""

    kind = ErrorKind.PERSISTENCE_FAILURE


def validation_failure_from(
    exc: ValidationError, context: Optional[dict[str, Any]] = None
) -> ValidationFailureError:
    """
    Converts a pydantic validation error into a ValidationFailureError.

    Args:
        exc (ValidationError): The error raised by pydantic.
        context (Optional[dict[str, Any]]): Extra context for the failure.

    Returns:
        ValidationFailureError: The equivalent engine error.

    """
    messages = "; ".join(
        f"{'.'.join(str(loc) for loc in err['loc']) or 'record'}: {err['msg']}"
        for err in exc.errors()
    )
    return ValidationFailureError(messages, context)
