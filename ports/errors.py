"""
Error types for insight construction and resolution.

Every failure carries an ErrorKind (what class of mistake the caller made)
and an ErrorCode (which rule was violated), plus a context dict for logging.
"""

from enum import Enum
from typing import Any


# ============================================================================
# Error Codes
# ============================================================================

class ErrorKind(str, Enum):
    """Broad failure classes callers branch on."""
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_STATE = "invalid_state"
    ALREADY_GROUPED = "already_grouped"


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # Argument errors (1xx)
    BAR_COUNT_OUT_OF_RANGE = "E101"
    PERIOD_OUT_OF_RANGE = "E102"
    CLOSE_TIME_IN_PAST = "E103"
    CLOSE_BEFORE_GENERATED = "E104"
    VALIDITY_AMBIGUOUS = "E105"

    # State errors (2xx)
    GENERATED_TIME_UNSET = "E201"
    ALREADY_GROUPED = "E202"
    CLOSE_TIME_UNSET = "E203"


# ============================================================================
# Error Classes
# ============================================================================

class InsightError(Exception):
    """
    Base exception for insight failures.

    Provides structured error information for debugging and logging.
    """

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.message = message
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "kind": self.kind.value,
            "code": self.code.value,
            "message": self.message,
            "context": {k: str(v) for k, v in self.context.items()},
        }

    def with_context(self, **kwargs: Any) -> "InsightError":
        """Add additional context and return self for chaining."""
        self.context.update(kwargs)
        return self


class InvalidArgumentError(InsightError, ValueError):
    """Raised when an argument would produce an inconsistent insight."""

    kind = ErrorKind.INVALID_ARGUMENT

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        argument: str,
        value: Any = None,
    ):
        self.argument = argument
        context = {"argument": argument}
        if value is not None:
            context["value"] = value
        super().__init__(message, code=code, context=context)

    @classmethod
    def bar_count(cls, bar_count: int) -> "InvalidArgumentError":
        return cls(
            "Insight bar_count must be greater than zero.",
            code=ErrorCode.BAR_COUNT_OUT_OF_RANGE,
            argument="bar_count",
            value=bar_count,
        )

    @classmethod
    def period(cls, period: Any) -> "InvalidArgumentError":
        return cls(
            "Insight period must be greater than or equal to 1 second.",
            code=ErrorCode.PERIOD_OUT_OF_RANGE,
            argument="period",
            value=period,
        )


class InvalidStateError(InsightError, RuntimeError):
    """Raised when an operation is called before the insight is ready for it."""

    kind = ErrorKind.INVALID_STATE

    def __init__(self, message: str, code: ErrorCode = ErrorCode.GENERATED_TIME_UNSET, **context: Any):
        super().__init__(message, code=code, context=context)


class AlreadyGroupedError(InsightError, RuntimeError):
    """Raised when assigning a group id to an insight that already has one."""

    kind = ErrorKind.ALREADY_GROUPED

    def __init__(self, insight_id: Any, group_id: Any):
        self.insight_id = insight_id
        self.group_id = group_id
        super().__init__(
            f"Unable to set group id on insight {insight_id} because it has "
            f"already been assigned to group {group_id}.",
            code=ErrorCode.ALREADY_GROUPED,
            context={"insight_id": insight_id, "group_id": group_id},
        )
