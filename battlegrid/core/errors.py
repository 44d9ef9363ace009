"""
Grid Engine - Custom Error Types
Structured exceptions for contract violations, with recovery hints.

Queries never raise for degenerate input (they return empty results);
these errors only surface programming mistakes and malformed snapshots.
"""
from typing import Dict, Any, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the grid engine."""
    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Grid errors
    GRID_INVALID_CONFIG = "GRID_INVALID_CONFIG"
    GRID_INVALID_CELL_KEY = "GRID_INVALID_CELL_KEY"

    # Area of effect errors
    AOE_UNKNOWN_SHAPE = "AOE_UNKNOWN_SHAPE"


class GridEngineError(Exception):
    """
    Base exception for all grid engine errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Additional context details
    - Recovery hints for the caller
    """

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNKNOWN,
        message: str = "An unexpected error occurred",
        details: Optional[Dict[str, Any]] = None,
        recovery_hint: Optional[str] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.recovery_hint = recovery_hint

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a dictionary for the calling UI."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
                "recovery_hint": self.recovery_hint
            }
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


class GridConfigError(GridEngineError):
    """Raised when a grid configuration violates its invariants."""

    def __init__(self, field_name: str, value: Any, reason: str):
        super().__init__(
            code=ErrorCode.GRID_INVALID_CONFIG,
            message=f"Invalid grid configuration: {field_name} {reason}",
            details={"field": field_name, "value": value},
            recovery_hint="Recalibrate the grid size and scale"
        )


class InvalidCellKeyError(GridEngineError):
    """Raised when a persisted "x,y" cell key cannot be parsed."""

    def __init__(self, key: str):
        super().__init__(
            code=ErrorCode.GRID_INVALID_CELL_KEY,
            message=f"Malformed cell key: {key!r}",
            details={"key": key},
            recovery_hint="Cell keys must be two integers separated by a comma"
        )


class UnknownAreaShapeError(GridEngineError):
    """Raised when an area of effect uses a shape the engine does not handle."""

    def __init__(self, shape: Any):
        super().__init__(
            code=ErrorCode.AOE_UNKNOWN_SHAPE,
            message=f"Unknown area of effect shape: {shape!r}",
            details={"shape": str(shape)},
            recovery_hint="Use one of: cone, line, sphere, cube"
        )
