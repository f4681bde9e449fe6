"""Exceptions raised by the codebase graph package."""

from typing import Optional


class CodebaseGraphError(Exception):
    """Base exception for dependency graph errors."""
    pass


class UnitValidationError(CodebaseGraphError, ValueError):
    """Exception raised when a unit record is malformed."""

    def __init__(self, message: str, identifier: Optional[str] = None):
        self.identifier = identifier
        if identifier:
            message = f"Invalid unit '{identifier}': {message}"
        super().__init__(message)


class GraphFrozenError(CodebaseGraphError, RuntimeError):
    """Exception raised when registering into a frozen graph."""
    pass
