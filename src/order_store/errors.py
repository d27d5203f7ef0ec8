"""Errors raised by the order record store"""
from typing import Any, Dict, List, Optional

import pydantic


class ValidationError(ValueError):
    """An order, filter or identifier failed validation. Nothing was written."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError, subject: str = "order") -> "ValidationError":
        """Wrap a pydantic failure, keeping its per-field error list"""
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"]) or subject
            problems.append(f"{location}: {error['msg']}")
        message = f"Invalid {subject}: " + "; ".join(problems)
        return cls(message, errors=exc.errors(include_url=False))
