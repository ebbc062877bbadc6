#!/usr/bin/env python3
"""
Custom exceptions for the evaluation core.

Every service raises one of these synchronously; nothing is retried
internally. Each carries the offending entity id and, where relevant, the
state it was found in so callers can render a useful message.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class ServiceException(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, entity_id: Any = None, state: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity_id = entity_id
        self.state = state

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": self.message,
            "type": self.__class__.__name__,
            "entity_id": str(self.entity_id) if self.entity_id is not None else None,
            "state": self.state,
        }


class ValidationError(ServiceException):
    """Raised when required input is missing or malformed."""
    pass


class ConflictError(ServiceException):
    """Raised on duplicate active sessions, duplicate evaluations and roster clashes."""
    pass


class AuthorizationError(ServiceException):
    """Raised when a non-member or the wrong role attempts a restricted action."""
    pass


class InvalidStateError(ServiceException):
    """Raised when an action does not fit the current lifecycle state."""
    pass


class NotFoundError(ServiceException):
    """Raised when an identifier does not resolve."""
    pass


class ConfigurationError(ServiceException):
    """Raised when a scoring policy cannot be applied as configured."""
    pass


EXIT_CODES = {
    ValidationError: 2,
    ConflictError: 3,
    AuthorizationError: 4,
    InvalidStateError: 5,
    NotFoundError: 6,
    ConfigurationError: 7,
}


def exit_code_for(exc: ServiceException) -> int:
    """Map a service exception to a CLI exit code."""
    for exc_type, code in EXIT_CODES.items():
        if isinstance(exc, exc_type):
            return code
    return 1
