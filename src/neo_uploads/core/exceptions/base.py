"""Base exceptions for neo-uploads.

This module defines the base exception hierarchy for the upload engine.
All exceptions inherit from NeoUploadsError and carry an error code and
structured details so protocol adapters can map them to responses.
"""

from typing import Any, Dict, Optional


class NeoUploadsError(Exception):
    """Base exception for all neo-uploads errors.

    All exceptions in the library inherit from this base class and include
    structured error information for debugging and adapter-side mapping.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def get_error_code(exception: Exception) -> str:
    """Get the error code for any exception.

    Args:
        exception: The exception instance

    Returns:
        The structured error code, or the class name for foreign exceptions
    """
    if isinstance(exception, NeoUploadsError):
        return exception.error_code
    return exception.__class__.__name__


def create_error_response(exception: NeoUploadsError) -> Dict[str, Any]:
    """Create standardized error response from exception.

    Args:
        exception: The neo-uploads exception

    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
