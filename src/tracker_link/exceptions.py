"""
Custom exceptions for tracker reference linking.

All errors raised by the registry, the matcher and the configuration layer
derive from TrackerLinkError so callers can catch them in one place.
"""

from typing import Any, Dict, Optional


class TrackerLinkError(Exception):
    """Base exception for all tracker linking errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ValidationError(TrackerLinkError):
    """Raised when a keyword, URL template or constructor argument list is malformed."""
    pass


class KeywordNotFoundError(TrackerLinkError):
    """Raised when an operation refers to a keyword that is not registered."""

    def __init__(self, keyword: str):
        super().__init__(f"The keyword '{keyword}' does not exist", {'keyword': keyword})
        self.keyword = keyword


class InputError(TrackerLinkError):
    """Raised when process() is called without a string to process."""
    pass


class ConfigurationError(TrackerLinkError):
    """Raised when a configuration file or section is missing or malformed."""
    pass
