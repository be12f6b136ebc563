"""
NoteWise Backend - Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for every error scenario.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into
       structured JSON error responses.
Who:   Raised by services, dependencies and the Gemini client.

Exception Hierarchy:
    NotewiseError (base)
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error
    ├── ConfigurationError       → 503 (Gemini key missing; never retried)
    └── GeminiError (kind)       → status chosen per kind in main.py
        ├── InvalidApiKeyError   kind = INVALID_API_KEY
        ├── RateLimitError       kind = RATE_LIMITED (the only retried kind)
        └── GeminiTimeoutError   kind = TIMED_OUT
        (kind = UNKNOWN uses GeminiError itself with the provider's message)
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class NotewiseError(Exception):
    """
    Base exception for all NoteWise application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(NotewiseError):
    """
    Raised when a request carries no usable owner identity.

    The auth provider is external; this only fires when the identity it is
    expected to forward (X-User-Id) is absent or malformed. HTTP 401.
    """

    def __init__(
        self,
        message: str = "Login is required.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NotewiseError):
    """
    Raised when a requested resource does not exist for the current owner.

    Notes owned by another user raise this too, so their existence is not
    revealed. HTTP 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(NotewiseError):
    """
    Raised when database operations fail unexpectedly. HTTP 500.

    The client always gets a generic message; SQL details are logged only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(NotewiseError):
    """
    Raised when required configuration (GEMINI_API_KEY) is missing.

    A startup-class failure: it is not part of the GeminiError taxonomy and
    is never classified or retried.
    """

    def __init__(
        self,
        message: str = "GEMINI_API_KEY environment variable is not set.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ══════════════════════════════════════════════════════════════════════════
# Gemini (generation service) errors
# ══════════════════════════════════════════════════════════════════════════

class GeminiErrorKind(str, Enum):
    """Closed set of generation failure kinds."""

    INVALID_API_KEY = "invalid_api_key"
    RATE_LIMITED = "rate_limited"
    TIMED_OUT = "timed_out"
    UNKNOWN = "unknown"


class GeminiError(NotewiseError):
    """
    A classified failure of the generation service.

    `kind` drives retry (only RATE_LIMITED is retried) and lets callers pick
    a user-facing message. Instances are produced by
    services.error_classifier.classify_gemini_error.

    Immutable once raised: `kind`, `message` and `context` are read-only,
    and `context` is a read-only mapping over a private copy.
    """

    def __init__(
        self,
        message: str,
        kind: GeminiErrorKind = GeminiErrorKind.UNKNOWN,
        context: Optional[Dict[str, Any]] = None,
    ):
        # NotewiseError.__init__ assigns plain attributes, which the
        # properties below forbid.
        Exception.__init__(self, message)
        self._message = message
        self._context = MappingProxyType(dict(context or {}))
        self._kind = GeminiErrorKind(kind)

    @property
    def kind(self) -> GeminiErrorKind:
        return self._kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def context(self) -> Mapping[str, Any]:
        return self._context

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self._kind.value!r}, message={self.message!r})"


class InvalidApiKeyError(GeminiError):
    """The provider rejected the API key."""

    MESSAGE = "The Gemini API key is invalid."

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(self.MESSAGE, GeminiErrorKind.INVALID_API_KEY, context)


class RateLimitError(GeminiError):
    """The provider's request quota or rate limit was exceeded."""

    MESSAGE = "The AI request limit was exceeded. Please try again shortly."

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(self.MESSAGE, GeminiErrorKind.RATE_LIMITED, context)


class GeminiTimeoutError(GeminiError):
    """The request ran past the provider's (or our own) deadline."""

    MESSAGE = "The AI request timed out."

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(self.MESSAGE, GeminiErrorKind.TIMED_OUT, context)
