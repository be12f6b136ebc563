"""
NoteWise Backend - Gemini Error Classifier
==========================================

What:  Maps anything raised by the Gemini SDK into a GeminiError with a kind.
How:   Substring rules over the error message, evaluated in a fixed order;
       the first matching rule wins.
Who:   The retry controller (to decide whether to retry) and GeminiService
       (to raise typed errors to callers).

Rule order (CLASSIFICATION_RULES):
    1. invalid API key   "api key", "invalid_argument", raw "401"
    2. rate limited      "quota", "rate limit", raw "429"
    3. timed out         "timeout", "deadline_exceeded"
    otherwise            UNKNOWN with the original message

Order matters: "quota exceeded while waiting for timeout" is RATE_LIMITED
because rule 2 is checked before rule 3.
"""

import logging
from typing import Callable, Dict, NamedTuple, Tuple

from notewise.exceptions import (
    GeminiError,
    GeminiErrorKind,
    GeminiTimeoutError,
    InvalidApiKeyError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


class ClassificationRule(NamedTuple):
    """
    One row of the classification table.

    `keywords` are matched against the lower-cased message; `status_codes`
    against the original message, so "401"/"429" only match as written.
    """

    kind: GeminiErrorKind
    keywords: Tuple[str, ...]
    status_codes: Tuple[str, ...] = ()

    def matches(self, message: str) -> bool:
        lowered = message.lower()
        if any(keyword in lowered for keyword in self.keywords):
            return True
        return any(code in message for code in self.status_codes)


CLASSIFICATION_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule(
        GeminiErrorKind.INVALID_API_KEY,
        keywords=("api key", "invalid_argument"),
        status_codes=("401",),
    ),
    ClassificationRule(
        GeminiErrorKind.RATE_LIMITED,
        keywords=("quota", "rate limit"),
        status_codes=("429",),
    ),
    ClassificationRule(
        GeminiErrorKind.TIMED_OUT,
        keywords=("timeout", "deadline_exceeded"),
    ),
)

# Fixed-message error type for each classified kind. UNKNOWN is absent on
# purpose: it keeps the provider's message.
_ERROR_FACTORIES: Dict[GeminiErrorKind, Callable[[], GeminiError]] = {
    GeminiErrorKind.INVALID_API_KEY: InvalidApiKeyError,
    GeminiErrorKind.RATE_LIMITED: RateLimitError,
    GeminiErrorKind.TIMED_OUT: GeminiTimeoutError,
}


def classify_message(message: str) -> GeminiErrorKind:
    for rule in CLASSIFICATION_RULES:
        if rule.matches(message):
            return rule.kind
    return GeminiErrorKind.UNKNOWN


def classify_gemini_error(value: object) -> GeminiError:
    """
    Convert a caught value into a GeminiError.

    GeminiError instances are returned unchanged (same object), so
    classifying twice is harmless.
    """
    if isinstance(value, GeminiError):
        return value

    # str() covers both exceptions (their message) and arbitrary values.
    message = str(value)
    kind = classify_message(message)
    if kind is GeminiErrorKind.UNKNOWN:
        return GeminiError(message, GeminiErrorKind.UNKNOWN)

    logger.debug("Classified Gemini error as %s: %s", kind.value, message)
    return _ERROR_FACTORIES[kind]()
