"""
NoteWise Backend - Token Budget Helpers
=======================================

What:  Keeps prompt input under a fixed token budget before it reaches Gemini.
How:   Approximates tokens as ceil(chars / 4) and cuts oversized text at
       MAX_TOKENS * 4 characters, appending "...".
Who:   GeminiService.generate_summary / generate_tags and the AI playground route.

The estimate is a cheap upper bound, not a tokenizer. Truncation is a plain
character cutoff with no word or token boundary handling.
"""

import math

MAX_TOKENS = 8000
CHARS_PER_TOKEN = 4
TRUNCATION_SUFFIX = "..."


def estimate_token_count(text: str) -> int:
    """Approximate token count: ceil(len(text) / 4). Empty text is 0 tokens."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def exceeds_token_limit(text: str) -> bool:
    return estimate_token_count(text) > MAX_TOKENS


def truncate_to_token_limit(text: str) -> str:
    """
    Cut `text` down to the token budget.

    Returns `text` itself when it already fits, so applying this twice to
    in-budget text is a no-op. Oversized text becomes its first
    MAX_TOKENS * CHARS_PER_TOKEN characters followed by "...".
    """
    if not exceeds_token_limit(text):
        return text

    max_chars = MAX_TOKENS * CHARS_PER_TOKEN
    return text[:max_chars] + TRUNCATION_SUFFIX


def get_max_tokens() -> int:
    return MAX_TOKENS
