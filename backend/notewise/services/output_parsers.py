"""Shape raw Gemini text into summary strings and tag lists."""

from typing import List

MAX_TAGS = 6


def parse_summary(raw_text: str) -> str:
    """Trim surrounding whitespace; bullet lines and inner newlines are kept as-is."""
    return raw_text.strip()


def parse_tags(raw_text: str) -> List[str]:
    """
    Split a comma-separated model response into tags.

    Pieces are trimmed and blank ones dropped; the first MAX_TAGS survive in
    their original order. Repeated values are not collapsed and short lists
    are not padded.

        >>> parse_tags("python, , async ,python")
        ['python', 'async', 'python']
    """
    tags = [piece.strip() for piece in raw_text.split(",")]
    return [tag for tag in tags if tag][:MAX_TAGS]
