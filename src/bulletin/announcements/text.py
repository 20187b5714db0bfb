"""Text helpers for slugs, excerpts and reading time."""

import math
import re

EXCERPT_LENGTH = 150
WORDS_PER_MINUTE = 200

_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w\-]+")
_MULTI_DASH_RE = re.compile(r"-{2,}")
_TAG_RE = re.compile(r"<[^>]*>")


def slugify(text: str) -> str:
    """Generate a URL-friendly slug.

    Examples:
        >>> slugify("  Hello, World!  ")
        'hello-world'
        >>> slugify("Q3 -- results")
        'q3-results'
    """
    slug = _WHITESPACE_RE.sub("-", text.lower().strip())
    slug = _NON_WORD_RE.sub("", slug)
    slug = _MULTI_DASH_RE.sub("-", slug)
    return slug.strip("-")


def strip_html(html: str) -> str:
    """Extract plain text from HTML content."""
    return _TAG_RE.sub("", html).replace("&nbsp;", " ")


def truncate(text: str, length: int = 100) -> str:
    """Truncate text to length characters, appending an ellipsis if cut."""
    if len(text) <= length:
        return text
    return text[:length].strip() + "..."


def generate_excerpt(html: str, length: int = EXCERPT_LENGTH) -> str:
    """Generate a plain-text excerpt from HTML content."""
    return truncate(strip_html(html), length)


def count_words(html: str) -> int:
    return len(strip_html(html).split())


def reading_time_minutes(html: str) -> int:
    """Estimated reading time in minutes, never less than one."""
    return max(1, math.ceil(count_words(html) / WORDS_PER_MINUTE))
