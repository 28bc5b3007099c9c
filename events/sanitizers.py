# spot/events/sanitizers.py
"""
Input sanitization for organizer-supplied event text.

Titles and short labels are single-line plain text; descriptions keep a
small set of formatting tags (bleach) and lose everything else.
"""
import re
from typing import Optional

import bleach
from django.utils.html import strip_tags


# Allowed HTML tags for event descriptions
ALLOWED_TAGS = [
    'p', 'br', 'strong', 'em', 'u', 'a', 'ul', 'ol', 'li',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'blockquote', 'code', 'pre'
]

ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title'],
}

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 10000

CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def sanitize_text(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Plain text: trimmed, control characters removed, length capped.
    """
    if text is None:
        return ""

    text = CONTROL_CHARS.sub('', text.strip())

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_line(value: Optional[str], max_length: int) -> str:
    """
    Single line, no markup. Used for titles, categories and cities.
    """
    text = strip_tags(sanitize_text(value))
    text = re.sub(r'\s+', ' ', text).strip()
    return text[:max_length]


def sanitize_title(title: Optional[str]) -> str:
    return sanitize_line(title, TITLE_MAX_LENGTH)


def sanitize_description(description: Optional[str]) -> str:
    clean = bleach.clean(
        sanitize_text(description),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True,
    )
    return clean[:DESCRIPTION_MAX_LENGTH]
