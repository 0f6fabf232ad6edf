"""
HTML sanitization for user-authored forum text.

Topic descriptions and post bodies may keep a small set of formatting tags;
titles, usernames in reports and report descriptions are stored as plain text.
"""

from typing import Optional

import bleach

# Formatting tags allowed in topic descriptions and posts
ALLOWED_TAGS = [
    "p",
    "br",
    "strong",
    "b",
    "em",
    "i",
    "u",
    "ul",
    "ol",
    "li",
    "blockquote",
    "code",
    "pre",
]

# No attributes at all, so no event handlers or links with javascript: URLs
ALLOWED_ATTRIBUTES: dict[str, list[str]] = {}


def sanitize_html(content: Optional[str]) -> Optional[str]:
    """
    Remove every tag outside ALLOWED_TAGS and every attribute.

    Args:
        content: Raw HTML content from user input

    Returns:
        Sanitized HTML, or None if input is None

    Examples:
        >>> sanitize_html('<p>Hello <b>world</b></p>')
        '<p>Hello <b>world</b></p>'
        >>> sanitize_html('<img src=x onerror=alert(1)>')
        ''
    """
    if content is None:
        return None

    return bleach.clean(
        content,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True,
    )


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags, for fields that never contain markup.

    Examples:
        >>> sanitize_plain_text('<b>Bold</b> title')
        'Bold title'
    """
    if content is None:
        return None

    return bleach.clean(content, tags=[], strip=True)
