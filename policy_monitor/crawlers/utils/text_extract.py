from __future__ import annotations

import re

from bs4 import Tag
from soupsieve import SelectorSyntaxError

# Raised by Tag.select() for malformed selectors in a site profile
SELECTOR_ERRORS = (ValueError, SelectorSyntaxError)


def element_text(el: Tag) -> str:
    """Visible text of an element with one line per block, blank runs collapsed."""
    text = el.get_text(separator="\n")
    lines = [re.sub(r"[ \t\r\f\v]+", " ", line).strip() for line in text.split("\n")]
    return "\n".join(line for line in lines if line)


def first_substantial_line(text: str, min_length: int = 10, max_length: int = 200) -> str | None:
    """First line longer than *min_length*, cut to *max_length*."""
    for line in text.split("\n"):
        line = line.strip()
        if len(line) > min_length:
            return line[:max_length]
    return None


def truncate_text(text: str, max_length: int = 300) -> str:
    """Cut *text* to *max_length* characters, marking the cut with '...'."""
    text = text.strip()
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
