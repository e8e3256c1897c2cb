# ABOUTME: ISBN-10/ISBN-13 format validation, cleaning, and detection.
# ABOUTME: Used by the ISBN-entry step of the confirmation dialogue.

import re

# Accepts bare, hyphenated, or space-separated ISBN-10/13, optionally prefixed
# with "ISBN", "ISBN-10" or "ISBN-13" (with or without a colon).
_ISBN_RE = re.compile(
    r"^(?:ISBN(?:-1[03])?:? )?"
    r"(?=[0-9X]{10}$|(?=(?:[0-9]+[- ]){3})[- 0-9X]{13}$|97[89][0-9]{10}$"
    r"|(?=(?:[0-9]+[- ]){4})[- 0-9]{17}$)"
    r"(?:97[89][- ]?)?[0-9]{1,5}[- ]?[0-9]+[- ]?[0-9]+[- ]?[0-9X]$"
)
_ISBN_STRIP_RE = re.compile(r"[\s-]")
_ISBN_DIGITS_RE = re.compile(r"^(?:\d{10}|\d{13})$")


def is_valid_isbn(text: str) -> bool:
    """Whether text is a well-formed ISBN-10 or ISBN-13.

    Only the shape is checked; check digits are not verified.
    """
    return _ISBN_RE.match(text) is not None


def clean_isbn(isbn: str) -> str:
    """Strip hyphens and whitespace from an ISBN."""
    return _ISBN_STRIP_RE.sub("", isbn)


def detect_isbn(query: str) -> str | None:
    """Return the cleaned ISBN if query is 10 or 13 digits, else None."""
    cleaned = clean_isbn(query)
    if _ISBN_DIGITS_RE.match(cleaned):
        return cleaned
    return None
