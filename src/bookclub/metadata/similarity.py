# ABOUTME: Unicode-aware string normalization and Levenshtein similarity scoring.
# ABOUTME: Every matcher decision and dedup key in the pipeline is built on these helpers.

import re

# Anything that is not a letter, digit, or whitespace. \w also admits the
# underscore, so it is excluded explicitly.
_NON_WORD_RE = re.compile(r"[^\w\s]|_")
_WHITESPACE_RE = re.compile(r"\s+")

_NO_AUTHOR_KEY = "no-author"


def normalize(text: str) -> str:
    """Lowercase, drop punctuation and symbols, collapse whitespace, trim.

    Letters and digits from any script survive, so "Дюна!" becomes "дюна".
    """
    text = _NON_WORD_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", text).strip()


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (insert, delete, substitute)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost)
            )
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Normalized similarity between two strings in [0.0, 1.0].

    Identical normalized strings score 1.0. If either side normalizes to
    the empty string the match is vacuous and also scores 1.0, so a missing
    field never disqualifies a candidate. Symmetric in its arguments.
    """
    left = normalize(a)
    right = normalize(b)
    if left == right:
        return 1.0
    if not left or not right:
        return 1.0
    longest = max(len(left), len(right))
    return (longest - levenshtein(left, right)) / longest


def match_key(title: str, author: str | None) -> str:
    """Dedup key for a book: normalized title and author joined by '|||'."""
    normalized_author = normalize(author) if author else _NO_AUTHOR_KEY
    return f"{normalize(title)}|||{normalized_author}"
