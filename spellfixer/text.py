"""
Text utilities: casing classification and identifier splitting.
"""

import re
from enum import Enum
from typing import List, Tuple


class TextCasing(Enum):
    """Casing classification of a word."""
    LOWER = "lower"
    UPPER = "upper"
    FIRST_UPPER = "first_upper"
    MIXED = "mixed"  # not determinable


class SplitMode(Enum):
    """How free-text words are split into parts before checking."""
    NONE = "none"
    CASE_AND_HYPHEN = "case_and_hyphen"


_URL_RE = re.compile(r'\bhttps?://[^\s]+(?=\s|\Z)', re.IGNORECASE)


def get_text_casing(value: str) -> TextCasing:
    """
    Classify the casing of ``value``.

    Only letters are inspected. A value without letters, or with any
    casing other than all-lower, ALL-UPPER or First-upper, is MIXED.
    """
    letters = [ch for ch in value if ch.isalpha()]
    if not letters:
        return TextCasing.MIXED

    if all(ch.islower() for ch in letters):
        return TextCasing.LOWER

    if all(ch.isupper() for ch in letters):
        return TextCasing.UPPER

    if letters[0].isupper() and all(ch.islower() for ch in letters[1:]):
        return TextCasing.FIRST_UPPER

    return TextCasing.MIXED


def set_text_casing(value: str, casing: TextCasing) -> str:
    """Re-case ``value``; MIXED leaves it untouched."""
    if casing == TextCasing.LOWER:
        return value.lower()
    if casing == TextCasing.UPPER:
        return value.upper()
    if casing == TextCasing.FIRST_UPPER:
        return value[:1].upper() + value[1:].lower()
    return value


def text_casing_equals(value1: str, value2: str) -> bool:
    return get_text_casing(value1) == get_text_casing(value2)


def is_lower(value: str) -> bool:
    """True when no letter in ``value`` is upper or title case."""
    return all(not ch.isalpha() or ch.islower() for ch in value)


def replace_range(value: str, replacement: str, index: int, length: int) -> str:
    return value[:index] + replacement + value[index + length:]


def find_urls(value: str):
    """Yield (start, end) for every http(s) URL in ``value``."""
    for match in _URL_RE.finditer(value):
        yield match.start(), match.end()


def split_words(value: str) -> List[Tuple[str, int]]:
    """
    Split an identifier or compound word into (part, index) pairs.

    Non-letters (digits, underscores, hyphens) separate parts, a lower to
    upper transition starts a new part and a run of capitals is kept whole
    except for its last letter when a lowercase letter follows it:
    ``myHTTPClient`` -> my, HTTP, Client. An apostrophe between lowercase
    letters stays inside the part (``don't``).
    """
    parts = []
    n = len(value)
    i = 0

    while i < n:
        if not value[i].isalpha():
            i += 1
            continue

        start = i

        if value[i].isupper():
            j = i + 1
            while j < n and value[j].isupper():
                j += 1

            if j - i > 1:
                if j < n and value[j].isalpha() and not value[j].isupper():
                    j -= 1
                parts.append((value[start:j], start))
                i = j
                continue

            i = j
        else:
            i += 1

        while i < n:
            ch = value[i]
            if ch.isalpha() and not ch.isupper():
                i += 1
            elif (ch == "'"
                  and i + 1 < n
                  and value[i + 1].isalpha()
                  and not value[i + 1].isupper()):
                i += 1
            else:
                break

        parts.append((value[start:i], start))

    return parts
