"""
Spelling parser - finds unknown words in comments and identifiers.

Free text is scanned with a word pattern that keeps hyphenated words and
English contractions together and skips URLs. Identifiers are split on
case transitions and non-letters. Every candidate is then filtered:
too short, an allowed keyboard-mash word ("qwerty", "abc", "aaa",
"aabbcc"), or already known to SpellingData.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .base import NO_CANCELLATION, CancellationToken, SpellingMatch
from .data import SpellingData
from .text import SplitMode, find_urls, split_words

_WORD_RE = re.compile(r"""
\b
[^\W\d_]{2,}
(?:-[^\W\d_]{2,})*
[^\W\d_]*
(?:
    (?='s\b)
|
    '(?:d|ll|m|re|t|ve)\b
|
    '(?![^\W\d_])\b
|
    \b
)
""", re.VERBOSE)

# NaN, IDs, GACed, JSONify, AND'd
_SPECIAL_WORD_RE = re.compile(r"""
\A
(?:
    (?P<camel>[A-Z][a-z][A-Z])
|
    (?P<caps>[A-Z]{2,})(?:s|ed|ify|'d)
)
\Z
""", re.VERBOSE)

_NONSENSICAL_WORDS = frozenset((
    'xyz', 'Xyz', 'XYZ',
    'asdfgh', 'Asdfgh', 'ASDFGH',
    'qwerty', 'Qwerty', 'QWERTY',
    'qwertz', 'Qwertz', 'QWERTZ',
))


@dataclass(frozen=True)
class SpellingParserOptions:
    split_mode: SplitMode = SplitMode.NONE
    min_word_length: int = 3


def match_special_word(value: str) -> Optional[Tuple[str, int]]:
    """Return the capital run of an abbreviation-like word and its index."""
    match = _SPECIAL_WORD_RE.match(value)
    if match is None:
        return None
    group = 'camel' if match.group('camel') is not None else 'caps'
    return match.group(group), match.start(group)


class SpellingParser:

    def __init__(
        self,
        spelling_data: SpellingData,
        options: Optional[SpellingParserOptions] = None,
        cancellation_token: CancellationToken = NO_CANCELLATION
    ):
        self.spelling_data = spelling_data
        self.options = options or SpellingParserOptions()
        self.cancellation_token = cancellation_token

    def analyze_text(self, value: str) -> List[SpellingMatch]:
        """Find unknown words in free text such as a comment."""
        matches: List[SpellingMatch] = []
        prev_end = 0

        for start, end in find_urls(value):
            self._analyze_text(value, prev_end, start, matches)
            prev_end = end

        self._analyze_text(value, prev_end, len(value), matches)

        return matches

    def _analyze_text(self, value: str, start_index: int, end_index: int, matches: List[SpellingMatch]):
        self.cancellation_token.throw_if_cancellation_requested()

        skip_until = -1

        for match in _WORD_RE.finditer(value, start_index, end_index):
            if match.start() < skip_until:
                continue

            sequence_match = self.spelling_data.get_sequence_match(
                value, start_index, end_index - start_index, match.start(), match.end())

            if sequence_match is not None:
                skip_until = sequence_match.end
                continue

            word = match.group()

            if len(word) < self.options.min_word_length:
                continue

            if self.options.split_mode == SplitMode.NONE:
                self._try_add_match(word, match.start(), matches)
                continue

            special = match_special_word(word)
            if special is not None:
                self._try_add_match(special[0], match.start() + special[1], matches)
                continue

            parts = split_words(word)

            if len(parts) > 1 and self.spelling_data.contains(word):
                continue

            for part, index in parts:
                self._try_add_match(part, match.start() + index, matches)

    def analyze_identifier(self, value: str, prefix_length: int = 0) -> List[SpellingMatch]:
        """
        Find unknown parts of an identifier.

        ``prefix_length`` characters at the start (e.g. a Hungarian-style
        prefix) are never checked. A stripped identifier that is itself
        known is treated as one word and yields nothing.
        """
        if len(value) < self.options.min_word_length:
            return []

        if prefix_length > 0 and self.spelling_data.contains(value):
            return []

        stripped = value[prefix_length:]
        matches: List[SpellingMatch] = []

        special = match_special_word(stripped)
        if special is not None:
            self._try_add_match(special[0], prefix_length + special[1], matches)
            return matches

        parts = split_words(stripped)

        if len(parts) > 1 and self.spelling_data.contains(stripped):
            return []

        for part, index in parts:
            self._try_add_match(part, prefix_length + index, matches)

        return matches

    def _try_add_match(self, value: str, index: int, matches: List[SpellingMatch]):
        if self.is_match(value):
            matches.append(SpellingMatch(value, index))

    def is_match(self, value: str) -> bool:
        """True when ``value`` should be reported as a possible misspelling."""
        if len(value) < self.options.min_word_length:
            return False

        if is_allowed_nonsensical_word(value):
            return False

        return not self.spelling_data.contains(value)


def is_allowed_nonsensical_word(value: str) -> bool:
    """
    Placeholder words that are spelled "wrong" on purpose.

    Covers keyboard runs (qwerty, asdfgh, qwertz, xyz), alphabet runs
    starting at a/A (abc, ABCD, Abcde), one repeated letter (aaa, Aaa, AAA)
    and repeated blocks starting at a/A (aabbcc, AAABBB).
    """
    if len(value) < 3:
        return False

    if value in _NONSENSICAL_WORDS:
        return True

    return _is_abc_sequence(value) or _is_aaa_sequence(value) or _is_aaa_bbb_ccc_sequence(value)


def _is_abc_sequence(value: str) -> bool:
    first, second = value[0], value[1]

    if first == 'a' and second == 'b':
        expected = 'c'
    elif first == 'A' and second == 'B':
        expected = 'C'
    elif first == 'A' and second == 'b':
        expected = 'c'
    else:
        return False

    for ch in value[2:]:
        if ch != expected:
            return False
        expected = chr(ord(expected) + 1)

    return True


def _is_aaa_sequence(value: str) -> bool:
    ch = value[0]
    i = 1

    if 'A' <= ch <= 'Z' and value[1] == ch.lower():
        ch = ch.lower()
        i = 2

    return all(c == ch for c in value[i:])


def _is_aaa_bbb_ccc_sequence(value: str) -> bool:
    ch = value[0]
    block = 1

    while block < len(value) and value[block] == ch:
        block += 1

    if block < 2 or ch not in ('a', 'A') or len(value) < 6 or len(value) % block != 0:
        return False

    for j in range(1, len(value) // block):
        expected = chr(ord(ch) + j)
        if value[j * block:(j + 1) * block] != expected * block:
            return False

    return True
