"""
SpellingData - everything the engine knows about words.

Holds the case-insensitive word set, the case-sensitive word set, the
values ignored during the current run and the fix list. Instances are
immutable; ``add_*`` methods return a new instance that shares every
unchanged part with the old one.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Sequence

from . import loader
from .charmap import CharIndexMap
from .fixlist import FixList, SpellingFix
from .wordset import PathLike, StringComparison, WordSequence, WordSet


@dataclass(frozen=True)
class WordSequenceMatch:
    """A known sequence found in text, spanning ``value[index:index + length]``."""
    sequence: WordSequence
    index: int
    length: int

    @property
    def end(self) -> int:
        return self.index + self.length


class SpellingData:

    __slots__ = ('words', 'case_sensitive_words', 'fixes', 'ignored_values')

    def __init__(
        self,
        words: Optional[WordSet] = None,
        case_sensitive_words: Optional[WordSet] = None,
        fixes: Optional[FixList] = None,
        ignored_values: Optional[WordSet] = None
    ):
        self.words = words if words is not None else WordSet.empty(StringComparison.IGNORE_CASE)
        self.case_sensitive_words = (case_sensitive_words if case_sensitive_words is not None
                                     else WordSet.empty(StringComparison.ORDINAL))
        self.fixes = fixes if fixes is not None else FixList.empty()
        self.ignored_values = (ignored_values if ignored_values is not None
                               else WordSet.empty(StringComparison.IGNORE_CASE))

    @classmethod
    def empty(cls) -> 'SpellingData':
        return cls()

    @classmethod
    def from_loader_result(cls, result: loader.WordListLoaderResult) -> 'SpellingData':
        return cls(result.words, result.case_sensitive_words, result.fixes)

    @classmethod
    def load(
        cls,
        paths: Iterable[PathLike],
        fix_paths: Iterable[PathLike] = (),
        min_word_length: int = -1,
        options: loader.WordListLoadOptions = loader.WordListLoadOptions.NONE
    ) -> 'SpellingData':
        """Load word lists and, optionally, separate fix list files."""
        result = loader.load(list(paths) + list(fix_paths), min_word_length, options)
        return cls.from_loader_result(result)

    def __repr__(self) -> str:
        return (f"SpellingData(words={len(self.words)}, case_sensitive={len(self.case_sensitive_words)}, "
                f"fixes={len(self.fixes)}, ignored={len(self.ignored_values)})")

    @property
    def char_index_map(self) -> CharIndexMap:
        return self.words.char_index_map

    @property
    def reversed_char_index_map(self) -> CharIndexMap:
        return self.words.reversed_char_index_map

    @property
    def char_map(self) -> Dict[str, FrozenSet[str]]:
        return self.words.char_map

    def contains(self, value: str) -> bool:
        return (self.ignored_values.contains(value)
                or self.case_sensitive_words.contains(value)
                or self.words.contains(value))

    def is_word(self, value: str) -> bool:
        """Known as a word, not merely ignored."""
        return self.case_sensitive_words.contains(value) or self.words.contains(value)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and self.contains(value)

    # -------------------------------------------------------------------------
    # Sequences
    # -------------------------------------------------------------------------

    def get_sequence_match(
        self,
        value: str,
        start_index: int,
        length: int,
        word_start: int,
        word_end: int
    ) -> Optional[WordSequenceMatch]:
        """
        Find the longest known sequence starting with the word at
        ``value[word_start:word_end]``, looking no further than
        ``start_index + length``.
        """
        first_word = value[word_start:word_end]

        for word_set in (self.case_sensitive_words, self.words):
            sequences = word_set.get_sequences(first_word)
            if sequences:
                match = _match_sequences(
                    value, start_index + length, word_start, word_end, sequences, word_set.comparison)
                if match is not None:
                    return match

        return None

    # -------------------------------------------------------------------------
    # Updates (return new instances)
    # -------------------------------------------------------------------------

    def _replace(self, **changes) -> 'SpellingData':
        fields = {
            'words': self.words,
            'case_sensitive_words': self.case_sensitive_words,
            'fixes': self.fixes,
            'ignored_values': self.ignored_values,
        }
        fields.update(changes)
        return SpellingData(**fields)

    def add_word(self, value: str) -> 'SpellingData':
        return self._replace(words=self.words.add_value(value))

    def add_words(self, values: Iterable[str]) -> 'SpellingData':
        return self._replace(words=self.words.add_values(values))

    def add_fix(self, error: str, fix: SpellingFix) -> 'SpellingData':
        return self._replace(fixes=self.fixes.add(error, fix))

    def add_ignored_value(self, value: str) -> 'SpellingData':
        return self._replace(ignored_values=self.ignored_values.add_value(value))

    def add_ignored_values(self, values: Iterable[str]) -> 'SpellingData':
        return self._replace(ignored_values=self.ignored_values.add_values(values))


def _match_sequences(
    value: str,
    end_index: int,
    word_start: int,
    word_end: int,
    sequences: Sequence[WordSequence],
    comparison: StringComparison
) -> Optional[WordSequenceMatch]:
    candidates = list(sequences)
    best: Optional[WordSequenceMatch] = None
    position = 1
    i = word_end

    while candidates:
        j = i
        while i < end_index and value[i].isspace():
            i += 1
        if i == j:
            break

        j = i
        while i < end_index and value[i].isalpha():
            i += 1
        if i == j:
            break

        word = value[j:i]
        remaining = []

        for sequence in candidates:
            if position < len(sequence) and comparison.equals(word, sequence.words[position]):
                if position == len(sequence) - 1:
                    if best is None or best.end < i:
                        best = WordSequenceMatch(sequence, word_start, i - word_start)
                else:
                    remaining.append(sequence)

        candidates = remaining
        position += 1

    return best
