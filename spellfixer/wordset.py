"""
WordSet - immutable set of known words and multi-word sequences.

Word list file format (one entry per line)::

    # comment to end of line
    receive                 single word
    et al                   sequence (words separated by whitespace)
    recieve=receive         fix entry (read by the loader / FixList)

Every operation that "changes" a WordSet returns a new instance.
"""

import logging
import re
from collections import namedtuple
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple, Union

from .charmap import CharIndexMap, LazyCell, create_char_map
from .config_logging import WordListError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_WHITESPACE_RE = re.compile(r'\s+')


class StringComparison(Enum):
    """Equality used by a WordSet."""
    ORDINAL = "ordinal"
    IGNORE_CASE = "ignore_case"

    def key(self, value: str) -> str:
        if self is StringComparison.IGNORE_CASE:
            return value.casefold()
        return value

    def equals(self, value1: Optional[str], value2: Optional[str]) -> bool:
        if value1 is None or value2 is None:
            return value1 is value2
        return self.key(value1) == self.key(value2)


DEFAULT_COMPARISON = StringComparison.IGNORE_CASE


def sort_key(value: str) -> Tuple[str, str]:
    """Deterministic ordering used whenever lists are written to disk."""
    return (value.casefold(), value)


class WordSequence:
    """An ordered run of two or more words matched as one phrase ("et al")."""

    __slots__ = ('words',)

    def __init__(self, words: Iterable[str]):
        self.words: Tuple[str, ...] = tuple(words)

    @property
    def first(self) -> str:
        return self.words[0]

    def __len__(self) -> int:
        return len(self.words)

    def __eq__(self, other) -> bool:
        return isinstance(other, WordSequence) and self.words == other.words

    def __hash__(self) -> int:
        return hash(self.words)

    def __str__(self) -> str:
        return ' '.join(self.words)

    def __repr__(self) -> str:
        return f"WordSequence({' '.join(self.words)!r})"


ParsedLine = namedtuple('ParsedLine', ['kind', 'value', 'key'])

LINE_WORD = 'word'
LINE_SEQUENCE = 'sequence'
LINE_FIX = 'fix'


def parse_line(line: str) -> Optional[ParsedLine]:
    """
    Parse one word-list line.

    Returns None for blank and comment-only lines. For fixes ``key`` holds
    the misspelling and ``value`` the correction; for sequences ``value``
    is the tuple of words.
    """
    comment = line.find('#')
    if comment >= 0:
        line = line[:comment]

    line = line.strip()
    if not line:
        return None

    separator = line.find('=')
    if separator >= 0:
        return ParsedLine(LINE_FIX, line[separator + 1:].strip(), line[:separator].strip())

    if _WHITESPACE_RE.search(line):
        return ParsedLine(LINE_SEQUENCE, tuple(_WHITESPACE_RE.split(line)), None)

    return ParsedLine(LINE_WORD, line, None)


def read_lines(path: PathLike) -> List[str]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read().splitlines()
    except OSError as e:
        raise WordListError(f"Cannot read word list: {e}", path=str(path))


def iter_files(paths: Iterable[PathLike]) -> Iterator[Path]:
    """Expand files and directories (recursively) into file paths."""
    for path in paths:
        path = Path(path)
        if path.is_file():
            yield path
        elif path.is_dir():
            for file_path in sorted(path.rglob('*')):
                if file_path.is_file():
                    yield file_path
        else:
            logger.warning("Word list path does not exist: %s", path)


class WordSet:
    """
    Immutable collection of words and word sequences.

    Membership uses ``comparison``; sequences are indexed by their first
    word under the same comparison.
    """

    __slots__ = ('comparison', '_items', '_sequences',
                 '_char_index_map', '_reversed_char_index_map', '_char_map')

    def __init__(
        self,
        values: Optional[Iterable[str]] = None,
        sequences: Optional[Iterable[WordSequence]] = None,
        comparison: StringComparison = DEFAULT_COMPARISON
    ):
        self.comparison = comparison

        items: Dict[str, str] = {}
        for value in values or ():
            items.setdefault(comparison.key(value), value)
        self._items = items

        grouped: Dict[str, List[WordSequence]] = {}
        for sequence in sequences or ():
            bucket = grouped.setdefault(comparison.key(sequence.first), [])
            if sequence not in bucket:
                bucket.append(sequence)
        self._sequences: Dict[str, Tuple[WordSequence, ...]] = {
            key: tuple(value) for key, value in grouped.items()
        }

        self._char_index_map: LazyCell[CharIndexMap] = LazyCell()
        self._reversed_char_index_map: LazyCell[CharIndexMap] = LazyCell()
        self._char_map: LazyCell[Dict[str, FrozenSet[str]]] = LazyCell()

    @classmethod
    def empty(cls, comparison: StringComparison = DEFAULT_COMPARISON) -> 'WordSet':
        return cls(comparison=comparison)

    @property
    def values(self) -> FrozenSet[str]:
        return frozenset(self._items.values())

    @property
    def sequences(self) -> Dict[str, Tuple[WordSequence, ...]]:
        return dict(self._sequences)

    def get_sequences(self, first_word: str) -> Tuple[WordSequence, ...]:
        return self._sequences.get(self.comparison.key(first_word), ())

    def iter_sequences(self) -> Iterator[WordSequence]:
        for bucket in self._sequences.values():
            yield from bucket

    @property
    def char_index_map(self) -> CharIndexMap:
        return self._char_index_map.get(lambda: CharIndexMap.create(self._items.values()))

    @property
    def reversed_char_index_map(self) -> CharIndexMap:
        return self._reversed_char_index_map.get(
            lambda: CharIndexMap.create(self._items.values(), reverse=True))

    @property
    def char_map(self) -> Dict[str, FrozenSet[str]]:
        return self._char_map.get(lambda: create_char_map(self._items.values(), self.comparison.key))

    def contains(self, value: str) -> bool:
        return self.comparison.key(value) in self._items

    def get_actual_value(self, value: str) -> Optional[str]:
        """The stored spelling of ``value``, or None."""
        return self._items.get(self.comparison.key(value))

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and self.contains(value)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return (f"WordSet(count={len(self._items)}, sequences={sum(map(len, self._sequences.values()))}, "
                f"comparison={self.comparison.value})")

    # -------------------------------------------------------------------------
    # Set algebra (always returns a new WordSet)
    # -------------------------------------------------------------------------

    def with_values(self, values: Iterable[str]) -> 'WordSet':
        return WordSet(values, self.iter_sequences(), self.comparison)

    def add_value(self, value: str) -> 'WordSet':
        if self.contains(value):
            return self
        return self.with_values(list(self._items.values()) + [value])

    def add_values(self, values: Union['WordSet', Iterable[str]], *others: 'WordSet') -> 'WordSet':
        merged = list(self._items.values())
        sequences = list(self.iter_sequences())

        for source in (values,) + others:
            if isinstance(source, WordSet):
                merged.extend(source)
                sequences.extend(source.iter_sequences())
            else:
                merged.extend(source)

        return WordSet(merged, sequences, self.comparison)

    def except_(self, other: 'WordSet', *others: 'WordSet') -> 'WordSet':
        excluded = self._keys_of((other,) + others)
        return self.with_values(v for k, v in self._items.items() if k not in excluded)

    def intersect(self, other: 'WordSet', *others: 'WordSet') -> 'WordSet':
        # extra sets are pooled: A & B & (C | D)
        keys = set(self._items) & self._keys_of((other,))
        if others:
            keys &= self._keys_of(others)
        return self.with_values(v for k, v in self._items.items() if k in keys)

    def _keys_of(self, word_sets: Iterable['WordSet']) -> set:
        key = self.comparison.key
        return {key(value) for word_set in word_sets for value in word_set}

    # -------------------------------------------------------------------------
    # Loading / saving
    # -------------------------------------------------------------------------

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        comparison: StringComparison = DEFAULT_COMPARISON
    ) -> 'WordSet':
        values = []
        sequences = []

        for line in lines:
            parsed = parse_line(line)
            if parsed is None or parsed.kind == LINE_FIX:
                continue
            if parsed.kind == LINE_SEQUENCE:
                sequences.append(WordSequence(parsed.value))
            else:
                values.append(parsed.value)

        return cls(values, sequences, comparison)

    @classmethod
    def load_text(cls, text: str, comparison: StringComparison = DEFAULT_COMPARISON) -> 'WordSet':
        return cls.from_lines(text.splitlines(), comparison)

    @classmethod
    def load_file(cls, path: PathLike, comparison: StringComparison = DEFAULT_COMPARISON) -> 'WordSet':
        return cls.from_lines(read_lines(path), comparison)

    @classmethod
    def load(cls, paths: Iterable[PathLike], comparison: StringComparison = DEFAULT_COMPARISON) -> 'WordSet':
        result = cls.empty(comparison)
        for file_path in iter_files(paths):
            result = result.add_values(cls.load_file(file_path, comparison))
        return result

    def save(self, path: PathLike):
        lines = self.to_lines()
        logger.debug("Saving '%s' (%d lines)", path, len(lines))
        try:
            Path(path).write_text('\n'.join(lines), encoding='utf-8')
        except OSError as e:
            raise WordListError(f"Cannot write word list: {e}", path=str(path))

    def to_lines(self) -> List[str]:
        values = sorted(self._items.values(), key=sort_key)
        sequences = sorted((str(s) for s in self.iter_sequences()), key=sort_key)
        return values + sequences

    @staticmethod
    def save_values(path: PathLike, values: Iterable[str], comparison: StringComparison = DEFAULT_COMPARISON):
        cleaned = (v.strip() for v in values if v and not v.isspace())
        WordSet(cleaned, comparison=comparison).save(path)

    @classmethod
    def normalize(cls, path: PathLike):
        """Rewrite a word list file sorted and deduplicated."""
        cls.load_file(path).save(path)
