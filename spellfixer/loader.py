"""
Word list loader.

Reads any number of word-list files (or directories of them) in one pass
and splits their content into a case-insensitive WordSet, a case-sensitive
WordSet and a FixList. Lines containing a letter that is not lower case go
to the case-sensitive set unless ``WordListLoadOptions.IGNORE_CASE`` is
given.
"""

import logging
from dataclasses import dataclass, field
from enum import Flag
from typing import Iterable, List

from .fixlist import FixList, FixListBuilder
from .text import is_lower
from .wordset import (
    LINE_FIX, LINE_SEQUENCE, PathLike, StringComparison, WordSequence, WordSet,
    iter_files, parse_line, read_lines,
)

logger = logging.getLogger(__name__)


class WordListLoadOptions(Flag):
    NONE = 0
    IGNORE_CASE = 1


@dataclass
class WordListLoaderResult:
    """The three structures produced from a set of word-list files."""
    words: WordSet
    case_sensitive_words: WordSet
    fixes: FixList


@dataclass
class _Accumulator:
    words: List[str] = field(default_factory=list)
    sequences: List[WordSequence] = field(default_factory=list)
    case_sensitive_words: List[str] = field(default_factory=list)
    case_sensitive_sequences: List[WordSequence] = field(default_factory=list)
    fixes: FixListBuilder = field(default_factory=FixListBuilder)


def load(
    paths: Iterable[PathLike],
    min_word_length: int = -1,
    options: WordListLoadOptions = WordListLoadOptions.NONE
) -> WordListLoaderResult:
    """Load every file under ``paths``."""
    acc = _Accumulator()
    split_case = not (options & WordListLoadOptions.IGNORE_CASE)

    count = 0
    for file_path in iter_files(paths):
        _read_into(acc, read_lines(file_path), min_word_length, split_case)
        count += 1

    logger.debug("Loaded %d word list file(s)", count)
    return _freeze(acc)


def load_file(
    path: PathLike,
    min_word_length: int = -1,
    options: WordListLoadOptions = WordListLoadOptions.NONE
) -> WordListLoaderResult:
    return load([path], min_word_length, options)


def load_lines(
    lines: Iterable[str],
    min_word_length: int = -1,
    options: WordListLoadOptions = WordListLoadOptions.NONE
) -> WordListLoaderResult:
    acc = _Accumulator()
    _read_into(acc, lines, min_word_length, not (options & WordListLoadOptions.IGNORE_CASE))
    return _freeze(acc)


def _read_into(acc: _Accumulator, lines: Iterable[str], min_word_length: int, split_case: bool):
    for line in lines:
        parsed = parse_line(line)
        if parsed is None:
            continue

        if parsed.kind == LINE_FIX:
            if len(parsed.key) >= min_word_length and parsed.key and parsed.value:
                acc.fixes.add(parsed.key, parsed.value)

        elif parsed.kind == LINE_SEQUENCE:
            sequence = WordSequence(parsed.value)
            if split_case and not is_lower(str(sequence)):
                acc.case_sensitive_sequences.append(sequence)
            else:
                acc.sequences.append(sequence)

        elif len(parsed.value) >= min_word_length:
            if split_case and not is_lower(parsed.value):
                acc.case_sensitive_words.append(parsed.value)
            else:
                acc.words.append(parsed.value)


def _freeze(acc: _Accumulator) -> WordListLoaderResult:
    return WordListLoaderResult(
        words=WordSet(acc.words, acc.sequences, StringComparison.IGNORE_CASE),
        case_sensitive_words=WordSet(
            acc.case_sensitive_words, acc.case_sensitive_sequences, StringComparison.ORDINAL),
        fixes=acc.fixes.to_fix_list(),
    )
