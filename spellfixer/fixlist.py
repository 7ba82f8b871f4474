"""
FixList - misspelling -> accepted corrections.

Persisted as ``misspelling=correction`` lines. A key may appear on several
lines; its corrections accumulate.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .config_logging import WordListError
from .wordset import (
    DEFAULT_COMPARISON, LINE_FIX, PathLike, StringComparison,
    iter_files, parse_line, read_lines, sort_key,
)

logger = logging.getLogger(__name__)


class SpellingFixKind(Enum):
    """Where a fix came from."""
    NONE = "none"
    PREDEFINED = "predefined"
    USER = "user"


class SpellingFix:
    """A single correction value tagged with its provenance."""

    __slots__ = ('value', 'kind')

    def __init__(self, value: str, kind: SpellingFixKind = SpellingFixKind.NONE):
        self.value = value
        self.kind = kind

    def with_value(self, value: str) -> 'SpellingFix':
        return SpellingFix(value, self.kind)

    def __eq__(self, other) -> bool:
        return (isinstance(other, SpellingFix)
                and self.value == other.value
                and self.kind == other.kind)

    def __hash__(self) -> int:
        return hash((self.value, self.kind))

    def __repr__(self) -> str:
        return f"SpellingFix({self.value!r}, {self.kind.name})"


class FixList:
    """
    Immutable mapping of error term to a set of SpellingFix.

    Keys and fix values are both compared with ``comparison``; within one
    key no two fixes share a value under it.
    """

    __slots__ = ('comparison', '_keys', '_fixes')

    def __init__(
        self,
        items: Optional[Mapping[str, Iterable[SpellingFix]]] = None,
        comparison: StringComparison = DEFAULT_COMPARISON
    ):
        self.comparison = comparison
        self._keys: Dict[str, str] = {}
        self._fixes: Dict[str, Tuple[SpellingFix, ...]] = {}

        for key, fixes in (items or {}).items():
            normalized = comparison.key(key)
            self._keys.setdefault(normalized, key)
            self._fixes[normalized] = self._merge(self._fixes.get(normalized, ()), fixes)

    def _merge(self, existing: Iterable[SpellingFix], fixes: Iterable[SpellingFix]) -> Tuple[SpellingFix, ...]:
        seen = {}
        for fix in list(existing) + list(fixes):
            seen.setdefault(self.comparison.key(fix.value), fix)
        return tuple(seen.values())

    @classmethod
    def empty(cls) -> 'FixList':
        return cls()

    @classmethod
    def create(
        cls,
        values: Mapping[str, Iterable[str]],
        kind: SpellingFixKind = SpellingFixKind.PREDEFINED,
        comparison: StringComparison = DEFAULT_COMPARISON
    ) -> 'FixList':
        return cls({key: [SpellingFix(v, kind) for v in fixes] for key, fixes in values.items()}, comparison)

    @property
    def items(self) -> Dict[str, FrozenSet[SpellingFix]]:
        return {self._keys[k]: frozenset(v) for k, v in self._fixes.items()}

    def get(self, key: str) -> Optional[FrozenSet[SpellingFix]]:
        fixes = self._fixes.get(self.comparison.key(key))
        return frozenset(fixes) if fixes is not None else None

    def get_ordered(self, key: str) -> Tuple[SpellingFix, ...]:
        """Fixes for ``key`` in the order they were added."""
        return self._fixes.get(self.comparison.key(key), ())

    def get_actual_key(self, key: str) -> Optional[str]:
        return self._keys.get(self.comparison.key(key))

    def contains_key(self, key: str) -> bool:
        return self.comparison.key(key) in self._fixes

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains_key(key)

    def __len__(self) -> int:
        return len(self._fixes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys.values())

    def __repr__(self) -> str:
        return f"FixList(count={len(self._fixes)})"

    def add(self, key: str, fix: SpellingFix) -> 'FixList':
        normalized = self.comparison.key(key)
        existing = self._fixes.get(normalized, ())

        if any(self.comparison.equals(f.value, fix.value) for f in existing):
            return self

        result = FixList(comparison=self.comparison)
        result._keys = dict(self._keys)
        result._keys.setdefault(normalized, key)
        result._fixes = dict(self._fixes)
        result._fixes[normalized] = existing + (fix,)
        return result

    # -------------------------------------------------------------------------
    # Loading / saving
    # -------------------------------------------------------------------------

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        min_key_length: int = -1,
        comparison: StringComparison = DEFAULT_COMPARISON
    ) -> 'FixList':
        builder = FixListBuilder(comparison)
        for line in lines:
            parsed = parse_line(line)
            if parsed is not None and parsed.kind == LINE_FIX and len(parsed.key) >= min_key_length:
                builder.add(parsed.key, parsed.value)
        return builder.to_fix_list()

    @classmethod
    def load_file(cls, path: PathLike, comparison: StringComparison = DEFAULT_COMPARISON) -> 'FixList':
        return cls.from_lines(read_lines(path), comparison=comparison)

    @classmethod
    def load(cls, paths: Iterable[PathLike], comparison: StringComparison = DEFAULT_COMPARISON) -> 'FixList':
        lines: List[str] = []
        for file_path in iter_files(paths):
            lines.extend(read_lines(file_path))
        return cls.from_lines(lines, comparison=comparison)

    def to_lines(self) -> List[str]:
        return render_fix_lines(self.items)

    def save(self, path: PathLike):
        save_fixes(path, self.items)

    def save_and_load(self, path: PathLike) -> 'FixList':
        self.save(path)
        return FixList.load_file(path, self.comparison)


class FixListBuilder:
    """Mutable accumulator used while reading files; frozen by ``to_fix_list``."""

    def __init__(self, comparison: StringComparison = DEFAULT_COMPARISON):
        self.comparison = comparison
        self._values: Dict[str, List[str]] = {}
        self._keys: Dict[str, str] = {}

    def add(self, key: str, value: str):
        normalized = self.comparison.key(key)
        self._keys.setdefault(normalized, key)
        values = self._values.setdefault(normalized, [])

        if any(self.comparison.equals(v, value) for v in values):
            logger.debug("Fix list already contains %s=%s", key, value)
            return

        values.append(value)

    def __len__(self) -> int:
        return len(self._values)

    def to_fix_list(self, kind: SpellingFixKind = SpellingFixKind.PREDEFINED) -> FixList:
        return FixList.create(
            {self._keys[k]: v for k, v in self._values.items()},
            kind=kind,
            comparison=self.comparison)


def render_fix_lines(items: Mapping[str, Iterable[Union[SpellingFix, str]]]) -> List[str]:
    """
    Render fixes as ``key=value`` lines.

    Keys and values are lower-cased and deduplicated ignoring case, then
    sorted by key and value.
    """
    merged: Dict[str, set] = {}
    for key, fixes in items.items():
        key = key.strip().lower()
        if not key:
            continue
        bucket = merged.setdefault(key, set())
        for fix in fixes:
            value = fix.value if isinstance(fix, SpellingFix) else fix
            value = value.strip().lower()
            if value:
                bucket.add(value)

    lines = []
    for key in sorted(merged, key=sort_key):
        for value in sorted(merged[key], key=sort_key):
            lines.append(f"{key}={value}")
    return lines


def save_fixes(path: PathLike, items: Mapping[str, Iterable[Union[SpellingFix, str]]]):
    lines = render_fix_lines(items)
    logger.debug("Saving '%s' (%d fixes)", path, len(lines))
    try:
        Path(path).write_text('\n'.join(lines), encoding='utf-8')
    except OSError as e:
        raise WordListError(f"Cannot write fix list: {e}", path=str(path))
