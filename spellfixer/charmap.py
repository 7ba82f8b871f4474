"""
Character-position index over a set of words.

``CharIndexMap`` answers "which words have character ``c`` at position
``i``" (counted from the start, or from the end for a reversed map). The
fuzzy matcher uses it to prune candidates before computing edit distances.
"""

import threading
from collections import defaultdict
from typing import Callable, Dict, FrozenSet, Generic, Iterable, Optional, Tuple, TypeVar

T = TypeVar('T')

_EMPTY: FrozenSet[str] = frozenset()


class LazyCell(Generic[T]):
    """
    A once-initialized value.

    The factory runs outside the lock; the first finished result is
    installed and later results are discarded, so concurrent callers may
    compute redundantly but always observe the same complete value.
    """

    __slots__ = ('_value', '_lock')

    def __init__(self):
        self._value: Optional[T] = None
        self._lock = threading.Lock()

    @property
    def is_set(self) -> bool:
        return self._value is not None

    def get(self, factory: Callable[[], T]) -> T:
        value = self._value
        if value is not None:
            return value

        computed = factory()

        with self._lock:
            if self._value is None:
                self._value = computed
            return self._value


class CharIndexMap:
    """Immutable mapping of (char, index) to the words containing it there."""

    __slots__ = ('_buckets', 'reverse')

    def __init__(self, buckets: Dict[Tuple[str, int], FrozenSet[str]], reverse: bool = False):
        self._buckets = buckets
        self.reverse = reverse

    @classmethod
    def create(cls, words: Iterable[str], reverse: bool = False) -> 'CharIndexMap':
        builder: Dict[Tuple[str, int], set] = defaultdict(set)

        for word in words:
            chars = reversed(word) if reverse else word
            for i, ch in enumerate(chars):
                builder[(ch.lower(), i)].add(word)

        return cls({key: frozenset(value) for key, value in builder.items()}, reverse)

    def get(self, ch: str, index: int) -> FrozenSet[str]:
        return self._buckets.get((ch.lower(), index), _EMPTY)

    def __contains__(self, key: Tuple[str, int]) -> bool:
        ch, index = key
        return (ch.lower(), index) in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def __repr__(self) -> str:
        return f"CharIndexMap(buckets={len(self._buckets)}, reverse={self.reverse})"


def create_char_map(words: Iterable[str], key: Callable[[str], str]) -> Dict[str, FrozenSet[str]]:
    """Map each word (under ``key``) to its letters sorted, e.g. 'listen' -> 'eilnst'."""
    builder: Dict[str, set] = defaultdict(set)
    for word in words:
        builder[key(word)].add(''.join(sorted(word)))
    return {k: frozenset(v) for k, v in builder.items()}
