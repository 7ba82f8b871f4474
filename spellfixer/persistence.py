"""
Saving what a fix run learned.

After a run, ``SpellingData`` holds fixes the user accepted and values
that were ignored. ``save_new_values`` writes them to a "new words" and
a "new fixes" file so they can be reviewed and merged into the word lists:

- fixes that are not in the original fix list are merged with the
  existing new-fixes file;
- ignored values become new words, except the ones for which a letter
  swap or fuzzy search finds a dictionary word; those are written as
  fixes instead.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .base import NO_CANCELLATION, CancellationToken
from .data import SpellingData
from .fixlist import FixList, SpellingFix, SpellingFixKind, render_fix_lines, save_fixes
from .fuzzy import FuzzyMatcher
from .wordset import DEFAULT_COMPARISON, PathLike, StringComparison, WordSet, sort_key

logger = logging.getLogger(__name__)


@dataclass
class NewValues:
    """What ``save_new_values`` wrote (or would have written)."""
    words: List[str] = field(default_factory=list)
    fix_lines: List[str] = field(default_factory=list)


class _FixAccumulator:

    def __init__(self, comparison: StringComparison = DEFAULT_COMPARISON):
        self.comparison = comparison
        self._items: Dict[str, Tuple[str, List[SpellingFix]]] = {}

    def add(self, key: str, fixes):
        _, bucket = self._items.setdefault(self.comparison.key(key), (key, []))
        bucket.extend(fixes)

    def remove(self, key: str, fixes):
        normalized = self.comparison.key(key)
        entry = self._items.get(normalized)
        if entry is None:
            return
        removed = {self.comparison.key(f.value) for f in fixes}
        remaining = [f for f in entry[1] if self.comparison.key(f.value) not in removed]
        if remaining:
            self._items[normalized] = (entry[0], remaining)
        else:
            del self._items[normalized]

    def contains_key(self, key: str) -> bool:
        return self.comparison.key(key) in self._items

    def items(self) -> Dict[str, List[SpellingFix]]:
        return {key: fixes for key, fixes in self._items.values()}

    def __len__(self) -> int:
        return len(self._items)


def save_new_values(
    spelling_data: SpellingData,
    original_fixes: FixList,
    new_words_path: Optional[PathLike] = None,
    new_fixes_path: Optional[PathLike] = None,
    fuzzy_matcher: Optional[FuzzyMatcher] = None,
    cancellation_token: CancellationToken = NO_CANCELLATION
) -> NewValues:
    """
    Persist learned fixes and ignored values.

    Args:
        spelling_data: Knowledge after the run (``SpellingFixer.spelling_data``)
        original_fixes: Fix list loaded before the run; its entries are not saved again
        new_words_path: File receiving ignored values; skipped when None
        new_fixes_path: File receiving new fixes; skipped when None
        fuzzy_matcher: Suggests fixes for ignored values
        cancellation_token: Checked during fuzzy search

    Returns:
        NewValues with the words and fix lines that were written
    """
    matcher = fuzzy_matcher or FuzzyMatcher()
    result = NewValues()

    fixes = _FixAccumulator()
    for key, values in spelling_data.fixes.items.items():
        fixes.add(key, values)

    if len(fixes) > 0:
        if new_fixes_path is not None and Path(new_fixes_path).is_file():
            for key, values in FixList.load_file(new_fixes_path).items.items():
                fixes.add(key, values)

        for key, values in original_fixes.items.items():
            fixes.remove(key, values)

    if new_words_path is not None:
        values = set(spelling_data.ignored_values.values)

        if values:
            if Path(new_words_path).is_file():
                values.update(WordSet.load_file(new_words_path, StringComparison.ORDINAL).values)

            new_words = sorted(
                (v for v in values if not fixes.contains_key(v)),
                key=sort_key)

            if new_fixes_path is not None:
                remaining = []
                for value in new_words:
                    lowered = value.lower()
                    suggestions = matcher.suggest(lowered, spelling_data, cancellation_token)
                    if suggestions:
                        fixes.add(lowered, [SpellingFix(s, SpellingFixKind.NONE) for s in suggestions])
                    else:
                        remaining.append(value)
                new_words = remaining

            WordSet.save_values(new_words_path, new_words, StringComparison.ORDINAL)
            result.words = sorted(WordSet(new_words, comparison=StringComparison.ORDINAL), key=sort_key)
            logger.info("Saved %d new word(s) to '%s'", len(result.words), new_words_path)

    if new_fixes_path is not None and len(fixes) > 0:
        items = fixes.items()
        save_fixes(new_fixes_path, items)
        result.fix_lines = render_fix_lines(items)
        logger.info("Saved %d new fix(es) to '%s'", len(result.fix_lines), new_fixes_path)

    return result
