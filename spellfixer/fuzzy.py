"""
Fuzzy correction candidates.

Two strategies, tried in order:

1. Letter swap - transpose each adjacent pair of letters and keep the
   results that are dictionary words ("recieve" -> "receive").
2. Bounded fuzzy search - only for words of at least ``min_fuzzy_length``
   characters. Dictionary words that share the first or the last letter
   (found through the CharIndexMaps) are compared with an optimal string
   alignment (Damerau-Levenshtein) distance and kept when within
   ``max_distance``.

The second strategy runs only when the first finds nothing.

Requires: pip install symspellpy
"""

import logging
from typing import List, Optional, Set

from symspellpy.editdistance import DistanceAlgorithm, EditDistance

from .base import NO_CANCELLATION, CancellationToken
from .data import SpellingData
from .wordset import sort_key

logger = logging.getLogger(__name__)

DEFAULT_MAX_DISTANCE = 2
DEFAULT_MIN_FUZZY_LENGTH = 8

_CANCELLATION_CHECK_INTERVAL = 512


class FuzzyMatcher:
    """Proposes corrections for an unknown word from a SpellingData's words."""

    def __init__(
        self,
        max_distance: int = DEFAULT_MAX_DISTANCE,
        min_fuzzy_length: int = DEFAULT_MIN_FUZZY_LENGTH
    ):
        self.max_distance = max_distance
        self.min_fuzzy_length = min_fuzzy_length
        self._edit_distance = EditDistance(DistanceAlgorithm.DAMERAU_OSA)

    @classmethod
    def from_config(cls, config=None) -> 'FuzzyMatcher':
        if config is None:
            from .config import get_config
            config = get_config()
        return cls(config.fuzzy.max_edit_distance, config.fuzzy.min_word_length)

    def suggest(
        self,
        value: str,
        spelling_data: SpellingData,
        cancellation_token: CancellationToken = NO_CANCELLATION
    ) -> List[str]:
        """Letter-swap candidates, or fuzzy candidates when there are none."""
        candidates = self.swap_letters(value, spelling_data)

        if not candidates:
            candidates = self.fuzzy(value, spelling_data, cancellation_token)

        return candidates

    def swap_letters(self, value: str, spelling_data: SpellingData) -> List[str]:
        results: List[str] = []
        seen: Set[str] = set()

        for i in range(len(value) - 1):
            first, second = value[i], value[i + 1]

            if first == second or not (first.isalpha() and second.isalpha()):
                continue

            swapped = value[:i] + second + first + value[i + 2:]

            if swapped not in seen and spelling_data.is_word(swapped):
                seen.add(swapped)
                results.append(swapped)

        return results

    def fuzzy(
        self,
        value: str,
        spelling_data: SpellingData,
        cancellation_token: CancellationToken = NO_CANCELLATION
    ) -> List[str]:
        if len(value) < self.min_fuzzy_length:
            return []

        probe = value.lower()

        candidates = (spelling_data.char_index_map.get(probe[0], 0)
                      | spelling_data.reversed_char_index_map.get(probe[-1], 0))

        scored = []

        for i, word in enumerate(sorted(candidates, key=sort_key)):
            if i % _CANCELLATION_CHECK_INTERVAL == 0:
                cancellation_token.throw_if_cancellation_requested()

            if abs(len(word) - len(probe)) > self.max_distance:
                continue

            distance = self.distance(probe, word.lower())

            if distance is not None and distance > 0:
                scored.append((distance, word))

        scored.sort(key=lambda item: (item[0], sort_key(item[1])))

        logger.debug("Fuzzy '%s': %d of %d candidates within %d",
                     value, len(scored), len(candidates), self.max_distance)

        return [word for _, word in scored]

    def distance(self, value1: str, value2: str) -> Optional[int]:
        """Edit distance, or None when it exceeds ``max_distance``."""
        result = self._edit_distance.compare(value1, value2, self.max_distance)
        return None if result < 0 else result
