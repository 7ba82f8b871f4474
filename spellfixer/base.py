"""
Spellfixer Base Records
=======================
Value types passed between the parser, the analysis collaborator and the
fix loop.
"""

import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .config_logging import OperationCanceledError


@dataclass(frozen=True)
class SpellingMatch:
    """An unrecognized token and its offset inside the analyzed string."""
    value: str
    index: int


@dataclass(frozen=True)
class TextSpan:
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class TextChange:
    """Replace ``span`` of a source unit with ``new_text``."""
    span: TextSpan
    new_text: str


@dataclass(frozen=True)
class Location:
    """Human-facing position of a diagnostic (1-based line and column)."""
    path: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


@dataclass(frozen=True)
class IdentifierToken:
    """An identifier occurrence; diagnostics are grouped by it."""
    unit: str
    start: int
    text: str

    @property
    def span(self) -> TextSpan:
        return TextSpan(self.start, len(self.text))


@dataclass(frozen=True)
class SpellingDiagnostic:
    """
    A misspelling reported by the analysis collaborator.

    For symbol diagnostics ``identifier`` is the token the value was cut
    from and ``offset`` the value's position inside it.
    """
    value: str
    span: TextSpan
    unit: str
    location: Location
    is_symbol: bool = False
    identifier: Optional[IdentifierToken] = None
    parent: Optional[str] = None

    @property
    def offset(self) -> int:
        if self.identifier is None:
            return 0
        return self.span.start - self.identifier.start

    @property
    def length(self) -> int:
        return self.span.length

    def is_applicable_fix(self, value: Optional[str]) -> bool:
        """Whether ``value`` may replace this diagnostic's text."""
        if not value or value == self.value:
            return False

        if self.is_symbol:
            if not all(ch.isalnum() or ch == '_' for ch in value):
                return False
            return not (self.offset == 0 and value[0].isdigit())

        return value.strip() == value and '\n' not in value and '\r' not in value

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'start': self.span.start,
            'length': self.span.length,
            'unit': self.unit,
            'location': str(self.location),
            'is_symbol': self.is_symbol,
            'identifier': self.identifier.text if self.identifier else None,
            'parent': self.parent,
        }


@dataclass(frozen=True)
class SpellingFixResult:
    """Record of one applied (or, in a dry run, proposed) fix."""
    old_value: str
    new_value: str
    location: Location
    old_identifier: Optional[str] = None
    new_identifier: Optional[str] = None

    @property
    def is_symbol(self) -> bool:
        return self.old_identifier is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'old_value': self.old_value,
            'new_value': self.new_value,
            'old_identifier': self.old_identifier,
            'new_identifier': self.new_identifier,
            'location': str(self.location),
        }


def summarize_results(results: List[SpellingFixResult]) -> Dict[Tuple[str, str], List[SpellingFixResult]]:
    """Group results by (old value, new value), ordered by old then new value."""
    grouped: Dict[Tuple[str, str], List[SpellingFixResult]] = defaultdict(list)
    for result in sorted(results, key=lambda r: (r.old_value, r.new_value)):
        grouped[(result.old_value, result.new_value)].append(result)
    return dict(grouped)


# =============================================================================
# CANCELLATION
# =============================================================================

class CancellationToken:
    """Cooperative cancellation flag shared between a caller and the engine."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def throw_if_cancellation_requested(self):
        if self._event.is_set():
            raise OperationCanceledError()


NO_CANCELLATION = CancellationToken()
