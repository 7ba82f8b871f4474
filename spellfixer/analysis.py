"""
Analysis Collaborator Boundary
==============================
What the fix loop needs from whatever owns the source code: a stream of
diagnostics per pass, symbol resolution, renaming and text edits.

``SpellingWorkspace`` is the abstract collaborator. ``SpellingAnalysisContext``
is the helper a workspace uses to turn parser matches found in one source
unit into ``SpellingDiagnostic`` records with absolute spans and locations.

Solutions are opaque, immutable snapshots; every mutating operation
returns a new one and the fixer commits it with ``try_apply_changes``.
"""

import bisect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

from .base import (
    NO_CANCELLATION,
    CancellationToken,
    IdentifierToken,
    Location,
    SpellingDiagnostic,
    TextChange,
    TextSpan,
)
from .data import SpellingData
from .options import SpellingFixerOptions, SymbolVisibility
from .parser import SpellingParser


@dataclass(frozen=True)
class Symbol:
    """A declared entity that can be renamed. ``handle`` is workspace-private."""
    name: str
    visibility: SymbolVisibility
    handle: Any = None

    def is_visible(self, visibility_filter: SymbolVisibility) -> bool:
        return visibility_filter.allows(self.visibility)


@dataclass(frozen=True)
class RenameApplied:
    solution: Any


@dataclass(frozen=True)
class RenameConflict:
    reason: str


RenameOutcome = Union[RenameApplied, RenameConflict]


class SpellingWorkspace(ABC):
    """Source of diagnostics and sink of fixes for ``SpellingFixer``."""

    @property
    @abstractmethod
    def current_solution(self) -> Any:
        """The last committed solution."""

    @abstractmethod
    def analyze(
        self,
        solution: Any,
        spelling_data: SpellingData,
        options: SpellingFixerOptions,
        cancellation_token: CancellationToken = NO_CANCELLATION
    ) -> List[SpellingDiagnostic]:
        """Find every misspelling in ``solution``."""

    @abstractmethod
    def resolve_symbol(self, solution: Any, identifier: IdentifierToken) -> Optional[Symbol]:
        """The symbol declared by ``identifier``, or None when it no longer exists."""

    @abstractmethod
    def rename_symbol(self, solution: Any, symbol: Symbol, new_name: str) -> RenameOutcome:
        """Rename ``symbol`` and every reference to it."""

    @abstractmethod
    def with_text_changes(self, solution: Any, unit: str, changes: Sequence[TextChange]) -> Any:
        """Apply non-overlapping ``changes`` to ``unit`` as a single edit."""

    @abstractmethod
    def try_apply_changes(self, solution: Any) -> bool:
        """Commit ``solution``; False when it could not be applied."""


class SpellingAnalysisContext:
    """
    Collects diagnostics for one source unit.

    Offsets passed in are absolute positions in ``text``; the resulting
    diagnostics carry 1-based line/column locations.
    """

    def __init__(
        self,
        unit: str,
        text: str,
        spelling_data: SpellingData,
        options: Optional[SpellingFixerOptions] = None,
        cancellation_token: CancellationToken = NO_CANCELLATION
    ):
        self.unit = unit
        self.text = text
        self.options = options or SpellingFixerOptions()
        self.cancellation_token = cancellation_token
        self.parser = SpellingParser(spelling_data, self.options.parser_options, cancellation_token)
        self.diagnostics: List[SpellingDiagnostic] = []

        self._line_starts = [0]
        for i, ch in enumerate(text):
            if ch == '\n':
                self._line_starts.append(i + 1)

    def location(self, offset: int) -> Location:
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return Location(self.unit, line + 1, offset - self._line_starts[line] + 1)

    def analyze_text(self, value: str, start: int) -> List[SpellingDiagnostic]:
        """Analyze free text (e.g. a comment body) located at ``start``."""
        found = []

        for match in self.parser.analyze_text(value):
            found.append(self._create(match.value, start + match.index))

        self.diagnostics.extend(found)
        return found

    def analyze_identifier(
        self,
        identifier: IdentifierToken,
        prefix_length: int = 0,
        parent: Optional[str] = None
    ) -> List[SpellingDiagnostic]:
        """Analyze a declared name; diagnostics point back at ``identifier``."""
        found = []

        for match in self.parser.analyze_identifier(identifier.text, prefix_length):
            found.append(self._create(
                match.value,
                identifier.start + match.index,
                identifier=identifier,
                parent=parent))

        self.diagnostics.extend(found)
        return found

    def _create(
        self,
        value: str,
        start: int,
        identifier: Optional[IdentifierToken] = None,
        parent: Optional[str] = None
    ) -> SpellingDiagnostic:
        return SpellingDiagnostic(
            value=value,
            span=TextSpan(start, len(value)),
            unit=self.unit,
            location=self.location(start),
            is_symbol=identifier is not None,
            identifier=identifier,
            parent=parent,
        )
