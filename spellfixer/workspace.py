"""
Python Source Workspace
=======================
A ``SpellingWorkspace`` over in-memory Python modules.

- Comments are checked as free text.
- Names declared by ``def`` and ``class`` are checked as identifiers and
  can be renamed; a rename replaces every NAME token with the old name in
  every module.
- Leading underscores decide visibility: ``__name`` is private, ``_name``
  is internal, everything else (dunders included) is public. Dunder
  names are never checked.
- Generated modules (``*_pb2.py``, ``*_generated.py``, a ``@generated`` or
  ``<auto-generated`` marker near the top) are skipped unless
  ``include_generated_code`` is set.

Modules are analyzed in parallel; the solution itself is an immutable
snapshot, so workers only ever read it.
"""

import io
import keyword
import logging
import re
import tokenize
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .analysis import (
    RenameApplied,
    RenameConflict,
    RenameOutcome,
    SpellingAnalysisContext,
    SpellingWorkspace,
    Symbol,
)
from .base import NO_CANCELLATION, CancellationToken, IdentifierToken, SpellingDiagnostic, TextChange
from .data import SpellingData
from .options import SpellingFixerOptions, SymbolVisibility
from .wordset import PathLike

logger = logging.getLogger(__name__)

_GENERATED_FILE_RE = re.compile(r'(_pb2|_pb2_grpc|_generated|\.generated)\.py$', re.IGNORECASE)
_GENERATED_MARKER_RE = re.compile(r'@generated|<auto-generated|do not edit', re.IGNORECASE)
_GENERATED_HEADER_LINES = 10

_DECLARATION_KEYWORDS = frozenset(('def', 'class'))


class InMemorySolution:
    """Immutable mapping of unit name (relative path) to module text."""

    __slots__ = ('_documents',)

    def __init__(self, documents: Mapping[str, str]):
        self._documents = MappingProxyType(dict(documents))

    @property
    def units(self) -> List[str]:
        return sorted(self._documents)

    @property
    def documents(self) -> Mapping[str, str]:
        return self._documents

    def get_text(self, unit: str) -> str:
        return self._documents[unit]

    def with_text(self, unit: str, text: str) -> 'InMemorySolution':
        documents = dict(self._documents)
        documents[unit] = text
        return InMemorySolution(documents)

    def __repr__(self) -> str:
        return f"InMemorySolution(units={len(self._documents)})"


def is_generated(unit: str, text: str) -> bool:
    if _GENERATED_FILE_RE.search(unit):
        return True
    header = text.splitlines()[:_GENERATED_HEADER_LINES]
    return any(line.lstrip().startswith('#') and _GENERATED_MARKER_RE.search(line) for line in header)


def get_visibility(name: str) -> SymbolVisibility:
    if name.startswith('__') and name.endswith('__'):
        return SymbolVisibility.PUBLIC
    if name.startswith('__'):
        return SymbolVisibility.PRIVATE
    if name.startswith('_'):
        return SymbolVisibility.INTERNAL
    return SymbolVisibility.PUBLIC


class PythonSourceWorkspace(SpellingWorkspace):

    def __init__(self, documents: Mapping[str, str]):
        self._solution = InMemorySolution(documents)

    @classmethod
    def from_directory(cls, directory: PathLike, pattern: str = '*.py') -> 'PythonSourceWorkspace':
        """Load every module under ``directory``; units are relative POSIX paths."""
        root = Path(directory)
        documents = {}
        for path in sorted(root.rglob(pattern)):
            if path.is_file():
                documents[path.relative_to(root).as_posix()] = path.read_text(encoding='utf-8')
        logger.debug("Loaded %d module(s) from '%s'", len(documents), root)
        return cls(documents)

    def save(self, directory: PathLike) -> List[str]:
        """Write modules that differ from the files on disk; returns their units."""
        root = Path(directory)
        written = []
        for unit in self._solution.units:
            path = root / unit
            text = self._solution.get_text(unit)
            if path.is_file() and path.read_text(encoding='utf-8') == text:
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding='utf-8')
            written.append(unit)
        return written

    # -------------------------------------------------------------------------
    # SpellingWorkspace
    # -------------------------------------------------------------------------

    @property
    def current_solution(self) -> InMemorySolution:
        return self._solution

    def analyze(
        self,
        solution: InMemorySolution,
        spelling_data: SpellingData,
        options: SpellingFixerOptions,
        cancellation_token: CancellationToken = NO_CANCELLATION
    ) -> List[SpellingDiagnostic]:
        units = []
        for unit in solution.units:
            text = solution.get_text(unit)
            if not options.include_generated_code and is_generated(unit, text):
                logger.debug("Skipping generated module '%s'", unit)
                continue
            units.append((unit, text))

        with ThreadPoolExecutor(max_workers=max(1, options.max_workers)) as executor:
            futures = [
                executor.submit(self._analyze_unit, unit, text, spelling_data, options, cancellation_token)
                for unit, text in units
            ]
            diagnostics: List[SpellingDiagnostic] = []
            for future in futures:
                diagnostics.extend(future.result())

        return diagnostics

    def _analyze_unit(
        self,
        unit: str,
        text: str,
        spelling_data: SpellingData,
        options: SpellingFixerOptions,
        cancellation_token: CancellationToken
    ) -> List[SpellingDiagnostic]:
        cancellation_token.throw_if_cancellation_requested()

        context = SpellingAnalysisContext(unit, text, spelling_data, options, cancellation_token)
        offsets = _LineOffsets(text)

        for kind, name, start in _scan(unit, text, offsets):
            if kind == tokenize.COMMENT:
                context.analyze_text(name[1:], start + 1)
            elif not (name.startswith('__') and name.endswith('__')):
                prefix_length = len(name) - len(name.lstrip('_'))
                context.analyze_identifier(IdentifierToken(unit, start, name), prefix_length)

        return context.diagnostics

    def resolve_symbol(self, solution: InMemorySolution, identifier: IdentifierToken) -> Optional[Symbol]:
        if identifier.unit not in solution.documents:
            return None

        text = solution.get_text(identifier.unit)

        for kind, name, start in _scan(identifier.unit, text, _LineOffsets(text)):
            if kind == tokenize.NAME and start == identifier.start and name == identifier.text:
                return Symbol(name, get_visibility(name), (identifier.unit, start))

        return None

    def rename_symbol(self, solution: InMemorySolution, symbol: Symbol, new_name: str) -> RenameOutcome:
        if not new_name.isidentifier() or keyword.iskeyword(new_name):
            return RenameConflict(f"'{new_name}' is not a valid identifier")

        occurrences: Dict[str, List[TextChange]] = {}

        for unit in solution.units:
            text = solution.get_text(unit)
            try:
                tokens = list(_name_tokens(text))
            except (tokenize.TokenError, SyntaxError) as e:
                return RenameConflict(f"Cannot tokenize '{unit}': {e}")

            offsets = _LineOffsets(text)
            for token in tokens:
                if token.string == new_name:
                    return RenameConflict(f"Name '{new_name}' already exists in '{unit}'")
                if token.string == symbol.name:
                    start = offsets.offset(token.start)
                    occurrences.setdefault(unit, []).append(
                        TextChange(IdentifierToken(unit, start, token.string).span, new_name))

        for unit, changes in occurrences.items():
            solution = self.with_text_changes(solution, unit, changes)

        return RenameApplied(solution)

    def with_text_changes(
        self,
        solution: InMemorySolution,
        unit: str,
        changes: Sequence[TextChange]
    ) -> InMemorySolution:
        text = solution.get_text(unit)
        last_start = len(text) + 1

        for change in sorted(changes, key=lambda c: c.span.start, reverse=True):
            if change.span.end > last_start:
                raise ValueError(f"Overlapping text changes in '{unit}' at {change.span.start}")
            text = text[:change.span.start] + change.new_text + text[change.span.end:]
            last_start = change.span.start

        return solution.with_text(unit, text)

    def try_apply_changes(self, solution: InMemorySolution) -> bool:
        if not isinstance(solution, InMemorySolution):
            return False
        self._solution = solution
        return True


class _LineOffsets:
    """Converts tokenize (row, col) positions to absolute offsets."""

    def __init__(self, text: str):
        self._starts = [0]
        for line in io.StringIO(text):
            self._starts.append(self._starts[-1] + len(line))

    def offset(self, position: Tuple[int, int]) -> int:
        row, col = position
        return self._starts[row - 1] + col


def _name_tokens(text: str) -> Iterator[tokenize.TokenInfo]:
    for token in tokenize.generate_tokens(io.StringIO(text).readline):
        if token.type == tokenize.NAME:
            yield token


def _scan(unit: str, text: str, offsets: _LineOffsets) -> Iterator[Tuple[int, str, int]]:
    """Yield (token type, text, offset) for comments and declared names."""
    previous: Optional[str] = None

    try:
        for token in tokenize.generate_tokens(io.StringIO(text).readline):
            if token.type == tokenize.COMMENT:
                yield token.type, token.string, offsets.offset(token.start)
            elif token.type == tokenize.NAME:
                if previous in _DECLARATION_KEYWORDS:
                    yield token.type, token.string, offsets.offset(token.start)
                previous = token.string
            elif token.type not in (tokenize.NL, tokenize.NEWLINE, tokenize.INDENT, tokenize.DEDENT):
                previous = None
    except (tokenize.TokenError, SyntaxError) as e:
        logger.warning("Cannot tokenize '%s': %s", unit, e)
