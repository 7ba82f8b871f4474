"""
Spelling Fixer
==============
The fix loop. Analyzes a workspace, resolves a correction for every
misspelling, applies corrections and re-analyzes until nothing is left.

- Comments are fixed in the first pass only, with one text edit per unit.
- Identifiers are fixed by renaming the declaring symbol; all sub-word
  corrections of one identifier are folded into a single new name.
- Every value that cannot be fixed is ignored for the rest of the run.
- Accepted corrections are learned (new word, new fix) so the same
  misspelling is free the next time it shows up.

Usage:
    fixer = SpellingFixer(workspace, spelling_data, SpellingFixerOptions.from_config())
    results = fixer.fix()
    spelling_data = fixer.spelling_data
"""

from collections import OrderedDict
from typing import Dict, FrozenSet, List, Optional, Tuple

from .analysis import RenameApplied, SpellingWorkspace
from .base import (
    NO_CANCELLATION,
    CancellationToken,
    IdentifierToken,
    SpellingDiagnostic,
    SpellingFixResult,
    TextChange,
    summarize_results,
)
from .config_logging import ConvergenceError, get_logger
from .data import SpellingData
from .fixlist import SpellingFix, SpellingFixKind
from .fuzzy import FuzzyMatcher
from .interaction import InteractionPort
from .options import SpellingFixerOptions
from .text import TextCasing, get_text_casing, replace_range, set_text_casing, text_casing_equals

logger = get_logger(__name__)

DiagnosticKey = Tuple[str, int, int, str]


class SpellingFixer:
    """
    Drives a SpellingWorkspace to a state without misspellings.

    ``spelling_data`` always holds the newest knowledge: after ``fix()``
    it includes learned words, learned fixes and ignored values.
    """

    def __init__(
        self,
        workspace: SpellingWorkspace,
        spelling_data: SpellingData,
        options: Optional[SpellingFixerOptions] = None,
        interaction: Optional[InteractionPort] = None,
        fuzzy_matcher: Optional[FuzzyMatcher] = None
    ):
        self.workspace = workspace
        self.spelling_data = spelling_data
        self.options = options or SpellingFixerOptions()
        self.interaction = interaction
        self.fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()

        if self.options.interactive and self.interaction is None:
            from .interaction import ConsoleInteraction
            self.interaction = ConsoleInteraction()

    def fix(self, cancellation_token: CancellationToken = NO_CANCELLATION) -> List[SpellingFixResult]:
        results: List[SpellingFixResult] = []

        with logger.log_operation("fix", dry_run=self.options.dry_run, auto_fix=self.options.auto_fix):
            comments_fixed = False
            previous_keys: Optional[FrozenSet[DiagnosticKey]] = None
            previous_fixed = True
            iteration = 0

            while True:
                cancellation_token.throw_if_cancellation_requested()
                iteration += 1

                diagnostics = self.workspace.analyze(
                    self.workspace.current_solution,
                    self.spelling_data,
                    self.options,
                    cancellation_token)

                logger.debug("Analysis finished", iteration=iteration, diagnostics=len(diagnostics))

                if not diagnostics:
                    break

                keys = frozenset(_diagnostic_key(d) for d in diagnostics)

                if keys == previous_keys and not previous_fixed:
                    message = "Fix loop made no progress; the same diagnostics were reported again"
                    if self.options.strict:
                        raise ConvergenceError(message, diagnostic_count=len(diagnostics))
                    logger.error(message, diagnostic_count=len(diagnostics), iteration=iteration)
                    break

                count = len(results)

                if not comments_fixed:
                    comment_results = self._fix_comments(diagnostics, cancellation_token)
                    results.extend(comment_results)
                    comments_fixed = True

                    if comment_results and not self.options.dry_run:
                        # symbol spans are stale once comment edits are committed
                        previous_keys = keys
                        previous_fixed = True
                        continue
                else:
                    leftover = [d.value for d in diagnostics if not d.is_symbol]
                    if leftover:
                        self.spelling_data = self.spelling_data.add_ignored_values(leftover)

                results.extend(self._fix_symbols(diagnostics, cancellation_token))

                if self.options.dry_run:
                    break

                previous_keys = keys
                previous_fixed = len(results) > count

        self._log_summary(results)

        return results

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    def _fix_comments(
        self,
        diagnostics: List[SpellingDiagnostic],
        cancellation_token: CancellationToken
    ) -> List[SpellingFixResult]:
        results: List[SpellingFixResult] = []
        by_unit: Dict[str, List[SpellingDiagnostic]] = OrderedDict()

        for diagnostic in diagnostics:
            if not diagnostic.is_symbol:
                by_unit.setdefault(diagnostic.unit, []).append(diagnostic)

        solution = self.workspace.current_solution
        apply_changes = False

        for unit, unit_diagnostics in by_unit.items():
            cancellation_token.throw_if_cancellation_requested()

            changes: List[TextChange] = []

            for diagnostic in sorted(unit_diagnostics, key=lambda d: d.span.start):
                cancellation_token.throw_if_cancellation_requested()

                if self.spelling_data.ignored_values.contains(diagnostic.value):
                    continue

                logger.debug("Misspelled word", value=diagnostic.value, location=str(diagnostic.location))

                fix = self._get_fix(diagnostic)

                if fix is None:
                    self.spelling_data = self.spelling_data.add_ignored_value(diagnostic.value)
                    continue

                logger.info(f"Replace '{diagnostic.value}' with '{fix.value}'",
                            location=str(diagnostic.location))

                if not self.options.dry_run:
                    changes.append(TextChange(diagnostic.span, fix.value))

                results.append(SpellingFixResult(diagnostic.value, fix.value, diagnostic.location))

                self._process_fix(diagnostic, fix)

            if changes:
                solution = self.workspace.with_text_changes(solution, unit, changes)
                apply_changes = True

        if apply_changes and not self.workspace.try_apply_changes(solution):
            logger.warning("Cannot apply comment changes")

        return results

    # -------------------------------------------------------------------------
    # Symbols
    # -------------------------------------------------------------------------

    def _fix_symbols(
        self,
        diagnostics: List[SpellingDiagnostic],
        cancellation_token: CancellationToken
    ) -> List[SpellingFixResult]:
        results: List[SpellingFixResult] = []
        groups: Dict[IdentifierToken, List[Optional[SpellingDiagnostic]]] = OrderedDict()

        for diagnostic in diagnostics:
            if diagnostic.is_symbol and diagnostic.identifier is not None:
                groups.setdefault(diagnostic.identifier, []).append(diagnostic)

        ordered = sorted(groups.items(), key=lambda item: (item[0].unit, -item[0].start))

        for _, group in ordered:
            group.sort(key=lambda d: d.span.start)

        analyzed_solution = self.workspace.current_solution

        for identifier, group in ordered:
            cancellation_token.throw_if_cancellation_requested()

            pending = [d for d in group if d is not None]
            if not pending:
                continue

            symbol = self.workspace.resolve_symbol(self.workspace.current_solution, identifier)

            if symbol is None:
                if self.workspace.current_solution is not analyzed_solution:
                    logger.debug("Identifier moved by an earlier rename; retrying next pass",
                                 identifier=identifier.text, unit=identifier.unit)
                    continue
                logger.debug("Cannot find symbol", identifier=identifier.text, unit=identifier.unit)
                self._ignore(pending)
                continue

            if not symbol.is_visible(self.options.symbol_visibility):
                self._ignore(pending)
                continue

            fixes: List[Tuple[SpellingDiagnostic, SpellingFix]] = []
            new_name = identifier.text
            index_offset = 0

            for diagnostic in group:
                if diagnostic is None:
                    continue

                logger.debug("Misspelled word", value=diagnostic.value, location=str(diagnostic.location))

                fix = self._get_fix(diagnostic)

                if fix is None:
                    self.spelling_data = self.spelling_data.add_ignored_value(diagnostic.value)
                    self._drop_everywhere(diagnostic.value, ordered)
                    continue

                logger.info(f"Replace '{diagnostic.value}' with '{fix.value}'",
                            location=str(diagnostic.location))

                fixes.append((diagnostic, fix))
                new_name = replace_range(new_name, fix.value, diagnostic.offset + index_offset, diagnostic.length)
                index_offset += len(fix.value) - diagnostic.length

            if new_name == identifier.text:
                continue

            if not self.options.dry_run:
                logger.info(f"Rename '{identifier.text}' to '{new_name}'", location=str(fixes[0][0].location))

                outcome = self.workspace.rename_symbol(self.workspace.current_solution, symbol, new_name)

                if not isinstance(outcome, RenameApplied):
                    logger.warning(f"Cannot rename '{symbol.name}': {outcome.reason}", new_name=new_name)
                    self._ignore(pending)
                    continue

                if not self.workspace.try_apply_changes(outcome.solution):
                    logger.warning(f"Cannot apply rename of '{symbol.name}'", new_name=new_name)
                    self._ignore(pending)
                    continue

            for diagnostic, fix in fixes:
                results.append(SpellingFixResult(
                    diagnostic.value,
                    fix.value,
                    diagnostic.location,
                    old_identifier=identifier.text,
                    new_identifier=new_name))

                self._process_fix(diagnostic, fix)

        return results

    def _drop_everywhere(self, value: str, ordered) -> None:
        comparison = self.spelling_data.ignored_values.comparison
        for _, group in ordered:
            for k, other in enumerate(group):
                if other is not None and comparison.equals(other.value, value):
                    group[k] = None

    def _ignore(self, diagnostics: List[SpellingDiagnostic]):
        self.spelling_data = self.spelling_data.add_ignored_values(d.value for d in diagnostics)

    # -------------------------------------------------------------------------
    # Fix resolution
    # -------------------------------------------------------------------------

    def _get_fix(self, diagnostic: SpellingDiagnostic) -> Optional[SpellingFix]:
        """A correction for ``diagnostic``, or None to leave it as is."""
        value = diagnostic.value

        if self.options.auto_fix:
            casing = get_text_casing(value)

            if casing != TextCasing.MIXED:
                for fix in self.spelling_data.fixes.get_ordered(value):
                    if (get_text_casing(fix.value) != TextCasing.MIXED
                            and diagnostic.is_applicable_fix(fix.value)):
                        return fix.with_value(set_text_casing(fix.value, casing))

        if self.options.interactive and self.interaction is not None:
            suggestions = self.fuzzy_matcher.suggest(value, self.spelling_data)

            while True:
                replacement = self.interaction.read_replacement(value, suggestions)

                if not replacement or replacement == value:
                    break

                if diagnostic.is_applicable_fix(replacement):
                    return SpellingFix(replacement, SpellingFixKind.USER)

                self.interaction.notify("Replacement is invalid.")

        return None

    def _process_fix(self, diagnostic: SpellingDiagnostic, fix: SpellingFix):
        if (fix.kind != SpellingFixKind.PREDEFINED
                and (fix.kind != SpellingFixKind.USER or text_casing_equals(diagnostic.value, fix.value))):
            self.spelling_data = self.spelling_data.add_fix(diagnostic.value, fix)

        self.spelling_data = self.spelling_data.add_word(fix.value)

    def _log_summary(self, results: List[SpellingFixResult]):
        for (old_value, new_value), group in summarize_results(results).items():
            renames = sorted({(r.old_identifier, r.new_identifier) for r in group if r.is_symbol})
            logger.info(f"{old_value} = {new_value}", count=len(group),
                        renames=[f"{old} -> {new}" for old, new in renames])


def _diagnostic_key(diagnostic: SpellingDiagnostic) -> DiagnosticKey:
    return (diagnostic.unit, diagnostic.span.start, diagnostic.span.length, diagnostic.value)
