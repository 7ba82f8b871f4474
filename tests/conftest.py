"""
Shared fixtures for the spellfixer tests.
"""

import logging
import os
from typing import Dict, List, Optional, Sequence

import pytest

from spellfixer import config
from spellfixer.analysis import RenameConflict, SpellingAnalysisContext, SpellingWorkspace
from spellfixer.base import NO_CANCELLATION, TextChange
from spellfixer.config_logging import PACKAGE_LOGGER
from spellfixer.data import SpellingData
from spellfixer.fixlist import FixList
from spellfixer.wordset import WordSet


@pytest.fixture(autouse=True)
def clean_config(monkeypatch, tmp_path):
    """Isolate every test from SPELLFIX_* variables and config files."""
    for name in list(os.environ):
        if name.startswith('SPELLFIX_'):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('SPELLFIX_CONFIG', str(tmp_path / 'missing_config.json'))
    config.reset_config()
    yield
    config.reset_config()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def spelling_data() -> SpellingData:
    """Small dictionary with fixes for the usual suspects."""
    return SpellingData(
        words=WordSet(['receive', 'message', 'the', 'send', 'client', 'pass', 'value']),
        fixes=FixList.create({'recieve': ['receive'], 'mesage': ['message']}),
    )


class TextWorkspace(SpellingWorkspace):
    """
    Workspace of plain-text units; every unit is analyzed as one comment.

    ``apply_result`` controls what ``try_apply_changes`` reports.
    """

    def __init__(self, documents: Dict[str, str], apply_result: bool = True):
        self.documents = dict(documents)
        self.apply_result = apply_result
        self.analyze_calls = 0
        self.applied: List[Dict[str, str]] = []

    @property
    def current_solution(self):
        return self.documents

    def analyze(self, solution, spelling_data, options, cancellation_token=NO_CANCELLATION):
        self.analyze_calls += 1
        diagnostics = []
        for unit in sorted(solution):
            context = SpellingAnalysisContext(unit, solution[unit], spelling_data, options, cancellation_token)
            context.analyze_text(solution[unit], 0)
            diagnostics.extend(context.diagnostics)
        return diagnostics

    def resolve_symbol(self, solution, identifier):
        return None

    def rename_symbol(self, solution, symbol, new_name):
        return RenameConflict("not supported")

    def with_text_changes(self, solution, unit, changes: Sequence[TextChange]):
        text = solution[unit]
        for change in sorted(changes, key=lambda c: c.span.start, reverse=True):
            text = text[:change.span.start] + change.new_text + text[change.span.end:]
        result = dict(solution)
        result[unit] = text
        return result

    def try_apply_changes(self, solution) -> bool:
        if not self.apply_result:
            return False
        self.applied.append(solution)
        self.documents = dict(solution)
        return True


class StuckWorkspace(TextWorkspace):
    """Reports the diagnostics of the first analysis forever."""

    def __init__(self, documents: Dict[str, str]):
        super().__init__(documents)
        self._first: Optional[list] = None

    def analyze(self, solution, spelling_data, options, cancellation_token=NO_CANCELLATION):
        if self._first is None:
            self._first = super().analyze(solution, spelling_data, options, cancellation_token)
        else:
            self.analyze_calls += 1
        return list(self._first)


@pytest.fixture
def text_workspace():
    """Factory for TextWorkspace instances."""
    return TextWorkspace


@pytest.fixture
def stuck_workspace():
    """Factory for StuckWorkspace instances."""
    return StuckWorkspace

