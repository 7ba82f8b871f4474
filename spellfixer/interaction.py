"""
Interaction port used by the fix loop in interactive mode.

The fixer never touches the terminal itself; it asks an InteractionPort
for a replacement. ``ConsoleInteraction`` reads from stdin,
``ScriptedInteraction`` replays prepared answers (tests, batch runs).
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence


class InteractionPort(ABC):

    @abstractmethod
    def read_replacement(self, value: str, suggestions: Sequence[str] = ()) -> Optional[str]:
        """
        Ask for a replacement of ``value``.

        Returning ``value`` unchanged, an empty string or None means "skip".
        """

    @abstractmethod
    def notify(self, message: str):
        """Show a message to the user."""


class ConsoleInteraction(InteractionPort):
    """Prompts on the terminal; an empty answer keeps the original value."""

    def __init__(self, indent: str = "    "):
        self.indent = indent

    def read_replacement(self, value: str, suggestions: Sequence[str] = ()) -> Optional[str]:
        if suggestions:
            print(f"{self.indent}Suggestions: {', '.join(suggestions[:5])}")
        try:
            answer = input(f"{self.indent}Replacement for '{value}' [{value}]: ").strip()
        except EOFError:
            return None
        return answer or value

    def notify(self, message: str):
        print(f"{self.indent}{message}")


class ScriptedInteraction(InteractionPort):
    """Answers prompts from a fixed list; once exhausted every prompt is skipped."""

    def __init__(self, answers: Iterable[Optional[str]]):
        self._answers: List[Optional[str]] = list(answers)
        self.prompts: List[str] = []
        self.messages: List[str] = []

    def read_replacement(self, value: str, suggestions: Sequence[str] = ()) -> Optional[str]:
        self.prompts.append(value)
        if not self._answers:
            return None
        return self._answers.pop(0)

    def notify(self, message: str):
        self.messages.append(message)
