"""
Options shared by the analysis collaborator and the fix loop.
"""

from dataclasses import dataclass
from enum import Enum
from .config_logging import ConfigError
from .parser import SpellingParserOptions
from .text import SplitMode


class SymbolVisibility(Enum):
    """Visibility of a declared symbol, and the filter of which symbols may be renamed."""
    PUBLIC = "public"
    INTERNAL = "internal"
    PRIVATE = "private"

    def allows(self, visibility: 'SymbolVisibility') -> bool:
        """
        Whether a symbol with ``visibility`` passes this filter.

        PUBLIC admits every symbol, INTERNAL admits internal and private
        ones, PRIVATE admits only private ones.
        """
        if self is SymbolVisibility.PUBLIC:
            return True
        if self is SymbolVisibility.INTERNAL:
            return visibility in (SymbolVisibility.INTERNAL, SymbolVisibility.PRIVATE)
        return visibility is SymbolVisibility.PRIVATE


@dataclass(frozen=True)
class SpellingFixerOptions:
    split_mode: SplitMode = SplitMode.CASE_AND_HYPHEN
    min_word_length: int = 3
    symbol_visibility: SymbolVisibility = SymbolVisibility.PUBLIC
    include_generated_code: bool = False
    interactive: bool = False
    dry_run: bool = False
    auto_fix: bool = True
    strict: bool = False
    max_workers: int = 4

    @property
    def parser_options(self) -> SpellingParserOptions:
        return SpellingParserOptions(self.split_mode, self.min_word_length)

    @classmethod
    def from_config(cls, config=None) -> 'SpellingFixerOptions':
        if config is None:
            from .config import get_config
            config = get_config()

        try:
            split_mode = SplitMode(config.parser.split_mode.lower())
            visibility = SymbolVisibility(config.fixer.symbol_visibility.lower())
        except ValueError as e:
            raise ConfigError(f"Invalid option value: {e}")

        return cls(
            split_mode=split_mode,
            min_word_length=config.parser.min_word_length,
            symbol_visibility=visibility,
            include_generated_code=config.fixer.include_generated_code,
            interactive=config.fixer.interactive,
            dry_run=config.fixer.dry_run,
            auto_fix=config.fixer.auto_fix,
            strict=config.fixer.strict,
            max_workers=config.fixer.max_workers,
        )
