"""
Spellfixer
==========
Spell checking and fixing for source code comments and identifiers.

Features:
- Word lists with case-sensitive words, multi-word sequences and fixes
- Parser for free text and identifiers (camelCase, acronyms, hyphens)
- Letter-swap and bounded edit-distance suggestions
- Fix loop that edits comments and renames symbols until it converges

Requires: pip install symspellpy
"""

__version__ = "1.0.0"

# Lazy imports
_fuzzy_matcher = None


def get_fuzzy_matcher():
    """Get the shared FuzzyMatcher configured from the global config (lazy loaded)."""
    global _fuzzy_matcher
    if _fuzzy_matcher is None:
        from .fuzzy import FuzzyMatcher
        _fuzzy_matcher = FuzzyMatcher.from_config()
    return _fuzzy_matcher


def load_spelling_data(config=None):
    """Load SpellingData from the word lists named in the config."""
    from .config import get_config
    from .data import SpellingData
    from .loader import WordListLoadOptions

    config = config or get_config()
    options = WordListLoadOptions.IGNORE_CASE if config.word_lists.ignore_case else WordListLoadOptions.NONE

    return SpellingData.load(
        config.word_lists.words,
        config.word_lists.fixes,
        min_word_length=config.parser.min_word_length,
        options=options)


def run(workspace, spelling_data=None, interaction=None, cancellation_token=None, config=None):
    """
    Fix ``workspace`` with options from the config and save new values.

    Returns:
        (results, spelling_data) - fix results and the learned SpellingData
    """
    from .base import NO_CANCELLATION
    from .config import get_config
    from . import fixer as fixer_module
    from .config_logging import StructuredLogger, configure_logging, get_logger
    from .fixer import SpellingFixer
    from .fuzzy import FuzzyMatcher
    from .options import SpellingFixerOptions
    from .persistence import save_new_values

    if config is None:
        config = get_config()
        matcher = get_fuzzy_matcher()
    else:
        matcher = FuzzyMatcher.from_config(config)

    configure_logging(config)
    fixer_module.logger = get_logger(fixer_module.__name__, config)
    token = cancellation_token or NO_CANCELLATION
    StructuredLogger.new_correlation_id()

    if spelling_data is None:
        spelling_data = load_spelling_data(config)

    fixer = SpellingFixer(
        workspace,
        spelling_data,
        SpellingFixerOptions.from_config(config),
        interaction=interaction,
        fuzzy_matcher=matcher)

    results = fixer.fix(token)

    if config.word_lists.new_words or config.word_lists.new_fixes:
        save_new_values(
            fixer.spelling_data,
            spelling_data.fixes,
            config.word_lists.new_words,
            config.word_lists.new_fixes,
            fixer.fuzzy_matcher,
            token)

    return results, fixer.spelling_data


def get_status() -> dict:
    """Get engine status."""
    status = {
        'version': __version__,
        'symspell': {'available': False},
    }

    try:
        from symspellpy import editdistance  # noqa: F401
        status['symspell']['available'] = True
    except ImportError as e:
        status['symspell']['error'] = str(e)

    return status
