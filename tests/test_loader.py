"""
Tests for the word list loader
==============================
Routing of words, sequences and fixes into the three structures.
"""

from spellfixer import loader
from spellfixer.loader import WordListLoadOptions
from spellfixer.wordset import StringComparison, WordSequence


LINES = [
    '# sample list',
    'receive',
    'GitHub',
    'NaN',
    'et al',
    'New York',
    'recieve=receive',
    'ab=abc',
    'an',
]


class TestLoaderRouting:
    """Tests for where each line ends up."""

    def test_lowercase_words(self):
        """Test that all-lowercase words go to the case-insensitive set."""
        result = loader.load_lines(LINES, min_word_length=3)
        assert result.words.contains('RECEIVE')
        assert result.words.comparison is StringComparison.IGNORE_CASE

    def test_case_sensitive_words(self):
        """Test that any non-lowercase letter routes to the case-sensitive set."""
        result = loader.load_lines(LINES, min_word_length=3)
        assert result.case_sensitive_words.contains('GitHub')
        assert not result.case_sensitive_words.contains('github')
        assert not result.words.contains('GitHub')
        assert result.case_sensitive_words.comparison is StringComparison.ORDINAL

    def test_sequences(self):
        """Test that sequences are routed by the casing of the whole line."""
        result = loader.load_lines(LINES, min_word_length=3)
        assert result.words.get_sequences('et') == (WordSequence(['et', 'al']),)
        assert result.case_sensitive_words.get_sequences('New') == (WordSequence(['New', 'York']),)

    def test_fixes_and_min_length(self):
        """Test that fix keys shorter than the minimum are dropped."""
        result = loader.load_lines(LINES, min_word_length=3)
        assert result.fixes.contains_key('recieve')
        assert not result.fixes.contains_key('ab')
        assert not result.words.contains('an')

    def test_ignore_case_option(self):
        """Test that IGNORE_CASE puts every word in the case-insensitive set."""
        result = loader.load_lines(LINES, min_word_length=3, options=WordListLoadOptions.IGNORE_CASE)
        assert result.words.contains('github')
        assert len(result.case_sensitive_words) == 0

    def test_load_files(self, tmp_path):
        """Test loading several files and a directory in one pass."""
        (tmp_path / 'words.txt').write_text('receive\nmessage\n', encoding='utf-8')
        fixes_dir = tmp_path / 'fixes'
        fixes_dir.mkdir()
        (fixes_dir / 'fixes.txt').write_text('mesage=message\n', encoding='utf-8')

        result = loader.load([tmp_path / 'words.txt', fixes_dir])

        assert result.words.contains('message')
        assert [f.value for f in result.fixes.get_ordered('mesage')] == ['message']
