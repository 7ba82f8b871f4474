"""
Tests for the Spelling Parser
=============================
Casing helpers, identifier splitting, free-text and identifier analysis
and the nonsensical-word detector.
"""

import pytest

from spellfixer.base import CancellationToken, SpellingMatch
from spellfixer.config_logging import OperationCanceledError
from spellfixer.data import SpellingData
from spellfixer.parser import (
    SpellingParser,
    SpellingParserOptions,
    is_allowed_nonsensical_word,
    match_special_word,
)
from spellfixer.text import (
    SplitMode,
    TextCasing,
    get_text_casing,
    set_text_casing,
    split_words,
    text_casing_equals,
)
from spellfixer.wordset import WordSequence, WordSet


@pytest.fixture
def data() -> SpellingData:
    return SpellingData(words=WordSet(
        ['receive', 'message', 'the', 'my', 'client', 'http', 'value', 'for', 'see', 'well', 'known'],
        [WordSequence(['et', 'al'])]))


@pytest.fixture
def split_parser(data) -> SpellingParser:
    return SpellingParser(data, SpellingParserOptions(SplitMode.CASE_AND_HYPHEN, 3))


class TestTextCasing:
    """Tests for casing classification."""

    @pytest.mark.parametrize('value,expected', [
        ('hello', TextCasing.LOWER),
        ('HELLO', TextCasing.UPPER),
        ('Hello', TextCasing.FIRST_UPPER),
        ('hElLo', TextCasing.MIXED),
        ('123', TextCasing.MIXED),
    ])
    def test_get_text_casing(self, value, expected):
        """Test classification of common shapes."""
        assert get_text_casing(value) == expected

    def test_set_text_casing(self):
        """Test re-casing a correction to the original's casing."""
        assert set_text_casing('receive', TextCasing.UPPER) == 'RECEIVE'
        assert set_text_casing('receive', TextCasing.FIRST_UPPER) == 'Receive'
        assert set_text_casing('Receive', TextCasing.LOWER) == 'receive'
        assert set_text_casing('reCeive', TextCasing.MIXED) == 'reCeive'

    def test_text_casing_equals(self):
        """Test casing comparison."""
        assert text_casing_equals('Teh', 'The')
        assert not text_casing_equals('teh', 'The')


class TestSplitWords:
    """Tests for identifier splitting."""

    def test_acronym_run_kept_intact(self):
        """Test myHTTPClient -> my, HTTP, Client."""
        assert split_words('myHTTPClient') == [('my', 0), ('HTTP', 2), ('Client', 6)]

    def test_trailing_acronym(self):
        """Test that an acronym at the end stays whole."""
        assert split_words('parseURL') == [('parse', 0), ('URL', 5)]

    def test_separators(self):
        """Test that digits, underscores and hyphens separate parts."""
        assert split_words('snake_case2value-x') == [('snake', 0), ('case', 6), ('value', 11), ('x', 17)]

    def test_apostrophe(self):
        """Test that an apostrophe between lowercase letters is kept."""
        assert split_words("don't") == [("don't", 0)]


class TestAnalyzeText:
    """Tests for free-text analysis."""

    def test_recieve_the_mesage(self, data):
        """Test the two misspellings and their offsets."""
        parser = SpellingParser(data)
        assert parser.analyze_text('Recieve the mesage') == [
            SpellingMatch('Recieve', 0),
            SpellingMatch('mesage', 12),
        ]

    def test_urls_skipped(self, data):
        """Test that URLs are not checked."""
        parser = SpellingParser(data)
        assert parser.analyze_text('see https://exmaple.com/pth for the mesage') == [
            SpellingMatch('mesage', 36),
        ]

    def test_sequence_consumes_words(self, data):
        """Test that a known sequence hides its words."""
        parser = SpellingParser(data)
        assert parser.analyze_text('Smith et al') == [SpellingMatch('Smith', 0)]

    def test_short_words_skipped(self, data):
        """Test the minimum word length."""
        parser = SpellingParser(data, SpellingParserOptions(min_word_length=5))
        assert parser.analyze_text('the xyzw message') == []

    def test_hyphenated_word_without_split(self, data):
        """Test that hyphenated words are one match without split mode."""
        parser = SpellingParser(data)
        assert parser.analyze_text('a well-knwn value') == [SpellingMatch('well-knwn', 2)]

    def test_hyphenated_word_with_split(self, split_parser):
        """Test that split mode reports only the unknown part."""
        assert split_parser.analyze_text('a well-knwn value') == [SpellingMatch('knwn', 7)]

    def test_camel_case_in_text(self, split_parser):
        """Test that camelCase words in text are split."""
        assert split_parser.analyze_text('see myClinet value') == [SpellingMatch('Clinet', 6)]

    def test_special_word(self, split_parser):
        """Test that abbreviation-like words report the capital run."""
        assert split_parser.analyze_text('the GACed value') == [SpellingMatch('GAC', 4)]

    def test_cancellation(self, data):
        """Test that a canceled token aborts analysis."""
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCanceledError):
            SpellingParser(data, cancellation_token=token).analyze_text('anything')


class TestAnalyzeIdentifier:
    """Tests for identifier analysis."""

    def test_known_parts(self, split_parser):
        """Test that an identifier made of known words is clean."""
        assert split_parser.analyze_identifier('myHTTPClient') == []

    def test_unknown_part_offset(self, split_parser):
        """Test offsets of unknown parts."""
        assert split_parser.analyze_identifier('receiveMesage') == [SpellingMatch('Mesage', 7)]

    def test_prefix(self, split_parser):
        """Test that prefix characters are skipped and offsets include them."""
        assert split_parser.analyze_identifier('_mesage', prefix_length=1) == [SpellingMatch('mesage', 1)]

    def test_too_short(self, split_parser):
        """Test that identifiers shorter than the minimum are skipped."""
        assert split_parser.analyze_identifier('xq') == []

    def test_whole_identifier_known(self, data):
        """Test that a known compound is not split."""
        parser = SpellingParser(data.add_word('mesageclient'))
        assert parser.analyze_identifier('mesageclient') == []


class TestNonsensicalWords:
    """Tests for allowed placeholder words."""

    @pytest.mark.parametrize('value', [
        'qwerty', 'QWERTY', 'Asdfgh', 'xyz', 'abc', 'abcd', 'abcde', 'ABCD', 'Abcd',
        'aaa', 'Aaa', 'AAA', 'aabbcc', 'AAABBB',
    ])
    def test_allowed(self, value):
        """Test words that are allowed."""
        assert is_allowed_nonsensical_word(value)

    @pytest.mark.parametrize('value', ['hello', 'abcz', 'ab', 'aab', 'aabbc', 'bbccdd'])
    def test_not_allowed(self, value):
        """Test words that are not allowed."""
        assert not is_allowed_nonsensical_word(value)

    def test_special_word_pattern(self):
        """Test capital runs of abbreviation-like words."""
        assert match_special_word('NaN') == ('NaN', 0)
        assert match_special_word('IDs') == ('ID', 0)
        assert match_special_word('JSONify') == ('JSON', 0)
        assert match_special_word("AND'd") == ('AND', 0)
        assert match_special_word('Hello') is None
