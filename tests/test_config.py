"""
Tests for configuration, options and structured logging
=======================================================
"""

import json
import logging
import os

import pytest

from spellfixer import config
from spellfixer.config_logging import (
    ConfigError,
    ConvergenceError,
    SpellfixError,
    StructuredLogger,
    configure_logging,
)
from spellfixer.options import SpellingFixerOptions, SymbolVisibility
from spellfixer.text import SplitMode


class TestDefaults:
    """Tests for the built-in defaults."""

    def test_sections(self):
        """Test default values of every section."""
        cfg = config.get_config()
        assert cfg.parser.split_mode == 'case_and_hyphen'
        assert cfg.parser.min_word_length == 3
        assert cfg.fixer.symbol_visibility == 'public'
        assert cfg.fixer.auto_fix is True
        assert cfg.fixer.dry_run is False
        assert cfg.fuzzy.max_edit_distance == 2
        assert cfg.word_lists.words == []
        assert cfg.logging.format == 'json'

    def test_options_match_defaults(self):
        """Test that options built from the default config equal the dataclass defaults."""
        assert SpellingFixerOptions.from_config() == SpellingFixerOptions()


class TestEnvironment:
    """Tests for SPELLFIX_* overrides."""

    def test_overrides(self, monkeypatch, tmp_path):
        """Test bool, int and path list conversion."""
        words = [str(tmp_path / 'a.txt'), str(tmp_path / 'b.txt')]
        monkeypatch.setenv('SPELLFIX_DRY_RUN', 'yes')
        monkeypatch.setenv('SPELLFIX_MIN_WORD_LENGTH', '5')
        monkeypatch.setenv('SPELLFIX_WORDS', os.pathsep.join(words))

        cfg = config._load_config()

        assert cfg.fixer.dry_run is True
        assert cfg.parser.min_word_length == 5
        assert cfg.word_lists.words == words

    def test_invalid_int(self, monkeypatch):
        """Test that a non-numeric value raises ConfigError."""
        monkeypatch.setenv('SPELLFIX_MIN_WORD_LENGTH', 'three')

        with pytest.raises(ConfigError) as exc_info:
            config._load_config()

        assert exc_info.value.details['key'] == 'SPELLFIX_MIN_WORD_LENGTH'


class TestConfigFile:
    """Tests for loading and saving the JSON config file."""

    def test_file_then_env(self, monkeypatch, tmp_path):
        """Test that environment variables win over the file."""
        path = tmp_path / 'spellfix_config.json'
        path.write_text(json.dumps({
            'fixer': {'interactive': True, 'symbol_visibility': 'internal'},
            'parser': {'min_word_length': 4},
            'unknown': {'x': 1},
        }), encoding='utf-8')
        monkeypatch.setenv('SPELLFIX_CONFIG', str(path))
        monkeypatch.setenv('SPELLFIX_MIN_WORD_LENGTH', '6')

        cfg = config._load_config()

        assert cfg.fixer.interactive is True
        assert cfg.fixer.symbol_visibility == 'internal'
        assert cfg.parser.min_word_length == 6

    def test_bad_json(self, monkeypatch, tmp_path):
        """Test that an unreadable file raises ConfigError."""
        path = tmp_path / 'broken.json'
        path.write_text('{not json', encoding='utf-8')
        monkeypatch.setenv('SPELLFIX_CONFIG', str(path))

        with pytest.raises(ConfigError):
            config._load_config()

    def test_file_in_current_directory(self, monkeypatch, tmp_path):
        """Test that the default file is looked up in the directory current at load time."""
        (tmp_path / 'spellfix_config.json').write_text(
            json.dumps({'fixer': {'strict': True}}), encoding='utf-8')
        monkeypatch.delenv('SPELLFIX_CONFIG')
        monkeypatch.chdir(tmp_path)

        assert config._config_path() == tmp_path / 'spellfix_config.json'
        assert config._load_config().fixer.strict is True

    def test_save_round_trip(self, monkeypatch, tmp_path):
        """Test that a saved config loads back with the same values."""
        path = tmp_path / 'saved.json'
        config.set('fixer.strict', True)
        config.set('fuzzy.min_word_length', 10)
        config.save_config(path)

        monkeypatch.setenv('SPELLFIX_CONFIG', str(path))
        cfg = config._load_config()

        assert cfg.fixer.strict is True
        assert cfg.fuzzy.min_word_length == 10


class TestDotNotation:
    """Tests for get/set by dotted key."""

    def test_get_set(self):
        """Test reading back a value that was set."""
        config.set('parser.split_mode', 'none')
        assert config.get('parser.split_mode') == 'none'
        assert config.get('parser.missing', 'fallback') == 'fallback'

    @pytest.mark.parametrize('key', ['dry_run', 'fixer.dry_run.extra', 'nope.dry_run', 'fixer.nope'])
    def test_bad_keys(self, key):
        """Test that malformed or unknown keys raise ConfigError."""
        with pytest.raises(ConfigError):
            config.set(key, True)


class TestOptions:
    """Tests for SpellingFixerOptions.from_config."""

    def test_mapping(self):
        """Test that config values map onto options."""
        config.set('parser.split_mode', 'NONE')
        config.set('fixer.symbol_visibility', 'private')
        config.set('fixer.include_generated_code', True)
        config.set('fixer.max_workers', 1)

        options = SpellingFixerOptions.from_config()

        assert options.split_mode is SplitMode.NONE
        assert options.symbol_visibility is SymbolVisibility.PRIVATE
        assert options.include_generated_code
        assert options.max_workers == 1
        assert options.parser_options.split_mode is SplitMode.NONE

    def test_invalid_visibility(self):
        """Test that an unknown visibility raises ConfigError."""
        config.set('fixer.symbol_visibility', 'protected')
        with pytest.raises(ConfigError):
            SpellingFixerOptions.from_config()


class TestStructuredLogging:
    """Tests for errors and the JSON logger."""

    def test_error_to_dict(self):
        """Test the serialized error shape."""
        error = ConvergenceError("stuck", diagnostic_count=3)
        assert isinstance(error, SpellfixError)
        assert error.to_dict() == {
            'success': False,
            'error': {'code': 'NO_PROGRESS', 'message': 'stuck', 'details': {'diagnostic_count': 3}},
        }

    def test_json_record(self, capsys):
        """Test that records are one JSON object with the extra fields."""
        logger = StructuredLogger('spellfixer.tests.json', level='DEBUG')
        StructuredLogger.set_correlation_id('abc123')

        logger.info("fixed", count=2)

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record['message'] == 'fixed'
        assert record['level'] == 'INFO'
        assert record['count'] == 2
        assert record['correlation_id'] == 'abc123'

    def test_log_operation_failure(self, capsys):
        """Test that a failing operation is logged and re-raised."""
        logger = StructuredLogger('spellfixer.tests.operation')

        with pytest.raises(RuntimeError):
            with logger.log_operation('fix', units=1):
                raise RuntimeError('boom')

        records = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines()]
        assert [r['status'] for r in records] == ['started', 'failed']
        assert records[-1]['message'] == 'fix failed: boom'
        assert records[-1]['units'] == 1

    def test_level_filter(self, capsys):
        """Test that records below the level are dropped."""
        logger = StructuredLogger('spellfixer.tests.level', level='WARNING')
        logger.info("hidden")
        assert capsys.readouterr().err == ''

    def test_text_format(self, capsys):
        """Test that text output keeps the keyword fields."""
        logger = StructuredLogger('spellfixer.tests.text', log_format='text')
        logger.warning("cannot rename", new_name='receive')
        assert 'cannot rename (new_name=receive)' in capsys.readouterr().err

    def test_module_loggers(self, capsys):
        """Test that plain module loggers are rendered as JSON once configured."""
        config.set('logging.level', 'DEBUG')
        configure_logging()

        logging.getLogger('spellfixer.wordset').debug("Saving '%s' (%d lines)", 'words.txt', 3)

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record['logger'] == 'spellfixer.wordset'
        assert record['level'] == 'DEBUG'
        assert record['message'] == "Saving 'words.txt' (3 lines)"

    def test_log_dir(self, tmp_path):
        """Test that a log directory gets a rotating file."""
        config.set('logging.to_console', False)
        config.set('logging.log_dir', str(tmp_path / 'logs'))
        configure_logging()

        logging.getLogger('spellfixer.loader').warning("Word list path does not exist")

        text = (tmp_path / 'logs' / 'spellfixer.log').read_text(encoding='utf-8')
        assert json.loads(text.splitlines()[-1])['message'] == "Word list path does not exist"

    def test_brace_message_is_still_json(self, capsys):
        """Test that a plain message starting with a brace is wrapped, not passed through."""
        configure_logging()

        logging.getLogger('spellfixer.loader').warning("{x} missing")

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record['message'] == '{x} missing'
        assert record['logger'] == 'spellfixer.loader'

    def test_propagating_logger(self, capsys):
        """Test that a propagating logger's records are tagged and rendered once."""
        configure_logging()
        logger = StructuredLogger('spellfixer.tests.propagate', propagate=True)

        logger.info("renamed", count=1)

        lines = capsys.readouterr().err.strip().splitlines()
        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record['message'] == 'renamed'
        assert record['count'] == 1
        assert 'structured' not in record
