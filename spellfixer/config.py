"""
Spellfixer Configuration Module
===============================
Centralized configuration for the spelling engine.

Configuration can be set via:
1. Environment variables (SPELLFIX_DRY_RUN=true)
2. Config file (spellfix_config.json, or the path in SPELLFIX_CONFIG)
3. Direct API calls (config.set('fixer.dry_run', True))

Defaults reproduce the behavior of a plain, non-interactive auto-fix run.
"""

import os
import json
from pathlib import Path
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field, asdict

from .config_logging import ConfigError

# Default configuration file, looked up in the current directory
CONFIG_FILE_NAME = "spellfix_config.json"


@dataclass
class ParserConfig:
    """Tokenizer configuration."""
    split_mode: str = "case_and_hyphen"  # none, case_and_hyphen
    min_word_length: int = 3


@dataclass
class FixerConfig:
    """Fix loop configuration."""
    symbol_visibility: str = "public"  # public, internal, private
    include_generated_code: bool = False
    interactive: bool = False
    dry_run: bool = False
    auto_fix: bool = True
    strict: bool = False  # raise instead of logging when the loop stalls
    max_workers: int = 4


@dataclass
class FuzzyConfig:
    """Fuzzy suggestion bounds."""
    max_edit_distance: int = 2
    min_word_length: int = 8


@dataclass
class WordListConfig:
    """Where word lists and fix lists are loaded from and saved to."""
    words: List[str] = field(default_factory=list)
    fixes: List[str] = field(default_factory=list)
    ignore_case: bool = False
    new_words: Optional[str] = None
    new_fixes: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"  # json, text
    to_console: bool = True
    log_dir: Optional[str] = None


@dataclass
class SpellfixConfig:
    """Master configuration."""
    parser: ParserConfig = field(default_factory=ParserConfig)
    fixer: FixerConfig = field(default_factory=FixerConfig)
    fuzzy: FuzzyConfig = field(default_factory=FuzzyConfig)
    word_lists: WordListConfig = field(default_factory=WordListConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
_config: Optional[SpellfixConfig] = None


def get_config() -> SpellfixConfig:
    """Get the global configuration."""
    global _config
    if _config is None:
        _config = _load_config()
    return _config


def _config_path() -> Path:
    env_path = os.environ.get('SPELLFIX_CONFIG')
    return Path(env_path) if env_path else Path.cwd() / CONFIG_FILE_NAME


def _load_config() -> SpellfixConfig:
    """Load configuration from file and environment."""
    config = SpellfixConfig()

    path = _config_path()
    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
            _apply_dict_to_config(config, file_config)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigError(f"Could not load config file {path}: {e}", key=str(path))

    _apply_env_to_config(config)

    return config


def _apply_dict_to_config(config: SpellfixConfig, data: Dict[str, Any]):
    """Apply dictionary values to config object."""
    for section_name, section_data in data.items():
        if hasattr(config, section_name) and isinstance(section_data, dict):
            section = getattr(config, section_name)
            for key, value in section_data.items():
                if hasattr(section, key):
                    setattr(section, key, value)


def _apply_env_to_config(config: SpellfixConfig):
    """Apply environment variables to config."""
    env_mappings = {
        'SPELLFIX_SPLIT_MODE': ('parser', 'split_mode', str),
        'SPELLFIX_MIN_WORD_LENGTH': ('parser', 'min_word_length', int),
        'SPELLFIX_VISIBILITY': ('fixer', 'symbol_visibility', str),
        'SPELLFIX_INCLUDE_GENERATED_CODE': ('fixer', 'include_generated_code', _parse_bool),
        'SPELLFIX_INTERACTIVE': ('fixer', 'interactive', _parse_bool),
        'SPELLFIX_DRY_RUN': ('fixer', 'dry_run', _parse_bool),
        'SPELLFIX_AUTO_FIX': ('fixer', 'auto_fix', _parse_bool),
        'SPELLFIX_STRICT': ('fixer', 'strict', _parse_bool),
        'SPELLFIX_MAX_EDIT_DISTANCE': ('fuzzy', 'max_edit_distance', int),
        'SPELLFIX_WORDS': ('word_lists', 'words', _parse_paths),
        'SPELLFIX_FIXES': ('word_lists', 'fixes', _parse_paths),
        'SPELLFIX_LOG_LEVEL': ('logging', 'level', str),
        'SPELLFIX_LOG_FORMAT': ('logging', 'format', str),
    }

    for env_var, (section, key, converter) in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                section_obj = getattr(config, section)
                setattr(section_obj, key, converter(value))
            except ValueError as e:
                raise ConfigError(f"Invalid env var {env_var}={value}: {e}", key=env_var)


def _parse_bool(value: str) -> bool:
    """Parse boolean from string."""
    return value.lower() in ('true', '1', 'yes', 'on')


def _parse_paths(value: str) -> List[str]:
    return [p for p in value.split(os.pathsep) if p]


def get(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by dot-notation key.

    Example: get('parser.min_word_length') -> 3
    """
    obj = get_config()
    for part in key.split('.'):
        if hasattr(obj, part):
            obj = getattr(obj, part)
        else:
            return default

    return obj


def set(key: str, value: Any):
    """
    Set a configuration value by dot-notation key.

    Example: set('fixer.dry_run', True)
    """
    config = get_config()
    parts = key.split('.')

    if len(parts) != 2:
        raise ConfigError(f"Key must be in format 'section.key': {key}", key=key)

    section_name, attr_name = parts

    if not hasattr(config, section_name):
        raise ConfigError(f"Unknown config section: {section_name}", key=key)

    section = getattr(config, section_name)
    if not hasattr(section, attr_name):
        raise ConfigError(f"Unknown config key: {attr_name}", key=key)

    setattr(section, attr_name, value)


def save_config(path: Optional[Path] = None):
    """Save current configuration to file."""
    path = Path(path) if path else _config_path()

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(asdict(get_config()), f, indent=2)


def reset_config():
    """Reset configuration to defaults."""
    global _config
    _config = SpellfixConfig()
