"""
Tests for the package-level entry points
========================================
"""

import json

import spellfixer
from spellfixer.config import SpellfixConfig
from spellfixer.workspace import PythonSourceWorkspace


SOURCE = "# Recieve the mesage\ndef send_blorf():\n    pass\n"


def make_config(tmp_path) -> SpellfixConfig:
    words = tmp_path / 'words.txt'
    words.write_text('receive\nmessage\nthe\nsend\npass\nrecieve=receive\nmesage=message\n', encoding='utf-8')

    cfg = SpellfixConfig()
    cfg.word_lists.words = [str(words)]
    cfg.word_lists.new_words = str(tmp_path / 'new_words.txt')
    cfg.word_lists.new_fixes = str(tmp_path / 'new_fixes.txt')
    return cfg


class TestRun:
    """Tests for spellfixer.run over a directory of modules."""

    def test_fix_and_save(self, tmp_path):
        """Test that comments are fixed and unknown names end up as new words."""
        src = tmp_path / 'src'
        src.mkdir()
        (src / 'mod.py').write_text(SOURCE, encoding='utf-8')
        cfg = make_config(tmp_path)

        workspace = PythonSourceWorkspace.from_directory(src)
        results, data = spellfixer.run(workspace, config=cfg)
        written = workspace.save(src)

        assert [(r.old_value, r.new_value) for r in results] == [('Recieve', 'Receive'), ('mesage', 'message')]
        assert written == ['mod.py']
        assert (src / 'mod.py').read_text(encoding='utf-8').startswith('# Receive the message\n')
        assert data.ignored_values.contains('blorf')
        assert (tmp_path / 'new_words.txt').read_text(encoding='utf-8') == 'blorf'
        assert not (tmp_path / 'new_fixes.txt').exists()

    def test_load_spelling_data(self, tmp_path):
        """Test that word lists named in the config are loaded."""
        data = spellfixer.load_spelling_data(make_config(tmp_path))
        assert data.is_word('receive')
        assert data.fixes.contains_key('mesage')

    def test_status(self):
        """Test the status report."""
        status = spellfixer.get_status()
        assert status['version'] == spellfixer.__version__
        assert status['symspell']['available'] is True

    def test_fix_loop_logs_through_config(self, tmp_path, capsys):
        """Test that the fix loop writes to the log file named by the run's config."""
        src = tmp_path / 'src'
        src.mkdir()
        (src / 'mod.py').write_text(SOURCE, encoding='utf-8')
        cfg = make_config(tmp_path)
        cfg.logging.log_dir = str(tmp_path / 'logs')
        cfg.logging.level = 'DEBUG'
        cfg.logging.to_console = False

        spellfixer.run(PythonSourceWorkspace.from_directory(src), config=cfg)

        lines = (tmp_path / 'logs' / 'spellfixer.log').read_text(encoding='utf-8').splitlines()
        records = [json.loads(line) for line in lines]
        fixer_records = [r for r in records if r['logger'] == 'spellfixer.fixer']
        messages = [r['message'] for r in fixer_records]
        assert 'fix started' in messages
        assert 'fix completed' in messages
        assert 'Analysis finished' in messages
        assert 'spellfixer.fixer' not in capsys.readouterr().err
