from pathlib import Path

import pytest
from pydantic import ValidationError

from mnemo.application.config import AppConfig, resolve_config


def test_defaults(mock_home):
    config = resolve_config()
    assert config.data_file == (mock_home / ".config/mnemo/flashcards.json").resolve()
    assert config.backup_dir == config.data_file.parent / "backups"
    assert config.session_size == 25
    assert config.failed_review_delay_minutes == 10
    assert config.shuffle_seed is None


def test_toml_file(mock_home):
    config_dir = mock_home / ".config/mnemo"
    config_dir.mkdir(parents=True)
    (config_dir / "config.toml").write_text(
        'data_file = "~/cards/deck.json"\nsession_size = 40\nbackup_on_save = true\n'
    )

    config = resolve_config()
    assert config.data_file == (mock_home / "cards/deck.json").resolve()
    assert config.session_size == 40
    assert config.backup_on_save is True


def test_dotfile_fallback(mock_home):
    (mock_home / ".mnemo.toml").write_text("shuffle_seed = 7\n")
    assert resolve_config().shuffle_seed == 7


def test_env_beats_file(mock_home, monkeypatch):
    (mock_home / ".mnemo.toml").write_text("session_size = 40\n")
    monkeypatch.setenv("MNEMO_SESSION_SIZE", "15")
    assert resolve_config().session_size == 15


def test_cli_overrides_beat_env(mock_home, monkeypatch, tmp_path):
    monkeypatch.setenv("MNEMO_DATA_FILE", str(tmp_path / "env.json"))
    config = resolve_config({"data_file": tmp_path / "cli.json", "session_size": None})

    assert config.data_file == (tmp_path / "cli.json").resolve()
    assert config.session_size == 25


def test_explicit_backup_dir(mock_home, tmp_path):
    config = resolve_config({"backup_dir": str(tmp_path / "bk")})
    assert config.backup_dir == (tmp_path / "bk").resolve()


def test_rejects_bad_session_size(mock_home):
    with pytest.raises(ValidationError):
        AppConfig(session_size=0)


def test_unknown_keys_ignored(mock_home):
    (mock_home / ".mnemo.toml").write_text('theme = "dark"\n')
    assert isinstance(resolve_config().data_file, Path)
