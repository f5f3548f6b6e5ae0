"""Tests for the command line entry point and headless transfer commands."""

import json
import logging
from pathlib import Path

import pytest

from boardsync.__main__ import build_settings, main, parse_args
from boardsync.cli.transfer import run_export, run_import
from boardsync.config import Settings
from boardsync.logging import setup_logging
from boardsync.models import Board


@pytest.fixture
def local_settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data", local_only=True)


class TestArgs:
    """Tests for argument parsing and settings overrides."""

    def test_defaults(self):
        args = parse_args([])
        assert args.export is None
        assert args.import_file is None
        assert args.verbose == 0

    def test_flags_override_settings(self, tmp_path: Path):
        args = parse_args(
            ["--data-dir", str(tmp_path), "--api-url", "http://x/api", "--local-only", "-vv"]
        )
        settings = build_settings(args)
        assert settings.data_dir == tmp_path
        assert settings.api_base_url == "http://x/api"
        assert settings.local_only is True
        assert settings.verbose == 2

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("BOARDSYNC_API_TIMEOUT", "3.5")
        assert Settings().api_timeout == 3.5


class TestTransfer:
    """Tests for --export and --import."""

    def test_import_then_export(self, local_settings: Settings, tmp_path: Path, board: Board, capsys):
        backup = tmp_path / "in.json"
        backup.write_text(json.dumps({"columns": board.to_wire()}))

        assert run_import(local_settings, backup) == 0
        out = capsys.readouterr().out
        assert "Imported 3 columns" in out
        assert "3 columns, 2 tasks" in out

        out_dir = tmp_path / "out"
        assert run_export(local_settings, out_dir) == 0
        assert "3 columns, 2 tasks, 0 history entries" in capsys.readouterr().out
        exported = list(out_dir.glob("kanban-backup-*.json"))
        assert len(exported) == 1
        payload = json.loads(exported[0].read_text())
        assert payload["state"]["columns"][0]["tasks"][0]["title"] == "Write docs"
        assert payload["history"] == []

    def test_import_invalid_file(self, local_settings: Settings, tmp_path: Path, capsys):
        backup = tmp_path / "in.json"
        backup.write_text(json.dumps({"nothing": True}))

        assert run_import(local_settings, backup) == 1
        assert "missing columns" in capsys.readouterr().err
        assert not (local_settings.data_dir / "kanban_board_state_v1.json").exists()

    def test_export_failure(self, local_settings: Settings, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        assert run_export(local_settings, blocker) == 1

    def test_main_exit_code(self, tmp_path: Path, board: Board):
        backup = tmp_path / "in.json"
        backup.write_text(json.dumps({"columns": board.to_wire()}))

        with pytest.raises(SystemExit) as exc_info:
            main(["--data-dir", str(tmp_path / "data"), "--local-only", "--import", str(backup)])
        assert exc_info.value.code == 0
        assert (tmp_path / "data" / "kanban_board_state_v1.json").exists()


@pytest.fixture
def restore_logging():
    """Undo handler and level changes made by setup_logging."""
    logger = logging.getLogger("boardsync")
    handlers, level = list(logger.handlers), logger.level
    client_levels = {name: logging.getLogger(name).level for name in ("httpx", "httpcore")}
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)
    for name, client_level in client_levels.items():
        logging.getLogger(name).setLevel(client_level)


class TestLogging:
    """Tests for setup_logging."""

    def test_off_by_default(self, tmp_path: Path, restore_logging):
        before = list(restore_logging.handlers)
        assert setup_logging(Settings(data_dir=tmp_path)) is None
        assert restore_logging.handlers == before

    def test_log_file_records_where_the_board_lives(self, tmp_path: Path, restore_logging):
        log_file = tmp_path / "logs" / "boardsync.log"
        settings = Settings(data_dir=tmp_path / "data", local_only=True, log_file=log_file)

        logger = setup_logging(settings)
        assert logger is restore_logging
        for handler in logger.handlers:
            handler.flush()

        text = log_file.read_text()
        assert "level=INFO" in text
        assert "remote: local only" in text
        assert str(tmp_path / "data") in text

    def test_http_client_quiet_below_vvv(self, tmp_path: Path, restore_logging):
        setup_logging(Settings(data_dir=tmp_path, verbose=2))
        assert restore_logging.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

        setup_logging(Settings(data_dir=tmp_path, verbose=3))
        assert logging.getLogger("httpx").level == logging.DEBUG
