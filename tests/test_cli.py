"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from tagmatter import cli
from tagmatter.cli import app
from tagmatter.config import Settings, load_settings, save_settings


runner = CliRunner()


@pytest.fixture
def notes(tmp_path, config_dir):
    """A small vault: one stale note, one in sync."""
    root = tmp_path / "notes"
    root.mkdir()
    (root / "stale.md").write_text("Trip with #Luke\n")
    (root / "synced.md").write_text("---\ntags:\n  - x\n---\n#x\n")
    return root


# ---------------------------------------------------------------------------
# sync
# ---------------------------------------------------------------------------


class TestSyncCommand:
    def test_updates_stale_files(self, notes):
        result = runner.invoke(app, ["sync", str(notes)])
        assert result.exit_code == 0
        assert (notes / "stale.md").read_text() == "---\ntags:\n  - luke\n---\nTrip with #Luke\n"
        assert (notes / "synced.md").read_text() == "---\ntags:\n  - x\n---\n#x\n"
        assert f"updated {notes / 'stale.md'}  +luke" in result.output
        assert "1 updated, 1 unchanged" in result.output

    def test_second_run_changes_nothing(self, notes):
        runner.invoke(app, ["sync", str(notes)])
        result = runner.invoke(app, ["sync", str(notes)])
        assert result.exit_code == 0
        assert "0 updated, 2 unchanged" in result.output

    def test_check_does_not_write(self, notes):
        result = runner.invoke(app, ["sync", "--check", str(notes)])
        assert result.exit_code == 1
        assert (notes / "stale.md").read_text() == "Trip with #Luke\n"
        assert "would update" in result.output
        assert "1 out of date" in result.output

    def test_check_passes_when_in_sync(self, notes):
        result = runner.invoke(app, ["sync", "--check", str(notes / "synced.md")])
        assert result.exit_code == 0

    def test_no_lowercase(self, notes):
        result = runner.invoke(app, ["sync", "--no-lowercase", str(notes / "stale.md")])
        assert result.exit_code == 0
        assert "  - Luke\n" in (notes / "stale.md").read_text()

    def test_lowercase_setting_from_config(self, notes, config_dir):
        save_settings(Settings(lowercase_tags=False), config_dir)
        runner.invoke(app, ["sync", str(notes / "stale.md")])
        assert "  - Luke\n" in (notes / "stale.md").read_text()

    def test_json_output(self, notes):
        result = runner.invoke(app, ["--json", "sync", str(notes)])
        assert result.exit_code == 0
        outcomes = {o["id"]: o for o in json.loads(result.output)}
        assert outcomes[str(notes / "stale.md")]["status"] == "updated"
        assert outcomes[str(notes / "stale.md")]["added"] == ["luke"]
        assert outcomes[str(notes / "synced.md")]["status"] == "unchanged"

    def test_missing_path(self, notes):
        result = runner.invoke(app, ["sync", str(notes / "nope")])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_creates_config_on_first_use(self, notes, config_dir):
        runner.invoke(app, ["sync", str(notes)])
        assert load_settings(config_dir) == Settings()


# ---------------------------------------------------------------------------
# tags
# ---------------------------------------------------------------------------


class TestTagsCommand:
    def test_out_of_sync(self, tmp_path, config_dir):
        path = tmp_path / "note.md"
        path.write_text("---\ntags:\n  - old\n---\n#new #a\n")
        result = runner.invoke(app, ["tags", str(path)])
        assert result.exit_code == 0
        assert "inline: a, new" in result.output
        assert "recorded: old" in result.output
        assert "status: out of sync (+a +new -old)" in result.output

    def test_in_sync(self, notes):
        result = runner.invoke(app, ["tags", str(notes / "synced.md")])
        assert "status: in sync" in result.output

    def test_json(self, notes):
        result = runner.invoke(app, ["--json", "tags", str(notes / "stale.md")])
        data = json.loads(result.output)
        assert data["inline"] == ["luke"]
        assert data["recorded"] == []
        assert data["in_sync"] is False

    def test_missing_file(self, tmp_path, config_dir):
        result = runner.invoke(app, ["tags", str(tmp_path / "nope.md")])
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommand:
    def test_show_all(self, config_dir):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "lowercase_tags = true" in result.output
        assert "debounce_seconds = 2.0" in result.output
        assert "remove_inline_tags = false  # reserved, has no effect" in result.output

    def test_show_one(self, config_dir):
        result = runner.invoke(app, ["config", "auto_sync"])
        assert result.output.strip() == "true"

    def test_set_persists(self, config_dir):
        result = runner.invoke(app, ["config", "lowercase_tags", "false"])
        assert result.exit_code == 0
        assert "lowercase_tags = false" in result.output
        assert load_settings(config_dir).lowercase_tags is False

    def test_unknown_key(self, config_dir):
        result = runner.invoke(app, ["config", "colour"])
        assert result.exit_code == 1
        assert "Unknown setting" in result.output

    def test_bad_value(self, config_dir):
        result = runner.invoke(app, ["config", "auto_sync", "maybe"])
        assert result.exit_code == 1
        assert load_settings(config_dir).auto_sync is True

    def test_malformed_file_reported(self, config_dir):
        config_dir.mkdir(parents=True)
        (config_dir / "tagmatter.toml").write_text("sync = 1\n")
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 1
        assert "must be a table" in result.output

    def test_config_dir_option(self, tmp_path, config_dir):
        other = tmp_path / "elsewhere"
        runner.invoke(app, ["--config-dir", str(other), "config", "auto_sync", "false"])
        assert load_settings(other).auto_sync is False


# ---------------------------------------------------------------------------
# watch
# ---------------------------------------------------------------------------


class TestWatchCommand:
    def test_refused_when_auto_sync_off(self, notes, config_dir):
        save_settings(Settings(auto_sync=False), config_dir)
        result = runner.invoke(app, ["watch", str(notes)])
        assert result.exit_code == 1
        assert "auto_sync is disabled" in result.output

    def test_requires_directory(self, notes):
        result = runner.invoke(app, ["watch", str(notes / "stale.md")])
        assert result.exit_code == 1
        assert "Not a directory" in result.output


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


class TestErrors:
    def test_main_logs_unexpected_error(self, config_dir, monkeypatch):
        def broken_app():
            raise RuntimeError("unexpected")

        monkeypatch.setattr(cli, "app", broken_app)
        monkeypatch.setattr("sys.argv", ["tagmatter", "sync", "my notes"])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 1
        text = (config_dir / "tagmatter-errors.log").read_text()
        assert "tagmatter sync 'my notes'" in text
        assert "RuntimeError: unexpected" in text

    def test_main_keyboard_interrupt(self, monkeypatch):
        def interrupted_app():
            raise KeyboardInterrupt

        monkeypatch.setattr(cli, "app", interrupted_app)
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 130
