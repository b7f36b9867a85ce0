"""
Test Suite for the Grove CLI (cli_app.py).

Tests the Typer-based CLI utilities: override parsing, auto-casting,
flag mapping, recipe generation and the ``run`` command with a mocked
training phase.
"""

import logging
import re
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from grove.cli_app import CONFIG_SNAPSHOT, _auto_cast, _flag_overrides, _parse_overrides, app
from grove.core.paths import LOGGER_NAME
from grove.exceptions import DatasetEmptyError

runner = CliRunner()


def _strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from Rich/Typer help output."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


# AUTO-CAST
@pytest.mark.unit
class TestAutoCast:
    """Tests for _auto_cast string-to-Python type conversion."""

    def test_int(self):
        assert _auto_cast("42") == 42
        assert isinstance(_auto_cast("42"), int)

    def test_float(self):
        assert _auto_cast("1e-4") == pytest.approx(1e-4)
        assert isinstance(_auto_cast("0.5"), float)

    def test_bool(self):
        assert _auto_cast("true") is True
        assert _auto_cast("False") is False

    def test_null(self):
        assert _auto_cast("null") is None
        assert _auto_cast("None") is None

    def test_string_passthrough(self):
        assert _auto_cast("cuda") == "cuda"
        assert _auto_cast("") == ""


# PARSE OVERRIDES
@pytest.mark.unit
class TestParseOverrides:
    """Tests for _parse_overrides CLI flag parsing."""

    def test_multiple_overrides(self):
        result = _parse_overrides(["training.epochs=20", "dataset.strict_records=true"])
        assert result == {"training.epochs": 20, "dataset.strict_records": True}

    def test_value_with_equals(self):
        assert _parse_overrides(["key=a=b"]) == {"key": "a=b"}

    def test_missing_equals_raises(self):
        import typer

        with pytest.raises(typer.BadParameter, match="key=value"):
            _parse_overrides(["no_equals_here"])

    def test_empty_key_raises(self):
        import typer

        with pytest.raises(typer.BadParameter, match="Empty key"):
            _parse_overrides(["=value"])


# FLAG MAPPING
@pytest.mark.unit
def test_flag_overrides_skip_unset():
    result = _flag_overrides(epochs=3, batch=None, lr=0.01, device=None, resume=None)
    assert result == {"training.epochs": 3, "training.learning_rate": 0.01}


@pytest.mark.unit
def test_flag_overrides_zero_is_kept():
    """Explicit zero (e.g. --log-every 0) is an override, not an absent flag."""
    assert _flag_overrides(log_every=0) == {"training.log_every": 0}


# HELP & VERSION
@pytest.mark.unit
class TestCLIHelp:
    """Smoke tests for CLI command registration."""

    def test_app_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "run" in result.output
        assert "init" in result.output

    def test_run_help_lists_flags(self):
        result = runner.invoke(app, ["run", "--help"])
        assert result.exit_code == 0
        clean = _strip_ansi(result.output)
        for flag in ("--epochs", "--batch", "--lr", "--cuda", "--data", "--out", "--resume"):
            assert flag in clean

    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "grove" in result.output


# INIT
@pytest.mark.unit
class TestInit:
    """Tests for starter recipe generation."""

    def test_init_writes_loadable_recipe(self, tmp_path):
        from grove.core.config import Config

        output = tmp_path / "recipe.yaml"

        result = runner.invoke(app, ["init", str(output)])

        assert result.exit_code == 0
        data = yaml.safe_load(output.read_text(encoding="utf-8"))
        assert list(data) == ["training", "dataset", "hardware", "telemetry"]
        assert data["hardware"]["device"] == "auto"
        assert Config.from_recipe(output).training.epochs == 10

    def test_init_refuses_overwrite(self, tmp_path):
        output = tmp_path / "recipe.yaml"
        output.write_text("keep me")

        result = runner.invoke(app, ["init", str(output)])

        assert result.exit_code == 1
        assert output.read_text() == "keep me"

    def test_init_force_overwrites(self, tmp_path):
        output = tmp_path / "recipe.yaml"
        output.write_text("old")

        result = runner.invoke(app, ["init", str(output), "--force"])

        assert result.exit_code == 0
        assert "training:" in output.read_text()


# RUN
@pytest.mark.unit
class TestRun:
    """Tests for the ``run`` command with the training phase mocked out."""

    @pytest.fixture(autouse=True)
    def _console_only_logger(self):
        """Keep handlers off the CliRunner stream, which closes after invoke."""
        with patch("grove.Logger.setup", return_value=logging.getLogger(LOGGER_NAME)):
            yield

    def test_run_missing_recipe(self):
        result = runner.invoke(app, ["run", "nonexistent.yaml"])
        assert result.exit_code == 1
        assert "not found" in result.output

    @patch("grove.run_training_phase")
    def test_flags_build_config(self, mock_train, tmp_path):
        """Command-line flags reach the Config handed to the training phase."""
        out = tmp_path / "out"

        result = runner.invoke(
            app,
            [
                "run",
                "--epochs", "3",
                "--batch", "16",
                "--lr", "0.01",
                "--device", "cpu",
                "--data", str(tmp_path / "data"),
                "--out", str(out),
                "--log-every", "0",
                "--set", "dataset.num_workers=0",
            ],
        )

        assert result.exit_code == 0, result.output
        cfg = mock_train.call_args.args[0]
        assert cfg.training.epochs == 3
        assert cfg.training.batch_size == 16
        assert cfg.training.learning_rate == pytest.approx(0.01)
        assert cfg.training.log_every == 0
        assert cfg.dataset.num_workers == 0
        assert cfg.telemetry.output_dir == out.resolve()
        assert (out / CONFIG_SNAPSHOT).is_file()

    @patch("grove.run_training_phase")
    def test_default_output_dir(self, mock_train, tmp_path, monkeypatch):
        """Without --out the run writes under ./outputs of the working directory."""
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["run", "--epochs", "1", "--device", "cpu"])

        assert result.exit_code == 0, result.output
        cfg = mock_train.call_args.args[0]
        assert cfg.telemetry.output_dir == (tmp_path / "outputs").resolve()
        assert (tmp_path / "outputs" / CONFIG_SNAPSHOT).is_file()

    @patch("grove.run_training_phase")
    def test_recipe_with_overrides(self, mock_train, tmp_path):
        recipe = tmp_path / "recipe.yaml"
        recipe.write_text(
            yaml.safe_dump(
                {
                    "training": {"epochs": 2, "batch_size": 8},
                    "hardware": {"device": "cpu"},
                    "telemetry": {"output_dir": str(tmp_path / "out")},
                }
            )
        )

        result = runner.invoke(app, ["run", str(recipe), "--epochs", "5"])

        assert result.exit_code == 0, result.output
        cfg = mock_train.call_args.args[0]
        assert cfg.training.epochs == 5
        assert cfg.training.batch_size == 8

    @patch("grove.run_training_phase")
    def test_resume_latest_picks_newest_checkpoint(self, mock_train, tmp_path):
        out = tmp_path / "out"
        out.mkdir()
        for epoch in (2, 11):
            (out / f"checkpoint_epoch_{epoch}.pt").write_bytes(b"")

        result = runner.invoke(
            app, ["run", "--device", "cpu", "--out", str(out), "--resume-latest"]
        )

        assert result.exit_code == 0, result.output
        cfg = mock_train.call_args.args[0]
        assert cfg.telemetry.resume_from.name == "checkpoint_epoch_11.pt"

    @patch("grove.run_training_phase")
    def test_invalid_config_exits_1(self, mock_train, tmp_path):
        result = runner.invoke(app, ["run", "--epochs", "0", "--out", str(tmp_path)])

        assert result.exit_code == 1
        mock_train.assert_not_called()

    @patch("grove.run_training_phase")
    def test_run_failure_exits_1(self, mock_train, tmp_path):
        mock_train.side_effect = DatasetEmptyError("no records", path=tmp_path)

        result = runner.invoke(app, ["run", "--device", "cpu", "--out", str(tmp_path / "out")])

        assert result.exit_code == 1
