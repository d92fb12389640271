"""Tests for the postkast CLI."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from postkast.cli import main


class TestSampleCommand:
    def test_prints_sample_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["sample"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("servers:\n")
        assert "imap.google.com" in out


class TestListCommand:
    def test_settings_failure_exits_non_zero(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("servers: [unclosed\n")

        with patch.dict(os.environ, {"POSTKAST_CONFIG_FILE": str(config_file)}, clear=True):
            assert main([]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "ERROR: Configuration error" in captured.err
        assert "Example configuration:" in captured.err

    def test_runs_configured_accounts(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("servers:\n  - name: plain\n")

        with patch.dict(os.environ, {"POSTKAST_CONFIG_FILE": str(config_file)}, clear=True):
            assert main(["list"]) == 0

        assert "CONFIG: plain: No TLS configured for 'plain'" in capsys.readouterr().err

    def test_exit_status_from_run(self, tmp_path: Path) -> None:
        with (
            patch.dict(os.environ, {"POSTKAST_CONFIG_FILE": str(tmp_path / "none.yaml")}, clear=True),
            patch("postkast.service.run", return_value=1) as mock_run,
        ):
            assert main(["list"]) == 1

        mock_run.assert_called_once()
