"""Tests for the ``reqmorph`` console-script entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from reqmorph.app import main
from reqmorph.exceptions import InputFormatError, MissingFieldError
from reqmorph.output import OutputManager, set_output


@pytest.fixture(autouse=True)
def _no_signal_handlers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("reqmorph.app._setup_signal_handlers", lambda: None)


class TestMain:
    def test_reqmorph_error_maps_to_exit_code(self, capfd, isolated_config: Path) -> None:
        set_output(OutputManager(no_color=True))
        with patch("reqmorph.app.app", side_effect=InputFormatError("Invalid JSON", "req.json")):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 8
        _, err = capfd.readouterr()
        assert "Error: req.json: Invalid JSON" in err

    def test_missing_field_exit_code(self, isolated_config: Path) -> None:
        set_output(OutputManager(no_color=True))
        with patch("reqmorph.app.app", side_effect=MissingFieldError("missing", "name", ".M")):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 9

    def test_unexpected_error_writes_crash_log(self, capfd, isolated_config: Path) -> None:
        set_output(OutputManager(no_color=True))
        with patch("reqmorph.app.app", side_effect=RuntimeError("boom")):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1
        logs = list((isolated_config / "data" / "reqmorph" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: boom" in logs[0].read_text()
        _, err = capfd.readouterr()
        assert "Unexpected error. Debug log:" in err

    def test_keyboard_interrupt(self, capfd, isolated_config: Path) -> None:
        with patch("reqmorph.app.app", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 130
        _, err = capfd.readouterr()
        assert "Cancelled." in err
