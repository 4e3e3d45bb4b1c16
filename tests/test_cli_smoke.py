"""Smoke tests for the CLI entry point."""
from __future__ import annotations

import json
import os
import subprocess
import sys
import time
from pathlib import Path

import pytest

from dialout_picker import __main__
from dialout_picker.cli import main

TARGETS_CSV = (
    "label,destination,protocol,role\n"
    "Boardroom,sip:boardroom@example.com,,guest\n"
    "Legacy codec,10.0.0.50,h323,guest\n"
    "Chair phone,sip:chair@example.com,sip,host\n"
)


@pytest.fixture
def targets_path(tmp_path):
    path = tmp_path / "dial_targets.csv"
    path.write_text(TARGETS_CSV, encoding="utf-8")
    return path


def write_config(tmp_path, **config) -> str:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"gap_seconds": 0, **config}), encoding="utf-8")
    return str(config_path)


def test_cli_lists_matching_targets(targets_path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--source", str(targets_path), "--search", "chair"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert captured.out.strip() == "Chair phone\tsip:chair@example.com\tsip\tHOST"


def test_cli_reports_no_matches(targets_path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--source", str(targets_path), "--search", "nothing"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "No matches"


def test_cli_dry_run_dials_selected_targets(tmp_path, targets_path, capsys: pytest.CaptureFixture[str]) -> None:
    report_path = tmp_path / "outcomes.csv"

    exit_code = main(
        [
            "sip:boardroom@example.com",
            "sip:unknown@example.com",
            "10.0.0.50",
            "--source",
            str(targets_path),
            "--config",
            write_config(tmp_path),
            "--dry-run",
            "--report",
            str(report_path),
        ]
    )

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "[OK] Boardroom - Dial requested" in captured.out
    assert "[SKIP] sip:unknown@example.com - Missing target definition" in captured.out
    assert "Done. Success: 2  Failed: 0  Skipped: 1" in captured.out
    assert "Legacy codec" in report_path.read_text(encoding="utf-8")


def test_cli_select_all_dials_every_match_once(tmp_path, targets_path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(
        [
            "sip:chair@example.com",
            "--select-all",
            "--search",
            "example.com",
            "--source",
            str(targets_path),
            "--config",
            write_config(tmp_path),
            "--dry-run",
        ]
    )

    assert exit_code == 0
    assert "Done. Success: 2  Failed: 0  Skipped: 0" in capsys.readouterr().out


def test_cli_returns_failure_when_a_dial_is_rejected(tmp_path, targets_path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = write_config(
        tmp_path,
        source=str(targets_path),
        dialer={
            "class": "dialout_picker.hosts.EchoDialer",
            "options": {"fail_destinations": ["10.0.0.50"]},
        },
    )

    exit_code = main(["10.0.0.50", "sip:boardroom@example.com", "--config", config_path])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert "[FAIL] Legacy codec - Destination 10.0.0.50 rejected by echo dialer" in captured.err
    assert "Done. Success: 1  Failed: 1  Skipped: 0" in captured.out


def test_cli_rejects_invalid_configuration(tmp_path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"gap_seconds": -1}), encoding="utf-8")

    assert main(["--config", str(config_path)]) == 2


def test_module_entry_point_delegates_to_cli(targets_path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = __main__.main(["--source", str(targets_path)])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert captured.out.count("\n") == 3


def test_module_entry_point_without_arguments_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = __main__.main([])

    captured = capsys.readouterr()
    assert "python -m dialout_picker" in captured.out
    assert exit_code == 2


def test_timed_out_dial_does_not_delay_process_exit(tmp_path, targets_path) -> None:
    config_path = write_config(
        tmp_path,
        source=str(targets_path),
        dial_timeout_seconds=0.2,
        dialer={"class": "dialout_picker.hosts.EchoDialer", "options": {"delay_seconds": 8}},
    )
    project_root = Path(__file__).resolve().parents[1]
    env = dict(os.environ, PYTHONPATH=os.pathsep.join(filter(None, [str(project_root), os.environ.get("PYTHONPATH")])))

    started = time.monotonic()
    completed = subprocess.run(
        [sys.executable, "-m", "dialout_picker", "sip:boardroom@example.com", "--config", config_path],
        capture_output=True,
        text=True,
        env=env,
        timeout=30,
    )
    elapsed = time.monotonic() - started

    assert completed.returncode == 1
    assert "timed out after 200ms" in completed.stderr
    assert elapsed < 6


def test_cli_rejects_malformed_dialer_options(tmp_path, targets_path) -> None:
    config_path = write_config(
        tmp_path,
        source=str(targets_path),
        dialer={"class": "dialout_picker.hosts.EchoDialer", "options": "delay_seconds=1"},
    )

    assert main(["sip:boardroom@example.com", "--config", config_path]) == 2


def test_role_help_explains_scope(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        main(["--help"])

    help_text = " ".join(capsys.readouterr().out.split())
    assert "Join role for targets defined without a role" in help_text
