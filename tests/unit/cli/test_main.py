"""Unit tests for CLI command handling."""

from __future__ import annotations

from pathlib import Path

from cli.main import main
from store.artifact_store import ArtifactStore

SYSTEM_PARAMS = {"J": 1.0, "ACC": 1e-10}


def _populated_store(tmp_path: Path) -> ArtifactStore:
    store = ArtifactStore(tmp_path / "runs.h5")
    store.save({"energy": -1.0}, SYSTEM_PARAMS, {"N": 4, "sigma": 0.001})
    store.save({"energy": -1.1}, SYSTEM_PARAMS, {"N": 4, "sigma": 0.001})
    store.save({"energy": -2.0}, SYSTEM_PARAMS, {"N": 8, "sigma": 0.001})
    return store


def test_cli_runs_lists_each_run(tmp_path, capsys) -> None:
    """CLI runs should print one line per run with its instance count."""
    store = _populated_store(tmp_path)

    exit_code = main(["--store", str(store.store_path), "runs"])
    lines = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0 and lines == [
        "1\t2\tok\tN=4 sigma=0.001",
        "2\t1\tok\tN=8 sigma=0.001",
    ]


def test_cli_show_prints_latest_run(tmp_path, capsys) -> None:
    """CLI show should default to the most recent run."""
    store = _populated_store(tmp_path)

    exit_code = main(["--store", str(store.store_path), "show"])
    output = capsys.readouterr().out

    assert exit_code == 0 and "run_params=N=8 sigma=0.001" in output and "artifact_type=dict" in output


def test_cli_show_accepts_run_id(tmp_path, capsys) -> None:
    """CLI show should load the requested run."""
    store = _populated_store(tmp_path)

    exit_code = main(["--store", str(store.store_path), "show", "--run-id", "1"])
    output = capsys.readouterr().out

    assert exit_code == 0 and "run_params=N=4 sigma=0.001" in output


def test_cli_system_params_prints_stored_values(tmp_path, capsys) -> None:
    """CLI system-params should print sorted key=value pairs."""
    store = _populated_store(tmp_path)

    exit_code = main(["--store", str(store.store_path), "system-params"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0 and output == "ACC=1e-10 J=1.0"


def test_cli_system_params_for_missing_store(tmp_path, capsys) -> None:
    """A missing store should print a dash placeholder."""
    exit_code = main(["--store", str(tmp_path / "absent.h5"), "system-params"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0 and output == "-"


def test_cli_reports_store_errors(tmp_path, capsys) -> None:
    """Store failures should be reported on stderr with exit code 1."""
    exit_code = main(["--store", str(tmp_path / "absent.h5"), "show"])
    error_output = capsys.readouterr().err

    assert exit_code == 1 and "error:" in error_output


def test_cli_configures_logging_before_running(tmp_path, monkeypatch) -> None:
    """The entry point should install log handling before any command runs."""
    calls: list[str] = []
    monkeypatch.setattr("cli.main.configure_logging", lambda: calls.append("configured"))

    exit_code = main(["--store", str(tmp_path / "absent.h5"), "system-params"])

    assert exit_code == 0 and calls == ["configured"]
