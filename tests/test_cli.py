"""
Tests for the command-line entry point.
"""
import pytest
from pathlib import Path

from proxsave import cli
from proxsave.config import load_config
from proxsave.types import EXIT_SUCCESS, EXIT_GENERIC_ERROR, EXIT_CONFIG_ERROR, EXIT_DISK_SPACE_ERROR, EXIT_ENVIRONMENT_ERROR


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """Keep the CLI from attaching handlers to the root logger during tests."""
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)


def _lock_path(config_file) -> Path:
    cfg, _ = load_config(config_file)
    return Path(cfg.lock_file_path)


def test_cli_runs_and_releases_lock(temp_config_file, tmp_path):
    rc = cli.main(["--config", str(temp_config_file)])
    assert rc == EXIT_SUCCESS
    assert (tmp_path / "backup").is_dir()
    assert not _lock_path(temp_config_file).exists()


def test_cli_keep_lock(temp_config_file):
    rc = cli.main(["--config", str(temp_config_file), "--keep-lock"])
    assert rc == EXIT_SUCCESS
    lock = _lock_path(temp_config_file)
    assert lock.exists()

    # a second run is refused and must not remove the first run's lock
    assert cli.main(["--config", str(temp_config_file)]) == EXIT_ENVIRONMENT_ERROR
    assert lock.exists()

    assert cli.main(["--config", str(temp_config_file), "--release-lock"]) == EXIT_SUCCESS
    assert not lock.exists()


def test_cli_dry_run_creates_nothing(temp_config_file, tmp_path):
    rc = cli.main(["--config", str(temp_config_file), "--dry-run"])
    assert rc == EXIT_SUCCESS
    assert not (tmp_path / "backup").exists()
    assert not (tmp_path / "staging").exists()


def test_cli_estimate_too_large(temp_config_file):
    rc = cli.main(["--config", str(temp_config_file), "--estimate-bytes", str(10**18)])
    assert rc == EXIT_DISK_SPACE_ERROR
    assert not _lock_path(temp_config_file).exists()


def test_cli_summary_json(temp_config_file, tmp_path):
    out = tmp_path / "summary.json"
    assert cli.main(["--config", str(temp_config_file), "--summary-json", str(out)]) == EXIT_SUCCESS
    assert '"passed": true' in out.read_text()


def test_cli_missing_config(tmp_path, capsys):
    rc = cli.main(["--config", str(tmp_path / "missing.toml")])
    assert rc == EXIT_CONFIG_ERROR
    assert "does not exist" in capsys.readouterr().out


def test_cli_invalid_checker_config(tmp_path, capsys):
    path = tmp_path / "proxsave.toml"
    path.write_text(f'[paths]\nbackup_path = "{tmp_path}"\nlog_path = "{tmp_path}"\n[checks]\nsafety_factor = 0.5\n')
    assert cli.main(["--config", str(path)]) == EXIT_CONFIG_ERROR
    assert "safety factor" in capsys.readouterr().out


def test_cli_rejects_negative_estimate(temp_config_file):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--config", str(temp_config_file), "--estimate-bytes", "-1"])
    assert exc.value.code == EXIT_CONFIG_ERROR


def test_cli_unwritable_summary_still_releases_lock(temp_config_file, tmp_path, capsys):
    blocker = tmp_path / "notadir"
    blocker.write_text("x")
    rc = cli.main(["--config", str(temp_config_file), "--summary-json", str(blocker / "s.json")])
    assert rc == EXIT_GENERIC_ERROR
    assert "Cannot create directory" in capsys.readouterr().out
    assert not _lock_path(temp_config_file).exists()


def test_cli_quoted_boolean_rejected(tmp_path, capsys):
    path = tmp_path / "proxsave.toml"
    path.write_text(f'[paths]\nbase_dir = "{tmp_path}"\n[cloud]\nenabled = "false"\npath = "{tmp_path}"\n')
    assert cli.main(["--config", str(path)]) == EXIT_CONFIG_ERROR
    assert "cloud.enabled must be true or false" in capsys.readouterr().out
