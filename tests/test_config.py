"""
Tests for configuration loading and validation.
"""
import pytest
from datetime import timedelta
from pathlib import Path

from proxsave.config import find_config, load_config
from proxsave.errors import ConfigError
from proxsave.types import CheckerConfig, default_checker_config


def test_load_config_basic(temp_config_file, tmp_path):
    """Test basic configuration loading."""
    cfg, runtime = load_config(temp_config_file)

    assert cfg.backup_path == str(tmp_path / "backup")
    assert cfg.log_path == str(tmp_path / "log")
    assert cfg.lock_dir_path == str(tmp_path / "lock")
    assert cfg.lock_file_path == str(tmp_path / "lock" / ".backup.lock")
    assert cfg.temp_root == str(tmp_path / "staging")
    assert cfg.secondary_enabled is True
    assert cfg.secondary_path == str(tmp_path / "secondary")
    assert cfg.min_disk_secondary_gb == 0.001
    assert cfg.safety_factor == 1.2
    assert cfg.max_lock_age == timedelta(minutes=30)
    assert runtime.log_level == "DEBUG"


def test_disabled_cloud_drops_path(temp_config_file):
    cfg, _ = load_config(temp_config_file)
    assert cfg.cloud_enabled is False
    assert cfg.cloud_path == ""
    # unset cloud threshold follows the primary one
    assert cfg.min_disk_cloud_gb == cfg.min_disk_primary_gb


def test_config_defaults(tmp_path):
    """Test that configuration uses proper defaults."""
    path = tmp_path / "proxsave.toml"
    path.write_text('[paths]\nbase_dir = "/srv/proxsave"\n')

    cfg, runtime = load_config(path)

    assert cfg.backup_path == "/srv/proxsave/backup"
    assert cfg.log_path == "/srv/proxsave/log"
    assert cfg.lock_dir_path == "/srv/proxsave/lock"
    assert cfg.lock_file_path == "/srv/proxsave/lock/.backup.lock"
    assert cfg.temp_root == "/tmp/proxsave"
    assert cfg.min_disk_primary_gb == 10.0
    assert cfg.min_disk_secondary_gb == 10.0
    assert cfg.safety_factor == 1.5
    assert cfg.max_lock_age == timedelta(hours=2)
    assert cfg.skip_permission_check is False
    assert cfg.dry_run is False
    assert runtime.log_level == "INFO"


def test_non_positive_min_disk_falls_back(tmp_path):
    path = tmp_path / "proxsave.toml"
    path.write_text("[checks]\nmin_disk_primary_gb = 0\n[secondary]\nmin_disk_gb = -4\n")
    cfg, _ = load_config(path)
    assert cfg.min_disk_primary_gb == 10.0
    assert cfg.min_disk_secondary_gb == 10.0


def test_invalid_toml_raises(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("[paths\n")
    with pytest.raises(Exception):
        load_config(path)


def test_find_config_explicit_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_config(str(tmp_path / "missing.toml"))


def test_find_config_explicit(temp_config_file):
    assert find_config(str(temp_config_file)) == Path(temp_config_file)


def test_validate_defaults_lock_dir():
    cfg = CheckerConfig(backup_path="/tmp/backups", log_path="/tmp/logs", max_lock_age=timedelta(minutes=1))
    cfg.validate()
    assert cfg.lock_dir_path == cfg.backup_path
    assert cfg.lock_path() == "/tmp/backups/.backup.lock"


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"backup_path": "", "log_path": "x"}, "backup path cannot be empty"),
        ({"backup_path": "x", "log_path": ""}, "log path cannot be empty"),
        ({"backup_path": "x", "log_path": "x", "min_disk_primary_gb": -1}, "primary minimum disk space cannot be negative"),
        ({"backup_path": "x", "log_path": "x", "min_disk_secondary_gb": -1}, "secondary minimum disk space cannot be negative"),
        ({"backup_path": "x", "log_path": "x", "min_disk_cloud_gb": -1}, "cloud minimum disk space cannot be negative"),
        ({"backup_path": "x", "log_path": "x", "safety_factor": 0.5}, "safety factor must be >="),
        ({"backup_path": "x", "log_path": "x", "max_lock_age": timedelta(0)}, "max lock age must be positive"),
    ],
)
def test_validate_rejects(kwargs, message):
    with pytest.raises(ConfigError, match=message):
        CheckerConfig(**kwargs).validate()


def test_default_checker_config():
    cfg = default_checker_config("/test/backup", "/test/log", "/test/lock")
    assert cfg.backup_path == "/test/backup"
    assert cfg.log_path == "/test/log"
    assert cfg.lock_dir_path == "/test/lock"
    assert cfg.lock_file_path == "/test/lock/.backup.lock"
    assert cfg.min_disk_primary_gb == 10.0
    assert cfg.min_disk_secondary_gb == 10.0
    assert cfg.min_disk_cloud_gb == 10.0
    assert cfg.safety_factor == 1.5
    assert cfg.max_lock_age == timedelta(hours=2)
    assert cfg.secondary_enabled is False
    assert cfg.cloud_enabled is False


@pytest.mark.parametrize(
    "section, key",
    [("secondary", "enabled"), ("cloud", "enabled"), ("checks", "skip_permission_check")],
)
def test_quoted_boolean_rejected(tmp_path, section, key):
    """A string such as "false" must not silently enable anything."""
    path = tmp_path / "proxsave.toml"
    path.write_text(f'[{section}]\n{key} = "false"\n')
    with pytest.raises(ConfigError, match=f"{section}.{key} must be true or false"):
        load_config(path)


def test_real_booleans_accepted(tmp_path):
    path = tmp_path / "proxsave.toml"
    path.write_text(f'[secondary]\nenabled = false\npath = "{tmp_path}"\n[checks]\nskip_permission_check = true\n')
    cfg, _ = load_config(path)
    assert cfg.secondary_enabled is False
    assert cfg.secondary_path == ""
    assert cfg.skip_permission_check is True
