"""
config.py
Load the preflight configuration from TOML (Python 3.11+ tomllib).
Search order:
  1) explicit --config path
  2) adjacent DEFAULT_CONFIG_PATH (bundle root / 'proxsave.toml')
  3) /etc/proxsave/proxsave.toml
"""

from __future__ import annotations
import os
import tomllib
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict
from .errors import ConfigError
from .types import CheckerConfig, DEFAULT_LOCK_NAME, DEFAULT_TEMP_ROOT
from .bundle import DEFAULT_CONFIG_PATH, SYSTEM_CONFIG_PATH

DEFAULT_BASE_DIR = "/opt/proxsave"
DEFAULT_MIN_DISK_GB = 10.0


@dataclass
class RuntimeSettings:
    log_level: str = "INFO"
    log_file: str = ""


def _gv(d: Dict[str, Any], path: list[str], default=None):
    cur = d
    for k in path:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def _load_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _min_disk(value) -> float:
    # zero or negative means "not configured"
    v = float(value)
    return v if v > 0 else DEFAULT_MIN_DISK_GB


def _bool(value, key: str) -> bool:
    # quoted "false" would otherwise read as True
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


def find_config(path_arg: str | None) -> Path:
    """Pick the best config path based on CLI arg and availability."""
    if path_arg:
        p = Path(path_arg)
        if not p.exists():
            raise FileNotFoundError(f"Specified config file does not exist: {path_arg}")
        return p

    p = Path(DEFAULT_CONFIG_PATH)
    if p.exists():
        return p
    return Path(SYSTEM_CONFIG_PATH)


def load_config(path: Path) -> tuple[CheckerConfig, RuntimeSettings]:
    cfg = _load_toml(path)

    def gv(keys, default=None):
        return _gv(cfg, keys, default)

    base = gv(["paths", "base_dir"], DEFAULT_BASE_DIR)
    lock_dir = gv(["paths", "lock_path"], os.path.join(base, "lock"))
    primary_min = _min_disk(gv(["checks", "min_disk_primary_gb"], DEFAULT_MIN_DISK_GB))

    secondary_enabled = _bool(gv(["secondary", "enabled"], False), "secondary.enabled")
    secondary_path = str(gv(["secondary", "path"], "")).strip()
    cloud_enabled = _bool(gv(["cloud", "enabled"], False), "cloud.enabled")
    cloud_path = str(gv(["cloud", "path"], "")).strip()

    checker_cfg = CheckerConfig(
        backup_path=gv(["paths", "backup_path"], os.path.join(base, "backup")),
        log_path=gv(["paths", "log_path"], os.path.join(base, "log")),
        secondary_enabled=secondary_enabled,
        secondary_path=secondary_path if secondary_enabled else "",
        cloud_enabled=cloud_enabled,
        cloud_path=cloud_path if cloud_enabled else "",
        min_disk_primary_gb=primary_min,
        min_disk_secondary_gb=_min_disk(gv(["secondary", "min_disk_gb"], primary_min)),
        min_disk_cloud_gb=_min_disk(gv(["cloud", "min_disk_gb"], primary_min)),
        safety_factor=float(gv(["checks", "safety_factor"], 1.5)),
        lock_dir_path=lock_dir,
        lock_file_path=gv(["paths", "lock_file"], "") or os.path.join(lock_dir, DEFAULT_LOCK_NAME),
        max_lock_age=timedelta(minutes=float(gv(["checks", "max_lock_age_minutes"], 120))),
        skip_permission_check=_bool(gv(["checks", "skip_permission_check"], False), "checks.skip_permission_check"),
        temp_root=gv(["paths", "temp_root"], DEFAULT_TEMP_ROOT),
    )
    runtime = RuntimeSettings(
        log_level=gv(["runtime", "log_level"], "INFO"),
        log_file=gv(["runtime", "log_file"], ""),
    )
    return checker_cfg, runtime
