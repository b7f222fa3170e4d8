"""
Pytest configuration and shared fixtures.
"""
import os
import pytest
from datetime import timedelta
from pathlib import Path
from proxsave.types import CheckerConfig


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary configuration file for testing."""
    toml_content = f"""
[paths]
backup_path = "{tmp_path / 'backup'}"
log_path = "{tmp_path / 'log'}"
lock_path = "{tmp_path / 'lock'}"
temp_root = "{tmp_path / 'staging'}"

[secondary]
enabled = true
path = "{tmp_path / 'secondary'}"
min_disk_gb = 0.001

[cloud]
enabled = false
path = "remote:bucket"

[checks]
min_disk_primary_gb = 0.001
safety_factor = 1.2
max_lock_age_minutes = 30
skip_permission_check = false

[runtime]
log_level = "DEBUG"
"""
    path = tmp_path / "proxsave.toml"
    path.write_text(toml_content)
    return path


@pytest.fixture
def checker_config(tmp_path):
    """A valid config whose every path lives under the test's tmp_path."""
    base = tmp_path / "host"
    base.mkdir()
    return CheckerConfig(
        backup_path=str(base),
        log_path=str(base),
        lock_dir_path=str(base),
        lock_file_path=str(base / ".backup.lock"),
        min_disk_primary_gb=0.001,
        safety_factor=1.0,
        max_lock_age=timedelta(hours=1),
        temp_root=str(tmp_path / "staging"),
    )


def snapshot_tree(root: Path) -> dict:
    """Map every entry under root (root included) to (mode, size, mtime_ns)."""
    out = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in [""] + dirnames + filenames:
            p = os.path.join(dirpath, name) if name else dirpath
            st = os.lstat(p)
            out[p] = (st.st_mode, st.st_size, st.st_mtime_ns)
    return out
