"""
types.py
Dataclasses and constants used across modules: CheckerConfig, CheckResult,
result codes, check names and process exit codes.

Result codes are the stable contract for callers; messages are for humans.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .errors import ConfigError

DEFAULT_LOCK_NAME = ".backup.lock"
DEFAULT_TEMP_ROOT = "/tmp/proxsave"

# check names
NAME_DIRECTORIES = "Directories"
NAME_TEMP_DIRECTORY = "Temp Directory"
NAME_DISK_SPACE = "Disk Space"
NAME_DISK_SPACE_ESTIMATED = "Disk Space (Estimated)"
NAME_PERMISSIONS = "Permissions"
NAME_LOCK_FILE = "Lock File"

CHECK_ORDER = (
    NAME_DIRECTORIES,
    NAME_TEMP_DIRECTORY,
    NAME_DISK_SPACE,
    NAME_PERMISSIONS,
    NAME_LOCK_FILE,
)

# result codes
CODE_PERMISSION_CHECK = "PERMISSION_CHECK"
CODE_PERMISSION_DENIED = "PERMISSION_DENIED"
CODE_FS_READONLY = "FS_READONLY"
CODE_FS_IO_ERROR = "FS_IO_ERROR"
CODE_PERMISSION_CHECK_FAILED = "PERMISSION_CHECK_FAILED"
CODE_NOT_DIRECTORY = "NOT_DIRECTORY"
CODE_STAT_FAILED = "STAT_FAILED"
CODE_CREATE_FAILED = "CREATE_FAILED"
CODE_VERIFY_FAILED = "VERIFY_FAILED"
CODE_NOT_WRITABLE = "NOT_WRITABLE"
CODE_NO_SYMLINK_SUPPORT = "NO_SYMLINK_SUPPORT"
CODE_DISK_SPACE_INSUFFICIENT = "DISK_SPACE_INSUFFICIENT"
CODE_DISK_STAT_FAILED = "DISK_STAT_FAILED"
CODE_LOCK_BUSY = "LOCK_BUSY"
CODE_LOCK_STAT_FAILED = "LOCK_STAT_FAILED"
CODE_LOCK_REMOVE_FAILED = "LOCK_REMOVE_FAILED"
CODE_LOCK_CREATE_FAILED = "LOCK_CREATE_FAILED"
CODE_LOCK_WRITE_FAILED = "LOCK_WRITE_FAILED"
CODE_CANCELLED = "CANCELLED"

# process exit codes
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_ENVIRONMENT_ERROR = 3
EXIT_PERMISSION_ERROR = 7
EXIT_DISK_SPACE_ERROR = 12
EXIT_INTERRUPTED = 130


@dataclass
class CheckerConfig:
    # destinations
    backup_path: str
    log_path: str
    secondary_path: str = ""
    secondary_enabled: bool = False
    cloud_path: str = ""
    cloud_enabled: bool = False
    # thresholds
    min_disk_primary_gb: float = 0.0
    min_disk_secondary_gb: float = 0.0
    min_disk_cloud_gb: float = 0.0
    safety_factor: float = 1.0
    # lock
    lock_dir_path: str = ""
    lock_file_path: str = ""
    max_lock_age: timedelta = timedelta(hours=2)
    # flags
    skip_permission_check: bool = False
    dry_run: bool = False
    temp_root: str = DEFAULT_TEMP_ROOT

    def validate(self) -> None:
        """Reject unusable settings up-front; fills lock_dir_path from backup_path."""
        if not self.backup_path:
            raise ConfigError("backup path cannot be empty")
        if not self.log_path:
            raise ConfigError("log path cannot be empty")
        if not self.lock_dir_path:
            self.lock_dir_path = self.backup_path
        if self.min_disk_primary_gb < 0:
            raise ConfigError("primary minimum disk space cannot be negative")
        if self.min_disk_secondary_gb < 0:
            raise ConfigError("secondary minimum disk space cannot be negative")
        if self.min_disk_cloud_gb < 0:
            raise ConfigError("cloud minimum disk space cannot be negative")
        if self.safety_factor < 1.0:
            raise ConfigError(f"safety factor must be >= 1.0, got {self.safety_factor:.2f}")
        if self.max_lock_age <= timedelta(0):
            raise ConfigError("max lock age must be positive")

    def lock_path(self) -> str:
        """Absolute lock file path, derived from the lock directory when unset."""
        if self.lock_file_path:
            return self.lock_file_path
        return os.path.join(self.lock_dir_path or self.backup_path, DEFAULT_LOCK_NAME)


@dataclass
class CheckResult:
    name: str
    passed: bool = False
    message: str = ""
    error: Optional[BaseException] = None
    code: str = ""


def default_checker_config(backup_path: str, log_path: str, lock_dir: str) -> CheckerConfig:
    """Reference defaults used by the host tool before per-host overrides."""
    return CheckerConfig(
        backup_path=backup_path,
        log_path=log_path,
        min_disk_primary_gb=10.0,
        min_disk_secondary_gb=10.0,
        min_disk_cloud_gb=10.0,
        safety_factor=1.5,  # 50% buffer over estimated size
        lock_dir_path=lock_dir,
        lock_file_path=os.path.join(lock_dir, DEFAULT_LOCK_NAME),
        max_lock_age=timedelta(hours=2),
    )
