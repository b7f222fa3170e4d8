"""
permissions.py
Writability probe for the backup and log directories.

A hidden, pid-suffixed test file is created, closed and removed in each
directory. Only EIO is treated as transient and retried (3 attempts, 100 ms
apart); permission and read-only errors fail at once.
"""

from __future__ import annotations
import errno
import logging
import os
import time
from typing import Tuple

from .fsops import FsOps, DEFAULT_FS
from .types import (
    CheckerConfig,
    CheckResult,
    NAME_PERMISSIONS,
    CODE_PERMISSION_CHECK,
    CODE_PERMISSION_DENIED,
    CODE_FS_READONLY,
    CODE_FS_IO_ERROR,
    CODE_PERMISSION_CHECK_FAILED,
)

log = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
RETRY_DELAY = 0.1


def probe_file_name(directory: str) -> str:
    return os.path.join(directory, f".permission_test_{os.getpid()}")


def is_transient(err: OSError) -> bool:
    return err.errno == errno.EIO


def classify(err: BaseException) -> Tuple[str, str]:
    """Map a create failure to (reason, code)."""
    if isinstance(err, PermissionError) or getattr(err, "errno", None) in (errno.EACCES, errno.EPERM):
        return "no write permission", CODE_PERMISSION_DENIED
    if getattr(err, "errno", None) == errno.EROFS:
        return "filesystem is read-only", CODE_FS_READONLY
    if getattr(err, "errno", None) == errno.EIO:
        return "filesystem I/O error while testing write", CODE_FS_IO_ERROR
    return "failed to test write permission", CODE_PERMISSION_CHECK_FAILED


def probe_dir(directory: str, fs: FsOps = DEFAULT_FS, sleep=time.sleep) -> OSError | None:
    """
    Try to create and remove the test file. Returns the last error, or None
    when the directory is writable.
    """
    path = probe_file_name(directory)
    last_err = None
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            f = fs.create_test_file(path)
        except OSError as e:
            last_err = e
            if is_transient(e) and attempt < MAX_ATTEMPTS:
                log.warning(
                    "I/O error while testing write in %s (attempt %d/%d), will retry: %s",
                    directory, attempt, MAX_ATTEMPTS, e,
                )
                sleep(RETRY_DELAY)
                continue
            return last_err
        close_err = None
        try:
            f.close()
        except OSError as e:
            close_err = e
        try:
            fs.remove(path)
        except OSError as e:
            log.warning("Failed to remove test file %s: %s", path, e)
        return close_err
    return last_err


def check_permissions(cfg: CheckerConfig, fs: FsOps = DEFAULT_FS, sleep=time.sleep) -> CheckResult:
    result = CheckResult(name=NAME_PERMISSIONS, code=CODE_PERMISSION_CHECK)

    for d in (cfg.backup_path, cfg.log_path):
        if cfg.dry_run:
            log.debug("[DRY RUN] Would test write permission in: %s", d)
            continue
        err = probe_dir(d, fs, sleep)
        if err is None:
            continue
        reason, code = classify(err)
        result.code = code
        result.error = err
        result.message = f"{reason} in {d}: {err}"
        log.error("%s", result.message)
        return result

    result.passed = True
    if cfg.dry_run:
        result.message = "Write permission test skipped (dry run)"
    else:
        result.message = "All directories are writable"
    log.debug("%s", result.message)
    return result
