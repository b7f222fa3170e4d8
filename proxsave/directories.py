"""
directories.py
Make sure every directory the run writes into exists before anything else is
probed: backup, log, lock directory and the parent of the lock file.

Missing directories are created (0755) unless in dry-run. Never deletes.
"""

from __future__ import annotations
import logging
import os
import stat
from typing import List

from .fsops import FsOps, DEFAULT_FS
from .types import (
    CheckerConfig,
    CheckResult,
    NAME_DIRECTORIES,
    CODE_NOT_DIRECTORY,
    CODE_STAT_FAILED,
    CODE_CREATE_FAILED,
)
from .util import clean_path

log = logging.getLogger(__name__)


def required_dirs(cfg: CheckerConfig) -> List[str]:
    """Cleaned, de-duplicated directory set; drops '', '.' and '/'."""
    seen: List[str] = []
    lock_dir = cfg.lock_dir_path or cfg.backup_path
    for p in (cfg.backup_path, cfg.log_path, lock_dir, os.path.dirname(cfg.lock_path())):
        c = clean_path(p)
        if c in ("", ".", "/") or c in seen:
            continue
        seen.append(c)
    return seen


def check_directories(cfg: CheckerConfig, fs: FsOps = DEFAULT_FS) -> CheckResult:
    result = CheckResult(name=NAME_DIRECTORIES)
    created = []
    pending = []

    for d in required_dirs(cfg):
        try:
            st = fs.stat(d)
        except FileNotFoundError:
            st = None
        except OSError as e:
            result.error = e
            result.message = f"failed to stat directory {d}: {e}"
            result.code = CODE_STAT_FAILED
            log.error("%s", result.message)
            return result

        if st is not None:
            if not stat.S_ISDIR(st.st_mode):
                result.error = NotADirectoryError(d)
                result.message = f"required path is not a directory: {d}"
                result.code = CODE_NOT_DIRECTORY
                log.error("%s", result.message)
                return result
            continue

        if cfg.dry_run:
            log.info("[DRY RUN] Would create directory: %s", d)
            pending.append(d)
            continue

        try:
            fs.makedirs(d, 0o755)
        except OSError as e:
            result.error = e
            result.message = f"failed to create directory {d}: {e}"
            result.code = CODE_CREATE_FAILED
            log.error("%s", result.message)
            return result
        log.info("Created missing directory: %s", d)
        created.append(d)

    result.passed = True
    if pending:
        result.message = f"All required directories exist or would be created: {', '.join(pending)}"
    elif created:
        result.message = f"All required directories exist (created: {', '.join(created)})"
    else:
        result.message = "All required directories exist"
    log.debug("%s", result.message)
    return result
