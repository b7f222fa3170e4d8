"""
tempdir.py
Verify the temp work area used by later staging stages: it must exist, be a
directory, accept writes and accept symbolic links (staged content is
assembled from symlinks; some overlay/noexec mounts reject them).

In dry-run the area is only inspected, never created or written.
"""

from __future__ import annotations
import logging
import os
import stat

from .fsops import FsOps, DEFAULT_FS
from .types import (
    CheckerConfig,
    CheckResult,
    NAME_TEMP_DIRECTORY,
    CODE_CREATE_FAILED,
    CODE_VERIFY_FAILED,
    CODE_NOT_DIRECTORY,
    CODE_NOT_WRITABLE,
    CODE_NO_SYMLINK_SUPPORT,
)

log = logging.getLogger(__name__)

TEST_FILE = ".proxsave-permission-test"
TEST_SYMLINK = ".proxsave-symlink-test"


def scratch_paths(root: str) -> tuple[str, str]:
    """Per-process test file and symlink names, so concurrent runs never collide."""
    pid = os.getpid()
    return os.path.join(root, f"{TEST_FILE}-{pid}"), os.path.join(root, f"{TEST_SYMLINK}-{pid}")


def _fail(result: CheckResult, code: str, message: str, err: BaseException) -> CheckResult:
    result.code = code
    result.error = err
    result.message = message
    log.error("%s", message)
    return result


def _cleanup(fs: FsOps, path: str) -> None:
    try:
        fs.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning("Failed to remove %s: %s", path, e)


def check_temp_directory(cfg: CheckerConfig, fs: FsOps = DEFAULT_FS) -> CheckResult:
    result = CheckResult(name=NAME_TEMP_DIRECTORY)
    root = cfg.temp_root

    try:
        fs.stat(root)
        exists = True
    except FileNotFoundError:
        exists = False
    except OSError as e:
        return _fail(result, CODE_VERIFY_FAILED, f"cannot verify temp directory {root}: {e}", e)

    if not exists:
        if cfg.dry_run:
            log.info("[DRY RUN] Would create temp directory: %s", root)
            result.passed = True
            result.message = f"Temp directory {root} would be created"
            return result
        try:
            fs.makedirs(root, 0o755)
        except OSError as e:
            return _fail(result, CODE_CREATE_FAILED, f"cannot create temp directory {root}: {e}", e)
        log.info("Created temp directory: %s", root)

    try:
        st = fs.stat(root)
    except OSError as e:
        return _fail(result, CODE_VERIFY_FAILED, f"cannot verify temp directory {root}: {e}", e)
    if not stat.S_ISDIR(st.st_mode):
        return _fail(
            result, CODE_NOT_DIRECTORY, f"temp path is not a directory: {root}", NotADirectoryError(root)
        )

    if cfg.dry_run:
        log.info("[DRY RUN] Would test write and symlink support in: %s", root)
        result.passed = True
        result.message = f"Temp directory {root} exists (write/symlink test skipped in dry run)"
        return result

    test_file, test_link = scratch_paths(root)
    try:
        fs.write_file(test_file, b"test", 0o600)
    except OSError as e:
        _cleanup(fs, test_file)
        return _fail(result, CODE_NOT_WRITABLE, f"temp directory {root} is not writable: {e}", e)

    try:
        try:
            fs.symlink(test_file, test_link)
        except FileExistsError:
            # left over from an interrupted run
            _cleanup(fs, test_link)
            fs.symlink(test_file, test_link)
    except OSError as e:
        return _fail(
            result, CODE_NO_SYMLINK_SUPPORT,
            f"temp directory {root} does not support symlinks: {e}", e,
        )
    finally:
        _cleanup(fs, test_link)
        _cleanup(fs, test_file)

    result.passed = True
    result.message = f"Temp directory {root} is writable with symlink support"
    log.debug("%s", result.message)
    return result
