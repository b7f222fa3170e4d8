"""
lock.py
Single-instance lock kept as a small file in the lock directory.

States:
  no file             -> exclusive create -> held by us
  file, age <= max    -> busy (another run is active)
  file, age >  max    -> stale: rename aside, confirm it is the file judged
                         stale (else restore it: busy), unlink, exclusive create
  create hits EEXIST  -> busy (another run won the race)

Staleness is judged from the file's mtime only; the recorded pid is never
probed for liveness, so max_lock_age must exceed the longest plausible run.

Payload (0640):
  pid=<pid>
  host=<hostname>
  time=<RFC-3339 timestamp>
"""

from __future__ import annotations
import logging
import os
import uuid
from datetime import timedelta
from typing import Dict

from .errors import LockError
from .fsops import FsOps, DEFAULT_FS
from .types import (
    CheckerConfig,
    CheckResult,
    NAME_LOCK_FILE,
    CODE_LOCK_BUSY,
    CODE_LOCK_STAT_FAILED,
    CODE_LOCK_REMOVE_FAILED,
    CODE_LOCK_CREATE_FAILED,
    CODE_LOCK_WRITE_FAILED,
)
from .util import hostname, rfc3339_now

log = logging.getLogger(__name__)

LOCK_MODE = 0o640


def lock_payload(pid: int | None = None, host: str | None = None, ts: str | None = None) -> str:
    pid = os.getpid() if pid is None else pid
    host = hostname() if host is None else host
    ts = rfc3339_now() if ts is None else ts
    return f"pid={pid}\nhost={host}\ntime={ts}\n"


def parse_payload(text: str) -> Dict[str, str]:
    """Parse key=value lines; unknown or malformed lines are ignored."""
    out: Dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep and key.strip():
            out[key.strip()] = value.strip()
    return out


def format_age(age: timedelta) -> str:
    secs = max(0, int(age.total_seconds()))
    return str(timedelta(seconds=secs))


def _observed_age(fs: FsOps, path: str) -> str:
    try:
        st = fs.stat(path)
    except OSError:
        return "unknown"
    return format_age(timedelta(seconds=fs.now() - st.st_mtime))


def _same_file(fs: FsOps, path: str, seen) -> bool:
    try:
        st = fs.stat(path)
    except OSError:
        return False
    return (st.st_dev, st.st_ino, st.st_mtime) == (seen.st_dev, seen.st_ino, seen.st_mtime)


def _fail(result: CheckResult, code: str, message: str, err: BaseException | None) -> CheckResult:
    result.code = code
    result.error = err
    result.message = message
    log.error("%s", message)
    return result


def check_lock_file(cfg: CheckerConfig, fs: FsOps = DEFAULT_FS) -> CheckResult:
    result = CheckResult(name=NAME_LOCK_FILE)
    path = cfg.lock_path()

    try:
        st = fs.stat(path)
    except FileNotFoundError:
        st = None
    except OSError as e:
        return _fail(result, CODE_LOCK_STAT_FAILED, f"failed to stat lock file: {e}", e)

    if st is not None:
        age = timedelta(seconds=fs.now() - st.st_mtime)
        if age <= cfg.max_lock_age:
            return _fail(
                result, CODE_LOCK_BUSY,
                f"Another backup is in progress (lock age: {format_age(age)})", None,
            )
        if cfg.dry_run:
            log.info("[DRY RUN] Would remove stale lock file (age: %s): %s", format_age(age), path)
        else:
            log.warning("Removing stale lock file (age: %s)", format_age(age))
            aside = f"{path}.stale.{os.getpid()}.{uuid.uuid4().hex[:8]}"
            try:
                fs.rename(path, aside)
            except FileNotFoundError:
                aside = None
            except OSError as e:
                return _fail(result, CODE_LOCK_REMOVE_FAILED, f"failed to remove stale lock: {e}", e)

            if aside is not None:
                if not _same_file(fs, aside, st):
                    # another run replaced the stale lock between our stat and rename
                    try:
                        fs.rename(aside, path)
                    except OSError as e:
                        log.warning("Failed to restore lock file %s: %s", path, e)
                    return _fail(
                        result, CODE_LOCK_BUSY,
                        f"Another backup acquired the lock (lock age: {_observed_age(fs, path)})", None,
                    )
                try:
                    fs.remove(aside)
                except OSError as e:
                    log.warning("Failed to remove stale lock %s: %s", aside, e)

    if cfg.dry_run:
        log.info("[DRY RUN] Would create lock file: %s", path)
        result.passed = True
        result.message = f"Lock file would be acquired: {path}"
        return result

    try:
        f = fs.open_exclusive(path, LOCK_MODE)
    except FileExistsError:
        return _fail(
            result, CODE_LOCK_BUSY,
            f"Another backup acquired the lock (lock age: {_observed_age(fs, path)})", None,
        )
    except OSError as e:
        return _fail(result, CODE_LOCK_CREATE_FAILED, f"failed to create lock file: {e}", e)

    write_err = None
    try:
        f.write(lock_payload())
        f.flush()
        try:
            fs.sync(f)
        except OSError as e:
            log.warning("Failed to sync lock file %s: %s", path, e)
    except OSError as e:
        write_err = e
    finally:
        try:
            f.close()
        except OSError as e:
            write_err = write_err or e

    if write_err is not None:
        # an empty lock would block every run until it goes stale
        try:
            fs.remove(path)
        except OSError as e:
            log.warning("Failed to remove incomplete lock file %s: %s", path, e)
        return _fail(result, CODE_LOCK_WRITE_FAILED, f"failed to write lock file: {write_err}", write_err)

    result.passed = True
    result.message = "Lock file acquired successfully"
    log.debug("%s", result.message)
    return result


def release_lock(cfg: CheckerConfig, fs: FsOps = DEFAULT_FS) -> None:
    """Remove the lock file. Absence is success; dry-run never touches disk."""
    path = cfg.lock_path()
    if cfg.dry_run:
        log.info("[DRY RUN] Would release lock file: %s", path)
        return
    try:
        fs.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise LockError(f"failed to release lock: {e}") from e
    log.debug("Lock file released: %s", path)
