"""
orchestrator.py
Glue between the checker and the rest of a backup run:
  - run the preflight, log one line per check, pick an exit code
  - re-check free space once the collected size is known
  - optional JSON summary of the results
"""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from .checker import Checker
from .errors import PreflightError
from .types import (
    CheckResult,
    CODE_DISK_SPACE_INSUFFICIENT,
    CODE_DISK_STAT_FAILED,
    CODE_PERMISSION_DENIED,
    CODE_FS_READONLY,
    CODE_FS_IO_ERROR,
    CODE_PERMISSION_CHECK_FAILED,
    CODE_LOCK_BUSY,
    CODE_CANCELLED,
    EXIT_SUCCESS,
    EXIT_GENERIC_ERROR,
    EXIT_ENVIRONMENT_ERROR,
    EXIT_PERMISSION_ERROR,
    EXIT_DISK_SPACE_ERROR,
    EXIT_INTERRUPTED,
)
from .util import bytes_to_gb, hostname, write_json

log = logging.getLogger(__name__)

MIN_ESTIMATE_GB = 0.001

EXIT_BY_CODE = {
    CODE_DISK_SPACE_INSUFFICIENT: EXIT_DISK_SPACE_ERROR,
    CODE_DISK_STAT_FAILED: EXIT_DISK_SPACE_ERROR,
    CODE_PERMISSION_DENIED: EXIT_PERMISSION_ERROR,
    CODE_FS_READONLY: EXIT_PERMISSION_ERROR,
    CODE_FS_IO_ERROR: EXIT_PERMISSION_ERROR,
    CODE_PERMISSION_CHECK_FAILED: EXIT_PERMISSION_ERROR,
    CODE_LOCK_BUSY: EXIT_ENVIRONMENT_ERROR,
    CODE_CANCELLED: EXIT_INTERRUPTED,
}


def exit_code_for(code: str) -> int:
    return EXIT_BY_CODE.get(code, EXIT_GENERIC_ERROR)


def log_results(results: List[CheckResult]) -> None:
    for r in results:
        if r.passed:
            log.info("✓ %s: %s", r.name, r.message)
        else:
            log.error("✗ %s: %s", r.name, r.message)


def run_preflight(checker: Checker, cancel=None, summary_path: Path | None = None) -> int:
    """Run all checks; returns 0 or the exit code matching the failing check."""
    rc = EXIT_SUCCESS
    error = None
    try:
        results = checker.run_all_checks(cancel)
    except PreflightError as e:
        results = e.results
        error = str(e)
        rc = exit_code_for(e.code)

    log_results(results)
    if summary_path is not None:
        write_summary(summary_path, results, error)

    if error:
        log.error("Pre-backup checks failed: %s", error)
    else:
        log.info("All pre-backup checks passed")
    return rc


def check_estimate(checker: Checker, bytes_collected: int) -> int:
    """Size-aware disk check once the amount of collected data is known."""
    estimated_gb = max(bytes_to_gb(bytes_collected), MIN_ESTIMATE_GB)
    result = checker.check_disk_space_for_estimate(estimated_gb)
    if result.passed:
        log.debug("Disk check passed: %s", result.message)
        return EXIT_SUCCESS
    log.error("disk space validation failed: %s", result.message or "insufficient disk space")
    return EXIT_DISK_SPACE_ERROR


def result_to_dict(r: CheckResult) -> dict:
    return {
        "name": r.name,
        "passed": r.passed,
        "code": r.code,
        "message": r.message,
        "error": str(r.error) if r.error is not None else None,
    }


def write_summary(path: Path, results: List[CheckResult], error: str | None) -> None:
    write_json(
        path,
        {
            "finished_utc": datetime.now(timezone.utc).isoformat(),
            "host": hostname(),
            "passed": error is None,
            "error": error,
            "results": [result_to_dict(r) for r in results],
        },
    )
