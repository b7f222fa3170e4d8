"""
checker.py
Pre-backup checker: runs the safety checks in a fixed order and owns the
lock between acquisition and release.

Order matters:
  1. Directories     every later check assumes its paths exist
  2. Temp Directory  staging area writable and symlink-capable
  3. Disk Space      per enabled destination
  4. Permissions     unless skip_permission_check
  5. Lock File       last, so a failing host never holds a lock
"""

from __future__ import annotations
import logging
from typing import List

from . import diskspace, directories, lock, permissions, tempdir
from .errors import PreflightError, PreflightCancelled
from .fsops import FsOps, DEFAULT_FS
from .types import CheckerConfig, CheckResult

log = logging.getLogger(__name__)


class Checker:
    def __init__(self, config: CheckerConfig, fs: FsOps | None = None):
        self.config = config
        self.fs = fs or DEFAULT_FS
        self.lock_acquired = False

    def disable_cloud(self) -> None:
        """Treat cloud as disabled for the rest of the run."""
        if self.config is None:
            return
        self.config.cloud_enabled = False
        self.config.cloud_path = ""

    def should_skip_permission_check(self) -> bool:
        return bool(self.config.skip_permission_check)

    def check_directories(self) -> CheckResult:
        return directories.check_directories(self.config, self.fs)

    def check_temp_directory(self) -> CheckResult:
        return tempdir.check_temp_directory(self.config, self.fs)

    def check_disk_space(self) -> CheckResult:
        return diskspace.check_disk_space(self.config, self.fs)

    def check_disk_space_for_estimate(self, estimated_gb: float) -> CheckResult:
        return diskspace.check_disk_space_for_estimate(self.config, estimated_gb, self.fs)

    def check_permissions(self) -> CheckResult:
        return permissions.check_permissions(self.config, self.fs)

    def check_lock_file(self) -> CheckResult:
        result = lock.check_lock_file(self.config, self.fs)
        if result.passed:
            self.lock_acquired = True
        return result

    def release_lock(self) -> None:
        """Remove the lock file; a missing file is not an error."""
        lock.release_lock(self.config, self.fs)
        self.lock_acquired = False

    def _steps(self):
        steps = [
            ("directory", self.check_directories),
            ("temp directory", self.check_temp_directory),
            ("disk space", self.check_disk_space),
        ]
        if not self.should_skip_permission_check():
            steps.append(("permissions", self.check_permissions))
        steps.append(("lock file", self.check_lock_file))
        return steps

    def run_all_checks(self, cancel=None) -> List[CheckResult]:
        """
        Run every check in order and return the results.

        Raises PreflightError on the first failing check (the exception holds
        all results so far), or PreflightCancelled when cancel.is_set() is
        true between two steps.
        """
        log.debug("Running pre-backup validation checks")
        results: List[CheckResult] = []

        for step, run in self._steps():
            if cancel is not None and cancel.is_set():
                raise PreflightCancelled(f"pre-backup checks cancelled before {step} check", results)
            r = run()
            results.append(r)
            if not r.passed:
                raise PreflightError(f"{step} check failed: {r.message}", results, r)

        log.debug("All pre-backup checks passed")
        return results
