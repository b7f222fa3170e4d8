"""
diskspace.py
Free-space probe and the destination table shared by the unconditional and
the size-aware disk checks.

Primary is critical; secondary and cloud only produce warnings.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import List

from .fsops import FsOps, DEFAULT_FS
from .types import (
    CheckerConfig,
    CheckResult,
    NAME_DISK_SPACE,
    NAME_DISK_SPACE_ESTIMATED,
    CODE_DISK_SPACE_INSUFFICIENT,
    CODE_DISK_STAT_FAILED,
)
from .util import GIB

log = logging.getLogger(__name__)


@dataclass
class Destination:
    label: str
    path: str
    enabled: bool
    min_gb: float
    critical: bool

    def applicable(self) -> bool:
        return self.enabled and bool(self.path) and self.min_gb > 0


def available_gb(path: str, fs: FsOps = DEFAULT_FS) -> float:
    """Available space (GiB) on the filesystem holding path. OSError propagates."""
    st = fs.statvfs(path)
    return st.f_bavail * st.f_frsize / GIB


def existing_ancestor(path: str, fs: FsOps = DEFAULT_FS) -> str:
    """Nearest existing directory at or above path; dry-run never creates targets."""
    current = os.path.abspath(path)
    while True:
        try:
            fs.stat(current)
            return current
        except FileNotFoundError:
            parent = os.path.dirname(current)
            if parent == current:
                return current
            current = parent


def destinations(cfg: CheckerConfig) -> List[Destination]:
    return [
        Destination("Primary", cfg.backup_path, True, cfg.min_disk_primary_gb, True),
        Destination("Secondary", cfg.secondary_path, cfg.secondary_enabled, cfg.min_disk_secondary_gb, False),
        Destination("Cloud", cfg.cloud_path, cfg.cloud_enabled, cfg.min_disk_cloud_gb, False),
    ]


def _probe_path(cfg: CheckerConfig, path: str, fs: FsOps) -> str:
    if cfg.dry_run:
        return existing_ancestor(path, fs)
    return path


def check_disk_space(cfg: CheckerConfig, fs: FsOps = DEFAULT_FS) -> CheckResult:
    result = CheckResult(name=NAME_DISK_SPACE)
    has_warnings = False

    for d in destinations(cfg):
        if not d.applicable():
            continue
        try:
            avail = available_gb(_probe_path(cfg, d.path, fs), fs)
        except OSError as e:
            msg = f"{d.label} disk space check failed ({d.path}): {e}"
            if d.critical:
                result.error = e
                result.message = msg
                result.code = CODE_DISK_STAT_FAILED
                log.error("%s", msg)
                return result
            log.warning("%s (non-blocking)", msg)
            has_warnings = True
            continue

        if avail < d.min_gb:
            msg = (
                f"{d.label} disk space insufficient on {d.path}: "
                f"{avail:.2f} GB available, {d.min_gb:.2f} GB required"
            )
            if d.critical:
                result.error = OSError(msg)
                result.message = msg
                result.code = CODE_DISK_SPACE_INSUFFICIENT
                log.error("%s", msg)
                return result
            log.warning("%s disk space check failed (non-blocking): %s", d.label, msg)
            log.warning("Backup will continue, but %s storage may not be updated", d.label)
            has_warnings = True

    result.passed = True
    if has_warnings:
        result.message = "Primary disk space OK (warnings on secondary/cloud destinations)"
    else:
        result.message = "Sufficient disk space on all configured destinations"
    log.debug("%s", result.message)
    return result


def check_disk_space_for_estimate(
    cfg: CheckerConfig, estimated_gb: float, fs: FsOps = DEFAULT_FS
) -> CheckResult:
    """
    Like check_disk_space, but each destination must hold
    max(min_gb, estimated_gb * safety_factor).
    """
    result = CheckResult(name=NAME_DISK_SPACE_ESTIMATED)
    has_warnings = False

    for d in destinations(cfg):
        if not d.applicable():
            continue
        required = max(d.min_gb, estimated_gb * cfg.safety_factor)
        try:
            avail = available_gb(_probe_path(cfg, d.path, fs), fs)
        except OSError as e:
            msg = f"{d.label} disk space check failed ({d.path}): {e}"
            if d.critical:
                result.error = e
                result.message = msg
                result.code = CODE_DISK_STAT_FAILED
                log.error("%s", msg)
                return result
            log.warning("%s (non-blocking)", msg)
            has_warnings = True
            continue

        if avail < required:
            msg = (
                f"{d.label} disk space insufficient on {d.path}: {avail:.2f} GB available, "
                f"{required:.2f} GB required (max of {d.min_gb:.2f} GB min, "
                f"{estimated_gb:.2f} GB estimated × {cfg.safety_factor:.1f}x)"
            )
            if d.critical:
                result.error = OSError(msg)
                result.message = msg
                result.code = CODE_DISK_SPACE_INSUFFICIENT
                log.error("%s", msg)
                return result
            log.warning("%s (non-blocking)", msg)
            log.warning("%s storage may fail due to insufficient space", d.label)
            has_warnings = True

    result.passed = True
    if has_warnings:
        result.message = (
            f"Primary has sufficient disk space for estimated {estimated_gb:.2f} GB "
            f"(warnings on secondary/cloud)"
        )
    else:
        result.message = (
            f"Sufficient disk space for estimated {estimated_gb:.2f} GB "
            f"(safety factor {cfg.safety_factor:.1f}x) on all destinations"
        )
    log.debug("%s", result.message)
    return result
