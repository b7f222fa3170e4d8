"""
fsops.py
Filesystem primitives consumed by the checker.

Every check reaches the filesystem through an FsOps instance, so tests can
swap a single primitive (a failing create, a read-only write, a stuck clock)
without touching the real disk.
"""
from __future__ import annotations
import os
import time
from dataclasses import dataclass, field
from typing import IO, Callable


def open_exclusive(path: str, mode: int = 0o640) -> IO[str]:
    """Create path for writing; fails with FileExistsError if it already exists."""
    fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, mode)
    return os.fdopen(fd, "w")


def create_test_file(path: str) -> IO[str]:
    return open(path, "w")


def write_file(path: str, data: bytes, mode: int = 0o600) -> None:
    fd = os.open(path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, mode)
    with os.fdopen(fd, "wb") as f:
        f.write(data)


def sync_file(f: IO) -> None:
    os.fsync(f.fileno())


def makedirs(path: str, mode: int = 0o755) -> None:
    os.makedirs(path, mode=mode, exist_ok=True)


@dataclass
class FsOps:
    stat: Callable = field(default=os.stat)
    remove: Callable = field(default=os.remove)
    rename: Callable = field(default=os.rename)
    open_exclusive: Callable = field(default=open_exclusive)
    create_test_file: Callable = field(default=create_test_file)
    makedirs: Callable = field(default=makedirs)
    write_file: Callable = field(default=write_file)
    symlink: Callable = field(default=os.symlink)
    sync: Callable = field(default=sync_file)
    statvfs: Callable = field(default=os.statvfs)
    now: Callable = field(default=time.time)


DEFAULT_FS = FsOps()
