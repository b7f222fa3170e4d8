"""
util.py
Cross-cutting utilities:
- Logging setup (stdout + optional rotating file)
- Host name and RFC-3339 timestamps for the lock payload
- Lexical path cleaning, byte/GB conversion, JSON writing
"""

from __future__ import annotations
import json, logging, logging.handlers, os, sys
from datetime import datetime
from pathlib import Path

GIB = 1024 * 1024 * 1024
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    lvl = getattr(logging, (level or "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(lvl)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(lvl)
    ch.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(ch)

    if log_file:
        path = Path(log_file)
        ensure_dir(path.parent)
        fh = logging.handlers.RotatingFileHandler(
            str(path), maxBytes=10 * 1024 * 1024, backupCount=5
        )
        fh.setLevel(lvl)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(fh)


def hostname() -> str:
    try:
        return os.uname().nodename or "unknown"
    except OSError:
        return "unknown"


def rfc3339_now() -> str:
    """Local time with offset, second precision (e.g. 2024-05-01T10:00:00+02:00)."""
    return datetime.now().astimezone().isoformat(timespec="seconds")


def clean_path(p: str) -> str:
    """Lexical cleaning: collapse separators and dot segments. Empty stays empty."""
    if not p:
        return ""
    return os.path.normpath(p).replace("//", "/")


def bytes_to_gb(n: int) -> float:
    return n / GIB


def ensure_dir(p: Path):
    """Create directory with better error reporting."""
    try:
        p.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        raise PermissionError(f"Cannot create directory {p} - insufficient permissions")
    except OSError as e:
        raise OSError(f"Cannot create directory {p}: {e}")


def write_json(path: Path, obj):
    ensure_dir(path.parent)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(obj, indent=2, sort_keys=True))
    tmp.replace(path)
