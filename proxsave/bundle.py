"""
bundle.py
Locate the program's own directory so a `proxsave.toml` shipped next to it
is picked up before the system-wide one.
"""
from __future__ import annotations
import sys
from pathlib import Path

def bundle_root() -> Path:
    """
    Return the directory that contains the program.
    - PyInstaller onefile: sys.executable points to the extracted binary; use parent.
    - Source run: look for main.py or proxsave.toml above the package
    """
    if getattr(sys, "_MEIPASS", None):
        return Path(sys.executable).resolve().parent

    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "main.py").exists() or (parent / "proxsave.toml").exists():
            return parent

    return current.parent.parent

BUNDLE_DIR: Path = bundle_root()
DEFAULT_CONFIG_PATH: str = str(BUNDLE_DIR / "proxsave.toml")
SYSTEM_CONFIG_PATH: str = "/etc/proxsave/proxsave.toml"
