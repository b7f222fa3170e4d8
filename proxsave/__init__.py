"""
proxsave package
- Pre-backup safety checks for Proxmox VE / PBS configuration backups:
  directories, temp area, disk space, write permissions and the single-run lock.
"""
__all__ = ["cli", "config", "checker", "orchestrator", "directories", "tempdir", "diskspace", "permissions", "lock", "fsops", "util", "types", "errors", "bundle"]
__version__ = "0.3.0"
