#!/usr/bin/env python3
"""
cli.py
Command-line interface for the proxsave preflight.
Parses arguments, loads config, runs the checks and releases the lock.
"""
from __future__ import annotations
import argparse, sys
from pathlib import Path
from .bundle import DEFAULT_CONFIG_PATH, SYSTEM_CONFIG_PATH
from .checker import Checker
from .config import find_config, load_config
from .errors import ConfigError, LockError
from .orchestrator import run_preflight, check_estimate
from .types import EXIT_SUCCESS, EXIT_GENERIC_ERROR, EXIT_CONFIG_ERROR, EXIT_INTERRUPTED
from .util import setup_logging


def validate_arguments(args) -> None:
    """Validate CLI arguments and provide helpful error messages."""
    if args.estimate_bytes is not None and args.estimate_bytes < 0:
        print(f"❌ Error: --estimate-bytes must not be negative, got {args.estimate_bytes}")
        print(f"💡 Hint: pass the number of bytes collected, e.g. --estimate-bytes 1073741824")
        sys.exit(EXIT_CONFIG_ERROR)
    if args.release_lock and args.keep_lock:
        print(f"❌ Error: --release-lock and --keep-lock cannot be combined")
        sys.exit(EXIT_CONFIG_ERROR)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="proxsave-preflight",
        description="proxsave: pre-backup safety checks (directories, temp area, disk, permissions, lock)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument(
        "--config",
        default=None,
        help=f"path to proxsave.toml (default: {DEFAULT_CONFIG_PATH} then {SYSTEM_CONFIG_PATH})",
    )
    ap.add_argument("--dry-run", action="store_true", help="report what would happen without touching the filesystem")
    ap.add_argument("--skip-permission-check", action="store_true", help="skip the write-permission probe")
    ap.add_argument("--estimate-bytes", type=int, default=None, help="also check space for this many collected bytes")
    ap.add_argument("--keep-lock", action="store_true", help="leave the lock in place on success")
    ap.add_argument("--release-lock", action="store_true", help="only remove the lock file and exit")
    ap.add_argument("--summary-json", default=None, help="write check results as JSON to this path")
    ap.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR (overrides config)")
    return ap


def main(argv=None) -> int:
    try:
        args = build_parser().parse_args(argv)
        validate_arguments(args)

        cfg_path = args.config
        try:
            cfg_path = find_config(args.config)
            cfg, runtime = load_config(cfg_path)
        except FileNotFoundError as e:
            print(f"❌ Error: {e}")
            print(f"💡 Hint: Create {args.config or SYSTEM_CONFIG_PATH} or pass --config")
            return EXIT_CONFIG_ERROR
        except Exception as e:
            print(f"❌ Error: Invalid configuration file {cfg_path}: {e}")
            print(f"💡 Hint: Check TOML syntax and value types in {cfg_path}")
            return EXIT_CONFIG_ERROR

        setup_logging(args.log_level or runtime.log_level, runtime.log_file or None)

        if args.dry_run:
            cfg.dry_run = True
        if args.skip_permission_check:
            cfg.skip_permission_check = True

        try:
            cfg.validate()
        except ConfigError as e:
            print(f"❌ Error: Invalid checker configuration: {e}")
            return EXIT_CONFIG_ERROR

        checker = Checker(cfg)

        if args.release_lock:
            checker.release_lock()
            return EXIT_SUCCESS

        summary = Path(args.summary_json) if args.summary_json else None
        rc = EXIT_GENERIC_ERROR
        try:
            rc = run_preflight(checker, summary_path=summary)
            if rc == EXIT_SUCCESS and args.estimate_bytes is not None:
                rc = check_estimate(checker, args.estimate_bytes)
        finally:
            # never remove a lock another run holds
            if checker.lock_acquired and not (args.keep_lock and rc == EXIT_SUCCESS):
                checker.release_lock()
        return rc

    except LockError as e:
        print(f"❌ Error: {e}")
        return EXIT_GENERIC_ERROR
    except OSError as e:
        print(f"❌ Error: {e}")
        print(f"💡 Hint: Check that --summary-json points to a writable location")
        return EXIT_GENERIC_ERROR
    except KeyboardInterrupt:
        print(f"\n\n⚡ Interrupted by user.")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
