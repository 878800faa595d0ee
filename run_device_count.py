# MIT License © 2025 Motohiro Suzuki
"""
Print the number of connected L SCAN live scanner devices.

    python run_device_count.py [--dll PATH] [--ignore-status] [--log-level LEVEL]

Environment defaults: LSCAN_DLL_PATH, LSCAN_CHECK_STATUS, LSCAN_LOG_LEVEL.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Optional, Sequence

from diagnostics.logging_config import setup_logging
from lscan_core.config import LScanConfig, load_config, parse_level
from lscan_core.device_count import LScanEssentials, report_device_count
from lscan_core.errors import LScanError


def build_config(argv: Optional[Sequence[str]] = None) -> LScanConfig:
    cfg = load_config()

    ap = argparse.ArgumentParser(description="Report LScan Essentials device count")
    ap.add_argument("--dll", default=None, help=f"path to LScanEssentials DLL (default: {cfg.dll_path})")
    ap.add_argument("--ignore-status", action="store_true", help="report the count even if the native status is non-zero")
    ap.add_argument("--log-level", default=None, help=f"logging level (default: {cfg.log_level})")
    args = ap.parse_args(argv)

    if args.dll:
        cfg = replace(cfg, dll_path=args.dll)
    if args.ignore_status:
        cfg = replace(cfg, check_status=False)
    if args.log_level:
        cfg = replace(cfg, log_level=parse_level(args.log_level, "--log-level"))
    return cfg


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        cfg = build_config(argv)
    except ValueError as e:
        print(f"[lscan] config error: {e}", file=sys.stderr)
        return 2

    setup_logging(cfg.log_level)

    api = LScanEssentials.from_config(cfg)
    try:
        report_device_count(api, check=cfg.check_status)
    except LScanError as e:
        print(f"[lscan] {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    finally:
        api.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
