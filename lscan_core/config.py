# MIT License © 2025 Motohiro Suzuki
"""
lscan_core/config.py

- LSCAN_DLL_PATH:     path to LScanEssentials DLL
- LSCAN_CHECK_STATUS: "1" raise on non-zero status (default), "0" ignore it
- LSCAN_LOG_LEVEL:    logging level name (default WARNING)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_DLL_PATH = os.path.join("resources", "LScanEssentials-x86.dll")

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


@dataclass(frozen=True)
class LScanConfig:
    dll_path: str = DEFAULT_DLL_PATH
    check_status: bool = True
    log_level: str = "WARNING"


def _read_bool_env(env: Mapping[str, str], name: str, default: bool) -> bool:
    v = env.get(name, "").strip().lower()
    if not v:
        return default
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"{name} must be one of {_TRUE + _FALSE}, got {v!r}")


def parse_level(value: str, name: str = "log level") -> str:
    v = value.strip().upper()
    if not isinstance(logging.getLevelName(v), int):
        raise ValueError(f"{name} must be a logging level name, got {v!r}")
    return v


def _read_level_env(env: Mapping[str, str], name: str, default: str) -> str:
    v = env.get(name, "").strip()
    if not v:
        return default
    return parse_level(v, name)


def load_config(env: Optional[Mapping[str, str]] = None) -> LScanConfig:
    if env is None:
        env = os.environ
    dll_path = env.get("LSCAN_DLL_PATH", "").strip() or DEFAULT_DLL_PATH
    return LScanConfig(
        dll_path=dll_path,
        check_status=_read_bool_env(env, "LSCAN_CHECK_STATUS", True),
        log_level=_read_level_env(env, "LSCAN_LOG_LEVEL", "WARNING"),
    )
