# MIT License © 2025 Motohiro Suzuki
from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "WARNING") -> None:
    lvl = logging.getLevelName(level.upper())
    if not isinstance(lvl, int):
        raise ValueError(f"unknown log level: {level!r}")

    # stdout is reserved for the device count report
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
