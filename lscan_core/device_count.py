# MIT License © 2025 Motohiro Suzuki
"""
lscan_core/device_count.py

LScan Essentials: device count retrieval

    int WINAPI LSCAN_Main_GetDeviceCount(int *deviceCount);   // [out], caller memory

Exported (x86, stdcall) as `_LSCAN_Main_GetDeviceCount@4`.
"""

from __future__ import annotations

import ctypes
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, TextIO

from lscan_core.config import DEFAULT_DLL_PATH, LScanConfig
from lscan_core.errors import NativeStatusError
from lscan_core.native import NativeLibrary
from lscan_core.out_param import OutParam

log = logging.getLogger(__name__)

GET_DEVICE_COUNT = "_LSCAN_Main_GetDeviceCount@4"
LSCAN_OK = 0

SYMBOLS = {
    GET_DEVICE_COUNT: (ctypes.c_int, [ctypes.POINTER(ctypes.c_int)]),
}


@dataclass(frozen=True)
class DeviceCountResult:
    status: int
    count: int

    @property
    def ok(self) -> bool:
        return self.status == LSCAN_OK


class LScanEssentials:
    """
    Owns the LScan Essentials library handle. The DLL is loaded on first use
    (or by `open()` / `with`) and released by `close()`.

    Not thread-safe: the vendor library makes no guarantees, so callers sharing
    one instance across threads must serialise calls themselves.
    """

    def __init__(
        self,
        dll_path: str | os.PathLike[str] = DEFAULT_DLL_PATH,
        *,
        loader: Optional[Callable[[Path], Any]] = None,
    ) -> None:
        self.library = NativeLibrary(dll_path, SYMBOLS, stdcall=True, loader=loader)

    @classmethod
    def from_config(cls, cfg: LScanConfig, *, loader: Optional[Callable[[Path], Any]] = None) -> "LScanEssentials":
        return cls(cfg.dll_path, loader=loader)

    def open(self) -> "LScanEssentials":
        self.library.open()
        return self

    def close(self) -> None:
        self.library.close()

    def __enter__(self) -> "LScanEssentials":
        return self.open()

    def __exit__(self, *exc: object) -> None:
        self.close()

    def read_device_count(self) -> DeviceCountResult:
        """
        One native call. The status is returned, not checked; if the native
        side did not write the buffer, `count` is the pre-call value 0.
        """
        fn = self.library.function(GET_DEVICE_COUNT)
        with OutParam(ctypes.c_int) as out:
            status = int(fn(out.ref))
            count = int(out.value)
        log.debug("%s -> status=%d count=%d", GET_DEVICE_COUNT, status, count)
        return DeviceCountResult(status=status, count=count)

    def get_device_count(self, *, check: bool = True) -> int:
        res = self.read_device_count()
        if not res.ok:
            if check:
                raise NativeStatusError(GET_DEVICE_COUNT, res.status)
            log.warning("%s returned status=%d; count %d may be stale", GET_DEVICE_COUNT, res.status, res.count)
        return res.count


def format_device_count(count: int) -> str:
    return f"device count: {count}"


def report_device_count(api: LScanEssentials, *, check: bool = True, stream: Optional[TextIO] = None) -> int:
    count = api.get_device_count(check=check)
    print(format_device_count(count), file=stream)
    return count
