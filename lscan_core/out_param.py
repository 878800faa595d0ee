# MIT License © 2025 Motohiro Suzuki
"""
lscan_core/out_param.py

Scoped storage for a native [out] parameter.

    with OutParam(ctypes.c_int) as out:
        rc = fn(out.ref)
        n = out.value

The address is only handed out inside the `with` block, and the buffer stays
referenced for the whole block, so it outlives the foreign call.
"""

from __future__ import annotations

import ctypes
from typing import Any, Optional, Type

_MIN_SIZE = 4


class OutParam:
    def __init__(self, ctype: Type[Any] = ctypes.c_int, *, min_size: int = _MIN_SIZE) -> None:
        if not (isinstance(ctype, type) and issubclass(ctype, ctypes._SimpleCData)):
            raise TypeError(f"ctype must be a ctypes scalar type, got {ctype!r}")
        if ctypes.sizeof(ctype) < min_size:
            raise ValueError(f"{ctype.__name__} is {ctypes.sizeof(ctype)} bytes, need >= {min_size}")
        self.ctype = ctype
        self._buf: Optional[Any] = None
        self._last: Any = None

    def __enter__(self) -> "OutParam":
        buf = self.ctype()
        if ctypes.addressof(buf) % ctypes.alignment(self.ctype) != 0:
            raise RuntimeError(f"misaligned {self.ctype.__name__} buffer")
        self._buf = buf
        return self

    def __exit__(self, *exc: object) -> None:
        if self._buf is not None:
            self._last = self._buf.value
        self._buf = None

    @property
    def ref(self) -> Any:
        """byref() of the live buffer; only valid inside the with block."""
        if self._buf is None:
            raise RuntimeError("OutParam address used outside its scope")
        return ctypes.byref(self._buf)

    @property
    def value(self) -> Any:
        # after the block, the last value read stays available
        if self._buf is None:
            if self._last is None:
                raise RuntimeError("OutParam read before use")
            return self._last
        return self._buf.value
