# MIT License © 2025 Motohiro Suzuki
"""
lscan_core/native.py

Native library handle: a loaded DLL plus a declared symbol table.

    lib = NativeLibrary(path, {"_Foo@4": (ctypes.c_int, [ctypes.POINTER(ctypes.c_int)])})
    with lib:
        rc = lib["_Foo@4"](ctypes.byref(out))

Symbols are resolved by their raw export name (stdcall decorated names such as
`_LSCAN_Main_GetDeviceCount@4` included) and re-typed through a function
prototype of the requested calling convention. All declared symbols are bound
when the handle is opened, so a missing export fails early.
"""

from __future__ import annotations

import ctypes
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from lscan_core.dll_loader import load_library
from lscan_core.errors import LoadError, SymbolNotFoundError, TypeMismatchError

log = logging.getLogger(__name__)

# (restype, [argtypes...])
Signature = Tuple[Any, Sequence[Any]]


def function_type(restype: Any, argtypes: Sequence[Any], *, stdcall: bool = True) -> Any:
    """
    Build a ctypes function prototype. stdcall uses WINFUNCTYPE where the
    platform has it; elsewhere both conventions map to CFUNCTYPE.
    """
    factory = ctypes.CFUNCTYPE
    if stdcall and hasattr(ctypes, "WINFUNCTYPE"):
        factory = ctypes.WINFUNCTYPE
    try:
        return factory(restype, *argtypes)
    except TypeError as e:
        raise TypeMismatchError(f"invalid signature ({restype!r}, {list(argtypes)!r}): {e}") from e


class BoundFunction:
    """
    Callable wrapper around one typed native function.

    ctypes conversion failures (wrong argument type or count) are raised as
    TypeMismatchError. A real ABI mismatch with the native code cannot be seen
    from here.
    """

    def __init__(self, name: str, fn: Callable[..., Any]) -> None:
        self.name = name
        self._fn = fn

    def __call__(self, *args: Any) -> Any:
        try:
            return self._fn(*args)
        except (ctypes.ArgumentError, TypeError) as e:
            raise TypeMismatchError(f"{self.name}: {e}") from e

    def __repr__(self) -> str:
        return f"<BoundFunction {self.name}>"


class NativeLibrary:
    def __init__(
        self,
        path: str | os.PathLike[str],
        symbols: Mapping[str, Signature],
        *,
        stdcall: bool = True,
        loader: Optional[Callable[[Path], Any]] = None,
    ) -> None:
        self.path = Path(path)
        self.symbols: Dict[str, Signature] = dict(symbols)
        self.stdcall = stdcall
        self._loader = loader
        self._lib: Any = None
        self._bound: Dict[str, BoundFunction] = {}
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._lib is not None

    def open(self) -> "NativeLibrary":
        if self._closed:
            raise LoadError(f"library handle already closed: {self.path}")
        if self._lib is not None:
            return self

        if self._loader is not None:
            lib = self._loader(self.path)
        else:
            lib = load_library(self.path, stdcall=self.stdcall)

        bound = {name: self._bind(lib, name, sig) for name, sig in self.symbols.items()}
        self._lib = lib
        self._bound = bound
        log.debug("bound %d symbol(s) from %s", len(bound), self.path)
        return self

    def close(self) -> None:
        # The OS keeps the image mapped until the last reference goes away.
        self._bound = {}
        self._lib = None
        self._closed = True

    def __enter__(self) -> "NativeLibrary":
        return self.open()

    def __exit__(self, *exc: object) -> None:
        self.close()

    def function(self, name: str) -> BoundFunction:
        if name not in self.symbols:
            raise SymbolNotFoundError(name, "declared symbol table")
        self.open()
        return self._bound[name]

    def __getitem__(self, name: str) -> BoundFunction:
        return self.function(name)

    def _bind(self, lib: Any, name: str, sig: Signature) -> BoundFunction:
        restype, argtypes = sig
        proto = function_type(restype, argtypes, stdcall=self.stdcall)
        try:
            raw = lib[name]
        except (AttributeError, KeyError) as e:
            raise SymbolNotFoundError(name, str(self.path)) from e

        address = ctypes.cast(raw, ctypes.c_void_p).value
        if not address:
            raise SymbolNotFoundError(name, str(self.path))
        return BoundFunction(name, proto(address))
