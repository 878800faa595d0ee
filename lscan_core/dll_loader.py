# MIT License © 2025 Motohiro Suzuki
"""
lscan_core/dll_loader.py

Vendor DLL loader (Windows stdcall, CDLL elsewhere)

Strategy:
1) resolve the path (as given / cwd, then project root)
2) for PE images, compare the machine field against the interpreter's pointer
   width so a 32-bit DLL in a 64-bit process is reported as such
3) load with WinDLL (stdcall) when available, else CDLL
"""

from __future__ import annotations

import ctypes
import logging
import os
import struct
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

from lscan_core.errors import LoadError

log = logging.getLogger(__name__)

# IMAGE_FILE_HEADER.Machine -> pointer width
_PE_MACHINE_BITS = {
    0x014C: 32,  # i386
    0x01C4: 32,  # ARMv7 thumb
    0x8664: 64,  # AMD64
    0xAA64: 64,  # ARM64
}

# directory -> handle returned by os.add_dll_directory
_dll_directories: Dict[str, Any] = {}


def _project_root() -> Path:
    # lscan_core/dll_loader.py -> project root
    return Path(__file__).resolve().parents[1]


def _process_bits() -> int:
    return struct.calcsize("P") * 8


def _iter_candidates(path: Path) -> Iterable[Path]:
    yield path
    if not path.is_absolute():
        yield _project_root() / path


def resolve_library_path(path: str | os.PathLike[str]) -> Path:
    """
    Return the first existing candidate; if none exists, the last candidate
    (so error messages point at the project-relative location).
    """
    p = Path(path).expanduser()
    last = p
    for cand in _iter_candidates(p):
        last = cand
        if cand.is_file():
            return cand.resolve()
    return last


def read_pe_machine(path: Path) -> Optional[int]:
    """
    Return IMAGE_FILE_HEADER.Machine of a PE image, or None if the file is not
    a PE image.
    """
    try:
        with open(path, "rb") as f:
            dos = f.read(64)
            if len(dos) < 64 or dos[:2] != b"MZ":
                return None
            (e_lfanew,) = struct.unpack_from("<I", dos, 0x3C)
            f.seek(e_lfanew)
            nt = f.read(6)
    except OSError as e:
        raise LoadError(f"cannot read library: {path}\n{e}") from e
    if len(nt) < 6 or nt[:4] != b"PE\x00\x00":
        return None
    (machine,) = struct.unpack_from("<H", nt, 4)
    return machine


def check_architecture(path: Path) -> None:
    machine = read_pe_machine(path)
    if machine is None:
        return
    bits = _PE_MACHINE_BITS.get(machine)
    if bits is None:
        log.warning("unknown PE machine 0x%04x in %s", machine, path)
        return
    if bits != _process_bits():
        raise LoadError(
            f"architecture mismatch: {path} is a {bits}-bit image "
            f"but this interpreter is {_process_bits()}-bit"
        )


def _add_dll_directory(directory: Path) -> None:
    """
    Add `directory` to the Windows DLL search path once per process. The
    handle is kept so the entry stays registered and is not added again.
    """
    if not hasattr(os, "add_dll_directory"):
        return
    key = str(directory)
    if key in _dll_directories:
        return
    _dll_directories[key] = os.add_dll_directory(key)


def _library_factory(stdcall: bool) -> Callable[[str], ctypes.CDLL]:
    if stdcall and hasattr(ctypes, "WinDLL"):
        return ctypes.WinDLL
    return ctypes.CDLL


def load_library(path: str | os.PathLike[str], *, stdcall: bool = True) -> ctypes.CDLL:
    """
    Load the shared library at `path` and return the ctypes handle.
    Any failure is raised as LoadError (OSError chained).
    """
    p = resolve_library_path(path)
    if not p.is_file():
        raise LoadError(f"library not found: {p}")

    check_architecture(p)

    # vendor DLLs ship their dependencies next to the main DLL
    _add_dll_directory(p.parent)

    factory = _library_factory(stdcall)
    try:
        lib = factory(str(p))
    except OSError as e:
        raise LoadError(f"failed to load library: {p}\n{e}") from e

    log.info("loaded %s via %s", p, factory.__name__)
    return lib
