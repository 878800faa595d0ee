# MIT License © 2025 Motohiro Suzuki
"""
lscan_core/errors.py

Error taxonomy for the LScan Essentials binding.

- LoadError:           library missing / not loadable / wrong architecture
- SymbolNotFoundError: decorated export name absent from the library
- TypeMismatchError:   declared or actual argument types do not fit
- NativeStatusError:   native function returned a non-zero status code
"""

from __future__ import annotations


class LScanError(RuntimeError):
    pass


class LoadError(LScanError):
    pass


class SymbolNotFoundError(LScanError):
    def __init__(self, symbol: str, library: str) -> None:
        super().__init__(f"symbol not found: {symbol!r} in {library}")
        self.symbol = symbol
        self.library = library


class TypeMismatchError(LScanError):
    pass


class NativeStatusError(LScanError):
    """
    Status codes are defined by vendor documentation (LScanEssentialsApi_err.h),
    which is not part of this project. The value is kept as an opaque int.
    """

    def __init__(self, symbol: str, status: int) -> None:
        super().__init__(f"{symbol} failed status={status}")
        self.symbol = symbol
        self.status = status
