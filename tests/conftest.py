# MIT License © 2025 Motohiro Suzuki
from __future__ import annotations

import ctypes
from typing import Any, Callable, Dict, List

import pytest

from lscan_core.device_count import GET_DEVICE_COUNT, SYMBOLS, LScanEssentials
from lscan_core.native import function_type


class FakeLibrary:
    """Stand-in for a loaded DLL: exports looked up by raw name, like ctypes."""

    def __init__(self, exports: Dict[str, Any]) -> None:
        self._exports = dict(exports)

    def __getitem__(self, name: str) -> Any:
        try:
            return self._exports[name]
        except KeyError:
            raise AttributeError(name) from None


@pytest.fixture
def fake_library() -> Callable[[Dict[str, Any]], FakeLibrary]:
    return FakeLibrary


@pytest.fixture
def make_stub() -> Callable[[Callable[[Any], int]], Any]:
    """
    Build a GetDeviceCount-shaped native callback from a Python function.
    Callbacks stay referenced until the test ends.
    """
    keep: List[Any] = []
    restype, argtypes = SYMBOLS[GET_DEVICE_COUNT]
    proto = function_type(restype, argtypes, stdcall=True)

    def _make(impl: Callable[[Any], int]) -> Any:
        cb = proto(impl)
        keep.append(cb)
        return cb

    return _make


@pytest.fixture
def make_api(make_stub, fake_library) -> Callable[[Callable[[Any], int]], LScanEssentials]:
    def _make(impl: Callable[[Any], int]) -> LScanEssentials:
        lib = fake_library({GET_DEVICE_COUNT: make_stub(impl)})
        return LScanEssentials("stub.dll", loader=lambda path: lib)

    return _make


@pytest.fixture
def writes_three() -> Callable[[Any], int]:
    def impl(out: Any) -> int:
        out[0] = 3
        return 0

    return impl
