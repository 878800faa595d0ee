# MIT License © 2025 Motohiro Suzuki
from __future__ import annotations

import pytest

from lscan_core.device_count import (
    GET_DEVICE_COUNT,
    DeviceCountResult,
    format_device_count,
    report_device_count,
)
from lscan_core.errors import LoadError, NativeStatusError, TypeMismatchError


def test_format_device_count() -> None:
    assert format_device_count(0) == "device count: 0"
    assert format_device_count(12) == "device count: 12"


def test_stub_writing_three_is_reported(make_api, writes_three, capsys) -> None:
    api = make_api(writes_three)
    with api:
        assert report_device_count(api) == 3

    assert capsys.readouterr().out == "device count: 3\n"


def test_read_device_count_returns_status_and_count(make_api, writes_three) -> None:
    api = make_api(writes_three)
    res = api.read_device_count()
    assert res == DeviceCountResult(status=0, count=3)
    assert res.ok


def test_nonzero_status_raises_by_default(make_api) -> None:
    api = make_api(lambda out: 7)
    with pytest.raises(NativeStatusError) as ei:
        api.get_device_count()
    assert ei.value.status == 7
    assert ei.value.symbol == GET_DEVICE_COUNT


def test_nonzero_status_ignored_reports_precall_value(make_api, capsys) -> None:
    api = make_api(lambda out: 7)
    assert report_device_count(api, check=False) == 0
    assert capsys.readouterr().out == "device count: 0\n"

    res = api.read_device_count()
    assert res.status == 7
    assert not res.ok


def test_repeated_calls_reflect_live_state(make_api) -> None:
    state = {"n": 1}

    def impl(out) -> int:
        out[0] = state["n"]
        state["n"] += 1
        return 0

    api = make_api(impl)
    assert api.get_device_count() == 1
    assert api.get_device_count() == 2


def test_wrong_argument_type_is_type_mismatch(make_api, writes_three) -> None:
    api = make_api(writes_three)
    fn = api.library.function(GET_DEVICE_COUNT)
    with pytest.raises(TypeMismatchError):
        fn("not a pointer")
    with pytest.raises(TypeMismatchError):
        fn()


def test_use_after_close_fails(make_api, writes_three) -> None:
    api = make_api(writes_three)
    with api:
        assert api.get_device_count() == 3
    with pytest.raises(LoadError):
        api.get_device_count()
