import pytest
import requests

from core.retry import _read_max_attempts, call_with_retry


class Flaky:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def test_returns_first_result_without_sleeping():
    sleeps = []
    fn = Flaky("ok")

    assert call_with_retry(fn, sleep=sleeps.append) == "ok"
    assert fn.calls == 1
    assert sleeps == []


def test_delays_grow_linearly_between_attempts():
    sleeps = []
    fn = Flaky(requests.ConnectionError(), requests.ConnectionError(), "ok")

    assert call_with_retry(fn, sleep=sleeps.append) == "ok"
    assert fn.calls == 3
    assert sleeps == [1.0, 2.0]


def test_custom_delay_step_and_attempts():
    sleeps = []
    fn = Flaky(requests.Timeout(), requests.Timeout(), requests.Timeout(), "ok")

    assert call_with_retry(fn, attempts=4, delay_step=0.5, sleep=sleeps.append) == "ok"
    assert sleeps == [0.5, 1.0, 1.5]


def test_non_transport_errors_are_not_retried():
    sleeps = []
    fn = Flaky(ValueError("bad payload"), "unreachable")

    with pytest.raises(ValueError):
        call_with_retry(fn, sleep=sleeps.append)
    assert fn.calls == 1
    assert sleeps == []


def test_http_error_is_not_a_transport_error():
    sleeps = []
    fn = Flaky(requests.HTTPError("500 Server Error"), "unreachable")

    with pytest.raises(requests.HTTPError):
        call_with_retry(fn, sleep=sleeps.append)
    assert fn.calls == 1


def test_last_transport_error_is_reraised_unwrapped():
    sleeps = []
    last = requests.ConnectionError("third")
    fn = Flaky(requests.ConnectionError("first"), requests.ConnectionError("second"), last)

    with pytest.raises(requests.ConnectionError) as excinfo:
        call_with_retry(fn, sleep=sleeps.append)
    assert excinfo.value is last
    assert fn.calls == 3
    assert sleeps == [1.0, 2.0]


def test_body_cut_off_mid_stream_is_retried():
    sleeps = []
    fn = Flaky(requests.exceptions.ChunkedEncodingError("connection broken"), "ok")

    assert call_with_retry(fn, sleep=sleeps.append) == "ok"
    assert fn.calls == 2
    assert sleeps == [1.0]


@pytest.mark.parametrize("attempts", [0, -1])
def test_attempts_below_one_are_rejected(attempts):
    fn = Flaky("unreachable")

    with pytest.raises(ValueError):
        call_with_retry(fn, attempts=attempts, sleep=lambda _: None)
    assert fn.calls == 0


@pytest.mark.parametrize("raw, expected", [("3", 3), ("1", 1)])
def test_max_attempts_setting_is_read_as_int(raw, expected):
    assert _read_max_attempts(raw) == expected


@pytest.mark.parametrize("raw", ["0", "-2", "three"])
def test_max_attempts_setting_rejects_invalid_values(raw):
    with pytest.raises(ValueError):
        _read_max_attempts(raw)
