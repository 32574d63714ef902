import threading
import time

from core.utils.concurrency import run_bounded


def test_results_keep_input_order():
    def slow_square(n: int) -> int:
        time.sleep(0.001 * (10 - n))
        return n * n

    assert run_bounded(slow_square, range(10)) == [n * n for n in range(10)]


def test_exceptions_are_returned_in_place():
    def maybe_fail(n: int) -> int:
        if n == 2:
            raise ValueError("boom")
        return n

    results = run_bounded(maybe_fail, [1, 2, 3])

    assert results[0] == 1
    assert isinstance(results[1], ValueError)
    assert results[2] == 3


def test_never_exceeds_width():
    lock = threading.Lock()
    in_flight = 0
    peak = 0

    def track(_: int) -> None:
        nonlocal in_flight, peak
        with lock:
            in_flight += 1
            peak = max(peak, in_flight)
        time.sleep(0.01)
        with lock:
            in_flight -= 1

    run_bounded(track, range(20), width=3)

    assert peak <= 3


def test_empty_input():
    assert run_bounded(lambda x: x, []) == []
