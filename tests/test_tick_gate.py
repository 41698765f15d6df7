"""Unit tests for the tick-gated fetcher."""

import threading

import httpx
import pytest

from gosum_validator.adapters.rate_limit import (
    FetcherClosedError,
    FetchRequest,
    TickGatedFetcher,
)


class FakeClock:
    """Deterministic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_first_call_waits_one_interval_and_forwards_headers() -> None:
    clock = FakeClock()
    seen: list[tuple[str, float, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((str(request.url), clock.now, request.headers["User-Agent"]))
        return httpx.Response(200, text="ok")

    fetcher = TickGatedFetcher(
        interval_seconds=180, client=_client(handler), clock=clock, sleep=clock.sleep
    )
    try:
        response = fetcher.fetch(
            FetchRequest(url="https://example.test/tags", headers={"User-Agent": "ua-test"})
        )
    finally:
        fetcher.close()

    assert response.status_code == 200
    assert response.text == "ok"
    assert seen == [("https://example.test/tags", 180.0, "ua-test")]


def test_concurrent_callers_get_one_tick_each() -> None:
    clock = FakeClock()
    dispatched: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        dispatched.append(clock.now)
        return httpx.Response(200, text=request.url.path)

    fetcher = TickGatedFetcher(
        interval_seconds=180, client=_client(handler), clock=clock, sleep=clock.sleep
    )
    results: dict[int, str] = {}

    def _caller(idx: int) -> None:
        results[idx] = fetcher.fetch(FetchRequest(url=f"https://example.test/{idx}")).text

    threads = [threading.Thread(target=_caller, args=(i,)) for i in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    fetcher.close()

    # every caller got its own response back
    assert results == {i: f"/{i}" for i in range(5)}
    assert dispatched == [180.0, 360.0, 540.0, 720.0, 900.0]


def test_overdue_tick_dispatches_immediately() -> None:
    clock = FakeClock()
    dispatched: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        dispatched.append(clock.now)
        if request.url.path == "/slow":
            clock.now += 500  # response took longer than one interval
        return httpx.Response(200)

    fetcher = TickGatedFetcher(
        interval_seconds=180, client=_client(handler), clock=clock, sleep=clock.sleep
    )
    try:
        fetcher.fetch(FetchRequest(url="https://example.test/slow"))
        fetcher.fetch(FetchRequest(url="https://example.test/next"))
    finally:
        fetcher.close()

    assert dispatched == [180.0, 680.0]


def test_non_success_status_is_returned_not_raised() -> None:
    clock = FakeClock()
    fetcher = TickGatedFetcher(
        interval_seconds=1,
        client=_client(lambda request: httpx.Response(404)),
        clock=clock,
        sleep=clock.sleep,
    )
    try:
        response = fetcher.fetch(FetchRequest(url="https://example.test/missing"))
    finally:
        fetcher.close()

    assert response.status_code == 404


def test_transport_error_reaches_only_its_caller() -> None:
    clock = FakeClock()

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/down":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, text="up")

    fetcher = TickGatedFetcher(
        interval_seconds=10, client=_client(handler), clock=clock, sleep=clock.sleep
    )
    try:
        with pytest.raises(httpx.ConnectError):
            fetcher.fetch(FetchRequest(url="https://example.test/down"))

        # the worker survives and serves the next caller
        assert fetcher.fetch(FetchRequest(url="https://example.test/up")).text == "up"
    finally:
        fetcher.close()


@pytest.mark.parametrize("interval", [0, -1])
def test_invalid_interval(interval: float) -> None:
    with pytest.raises(ValueError):
        TickGatedFetcher(interval_seconds=interval, client=_client(lambda r: httpx.Response(200)))


def test_fetch_after_close_raises() -> None:
    fetcher = TickGatedFetcher(interval_seconds=60, client=_client(lambda r: httpx.Response(200)))
    fetcher.close()

    with pytest.raises(FetcherClosedError):
        fetcher.fetch(FetchRequest(url="https://example.test/"))


def test_close_fails_waiting_callers() -> None:
    # real waiting: the tick is an hour away, close() must wake everything up
    fetcher = TickGatedFetcher(interval_seconds=3600, client=_client(lambda r: httpx.Response(200)))
    errors: list[BaseException] = []

    def _caller() -> None:
        try:
            fetcher.fetch(FetchRequest(url="https://example.test/"))
        except FetcherClosedError as exc:
            errors.append(exc)

    thread = threading.Thread(target=_caller)
    thread.start()
    fetcher.close()
    thread.join(timeout=5)

    assert not thread.is_alive()
    assert len(errors) == 1


def test_close_is_idempotent() -> None:
    fetcher = TickGatedFetcher(interval_seconds=60, client=_client(lambda r: httpx.Response(200)))
    fetcher.close()
    fetcher.close()
