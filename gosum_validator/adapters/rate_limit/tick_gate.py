"""Tick-gated fetcher: at most one outbound request per interval.

Notes:
- A single daemon worker owns the schedule. Per tick it takes exactly one
  waiting call, performs it and hands the outcome back through that call's
  one-slot reply queue.
- Successive dispatches start at least ``interval_seconds`` apart. The first
  dispatch waits one full interval after construction; an idle gate whose
  tick has already elapsed serves the next caller as soon as it arrives.
- Per-process only: several processes each get their own budget.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, cast

import httpx

from gosum_validator.adapters.rate_limit.base import (
    AbstractFetcher,
    FetcherClosedError,
    FetchRequest,
)

logger = logging.getLogger(__name__)

_Outcome = tuple["httpx.Response | None", "BaseException | None"]


@dataclass
class _PendingCall:
    request: FetchRequest
    reply: "queue.Queue[_Outcome]" = field(default_factory=lambda: queue.Queue(maxsize=1))
    enqueued_at: float = 0.0


class TickGatedFetcher(AbstractFetcher):
    """Serialize GET requests through a fixed-interval gate.

    Callers block in :meth:`fetch` until their turn. No two calls share a
    tick and calls are served in arrival order.
    """

    def __init__(
        self,
        *,
        interval_seconds: float,
        client: httpx.Client | None = None,
        timeout_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], object] | None = None,
    ) -> None:
        """Start the gate.

        Args:
            interval_seconds: Minimum spacing between two dispatches.
            client: HTTP client to send requests with. One is created (and
                owned) when omitted.
            timeout_seconds: Timeout for the owned client (None disables it).
            clock: Monotonic time source.
            sleep: Blocking wait used between ticks. Defaults to a wait that
                :meth:`close` can interrupt.

        Raises:
            ValueError: If interval_seconds is not positive.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self._interval = interval_seconds
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._clock = clock
        self._closed = threading.Event()
        self._sleep = sleep or self._closed.wait
        self._lock = threading.Lock()
        self._pending: "queue.Queue[_PendingCall | None]" = queue.Queue()

        self._worker = threading.Thread(
            target=self._run,
            name="tick-gated-fetcher",
            daemon=True,
        )
        self._worker.start()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    def fetch(self, request: FetchRequest) -> httpx.Response:
        """Wait for a tick, perform the GET and return its response.

        Raises:
            httpx.HTTPError: Transport failure of this caller's request.
            FetcherClosedError: If the gate is or gets closed before dispatch.
        """
        call = _PendingCall(request=request, enqueued_at=self._clock())
        with self._lock:
            if self._closed.is_set():
                raise FetcherClosedError("fetcher is closed")
            self._pending.put(call)

        response, error = call.reply.get()
        if error is not None:
            raise error
        return cast(httpx.Response, response)

    def close(self) -> None:
        """Stop the worker and fail every call still waiting for a tick."""
        with self._lock:
            if self._closed.is_set():
                return
            self._closed.set()
            self._pending.put(None)

        self._worker.join(timeout=5)
        if self._owns_client:
            self._client.close()

    def _run(self) -> None:
        next_tick = self._clock() + self._interval
        while True:
            delay = next_tick - self._clock()
            if delay > 0:
                self._sleep(delay)
            if self._closed.is_set():
                break

            call = self._pending.get()
            if call is None:
                break

            dispatched_at = self._clock()
            next_tick = dispatched_at + self._interval
            self._dispatch(call, waited=dispatched_at - call.enqueued_at)

        self._drain()

    def _dispatch(self, call: _PendingCall, *, waited: float) -> None:
        logger.debug(
            "fetcher.dispatch",
            extra={
                "url": call.request.url,
                "waited_s": round(waited, 3),
                "queued": self._pending.qsize(),
            },
        )
        try:
            response = self._client.get(call.request.url, headers=dict(call.request.headers))
        except Exception as exc:  # handed to the waiting caller
            logger.warning(
                "fetcher.transport_error",
                extra={"url": call.request.url, "error_type": type(exc).__name__},
            )
            call.reply.put((None, exc))
            return
        call.reply.put((response, None))

    def _drain(self) -> None:
        while True:
            try:
                call = self._pending.get_nowait()
            except queue.Empty:
                return
            if call is not None:
                call.reply.put((None, FetcherClosedError("fetcher closed before dispatch")))
