"""
Push-style subscription: a polling task feeding a message channel.

A :class:`Subscription` runs two tasks:

- the producer calls ``poll()`` every ``interval`` seconds and puts each
  returned item on an ``asyncio.Queue`` as a ``("data", item)`` message;
- the dispatcher drains the queue and calls the handlers attached with
  :meth:`Subscription.on`.

``close()`` stops the producer and queues a ``("close", None)`` message, so
close handlers run after every item already produced. A failing ``poll()``
queues ``("error", exc)`` and ends the subscription without ``close``.
Handlers may be plain functions or coroutines; a handler that raises is
logged and the others still run.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

__all__ = ["Subscription", "EVENTS"]

EVENTS = ("data", "error", "close")

Handler = Callable[..., Any]
Poll = Callable[[], Awaitable[List[Any]]]


class Subscription:
    def __init__(self, poll: Poll, interval: float, *, name: str = "subscription", logger: Optional[logging.Logger] = None) -> None:
        self._poll = poll
        self._interval = interval
        self._name = name
        self._log = logger or logging.getLogger("tzkit.subscribe")
        self._handlers: Dict[str, List[Handler]] = {event: [] for event in EVENTS}
        self._channel: "asyncio.Queue[Tuple[str, Any]]" = asyncio.Queue()
        self._stop = asyncio.Event()
        self._done = asyncio.Event()
        self._producer: Optional[asyncio.Task] = None
        self._dispatcher: Optional[asyncio.Task] = None

    # --- lifecycle -----------------------------------------------------------

    def start(self) -> "Subscription":
        if self._producer is None:
            self._producer = asyncio.create_task(self._produce(), name=f"{self._name}-producer")
            self._dispatcher = asyncio.create_task(self._dispatch(), name=f"{self._name}-dispatcher")
        return self

    @property
    def closed(self) -> bool:
        return self._stop.is_set()

    def close(self) -> None:
        if self._stop.is_set():
            return
        self._stop.set()
        self._channel.put_nowait(("close", None))

    async def wait_closed(self) -> None:
        await self._done.wait()

    async def aclose(self) -> None:
        self.close()
        for task in (self._producer, self._dispatcher):
            if task is not None:
                await task

    # --- handlers -------------------------------------------------------------

    def on(self, event: str, handler: Handler) -> None:
        self._check(event)
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Handler) -> None:
        self._check(event)
        try:
            self._handlers[event].remove(handler)
        except ValueError:
            pass

    @staticmethod
    def _check(event: str) -> None:
        if event not in EVENTS:
            raise ValueError(f"Trying to register on an unsupported event: {event}")

    # --- tasks ----------------------------------------------------------------

    async def _produce(self) -> None:
        while not self._stop.is_set():
            try:
                items = await self._poll()
            except Exception as exc:  # noqa: BLE001
                self._log.warning("%s poll failed", self._name, exc_info=True)
                if not self._stop.is_set():
                    self._stop.set()
                    self._channel.put_nowait(("error", exc))
                return
            if self._stop.is_set():
                return
            for item in items:
                self._channel.put_nowait(("data", item))
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                continue

    async def _dispatch(self) -> None:
        while True:
            event, payload = await self._channel.get()
            for handler in list(self._handlers[event]):
                try:
                    result = handler() if event == "close" else handler(payload)
                    if inspect.isawaitable(result):
                        await result
                except Exception:  # noqa: BLE001
                    self._log.exception("%s %s handler failed", self._name, event)
            if event != "data":
                self._done.set()
                return
