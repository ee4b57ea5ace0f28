"""
Generic repeating job engine.

A ``SchedulerTimer`` runs one job on a fixed cadence and on demand, with at
most one execution in flight at any time. Periodic ticks that fire while a
previous execution (retries included) is still running are skipped and
counted, so a slow remote never builds up a backlog. ``trigger()`` waits its
turn instead of being skipped, so an explicit request is never dropped.

Results leave the job through a ``MessageChannel``: the timer does not care
whether the consumer is another task, a thread or a socket.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, Protocol, TypeVar

from utils.logger import scheduler_logger as logger

T = TypeVar("T")


@dataclass(frozen=True)
class JobData(Generic[T]):
    """Arguments handed to every job execution."""

    identity: Any = None
    data: Optional[T] = None


SchedulerJob = Callable[[JobData], Awaitable[None]]


# ==================== MESSAGE CHANNEL ====================


@dataclass(frozen=True)
class ChannelMessage:
    ref: str
    msg: str
    data: Any


class MessageChannel(Protocol):
    def send(self, ref: str, msg: str, data: Any) -> None:
        """Deliver one message. Must not block the event loop."""
        ...


class QueueMessageChannel:
    """Message channel backed by an ``asyncio.Queue``."""

    def __init__(self, maxsize: int = 0):
        self.queue: asyncio.Queue[ChannelMessage] = asyncio.Queue(maxsize=maxsize)

    def send(self, ref: str, msg: str, data: Any) -> None:
        self.queue.put_nowait(ChannelMessage(ref=ref, msg=msg, data=data))

    def drain(self) -> list[ChannelMessage]:
        """Return every queued message without waiting."""
        messages = []
        while not self.queue.empty():
            messages.append(self.queue.get_nowait())
        return messages


# ==================== TIMER ====================


class SchedulerTimer:
    """Runs a job now and then every ``interval_seconds`` until stopped."""

    def __init__(self, name: str, channel: Optional[MessageChannel] = None):
        self.name = name
        self._log = logger.bind(timer=name)
        self._channel = channel
        self._running = False
        self._interval: Optional[float] = None
        self._job: Optional[SchedulerJob] = None
        self._job_data: Optional[JobData] = None
        self._tick_task: Optional[asyncio.Task] = None
        self._executions: set[asyncio.Task] = set()
        self._lock = asyncio.Lock()
        self._stats = {
            "runs": 0,
            "errors": 0,
            "ticks_skipped": 0,
        }

    @property
    def running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)

    # ==================== LIFECYCLE ====================

    async def start(self, interval_seconds: float, job: SchedulerJob, data: Optional[JobData] = None):
        """Run ``job`` immediately, then keep running it every ``interval_seconds``.

        If the timer is already running, this is a no-op.
        """
        if self._running:
            self._log.warning("Timer already running")
            return
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._running = True
        self._interval = interval_seconds
        self._job = job
        self._job_data = data or JobData()

        self._log.info("Started timer", interval_seconds=interval_seconds)

        await self._execute(job, self._job_data)

        # stop() may have been called while the first run was in flight.
        if self._running:
            self._tick_task = asyncio.create_task(self._tick_loop(), name=f"{self.name}-timer")

    async def trigger(self, job: SchedulerJob, data: Optional[JobData] = None):
        """Run ``job`` once now, outside the periodic cadence.

        Waits for an in-flight execution to settle first. Works whether or
        not the timer is running.
        """
        await self._execute(job, data or JobData())

    def stop(self):
        """Cancel future ticks. An execution already in flight finishes normally."""
        was_running = self._running
        self._running = False

        if self._tick_task and not self._tick_task.done():
            self._tick_task.cancel()
        self._tick_task = None

        if was_running:
            self._log.info("Stopped timer", stats=self._stats)

    async def shutdown(self):
        """Stop ticking and wait for in-flight executions to settle."""
        self.stop()
        pending = list(self._executions)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # ==================== EXECUTION ====================

    async def _tick_loop(self):
        while self._running:
            await asyncio.sleep(self._interval)
            if not self._running:
                break

            if self._lock.locked():
                self._stats["ticks_skipped"] += 1
                self._log.warning(
                    "Skipped tick, previous run still in flight",
                    ticks_skipped=self._stats["ticks_skipped"],
                )
                continue

            # A separate task so that stop() cancelling this loop never
            # cancels a run that already started.
            task = asyncio.create_task(
                self._execute(self._job, self._job_data), name=f"{self.name}-run"
            )
            self._executions.add(task)
            task.add_done_callback(self._executions.discard)

    async def _execute(self, job: SchedulerJob, data: JobData):
        async with self._lock:
            self._stats["runs"] += 1
            try:
                await job(data)
            except Exception as e:
                self._stats["errors"] += 1
                self._log.exception(
                    "Scheduler job failed",
                    error_type=type(e).__name__,
                    error=str(e),
                )

    # ==================== MESSAGING ====================

    def post_msg(self, ref: Optional[str], msg: str, data: Any):
        """Deliver a tagged message to the consumer.

        No-op when there is no consumer ref or no channel registered.
        """
        if ref is None or self._channel is None:
            return

        try:
            self._channel.send(ref, msg, data)
        except Exception as e:
            self._log.error(
                "Failed to post scheduler message",
                ref=ref,
                msg=msg,
                error_type=type(e).__name__,
                error=str(e),
            )
