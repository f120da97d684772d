"""
Task orchestration for asynchronous DataForSEO endpoints.

A task tool looks like one blocking call to the agent, but upstream it is
three phases:

    submit  ->  poll tasks_ready until our id shows up  ->  fetch the result

Each invocation owns a private TaskRecord and its own clock. Nothing here is
shared between invocations, so two agents polling the same endpoint never see
each other's state.
"""
import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional

from ..config import PollPolicy
from ..errors import TaskFailedError, TaskTimeoutError, TransportError
from .schemas import TaskHandlers

logger = logging.getLogger(__name__)

# progress(progress, total, message), same shape as MCP Context.report_progress
ProgressCallback = Callable[[float, Optional[float], Optional[str]], Awaitable[None]]


class TaskState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    READY = "ready"
    FETCHED = "fetched"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


_TRANSITIONS: dict[TaskState, frozenset[TaskState]] = {
    TaskState.SUBMITTED: frozenset({TaskState.POLLING, TaskState.FAILED}),
    TaskState.POLLING: frozenset({TaskState.READY, TaskState.TIMED_OUT, TaskState.FAILED}),
    TaskState.READY: frozenset({TaskState.FETCHED, TaskState.FAILED}),
    TaskState.FETCHED: frozenset(),
    TaskState.TIMED_OUT: frozenset(),
    TaskState.FAILED: frozenset(),
}


class TaskRecord:
    """State of one submitted task, local to the invocation that submitted it.

    The id comes from the submit phase and cannot be reassigned.
    """

    __slots__ = ("_id", "tag", "submitted_at", "_state")

    def __init__(self, task_id: str, tag: Optional[str] = None):
        self._id = task_id
        self.tag = tag
        self.submitted_at = datetime.now(timezone.utc)
        self._state = TaskState.SUBMITTED

    @property
    def id(self) -> str:
        return self._id

    @property
    def state(self) -> TaskState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self._state]

    def advance(self, state: TaskState) -> None:
        if state not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Task {self._id}: illegal transition {self._state.value} -> {state.value}")
        logger.debug("Task %s (tag=%s): %s -> %s", self._id, self.tag, self._state.value, state.value)
        self._state = state

    def __repr__(self) -> str:
        return f"TaskRecord(id={self._id!r}, tag={self.tag!r}, state={self._state.value})"


class TaskOrchestrator:
    """Runs the submit/poll/fetch workflow under a PollPolicy."""

    def __init__(self, policy: PollPolicy):
        self.policy = policy

    async def run(
        self,
        handlers: TaskHandlers,
        params: dict[str, Any],
        client: Any,
        progress: Optional[ProgressCallback] = None,
    ) -> Any:
        """Submit a task, wait for it, and return what fetch returns.

        Raises:
            SerpNexusError: submit failure (no polling happens), readiness
                check failures beyond the policy's budget, TaskTimeoutError,
                or a fetch failure (fetch is never retried)
        """
        task_id = await handlers.submit(params, client)
        if not task_id:
            raise TaskFailedError("Task submission returned no task id")

        record = TaskRecord(task_id, tag=params.get("tag"))
        logger.info("Task %s submitted (tag=%s)", record.id, record.tag)
        await _report(progress, 0.1, f"Task {record.id} submitted, waiting for results...")

        try:
            await self._wait_until_ready(record, handlers.check_ready, client, progress)
        except TaskTimeoutError:
            record.advance(TaskState.TIMED_OUT)
            logger.warning("Task %s not ready after %gs, giving up", record.id, self.policy.timeout)
            raise
        except Exception:
            record.advance(TaskState.FAILED)
            raise

        record.advance(TaskState.READY)
        await _report(progress, 0.9, f"Task {record.id} ready, fetching results...")

        try:
            result = await handlers.fetch(record.id, client)
        except Exception:
            record.advance(TaskState.FAILED)
            raise

        record.advance(TaskState.FETCHED)
        await _report(progress, 1.0, f"Task {record.id} done")
        return result

    async def _wait_until_ready(
        self,
        record: TaskRecord,
        check_ready: Callable[[Any], Awaitable[Iterable[str]]],
        client: Any,
        progress: Optional[ProgressCallback],
    ) -> None:
        policy = self.policy
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + policy.timeout
        delay = min(policy.interval, policy.max_interval)
        failures = 0
        polls = 0

        record.advance(TaskState.POLLING)
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise TaskTimeoutError(record.id, policy.timeout)

            try:
                ready = await asyncio.wait_for(check_ready(client), timeout=remaining)
            except asyncio.TimeoutError:
                raise TaskTimeoutError(record.id, policy.timeout) from None
            except TransportError as e:
                failures += 1
                if failures > policy.max_consecutive_failures:
                    raise TransportError(
                        f"Readiness check for task {record.id} failed {failures} times in a row: {e.message}"
                    ) from e
                logger.warning(
                    "Readiness check for task %s failed (%d/%d), treating as not ready: %s",
                    record.id, failures, policy.max_consecutive_failures, e,
                )
            else:
                failures = 0
                polls += 1
                if record.id in ready:
                    logger.info("Task %s ready after %d checks", record.id, polls)
                    return

            elapsed = loop.time() - started
            await _report(
                progress,
                0.1 + 0.8 * min(elapsed / policy.timeout, 1.0),
                f"Task {record.id} not ready yet ({polls} checks)",
            )

            remaining = deadline - loop.time()
            if remaining <= 0:
                raise TaskTimeoutError(record.id, policy.timeout)
            await asyncio.sleep(min(delay, remaining))
            delay = min(delay * policy.backoff, policy.max_interval)


async def _report(progress: Optional[ProgressCallback], value: float, message: str) -> None:
    if progress is not None:
        await progress(value, 1.0, message)
