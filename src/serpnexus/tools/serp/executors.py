"""
Generic executors that turn catalog entries into tool handlers.
"""
import logging
from typing import Any, Optional
from urllib.parse import quote, urlencode

import pydantic
from pydantic import BaseModel

from ...api.models import SUCCESS_STATUS, TASK_CREATED_STATUS, ReadyTask, ResponseEnvelope
from ...errors import ApplicationError, TaskFailedError, TransportError
from ..schemas import LiveHandler, TaskHandlers
from .catalog import LiveEndpoint, TaskEndpoint

logger = logging.getLogger(__name__)


def _with_query(path: str, params: dict[str, Any]) -> str:
    if not params:
        return path
    return f"{path}?{urlencode(params, quote_via=quote)}"


def _first_task(envelope: ResponseEnvelope, path: str) -> dict[str, Any]:
    tasks = envelope.tasks
    if not tasks:
        raise TransportError(f"{path} returned no tasks")
    return tasks[0]


def _check_results(results: Any, model: Optional[type[BaseModel]], path: str) -> None:
    """Validate result bodies against a partial schema. The bodies themselves are not altered."""
    if model is None or results is None:
        return
    if not isinstance(results, list):
        raise TransportError(f"{path} returned a result that is not a list")
    for item in results:
        try:
            model.model_validate(item)
        except pydantic.ValidationError as e:
            raise TransportError(f"{path} returned an unexpected result shape: {e.error_count()} errors") from e


def live_handler(endpoint: LiveEndpoint) -> LiveHandler:
    """One request, one envelope. Task-level failures inside the envelope are application errors."""

    async def handler(params: dict[str, Any], client: Any) -> ResponseEnvelope:
        if endpoint.method == "GET":
            envelope = await client.get(_with_query(endpoint.path, params))
        else:
            envelope = await client.post(endpoint.path, params)
        envelope.raise_for_status()

        for task in envelope.tasks:
            status = task.get("status_code")
            if status is not None and status != SUCCESS_STATUS:
                raise ApplicationError(status, task.get("status_message") or "")
            _check_results(task.get("result"), endpoint.result_model, endpoint.path)
        return envelope

    handler.__name__ = endpoint.name
    return handler


def task_handlers(endpoint: TaskEndpoint) -> TaskHandlers:
    """Build submit/check_ready/fetch for a task_post + tasks_ready + task_get family."""

    async def submit(params: dict[str, Any], client: Any) -> str:
        envelope = await client.post(endpoint.post_path, params)
        envelope.raise_for_status()
        task = _first_task(envelope, endpoint.post_path)

        status = task.get("status_code")
        if status not in (SUCCESS_STATUS, TASK_CREATED_STATUS):
            raise TaskFailedError(
                f"Task submission rejected: {task.get('status_message') or 'unknown error'}",
                status_code=status,
            )
        task_id = task.get("id")
        if not isinstance(task_id, str) or not task_id:
            raise TransportError(f"{endpoint.post_path} returned no task id")
        return task_id

    async def check_ready(client: Any) -> set[str]:
        # The poll loop owns the failure budget, so no client-side retries here
        envelope = await client.get(endpoint.ready_path, retry=False)
        envelope.raise_for_status()

        ready: set[str] = set()
        for task in envelope.tasks:
            for entry in task.get("result") or []:
                try:
                    ready.add(ReadyTask.model_validate(entry).id)
                except pydantic.ValidationError:
                    logger.debug("Skipping malformed tasks_ready entry: %r", entry)
        return ready

    async def fetch(task_id: str, client: Any) -> dict[str, Any]:
        path = endpoint.get_path(task_id)
        envelope = await client.get(path, retry=False)
        envelope.raise_for_status()
        task = _first_task(envelope, path)

        status = task.get("status_code")
        if status != SUCCESS_STATUS:
            raise TaskFailedError(
                f"Task {task_id} failed: {task.get('status_message') or 'unknown error'}",
                status_code=status,
            )
        result = task.get("result")
        _check_results(result, endpoint.result_model, path)
        return {
            "id": task_id,
            "status_code": status,
            "status_message": task.get("status_message") or "",
            "result": result,
            "meta": {key: task[key] for key in ("cost", "time", "result_count", "data") if key in task},
        }

    return TaskHandlers(submit=submit, check_ready=check_ready, fetch=fetch)
