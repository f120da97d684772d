import pytest
from pydantic import BaseModel, Field

from conftest import envelope
from serpnexus.errors import ApplicationError
from serpnexus.tools.base import ToolRegistry
from serpnexus.tools.schemas import ToolKind
from serpnexus.tools.tasks import TaskOrchestrator

LIVE_ARGS = {"keyword": "model context protocol", "location_code": 2840, "language_code": "en"}


class EchoInput(BaseModel):
    """Echo a message back."""

    message: str = Field(description="What to echo")
    times: int = Field(default=1, ge=1, le=3)


@pytest.fixture
def bare_registry(fake_client, fast_poll):
    return ToolRegistry(fake_client, TaskOrchestrator(fast_poll))


@pytest.mark.asyncio
async def test_priority_out_of_range_fails_without_network_calls(registry, fake_client):
    result = await registry.invoke("serp_google_organic_task", {**LIVE_ARGS, "priority": 3})

    assert not result.ok
    assert result.error.category == "validation"
    assert result.error.details[0]["loc"] == ["priority"]
    assert fake_client.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("arguments", [
    {**LIVE_ARGS, "device": "smartwatch"},
    {**LIVE_ARGS, "location_code": "not-a-number"},
    {"location_code": 2840, "language_code": "en"},
    {**LIVE_ARGS, "unexpected": True},
])
async def test_invalid_live_arguments_never_reach_the_handler(registry, fake_client, arguments):
    result = await registry.invoke("serp_google_organic_live", arguments)

    assert not result.ok
    assert result.error.category == "validation"
    assert result.error.kind == "ValidationError"
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_live_tool_makes_one_call_with_normalized_params(registry, fake_client):
    fake_client.on("POST", "/serp/google/organic/live", envelope([
        {"id": "t1", "status_code": 20000, "status_message": "Ok.",
         "result": [{"keyword": "model context protocol", "items": [{"type": "organic", "rank_absolute": 1}]}]},
    ]))

    result = await registry.invoke("serp_google_organic_live", {**LIVE_ARGS, "device": "mobile"})

    assert result.ok
    assert result.data["status_code"] == 20000
    assert result.data["data"][0]["result"][0]["items"][0]["rank_absolute"] == 1
    assert result.data["meta"]["cost"] == 0.0006
    assert fake_client.calls == [("POST", "/serp/google/organic/live", {**LIVE_ARGS, "device": "mobile"})]


@pytest.mark.asyncio
async def test_application_failure_is_a_structured_result(registry, fake_client):
    fake_client.on("POST", "/serp/google/organic/live", envelope(None, status_code=40501, status_message="Invalid Field"))

    result = await registry.invoke("serp_google_organic_live", LIVE_ARGS)

    assert not result.ok
    assert result.error.category == "upstream"
    assert result.error.kind == "ApplicationError"
    assert result.error.status_code == 40501


@pytest.mark.asyncio
async def test_task_submit_application_failure_skips_poll_and_fetch(registry, fake_client):
    fake_client.on("POST", "/serp/google/organic/task_post", envelope(None, status_code=40501, status_message="Invalid Field"))

    result = await registry.invoke("serp_google_organic_task", LIVE_ARGS)

    assert not result.ok
    assert result.error.kind == "ApplicationError"
    assert fake_client.paths("GET") == []


@pytest.mark.asyncio
async def test_task_tool_end_to_end(registry, fake_client):
    fake_client.on("POST", "/serp/google/organic/task_post", envelope([
        {"id": "abc", "status_code": 20100, "status_message": "Task Created.", "result": None},
    ]))
    fake_client.on(
        "GET", "/serp/google/organic/tasks_ready",
        envelope([{"id": "r1", "status_code": 20000, "result": []}]),
        envelope([{"id": "r2", "status_code": 20000, "result": [{"id": "zzz"}, {"id": "abc", "tag": "mine"}]}]),
    )
    fake_client.on("GET", "/serp/google/organic/task_get/abc", envelope([
        {"id": "abc", "status_code": 20000, "status_message": "Ok.", "cost": 0.0006,
         "result": [{"keyword": "model context protocol", "check_url": "https://www.google.com/search?q=mcp",
                     "items": [{"type": "organic", "url": "https://modelcontextprotocol.io"}]}]},
    ]))

    result = await registry.invoke("serp_google_organic_task", {**LIVE_ARGS, "tag": "mine", "priority": 2})

    assert result.ok, result.error
    assert result.data["id"] == "abc"
    assert result.data["result"][0]["items"][0]["url"] == "https://modelcontextprotocol.io"
    assert fake_client.paths() == [
        "/serp/google/organic/task_post",
        "/serp/google/organic/tasks_ready",
        "/serp/google/organic/tasks_ready",
        "/serp/google/organic/task_get/abc",
    ]
    assert fake_client.calls[0][2] == {**LIVE_ARGS, "tag": "mine", "priority": 2}


@pytest.mark.asyncio
async def test_task_timeout_is_reported_as_timeout(fake_client):
    from serpnexus.config import PollPolicy
    from serpnexus.tools import build_registry

    registry = build_registry(fake_client, PollPolicy(interval=0.005, max_interval=0.005, timeout=0.03))
    fake_client.on("POST", "/serp/google/organic/task_post", envelope([{"id": "abc", "status_code": 20100}]))
    fake_client.on("GET", "/serp/google/organic/tasks_ready", envelope([{"status_code": 20000, "result": []}]))

    result = await registry.invoke("serp_google_organic_task", LIVE_ARGS)

    assert not result.ok
    assert result.error.category == "timeout"
    assert result.error.kind == "TaskTimeoutError"
    assert "/serp/google/organic/task_get/abc" not in fake_client.paths()


@pytest.mark.asyncio
async def test_custom_live_tool(bare_registry, fake_client):
    seen = []

    async def echo(params, client):
        seen.append((params, client))
        return {"echo": params["message"] * params["times"]}

    tool = bare_registry.register("echo", EchoInput, echo)

    assert tool.kind is ToolKind.LIVE
    assert tool.description == "Echo a message back."
    result = await bare_registry.invoke("echo", {"message": "hi", "times": 2})
    assert result.ok
    assert result.data == {"echo": "hihi"}
    assert seen == [({"message": "hi", "times": 2}, fake_client)]


@pytest.mark.asyncio
async def test_handler_errors_never_escape(bare_registry):
    async def broken(params, client):
        raise KeyError("items")

    async def rejected(params, client):
        raise ApplicationError(50000, "Internal Error.")

    bare_registry.register("broken", EchoInput, broken)
    bare_registry.register("rejected", EchoInput, rejected)

    broken_result = await bare_registry.invoke("broken", {"message": "x"})
    rejected_result = await bare_registry.invoke("rejected", {"message": "x"})

    assert broken_result.error.category == "internal"
    assert broken_result.error.kind == "KeyError"
    assert rejected_result.error.category == "upstream"
    assert rejected_result.error.status_code == 50000


@pytest.mark.asyncio
async def test_returned_envelope_is_status_checked(bare_registry):
    async def handler(params, client):
        return envelope(None, status_code=40200, status_message="Payment Required.")

    bare_registry.register("paid", EchoInput, handler)
    result = await bare_registry.invoke("paid", {"message": "x"})

    assert result.error.kind == "ApplicationError"
    assert result.error.status_code == 40200


@pytest.mark.asyncio
async def test_unknown_tool(registry):
    result = await registry.invoke("serp_altavista_organic_live", LIVE_ARGS)

    assert not result.ok
    assert result.error.category == "not_found"


def test_duplicate_names_are_rejected(bare_registry):
    async def handler(params, client):
        return {}

    bare_registry.register("echo", EchoInput, handler)
    with pytest.raises(ValueError, match="Duplicate"):
        bare_registry.register("echo", EchoInput, handler)


def test_exported_schema_carries_constraints(registry):
    schema = registry.get_tool("serp_google_organic_task").to_schema().inputSchema

    assert schema["required"] == ["keyword", "location_code", "language_code"]
    priority = schema["properties"]["priority"]["anyOf"][0]
    assert (priority["minimum"], priority["maximum"]) == (1, 2)
    assert schema["properties"]["device"]["anyOf"][0]["enum"] == ["desktop", "mobile", "tablet"]
    assert schema["properties"]["keyword"]["description"] == "The search query or keyword"


def test_membership(registry):
    assert "serp_google_organic_task" in registry
    assert "serp_altavista_organic_live" not in registry
