"""
SERP tools for SerpNexus.
"""
from ..base import ToolRegistry
from .catalog import LIVE_ENDPOINTS, TASK_ENDPOINTS
from .executors import live_handler, task_handlers


def register(registry: ToolRegistry) -> None:
    """Register every catalog endpoint with the registry."""
    for endpoint in LIVE_ENDPOINTS:
        registry.register(
            endpoint.name,
            endpoint.input_model,
            live_handler(endpoint),
            description=endpoint.description,
        )

    for endpoint in TASK_ENDPOINTS:
        handlers = task_handlers(endpoint)
        registry.register_task(
            endpoint.name,
            endpoint.input_model,
            handlers.submit,
            handlers.check_ready,
            handlers.fetch,
            description=endpoint.description,
        )
