"""
SerpNexus Tools Registry.

This module provides centralized tool registration for the MCP server.
"""
from typing import Any

from ..config import PollPolicy
from . import serp
from .base import ToolRegistry
from .tasks import TaskOrchestrator


def register_all_tools(registry: ToolRegistry) -> None:
    """Register all tools with the registry.

    Args:
        registry: The registry the protocol surfaces dispatch to
    """
    serp.register(registry)


def build_registry(client: Any, poll: PollPolicy) -> ToolRegistry:
    """Create a registry bound to one client, with every tool registered."""
    registry = ToolRegistry(client, TaskOrchestrator(poll))
    register_all_tools(registry)
    return registry
