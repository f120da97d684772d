"""
Pydantic input schemas for SERP tools.
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolInput(BaseModel):
    """Base for tool inputs: unknown fields are rejected, not silently dropped."""

    model_config = ConfigDict(extra="forbid")


class SerpLiveInput(ToolInput):
    """Parameters shared by every live SERP endpoint."""

    keyword: str = Field(description="The search query or keyword")
    location_code: int = Field(description="The location code for the search")
    language_code: str = Field(description="The language code for the search")
    device: Optional[Literal["desktop", "mobile", "tablet"]] = Field(
        default=None, description="The device type for the search"
    )
    os: Optional[Literal["windows", "macos", "ios", "android"]] = Field(
        default=None, description="The operating system for the search"
    )
    depth: Optional[int] = Field(default=None, ge=1, description="Maximum number of results to return")
    se_domain: Optional[str] = Field(default=None, description="Search engine domain (e.g., google.com)")


class SerpTaskInput(SerpLiveInput):
    priority: Optional[int] = Field(default=None, ge=1, le=2, description="Task priority: 1 (normal) or 2 (high)")
    tag: Optional[str] = Field(default=None, description="Custom identifier for the task")
    postback_url: Optional[str] = Field(
        default=None, description="URL to receive a callback when the task is completed"
    )
    postback_data: Optional[str] = Field(default=None, description="Custom data to be passed in the callback")


class MapsLiveInput(SerpLiveInput):
    location_name: Optional[str] = Field(
        default=None, description="Full name of the location (e.g., 'London,England,United Kingdom')"
    )
    location_code: Optional[int] = Field(
        default=None, description="The location code for the search (optional if location_coordinate provided)"
    )
    location_coordinate: Optional[str] = Field(
        default=None,
        description="GPS coordinates as 'latitude,longitude,zoom' (e.g., '51.5074,-0.1278,15z'). "
                    "Use for point-specific rankings.",
    )
    search_this_area: Optional[bool] = Field(default=None, description="Restrict results to the displayed map area")
    local_pack_type: Optional[Literal["maps", "local_pack"]] = Field(
        default=None, description="Type of local pack results"
    )


class LocationsInput(ToolInput):
    country: Optional[str] = Field(default=None, description="Filter locations by country name")


class EmptyInput(ToolInput):
    pass
