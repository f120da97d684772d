"""
SERP endpoint catalog.

Each entry is pure data: where the endpoint lives, what it accepts and what a
result looks like. The generic executors in ``executors.py`` turn entries into
handlers, so adding an endpoint means adding a line here.
"""
from dataclasses import dataclass
from typing import Literal, Optional

from pydantic import BaseModel

from ...api.models import SerpResult
from .schemas import EmptyInput, LocationsInput, MapsLiveInput, SerpLiveInput, SerpTaskInput


@dataclass(frozen=True)
class LiveEndpoint:
    name: str
    path: str
    input_model: type[BaseModel]
    description: str
    method: Literal["GET", "POST"] = "POST"
    result_model: Optional[type[BaseModel]] = SerpResult


@dataclass(frozen=True)
class TaskEndpoint:
    name: str
    base_path: str
    input_model: type[BaseModel]
    description: str
    result_model: Optional[type[BaseModel]] = SerpResult

    @property
    def post_path(self) -> str:
        return f"{self.base_path}/task_post"

    @property
    def ready_path(self) -> str:
        return f"{self.base_path}/tasks_ready"

    def get_path(self, task_id: str) -> str:
        return f"{self.base_path}/task_get/{task_id}"


def _live(engine: str, result_type: str, label: str, suffix: str = "live") -> LiveEndpoint:
    return LiveEndpoint(
        name=f"serp_{engine}_{result_type}_live",
        path=f"/serp/{engine}/{result_type}/{suffix}",
        input_model=SerpLiveInput,
        description=f"Get {label} search results in real time for a keyword, location and language.",
    )


LIVE_ENDPOINTS: tuple[LiveEndpoint, ...] = (
    _live("google", "organic", "Google organic"),
    LiveEndpoint(
        name="serp_google_maps_live",
        path="/serp/google/maps/live/advanced",
        input_model=MapsLiveInput,
        description="Get Google Maps results in real time. Locate by location_code, "
                    "location_name or location_coordinate.",
    ),
    _live("google", "images", "Google Images"),
    _live("google", "news", "Google News"),
    _live("google", "jobs", "Google Jobs"),
    _live("google", "shopping", "Google Shopping"),
    _live("bing", "organic", "Bing organic"),
    _live("yahoo", "organic", "Yahoo organic"),
    _live("baidu", "organic", "Baidu organic"),
    _live("youtube", "organic", "YouTube organic"),
    LiveEndpoint(
        name="serp_google_locations",
        path="/serp/google/locations",
        input_model=LocationsInput,
        description="List locations (and their location_code) supported by the Google SERP API.",
        method="GET",
        result_model=None,
    ),
    LiveEndpoint(
        name="serp_google_languages",
        path="/serp/google/languages",
        input_model=EmptyInput,
        description="List languages (and their language_code) supported by the Google SERP API.",
        method="GET",
        result_model=None,
    ),
)

TASK_ENDPOINTS: tuple[TaskEndpoint, ...] = (
    TaskEndpoint(
        name="serp_google_organic_task",
        base_path="/serp/google/organic",
        input_model=SerpTaskInput,
        description="Queue a Google organic search task, wait until it is processed and return its results. "
                    "Cheaper than the live endpoint but slower.",
    ),
)
