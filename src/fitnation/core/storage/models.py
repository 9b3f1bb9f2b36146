"""Data models for the planner persistence layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CachedDietPlan:
    """The most recent generated diet plan and the key it was built for.

    The key is ``diet:{country}:{goal}:{diet_preference}``; a lookup with a
    different key is a miss.
    """

    cache_key: str
    plan: dict[str, Any]
    created_at: str = ""


@dataclass
class WorkoutProgress:
    """Completed exercise names for one goal's routine."""

    goal: str
    completed: set[str] = field(default_factory=set)
    updated_at: str = ""
