"""Per-goal workout completion tracking."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fitnation.domains.fitness.domain_logic.metrics_engine import round_half_up
from fitnation.domains.fitness.domain_logic.profile_models import FitnessGoal
from fitnation.domains.fitness.domain_logic.validation import UnknownOptionError

if TYPE_CHECKING:
    from fitnation.core.storage.repository import ProfileStore
    from fitnation.domains.fitness.domain_logic.catalog import Catalog, WorkoutRoutine

logger = logging.getLogger(__name__)


def progress_percent(completed: int, total: int) -> int:
    """Completed share of the routine, 0-100, rounded half up."""
    if total <= 0:
        return 0
    return int(round_half_up(completed / total * 100))


def toggle_exercise(
    store: ProfileStore,
    catalog: Catalog,
    goal: FitnessGoal,
    name: str,
) -> bool:
    """Flip completion of ``name`` in the routine for ``goal``.

    Returns:
        True if the exercise is now complete.

    Raises:
        UnknownOptionError: if ``name`` is not part of that routine.
    """
    routine = catalog.routine_for(goal)
    if name not in routine.exercise_names():
        raise UnknownOptionError(f"Unknown exercise for {goal.value}: {name!r}")

    completed = store.get_completed_exercises(goal)
    if name in completed:
        completed.discard(name)
        now_complete = False
    else:
        completed.add(name)
        now_complete = True
    store.set_completed_exercises(goal, completed)
    return now_complete


def reset_workout_progress(store: ProfileStore, goal: FitnessGoal) -> None:
    store.set_completed_exercises(goal, ())
    logger.info("Reset workout progress for %s", goal.value)


def workout_status(store: ProfileStore, catalog: Catalog, goal: FitnessGoal) -> dict[str, Any]:
    """Routine for ``goal`` with completion flags and the progress percentage."""
    routine: WorkoutRoutine = catalog.routine_for(goal)
    # names dropped from the catalog since they were completed do not count
    completed = store.get_completed_exercises(goal) & routine.exercise_names()

    sections = {}
    for section, exercises in routine.as_dict().items():
        sections[section] = [
            {**exercise, "completed": exercise["name"] in completed}
            for exercise in exercises
        ]

    return {
        "goal": goal.value,
        "sections": sections,
        "completed": len(completed),
        "total": routine.total_exercises,
        "progress_percent": progress_percent(len(completed), routine.total_exercises),
    }
