"""Profile store: the explicit persistence seam for the planner.

Holds the single active profile, the cached diet plan and per-goal workout
progress. Two implementations share the ``ProfileStore`` protocol:

* ``InMemoryProfileStore``: process-local, used in tests and when no
  encryption key is configured.
* ``SQLiteProfileStore``: encrypted at rest via ``PayloadCipher``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Protocol, runtime_checkable

from fitnation.core.storage.database import FitnessDatabase
from fitnation.core.storage.encryption import EncryptionError, PayloadCipher
from fitnation.core.storage.models import CachedDietPlan, WorkoutProgress
from fitnation.domains.fitness.domain_logic.profile_models import FitnessGoal, UserProfile
from fitnation.domains.fitness.domain_logic.validation import (
    ProfileValidationError,
    UnknownOptionError,
    parse_profile,
    profile_to_dict,
)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when repository operations fail."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _goal_key(goal: FitnessGoal | str) -> str:
    return goal.value if isinstance(goal, FitnessGoal) else str(goal)


@runtime_checkable
class ProfileStore(Protocol):
    """Persistence interface used by the tools layer."""

    def save_profile(self, profile: UserProfile) -> None: ...

    def get_profile(self) -> UserProfile | None: ...

    def update_profile(self, profile: UserProfile) -> None: ...

    def get_cached_diet_plan(self, key: str) -> dict[str, Any] | None: ...

    def save_cached_diet_plan(self, key: str, plan: dict[str, Any]) -> None: ...

    def clear_cached_diet_plan(self) -> None: ...

    def get_completed_exercises(self, goal: FitnessGoal | str) -> set[str]: ...

    def set_completed_exercises(self, goal: FitnessGoal | str, names: Iterable[str]) -> None: ...

    def reset(self) -> None: ...


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


class InMemoryProfileStore:
    """Process-local store. Nothing survives a restart."""

    def __init__(self) -> None:
        self._profile: UserProfile | None = None
        self._diet: CachedDietPlan | None = None
        self._progress: dict[str, WorkoutProgress] = {}

    def save_profile(self, profile: UserProfile) -> None:
        self._profile = profile

    def get_profile(self) -> UserProfile | None:
        return self._profile

    def update_profile(self, profile: UserProfile) -> None:
        self.save_profile(profile)
        self.clear_cached_diet_plan()

    def get_cached_diet_plan(self, key: str) -> dict[str, Any] | None:
        if self._diet is None or self._diet.cache_key != key:
            return None
        return self._diet.plan

    def save_cached_diet_plan(self, key: str, plan: dict[str, Any]) -> None:
        self._diet = CachedDietPlan(cache_key=key, plan=plan, created_at=_now_iso())

    def clear_cached_diet_plan(self) -> None:
        self._diet = None

    def get_completed_exercises(self, goal: FitnessGoal | str) -> set[str]:
        progress = self._progress.get(_goal_key(goal))
        return set(progress.completed) if progress else set()

    def set_completed_exercises(self, goal: FitnessGoal | str, names: Iterable[str]) -> None:
        key = _goal_key(goal)
        self._progress[key] = WorkoutProgress(goal=key, completed=set(names), updated_at=_now_iso())

    def reset(self) -> None:
        self._profile = None
        self._diet = None
        self._progress.clear()


# ---------------------------------------------------------------------------
# SQLite (encrypted)
# ---------------------------------------------------------------------------


class SQLiteProfileStore:
    """Encrypted SQLite store.

    Every payload column holds a Fernet token; only the goal name and
    timestamps are stored in the clear.

    Usage::

        db = FitnessDatabase(":memory:")
        db.initialize()
        store = SQLiteProfileStore(db, PayloadCipher(key))
        store.save_profile(profile)
    """

    def __init__(self, database: FitnessDatabase, cipher: PayloadCipher) -> None:
        self._db = database
        self._cipher = cipher

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def save_profile(self, profile: UserProfile) -> None:
        conn = self._db.connection
        conn.execute(
            """INSERT INTO profiles (slot, payload_enc, updated_at) VALUES (1, ?, ?)
               ON CONFLICT(slot) DO UPDATE SET
                   payload_enc = excluded.payload_enc,
                   updated_at = excluded.updated_at""",
            (self._cipher.encrypt(profile_to_dict(profile)), _now_iso()),
        )
        conn.commit()
        logger.info("Saved profile")

    def get_profile(self) -> UserProfile | None:
        row = self._db.connection.execute(
            "SELECT payload_enc FROM profiles WHERE slot = 1"
        ).fetchone()
        if row is None:
            return None
        payload = self._decrypt(row["payload_enc"])
        try:
            return parse_profile(payload)
        except (ProfileValidationError, UnknownOptionError) as exc:
            raise RepositoryError(f"Stored profile is invalid: {exc}") from exc

    def update_profile(self, profile: UserProfile) -> None:
        self.save_profile(profile)
        self.clear_cached_diet_plan()

    # ------------------------------------------------------------------
    # Diet plan cache
    # ------------------------------------------------------------------

    def get_cached_diet_plan(self, key: str) -> dict[str, Any] | None:
        row = self._db.connection.execute(
            "SELECT cache_key, plan_enc FROM diet_plan_cache WHERE slot = 1"
        ).fetchone()
        if row is None or row["cache_key"] != key:
            return None
        return self._decrypt(row["plan_enc"])

    def save_cached_diet_plan(self, key: str, plan: dict[str, Any]) -> None:
        conn = self._db.connection
        conn.execute(
            """INSERT INTO diet_plan_cache (slot, cache_key, plan_enc, created_at)
               VALUES (1, ?, ?, ?)
               ON CONFLICT(slot) DO UPDATE SET
                   cache_key = excluded.cache_key,
                   plan_enc = excluded.plan_enc,
                   created_at = excluded.created_at""",
            (key, self._cipher.encrypt(plan), _now_iso()),
        )
        conn.commit()

    def clear_cached_diet_plan(self) -> None:
        conn = self._db.connection
        conn.execute("DELETE FROM diet_plan_cache")
        conn.commit()

    # ------------------------------------------------------------------
    # Workout progress
    # ------------------------------------------------------------------

    def get_completed_exercises(self, goal: FitnessGoal | str) -> set[str]:
        row = self._db.connection.execute(
            "SELECT completed_enc FROM workout_progress WHERE goal = ?", (_goal_key(goal),)
        ).fetchone()
        if row is None:
            return set()
        return set(self._decrypt(row["completed_enc"]) or [])

    def set_completed_exercises(self, goal: FitnessGoal | str, names: Iterable[str]) -> None:
        conn = self._db.connection
        conn.execute(
            """INSERT INTO workout_progress (goal, completed_enc, updated_at) VALUES (?, ?, ?)
               ON CONFLICT(goal) DO UPDATE SET
                   completed_enc = excluded.completed_enc,
                   updated_at = excluded.updated_at""",
            (_goal_key(goal), self._cipher.encrypt(sorted(names)), _now_iso()),
        )
        conn.commit()

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Delete the profile, cached plan and all workout progress."""
        conn = self._db.connection
        conn.execute("DELETE FROM profiles")
        conn.execute("DELETE FROM diet_plan_cache")
        conn.execute("DELETE FROM workout_progress")
        conn.commit()
        logger.warning("Deleted all planner data")

    def rotate_keys(self) -> int:
        """Re-encrypt every stored payload under the cipher's primary key.

        Returns:
            Number of rows re-encrypted.
        """
        conn = self._db.connection
        count = 0
        targets = (
            ("profiles", "payload_enc", "slot"),
            ("diet_plan_cache", "plan_enc", "slot"),
            ("workout_progress", "completed_enc", "goal"),
        )
        try:
            for table, column, pk in targets:
                rows = conn.execute(f"SELECT {pk}, {column} FROM {table}").fetchall()
                for row in rows:
                    conn.execute(
                        f"UPDATE {table} SET {column} = ? WHERE {pk} = ?",
                        (self._cipher.rotate(row[column]), row[pk]),
                    )
                    count += 1
        except EncryptionError as exc:
            conn.rollback()
            raise RepositoryError(f"Key rotation failed: {exc}") from exc
        conn.commit()
        logger.info("Rotated encryption for %d rows", count)
        return count

    def _decrypt(self, token: str) -> Any:
        try:
            return self._cipher.decrypt(token)
        except EncryptionError as exc:
            raise RepositoryError(f"Could not decrypt stored data: {exc}") from exc
