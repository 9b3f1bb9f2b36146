"""Shared test fixtures for the FitNation planner tests."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("CATALOG_DIR", "")
    monkeypatch.setenv("DEFAULT_PRIVACY_MODE", "strict")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from fitnation.domains.fitness.domain_logic.profile_models import (  # noqa: E402
    ActivityLevel,
    DietPreference,
    FitnessGoal,
    Gender,
    UserProfile,
)


def _make_profile(**overrides: Any) -> UserProfile:
    """Male, 30y, 180cm, 80kg, moderate activity, fat loss, standard diet, USA."""
    defaults = dict(
        name="Alex",
        age=30,
        gender=Gender.MALE,
        height=180.0,
        weight=80.0,
        country="USA",
        activity_level=ActivityLevel.MODERATE,
        goal=FitnessGoal.FAT_LOSS,
        diet_preference=DietPreference.STANDARD,
    )
    defaults.update(overrides)
    return UserProfile(**defaults)


def _make_plan_payload(calories: float = 300) -> dict[str, list[dict[str, Any]]]:
    """A schema-valid diet plan payload with one item per meal."""
    def item(item_id: str, name: str, category: str) -> dict[str, Any]:
        return {
            "id": item_id,
            "name": name,
            "serving": "1 cup",
            "calories": calories,
            "protein": 10,
            "carbs": 30,
            "fats": 5,
            "category": category,
        }

    return {
        "breakfast": [item("b1", "Oatmeal", "carb")],
        "lunch": [item("l1", "Chicken Rice", "protein")],
        "snacks": [item("s1", "Apple", "fruit")],
        "dinner": [item("d1", "Lentil Stew", "protein")],
    }


@pytest.fixture
def make_profile():
    """Factory for profiles; keyword overrides replace the defaults."""
    return _make_profile


@pytest.fixture
def make_plan_payload():
    return _make_plan_payload


@pytest.fixture
def profile() -> UserProfile:
    return _make_profile()


@pytest.fixture
def plan_json() -> str:
    return json.dumps(_make_plan_payload())


# ---------------------------------------------------------------------------
# Catalog / LLM fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def catalog():
    """The packaged food library and workout routines."""
    from fitnation.domains.fitness.domain_logic.catalog import load_catalog

    return load_catalog()


@pytest.fixture
def mock_provider():
    from fitnation.core.llm.providers.mock import MockProvider

    return MockProvider()


@pytest.fixture
def llm_client(mock_provider):
    from fitnation.core.llm.client import ContentLLMClient

    return ContentLLMClient(mock_provider)


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fitness_db():
    """Create an in-memory FitnessDatabase for testing."""
    from fitnation.core.storage.database import FitnessDatabase

    db = FitnessDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def cipher():
    """Create a PayloadCipher with a fresh test key."""
    from cryptography.fernet import Fernet

    from fitnation.core.storage.encryption import PayloadCipher

    return PayloadCipher(Fernet.generate_key().decode())


@pytest.fixture
def sqlite_store(fitness_db, cipher):
    """Create a SQLiteProfileStore backed by in-memory SQLite."""
    from fitnation.core.storage.repository import SQLiteProfileStore

    return SQLiteProfileStore(fitness_db, cipher)


@pytest.fixture
def memory_store():
    from fitnation.core.storage.repository import InMemoryProfileStore

    return InMemoryProfileStore()


@pytest.fixture
def audit_logger(fitness_db):
    """Create an AuditLogger backed by in-memory SQLite."""
    from fitnation.core.audit.logger import AuditLogger

    return AuditLogger(fitness_db)
