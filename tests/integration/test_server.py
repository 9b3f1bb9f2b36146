"""Integration tests for the FitNation planner MCP server."""

from __future__ import annotations

import asyncio
import json

import pytest
from fastmcp import Client

from fitnation.core.llm.providers.mock import MockProvider
from fitnation.core.server.app import create_app


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _payload(result) -> dict:
    return json.loads(result.content[0].text)


ALL_EXPECTED_TOOLS = [
    "health_check",
    "list_profile_options",
    "calculate_health_metrics",
    "save_profile",
    "get_profile",
    "reset_all_data",
    "get_health_summary",
    "get_diet_plan",
    "get_workout_routine",
    "toggle_exercise_complete",
    "reset_workout_progress",
    "get_audit_log",
]

PROFILE_ARGS = {
    "name": "Alex",
    "age": 30,
    "gender": "male",
    "height": 180,
    "weight": 80,
    "country": "USA",
    "activity_level": "moderate",
    "goal": "fat_loss",
}


@pytest.fixture
def provider():
    return MockProvider()


@pytest.fixture
def client(provider):
    """Create an MCP client connected to a fresh server with the mock provider."""
    return Client(create_app(provider_override=provider))


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def test_server_lists_tools(client):
    async def _check():
        async with client:
            tools = await client.list_tools()
            tool_names = [t.name for t in tools]
            for expected in ALL_EXPECTED_TOOLS:
                assert expected in tool_names, f"Missing tool: {expected}"
    _run(_check())


def test_health_check(client):
    async def _check():
        async with client:
            data = _payload(await client.call_tool("health_check", {}))
            assert data["status"] == "ok"
            assert data["llm_provider"] == "mock"
            assert data["storage"] == "memory"
            assert data["foods_loaded"] == 32
            assert data["routines_loaded"] == 5
            assert data["profile_saved"] is False
    _run(_check())


def test_encrypted_storage_when_key_configured(monkeypatch, tmp_path):
    from cryptography.fernet import Fernet

    monkeypatch.setenv("ENCRYPTION_KEY", Fernet.generate_key().decode())
    monkeypatch.setenv("DB_PATH", str(tmp_path / "planner.db"))

    async def _check():
        async with Client(create_app(provider_override=MockProvider())) as client:
            data = _payload(await client.call_tool("health_check", {}))
            assert data["storage"] == "encrypted_sqlite"
            await client.call_tool("save_profile", PROFILE_ARGS)
    _run(_check())

    async def _reopen():
        async with Client(create_app(provider_override=MockProvider())) as client:
            data = _payload(await client.call_tool("get_profile", {}))
            assert data["profile"]["name"] == "Alex"
    _run(_reopen())


def test_resources_and_prompts(client):
    async def _check():
        async with client:
            foods = json.loads((await client.read_resource("catalog://foods"))[0].text)
            assert foods["food_count"] == 32

            workouts = json.loads((await client.read_resource("catalog://workouts"))[0].text)
            assert workouts["six_pack"]["total_exercises"] == 8

            countries = json.loads((await client.read_resource("catalog://countries"))[0].text)
            assert len(countries["countries"]) == 17

            prompts = [p.name for p in await client.list_prompts()]
            assert "fitness_plan_prompt" in prompts
            assert "profile_update_prompt" in prompts
    _run(_check())


# ---------------------------------------------------------------------------
# Profile and metrics
# ---------------------------------------------------------------------------

def test_calculate_health_metrics(client):
    async def _check():
        async with client:
            args = {k: v for k, v in PROFILE_ARGS.items() if k not in ("name", "country")}
            data = _payload(await client.call_tool("calculate_health_metrics", args))
            assert data["status"] == "ok"
            assert data["metrics"] == {
                "bmi": 24.7,
                "bmiCategory": "Normal",
                "bmr": 1780,
                "tdee": 2759,
                "dailyCalories": 2259,
                "macros": {"protein": 141, "carbs": 282, "fats": 63},
            }
    _run(_check())


def test_calculate_accepts_labels(client):
    async def _check():
        async with client:
            args = {
                **PROFILE_ARGS,
                "activity_level": "Moderately Active (3-5 days/week)",
                "goal": "Fat Loss",
            }
            data = _payload(await client.call_tool("calculate_health_metrics", args))
            assert data["metrics"]["dailyCalories"] == 2259
    _run(_check())


def test_validation_errors(client):
    async def _check():
        async with client:
            data = _payload(await client.call_tool(
                "calculate_health_metrics", {**PROFILE_ARGS, "height": 0},
            ))
            assert data["status"] == "error"
            assert any("height" in e for e in data["errors"])

            data = _payload(await client.call_tool(
                "save_profile", {**PROFILE_ARGS, "goal": "marathon"},
            ))
            assert data["status"] == "error"
            assert "marathon" in data["errors"][0]
    _run(_check())


def test_save_then_update_profile(client):
    async def _check():
        async with client:
            data = _payload(await client.call_tool("get_profile", {}))
            assert data["status"] == "not_found"

            data = _payload(await client.call_tool("save_profile", PROFILE_ARGS))
            assert data["status"] == "saved"
            assert data["profile"]["labels"]["goal"] == "Fat Loss"

            data = _payload(await client.call_tool("save_profile", {**PROFILE_ARGS, "weight": 78}))
            assert data["status"] == "updated"

            data = _payload(await client.call_tool("get_profile", {}))
            assert data["profile"]["weight"] == 78.0
            assert data["metrics"]["bmi"] == 24.1
    _run(_check())


def test_list_profile_options(client):
    async def _check():
        async with client:
            data = _payload(await client.call_tool("list_profile_options", {}))
            assert [o["value"] for o in data["goal"]] == [
                "six_pack", "fat_loss", "muscle_gain", "strength", "general_fitness",
            ]
            assert "Bangladesh" in data["countries"]
    _run(_check())


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------

def test_content_requires_profile(client):
    async def _check():
        async with client:
            data = _payload(await client.call_tool("get_health_summary", {}))
            assert data["status"] == "not_found"
            data = _payload(await client.call_tool("get_diet_plan", {}))
            assert data["status"] == "not_found"
    _run(_check())


def test_health_summary(client):
    async def _check():
        async with client:
            await client.call_tool("save_profile", PROFILE_ARGS)
            data = _payload(await client.call_tool("get_health_summary", {}))
            assert data["status"] == "ok"
            assert "1." in data["summary"]
            assert data["metrics"]["dailyCalories"] == 2259

            data = _payload(await client.call_tool("get_health_summary", {"privacy_mode": "loose"}))
            assert data["status"] == "error"
    _run(_check())


def test_diet_plan_falls_back_without_json(client):
    async def _check():
        async with client:
            await client.call_tool("save_profile", PROFILE_ARGS)
            data = _payload(await client.call_tool("get_diet_plan", {}))
            assert data["source"] == "fallback"
            assert data["targets"]["dailyCalories"] == 2259
            assert set(data["plan"]["meal_totals"]) == {"breakfast", "lunch", "snacks", "dinner"}
    _run(_check())


def test_diet_plan_generated_then_cached(plan_json):
    provider = MockProvider(json_response=plan_json)

    async def _check():
        async with Client(create_app(provider_override=provider)) as client:
            await client.call_tool("save_profile", PROFILE_ARGS)
            first = _payload(await client.call_tool("get_diet_plan", {}))
            second = _payload(await client.call_tool("get_diet_plan", {}))
            forced = _payload(await client.call_tool("get_diet_plan", {"force": True}))
            assert first["source"] == "generated"
            assert second["source"] == "cache"
            assert forced["source"] == "generated"
            assert provider.call_count == 2
            assert "Alex" not in provider.calls[0]["user_message"]
    _run(_check())


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------

def test_workout_routine_uses_profile_goal(client):
    async def _check():
        async with client:
            data = _payload(await client.call_tool("get_workout_routine", {}))
            assert data["status"] == "error"

            await client.call_tool("save_profile", PROFILE_ARGS)
            data = _payload(await client.call_tool("get_workout_routine", {}))
            assert data["goal"] == "fat_loss"
            assert data["total"] == 6

            data = _payload(await client.call_tool("get_workout_routine", {"goal": "six_pack"}))
            assert data["total"] == 8
    _run(_check())


def test_toggle_and_reset_progress(client):
    async def _check():
        async with client:
            args = {"exercise_name": "Plank", "goal": "six_pack"}
            data = _payload(await client.call_tool("toggle_exercise_complete", args))
            assert data["completed"] is True
            assert data["progress_percent"] == 13

            data = _payload(await client.call_tool(
                "toggle_exercise_complete", {"exercise_name": "Deadlift", "goal": "six_pack"},
            ))
            assert data["status"] == "error"

            data = _payload(await client.call_tool("reset_workout_progress", {"goal": "six_pack"}))
            assert data["status"] == "reset"

            data = _payload(await client.call_tool("get_workout_routine", {"goal": "six_pack"}))
            assert data["completed"] == 0
    _run(_check())


# ---------------------------------------------------------------------------
# Reset and audit
# ---------------------------------------------------------------------------

def test_reset_all_data_requires_confirmation(client):
    async def _check():
        async with client:
            await client.call_tool("save_profile", PROFILE_ARGS)

            data = _payload(await client.call_tool("reset_all_data", {}))
            assert data["status"] == "cancelled"
            assert _payload(await client.call_tool("get_profile", {}))["status"] == "ok"

            data = _payload(await client.call_tool("reset_all_data", {"confirm": "DELETE_ALL"}))
            assert data["status"] == "all_deleted"
            assert _payload(await client.call_tool("get_profile", {}))["status"] == "not_found"

            audit = _payload(await client.call_tool("get_audit_log", {"tool_name": "reset_all_data"}))
            [event] = audit["events"]
            assert event["action"] == "data_delete"
            assert event["duration_ms"] is not None
    _run(_check())


def test_audit_log_records_calls(client):
    async def _check():
        async with client:
            await client.call_tool("save_profile", PROFILE_ARGS)
            await client.call_tool("get_health_summary", {})
            await client.call_tool("get_profile", {})

            data = _payload(await client.call_tool("get_audit_log", {}))
            assert data["status"] == "ok"
            assert data["total_events"] == 3
            assert data["llm_disclosures"] == 0
            assert data["events_by_tool"]["save_profile"] == 1

            data = _payload(await client.call_tool("get_audit_log", {"tool_name": "get_profile"}))
            assert [e["tool_name"] for e in data["events"]] == ["get_profile"]

            data = _payload(await client.call_tool("get_audit_log", {"days": 0}))
            assert data["status"] == "error"
    _run(_check())
