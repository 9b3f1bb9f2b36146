"""FitNation planner MCP server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from fitnation.core.audit.logger import AuditLogger
from fitnation.core.config.settings import get_settings
from fitnation.core.llm.client import ContentLLMClient
from fitnation.core.llm.provider import LLMProvider, create_provider
from fitnation.core.storage.database import FitnessDatabase
from fitnation.core.storage.encryption import EncryptionError, PayloadCipher
from fitnation.core.storage.repository import (
    InMemoryProfileStore,
    ProfileStore,
    SQLiteProfileStore,
)
from fitnation.domains.fitness.domain_logic.catalog import Catalog, load_catalog
from fitnation.domains.fitness.domain_logic.content import DietPlanService
from fitnation.domains.fitness.prompts.fitness_prompts import register_fitness_prompts
from fitnation.domains.fitness.resources.catalog import register_catalog_resources
from fitnation.domains.fitness.tools.audit_tools import register_audit_tools
from fitnation.domains.fitness.tools.content_tools import register_content_tools
from fitnation.domains.fitness.tools.profile_tools import register_profile_tools
from fitnation.domains.fitness.tools.workout_tools import register_workout_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "FitNation Planner"
SERVER_VERSION = "0.1.0"


def _select_provider(settings) -> LLMProvider:
    if settings.llm_provider == "mock":
        provider_name, api_key, model = "mock", "", ""
    elif settings.llm_provider == "anthropic":
        api_key = settings.anthropic_api_key
        model = settings.anthropic_model
        provider_name = "anthropic" if api_key else "mock"
    elif settings.llm_provider == "openai":
        api_key = settings.openai_api_key
        model = settings.openai_model
        provider_name = "openai" if api_key else "mock"
    else:  # pragma: no cover
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider!r}")

    if provider_name == "mock" and settings.llm_provider != "mock":
        logger.warning(
            "No API key configured for provider '%s'; falling back to mock provider",
            settings.llm_provider,
        )
    return create_provider(provider_name=provider_name, api_key=api_key, model=model)


def create_app(
    *,
    provider_override: LLMProvider | None = None,
    store_override: ProfileStore | None = None,
    catalog_override: Catalog | None = None,
    database_override: FitnessDatabase | None = None,
) -> FastMCP:
    """Create and configure the FitNation planner MCP server.

    1. Loads the food and workout catalog
    2. Creates the content LLM client
    3. Opens the database (audit log, and the profile store when encrypted)
    4. Registers all tools, resources, and prompts
    """
    settings = get_settings()

    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "FitNation planner: computes BMI, BMR, TDEE, calorie and macro "
            "targets from a saved profile, and builds local diet plans and "
            "daily workout routines."
        ),
    )

    # --- Catalog ---
    catalog = catalog_override or load_catalog(settings.catalog_dir or None)

    # --- Content LLM ---
    provider = provider_override or _select_provider(settings)
    llm_client = ContentLLMClient(provider=provider)

    # --- Storage ---
    store: ProfileStore | None = store_override
    database = database_override
    if store is None and settings.encryption_key:
        try:
            cipher = PayloadCipher(settings.encryption_key)
        except EncryptionError as exc:
            logger.error("Failed to initialize encrypted storage: %s", exc)
            logger.warning("Continuing with in-memory storage; data will not persist")
        else:
            if database is None:
                database = FitnessDatabase(settings.db_path)
            database.initialize()
            store = SQLiteProfileStore(database, cipher)
            logger.info(
                "Encrypted planner store initialized: %s (schema v%d)",
                settings.db_path,
                database.get_schema_version(),
            )
    elif store is None:
        logger.info(
            "No ENCRYPTION_KEY configured; profile data is kept in memory only. "
            "Set ENCRYPTION_KEY to persist it."
        )

    if store is None:
        store = InMemoryProfileStore()
    persistent = isinstance(store, SQLiteProfileStore)

    if database is None:
        database = FitnessDatabase(":memory:")
    database.initialize()
    audit_logger = AuditLogger(database)

    diet_service = DietPlanService(
        llm_client, store, catalog, default_privacy_mode=settings.default_privacy_mode
    )

    # --- Register tools ---
    @server.tool
    async def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "llm_provider": llm_client.provider_name,
            "storage": "encrypted_sqlite" if persistent else "memory",
            "foods_loaded": len(catalog.foods),
            "routines_loaded": len(catalog.routines),
            "profile_saved": store.get_profile() is not None,
        }

    register_profile_tools(server, store, audit_logger)
    register_content_tools(
        server,
        llm_client,
        store,
        diet_service,
        audit_logger,
        default_privacy_mode=settings.default_privacy_mode,
    )
    register_workout_tools(server, store, catalog, audit_logger)
    register_audit_tools(server, audit_logger)

    # --- Register resources ---
    register_catalog_resources(server, catalog)

    # --- Register prompts ---
    register_fitness_prompts(server)

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this attribute is accessed (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
