"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """FitNation planner server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default: profiles hold biometric data and there is no auth layer.
    fitnation_host: str = "127.0.0.1"
    fitnation_port: int = 8011
    fitnation_log_level: str = "info"
    fitnation_allow_insecure_bind: bool = False

    # Content generation LLM
    llm_provider: Literal["anthropic", "openai", "mock"] = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    # Storage (profile, diet plan cache, workout progress)
    db_path: str = "~/.fitnation/planner.db"

    # Comma-separated Fernet keys, newest first. Empty disables persistence.
    encryption_key: str = ""

    # Privacy: "strict" keeps the user's name out of prompts
    default_privacy_mode: Literal["strict", "standard"] = "strict"

    # Catalog data directory (foods.yaml / workouts.yaml); empty uses packaged data
    catalog_dir: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
