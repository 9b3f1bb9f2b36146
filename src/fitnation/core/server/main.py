"""Planner server entry point: ``python -m fitnation.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from fitnation.core.config.settings import get_settings
from fitnation.core.server.app import create_app


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the planner MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.fitnation_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger = logging.getLogger(__name__)
    if not settings.fitnation_allow_insecure_bind and not _is_loopback_host(settings.fitnation_host):
        raise RuntimeError(
            "Refusing to bind the planner to a non-loopback host: profiles hold "
            "biometric data and there is no auth layer. "
            "Set FITNATION_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    logger.info(
        "Starting FitNation planner on %s:%d",
        settings.fitnation_host,
        settings.fitnation_port,
    )

    mcp = create_app()
    mcp.run(
        transport="streamable-http",
        host=settings.fitnation_host,
        port=settings.fitnation_port,
    )


if __name__ == "__main__":
    run()
