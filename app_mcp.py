"""Brass Agent MCP server: bank code lookup, account confirmation and payments."""
from __future__ import annotations

import asyncio
import logging
import sys

import uvicorn

from brass_client import BrassService
from config import Settings
from mcp_framework import (
    ServiceDefinition,
    attach_request_logger,
    configure_logging,
    create_mcp_server,
    log_interaction,
)
from services import (
    register_account_service,
    register_bank_code_service,
    register_payment_service,
)

logger = logging.getLogger("brass_mcp")

services = [
    ServiceDefinition(
        name="bank_codes",
        description="Resolve bank names to numerical bank codes.",
        register=register_bank_code_service,
    ),
    ServiceDefinition(
        name="accounts",
        description="Confirm recipient accounts and list the organisation's accounts.",
        register=register_account_service,
    ),
    ServiceDefinition(
        name="payments",
        description="Execute approved payments from the configured source account.",
        register=register_payment_service,
    ),
]

def build_server(settings: Settings, brass: BrassService):
    return create_mcp_server(services, settings, brass, app_name="Brass Agent MCP")


async def serve(settings: Settings, mcp, brass: BrassService) -> None:
    """Run the chosen transport, then close the Brass client on the same loop."""

    try:
        if settings.transport == "streamable-http":
            http_app = mcp.http_app()
            attach_request_logger(http_app)
            config = uvicorn.Config(
                http_app,
                host=settings.host,
                port=settings.port,
                log_level=settings.log_level.lower(),
            )
            await uvicorn.Server(config).serve()
        else:
            await mcp.run_async(transport="stdio")
    finally:
        await brass.aclose()
        log_interaction("shutdown", {"transport": settings.transport}, {"client_closed": True})


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    # One client for the life of the serving loop, shared read-only by every tool call.
    brass = BrassService(settings.base_url, settings.request_timeout)
    mcp = build_server(settings, brass)

    log_interaction(
        "startup",
        {"services": [service.name for service in services]},
        {"app": "Brass Agent MCP", "transport": settings.transport},
    )

    try:
        asyncio.run(serve(settings, mcp, brass))
    except Exception:
        logger.exception("Fatal error while running the Brass MCP server")
        sys.exit(1)


if __name__ == "__main__":
    main()
