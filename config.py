"""Environment configuration for the Brass MCP server.

Values are read from a ``.env`` file (if present) and then the process
environment:

* ``BRASS_PA_TOKEN`` - personal access token sent as the bearer token
* ``BRASS_ACCOUNT_ID`` - source account debited by ``processPayment``
* ``BRASS_API_BASE_URL`` (defaults to ``"https://api.getbrass.co"``)
* ``BRASS_REQUEST_TIMEOUT`` (defaults to ``10`` seconds)
* ``MCP_TRANSPORT`` (``"stdio"`` or ``"streamable-http"``), ``MCP_HOST``, ``MCP_PORT``
* ``LOG_LEVEL`` (defaults to ``"INFO"``)
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://api.getbrass.co"
DEFAULT_TIMEOUT = 10.0
TRANSPORTS = {"stdio", "streamable-http"}


@dataclass(frozen=True)
class Settings:
    brass_token: str | None = None
    source_account: str | None = None
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_TIMEOUT
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``.env`` and the process environment."""

        load_dotenv()

        transport = os.getenv("MCP_TRANSPORT", "stdio").strip().lower()
        if transport not in TRANSPORTS:
            raise ValueError(
                f"MCP_TRANSPORT must be one of: {', '.join(sorted(TRANSPORTS))} (got {transport!r})"
            )

        return cls(
            brass_token=os.getenv("BRASS_PA_TOKEN") or None,
            source_account=os.getenv("BRASS_ACCOUNT_ID") or None,
            base_url=os.getenv("BRASS_API_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            request_timeout=float(os.getenv("BRASS_REQUEST_TIMEOUT", str(DEFAULT_TIMEOUT))),
            transport=transport,
            host=os.getenv("MCP_HOST", "127.0.0.1"),
            port=int(os.getenv("MCP_PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
