"""Utilities for composing the Brass FastMCP server from reusable services."""
from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from fastmcp import FastMCP
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("brass_mcp")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class ServiceDefinition:
    """Describe a service that can register tools on a FastMCP instance."""

    name: str
    description: str
    register: Callable[..., None]


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr; stdout belongs to the stdio transport."""

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


# Keys whose values never reach the log, matched case-insensitively at any depth.
SENSITIVE_KEYS = frozenset(
    {"authorization", "password", "otp", "token", "access_token", "pat", "client_token"}
)
REDACTED = "***"


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_KEYS else _redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(item) for item in value]
    return value


def log_interaction(action: str, input_data: Any, output_data: Any) -> None:
    """
    Write one JSON line describing ``action`` to the ``brass_mcp`` logger.

    Credentials are masked and values JSON cannot encode fall back to ``str``.
    """

    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "action": action,
        "input": _redact(input_data),
        "output": _redact(output_data),
    }
    logger.info(json.dumps(entry, ensure_ascii=False, default=str))


def create_mcp_server(
    services: Iterable[ServiceDefinition],
    *register_args: Any,
    app_name: str = "Brass Agent MCP",
) -> FastMCP:
    """Create an MCP server and register all services with ``register_args``."""

    mcp = FastMCP(app_name)

    for service in services:
        service.register(mcp, *register_args)

    return mcp


def _describe_rpc(body: bytes) -> dict[str, Any]:
    """Pick the JSON-RPC method and tool name out of a request body."""

    if not body:
        return {}
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return {"body_parse_error": str(exc)}
    if not isinstance(payload, dict):
        return {}

    described: dict[str, Any] = {"jsonrpc_method": payload.get("method")}
    params = payload.get("params")
    if isinstance(params, dict) and "name" in params:
        described["tool"] = params["name"]
    return described


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """Log one ``log_interaction`` entry per HTTP request, including failures."""

    def __init__(self, app, action: str = "http_request"):
        super().__init__(app)
        self.action = action

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_info: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else None,
        }
        request_info.update(_describe_rpc(await request.body()))

        outcome: dict[str, Any] = {"status_code": None}
        started = time.perf_counter()
        try:
            response = await call_next(request)
            outcome["status_code"] = response.status_code
            return response
        except Exception as exc:
            outcome.update(error=str(exc), type=exc.__class__.__name__)
            raise
        finally:
            outcome["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            log_interaction(self.action, request_info, outcome)


def attach_request_logger(app, *, action: str = "http_request") -> None:
    app.add_middleware(RequestLoggerMiddleware, action=action)
