import json

import pytest
from fastmcp import Client, FastMCP

import app_mcp
from app_mcp import build_server
from brass_client import BrassService
from config import Settings
from services.payment_service import MISSING_SOURCE_ACCOUNT


@pytest.fixture
def server():
    settings = Settings(brass_token="pat", source_account=None)
    return build_server(settings, BrassService("https://brass.test"))


@pytest.mark.asyncio
async def test_tools_and_accounts_resource_are_registered(server):
    async with Client(server) as client:
        tools = {tool.name for tool in await client.list_tools()}
        resources = {str(resource.uri) for resource in await client.list_resources()}

    assert {"getBankCode", "confirmAccount", "processPayment", "listAccounts", "getAccount"} <= tools
    assert "config://core/accounts" in resources


@pytest.mark.asyncio
async def test_get_bank_code_tool_returns_json_text(server):
    async with Client(server) as client:
        result = await client.call_tool("getBankCode", {"detectedBanks": ["Access Bank", ""]})

    payload = json.loads(result.content[0].text)
    assert payload[0] == {"detectedBank": "Access Bank", "status": "success", "bankCode": "044"}
    assert payload[1]["error"] == "No bank name provided"


@pytest.mark.asyncio
async def test_process_payment_without_source_account_returns_diagnostic(server):
    payment = {
        "title": "Rent",
        "amount": 100,
        "name": "ADA LOVELACE",
        "accountNumber": "0123456789",
        "bankId": "bnk_044",
    }

    async with Client(server) as client:
        result = await client.call_tool("processPayment", {"paymentsToProcess": [payment]})

    assert result.content[0].text == MISSING_SOURCE_ACCOUNT


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("BRASS_PA_TOKEN", "pat_env")
    monkeypatch.delenv("BRASS_ACCOUNT_ID", raising=False)
    monkeypatch.setenv("BRASS_API_BASE_URL", "https://sandbox.brass.test/")
    monkeypatch.setenv("MCP_TRANSPORT", "streamable-http")

    settings = Settings.from_env()

    assert settings.brass_token == "pat_env"
    assert settings.source_account is None
    assert settings.base_url == "https://sandbox.brass.test"
    assert settings.transport == "streamable-http"


def test_unknown_transport_is_rejected(monkeypatch):
    monkeypatch.setenv("MCP_TRANSPORT", "carrier-pigeon")

    with pytest.raises(ValueError):
        Settings.from_env()


@pytest.fixture
def closed_clients(monkeypatch):
    closed = []

    async def record_close(self):
        closed.append(self)

    monkeypatch.setattr(app_mcp, "configure_logging", lambda level: None)
    monkeypatch.setattr(BrassService, "aclose", record_close)
    monkeypatch.delenv("MCP_TRANSPORT", raising=False)
    return closed


def test_stdio_failure_exits_with_status_one_and_closes_client(monkeypatch, closed_clients):
    async def broken_run(self, transport=None, **kwargs):
        raise RuntimeError("stdin went away")

    monkeypatch.setattr(FastMCP, "run_async", broken_run)

    with pytest.raises(SystemExit) as excinfo:
        app_mcp.main()

    assert excinfo.value.code == 1
    assert len(closed_clients) == 1


def test_http_failure_exits_with_status_one(monkeypatch, closed_clients):
    async def broken_serve(self, sockets=None):
        raise OSError("address already in use")

    monkeypatch.setenv("MCP_TRANSPORT", "streamable-http")
    monkeypatch.setattr(app_mcp.uvicorn.Server, "serve", broken_serve)

    with pytest.raises(SystemExit) as excinfo:
        app_mcp.main()

    assert excinfo.value.code == 1
    assert len(closed_clients) == 1


def test_clean_stdio_shutdown_closes_client(monkeypatch, closed_clients):
    seen = {}

    async def finished_run(self, transport=None, **kwargs):
        seen["transport"] = transport

    monkeypatch.setattr(FastMCP, "run_async", finished_run)

    app_mcp.main()

    assert seen == {"transport": "stdio"}
    assert len(closed_clients) == 1
