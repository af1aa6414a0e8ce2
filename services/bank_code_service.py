"""Bank code lookup service for MCP."""
from __future__ import annotations

import json
from typing import Annotated, Any, Mapping

from fastmcp import FastMCP
from pydantic import Field

from bank_codes import find_bank_code
from batch import BatchItemResult, Err, Ok, Result, run_batch
from brass_client import BrassService
from config import Settings
from mcp_framework import log_interaction

NO_BANK_NAME = "No bank name provided"
RESOLUTION_FAILED = "Failed to process bank name resolution request"


def resolve_bank_code(bank_name: str, table: Mapping[str, str] | None = None) -> Result:
    if not bank_name or not bank_name.strip():
        return Err("BANK_NAME_MISSING", NO_BANK_NAME)

    bank_code = find_bank_code(bank_name, table)
    if bank_code is None:
        return Err("BANK_NOT_FOUND", f"Could not find a bank code for '{bank_name}'")
    return Ok(bank_code)


def _to_payload(result: BatchItemResult[str, str]) -> dict[str, Any]:
    if result.ok:
        return {"detectedBank": result.input, "status": "success", "bankCode": result.data}
    return {"detectedBank": result.input, "status": "error", "error": result.error.message}


async def get_bank_codes(
    detected_banks: list[str], table: Mapping[str, str] | None = None
) -> list[dict[str, Any]]:
    """Resolve every detected bank name; one entry per name, in order."""

    results = await run_batch(
        detected_banks,
        lambda name: resolve_bank_code(name, table),
        failure_message=RESOLUTION_FAILED,
        action="get_bank_code",
    )
    return [_to_payload(result) for result in results]


def register_bank_code_service(mcp: FastMCP, settings: Settings, brass: BrassService) -> None:
    """Register the bank code lookup tool on the provided MCP instance."""

    @mcp.tool(
        name="getBankCode",
        description="Lookup and retrieve numerical bank codes for a list of bank names.",
    )
    async def get_bank_code(
        detectedBanks: Annotated[
            list[str],
            Field(description="List of bank names detected from user conversation."),
        ],
    ) -> str:
        log_interaction("getBankCode", {"detectedBanks": detectedBanks}, {"count": len(detectedBanks)})
        return json.dumps(await get_bank_codes(detectedBanks))
