"""Account confirmation and account listing service for MCP."""
from __future__ import annotations

import json
from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import BaseModel, Field

from batch import BatchItemResult, run_batch
from brass_client import BrassService, extract_core_account_details
from config import Settings
from mcp_framework import log_interaction

CONFIRMATION_FAILED = "Failed to communicate with the account confirmation service."


class AccountToConfirm(BaseModel):
    bankCode: str = Field(description="The numerical code identifying the bank.")
    accountNumber: str = Field(
        pattern=r"^\d{10}$", description="The 10-digit account number."
    )


def _to_payload(result: BatchItemResult[AccountToConfirm, dict]) -> dict[str, Any]:
    entry: dict[str, Any] = {"input": result.input.model_dump(), "status": result.status}
    if result.ok:
        entry["data"] = result.data
    else:
        entry["error"] = result.error.to_dict()
    return entry


async def confirm_accounts(
    accounts: list[AccountToConfirm], brass: BrassService, token: str | None
) -> list[dict[str, Any]]:
    """Confirm each account with Brass; one entry per account, in order."""

    results = await run_batch(
        accounts,
        lambda account: brass.confirm_account(account.bankCode, account.accountNumber, token),
        failure_message=CONFIRMATION_FAILED,
        action="confirm_account",
    )
    return [_to_payload(result) for result in results]


async def list_core_accounts(brass: BrassService, token: str | None, limit: int = 10) -> str:
    result = await brass.list_accounts(token, limit=limit)
    if not result.ok:
        return result.message
    return json.dumps([extract_core_account_details(account) for account in result.data])


def register_account_service(mcp: FastMCP, settings: Settings, brass: BrassService) -> None:
    """Register account confirmation and listing tools on the provided MCP instance."""

    @mcp.tool(
        name="confirmAccount",
        description=(
            "Verify and validate a list of bank account details, returning confirmed "
            "information or errors for each."
        ),
    )
    async def confirm_account(
        accountsToConfirm: Annotated[
            list[AccountToConfirm],
            Field(description="List of accounts (bank code and number) to verify."),
        ],
    ) -> str:
        log_interaction(
            "confirmAccount",
            {"accountsToConfirm": [account.model_dump() for account in accountsToConfirm]},
            {"count": len(accountsToConfirm)},
        )
        return json.dumps(await confirm_accounts(accountsToConfirm, brass, settings.brass_token))

    @mcp.tool(name="listAccounts", description="List the organisation's Brass accounts.")
    async def list_accounts(
        limit: Annotated[
            int, Field(ge=1, le=100, description="The maximum first number of accounts to return.")
        ] = 10,
    ) -> str:
        return await list_core_accounts(brass, settings.brass_token, limit)

    @mcp.tool(name="getAccount", description="Get the details of one Brass account.")
    async def get_account(
        accountId: Annotated[str, Field(description="The ID of the account details to retrieve.")],
    ) -> str:
        result = await brass.get_account(accountId, settings.brass_token)
        if not result.ok:
            return result.message
        return json.dumps(extract_core_account_details(result.data))

    @mcp.resource(
        "config://core/accounts",
        name="accounts",
        description="Core details of the organisation's Brass accounts.",
        mime_type="application/json",
    )
    async def accounts() -> str:
        result = await brass.list_accounts(settings.brass_token)
        if not result.ok:
            log_interaction("accounts_resource_error", {}, {"error": result.message})
            raise RuntimeError(f"Failed to fetch accounts: {result.message}")
        return json.dumps([extract_core_account_details(account) for account in result.data])
