"""Async client for the Brass banking API.

Every public call resolves to ``Ok`` or ``Err``; transport failures, timeouts
and provider error bodies never raise past this module.
"""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from batch import UNKNOWN_ERROR, VALIDATION_ERROR, Err, Ok, Result
from config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from mcp_framework import log_interaction

logger = logging.getLogger("brass_mcp.client")

API_PATHS = {
    "resolve_name": "/banking/banks/account-name",
    "create_payment": "/banking/payments/create",
    "accounts": "/banking/accounts",
}

REQUEST_FAILED = "Error from request"
UNEXPECTED_ERROR = "An unexpected error occurred"


class PaymentRecipient(BaseModel):
    account_number: str
    bank: str
    name: str


class BrassPayable(BaseModel):
    """Body of ``POST /banking/payments/create``; ``amount`` is in minor units."""

    customer_reference: str
    amount: int
    title: str
    source_account: str
    to: PaymentRecipient


def _provider_error(response: httpx.Response) -> dict[str, Any]:
    """Return the ``error`` object of a Brass error body, or an empty dict."""
    try:
        body = response.json()
    except ValueError:
        return {}
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return {}


def extract_core_account_details(data: dict[str, Any] | None) -> dict[str, Any] | None:
    """Flatten a Brass account record into the fields agents care about."""
    if not data or not isinstance(data, dict):
        return None

    def formatted(key: str) -> str | None:
        amount = data.get(key)
        return amount.get("formatted") if isinstance(amount, dict) else None

    bank = data.get("bank")
    bank = bank.get("data") if isinstance(bank, dict) else None
    if not isinstance(bank, dict):
        bank = {}
    return {
        "accountId": data.get("id"),
        "accountName": data.get("name"),
        "accountNumber": data.get("number"),
        "ledgerBalance": formatted("ledger_balance"),
        "availableBalance": formatted("available_balance"),
        "pendingPayment": formatted("pending_outflows"),
        "bankName": bank.get("name"),
        "bankCode": bank.get("code"),
    }


class BrassService:
    """Thin wrapper over one shared ``httpx.AsyncClient``.

    The bearer token is supplied per call and is never stored.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "BrassService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _headers(token: str | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self, method: str, path: str, token: str | None, **kwargs: Any
    ) -> dict[str, Any]:
        response = await self._client.request(method, path, headers=self._headers(token), **kwargs)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected response body from {method} {path}")
        return payload

    async def confirm_account(
        self, bank_code: str, account_number: str, token: str | None
    ) -> Result:
        """Resolve the account name behind ``account_number`` at ``bank_code``."""

        params = {"bank": bank_code, "account_number": account_number}
        try:
            payload = await self._request("GET", API_PATHS["resolve_name"], token, params=params)
        except httpx.HTTPStatusError as exc:
            error = _provider_error(exc.response)
            status = error.get("status", exc.response.status_code)
            if status == 422:
                return Err(VALIDATION_ERROR, error.get("description") or "Account details are invalid")
            logger.warning(
                "Account confirmation failed bank=%s status=%s error=%s",
                bank_code,
                exc.response.status_code,
                error,
            )
            return Err(UNKNOWN_ERROR, UNEXPECTED_ERROR)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Account confirmation request error bank=%s error=%r", bank_code, exc)
            return Err(UNKNOWN_ERROR, UNEXPECTED_ERROR)

        data = payload.get("data")
        if not isinstance(data, dict):
            logger.warning("Account confirmation returned no data bank=%s", bank_code)
            return Err(UNKNOWN_ERROR, UNEXPECTED_ERROR)
        return Ok(data)

    async def create_payment(self, payable: BrassPayable, token: str | None) -> Result:
        """Create a payment; the provider's body is logged, not returned."""

        reference = {"customer_reference": payable.customer_reference}
        try:
            payload = await self._request(
                "POST", API_PATHS["create_payment"], token, json=payable.model_dump()
            )
        except httpx.HTTPStatusError as exc:
            log_interaction(
                "brass_create_payment_error",
                reference,
                {"status_code": exc.response.status_code, "error": _provider_error(exc.response)},
            )
            return Err(UNKNOWN_ERROR, REQUEST_FAILED)
        except (httpx.HTTPError, ValueError) as exc:
            log_interaction(
                "brass_create_payment_error",
                reference,
                {"error": str(exc), "type": exc.__class__.__name__},
            )
            return Err(UNKNOWN_ERROR, REQUEST_FAILED)

        result = payload.get("data")
        if not isinstance(result, (dict, list)):
            log_interaction("brass_create_payment_error", reference, {"error": "empty result"})
            return Err(UNKNOWN_ERROR, REQUEST_FAILED)

        log_interaction("brass_create_payment", reference, result)
        return Ok({})

    async def list_accounts(
        self, token: str | None, *, page: int = 1, limit: int = 10
    ) -> Result:
        params = {"page": page, "limit": limit, "include_virtual_accounts": "true"}
        try:
            payload = await self._request("GET", API_PATHS["accounts"], token, params=params)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Listing accounts failed error=%r", exc)
            return Err(UNKNOWN_ERROR, REQUEST_FAILED)

        accounts = payload.get("data")
        if not isinstance(accounts, list):
            return Err(UNKNOWN_ERROR, REQUEST_FAILED)
        return Ok(accounts)

    async def get_account(self, account_id: str, token: str | None) -> Result:
        path = f"{API_PATHS['accounts']}/{quote(account_id, safe='')}"
        try:
            payload = await self._request("GET", path, token)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Fetching account %s failed error=%r", account_id, exc)
            return Err(UNKNOWN_ERROR, REQUEST_FAILED)

        account = payload.get("data")
        if not isinstance(account, dict):
            return Err(UNKNOWN_ERROR, REQUEST_FAILED)
        return Ok(account)
