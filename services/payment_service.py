"""Payment execution service for MCP.

Amounts arrive in the base currency unit (naira) and are sent to Brass in
minor units (kobo). The conversion is one-way: results echo the caller's
original amount, never the converted one.
"""
from __future__ import annotations

import json
import uuid
from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import BaseModel, Field, field_validator

from batch import BatchItemResult, run_batch
from brass_client import BrassPayable, BrassService, PaymentRecipient
from config import Settings
from mcp_framework import log_interaction

TITLE_PREFIX = "Conceirge-"
MISSING_SOURCE_ACCOUNT = "BRASS_ACCOUNT_ID is not set, cannot process payment"
PAYMENT_SYSTEM_ERROR = "Failed to communicate with the payment processing service."


class PaymentInstruction(BaseModel):
    title: str = Field(description="A brief memo/description for the payment transaction.")
    amount: float = Field(gt=0, description="The payment amount in the base currency unit.")
    name: str = Field(description="The verified recipient name.")
    accountNumber: str = Field(
        pattern=r"^\d{10}$", description="The 10-digit verified account number."
    )
    bankId: str = Field(description="The unique bank identifier (usually same as bank code).")

    @field_validator("amount")
    @classmethod
    def _at_least_one_minor_unit(cls, value: float) -> float:
        if to_minor_units(value) < 1:
            raise ValueError("amount must be at least 0.01")
        return value


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


def _format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else str(amount)


def build_payable(payment: PaymentInstruction, source_account: str) -> BrassPayable:
    return BrassPayable(
        customer_reference=str(uuid.uuid4()),
        amount=to_minor_units(payment.amount),
        title=f"{TITLE_PREFIX}{payment.title}",
        source_account=source_account,
        to=PaymentRecipient(
            account_number=payment.accountNumber,
            bank=payment.bankId,
            name=payment.name,
        ),
    )


def _to_payload(result: BatchItemResult[PaymentInstruction, dict]) -> dict[str, Any]:
    payment = result.input
    if result.ok:
        message = (
            f"Payment of {_format_amount(payment.amount)} to {payment.name} "
            f"({payment.accountNumber}) initiated successfully."
        )
    else:
        message = result.error.message or "Payment processing failed."
    return {"input": payment.model_dump(), "status": result.status, "message": message}


async def process_payments(
    payments: list[PaymentInstruction],
    brass: BrassService,
    token: str | None,
    source_account: str | None,
) -> str:
    """
    Send every payment to Brass and return the tool's text response.

    Without a source account nothing is sent and a single diagnostic line
    is returned instead of per-payment results.
    """

    if not source_account:
        log_interaction("process_payment_error", {"count": len(payments)}, {"error": MISSING_SOURCE_ACCOUNT})
        return MISSING_SOURCE_ACCOUNT

    async def pay(payment: PaymentInstruction):
        payable = build_payable(payment, source_account)
        log_interaction(
            "create_payment_request",
            {"customer_reference": payable.customer_reference},
            {"amount": payable.amount, "bank": payable.to.bank, "account_number": payable.to.account_number},
        )
        return await brass.create_payment(payable, token)

    results = await run_batch(
        payments,
        pay,
        failure_message=PAYMENT_SYSTEM_ERROR,
        action="process_payment",
    )
    return json.dumps([_to_payload(result) for result in results])


def register_payment_service(mcp: FastMCP, settings: Settings, brass: BrassService) -> None:
    """Register the payment execution tool on the provided MCP instance."""

    @mcp.tool(
        name="processPayment",
        description=(
            "Execute a list of payment transactions after explicit user approval "
            "for the batch has been received."
        ),
    )
    async def process_payment(
        paymentsToProcess: Annotated[
            list[PaymentInstruction],
            Field(description="List of payments to execute after user approval."),
        ],
    ) -> str:
        return await process_payments(
            paymentsToProcess, brass, settings.brass_token, settings.source_account
        )
