"""Brass MCP services."""

from .account_service import register_account_service
from .bank_code_service import register_bank_code_service
from .payment_service import register_payment_service

__all__ = ["register_account_service", "register_bank_code_service", "register_payment_service"]
