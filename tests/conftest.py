"""Pytest fixtures for the Brass MCP tests."""

import httpx
import pytest

from brass_client import BrassService


@pytest.fixture
def brass_factory():
    """Build a BrassService whose HTTP calls are answered by ``handler``."""

    def build(handler):
        return BrassService("https://brass.test", 5.0, transport=httpx.MockTransport(handler))

    return build


@pytest.fixture
def resolved_account():
    return {
        "account_name": "ADA LOVELACE",
        "account_number": "0123456789",
        "bank": {"data": {"id": "bnk_044", "code": "044", "name": "Access Bank", "type": "commercial"}},
    }
