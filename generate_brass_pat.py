#!/usr/bin/env python3
"""
Generate a long-lived Brass Personal Access Token (PAT).

Logs in with email/password, verifies the OTP Brass sends, then creates a PAT
with the chosen name and role and prints it once.

Usage:
    BRASS_LOGIN_CLIENT_TOKEN=lk_... python generate_brass_pat.py
"""
from __future__ import annotations

import argparse
import getpass
import json
import os
import sys
from typing import Any, Callable

import httpx
from dotenv import load_dotenv

from config import DEFAULT_BASE_URL

AVAILABLE_ROLES = {
    "accountant": "rol_7OWDJHIqvYcwGNeoXeVgyf",
    "admin": "rol_LbhnugthyweEB151E6On4",
    "hr": "rol_xWkA685BuuouWkgYGK128",
    "member": "rol_2TDpsTTL0jHh0RFNXLchZG",
    "owner": "rol_7h8f07GPpE17GGgrBA2vmN",
    "payable_admin": "rol_6QJ8VcCEgCLtcbz4EO8H1b",
    "receivable_admin": "rol_6zvQzQ3gphPMbnbKvHJj0s",
}
DEFAULT_ROLE_NAME = "admin"

RULE = "-" * 52

Prompt = Callable[[str], str]


class BrassAuthError(RuntimeError):
    """Raised when a Brass authentication call fails or returns no token."""


def fetch_api(
    client: httpx.Client,
    method: str,
    path: str,
    payload: dict[str, Any] | None = None,
    token: str | None = None,
) -> Any:
    headers = {"Accept": "application/json", "Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        response = client.request(method, path, json=payload, headers=headers)
    except httpx.HTTPError as exc:
        raise BrassAuthError(f"API request failed: {exc}") from exc

    is_json = "application/json" in response.headers.get("content-type", "")
    data = response.json() if is_json else response.text

    if response.is_error:
        body = json.dumps(data, indent=2) if is_json else data
        print(f"\nAPI Error on {method} {path}: Status {response.status_code}", file=sys.stderr)
        print(f"Response Body: {body}", file=sys.stderr)
        raise BrassAuthError(
            f"API request to {method} {path} failed with status {response.status_code}."
        )
    return data


def _token_from(response: Any, *keys: str) -> str | None:
    value = response
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value if isinstance(value, str) and value else None


def perform_login(client: httpx.Client, email: str, password: str, client_token: str) -> str:
    print("\nAuthenticating with your credentials...")
    response = fetch_api(
        client, "POST", "/auth/login", {"username": email, "password": password}, client_token
    )
    token = _token_from(response, "token")
    if token is None:
        raise BrassAuthError("Could not retrieve temporary token from login response.")
    return token


def authorize_with_otp(client: httpx.Client, temp_login_token: str, otp: str) -> str:
    print("\nVerifying OTP...")
    response = fetch_api(client, "POST", "/auth/login/authorise", {"otp": otp}, temp_login_token)
    token = _token_from(response, "token")
    if token is None:
        raise BrassAuthError("Could not retrieve short-lived access token from OTP authorization.")
    return token


def get_short_lived_access_token(
    client: httpx.Client, email: str, password: str, client_token: str, prompt: Prompt = input
) -> str:
    temp_login_token = perform_login(client, email, password, client_token)
    print("Temporary login token received.")
    print("\nAn OTP should have been sent to your registered email/device.")
    otp = prompt("Enter the OTP token: ").strip()
    short_lived_token = authorize_with_otp(client, temp_login_token, otp)
    print("Login and OTP verification successful!")
    return short_lived_token


def choose_role(prompt: Prompt = input) -> tuple[str, str]:
    """Ask for a role name until a known one (or blank for the default) is given."""

    print("\nAvailable roles:")
    for role_name in AVAILABLE_ROLES:
        print(f"- {role_name}")
    print(f'(Leave blank to use default: "{DEFAULT_ROLE_NAME}")')

    while True:
        raw = prompt("Enter a role name for the PAT: ")
        role_name = raw.strip().lower()

        if not role_name:
            role_id = AVAILABLE_ROLES[DEFAULT_ROLE_NAME]
            print(f'Defaulting to role: "{DEFAULT_ROLE_NAME}" (ID: {role_id})')
            return DEFAULT_ROLE_NAME, role_id

        if role_name in AVAILABLE_ROLES:
            role_id = AVAILABLE_ROLES[role_name]
            print(f'Selected role: "{role_name}" (ID: {role_id})')
            return role_name, role_id

        print(f'Invalid role name "{raw}". Please choose from the list or leave blank for default.')


def create_personal_access_token(
    client: httpx.Client, short_lived_token: str, name: str, role_id: str
) -> str:
    response = fetch_api(
        client,
        "POST",
        "/auth/personal-access-tokens",
        {"name": name, "role": role_id},
        short_lived_token,
    )
    token = _token_from(response, "data", "token")
    if token is None:
        raise BrassAuthError("Could not retrieve PAT from API response.")
    return token


def generate_new_pat(client: httpx.Client, short_lived_token: str, prompt: Prompt = input) -> str:
    print("\nLet's configure your new Personal Access Token (PAT).")
    pat_name = prompt('Enter a descriptive name for your PAT (e.g., "Brass AI Agent"): ').strip()
    role_name, role_id = choose_role(prompt)

    print(f'\nGenerating PAT with name "{pat_name}" and role "{role_name}" (ID: {role_id})...')
    pat = create_personal_access_token(client, short_lived_token, pat_name, role_id)
    print("PAT generated successfully!")
    return pat


def _print_banner() -> None:
    print(RULE)
    print(" Brass Personal Access Token (PAT) Generator ")
    print(RULE)
    print("This script will help you generate a long-lived PAT for Brass.")
    print("You will need your Brass email, password, and access to OTPs.")
    print(RULE + "\n")


def _print_token(pat: str) -> None:
    print("\nYour new Personal Access Token (PAT) is:")
    print(RULE + "\n")
    print(pat)
    print("\n" + RULE)
    print("\nIMPORTANT: Copy this PAT now and store it securely.")
    print("   It will not be shown again through this script.")
    print("\n" + RULE)
    print("You can manage your PATs at: https://app.trybrass.com/apps/access-token")
    print(RULE)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Generate a long-lived Brass Personal Access Token")
    parser.add_argument(
        "--base-url",
        default=os.getenv("BRASS_API_BASE_URL", DEFAULT_BASE_URL),
        help="Brass API base URL (default: %(default)s)",
    )
    parser.add_argument(
        "--client-token",
        default=os.getenv("BRASS_LOGIN_CLIENT_TOKEN"),
        help="Public client bearer token for the login call (env: BRASS_LOGIN_CLIENT_TOKEN)",
    )
    args = parser.parse_args(argv)

    if not args.client_token:
        parser.error("a login client token is required (--client-token or BRASS_LOGIN_CLIENT_TOKEN)")

    _print_banner()

    try:
        email = input("Enter your Brass email: ").strip()
        password = getpass.getpass("Enter your Brass password: ")

        with httpx.Client(base_url=args.base_url.rstrip("/"), timeout=30.0) as client:
            short_lived_token = get_short_lived_access_token(client, email, password, args.client_token)
            pat = generate_new_pat(client, short_lived_token)
    except (BrassAuthError, ValueError) as exc:
        print(f"\nScript execution failed: {exc}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nAborted.", file=sys.stderr)
        return 1

    _print_token(pat)
    return 0


if __name__ == "__main__":
    sys.exit(main())
