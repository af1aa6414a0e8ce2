import json

import httpx
import pytest

import generate_brass_pat as pat_cli


def _prompts(*answers):
    answers = iter(answers)
    return lambda message: next(answers)


def test_blank_role_selects_default():
    assert pat_cli.choose_role(_prompts("")) == ("admin", pat_cli.AVAILABLE_ROLES["admin"])


def test_invalid_role_is_asked_again():
    role = pat_cli.choose_role(_prompts("superuser", "  HR "))

    assert role == ("hr", pat_cli.AVAILABLE_ROLES["hr"])


def test_login_otp_and_token_creation_flow():
    calls = []

    def handler(request):
        body = json.loads(request.content)
        calls.append((request.url.path, request.headers["Authorization"], body))
        if request.url.path == "/auth/login":
            return httpx.Response(200, json={"token": "tmp_token"})
        if request.url.path == "/auth/login/authorise":
            return httpx.Response(200, json={"token": "short_token"})
        return httpx.Response(201, json={"data": {"token": "pat_new"}})

    with httpx.Client(base_url="https://brass.test", transport=httpx.MockTransport(handler)) as client:
        short_lived = pat_cli.get_short_lived_access_token(
            client, "ada@example.com", "hunter2", "lk_client", prompt=_prompts("123456")
        )
        pat = pat_cli.generate_new_pat(client, short_lived, prompt=_prompts("Agent", "member"))

    assert pat == "pat_new"
    assert calls == [
        ("/auth/login", "Bearer lk_client", {"username": "ada@example.com", "password": "hunter2"}),
        ("/auth/login/authorise", "Bearer tmp_token", {"otp": "123456"}),
        (
            "/auth/personal-access-tokens",
            "Bearer short_token",
            {"name": "Agent", "role": pat_cli.AVAILABLE_ROLES["member"]},
        ),
    ]


def test_failed_login_raises_auth_error():
    def handler(request):
        return httpx.Response(401, json={"error": {"description": "Bad credentials"}})

    with httpx.Client(base_url="https://brass.test", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(pat_cli.BrassAuthError):
            pat_cli.perform_login(client, "ada@example.com", "wrong", "lk_client")


def test_missing_token_in_response_raises_auth_error():
    def handler(request):
        return httpx.Response(200, json={"data": {}})

    with httpx.Client(base_url="https://brass.test", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(pat_cli.BrassAuthError):
            pat_cli.create_personal_access_token(client, "short_token", "Agent", "rol_x")


def test_main_requires_a_login_client_token(monkeypatch):
    monkeypatch.delenv("BRASS_LOGIN_CLIENT_TOKEN", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        pat_cli.main([])

    assert excinfo.value.code == 2
