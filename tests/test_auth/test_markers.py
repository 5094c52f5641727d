"""Tests for the login page classification predicates."""

from __future__ import annotations

import pytest

from vmscli.auth.markers import (
    classify_login_page,
    is_invalid_credentials_page,
    is_login_form_page,
)
from vmscli.models import LoginOutcome


class TestInvalidCredentialsMarker:
    @pytest.mark.parametrize(
        "body",
        [
            '<span class="red11">Invalid username / password</span>',
            "<p>INVALID USERNAME/PASSWORD</p>",
            "Invalid  username  /  password",
        ],
    )
    def test_matches(self, body: str) -> None:
        assert is_invalid_credentials_page(body)

    def test_ignores_other_pages(self) -> None:
        assert not is_invalid_credentials_page("<h1>Welcome back</h1>")


class TestLoginFormMarker:
    @pytest.mark.parametrize(
        "body",
        [
            '<form><input name="password_login" /></form>',
            "<input type='password' name='pw'>",
            "<span>Please log in to your account below</span>",
            "please login",
        ],
    )
    def test_matches(self, body: str) -> None:
        assert is_login_form_page(body)

    def test_ignores_application_page(self) -> None:
        assert not is_login_form_page('<div id="app">Timesheets</div><input name="search">')


class TestClassifyLoginPage:
    def test_invalid_checked_before_form(self) -> None:
        body = '<span class="red11">Invalid username / password</span><input type="password">'
        assert classify_login_page(body) is LoginOutcome.INVALID_CREDENTIALS

    def test_login_form(self) -> None:
        assert classify_login_page("Please log in") is LoginOutcome.INTERACTIVE_AUTH_REQUIRED

    def test_success_is_default(self) -> None:
        assert classify_login_page("<h1>Dashboard</h1>") is LoginOutcome.SUCCESS
