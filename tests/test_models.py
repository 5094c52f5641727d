"""Tests for the shared models and the exception hierarchy."""

from __future__ import annotations

import pydantic
import pytest

from vmscli.exceptions import (
    AuthError,
    CombinedStoreError,
    ConfigError,
    CredentialsNotFoundError,
    InvalidCredentialsError,
    ServerError,
    TransportError,
    ValidationError,
)
from vmscli.models import Credentials, GlobalConfig, LoginOutcome, StoreKind


class TestCredentials:
    def test_repr_masks_password(self) -> None:
        creds = Credentials(username="me", password="s3cret")
        assert "s3cret" not in repr(creds)
        assert "me" in repr(creds)

    def test_str_and_format_mask_password(self) -> None:
        creds = Credentials(username="u", password="hunter2")
        assert "hunter2" not in str(creds)
        assert "hunter2" not in f"{creds}"
        assert "hunter2" not in "%s" % (creds,)
        assert "username='u'" in str(creds)

    def test_frozen(self) -> None:
        creds = Credentials(username="me", password="pw")
        with pytest.raises(pydantic.ValidationError):
            creds.password = "other"  # type: ignore[misc]


class TestEnums:
    def test_store_kind_values(self) -> None:
        assert [k.value for k in StoreKind] == ["auto", "keyring", "file"]

    def test_global_config_defaults(self) -> None:
        config = GlobalConfig()
        assert config.base_url is None
        assert StoreKind(config.credential_store) is StoreKind.AUTO
        assert config.request.verify_ssl is True


class TestExitCodes:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (ValidationError("x"), 2),
            (ConfigError("x"), 1),
            (AuthError("x"), 3),
            (InvalidCredentialsError("x"), 3),
            (CredentialsNotFoundError(), 4),
            (ServerError("x"), 5),
            (TransportError("x"), 6),
        ],
    )
    def test_exit_code(self, exc: Exception, code: int) -> None:
        assert exc.exit_code == code

    def test_override_exit_code(self) -> None:
        assert ConfigError("x", exit_code=2).exit_code == 2

    def test_login_error_carries_outcome(self) -> None:
        assert InvalidCredentialsError("x").outcome is LoginOutcome.INVALID_CREDENTIALS

    def test_combined_store_error_names_both(self) -> None:
        keyring_error = RuntimeError("no daemon")
        file_error = OSError("read-only")
        exc = CombinedStoreError("save", keyring_error, file_error)
        assert str(exc) == "save credentials failed (keyring: no daemon, file: read-only)"
        assert exc.keyring_error is keyring_error
        assert exc.__cause__ is file_error
