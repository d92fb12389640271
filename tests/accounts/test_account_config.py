"""Tests for account configuration models."""

import pytest
from pydantic import ValidationError

from postkast.accounts.config import (
    AccountConfig,
    ImapEndpoint,
    NoCredentials,
    SmtpEndpoint,
    Tls,
    UsernamePassword,
)


class TestImapEndpoint:
    def test_defaults(self) -> None:
        endpoint = ImapEndpoint()
        assert endpoint.host == "localhost"
        assert endpoint.port == 143
        assert endpoint.tls is None
        assert endpoint.uses_tls is False

    def test_effective_port_without_tls(self) -> None:
        endpoint = ImapEndpoint(host="mail.example.com", port=1143)
        assert endpoint.effective_port == 1143

    def test_effective_port_with_tls(self) -> None:
        endpoint = ImapEndpoint(host="mail.example.com", port=1143, tls=Tls(port=1993))
        assert endpoint.effective_port == 1993
        assert endpoint.uses_tls is True

    def test_port_range(self) -> None:
        with pytest.raises(ValidationError):
            ImapEndpoint(port=0)
        with pytest.raises(ValidationError):
            Tls(port=70000)

    def test_frozen(self) -> None:
        endpoint = ImapEndpoint()
        with pytest.raises(ValidationError):
            endpoint.host = "other"  # type: ignore[misc]


class TestSmtpEndpoint:
    def test_defaults(self) -> None:
        endpoint = SmtpEndpoint()
        assert endpoint.port == 25
        assert endpoint.effective_port == 25

    def test_default_smtp_tls(self) -> None:
        endpoint = SmtpEndpoint(tls=Tls.default_smtp())
        assert endpoint.effective_port == 465


class TestCredentials:
    def test_default_is_none(self) -> None:
        config = AccountConfig()
        assert isinstance(config.credentials, NoCredentials)

    def test_username_and_password(self) -> None:
        config = AccountConfig.model_validate(
            {"credentials": {"username": "user", "password": "secret"}}
        )
        assert isinstance(config.credentials, UsernamePassword)
        assert config.credentials.username == "user"
        assert config.credentials.password.get_secret_value() == "secret"

    def test_empty_block_is_none(self) -> None:
        config = AccountConfig.model_validate({"credentials": {}})
        assert isinstance(config.credentials, NoCredentials)

    def test_null_block_is_none(self) -> None:
        config = AccountConfig.model_validate({"credentials": None})
        assert isinstance(config.credentials, NoCredentials)

    def test_username_only_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            AccountConfig.model_validate({"credentials": {"username": "user"}})
        assert "missing 'password'" in str(exc_info.value)

    def test_password_only_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            AccountConfig.model_validate({"credentials": {"password": "secret"}})
        assert "missing 'username'" in str(exc_info.value)

    def test_instance_accepted(self) -> None:
        config = AccountConfig(credentials=UsernamePassword(username="u", password="p"))
        assert isinstance(config.credentials, UsernamePassword)

    def test_password_masked_in_dump(self) -> None:
        credentials = UsernamePassword(username="u", password="p")
        assert credentials.model_dump(mode="json") == {"username": "u", "password": "**********"}

    def test_password_revealed_on_request(self) -> None:
        credentials = UsernamePassword(username="u", password="p")
        dumped = credentials.model_dump(mode="json", context={"reveal_secrets": True})
        assert dumped == {"username": "u", "password": "p"}


class TestAccountConfig:
    def test_defaults(self) -> None:
        config = AccountConfig()
        assert config.name == "default"
        assert config.imap == ImapEndpoint()
        assert config.smtp == SmtpEndpoint()

    def test_nested_dict(self) -> None:
        config = AccountConfig.model_validate(
            {
                "name": "work",
                "imap": {"host": "imap.example.com", "tls": {"port": 993}},
            }
        )
        assert config.name == "work"
        assert config.imap.host == "imap.example.com"
        assert config.imap.effective_port == 993
