"""Account configuration models."""

from postkast.accounts.config import (
    AccountConfig,
    Credentials,
    ImapEndpoint,
    NoCredentials,
    SmtpEndpoint,
    Tls,
    UsernamePassword,
)

__all__ = [
    "AccountConfig",
    "Credentials",
    "ImapEndpoint",
    "NoCredentials",
    "SmtpEndpoint",
    "Tls",
    "UsernamePassword",
]
