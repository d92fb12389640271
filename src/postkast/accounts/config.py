"""Account configuration models.

Credentials are a tagged union internally but are written without a tag in
configuration sources; the variant is chosen from which fields are present.
"""

from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    SerializationInfo,
    field_serializer,
    field_validator,
)

from postkast.defaults import (
    DEFAULT_IMAP_PORT,
    DEFAULT_IMAP_TLS_PORT,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_NAME,
    DEFAULT_SMTP_PORT,
    DEFAULT_SMTP_TLS_PORT,
)

_CREDENTIAL_FIELDS = ("username", "password")


class Tls(BaseModel):
    """TLS connection settings.

    Attributes:
        port: Port of the TLS listener.
    """

    model_config = ConfigDict(frozen=True)

    port: int = Field(..., ge=1, le=65535, description="TLS port")

    @classmethod
    def default_imap(cls) -> "Tls":
        return cls(port=DEFAULT_IMAP_TLS_PORT)

    @classmethod
    def default_smtp(cls) -> "Tls":
        return cls(port=DEFAULT_SMTP_TLS_PORT)


class _Endpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = Field(default=DEFAULT_SERVER_HOST, min_length=1, description="Server hostname")
    port: int = Field(..., ge=1, le=65535, description="Plaintext port")
    tls: Tls | None = Field(default=None, description="TLS settings; absent means no TLS")

    @property
    def uses_tls(self) -> bool:
        return self.tls is not None

    @property
    def effective_port(self) -> int:
        """Port to connect to: the TLS port when TLS is configured, else ``port``."""
        if self.tls is not None:
            return self.tls.port
        return self.port


class ImapEndpoint(_Endpoint):
    """IMAP server connection settings.

    Attributes:
        host: Server hostname (default: localhost).
        port: Plaintext port (default: 143).
        tls: TLS settings. Connecting requires TLS, so leaving this out makes the
            account unusable rather than falling back to plaintext.
    """

    port: int = Field(default=DEFAULT_IMAP_PORT, ge=1, le=65535, description="IMAP port")


class SmtpEndpoint(_Endpoint):
    """SMTP server connection settings. Modelled for completeness, never used to send."""

    port: int = Field(default=DEFAULT_SMTP_PORT, ge=1, le=65535, description="SMTP port")


class NoCredentials(BaseModel):
    """Placeholder for an account without credentials."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = Field(default="none", exclude=True)


class UsernamePassword(BaseModel):
    """Username and password used for IMAP LOGIN."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["username_password"] = Field(default="username_password", exclude=True)
    username: str = Field(..., min_length=1, description="Login user name")
    password: SecretStr = Field(..., description="Login password")

    @field_serializer("password")
    def _dump_password(self, value: SecretStr, info: SerializationInfo) -> str:
        # Secrets are only written out when explicitly asked for (sample config).
        if info.context and info.context.get("reveal_secrets"):
            return value.get_secret_value()
        return str(value)


Credentials = Annotated[NoCredentials | UsernamePassword, Field(discriminator="kind")]


def resolve_credentials_shape(value: Any) -> Any:
    """Map an untagged credentials block onto its variant.

    Raises:
        ValueError: If only one of ``username``/``password`` is given.
    """
    if value is None:
        return {"kind": "none"}
    if not isinstance(value, dict):
        return value

    present = [key for key in _CREDENTIAL_FIELDS if value.get(key) is not None]
    if not present:
        return {"kind": "none"}
    if len(present) == len(_CREDENTIAL_FIELDS):
        return {**value, "kind": "username_password"}

    missing = next(key for key in _CREDENTIAL_FIELDS if key not in present)
    raise ValueError(
        f"credentials must set both 'username' and 'password' (missing '{missing}')"
    )


class AccountConfig(BaseModel):
    """Configuration of one mail account.

    Attributes:
        name: Human-readable label (default: "default"). Not required to be unique.
        imap: IMAP endpoint used to list the inbox.
        smtp: SMTP endpoint (not used by postkast).
        credentials: Login credentials (default: none).
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(default=DEFAULT_SERVER_NAME, description="Account label")
    imap: ImapEndpoint = Field(default_factory=ImapEndpoint)
    smtp: SmtpEndpoint = Field(default_factory=SmtpEndpoint)
    credentials: Credentials = Field(default_factory=NoCredentials)

    @field_validator("credentials", mode="before")
    @classmethod
    def _validate_credentials_shape(cls, v: Any) -> Any:
        return resolve_credentials_shape(v)
