"""Default values shared across postkast."""

DEFAULT_SERVER_NAME = "default"
DEFAULT_SERVER_HOST = "localhost"

# Plaintext ports
DEFAULT_SMTP_PORT = 25
DEFAULT_POP3_PORT = 110
DEFAULT_IMAP_PORT = 143

# Ports over a TLS channel
DEFAULT_SMTP_TLS_PORT = 465
DEFAULT_POP3_TLS_PORT = 995
DEFAULT_IMAP_TLS_PORT = 993

INBOX_FOLDER = "INBOX"
FETCH_MESSAGE_SET = "1:100"
FETCH_ITEMS = "ALL"

ENV_PREFIX = "POSTKAST_"
ENV_NESTED_DELIMITER = "__"
CONFIG_FILE_ENV = "POSTKAST_CONFIG_FILE"
CONFIG_FILE_NAME = "config.yaml"
