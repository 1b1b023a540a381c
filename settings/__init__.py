"""Application settings."""

import os
from pathlib import Path

APP_NAME = os.getenv("BOARDVOTE_APP_NAME", "Board Management")

# Database
DB_PATH = os.getenv("BOARDVOTE_DB_PATH", "boardvote.duckdb")

# Logging
LOG_DIR = Path(os.getenv("BOARDVOTE_LOG_DIR", "logs"))
LOG_LEVEL = os.getenv("BOARDVOTE_LOG_LEVEL", "INFO").upper()

# Mail API
MAIL_API_BASE_URL = os.getenv("MAIL_API_BASE_URL", "https://api.mailgun.net/v3")
MAIL_API_TIMEOUT = float(os.getenv("MAIL_API_TIMEOUT", "10"))
MAILGUN_API_KEY = os.getenv("MAILGUN_API_KEY")
MAILGUN_DOMAIN = os.getenv("MAILGUN_DOMAIN")
MAILGUN_FROM_EMAIL = os.getenv(
    "MAILGUN_FROM_EMAIL",
    f"{APP_NAME} <voting@{MAILGUN_DOMAIN}>" if MAILGUN_DOMAIN else None,
)

# Bulk delivery
MAX_CONCURRENT = int(os.getenv("BOARDVOTE_MAX_CONCURRENT", "3"))
BATCH_SIZE = int(os.getenv("BOARDVOTE_BATCH_SIZE", "10"))
BATCH_DELAY = float(os.getenv("BOARDVOTE_BATCH_DELAY", "0.5"))
RETRY_ATTEMPTS = int(os.getenv("BOARDVOTE_RETRY_ATTEMPTS", "3"))
RETRY_DELAY = float(os.getenv("BOARDVOTE_RETRY_DELAY", "1.0"))
SEND_TIMEOUT = float(os.getenv("BOARDVOTE_SEND_TIMEOUT", "30"))
MIN_SUCCESS_RATIO = float(os.getenv("BOARDVOTE_MIN_SUCCESS_RATIO", "0.7"))

# Voting defaults (used only when a decision is created without its own values)
DEFAULT_QUORUM = float(os.getenv("BOARDVOTE_DEFAULT_QUORUM", "50"))
DEFAULT_APPROVAL_THRESHOLD = float(os.getenv("BOARDVOTE_DEFAULT_APPROVAL_THRESHOLD", "75"))

# Deadline scheduler
DEADLINE_CHECK_INTERVAL = float(os.getenv("BOARDVOTE_DEADLINE_CHECK_INTERVAL", "60"))
MIN_SWEEP_GAP = float(os.getenv("BOARDVOTE_MIN_SWEEP_GAP", "30"))

# Links in outgoing mail (omitted when empty)
APP_URL = os.getenv("BOARDVOTE_APP_URL", "").rstrip("/")
