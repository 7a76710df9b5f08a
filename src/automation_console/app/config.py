"""Configuration and constants.

Everything is read from the environment (a local ``.env`` file is honoured).
An absent credential never stops the process; the feature that needs it
reports itself as not configured instead.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


# Base storage directory (logs only; the console keeps no other local state)
APP_HOME = Path(os.environ.get("AUTOMATION_CONSOLE_HOME", Path.home() / ".automation-console"))
LOGS_DIR = APP_HOME / "logs"

# Workflow engine (n8n public API)
N8N_API_URL = os.environ.get("N8N_API_URL", "").rstrip("/")
N8N_API_KEY = os.environ.get("N8N_API_KEY", "")

# Number of recent runs fetched per workflow
EXECUTIONS_LIMIT = 25

# Optional YAML file overriding the bundled workflow registry
REGISTRY_FILE = os.environ.get("AUTOMATION_CONSOLE_REGISTRY", "")

# LLM vendors
ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY", "")
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
ANTHROPIC_MODEL = os.environ.get("ANTHROPIC_MODEL", "claude-sonnet-4-6")
OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o")

# Token budget for each model call in the chat loop
CHAT_MAX_TOKENS = 1024

# Upper bound on model round trips that request tools within one chat turn
MAX_TOOL_ROUNDS = _env_int("MAX_TOOL_ROUNDS", 8)

# Google service account (Sheets + Docs, read-only)
GOOGLE_SERVICE_ACCOUNT_EMAIL = os.environ.get("GOOGLE_SERVICE_ACCOUNT_EMAIL", "")
GOOGLE_PRIVATE_KEY = os.environ.get("GOOGLE_PRIVATE_KEY", "").replace("\\n", "\n")
CUSTOMER_SHEET_ID = os.environ.get("CUSTOMER_SHEET_ID", "")
CONTENT_SHEET_ID = os.environ.get("CONTENT_SHEET_ID", "")
REPORT_DOC_ID = os.environ.get("REPORT_DOC_ID", "")

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets.readonly"
DOCS_SCOPE = "https://www.googleapis.com/auth/documents.readonly"

# Outbound timeouts (seconds)
HTTP_TIMEOUT_SECONDS = _env_float("HTTP_TIMEOUT_SECONDS", 15.0)
LLM_TIMEOUT_SECONDS = _env_float("LLM_TIMEOUT_SECONDS", 60.0)

# API settings
API_PREFIX = "/api"


def ensure_directories() -> None:
    """Create required directories if they don't exist."""
    for directory in [APP_HOME, LOGS_DIR]:
        directory.mkdir(parents=True, exist_ok=True)
