"""
Environment variable loader for the Sheetlog server.
Handles loading credentials, the user table and runtime settings from
a .env file or the environment.
"""
import os
import json
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Load .env file if it exists
from dotenv import load_dotenv

from config import DEFAULT_USERS


# Find .env file (look in current dir and parent dirs)
def _find_env_file() -> Path | None:
    current = Path(__file__).parent
    for _ in range(3):  # Check up to 3 levels up
        env_path = current / ".env"
        if env_path.exists():
            return env_path
        current = current.parent
    return None

_env_file = _find_env_file()
if _env_file:
    load_dotenv(_env_file)


def _load_json_setting(file_var: str, json_var: str) -> object | None:
    """
    Read a JSON document from a file path variable or an inline variable.

    The file variable wins when both are set. Returns None if neither is set.
    """
    path_value = os.environ.get(file_var)
    if path_value:
        path = Path(path_value)
        if not path.exists():
            raise RuntimeError(f"{file_var} not found: {path_value}")
        with open(path, "r") as f:
            return json.load(f)

    raw = os.environ.get(json_var)
    if raw:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Invalid {json_var}: {e}")

    return None


def get_google_credentials() -> dict:
    """
    Get Google Service Account credentials.

    Priority:
    1. GOOGLE_CREDENTIALS_FILE (path to JSON file)
    2. GOOGLE_CREDENTIALS_JSON (JSON string content)

    Returns:
        dict: Parsed credentials dictionary

    Raises:
        RuntimeError: If no credentials are configured
    """
    creds = _load_json_setting("GOOGLE_CREDENTIALS_FILE", "GOOGLE_CREDENTIALS_JSON")
    if creds is None:
        raise RuntimeError(
            "No Google credentials configured. "
            "Set GOOGLE_CREDENTIALS_FILE or GOOGLE_CREDENTIALS_JSON in .env"
        )
    if not isinstance(creds, dict):
        raise RuntimeError("Google credentials must be a JSON object")
    return creds


def get_spreadsheet_id() -> str:
    """Get the ID of the backing spreadsheet."""
    sid = os.environ.get("SHEETLOG_SPREADSHEET_ID")
    if not sid:
        raise RuntimeError("SHEETLOG_SPREADSHEET_ID is not set")
    return sid


def get_users_config() -> list[dict]:
    """
    Get the user table.

    Priority:
    1. SHEETLOG_USERS_FILE (path to JSON file)
    2. SHEETLOG_USERS_JSON (JSON string content)
    3. DEFAULT_USERS (anonymous unsafe access, prototyping only)
    """
    users = _load_json_setting("SHEETLOG_USERS_FILE", "SHEETLOG_USERS_JSON")
    if users is None:
        return [dict(u) for u in DEFAULT_USERS]
    if isinstance(users, dict):
        users = users.get("users")
    if not isinstance(users, list):
        raise RuntimeError("User table must be a JSON list or an object with a 'users' list")
    return users


def uses_default_users() -> bool:
    """True when no user table is configured."""
    return not (os.environ.get("SHEETLOG_USERS_FILE") or os.environ.get("SHEETLOG_USERS_JSON"))


def get_timezone() -> ZoneInfo:
    """Get the time zone used for "Date Modified" timestamps."""
    name = os.environ.get("SHEETLOG_TIMEZONE", "UTC")
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        raise RuntimeError(f"Unknown SHEETLOG_TIMEZONE: {name}")


def get_backend() -> str:
    """Get the grid backend name: 'sheets' (Google Sheets) or 'memory'."""
    backend = os.environ.get("SHEETLOG_BACKEND", "sheets").strip().lower()
    if backend not in {"sheets", "memory"}:
        raise RuntimeError(f"Unknown SHEETLOG_BACKEND: {backend}")
    return backend


def get_port() -> int:
    """Get server port from environment."""
    return int(os.environ.get("PORT", "8080"))
