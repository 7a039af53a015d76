"""Configuration constants for blocknotes."""

import os
from pathlib import Path

# Longest accepted note title.
MAX_TITLE_LENGTH: int = 255

# Listings are silently capped to this many notes per page.
MAX_PAGE_SIZE: int = 100
DEFAULT_PAGE_SIZE: int = 20

# Environment overrides used by the CLI and the MCP server.
DATA_DIR_ENV: str = "BLOCKNOTES_DIR"
USER_ENV: str = "BLOCKNOTES_USER"

DEFAULT_DATA_DIR: Path = Path("~/.local/share/blocknotes").expanduser()

DB_FILENAME: str = "notes.db"


def resolve_data_directory(data_dir: Path | None = None) -> Path:
    """Return the data directory: explicit argument, then $BLOCKNOTES_DIR, then the default."""
    if data_dir is not None:
        return data_dir.expanduser()
    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    return DEFAULT_DATA_DIR


def resolve_acting_user(user: str | None = None) -> str | None:
    """Return the acting user id: explicit argument, then $BLOCKNOTES_USER."""
    if user:
        return user
    return os.environ.get(USER_ENV) or None
