# invsearch/paths.py

import os

# --- Base data paths ---
DATA_DIR = "data"

# --- Required suffix for indexed files and backups ---
BACKUP_SUFFIX = ".txt"

# --- Default backup written by the web front end ---
DEFAULT_BACKUP_PATH = os.path.join(DATA_DIR, "database_backup.txt")


def has_suffix(path: str, suffix: str = BACKUP_SUFFIX) -> bool:
    """True if `path` ends with the required suffix (case-sensitive)."""
    return path.endswith(suffix)
