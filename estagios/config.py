"""
Runtime configuration.

All values can be overridden through environment variables so the same
install can talk to a staging API or keep its session file elsewhere.
"""

from __future__ import annotations

import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_DIR / "data"

API_URL = os.getenv("ESTAGIOS_API_URL", "https://api-estagios-backend.onrender.com").rstrip("/")
REQUEST_TIMEOUT = float(os.getenv("ESTAGIOS_TIMEOUT", "30"))
LOG_LEVEL = os.getenv("ESTAGIOS_LOG_LEVEL", "WARNING").strip().upper()

EXPORT_FILENAME = "Relatorio_Estagios.xlsx"
PRINT_FILENAME = "Relatorio_Estagios.html"


def default_session_path() -> Path:
    """
    Return the path of session.json.

    A function instead of a constant so tests can point the environment
    variable somewhere else after import.
    """
    override = os.getenv("ESTAGIOS_SESSION_PATH", "").strip()
    if override:
        return Path(override)
    return DATA_DIR / "session.json"
