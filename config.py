"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── Database provider ─────────────────────────────────────
DB_PROVIDER: str = os.getenv("DB_PROVIDER", "psycopg2")

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "chronos")
DB_USER: str = os.getenv("DB_USER", "chronos")
DB_PASS: str = os.getenv("DB_PASS", "")

# An explicit connection string wins over the individual parts.
DATABASE_URL: str = os.getenv("DB_CONNECTION_STRING") or (
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
