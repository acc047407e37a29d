# config/settings.py
"""
Environment-driven settings for the migration tooling.

Values are read once at import; .env is loaded first so local runs pick up
the same values Alembic uses.
"""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# psycopg2-binary is the declared driver; SQLAlchemy 2.1 resolves a bare
# postgresql:// URL to psycopg (v3) instead.
POSTGRES_DRIVER_SCHEME = "postgresql+psycopg2://"
_BARE_POSTGRES_SCHEMES = ("postgresql://", "postgres://")

# ─── Identifier remap ──────────────────────────────────────────────
# Rows written to the archive per INSERT round-trip.
ID_REMAP_BATCH_SIZE = int(os.getenv("ID_REMAP_BATCH_SIZE", "1000"))
# PostgreSQL lock_timeout while acquiring exclusive table locks.
ID_REMAP_LOCK_TIMEOUT = os.getenv("ID_REMAP_LOCK_TIMEOUT", "30s")


def normalize_database_url(url: Optional[str]) -> Optional[str]:
    """Pin bare postgresql:// / postgres:// URLs to the psycopg2 driver."""
    if not url:
        return url
    for scheme in _BARE_POSTGRES_SCHEMES:
        if url.startswith(scheme):
            return POSTGRES_DRIVER_SCHEME + url[len(scheme):]
    return url


def database_url() -> Optional[str]:
    """DATABASE_URL from the environment, read at call time."""
    return normalize_database_url(os.getenv("DATABASE_URL"))
