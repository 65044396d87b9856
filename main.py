"""
main.py
-------
Health check entry point.

Builds a QueryGateway from the environment (see config.py) and verifies
that the configured database accepts a connection:
    python main.py
Exits 0 when the connection succeeds, 1 otherwise.
"""

import sys

from config import DB_PROVIDER
from repositories.query_gateway import QueryGateway
from utils.logger import get_logger

logger = get_logger(__name__)


def main() -> int:
    """Run the connection test and return the process exit code."""
    logger.info(f"Checking database connection (provider: {DB_PROVIDER})...")
    gateway = QueryGateway.from_config()
    try:
        gateway.test_connection()
    except Exception as e:
        logger.error(f"Database is not reachable: {e}")
        return 1
    logger.info("Database connection OK.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
