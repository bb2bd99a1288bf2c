"""
Database connectivity probe used by the health endpoint.
"""

import time
from typing import Any, Dict

from common.exceptions import DatabaseException
from common.logging import get_logger

logger = get_logger("db_check")


def check_database_connection(supabase_client, table: str) -> Dict[str, Any]:
    """Run a one-row read against `table` and report its latency."""
    start_time = time.time()
    try:
        result = supabase_client.table(table).select("id").limit(1).execute()
    except Exception as e:
        logger.error(f"Database connectivity check failed: {e}", exc_info=True)
        raise DatabaseException(
            detail="Database is not reachable",
            operation="connectivity_check",
            context={"table": table}
        ) from e

    latency_ms = round((time.time() - start_time) * 1000, 2)
    return {
        "table": table,
        "reachable": True,
        "rows_sampled": len(getattr(result, "data", None) or []),
        "latency_ms": latency_ms,
    }
