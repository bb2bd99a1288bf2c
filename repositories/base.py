"""
Base repository class for the Repository pattern.
"""

from abc import ABC
from typing import Any, Dict, List, Optional, Sequence

from common.exceptions import SupabaseException
from common.logging import get_logger

logger = get_logger("repository")


class SupabaseRepository(ABC):
    """
    Base Supabase repository implementation with common query helpers.
    """

    def __init__(self, supabase_client):
        self.supabase = supabase_client

    def _build_filters(self, query, filters: Optional[Dict[str, Any]]):
        """Apply filters to a Supabase query.

        Plain values become equality predicates, lists become `in` predicates
        and dicts map operator names to values.
        """
        if not filters:
            return query

        for field, value in filters.items():
            if isinstance(value, (list, tuple)):
                query = query.in_(field, list(value))
            elif isinstance(value, dict):
                for operator, filter_value in value.items():
                    if operator == "eq":
                        query = query.eq(field, filter_value)
                    elif operator == "neq":
                        query = query.neq(field, filter_value)
                    elif operator == "gt":
                        query = query.gt(field, filter_value)
                    elif operator == "gte":
                        query = query.gte(field, filter_value)
                    elif operator == "lt":
                        query = query.lt(field, filter_value)
                    elif operator == "lte":
                        query = query.lte(field, filter_value)
                    elif operator == "like":
                        query = query.like(field, filter_value)
                    elif operator == "ilike":
                        query = query.ilike(field, filter_value)
                    else:
                        raise ValueError(f"Unsupported filter operator: {operator}")
            else:
                query = query.eq(field, value)

        return query

    def _apply_ordering(
        self,
        query,
        order_by: Optional[Sequence[str]],
        foreign_table: Optional[str] = None
    ):
        """Apply ordering keys; a leading '-' means descending. `foreign_table` orders an embed."""
        for key in order_by or ():
            desc = key.startswith("-")
            column = key[1:] if desc else key
            if foreign_table:
                query = query.order(column, desc=desc, foreign_table=foreign_table)
            else:
                query = query.order(column, desc=desc)
        return query

    def _execute(self, query, table: str, operation: str) -> List[Dict[str, Any]]:
        """Run a query and return its rows, wrapping client failures."""
        try:
            result = query.execute()
        except Exception as e:
            logger.error(f"Supabase {operation} on '{table}' failed: {e}", exc_info=True)
            raise SupabaseException(
                detail=f"Failed to {operation} from {table}",
                table=table,
                operation=operation
            ) from e
        return list(getattr(result, "data", None) or [])
