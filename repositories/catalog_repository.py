"""
Catalog repository: lookup lists that parameterize reports.
"""

from typing import List

from repositories.base import SupabaseRepository
from entities.catalog import Branch, Category, ComplianceType, LeaveType
from common.logging import get_logger

logger = get_logger("catalog_repository")


class CatalogRepository(SupabaseRepository):
    """
    Reads document categories, branches, leave types and compliance types,
    each ordered by name.
    """

    def __init__(
        self,
        supabase_client,
        document_types_table: str = "document_types",
        branches_table: str = "branches",
        leave_types_table: str = "leave_types",
        compliance_types_table: str = "compliance_types",
    ):
        super().__init__(supabase_client)
        self.document_types_table = document_types_table
        self.branches_table = branches_table
        self.leave_types_table = leave_types_table
        self.compliance_types_table = compliance_types_table

    def _list_by_name(self, table: str, columns: str):
        query = self.supabase.table(table).select(columns)
        query = self._apply_ordering(query, ["name", "id"])
        return self._execute(query, table, "list")

    async def list_categories(self) -> List[Category]:
        """Registered document categories ordered by name."""
        rows = self._list_by_name(self.document_types_table, "id, name")
        logger.debug(f"Loaded {len(rows)} document categories")
        return [Category.from_dict(row) for row in rows]

    async def list_branches(self) -> List[Branch]:
        rows = self._list_by_name(self.branches_table, "id, name")
        return [Branch.from_dict(row) for row in rows]

    async def list_leave_types(self) -> List[LeaveType]:
        rows = self._list_by_name(self.leave_types_table, "id, name")
        return [LeaveType.from_dict(row) for row in rows]

    async def list_compliance_types(self) -> List[ComplianceType]:
        rows = self._list_by_name(self.compliance_types_table, "id, name, frequency")
        return [ComplianceType.from_dict(row) for row in rows]
