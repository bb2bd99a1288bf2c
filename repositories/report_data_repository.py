"""
Report data repository: one Supabase query per report export.
"""

from typing import Any, Dict, List, Optional, Sequence

from repositories.base import SupabaseRepository
from entities.report import FilterCriteria, ReportType
from common.exceptions import DataUnavailableException, SupabaseException
from common.logging import get_logger

logger = get_logger("report_data_repository")

EMPLOYEE_COLUMNS = (
    "id, name, employee_code, job_title, branch, leave_taken, "
    "remaining_leave_days, working_hours, email, phone"
)
DOCUMENT_HOLDER_COLUMNS = (
    "id, name, branch, sponsored, twenty_hours, "
    "document_tracker(id, document_number, expiry_date, country, nationality_status, document_types(name))"
)
DOCUMENT_TRACKER_ORDER = ("-expiry_date", "document_number", "id")
COMPLIANCE_EMPLOYEE_FK = "compliance_period_records_employee_id_fkey"


def _embed(relation: str, columns: str, inner: bool) -> str:
    """PostgREST embed; `!inner` turns filters on the relation into row filters."""
    return f"{relation}{'!inner' if inner else ''}({columns})"


class ReportDataRepository(SupabaseRepository):
    """
    Fetches raw records for a report, applying branch, sub-type, date range
    and period predicates server-side. Ordering is deterministic: a natural
    key followed by `id` as tie-break.
    """

    def __init__(
        self,
        supabase_client,
        employees_table: str = "employees",
        leaves_table: str = "leaves",
        compliance_records_table: str = "compliance_period_records",
    ):
        super().__init__(supabase_client)
        self.employees_table = employees_table
        self.leaves_table = leaves_table
        self.compliance_records_table = compliance_records_table

    async def fetch(self, report_type: ReportType, criteria: FilterCriteria) -> List[Dict[str, Any]]:
        """Run the report's query; any failure aborts with DataUnavailableException."""
        builders = {
            ReportType.EMPLOYEES: self._employees_query,
            ReportType.DOCUMENTS: self._document_holders_query,
            ReportType.LEAVES: self._leaves_query,
            ReportType.COMPLIANCE: self._compliance_query,
        }
        table, query = builders[report_type](criteria)
        try:
            rows = self._execute(query, table, "fetch report data")
        except SupabaseException as e:
            raise DataUnavailableException(report_id=report_type.value, table=table) from e

        logger.info(
            f"Fetched {len(rows)} rows for {report_type.value} report",
            extra={"table": table, "row_count": len(rows)}
        )
        return rows

    def _select(self, table: str, columns: str, filters: Dict[str, Any], order_by: Sequence[str]):
        query = self.supabase.table(table).select(columns)
        query = self._build_filters(query, filters)
        return self._apply_ordering(query, order_by)

    def _branch_filter(self, criteria: FilterCriteria, column: str = "branch") -> Dict[str, Any]:
        return {column: criteria.branch} if criteria.branch else {}

    def _employees_query(self, criteria: FilterCriteria):
        table = self.employees_table
        return table, self._select(
            table, EMPLOYEE_COLUMNS, self._branch_filter(criteria), ["name", "id"]
        )

    def _document_holders_query(self, criteria: FilterCriteria):
        table = self.employees_table
        query = self._select(table, DOCUMENT_HOLDER_COLUMNS, self._branch_filter(criteria), ["name", "id"])
        return table, self._apply_ordering(query, DOCUMENT_TRACKER_ORDER, foreign_table="document_tracker")

    def _leaves_query(self, criteria: FilterCriteria):
        table = self.leaves_table
        columns = ", ".join([
            "*",
            _embed("employees", "name, employee_code, remaining_leave_days, branch", inner=bool(criteria.branch)),
            _embed("leave_types", "name", inner=bool(criteria.sub_type)),
        ])

        filters: Dict[str, Any] = self._branch_filter(criteria, "employees.branch")
        if criteria.sub_type:
            filters["leave_types.name"] = criteria.sub_type
        if criteria.has_date_range:
            filters["start_date"] = {"gte": criteria.date_from.isoformat()}
            filters["end_date"] = {"lte": criteria.date_to.isoformat()}

        return table, self._select(table, columns, filters, ["-start_date", "id"])

    def _compliance_query(self, criteria: FilterCriteria):
        table = self.compliance_records_table
        columns = ", ".join([
            "*",
            _embed(f"employees!{COMPLIANCE_EMPLOYEE_FK}", "name, branch", inner=bool(criteria.branch)),
            _embed("compliance_types", "name, frequency", inner=False),
        ])

        filters: Dict[str, Any] = self._branch_filter(criteria, "employees.branch")
        if criteria.sub_type:
            filters["compliance_type_id"] = criteria.sub_type
        period_predicate = self._period_predicate(criteria)
        if period_predicate is not None:
            filters["period_identifier"] = period_predicate

        return table, self._select(table, columns, filters, ["-completion_date", "id"])

    @staticmethod
    def _period_predicate(criteria: FilterCriteria) -> Optional[Any]:
        period = criteria.period
        if period is None:
            return None
        if period.kind == "prefix":
            return {"like": f"{period.values[0]}%"}
        return list(period.values)
