"""
Report catalog service.

Builds report definitions from the current document category catalog and
publishes a notification whenever that catalog changes.
"""

from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from entities.catalog import Category, ComplianceType
from entities.report import FilterKind, ReportDefinition, ReportType
from repositories.catalog_repository import CatalogRepository
from common.exceptions import ResourceNotFoundException
from common.logging import get_logger

logger = get_logger("report_catalog")

EMPLOYEE_FIELDS = (
    "Name", "Employee Code", "Job Title", "Branch", "Days Taken",
    "Days Remaining", "Hours", "Email", "Phone",
)
LEAVE_FIELDS = (
    "Employee", "Employee Code", "Branch", "Type", "Start Date", "End Date",
    "Duration", "Days Remaining", "Status", "Reason", "Submitted Date",
    "Added By", "Approved By", "Approved Date", "Rejected By", "Rejected Date",
)
DOCUMENT_BASE_FIELDS = (
    "Employee Name", "Branch", "Status", "Country", "Sponsored", "20 Hours Restriction",
)
COMPLIANCE_FIELDS = (
    "Task Name", "Employee", "Branch", "Period", "Completion Date", "Status",
    "Notes", "Frequency",
)

MONTH_OPTIONS = [
    {"value": "01", "label": "January"},
    {"value": "02", "label": "February"},
    {"value": "03", "label": "March"},
    {"value": "04", "label": "April"},
    {"value": "05", "label": "May"},
    {"value": "06", "label": "June"},
    {"value": "07", "label": "July"},
    {"value": "08", "label": "August"},
    {"value": "09", "label": "September"},
    {"value": "10", "label": "October"},
    {"value": "11", "label": "November"},
    {"value": "12", "label": "December"},
]
QUARTER_OPTIONS = [
    {"value": "Q1", "label": "Q1 (Jan-Mar)"},
    {"value": "Q2", "label": "Q2 (Apr-Jun)"},
    {"value": "Q3", "label": "Q3 (Jul-Sep)"},
    {"value": "Q4", "label": "Q4 (Oct-Dec)"},
]
HALF_OPTIONS = [
    {"value": "H1", "label": "H1 (Jan-Jun)"},
    {"value": "H2", "label": "H2 (Jul-Dec)"},
]

CatalogListener = Callable[[List[ReportDefinition]], None]


def days_left_field(category_name: str) -> str:
    return f"{category_name} Days Left"


def document_fields(category_names: Iterable[str]) -> Tuple[str, ...]:
    """Fixed base columns followed by one (expiry, days left) pair per category."""
    dynamic: List[str] = []
    for name in category_names:
        dynamic.extend([name, days_left_field(name)])
    return DOCUMENT_BASE_FIELDS + tuple(dynamic)


def document_category_names(categories: Iterable[Category]) -> Tuple[str, ...]:
    """
    Category names usable as document columns, in catalog order.

    A category whose name or days-left label is already a column (a base
    field or an earlier category) is skipped.
    """
    taken = set(DOCUMENT_BASE_FIELDS)
    names: List[str] = []
    for category in categories:
        labels = (category.name, days_left_field(category.name))
        if any(label in taken for label in labels):
            logger.warning(
                f"Skipping document category '{category.name}': column name already in use",
                extra={"category_id": category.id}
            )
            continue
        taken.update(labels)
        names.append(category.name)
    return tuple(names)


def resolve_definitions(categories: List[Category]) -> List[ReportDefinition]:
    """
    Build every report definition for the given category catalog.

    Pure: the same categories (in the same order) always give the same
    definitions, in the same order.
    """
    category_names = document_category_names(categories)
    return [
        ReportDefinition(
            id=ReportType.EMPLOYEES,
            display_name="Employees Report",
            description="Complete employee directory with all details",
            fields=EMPLOYEE_FIELDS,
            supported_filters=frozenset({FilterKind.BRANCH}),
        ),
        ReportDefinition(
            id=ReportType.LEAVES,
            display_name="Leaves Report",
            description="Leave requests and balances",
            fields=LEAVE_FIELDS,
            supported_filters=frozenset({FilterKind.BRANCH, FilterKind.SUB_TYPE, FilterKind.DATE_RANGE}),
        ),
        ReportDefinition(
            id=ReportType.DOCUMENTS,
            display_name="Documents Report",
            description="Document expiration tracking",
            fields=document_fields(category_names),
            supported_filters=frozenset({FilterKind.BRANCH}),
            category_names=category_names,
        ),
        ReportDefinition(
            id=ReportType.COMPLIANCE,
            display_name="Compliance Report",
            description="Compliance task completion status",
            fields=COMPLIANCE_FIELDS,
            supported_filters=frozenset({FilterKind.BRANCH, FilterKind.SUB_TYPE, FilterKind.PERIOD}),
        ),
    ]


def find_definition(definitions: List[ReportDefinition], report_id: str) -> ReportDefinition:
    for definition in definitions:
        if definition.id.value == report_id:
            return definition
    raise ResourceNotFoundException(resource_type="Report", resource_id=report_id)


def year_options(today: date, years_back: int, years_ahead: int) -> List[str]:
    return [str(year) for year in range(today.year - years_back, today.year + years_ahead + 1)]


class CatalogService:
    """
    Resolves report definitions against the live category catalog.

    Definitions are rebuilt on every call; listeners are told when the set of
    categories differs from the previous resolution.
    """

    def __init__(
        self,
        catalog_repository: CatalogRepository,
        years_back: int = 5,
        years_ahead: int = 1,
    ):
        self.catalog_repository = catalog_repository
        self.years_back = years_back
        self.years_ahead = years_ahead
        self._listeners: List[CatalogListener] = []
        self._fingerprint: Optional[Tuple[Tuple[str, str], ...]] = None

    def subscribe(self, listener: CatalogListener) -> None:
        self._listeners.append(listener)

    async def get_definitions(self) -> List[ReportDefinition]:
        categories = await self.catalog_repository.list_categories()
        definitions = resolve_definitions(categories)
        self._publish_if_changed(categories, definitions)
        return definitions

    async def get_definition(self, report_id: str) -> ReportDefinition:
        return find_definition(await self.get_definitions(), report_id)

    async def get_compliance_types(self) -> List[ComplianceType]:
        return await self.catalog_repository.list_compliance_types()

    async def get_filter_options(self, today: Optional[date] = None) -> Dict[str, Any]:
        today = today or date.today()
        branches = await self.catalog_repository.list_branches()
        leave_types = await self.catalog_repository.list_leave_types()
        compliance_types = await self.catalog_repository.list_compliance_types()
        return {
            "branches": [branch.model_dump() for branch in branches],
            "leave_types": [leave_type.model_dump() for leave_type in leave_types],
            "compliance_types": [ct.model_dump() for ct in compliance_types],
            "years": year_options(today, self.years_back, self.years_ahead),
            "default_year": str(today.year),
            "months": MONTH_OPTIONS,
            "quarters": QUARTER_OPTIONS,
            "halves": HALF_OPTIONS,
        }

    def _publish_if_changed(
        self,
        categories: List[Category],
        definitions: List[ReportDefinition]
    ) -> None:
        fingerprint = tuple((category.id, category.name) for category in categories)
        if fingerprint == self._fingerprint:
            return

        first_resolution = self._fingerprint is None
        self._fingerprint = fingerprint
        if first_resolution:
            return

        logger.info(
            "Document category catalog changed",
            extra={"category_count": len(categories)}
        )
        for listener in list(self._listeners):
            listener(definitions)


def create_catalog_service(
    catalog_repository: CatalogRepository,
    years_back: int = 5,
    years_ahead: int = 1,
) -> CatalogService:
    return CatalogService(catalog_repository, years_back=years_back, years_ahead=years_ahead)
