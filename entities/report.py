"""
Report entity models: definitions, filter criteria, sections and export artifacts.
"""

from datetime import date
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


# A transformed row maps column label -> display value (str or number)
TransformedRow = Dict[str, Any]


class ReportType(str, Enum):
    """Exportable report kinds."""
    EMPLOYEES = "employees"
    LEAVES = "leaves"
    DOCUMENTS = "documents"
    COMPLIANCE = "compliance"


class FilterKind(str, Enum):
    """Filters a report definition can honour."""
    BRANCH = "branch"
    SUB_TYPE = "sub_type"
    DATE_RANGE = "date_range"
    PERIOD = "period"


class ExportFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"


class ReportDefinition(BaseModel):
    """
    Declared shape of one exportable report.

    `fields` is the single source of truth for column order, both for the
    column selector and for projection.
    """
    model_config = ConfigDict(frozen=True)

    id: ReportType
    display_name: str
    description: str
    fields: Tuple[str, ...]
    supported_filters: FrozenSet[FilterKind] = frozenset()
    category_names: Tuple[str, ...] = Field(
        default=(),
        description="Document categories that generated the dynamic part of `fields`",
    )

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def supports(self, kind: FilterKind) -> bool:
        return kind in self.supported_filters

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id.value,
            "name": self.display_name,
            "description": self.description,
            "fields": list(self.fields),
            "supported_filters": sorted(kind.value for kind in self.supported_filters),
        }


class PeriodFilter(BaseModel):
    """Period-identifier predicate: a year prefix or an explicit identifier set."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["prefix", "in_set"]
    values: Tuple[str, ...]

    def matches(self, identifier: Optional[str]) -> bool:
        if identifier is None:
            return False
        if self.kind == "prefix":
            return any(identifier.startswith(prefix) for prefix in self.values)
        return identifier in self.values


class FilterCriteria(BaseModel):
    """Normalized, request-scoped query filter for one report."""
    model_config = ConfigDict(frozen=True)

    branch: Optional[str] = None
    sub_type: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    year: Optional[str] = None
    months: FrozenSet[str] = frozenset()
    quarters: FrozenSet[str] = frozenset()
    halves: FrozenSet[str] = frozenset()
    period: Optional[PeriodFilter] = None

    @property
    def has_date_range(self) -> bool:
        return self.date_from is not None and self.date_to is not None


class ReportSelections(BaseModel):
    """Raw user selections as submitted with an export request."""

    branch: Optional[str] = None
    sub_type: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    year: Optional[str] = None
    months: List[str] = Field(default_factory=list)
    quarters: List[str] = Field(default_factory=list)
    halves: List[str] = Field(default_factory=list)


class ReportSection(BaseModel):
    """An independently headered block of rows within one export."""

    label: Optional[str] = None
    rows: List[TransformedRow] = Field(default_factory=list)


class ExportArtifact(BaseModel):
    """Serialized export, alive only for the duration of one download."""
    model_config = ConfigDict(frozen=True)

    filename: str
    mime_type: str
    body: str
    report_id: ReportType
    row_count: int = 0
