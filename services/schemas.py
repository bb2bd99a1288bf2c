from datetime import date
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from entities.report import ExportFormat, ReportSelections


class ReportDefinitionResponse(BaseModel):
    id: str
    name: str
    description: str
    fields: List[str]
    supported_filters: List[str]


class ReportListResponse(BaseModel):
    reports: List[ReportDefinitionResponse]


class ColumnSelectionResponse(BaseModel):
    report_id: str
    fields: List[str] = Field(description="Every field of the report, in declared order")
    selected_columns: List[str] = Field(description="Selected fields, in declared order")


class ColumnSelectionUpdate(BaseModel):
    columns: List[str] = Field(..., description="Full replacement set of selected columns")


class ColumnToggleRequest(BaseModel):
    column: str = Field(..., min_length=1, description="Field label to check or uncheck")
    checked: bool = Field(..., description="True selects the column, false deselects it")


class SelectAllRequest(BaseModel):
    selected: bool = Field(True, description="True selects every column, false clears the selection")


class PeriodOption(BaseModel):
    period_identifier: str
    label: str


class PeriodListResponse(BaseModel):
    compliance_type_id: str
    frequency: Optional[str] = None
    year: str
    periods: List[PeriodOption]


class ExportRequest(BaseModel):
    report_id: Optional[str] = Field(None, description="Report to export, e.g. 'employees'")
    format: ExportFormat = Field(ExportFormat.CSV, description="Requested format; xlsx falls back to csv")
    columns: Optional[List[str]] = Field(
        None,
        description="Columns to export; when omitted the caller's stored selection is used"
    )
    branch: Optional[str] = Field(None, description="Branch name or 'all'")
    sub_type: Optional[str] = Field(None, description="Leave type name or compliance type id, or 'all'")
    date_from: Optional[date] = Field(None, description="Leave date range start (inclusive)")
    date_to: Optional[date] = Field(None, description="Leave date range end (inclusive)")
    year: Optional[str] = Field(None, description="Compliance period year, defaults to the current year")
    months: List[str] = Field(default_factory=list, description="Monthly periods, e.g. ['01', '02']")
    quarters: List[str] = Field(default_factory=list, description="Quarterly periods, e.g. ['Q1']")
    halves: List[str] = Field(default_factory=list, description="Bi-annual periods, e.g. ['H2']")

    def selections(self) -> ReportSelections:
        return ReportSelections(
            branch=self.branch,
            sub_type=self.sub_type,
            date_from=self.date_from,
            date_to=self.date_to,
            year=self.year,
            months=list(self.months),
            quarters=list(self.quarters),
            halves=list(self.halves),
        )


class FilterOptionsResponse(BaseModel):
    branches: List[Dict[str, Any]]
    leave_types: List[Dict[str, Any]]
    compliance_types: List[Dict[str, Any]]
    years: List[str]
    default_year: str
    months: List[Dict[str, str]]
    quarters: List[Dict[str, str]]
    halves: List[Dict[str, str]]
