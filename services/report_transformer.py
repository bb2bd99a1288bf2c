"""
Row transformer: raw report records -> flat display rows.

Each report kind has a typed record model and a row builder; rows are keyed
exactly by the report definition's field labels.
"""

import re
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from entities.records import (
    ComplianceRecord,
    DocumentHolderRecord,
    EmployeeRecord,
    LeaveRecord,
    RawRecord,
)
from entities.report import ReportDefinition, ReportSection, ReportType, TransformedRow
from services.report_catalog import days_left_field
from common.exceptions import MalformedDateValue
from common.logging import get_logger

logger = get_logger("report_transformer")

ALL_EMPLOYEES_SECTION = "Sheet1: All Employees"
RESTRICTED_EMPLOYEES_SECTION = "Sheet2: Sponsored/20 Hours"

_CALENDAR_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Calendar date at the start of a `YYYY-MM-DD...` value.

    Blank values give None; anything else that is not a real calendar date
    raises MalformedDateValue.
    """
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    match = _CALENDAR_DATE.match(str(value))
    if not match:
        raise MalformedDateValue(value)
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError as e:
        raise MalformedDateValue(value) from e


def format_date(value: Any) -> str:
    """DD/MM/YYYY, blank for absent values, verbatim for malformed ones."""
    try:
        parsed = parse_calendar_date(value)
    except MalformedDateValue:
        logger.debug("Passing malformed date through unformatted", extra={"value": str(value)})
        return str(value)
    return parsed.strftime("%d/%m/%Y") if parsed else ""


def days_until(expiry: Any, today: date) -> Optional[int]:
    """Whole calendar days from today to expiry; negative once expired."""
    try:
        expiry_date = parse_calendar_date(expiry)
    except MalformedDateValue:
        logger.debug("Expiry date is not a calendar date", extra={"value": str(expiry)})
        return None
    if expiry_date is None:
        return None
    return (expiry_date - today).days


def yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def employee_row(record: EmployeeRecord, definition: ReportDefinition, today: date) -> TransformedRow:
    return {
        "Name": record.name,
        "Employee Code": record.employee_code or "",
        "Job Title": record.job_title or "",
        "Branch": record.branch or "",
        "Days Taken": record.leave_taken or 0,
        "Days Remaining": record.remaining_leave_days or 0,
        "Hours": record.working_hours or "",
        "Email": record.email or "",
        "Phone": record.phone or "",
    }


def leave_row(record: LeaveRecord, definition: ReportDefinition, today: date) -> TransformedRow:
    employee = record.employee
    return {
        "Employee": employee.name or "",
        "Employee Code": employee.employee_code or "",
        "Branch": employee.branch or "",
        "Type": record.leave_type_name or "",
        "Start Date": format_date(record.start_date),
        "End Date": format_date(record.end_date),
        "Duration": record.days or 0,
        "Days Remaining": employee.remaining_leave_days or 0,
        "Status": record.status or "",
        "Reason": record.notes or "",
        "Submitted Date": format_date(record.created_at),
        "Added By": record.manager_notes or "",
        "Approved By": record.approved_by or "",
        "Approved Date": format_date(record.approved_date),
        "Rejected By": record.rejected_by or "",
        "Rejected Date": format_date(record.rejected_date),
    }


def document_row(record: DocumentHolderRecord, definition: ReportDefinition, today: date) -> TransformedRow:
    passport = record.passport()
    row: TransformedRow = {
        "Employee Name": record.name,
        "Branch": record.branch or "",
        "Status": (passport.nationality_status or "") if passport else "",
        "Country": (passport.country or "") if passport else "",
        "Sponsored": yes_no(record.sponsored),
        "20 Hours Restriction": yes_no(record.twenty_hours),
    }
    for category_name in definition.category_names:
        document = record.document_for(category_name)
        days_left = days_until(document.expiry_date, today) if document else None
        row[category_name] = format_date(document.expiry_date) if document else ""
        row[days_left_field(category_name)] = days_left if days_left is not None else ""
    return row


def compliance_row(record: ComplianceRecord, definition: ReportDefinition, today: date) -> TransformedRow:
    return {
        "Task Name": record.compliance_type_name or "",
        "Employee": record.employee_name or "",
        "Branch": record.employee_branch or "",
        "Period": record.period_identifier or "",
        # TODO: drop the verbatim fallback once legacy free-text completion dates are migrated
        "Completion Date": format_date(record.completion_date),
        "Status": record.status or "",
        "Notes": record.notes or "",
        "Frequency": record.frequency or "",
    }


RowBuilder = Callable[[RawRecord, ReportDefinition, date], TransformedRow]

ROW_BUILDERS: Dict[ReportType, Tuple[Type[RawRecord], RowBuilder]] = {
    ReportType.EMPLOYEES: (EmployeeRecord, employee_row),
    ReportType.LEAVES: (LeaveRecord, leave_row),
    ReportType.DOCUMENTS: (DocumentHolderRecord, document_row),
    ReportType.COMPLIANCE: (ComplianceRecord, compliance_row),
}


def parse_records(definition: ReportDefinition, raw_records: List[Dict[str, Any]]) -> List[RawRecord]:
    """Typed records for a report; document holders without documents are dropped."""
    record_type, _ = ROW_BUILDERS[definition.id]
    records = [record_type.from_dict(raw) for raw in raw_records]
    if definition.id == ReportType.DOCUMENTS:
        records = [record for record in records if record.documents]
    return records


def _rows(definition: ReportDefinition, records: List[RawRecord], today: date) -> List[TransformedRow]:
    _, builder = ROW_BUILDERS[definition.id]
    return [builder(record, definition, today) for record in records]


def transform(
    definition: ReportDefinition,
    raw_records: List[Dict[str, Any]],
    today: Optional[date] = None,
) -> List[TransformedRow]:
    """Flat display rows, in source order."""
    today = today or date.today()
    return _rows(definition, parse_records(definition, raw_records), today)


def build_sections(
    definition: ReportDefinition,
    raw_records: List[Dict[str, Any]],
    today: Optional[date] = None,
) -> List[ReportSection]:
    """
    Ordered export sections for a report.

    Documents split into unrestricted employees and employees that are
    sponsored or limited to twenty hours; every other report is a single
    unlabelled section.
    """
    today = today or date.today()
    records = parse_records(definition, raw_records)

    if definition.id != ReportType.DOCUMENTS:
        return [ReportSection(rows=_rows(definition, records, today))]

    unrestricted = [record for record in records if not record.is_restricted]
    restricted = [record for record in records if record.is_restricted]
    return [
        ReportSection(label=ALL_EMPLOYEES_SECTION, rows=_rows(definition, unrestricted, today)),
        ReportSection(label=RESTRICTED_EMPLOYEES_SECTION, rows=_rows(definition, restricted, today)),
    ]
