"""
Filter and period resolution for report exports.

Turns raw user selections into a normalized FilterCriteria for one report
definition. Selections that do not apply to the report, or to the selected
compliance type's frequency, are dropped rather than passed through.
"""

import math
import re
from datetime import date
from typing import Iterable, List, Optional

from entities.catalog import ComplianceType, Frequency
from entities.report import (
    FilterCriteria,
    FilterKind,
    PeriodFilter,
    ReportDefinition,
    ReportSelections,
)
from common.exceptions import ValidationException
from common.logging import get_logger

logger = get_logger("report_filters")

ALL_OPTION = "all"
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
_YEAR_PATTERN = re.compile(r"^\d{4}$")


def _normalize_choice(value: Optional[str]) -> Optional[str]:
    """Blank and "all" both mean no restriction."""
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == ALL_OPTION:
        return None
    return value


def normalize_months(months: Iterable[str]) -> List[str]:
    normalized = set()
    for month in months:
        text = str(month).strip()
        if not text.isdigit() or not 1 <= int(text) <= 12:
            raise ValidationException(detail=f"Invalid month: {month!r}", field="months", value=month)
        normalized.add(f"{int(text):02d}")
    return sorted(normalized)


def _normalize_labels(values: Iterable[str], prefix: str, count: int, field: str) -> List[str]:
    allowed = {f"{prefix}{n}" for n in range(1, count + 1)}
    normalized = set()
    for value in values:
        text = str(value).strip().upper()
        if text not in allowed:
            raise ValidationException(detail=f"Invalid {field[:-1]}: {value!r}", field=field, value=value)
        normalized.add(text)
    return sorted(normalized)


def normalize_quarters(quarters: Iterable[str]) -> List[str]:
    return _normalize_labels(quarters, "Q", 4, "quarters")


def normalize_halves(halves: Iterable[str]) -> List[str]:
    return _normalize_labels(halves, "H", 2, "halves")


def build_period_filter(
    frequency: Optional[Frequency],
    year: str,
    months: Iterable[str] = (),
    quarters: Iterable[str] = (),
    halves: Iterable[str] = (),
) -> Optional[PeriodFilter]:
    """
    Period-identifier predicate for a frequency.

    annual -> prefix on the year; monthly/quarterly/bi-annual -> explicit
    identifier set built from the matching selector. An empty selector, a
    weekly or an unknown frequency means no restriction.
    """
    if frequency == Frequency.ANNUAL:
        return PeriodFilter(kind="prefix", values=(year,))

    selectors = {
        Frequency.MONTHLY: months,
        Frequency.QUARTERLY: quarters,
        Frequency.BI_ANNUAL: halves,
    }
    chosen = sorted(set(selectors.get(frequency, ())))
    if not chosen:
        return None
    return PeriodFilter(kind="in_set", values=tuple(f"{year}-{value}" for value in chosen))


def resolve_filter(
    definition: ReportDefinition,
    selections: ReportSelections,
    compliance_types: List[ComplianceType],
    today: Optional[date] = None,
) -> FilterCriteria:
    """Normalize raw selections into the filter criteria for `definition`."""
    today = today or date.today()

    branch = _normalize_choice(selections.branch) if definition.supports(FilterKind.BRANCH) else None
    sub_type = _normalize_choice(selections.sub_type) if definition.supports(FilterKind.SUB_TYPE) else None

    date_from = date_to = None
    if definition.supports(FilterKind.DATE_RANGE) and selections.date_from and selections.date_to:
        if selections.date_from > selections.date_to:
            raise ValidationException(
                detail="Date range start must not be after its end",
                field="date_from",
                value=selections.date_from.isoformat()
            )
        date_from, date_to = selections.date_from, selections.date_to

    year = None
    months: List[str] = []
    quarters: List[str] = []
    halves: List[str] = []
    period = None

    if definition.supports(FilterKind.PERIOD) and sub_type:
        year = (selections.year or str(today.year)).strip()
        if not _YEAR_PATTERN.match(year):
            raise ValidationException(detail=f"Invalid year: {year!r}", field="year", value=year)

        compliance_type = next((ct for ct in compliance_types if ct.id == sub_type), None)
        frequency = compliance_type.frequency_kind if compliance_type else None

        # Only the selector matching the frequency survives
        if frequency == Frequency.MONTHLY:
            months = normalize_months(selections.months)
        elif frequency == Frequency.QUARTERLY:
            quarters = normalize_quarters(selections.quarters)
        elif frequency == Frequency.BI_ANNUAL:
            halves = normalize_halves(selections.halves)

        period = build_period_filter(frequency, year, months, quarters, halves)
        logger.debug(
            "Resolved period filter",
            extra={
                "sub_type": sub_type,
                "frequency": frequency.value if frequency else None,
                "period": period.model_dump() if period else None,
            }
        )

    return FilterCriteria(
        branch=branch,
        sub_type=sub_type,
        date_from=date_from,
        date_to=date_to,
        year=year,
        months=frozenset(months),
        quarters=frozenset(quarters),
        halves=frozenset(halves),
        period=period,
    )


def format_period_label(identifier: str, frequency: Optional[Frequency]) -> str:
    """Human label for a period identifier, e.g. '2024-03' -> 'Mar 2024'."""
    if frequency == Frequency.ANNUAL:
        return f"Year {identifier}"
    if frequency == Frequency.MONTHLY:
        year, _, month = identifier.partition("-")
        if month.isdigit() and 1 <= int(month) <= 12:
            return f"{MONTH_NAMES[int(month) - 1]} {year}"
        return identifier
    if frequency == Frequency.QUARTERLY:
        return identifier.replace("-", " ", 1)
    if frequency == Frequency.BI_ANNUAL:
        return identifier.replace("-H", " Half ", 1)
    if frequency == Frequency.WEEKLY:
        return identifier.replace("-W", " Week ", 1)
    return identifier


def last_week_number(year: int) -> int:
    """
    Week number of 31 December. Weeks start on Sunday and week 1 is the
    (possibly partial) week holding 1 January, so a year has 53 or 54 weeks.
    """
    jan_first = date(year, 1, 1)
    days_in_year = (date(year + 1, 1, 1) - jan_first).days
    sunday_offset = (jan_first.weekday() + 1) % 7
    return math.ceil((days_in_year + sunday_offset) / 7)


def list_periods(frequency: Optional[Frequency], year: str) -> List[dict]:
    """Every period identifier of `year` for a frequency, with display labels."""
    if frequency == Frequency.MONTHLY:
        identifiers = [f"{year}-{month:02d}" for month in range(1, 13)]
    elif frequency == Frequency.QUARTERLY:
        identifiers = [f"{year}-Q{quarter}" for quarter in range(1, 5)]
    elif frequency == Frequency.BI_ANNUAL:
        identifiers = [f"{year}-H{half}" for half in (1, 2)]
    elif frequency == Frequency.WEEKLY:
        identifiers = [f"{year}-W{week:02d}" for week in range(1, last_week_number(int(year)) + 1)]
    else:
        identifiers = [year]
        frequency = Frequency.ANNUAL
    return [
        {"period_identifier": identifier, "label": format_period_label(identifier, frequency)}
        for identifier in identifiers
    ]
