#!/usr/bin/env python3
"""
Tests for raw record -> display row transformation.
"""

from datetime import date

import pytest

from entities.catalog import Category
from entities.records import ComplianceRecord, DocumentHolderRecord
from services.report_catalog import find_definition, resolve_definitions
from services.report_transformer import (
    ALL_EMPLOYEES_SECTION,
    RESTRICTED_EMPLOYEES_SECTION,
    build_sections,
    days_until,
    format_date,
    parse_calendar_date,
    parse_records,
    transform,
)
from common.exceptions import MalformedDateValue

TODAY = date(2024, 1, 1)
DEFINITIONS = resolve_definitions([
    Category(id="c1", name="UK Passport"),
    Category(id="c2", name="Visa"),
])


def _definition(report_id):
    return find_definition(DEFINITIONS, report_id)


def _document(category, expiry, **extra):
    return {"expiry_date": expiry, "document_types": {"name": category}, **extra}


DOCUMENT_HOLDERS = [
    {"id": "e1", "name": "Alice Archer", "branch": "London", "sponsored": False,
     "twenty_hours": False, "document_tracker": []},
    {"id": "e2", "name": "Bilal Khan", "branch": "Leeds", "sponsored": False, "twenty_hours": False,
     "document_tracker": [
         _document("UK Passport", "2024-01-31", country="United Kingdom", nationality_status="British"),
     ]},
    {"id": "e3", "name": "Chen Wei", "branch": "London", "sponsored": True, "twenty_hours": False,
     "document_tracker": [_document("Visa", "2023-12-01T00:00:00+00:00")]},
    {"id": "e4", "name": "Dana Ortiz", "branch": "Leeds", "sponsored": False, "twenty_hours": True,
     "document_tracker": [_document("Visa", None)]},
]


def test_days_left():
    assert days_until("2024-01-31", TODAY) == 30
    assert days_until("2023-12-01", TODAY) == -31
    assert days_until(None, TODAY) is None
    assert days_until("not a date", TODAY) is None


def test_format_date():
    assert format_date("2024-03-05") == "05/03/2024"
    assert format_date("2024-03-05T10:15:00Z") == "05/03/2024"
    assert format_date(date(2024, 3, 5)) == "05/03/2024"
    assert format_date(None) == ""
    assert format_date("") == ""


def test_malformed_dates_pass_through():
    assert format_date("March 5th") == "March 5th"
    assert format_date("2024-02-30") == "2024-02-30"
    with pytest.raises(MalformedDateValue) as exc_info:
        parse_calendar_date("05/03/2024")
    assert exc_info.value.value == "05/03/2024"


def test_employee_rows_default_leave_counters():
    rows = transform(_definition("employees"), [
        {"id": "e1", "name": "Alice Archer", "branch": "London", "email": "alice@example.com"},
        {"id": "e2", "name": "Bilal Khan", "leave_taken": 4, "remaining_leave_days": 24.5},
    ], TODAY)

    assert list(rows[0].keys()) == list(_definition("employees").fields)
    assert rows[0]["Days Taken"] == 0
    assert rows[0]["Days Remaining"] == 0
    assert rows[0]["Phone"] == ""
    assert rows[1]["Days Taken"] == 4
    assert rows[1]["Days Remaining"] == 24.5


def test_leave_rows_resolve_relations_and_dates():
    rows = transform(_definition("leaves"), [{
        "id": "lv1",
        "start_date": "2024-02-10",
        "end_date": "2024-02-14",
        "days": 5,
        "status": "approved",
        "created_at": "2024-01-20T09:00:00+00:00",
        "approved_by": "Manager One",
        "approved_date": "2024-01-21",
        "employees": {"name": "Alice Archer", "employee_code": "E001", "branch": "London",
                      "remaining_leave_days": 15},
        "leave_types": {"name": "Annual"},
    }], TODAY)

    row = rows[0]
    assert list(row.keys()) == list(_definition("leaves").fields)
    assert row["Employee"] == "Alice Archer"
    assert row["Type"] == "Annual"
    assert row["Start Date"] == "10/02/2024"
    assert row["Submitted Date"] == "20/01/2024"
    assert row["Days Remaining"] == 15
    assert row["Rejected By"] == ""
    assert row["Rejected Date"] == ""


def test_document_rows_use_passport_and_category_pairs():
    rows = transform(_definition("documents"), DOCUMENT_HOLDERS, TODAY)
    bilal = next(row for row in rows if row["Employee Name"] == "Bilal Khan")

    assert list(bilal.keys()) == list(_definition("documents").fields)
    assert bilal["Status"] == "British"
    assert bilal["Country"] == "United Kingdom"
    assert bilal["Sponsored"] == "No"
    assert bilal["UK Passport"] == "31/01/2024"
    assert bilal["UK Passport Days Left"] == 30
    assert bilal["Visa"] == ""
    assert bilal["Visa Days Left"] == ""


def test_document_rows_without_passport_leave_status_blank():
    rows = transform(_definition("documents"), DOCUMENT_HOLDERS, TODAY)
    chen = next(row for row in rows if row["Employee Name"] == "Chen Wei")

    assert chen["Status"] == ""
    assert chen["Country"] == ""
    assert chen["Visa"] == "01/12/2023"
    assert chen["Visa Days Left"] == -31


def test_employees_without_documents_are_excluded():
    sections = build_sections(_definition("documents"), DOCUMENT_HOLDERS, TODAY)
    names = [row["Employee Name"] for section in sections for row in section.rows]
    assert "Alice Archer" not in names


def test_document_sections_split_restricted_employees():
    sections = build_sections(_definition("documents"), DOCUMENT_HOLDERS, TODAY)

    assert [section.label for section in sections] == [ALL_EMPLOYEES_SECTION, RESTRICTED_EMPLOYEES_SECTION]
    assert [row["Employee Name"] for row in sections[0].rows] == ["Bilal Khan"]
    assert [row["Employee Name"] for row in sections[1].rows] == ["Chen Wei", "Dana Ortiz"]
    assert sections[1].rows[1]["20 Hours Restriction"] == "Yes"


def test_other_reports_have_single_unlabelled_section():
    sections = build_sections(_definition("employees"), [{"id": "e1", "name": "Alice Archer"}], TODAY)
    assert len(sections) == 1
    assert sections[0].label is None
    assert sections[0].rows[0]["Name"] == "Alice Archer"


def test_compliance_rows():
    rows = transform(_definition("compliance"), [
        {"id": "r1", "period_identifier": "2024-Q1", "completion_date": "2024-04-10",
         "status": "completed", "employees": {"name": "Alice Archer", "branch": "London"},
         "compliance_types": {"name": "Fire Drill", "frequency": "quarterly"}},
        {"id": "r2", "period_identifier": "2024-Q1", "completion_date": "done last week",
         "status": "completed", "employees": [{"name": "Bilal Khan", "branch": "Leeds"}],
         "compliance_types": {"name": "Fire Drill", "frequency": "quarterly"}},
    ], TODAY)

    assert list(rows[0].keys()) == list(_definition("compliance").fields)
    assert rows[0]["Task Name"] == "Fire Drill"
    assert rows[0]["Completion Date"] == "10/04/2024"
    assert rows[1]["Completion Date"] == "done last week"
    assert rows[1]["Employee"] == "Bilal Khan"
    assert rows[1]["Branch"] == "Leeds"
    assert rows[1]["Notes"] == ""


def test_renewed_passport_wins_regardless_of_source_order():
    expired = _document("UK Passport", "2020-01-01", id="d1", country="Poland", nationality_status="Polish")
    renewed = _document("UK Passport", "2030-01-01", id="d2", country="United Kingdom", nationality_status="British")

    def holder(documents):
        return {"id": "e9", "name": "Ewa Nowak", "sponsored": False, "twenty_hours": False,
                "document_tracker": documents}

    [first] = transform(_definition("documents"), [holder([expired, renewed])], TODAY)
    [second] = transform(_definition("documents"), [holder([renewed, expired])], TODAY)

    assert first == second
    assert first["Status"] == "British"
    assert first["Country"] == "United Kingdom"
    assert first["UK Passport"] == "01/01/2030"
    assert first["UK Passport Days Left"] == 2192


def test_records_parsed_into_the_report_record_type():
    [compliance] = parse_records(_definition("compliance"), [{"id": "r1", "period_identifier": "2024-Q1"}])
    holders = parse_records(_definition("documents"), DOCUMENT_HOLDERS)

    assert isinstance(compliance, ComplianceRecord)
    assert all(isinstance(holder, DocumentHolderRecord) for holder in holders)
    assert [holder.name for holder in holders] == ["Bilal Khan", "Chen Wei", "Dana Ortiz"]
