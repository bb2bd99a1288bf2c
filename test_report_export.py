#!/usr/bin/env python3
"""
Tests for the export pipeline and the download response.
"""

import asyncio
from datetime import date

import pytest

from entities.catalog import Category, ComplianceType
from entities.report import ExportArtifact, ExportFormat, ReportType
from services.column_selection import ColumnSelectionStore
from services.report_catalog import CatalogService
from services.report_export import ReportExportService, to_download_response
from services.schemas import ExportRequest
from common.exceptions import (
    DataUnavailableException,
    EmptyColumnSelectionException,
    NoReportSelectedException,
    ResourceNotFoundException,
)

TODAY = date(2024, 1, 1)

EMPLOYEES = [
    {"id": "e1", "name": "Alice Archer", "branch": "London", "email": "alice@example.com"},
    {"id": "e2", "name": "Bilal O'Brien", "branch": "Leeds", "email": "bilal@example.com"},
]
DOCUMENT_HOLDERS = [
    {"id": "e1", "name": "Alice Archer", "sponsored": False, "twenty_hours": False, "document_tracker": []},
    {"id": "e2", "name": "Bilal Khan", "sponsored": False, "twenty_hours": False,
     "document_tracker": [{"expiry_date": "2024-01-31", "document_types": {"name": "Passport"}}]},
    {"id": "e3", "name": "Chen Wei", "sponsored": True, "twenty_hours": False,
     "document_tracker": [{"expiry_date": "2023-12-01", "document_types": {"name": "Passport"}}]},
]


class FakeCatalogRepository:
    def __init__(self, categories=None, compliance_types=None):
        self.categories = list(categories or [])
        self.compliance_types = list(compliance_types or [])

    async def list_categories(self):
        return list(self.categories)

    async def list_compliance_types(self):
        return list(self.compliance_types)


class FakeReportDataRepository:
    def __init__(self, rows=None, error=None):
        self.rows = rows or {}
        self.error = error
        self.fetches = []

    async def fetch(self, report_type, criteria):
        self.fetches.append((report_type, criteria))
        if self.error is not None:
            raise self.error
        return list(self.rows.get(report_type, []))


def _service(data_repository=None, categories=None, compliance_types=None, store=None):
    catalog = CatalogService(FakeCatalogRepository(categories, compliance_types))
    return ReportExportService(
        catalog,
        data_repository or FakeReportDataRepository(),
        store or ColumnSelectionStore(),
    )


def _export(service, **request):
    return asyncio.run(service.export(ExportRequest(**request), session_key="user-1", today=TODAY))


def test_employee_export_with_explicit_columns():
    data = FakeReportDataRepository({ReportType.EMPLOYEES: EMPLOYEES})
    artifact = _export(_service(data), report_id="employees", columns=["Email", "Name"])

    assert artifact.filename == "employees_report_2024-01-01.csv"
    assert artifact.mime_type == "text/csv"
    assert artifact.row_count == 2
    assert artifact.body == (
        "Name,Email\n"
        '"Alice Archer","alice@example.com"\n'
        '"Bilal O\'Brien","bilal@example.com"'
    )


def test_stored_selection_used_when_no_columns_requested():
    store = ColumnSelectionStore()
    data = FakeReportDataRepository({ReportType.EMPLOYEES: EMPLOYEES})
    service = _service(data, store=store)
    definition = asyncio.run(service.catalog_service.get_definition("employees"))
    store.set_columns("user-1", definition, ["Branch"])

    artifact = _export(service, report_id="employees")

    assert artifact.body == 'Branch\n"London"\n"Leeds"'


def test_xlsx_request_falls_back_to_csv():
    artifact = _export(_service(), report_id="employees", format=ExportFormat.XLSX)
    assert artifact.filename.endswith(".csv")
    assert artifact.mime_type == "text/csv"


def test_missing_report_is_rejected_before_fetch():
    data = FakeReportDataRepository({ReportType.EMPLOYEES: EMPLOYEES})
    with pytest.raises(NoReportSelectedException) as exc_info:
        _export(_service(data))

    assert exc_info.value.status_code == 400
    assert data.fetches == []


def test_unknown_report_is_not_found():
    with pytest.raises(ResourceNotFoundException):
        _export(_service(), report_id="payroll")


def test_empty_column_selection_is_rejected_regardless_of_data():
    store = ColumnSelectionStore()
    data = FakeReportDataRepository({ReportType.EMPLOYEES: EMPLOYEES})
    service = _service(data, store=store)
    definition = asyncio.run(service.catalog_service.get_definition("employees"))
    store.select_all("user-1", definition, False)

    with pytest.raises(EmptyColumnSelectionException) as exc_info:
        _export(service, report_id="employees")

    assert exc_info.value.error_code == "EMPTY_COLUMN_SELECTION"
    assert data.fetches == []


def test_explicit_empty_columns_are_rejected():
    with pytest.raises(EmptyColumnSelectionException):
        _export(_service(), report_id="employees", columns=[])


def test_data_unavailable_aborts_export():
    data = FakeReportDataRepository(error=DataUnavailableException(report_id="leaves", table="leaves"))
    with pytest.raises(DataUnavailableException):
        _export(_service(data), report_id="leaves")


def test_documents_export_has_two_sections():
    data = FakeReportDataRepository({ReportType.DOCUMENTS: DOCUMENT_HOLDERS})
    service = _service(data, categories=[Category(id="c1", name="Passport")])

    artifact = _export(
        service,
        report_id="documents",
        columns=["Employee Name", "Passport", "Passport Days Left"],
    )

    assert artifact.body == (
        "Sheet1: All Employees\n"
        "Employee Name,Passport,Passport Days Left\n"
        '"Bilal Khan","31/01/2024","30"\n'
        "\n"
        "Sheet2: Sponsored/20 Hours\n"
        "Employee Name,Passport,Passport Days Left\n"
        '"Chen Wei","01/12/2023","-31"'
    )
    assert artifact.row_count == 2


def test_compliance_export_resolves_period_from_type_frequency():
    data = FakeReportDataRepository()
    service = _service(
        data,
        compliance_types=[ComplianceType(id="ct1", name="Timesheet Review", frequency="Monthly")],
    )

    _export(service, report_id="compliance", sub_type="ct1", year="2024", months=["03", "07"], quarters=["Q1"])

    [(report_type, criteria)] = data.fetches
    assert report_type == ReportType.COMPLIANCE
    assert set(criteria.period.values) == {"2024-03", "2024-07"}
    assert criteria.quarters == frozenset()


def test_download_response_is_an_attachment():
    artifact = ExportArtifact(
        filename="employees_report_2024-01-01.csv",
        mime_type="text/csv",
        body='Name\n"Zoë"',
        report_id=ReportType.EMPLOYEES,
        row_count=1,
    )
    response = to_download_response(artifact)

    assert response.headers["content-disposition"] == 'attachment; filename="employees_report_2024-01-01.csv"'
    assert response.media_type == "text/csv"
    assert response.body == 'Name\n"Zoë"'.encode("utf-8")
