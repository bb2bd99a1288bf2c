#!/usr/bin/env python3
"""
Tests for report definitions and the catalog service.
"""

import asyncio
from datetime import date

import pytest

from entities.catalog import Branch, Category, ComplianceType, LeaveType
from entities.report import FilterKind, ReportType
from services.report_catalog import (
    DOCUMENT_BASE_FIELDS,
    EMPLOYEE_FIELDS,
    CatalogService,
    find_definition,
    resolve_definitions,
    year_options,
)
from common.exceptions import ResourceNotFoundException


class FakeCatalogRepository:
    def __init__(self, categories=None, compliance_types=None):
        self.categories = list(categories or [])
        self.compliance_types = list(compliance_types or [])
        self.category_reads = 0

    async def list_categories(self):
        self.category_reads += 1
        return list(self.categories)

    async def list_branches(self):
        return [Branch(id="b1", name="Leeds"), Branch(id="b2", name="London")]

    async def list_leave_types(self):
        return [LeaveType(id="l1", name="Annual")]

    async def list_compliance_types(self):
        return list(self.compliance_types)


def _documents(definitions):
    return find_definition(definitions, "documents")


def test_definitions_are_deterministic():
    categories = [Category(id="c1", name="Passport"), Category(id="c2", name="Visa")]

    first = resolve_definitions(categories)
    second = resolve_definitions(list(categories))

    assert [d.id for d in first] == [
        ReportType.EMPLOYEES, ReportType.LEAVES, ReportType.DOCUMENTS, ReportType.COMPLIANCE
    ]
    assert [d.fields for d in first] == [d.fields for d in second]


def test_empty_catalog_keeps_fixed_document_fields():
    documents = _documents(resolve_definitions([]))
    assert documents.fields == DOCUMENT_BASE_FIELDS
    assert documents.category_names == ()


def test_document_fields_pair_each_category():
    documents = _documents(resolve_definitions([Category(id="c1", name="Passport")]))
    assert documents.fields[-2:] == ("Passport", "Passport Days Left")


def test_adding_category_appends_exactly_two_fields():
    before = _documents(resolve_definitions([
        Category(id="c1", name="Passport"),
        Category(id="c2", name="Visa"),
    ]))
    after = _documents(resolve_definitions([
        Category(id="c1", name="Passport"),
        Category(id="c2", name="Visa"),
        Category(id="c3", name="Work Permit"),
    ]))

    assert after.fields[:len(before.fields)] == before.fields
    assert after.fields[len(before.fields):] == ("Work Permit", "Work Permit Days Left")


def test_removing_category_removes_exactly_two_fields():
    before = _documents(resolve_definitions([
        Category(id="c1", name="Passport"),
        Category(id="c2", name="Visa"),
    ]))
    after = _documents(resolve_definitions([Category(id="c1", name="Passport")]))

    assert set(before.fields) - set(after.fields) == {"Visa", "Visa Days Left"}
    assert len(before.fields) - len(after.fields) == 2


def test_supported_filters_per_report():
    definitions = resolve_definitions([])
    employees = find_definition(definitions, "employees")
    compliance = find_definition(definitions, "compliance")

    assert employees.fields == EMPLOYEE_FIELDS
    assert employees.supports(FilterKind.BRANCH)
    assert not employees.supports(FilterKind.PERIOD)
    assert compliance.supports(FilterKind.PERIOD)
    assert compliance.to_dict()["supported_filters"] == ["branch", "period", "sub_type"]


def test_unknown_report_is_not_found():
    with pytest.raises(ResourceNotFoundException) as exc_info:
        find_definition(resolve_definitions([]), "payroll")
    assert exc_info.value.status_code == 404


def test_year_window():
    assert year_options(date(2024, 6, 1), 5, 1) == [
        "2019", "2020", "2021", "2022", "2023", "2024", "2025"
    ]


def test_catalog_is_reread_on_every_resolution():
    repository = FakeCatalogRepository([Category(id="c1", name="Passport")])
    service = CatalogService(repository)

    asyncio.run(service.get_definitions())
    repository.categories.append(Category(id="c2", name="Visa"))
    definitions = asyncio.run(service.get_definitions())

    assert repository.category_reads == 2
    assert _documents(definitions).fields[-2:] == ("Visa", "Visa Days Left")


def test_listeners_notified_only_on_change():
    repository = FakeCatalogRepository([Category(id="c1", name="Passport")])
    service = CatalogService(repository)
    notifications = []
    service.subscribe(notifications.append)

    asyncio.run(service.get_definitions())
    asyncio.run(service.get_definitions())
    assert notifications == []

    repository.categories.append(Category(id="c2", name="Visa"))
    asyncio.run(service.get_definitions())

    assert len(notifications) == 1
    assert "Visa" in _documents(notifications[0]).fields


def test_filter_options():
    repository = FakeCatalogRepository(
        compliance_types=[ComplianceType(id="ct1", name="Fire Drill", frequency="Quarterly")]
    )
    service = CatalogService(repository, years_back=2, years_ahead=1)

    options = asyncio.run(service.get_filter_options(date(2024, 3, 1)))

    assert [b["name"] for b in options["branches"]] == ["Leeds", "London"]
    assert options["compliance_types"][0]["frequency"] == "Quarterly"
    assert options["years"] == ["2022", "2023", "2024", "2025"]
    assert options["default_year"] == "2024"
    assert [q["value"] for q in options["quarters"]] == ["Q1", "Q2", "Q3", "Q4"]
    assert len(options["months"]) == 12


def test_category_clashing_with_a_column_is_skipped():
    documents = _documents(resolve_definitions([
        Category(id="c1", name="Status"),
        Category(id="c2", name="Passport"),
        Category(id="c3", name="Passport"),
    ]))

    assert documents.category_names == ("Passport",)
    assert documents.fields == DOCUMENT_BASE_FIELDS + ("Passport", "Passport Days Left")
    assert len(set(documents.fields)) == len(documents.fields)
