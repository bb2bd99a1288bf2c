#!/usr/bin/env python3
"""
Tests for per-session column selections.
"""

import pytest

from entities.catalog import Category
from services.column_selection import ColumnSelectionStore
from services.report_catalog import EMPLOYEE_FIELDS, find_definition, resolve_definitions
from common.exceptions import ValidationException


def _documents(*category_names):
    categories = [Category(id=f"c{i}", name=name) for i, name in enumerate(category_names)]
    return find_definition(resolve_definitions(categories), "documents")


EMPLOYEES = find_definition(resolve_definitions([]), "employees")


def test_first_use_selects_every_field_in_order():
    store = ColumnSelectionStore()
    assert store.selected("user-1", EMPLOYEES) == list(EMPLOYEE_FIELDS)


def test_toggle_keeps_declared_order():
    store = ColumnSelectionStore()
    store.toggle("user-1", EMPLOYEES, "Email", checked=False)
    store.toggle("user-1", EMPLOYEES, "Name", checked=False)
    selected = store.toggle("user-1", EMPLOYEES, "Name", checked=True)

    assert "Email" not in selected
    assert selected == [field for field in EMPLOYEE_FIELDS if field != "Email"]


def test_set_columns_orders_by_definition():
    store = ColumnSelectionStore()
    selected = store.set_columns("user-1", EMPLOYEES, ["Phone", "Name"])
    assert selected == ["Name", "Phone"]
    assert store.selected("user-1", EMPLOYEES) == ["Name", "Phone"]


def test_unknown_columns_rejected():
    store = ColumnSelectionStore()
    with pytest.raises(ValidationException):
        store.set_columns("user-1", EMPLOYEES, ["Name", "Salary"])
    with pytest.raises(ValidationException):
        store.toggle("user-1", EMPLOYEES, "Salary", checked=True)


def test_select_all_and_clear():
    store = ColumnSelectionStore()
    assert store.select_all("user-1", EMPLOYEES, False) == []
    assert store.selected("user-1", EMPLOYEES) == []
    assert store.select_all("user-1", EMPLOYEES, True) == list(EMPLOYEE_FIELDS)


def test_sessions_are_isolated():
    store = ColumnSelectionStore()
    store.select_all("user-1", EMPLOYEES, False)
    assert store.selected("user-2", EMPLOYEES) == list(EMPLOYEE_FIELDS)


def test_new_category_fields_are_selected_and_choices_survive():
    store = ColumnSelectionStore()
    before = _documents("Passport")
    store.toggle("user-1", before, "Passport Days Left", checked=False)

    after = _documents("Passport", "Visa")
    selected = store.selected("user-1", after)

    assert "Visa" in selected
    assert "Visa Days Left" in selected
    assert "Passport" in selected
    assert "Passport Days Left" not in selected


def test_removed_category_fields_are_pruned():
    store = ColumnSelectionStore()
    store.selected("user-1", _documents("Passport", "Visa"))

    selected = store.selected("user-1", _documents("Passport"))

    assert "Visa" not in selected
    assert "Visa Days Left" not in selected
    assert selected[-2:] == ["Passport", "Passport Days Left"]


def test_catalog_change_reinitializes_stored_selections():
    store = ColumnSelectionStore()
    store.set_columns("user-1", _documents("Passport"), ["Employee Name"])

    store.on_catalog_changed(resolve_definitions([
        Category(id="c0", name="Passport"),
        Category(id="c1", name="Visa"),
    ]))

    assert store.selected("user-1", _documents("Passport", "Visa")) == [
        "Employee Name", "Visa", "Visa Days Left"
    ]
