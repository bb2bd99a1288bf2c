"""
Column projection: apply a column selection in declared field order.
"""

from typing import Iterable, List, Sequence

from entities.report import ReportSection, TransformedRow


def project_columns(selected_columns: Iterable[str], declared_field_order: Sequence[str]) -> List[str]:
    """Declared order, restricted to the selected columns."""
    selected = set(selected_columns)
    return [field for field in declared_field_order if field in selected]


def project(
    rows: List[TransformedRow],
    selected_columns: Iterable[str],
    declared_field_order: Sequence[str],
) -> List[TransformedRow]:
    columns = project_columns(selected_columns, declared_field_order)
    return [{column: row.get(column, "") for column in columns} for row in rows]


def project_sections(
    sections: List[ReportSection],
    selected_columns: Iterable[str],
    declared_field_order: Sequence[str],
) -> List[ReportSection]:
    columns = project_columns(selected_columns, declared_field_order)
    return [
        ReportSection(label=section.label, rows=project(section.rows, columns, declared_field_order))
        for section in sections
    ]
