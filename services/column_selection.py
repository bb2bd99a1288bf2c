"""
Per-session column selections for report exports.
"""

import threading
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Tuple

from entities.report import ReportDefinition, ReportType
from common.exceptions import ValidationException
from common.logging import get_logger

logger = get_logger("column_selection")


@dataclass(frozen=True)
class _Selection:
    columns: FrozenSet[str]
    known_fields: Tuple[str, ...]


def order_columns(columns: Iterable[str], definition: ReportDefinition) -> List[str]:
    chosen = set(columns)
    return [field for field in definition.fields if field in chosen]


class ColumnSelectionStore:
    """
    In-memory column selections keyed by session and report.

    Selections are re-initialized against the current field list: names that
    disappeared are pruned and fields that appeared since the last
    initialization are selected. Nothing is persisted.
    """

    def __init__(self):
        self._selections: Dict[Tuple[str, ReportType], _Selection] = {}
        self._lock = threading.Lock()

    def initialize(self, session_key: str, definition: ReportDefinition) -> List[str]:
        with self._lock:
            selection = self._initialize_locked(session_key, definition)
        return order_columns(selection.columns, definition)

    def selected(self, session_key: str, definition: ReportDefinition) -> List[str]:
        return self.initialize(session_key, definition)

    def set_columns(
        self,
        session_key: str,
        definition: ReportDefinition,
        columns: Iterable[str]
    ) -> List[str]:
        columns = list(columns)
        self._reject_unknown(definition, columns)
        with self._lock:
            self._selections[(session_key, definition.id)] = _Selection(
                columns=frozenset(columns),
                known_fields=definition.fields,
            )
        return order_columns(columns, definition)

    def toggle(
        self,
        session_key: str,
        definition: ReportDefinition,
        column: str,
        checked: bool
    ) -> List[str]:
        self._reject_unknown(definition, [column])
        with self._lock:
            current = self._initialize_locked(session_key, definition)
            columns = current.columns | {column} if checked else current.columns - {column}
            self._selections[(session_key, definition.id)] = _Selection(
                columns=frozenset(columns),
                known_fields=definition.fields,
            )
        return order_columns(columns, definition)

    def select_all(self, session_key: str, definition: ReportDefinition, selected: bool) -> List[str]:
        return self.set_columns(session_key, definition, definition.fields if selected else [])

    def on_catalog_changed(self, definitions: List[ReportDefinition]) -> None:
        """Catalog listener: re-initialize every stored selection of a changed report."""
        by_id = {definition.id: definition for definition in definitions}
        with self._lock:
            for (session_key, report_id), selection in list(self._selections.items()):
                definition = by_id.get(report_id)
                if definition is None or definition.fields == selection.known_fields:
                    continue
                self._initialize_locked(session_key, definition)
                logger.debug(
                    "Column selection re-initialized after catalog change",
                    extra={"report_id": report_id.value}
                )

    def _initialize_locked(self, session_key: str, definition: ReportDefinition) -> _Selection:
        key = (session_key, definition.id)
        existing = self._selections.get(key)
        fields = set(definition.fields)

        if existing is None:
            columns = frozenset(fields)
        else:
            kept = {column for column in existing.columns if column in fields}
            added = {field for field in definition.fields if field not in existing.known_fields}
            columns = frozenset(kept | added)

        selection = _Selection(columns=columns, known_fields=definition.fields)
        self._selections[key] = selection
        return selection

    @staticmethod
    def _reject_unknown(definition: ReportDefinition, columns: Iterable[str]) -> None:
        unknown = [column for column in columns if not definition.has_field(column)]
        if unknown:
            raise ValidationException(
                detail=f"Unknown columns for report '{definition.id.value}': {unknown}",
                field="columns",
                value=unknown
            )
