"""
Report export service.

Runs one export end to end: definition lookup, column resolution, filter
resolution, fetch, transformation, projection and serialization.
"""

import io
import time
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from fastapi import Response

from entities.report import ExportArtifact, ExportFormat, FilterKind, ReportDefinition
from repositories.report_data_repository import ReportDataRepository
from services.column_selection import ColumnSelectionStore, order_columns
from services.csv_serializer import serialize_sections
from services.report_catalog import CatalogService, find_definition
from services.report_filters import resolve_filter
from services.report_projection import project_sections
from services.report_transformer import build_sections
from services.schemas import ExportRequest
from common.exceptions import (
    BaseReportingException,
    BusinessLogicException,
    EmptyColumnSelectionException,
    NoReportSelectedException,
    ValidationException,
)
from common.logging import get_logger, log_business_event, log_performance

logger = get_logger("report_export")

CSV_MIME_TYPE = "text/csv"


def export_filename(report_id: str, today: date) -> str:
    return f"{report_id}_report_{today.isoformat()}.csv"


class ReportExportService:
    """
    Export pipeline for a single report.

    The report definitions are read once per export, so the column set used
    for the header and for every row comes from the same catalog snapshot.
    """

    def __init__(
        self,
        catalog_service: CatalogService,
        report_data_repository: ReportDataRepository,
        column_store: ColumnSelectionStore,
    ):
        self.catalog_service = catalog_service
        self.report_data_repository = report_data_repository
        self.column_store = column_store

    async def export(
        self,
        export_request: ExportRequest,
        session_key: str,
        today: Optional[date] = None
    ) -> ExportArtifact:
        """Build the export artifact for `export_request` on behalf of `session_key`."""
        start_time = time.time()
        today = today or date.today()

        if not export_request.report_id:
            raise NoReportSelectedException(context={"user_id": session_key})

        try:
            definitions = await self.catalog_service.get_definitions()
            definition = find_definition(definitions, export_request.report_id)

            columns = self._resolve_columns(definition, export_request.columns, session_key)
            if not columns:
                raise EmptyColumnSelectionException(report_id=definition.id.value)

            if export_request.format != ExportFormat.CSV:
                logger.info(
                    f"Format '{export_request.format.value}' is not available, exporting CSV",
                    extra={"report_id": definition.id.value}
                )

            compliance_types = []
            if definition.supports(FilterKind.PERIOD):
                compliance_types = await self.catalog_service.get_compliance_types()
            criteria = resolve_filter(definition, export_request.selections(), compliance_types, today)

            raw_records = await self.report_data_repository.fetch(definition.id, criteria)

            sections = build_sections(definition, raw_records, today)
            projected = project_sections(sections, columns, definition.fields)
            body = serialize_sections(projected, columns)
            row_count = sum(len(section.rows) for section in projected)

            artifact = ExportArtifact(
                filename=export_filename(definition.id.value, today),
                mime_type=CSV_MIME_TYPE,
                body=body,
                report_id=definition.id,
                row_count=row_count,
            )

            log_business_event(
                event_type="REPORT_EXPORTED",
                entity_type="report",
                entity_id=definition.id.value,
                action="export",
                user_id=session_key,
                details={
                    "row_count": row_count,
                    "column_count": len(columns),
                    "requested_format": export_request.format.value,
                    "filters": criteria.model_dump(mode="json", exclude_defaults=True),
                }
            )

            duration_ms = (time.time() - start_time) * 1000
            log_performance(
                operation="export_report",
                duration_ms=duration_ms,
                success=True,
                item_count=row_count
            )

            return artifact

        except BaseReportingException:
            raise
        except Exception as e:
            logger.error(f"Failed to export report {export_request.report_id}: {e}", exc_info=True)
            raise BusinessLogicException(
                detail="Failed to export report",
                error_code="REPORT_EXPORT_FAILED",
                context={"report_id": export_request.report_id}
            )

    def _resolve_columns(
        self,
        definition: ReportDefinition,
        requested: Optional[List[str]],
        session_key: str
    ) -> List[str]:
        if requested is None:
            return self.column_store.selected(session_key, definition)

        unknown = [column for column in requested if not definition.has_field(column)]
        if unknown:
            raise ValidationException(
                detail=f"Unknown columns for report '{definition.id.value}': {unknown}",
                field="columns",
                value=unknown
            )
        return order_columns(requested, definition)


@contextmanager
def download_buffer(artifact: ExportArtifact) -> Iterator[io.BytesIO]:
    """Encoded artifact body, released as soon as the download has been handed off."""
    buffer = io.BytesIO(artifact.body.encode("utf-8"))
    try:
        yield buffer
    finally:
        buffer.close()


def to_download_response(artifact: ExportArtifact) -> Response:
    """Browser download for an export artifact."""
    with download_buffer(artifact) as buffer:
        content = buffer.getvalue()

    logger.debug(
        "Prepared report download",
        extra={"report_id": artifact.report_id.value, "export_filename": artifact.filename, "bytes": len(content)}
    )
    return Response(
        content=content,
        media_type=artifact.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{artifact.filename}"',
            "X-Report-Row-Count": str(artifact.row_count),
        }
    )


def create_report_export_service(
    catalog_service: CatalogService,
    report_data_repository: ReportDataRepository,
    column_store: ColumnSelectionStore,
) -> ReportExportService:
    return ReportExportService(catalog_service, report_data_repository, column_store)
