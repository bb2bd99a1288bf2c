from datetime import date
from typing import Optional
from fastapi import APIRouter, Path, Query, Request
from fastapi.responses import Response
from slowapi import Limiter
from slowapi.util import get_remote_address

from auth.decorators import ValidatedUser, authorize
from config.config import settings
from dependencies import CatalogServiceDep, ColumnSelectionStoreDep, ReportExportServiceDep
from entities.report import ReportDefinition
from services.report_export import to_download_response
from services.report_filters import list_periods
from services.schemas import (
    ColumnSelectionResponse,
    ColumnSelectionUpdate,
    ColumnToggleRequest,
    ExportRequest,
    FilterOptionsResponse,
    PeriodListResponse,
    ReportListResponse,
    SelectAllRequest,
)
from common.exceptions import ResourceNotFoundException
from common.responses import COMMON_RESPONSES
from common.logging import get_logger, report_id_var

logger = get_logger("reports_api")

router = APIRouter(prefix="/reports", tags=["Reports"], responses=COMMON_RESPONSES["forbidden"])
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def _selection_response(definition: ReportDefinition, columns) -> ColumnSelectionResponse:
    return ColumnSelectionResponse(
        report_id=definition.id.value,
        fields=list(definition.fields),
        selected_columns=list(columns),
    )


@router.get("",
    summary="List available reports",
    description="Report definitions with their fields in export order and the filters each one honours",
    response_model=ReportListResponse
)
@authorize(allowed_roles=settings.report_roles, required_page=settings.report_page_path)
async def list_reports(
    catalog_service: CatalogServiceDep,
    current_user: ValidatedUser = None
) -> ReportListResponse:
    definitions = await catalog_service.get_definitions()
    return ReportListResponse(reports=[definition.to_dict() for definition in definitions])


@router.get("/filter-options",
    summary="Filter choices",
    description="Branches, leave types, compliance types, year window and period selectors",
    response_model=FilterOptionsResponse
)
@authorize(allowed_roles=settings.report_roles, required_page=settings.report_page_path)
async def get_filter_options(
    catalog_service: CatalogServiceDep,
    current_user: ValidatedUser = None
) -> FilterOptionsResponse:
    options = await catalog_service.get_filter_options(date.today())
    return FilterOptionsResponse(**options)


@router.get("/periods",
    summary="Period identifiers for a compliance type",
    description="Every period of the given year for the compliance type's frequency",
    response_model=PeriodListResponse
)
@authorize(allowed_roles=settings.report_roles, required_page=settings.report_page_path)
async def get_periods(
    catalog_service: CatalogServiceDep,
    compliance_type_id: str = Query(..., description="Compliance type UUID"),
    year: Optional[str] = Query(None, pattern=r"^\d{4}$", description="Year, defaults to the current year"),
    current_user: ValidatedUser = None
) -> PeriodListResponse:
    compliance_types = await catalog_service.get_compliance_types()
    compliance_type = next((ct for ct in compliance_types if ct.id == compliance_type_id), None)
    if compliance_type is None:
        raise ResourceNotFoundException(resource_type="ComplianceType", resource_id=compliance_type_id)

    year = year or str(date.today().year)
    return PeriodListResponse(
        compliance_type_id=compliance_type.id,
        frequency=compliance_type.frequency,
        year=year,
        periods=list_periods(compliance_type.frequency_kind, year),
    )


@router.get("/{report_id}/columns",
    summary="Current column selection",
    description="The caller's column selection for a report, initialized to every field on first use",
    response_model=ColumnSelectionResponse
)
@authorize(allowed_roles=settings.report_roles, required_page=settings.report_page_path)
async def get_columns(
    catalog_service: CatalogServiceDep,
    column_store: ColumnSelectionStoreDep,
    report_id: str = Path(..., description="Report identifier"),
    current_user: ValidatedUser = None
) -> ColumnSelectionResponse:
    definition = await catalog_service.get_definition(report_id)
    return _selection_response(definition, column_store.selected(current_user.id, definition))


@router.put("/{report_id}/columns",
    summary="Replace column selection",
    response_model=ColumnSelectionResponse
)
@authorize(allowed_roles=settings.report_roles, required_page=settings.report_page_path)
async def set_columns(
    update: ColumnSelectionUpdate,
    catalog_service: CatalogServiceDep,
    column_store: ColumnSelectionStoreDep,
    report_id: str = Path(..., description="Report identifier"),
    current_user: ValidatedUser = None
) -> ColumnSelectionResponse:
    definition = await catalog_service.get_definition(report_id)
    columns = column_store.set_columns(current_user.id, definition, update.columns)
    return _selection_response(definition, columns)


@router.post("/{report_id}/columns/toggle",
    summary="Check or uncheck one column",
    response_model=ColumnSelectionResponse
)
@authorize(allowed_roles=settings.report_roles, required_page=settings.report_page_path)
async def toggle_column(
    toggle: ColumnToggleRequest,
    catalog_service: CatalogServiceDep,
    column_store: ColumnSelectionStoreDep,
    report_id: str = Path(..., description="Report identifier"),
    current_user: ValidatedUser = None
) -> ColumnSelectionResponse:
    definition = await catalog_service.get_definition(report_id)
    columns = column_store.toggle(current_user.id, definition, toggle.column, toggle.checked)
    return _selection_response(definition, columns)


@router.post("/{report_id}/columns/all",
    summary="Select or clear every column",
    response_model=ColumnSelectionResponse
)
@authorize(allowed_roles=settings.report_roles, required_page=settings.report_page_path)
async def select_all_columns(
    select_all: SelectAllRequest,
    catalog_service: CatalogServiceDep,
    column_store: ColumnSelectionStoreDep,
    report_id: str = Path(..., description="Report identifier"),
    current_user: ValidatedUser = None
) -> ColumnSelectionResponse:
    definition = await catalog_service.get_definition(report_id)
    columns = column_store.select_all(current_user.id, definition, select_all.selected)
    return _selection_response(definition, columns)


@router.post("/export",
    summary="Export a report",
    description="Run the export pipeline and download the result as CSV",
    response_class=Response,
    responses={
        200: {"content": {"text/csv": {}}, "description": "CSV attachment"},
        **COMMON_RESPONSES["bad_request"],
        **COMMON_RESPONSES["not_found"],
        **COMMON_RESPONSES["service_unavailable"],
    }
)
@limiter.limit(settings.export_rate_limit)
@authorize(allowed_roles=settings.report_roles, required_page=settings.report_page_path)
async def export_report(
    export_request: ExportRequest,
    request: Request,
    export_service: ReportExportServiceDep,
    current_user: ValidatedUser = None
) -> Response:
    token = report_id_var.set(export_request.report_id)
    try:
        artifact = await export_service.export(export_request, session_key=current_user.id)
    finally:
        report_id_var.reset(token)

    logger.info(
        f"Serving {artifact.filename}",
        extra={"row_count": artifact.row_count, "user_id": current_user.id}
    )
    return to_download_response(artifact)
