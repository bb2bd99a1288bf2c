"""
Dependency injection setup for repositories and services.
"""

from functools import lru_cache
from typing import Annotated
from fastapi import Depends

from db.supabase_client import create_supabase_client
from repositories.user_repository import UserRepository
from repositories.catalog_repository import CatalogRepository
from repositories.report_data_repository import ReportDataRepository
from services.auth_service import AuthService, create_auth_service
from services.column_selection import ColumnSelectionStore
from services.report_catalog import CatalogService, create_catalog_service
from services.report_export import ReportExportService, create_report_export_service
from config.config import settings


@lru_cache()
def get_supabase_client():
    """Get singleton Supabase client."""
    return create_supabase_client()


@lru_cache()
def get_user_repository() -> UserRepository:
    """Get singleton User repository."""
    supabase = get_supabase_client()
    return UserRepository(
        supabase,
        user_roles_table=settings.supabase_table_user_roles,
        user_permissions_table=settings.supabase_table_user_permissions,
    )


@lru_cache()
def get_catalog_repository() -> CatalogRepository:
    """Get singleton Catalog repository."""
    supabase = get_supabase_client()
    return CatalogRepository(
        supabase,
        document_types_table=settings.supabase_table_document_types,
        branches_table=settings.supabase_table_branches,
        leave_types_table=settings.supabase_table_leave_types,
        compliance_types_table=settings.supabase_table_compliance_types,
    )


@lru_cache()
def get_report_data_repository() -> ReportDataRepository:
    """Get singleton ReportData repository."""
    supabase = get_supabase_client()
    return ReportDataRepository(
        supabase,
        employees_table=settings.supabase_table_employees,
        leaves_table=settings.supabase_table_leaves,
        compliance_records_table=settings.supabase_table_compliance_records,
    )


@lru_cache()
def get_column_selection_store() -> ColumnSelectionStore:
    """Get singleton, process-wide column selection store."""
    return ColumnSelectionStore()


@lru_cache()
def get_auth_service() -> AuthService:
    """Get singleton AuthService with dependencies."""
    supabase = get_supabase_client()
    user_repo = get_user_repository()
    return create_auth_service(supabase, user_repo)


@lru_cache()
def get_catalog_service() -> CatalogService:
    """Get singleton CatalogService; column selections follow catalog changes."""
    catalog_service = create_catalog_service(
        get_catalog_repository(),
        years_back=settings.report_year_window_back,
        years_ahead=settings.report_year_window_ahead,
    )
    catalog_service.subscribe(get_column_selection_store().on_catalog_changed)
    return catalog_service


@lru_cache()
def get_report_export_service() -> ReportExportService:
    """Get singleton ReportExportService with dependencies."""
    return create_report_export_service(
        get_catalog_service(),
        get_report_data_repository(),
        get_column_selection_store(),
    )


# Dependency annotations for FastAPI
SupabaseClient = Annotated[object, Depends(get_supabase_client)]
ColumnSelectionStoreDep = Annotated[ColumnSelectionStore, Depends(get_column_selection_store)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
ReportExportServiceDep = Annotated[ReportExportService, Depends(get_report_export_service)]
