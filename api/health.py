from fastapi import APIRouter

from auth.decorators import authorize
from config.config import settings
from dependencies import SupabaseClient
from services.db_check import check_database_connection

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/db",
    summary="Database connectivity check",
    description="Check if the application can connect to the database"
)
@authorize(allowed_roles=[settings.admin_role], check_active=True)
def test_db(supabase: SupabaseClient):
    data = check_database_connection(supabase, settings.supabase_table_employees)
    return {"status": "ok", "result": data}


@router.get("/status",
    summary="Application health status",
    description="Basic health check endpoint"
)
def health_status():
    return {"status": "healthy", "service": "HR Reporting API", "version": "1.0.0"}
