from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field

class Settings(BaseSettings):
    # Supabase
    supabase_url: str = Field(..., env="SUPABASE_URL")
    supabase_key: str = Field(..., env="SUPABASE_KEY")
    supabase_table_employees: str = Field("employees", env="SUPABASE_TABLE_EMPLOYEES")
    supabase_table_leaves: str = Field("leaves", env="SUPABASE_TABLE_LEAVES")
    supabase_table_leave_types: str = Field("leave_types", env="SUPABASE_TABLE_LEAVE_TYPES")
    supabase_table_branches: str = Field("branches", env="SUPABASE_TABLE_BRANCHES")
    supabase_table_document_types: str = Field("document_types", env="SUPABASE_TABLE_DOCUMENT_TYPES")
    supabase_table_compliance_types: str = Field("compliance_types", env="SUPABASE_TABLE_COMPLIANCE_TYPES")
    supabase_table_compliance_records: str = Field("compliance_period_records", env="SUPABASE_TABLE_COMPLIANCE_RECORDS")
    supabase_table_user_roles: str = Field("user_roles", env="SUPABASE_TABLE_USER_ROLES")
    supabase_table_user_permissions: str = Field("user_permissions", env="SUPABASE_TABLE_USER_PERMISSIONS")

    # User Roles
    valid_user_roles: List[str] = Field(
        default=["admin", "manager", "user"],
        env="VALID_USER_ROLES"
    )
    admin_role: str = Field("admin", env="ADMIN_ROLE")
    report_roles: List[str] = Field(default=["admin", "manager", "user"], env="REPORT_ROLES")
    report_page_path: str = Field("/reports", env="REPORT_PAGE_PATH")

    # Reporting
    report_year_window_back: int = Field(5, env="REPORT_YEAR_WINDOW_BACK")
    report_year_window_ahead: int = Field(1, env="REPORT_YEAR_WINDOW_AHEAD")
    export_rate_limit: str = Field("10/minute", env="EXPORT_RATE_LIMIT")

    # Runtime
    log_level: str = Field("INFO", env="LOG_LEVEL")
    log_format: str = Field("structured", env="LOG_FORMAT")
    rate_limit_enabled: bool = Field(True, env="RATE_LIMIT_ENABLED")
    rate_limit_storage_uri: str = Field("memory://", env="RATE_LIMIT_STORAGE_URI")
    cors_origins: List[str] = Field(default=["http://localhost:5173"], env="CORS_ORIGINS")

    class Config:
        env_file = ".env"

    def is_valid_role(self, role: str) -> bool:
        return role in self.valid_user_roles


settings = Settings()

tags_metadata = [
    {
        "name": "Health",
        "description": "Health-check and diagnostics endpoints.",
    },
    {
        "name": "Reports",
        "description": "Report catalog, column selection and CSV export.",
    },
]
