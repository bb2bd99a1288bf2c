#!/usr/bin/env python3
"""
Configuration checker for the HR reporting API.
This script checks if your environment is properly configured.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

def check_imports():
    """Check if all required modules can be imported."""
    print("🔍 Checking module imports...")

    modules_to_check = [
        ("entities.report", "Report entities"),
        ("entities.records", "Source record models"),
        ("repositories.catalog_repository", "Catalog repository"),
        ("repositories.report_data_repository", "Report data repository"),
        ("services.report_catalog", "Report catalog"),
        ("services.report_export", "Export service"),
        ("dependencies", "Dependency injection"),
        ("common.exceptions", "Custom exceptions"),
        ("common.logging", "Logging utilities"),
    ]

    all_good = True
    for module_name, description in modules_to_check:
        try:
            __import__(module_name)
            print(f"✅ {description}: OK")
        except ImportError as e:
            print(f"❌ {description}: FAILED - {e}")
            all_good = False
        except Exception as e:
            print(f"⚠️ {description}: WARNING - {e}")

    return all_good

def check_dependencies():
    """Check if required dependencies are installed."""
    print("\n📦 Checking Python dependencies...")

    dependencies = [
        ("pydantic", "Data validation and serialization"),
        ("pydantic_settings", "Environment configuration"),
        ("fastapi", "Web framework"),
        ("supabase", "Database client"),
        ("slowapi", "Rate limiting"),
    ]

    all_good = True
    for dep_name, description in dependencies:
        try:
            __import__(dep_name)
            print(f"✅ {dep_name}: OK")
        except ImportError:
            print(f"❌ {dep_name}: MISSING - {description}")
            all_good = False

    return all_good

def check_configuration():
    """Check if configuration is properly set up."""
    print("\n⚙️ Checking configuration...")

    try:
        from config.config import settings
        print(f"✅ Settings loaded: OK")

        tables = {
            "Employees": settings.supabase_table_employees,
            "Leaves": settings.supabase_table_leaves,
            "Document categories": settings.supabase_table_document_types,
            "Compliance records": settings.supabase_table_compliance_records,
        }
        for label, table in tables.items():
            print(f"✅ {label} table configured: {table}")

        invalid_roles = [role for role in settings.report_roles if not settings.is_valid_role(role)]
        if invalid_roles:
            print(f"⚠️ Report roles not in VALID_USER_ROLES: {invalid_roles}")
        else:
            print(f"✅ Report roles: {', '.join(settings.report_roles)}")

        print(f"✅ Year window: -{settings.report_year_window_back} / +{settings.report_year_window_ahead}")

    except Exception as e:
        print(f"❌ Configuration check failed: {e}")
        return False

    return True

def check_database_connection():
    """Check if database connection works."""
    print("\n🗄️ Checking database connection...")

    try:
        from config.config import settings
        from db.supabase_client import create_supabase_client
        from services.db_check import check_database_connection as probe

        supabase = create_supabase_client()
        print(f"✅ Supabase client created: OK")

        result = probe(supabase, settings.supabase_table_employees)
        print(f"✅ {result['table']} reachable in {result['latency_ms']} ms")

    except Exception as e:
        print(f"❌ Database connection check failed: {e}")
        print(f"💡 This is expected if Supabase environment variables are not set")
        return False

    return True

def show_environment_setup():
    """Show environment setup instructions."""
    print("\n📋 Environment Setup Instructions:")
    print("\n1. **Required Environment Variables:**")
    print("   - SUPABASE_URL: Your Supabase project URL")
    print("   - SUPABASE_KEY: Your Supabase service key")
    print("\n2. **Database Tables Required:**")
    print("   - employees, leaves, leave_types, branches")
    print("   - document_types, document_tracker")
    print("   - compliance_types, compliance_period_records")
    print("   - user_roles, user_permissions")
    print("\n3. **Python Dependencies:**")
    print("   pip install -e .")

def main():
    """Main configuration checker."""
    print("🔧 HR Reporting API Configuration Checker")
    print("="*50)

    # Check all components
    imports_ok = check_imports()
    deps_ok = check_dependencies()
    config_ok = check_configuration()
    db_ok = check_database_connection()

    print("\n📊 Summary:")
    print(f"   Imports: {'✅ OK' if imports_ok else '❌ Issues'}")
    print(f"   Dependencies: {'✅ OK' if deps_ok else '❌ Issues'}")
    print(f"   Configuration: {'✅ OK' if config_ok else '❌ Issues'}")
    print(f"   Database: {'✅ OK' if db_ok else '⚠️ Not configured'}")

    if imports_ok and deps_ok and config_ok:
        print(f"\n🎉 Reporting API is ready to use!")
        print(f"\n🚀 Run: uvicorn app:app --reload")
    else:
        print(f"\n❌ Some issues need to be resolved first")
        show_environment_setup()

if __name__ == "__main__":
    main()
