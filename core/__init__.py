# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic behind the API:
# - models/: Pydantic schemas and enums
# - services/: Service classes over the Supabase client (orders, catalog,
#   images, audit, users, tasks, ...)
#
# Services raise app.exceptions errors and never touch HTTP objects.
# =============================================================================
