# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the ThreadCraft API:
# - fake_supabase.py: In-memory stand-in for the Supabase client
# - test_models.py / test_utils.py / test_order_items.py: Pure unit tests
# - test_image_service.py / test_catalog_images.py: Pillow image pipeline
# - test_orders.py, test_tasks.py, ...: Services and endpoints end to end
#
# Run tests with: pytest
# =============================================================================
