# =============================================================================
# tests/test_stats_health.py - Dashboard Stats, Health & Error Shape Tests
# =============================================================================
# Run with: pytest tests/test_stats_health.py -v
# =============================================================================

from datetime import timedelta

import pytest

from app.config import settings
from app.exceptions import DatabaseError
from core.models.user import Role
from core.services.order_service import OrderService
from core.services.stats_service import StatsService
from lib.utils import utc_now


class TestStatsService:
    """Tests for dashboard aggregates."""

    def test_order_stats(self, fake_db):
        fake_db.seed("orders", [
            {"status": "draft", "total_amount": 100},
            {"status": "in_production", "total_amount": "250.50"},
            {"status": "completed", "total_amount": "300.25"},
            {"status": "completed", "total_amount": 99.75},
            {"status": "cancelled", "total_amount": 80},
        ])

        stats = StatsService.order_stats()

        assert stats["total_orders"] == 5
        assert stats["orders_by_status"]["completed"] == 2
        assert stats["pending_orders"] == 2
        assert stats["completed_orders"] == 2
        assert stats["total_revenue"] == 400.0

    def test_customer_stats(self, fake_db):
        now = utc_now()
        fake_db.seed("customers", [
            {"email": "a@example.com", "created_at": now.isoformat()},
            {"email": "b@example.com", "created_at": (now.replace(day=1) - timedelta(days=3)).isoformat()},
        ])

        assert StatsService.customer_stats() == {"total_customers": 2, "new_this_month": 1}

    def test_catalog_stats(self, fake_db):
        fake_db.seed("catalog_items", [
            {"sku": "A", "category": "Jerseys", "status": "active"},
            {"sku": "B", "category": "Jerseys", "status": "inactive"},
            {"sku": "C", "category": None, "status": "active"},
        ])

        stats = StatsService.catalog_stats()

        assert stats["total_items"] == 3
        assert stats["active_items"] == 2
        assert stats["by_category"] == {"Jerseys": 2, "Uncategorized": 1}

    def test_empty_tables(self, fake_db):
        assert StatsService.order_stats()["total_revenue"] == 0

    def test_totals_survive_response_row_cap(self, fake_db):
        fake_db.row_cap = 2
        fake_db.seed("orders", [{"status": "completed", "total_amount": 10} for _ in range(5)])
        fake_db.seed("orders", [{"status": "draft", "total_amount": 1} for _ in range(3)])
        fake_db.seed("catalog_items", [
            {"sku": f"SKU-{n}", "category": "Jerseys", "status": "active"} for n in range(5)
        ])
        fake_db.seed("customers", [{"email": f"c{n}@example.com", "created_at": utc_now().isoformat()} for n in range(4)])

        orders = StatsService.order_stats()
        catalog = StatsService.catalog_stats()

        assert orders["total_orders"] == 8
        assert orders["orders_by_status"] == {"draft": 3, "completed": 5}
        assert orders["pending_orders"] == 3
        assert orders["total_revenue"] == 50.0
        assert catalog == {"total_items": 5, "active_items": 5, "by_category": {"Jerseys": 5}}
        assert StatsService.customer_stats() == {"total_customers": 4, "new_this_month": 4}

    def test_count_failure_is_database_error(self, fake_db):
        fake_db.fail("customers", "select")

        with pytest.raises(DatabaseError):
            StatsService.customer_stats()


class TestStatsEndpoints:
    """HTTP contract of /api/stats."""

    def test_sales_can_read(self, client, as_role, order_with_items):
        as_role(Role.SALESPERSON)

        body = client.get("/api/stats/orders").json()

        assert body["total_orders"] == 1
        assert body["pending_orders"] == 1

    def test_manufacturer_forbidden(self, client, as_role):
        as_role(Role.MANUFACTURER)
        assert client.get("/api/stats/catalog").status_code == 403


class TestHealth:
    """Tests for health endpoints."""

    def test_health(self, client):
        body = client.get("/api/health").json()

        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"

    def test_ready(self, client):
        body = client.get("/api/health/ready").json()

        assert body["status"] == "ready"
        assert body["checks"] == {"database": "healthy", "storage": "healthy"}

    def test_degraded_when_storage_down(self, client, fake_db):
        fake_db.storage.fail_list_buckets = True

        body = client.get("/api/health/ready").json()

        assert body["status"] == "degraded"
        assert body["checks"]["storage"].startswith("unhealthy")

    def test_degraded_when_uploads_bucket_missing(self, client, monkeypatch):
        monkeypatch.setattr(settings, "UPLOADS_BUCKET", "order-uploads")

        body = client.get("/api/health/ready").json()

        assert body["status"] == "degraded"
        assert body["checks"]["database"] == "healthy"
        assert body["checks"]["storage"] == "unhealthy: missing bucket order-uploads"

    def test_degraded_when_database_down(self, client, fake_db):
        fake_db.fail("orders", "select")

        body = client.get("/api/health/ready").json()

        assert body["status"] == "degraded"
        assert body["checks"]["database"].startswith("unhealthy")
        assert body["checks"]["storage"] == "healthy"

    def test_live(self, client):
        assert client.get("/api/health/live").json()["status"] == "alive"

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/api/health"


class TestErrorResponses:
    """Error bodies share one shape."""

    def test_database_error(self, client, as_role, fake_db):
        as_role(Role.ADMIN)
        fake_db.fail("orders", "select")

        response = client.get("/api/orders")

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "DATABASE_ERROR"
        assert "detail" in body

    def test_unexpected_error(self, client, as_role, monkeypatch):
        as_role(Role.ADMIN)

        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(OrderService, "list_orders", staticmethod(explode))

        response = client.get("/api/orders")

        assert response.status_code == 500
        assert response.json() == {"detail": "An unexpected error occurred", "code": "INTERNAL_ERROR"}

    def test_bad_uuid_is_validation_error(self, client, as_role):
        as_role(Role.ADMIN)

        response = client.get("/api/orders/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "order_id"
