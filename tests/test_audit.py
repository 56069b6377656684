# =============================================================================
# tests/test_audit.py - Order Audit Trail Tests
# =============================================================================
# Run with: pytest tests/test_audit.py -v
# =============================================================================

from datetime import timedelta
from uuid import uuid4

from core.models.audit import AuditAction, AuditEntry
from core.models.user import Role
from core.services.audit_service import AuditService
from lib.utils import utc_now


def seed_entry(fake_db, order_id: str, action: str, hours_ago: float = 0, user_id: str | None = None) -> dict:
    return fake_db.seed("order_audit_log", [{
        "order_id": order_id,
        "user_id": user_id,
        "action": action,
        "timestamp": (utc_now() - timedelta(hours=hours_ago)).isoformat(),
    }])[0]


class TestAuditWrites:
    """Audit writes are best-effort."""

    def test_log_change_returns_row(self, fake_db):
        order_id = uuid4()

        row = AuditService.log_change(AuditEntry(order_id=order_id, action=AuditAction.SHIPPED))

        assert row["order_id"] == str(order_id)
        assert row["action"] == "SHIPPED"
        assert row["timestamp"]

    def test_failure_returns_none(self, fake_db):
        fake_db.fail("order_audit_log", "insert")

        assert AuditService.log_change(AuditEntry(order_id=uuid4(), action=AuditAction.SHIPPED)) is None

    def test_assignment_and_unassignment(self, fake_db):
        order_id = uuid4()

        AuditService.log_order_changes(
            order_id, None,
            before={"assigned_designer_id": None, "assigned_manufacturer_id": "m-1"},
            changes={"assigned_designer_id": "d-1", "assigned_manufacturer_id": None},
        )

        actions = sorted(r["action"] for r in fake_db.rows("order_audit_log"))
        assert actions == ["DESIGNER_ASSIGNED", "MANUFACTURER_UNASSIGNED"]

    def test_other_fields_are_order_updated(self, fake_db):
        order_id = uuid4()

        AuditService.log_order_changes(
            order_id, None,
            before={"customer_id": "c-1", "rush_order": False, "priority": "low"},
            changes={"customer_id": "c-2", "rush_order": True, "priority": "high"},
        )

        by_field = {r["field_name"]: r["action"] for r in fake_db.rows("order_audit_log")}
        assert by_field == {
            "customer_id": "ORDER_UPDATED",
            "rush_order": "ORDER_UPDATED",
            "priority": "PRIORITY_CHANGED",
        }

    def test_bulk_changes(self, fake_db):
        order_id = uuid4()
        rows = AuditService.log_bulk_changes([
            AuditEntry(order_id=order_id, action=AuditAction.PAYMENT_RECEIVED),
            AuditEntry(order_id=order_id, action=AuditAction.EMAIL_SENT),
        ])
        assert len(rows) == 2


class TestAuditReads:
    """Tests for history, recent activity and stats."""

    def test_history_newest_first(self, fake_db):
        order_id = str(uuid4())
        seed_entry(fake_db, order_id, "ORDER_CREATED", hours_ago=3)
        seed_entry(fake_db, order_id, "STATUS_CHANGED", hours_ago=1)
        seed_entry(fake_db, str(uuid4()), "SHIPPED")

        history = AuditService.get_order_history(order_id)

        assert [h["action"] for h in history] == ["STATUS_CHANGED", "ORDER_CREATED"]

    def test_recent_activity_window(self, fake_db):
        order_id = str(uuid4())
        seed_entry(fake_db, order_id, "ORDER_CREATED", hours_ago=30)
        seed_entry(fake_db, order_id, "STATUS_CHANGED", hours_ago=2)

        assert [a["action"] for a in AuditService.get_recent_activity(hours_back=24)] == ["STATUS_CHANGED"]
        assert len(AuditService.get_recent_activity(hours_back=48)) == 2

    def test_recent_activity_clamps_hours(self, fake_db):
        seed_entry(fake_db, str(uuid4()), "ORDER_CREATED", hours_ago=200)

        assert AuditService.get_recent_activity(hours_back=10_000) == []

    def test_stats(self, fake_db):
        order_id = str(uuid4())
        alex, blair = str(uuid4()), str(uuid4())
        seed_entry(fake_db, order_id, "STATUS_CHANGED", 5, alex)
        seed_entry(fake_db, order_id, "STATUS_CHANGED", 4, alex)
        seed_entry(fake_db, order_id, "DESIGNER_ASSIGNED", 3, blair)
        seed_entry(fake_db, order_id, "ITEM_ADDED", 2, blair)
        seed_entry(fake_db, order_id, "NOTES_UPDATED", 1)

        stats = AuditService.get_order_stats(order_id)

        assert stats.total_changes == 5
        assert stats.status_changes == 2
        assert stats.assignments == 1
        assert stats.item_changes == 1
        assert stats.unique_users == 2
        assert stats.last_activity is not None


class TestAuditEndpoints:
    """HTTP contract of /api/audit."""

    def test_history(self, client, as_role, fake_db):
        as_role(Role.DESIGNER)
        order_id = str(uuid4())
        seed_entry(fake_db, order_id, "ORDER_CREATED")

        body = client.get(f"/api/audit/orders/{order_id}/history").json()

        assert body["order_id"] == order_id
        assert body["total"] == 1

    def test_history_limit_bounds(self, client, as_role):
        as_role(Role.ADMIN)

        response = client.get(f"/api/audit/orders/{uuid4()}/history", params={"limit": 501})

        assert response.status_code == 400

    def test_recent_activity_rejects_bad_ids(self, client, as_role):
        as_role(Role.SALESPERSON)

        response = client.get("/api/audit/recent-activity", params={"order_ids": f"{uuid4()},nope"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ORDER_IDS"

    def test_recent_activity_filters_orders(self, client, as_role, fake_db):
        as_role(Role.SALESPERSON)
        wanted = str(uuid4())
        seed_entry(fake_db, wanted, "ORDER_CREATED")
        seed_entry(fake_db, str(uuid4()), "ORDER_CREATED")

        body = client.get("/api/audit/recent-activity", params={"order_ids": wanted}).json()

        assert body["total"] == 1
        assert body["activity"][0]["order_id"] == wanted

    def test_recent_activity_forbidden_for_designer(self, client, as_role):
        as_role(Role.DESIGNER)
        assert client.get("/api/audit/recent-activity").status_code == 403

    def test_manual_entry(self, client, as_role, fake_db, order_with_items):
        admin = as_role(Role.ADMIN)

        response = client.post("/api/audit/manual-entry", json={
            "order_id": order_with_items["order"]["id"],
            "action": "PAYMENT_RECEIVED",
            "changes_summary": "Deposit paid by phone",
            "metadata": {"amount": 300},
        })

        assert response.status_code == 201
        entry = response.json()["entry"]
        assert entry["user_id"] == str(admin.id)
        assert entry["metadata"] == {"amount": 300, "manual_entry": True}

    def test_manual_entry_unknown_order(self, client, as_role):
        as_role(Role.ADMIN)

        response = client.post("/api/audit/manual-entry", json={
            "order_id": str(uuid4()),
            "action": "PAYMENT_RECEIVED",
            "changes_summary": "x",
        })

        assert response.status_code == 404

    def test_manual_entry_write_failure(self, client, as_role, fake_db, order_with_items):
        as_role(Role.ADMIN)
        fake_db.fail("order_audit_log", "insert")

        response = client.post("/api/audit/manual-entry", json={
            "order_id": order_with_items["order"]["id"],
            "action": "SHIPPED",
            "changes_summary": "Shipped via courier",
        })

        assert response.status_code == 500
        assert response.json()["code"] == "DATABASE_ERROR"
