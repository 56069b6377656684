# =============================================================================
# tests/test_customers_catalog.py - Customer & Catalog Endpoint Tests
# =============================================================================
# Run with: pytest tests/test_customers_catalog.py -v
# =============================================================================

from uuid import uuid4

from core.models.user import Role


class TestCustomers:
    """HTTP contract of /api/customers."""

    def test_create(self, client, as_role):
        as_role(Role.SALESPERSON)

        response = client.post("/api/customers", json={
            "first_name": "Morgan", "last_name": "Diaz", "email": "Morgan@NorthHS.example.com",
            "company": "North High",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "morgan@northhs.example.com"
        assert body["country"] == "United States"

    def test_duplicate_email_is_409(self, client, as_role, customer):
        as_role(Role.SALESPERSON)

        response = client.post("/api/customers", json={
            "first_name": "J", "last_name": "R", "email": "JORDAN@rivercityfc.org",
        })

        assert response.status_code == 409
        assert response.json()["code"] == "CUSTOMER_EMAIL_EXISTS"

    def test_search_and_pagination(self, client, as_role, fake_db, customer):
        as_role(Role.ADMIN)
        fake_db.seed("customers", [
            {"first_name": "Ana", "last_name": "Ruiz", "email": "ana@example.com", "company": "Lakeside"},
        ])

        body = client.get("/api/customers", params={"search": "river"}).json()

        assert [c["email"] for c in body["customers"]] == ["jordan@rivercityfc.org"]
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 1, "pages": 1}

    def test_limit_over_100_rejected(self, client, as_role):
        as_role(Role.ADMIN)
        assert client.get("/api/customers", params={"limit": 101}).status_code == 400

    def test_update_email_conflict(self, client, as_role, fake_db, customer):
        as_role(Role.SALESPERSON)
        other = fake_db.seed("customers", [
            {"first_name": "Ana", "last_name": "Ruiz", "email": "ana@example.com"},
        ])[0]

        response = client.patch(f"/api/customers/{other['id']}", json={"email": "jordan@rivercityfc.org"})

        assert response.status_code == 409

    def test_update(self, client, as_role, customer):
        as_role(Role.SALESPERSON)

        response = client.patch(f"/api/customers/{customer['id']}", json={"phone": "555-0101"})

        assert response.status_code == 200
        assert response.json()["phone"] == "555-0101"
        assert response.json()["updated_at"]

    def test_designer_cannot_read(self, client, as_role):
        as_role(Role.DESIGNER)
        assert client.get("/api/customers").status_code == 403

    def test_delete_admin_only(self, client, as_role, fake_db, customer):
        as_role(Role.SALESPERSON)
        assert client.delete(f"/api/customers/{customer['id']}").status_code == 403

        as_role(Role.ADMIN)
        assert client.delete(f"/api/customers/{customer['id']}").status_code == 200
        assert fake_db.rows("customers") == []

    def test_missing_customer(self, client, as_role):
        as_role(Role.ADMIN)

        response = client.get(f"/api/customers/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "CUSTOMER_NOT_FOUND"


class TestCatalog:
    """HTTP contract of /api/catalog."""

    def test_any_user_can_read(self, client, as_role, catalog_item):
        as_role(Role.CUSTOMER)

        body = client.get("/api/catalog").json()

        assert body["total"] == 1
        assert body["items"][0]["sku"] == "JER-SOC-001"

    def test_filters(self, client, as_role, fake_db, catalog_item):
        as_role(Role.DESIGNER)
        fake_db.seed("catalog_items", [
            {"name": "Court Shorts", "category": "Shorts", "sport": "Basketball", "sku": "SHO-BB-01", "status": "inactive"},
        ])

        assert client.get("/api/catalog", params={"sport": "Basketball"}).json()["total"] == 1
        assert client.get("/api/catalog", params={"status": "active"}).json()["items"][0]["sku"] == "JER-SOC-001"
        assert client.get("/api/catalog", params={"search": "sho-bb"}).json()["total"] == 1

    def test_create_defaults(self, client, as_role):
        as_role(Role.SALESPERSON)

        response = client.post("/api/catalog", json={"name": "Warmup Hoodie", "category": "Outerwear", "sku": " HD-01 "})

        assert response.status_code == 201
        body = response.json()
        assert body["sku"] == "HD-01"
        assert body["sport"] == "All Around Item"
        assert body["status"] == "active"

    def test_duplicate_sku(self, client, as_role, catalog_item):
        as_role(Role.SALESPERSON)

        response = client.post("/api/catalog", json={"name": "Copy", "category": "Jerseys", "sku": "JER-SOC-001"})

        assert response.status_code == 409
        assert response.json()["code"] == "SKU_EXISTS"

    def test_validate_sku(self, client, as_role, catalog_item):
        as_role(Role.SALESPERSON)

        taken = client.get("/api/catalog/validate-sku", params={"sku": "JER-SOC-001"}).json()
        own = client.get(
            "/api/catalog/validate-sku", params={"sku": "JER-SOC-001", "excludeId": catalog_item["id"]}
        ).json()

        assert taken == {"sku": "JER-SOC-001", "available": False}
        assert own["available"] is True

    def test_update_keeps_own_sku(self, client, as_role, catalog_item):
        as_role(Role.SALESPERSON)

        response = client.patch(
            f"/api/catalog/{catalog_item['id']}", json={"sku": "JER-SOC-001", "base_price": 45}
        )

        assert response.status_code == 200
        assert response.json()["base_price"] == 45

    def test_delete(self, client, as_role, catalog_item):
        as_role(Role.SALESPERSON)
        assert client.delete(f"/api/catalog/{catalog_item['id']}").status_code == 403

        as_role(Role.ADMIN)
        assert client.delete(f"/api/catalog/{catalog_item['id']}").status_code == 200
        assert client.get(f"/api/catalog/{catalog_item['id']}").status_code == 404
