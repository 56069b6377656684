# =============================================================================
# tests/test_production_images.py - Production Progress Photo Tests
# =============================================================================
# Run with: pytest tests/test_production_images.py -v
# =============================================================================

import re
from uuid import uuid4

import pytest

from app.exceptions import InvalidFileTypeError, ResourceNotFoundError
from core.models.task import TaskType
from core.models.user import Role
from core.services.catalog_image_service import ImageUpload
from core.services.order_image_service import OrderImageService
from tests.conftest import make_image_bytes

BUCKET = "uploads"


def jpeg_upload(name: str = "cutting.jpg") -> ImageUpload:
    return ImageUpload(filename=name, content_type="image/jpeg", content=make_image_bytes("JPEG", (320, 240)))


class TestUploadProductionImage:
    """Tests for OrderImageService.upload_production_image."""

    def test_stores_file_and_record(self, fake_db, order_with_items):
        order_id = order_with_items["order"]["id"]
        user_id = uuid4()

        record = OrderImageService.upload_production_image(
            order_id, jpeg_upload(), stage="Cutting Room", caption="Panels cut", user_id=user_id
        )

        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}_cutting-room_[0-9a-f]{8}\.jpg", record["filename"])
        assert record["storage_path"] == f"orders/{order_id}/production/{record['filename']}"
        assert fake_db.storage.paths(BUCKET) == [record["storage_path"]]
        assert record["url"].endswith(record["storage_path"])
        assert record["uploaded_by"] == str(user_id)
        assert record["original_name"] == "cutting.jpg"

        stored = fake_db.get("orders", order_id)["production_images"]
        assert [image["id"] for image in stored] == [record["id"]]
        assert [r["action"] for r in fake_db.rows("order_audit_log")] == ["FILE_UPLOADED"]

    def test_default_stage(self, fake_db, order_with_items):
        record = OrderImageService.upload_production_image(order_with_items["order"]["id"], jpeg_upload())
        assert record["stage"] == "in_progress"

    def test_appends_to_task(self, fake_db, order_with_items):
        order_id = order_with_items["order"]["id"]
        task = fake_db.seed("production_tasks", [{"order_id": order_id, "status": "in_progress"}])[0]

        record = OrderImageService.upload_production_image(order_id, jpeg_upload(), task_id=task["id"])

        assert record["task_type"] == "production"
        assert fake_db.get("production_tasks", task["id"])["progress_images"][0]["id"] == record["id"]

    def test_unknown_task_rejected_before_upload(self, fake_db, order_with_items):
        with pytest.raises(ResourceNotFoundError):
            OrderImageService.upload_production_image(
                order_with_items["order"]["id"], jpeg_upload(), task_type=TaskType.DESIGN, task_id=uuid4()
            )
        assert fake_db.storage.uploads == []

    def test_gif_not_allowed(self, fake_db, order_with_items):
        gif = ImageUpload(filename="a.gif", content_type="image/gif", content=make_image_bytes("GIF", (10, 10)))

        with pytest.raises(InvalidFileTypeError):
            OrderImageService.upload_production_image(order_with_items["order"]["id"], gif)

    def test_order_write_failure_removes_file(self, fake_db, order_with_items):
        fake_db.fail("orders", "update")

        with pytest.raises(Exception):
            OrderImageService.upload_production_image(order_with_items["order"]["id"], jpeg_upload())

        assert fake_db.storage.paths(BUCKET) == []


class TestListAndDelete:
    """Tests for listing and deleting production images."""

    def test_list_newest_first(self, fake_db, order_with_items):
        order_id = order_with_items["order"]["id"]
        fake_db.tables["orders"][0]["production_images"] = [
            {"id": "1", "uploaded_at": "2026-03-01T10:00:00+00:00"},
            {"id": "2", "uploaded_at": "2026-03-02T10:00:00+00:00"},
        ]

        assert [i["id"] for i in OrderImageService.list_production_images(order_id)] == ["2", "1"]

    def test_delete(self, fake_db, order_with_items):
        order_id = order_with_items["order"]["id"]
        first = OrderImageService.upload_production_image(order_id, jpeg_upload("a.jpg"))
        second = OrderImageService.upload_production_image(order_id, jpeg_upload("b.jpg"))

        OrderImageService.delete_production_image(order_id, first["id"])

        remaining = fake_db.get("orders", order_id)["production_images"]
        assert [i["id"] for i in remaining] == [second["id"]]
        assert fake_db.storage.paths(BUCKET) == [second["storage_path"]]
        assert fake_db.rows("order_audit_log")[-1]["action"] == "FILE_DELETED"

    def test_delete_unknown_image(self, fake_db, order_with_items):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            OrderImageService.delete_production_image(order_with_items["order"]["id"], uuid4())
        assert exc_info.value.code == "PRODUCTION_IMAGE_NOT_FOUND"


class TestProductionImageEndpoints:
    """HTTP contract of /api/orders/{id}/images/production."""

    def url(self, order_id: str) -> str:
        return f"/api/orders/{order_id}/images/production"

    def test_upload_form(self, client, as_role, order_with_items):
        as_role(Role.MANUFACTURER)

        response = client.post(
            self.url(order_with_items["order"]["id"]),
            files={"image": ("stitch.png", make_image_bytes("PNG", (64, 64)), "image/png")},
            data={"stage": "stitching", "caption": "Collar"},
        )

        assert response.status_code == 201
        image = response.json()["image"]
        assert image["stage"] == "stitching"
        assert image["caption"] == "Collar"
        assert image["mime_type"] == "image/png"

    def test_customer_cannot_upload(self, client, as_role, order_with_items):
        as_role(Role.CUSTOMER)

        response = client.post(
            self.url(order_with_items["order"]["id"]),
            files={"image": ("a.png", make_image_bytes("PNG", (8, 8)), "image/png")},
        )

        assert response.status_code == 403

    def test_list(self, client, as_role, order_with_items):
        as_role(Role.DESIGNER)
        OrderImageService.upload_production_image(order_with_items["order"]["id"], jpeg_upload())

        body = client.get(self.url(order_with_items["order"]["id"])).json()

        assert body["success"] is True
        assert body["total"] == 1

    def test_designer_cannot_delete(self, client, as_role, order_with_items):
        order_id = order_with_items["order"]["id"]
        record = OrderImageService.upload_production_image(order_id, jpeg_upload())
        as_role(Role.DESIGNER)

        assert client.delete(f"{self.url(order_id)}/{record['id']}").status_code == 403

        as_role(Role.MANUFACTURER)
        response = client.delete(f"{self.url(order_id)}/{record['id']}")
        assert response.status_code == 200
        assert response.json() == {"success": True, "deleted": record["id"]}
