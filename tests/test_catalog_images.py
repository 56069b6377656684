# =============================================================================
# tests/test_catalog_images.py - Catalog Image Variant Pipeline Tests
# =============================================================================
# Service-level tests against the in-memory Supabase fake, plus the HTTP
# contract of /api/images/catalog/{id}/images.
#
# Run with: pytest tests/test_catalog_images.py -v
# =============================================================================

import pytest

from app.exceptions import (
    BadRequestError,
    CatalogItemNotFoundError,
    ImageProcessingError,
    InvalidFileTypeError,
    TooManyFilesError,
)
from core.models.user import Role
from core.services.catalog_image_service import (
    CatalogImageService,
    ImageUpload,
    merge_variants,
    safe_basename,
)
from tests.conftest import make_image_bytes

BUCKET = "catalog-images"


def png_upload(name: str = "front.png") -> ImageUpload:
    return ImageUpload(filename=name, content_type="image/png", content=make_image_bytes("PNG", (500, 500)))


class TestHelpers:
    """Tests for filename and variant merging helpers."""

    def test_safe_basename(self):
        assert safe_basename("Home Jersey (Front).PNG") == "home-jersey-front"
        assert safe_basename("") == "image"

    def test_merge_replaces_primary_and_appends_gallery(self):
        existing = {"thumbnail": "old-t", "medium": "old-m", "gallery": ["g1"]}

        merged = merge_variants(existing, {"thumbnail": "new-t", "medium": "new-m"}, ["g1", "g2"])

        assert merged["thumbnail"] == "new-t"
        assert merged["medium"] == "new-m"
        assert merged["gallery"] == ["g1", "g2"]


class TestUploadImages:
    """Tests for CatalogImageService.upload_images."""

    def test_single_file_uploads_four_variants(self, fake_db, catalog_item):
        result = CatalogImageService.upload_images(catalog_item["id"], [png_upload()])

        paths = fake_db.storage.paths(BUCKET)
        assert len(paths) == 4
        assert all(p.startswith(f"{catalog_item['id']}/") and p.endswith(".webp") for p in paths)
        assert {p.split("/")[1].split("-")[0] for p in paths} == {"thumbnail", "medium", "large", "original"}

        variants = result["image_variants"]
        assert set(variants) >= {"thumbnail", "medium", "large", "original"}
        assert result["image_url"] == variants["medium"]
        assert not variants["medium"].endswith("?")
        assert result["failed"] == []
        assert result["statistics"]["files_processed"] == 1
        assert result["statistics"]["variants_uploaded"] == 4

        stored = fake_db.get("catalog_items", catalog_item["id"])
        assert stored["image_url"] == variants["medium"]

    def test_second_file_goes_to_gallery(self, fake_db, catalog_item):
        result = CatalogImageService.upload_images(
            catalog_item["id"], [png_upload("front.png"), png_upload("back.png")]
        )

        variants = result["image_variants"]
        assert "front" in variants["medium"]
        assert len(variants["gallery"]) == 1
        assert "medium-back" in variants["gallery"][0]

    def test_failed_variant_rolls_back_that_file(self, fake_db, catalog_item):
        """If the 'large' upload of one file fails, its earlier variants are removed."""
        fake_db.storage.fail_upload_when = lambda bucket, path: "large-bad" in path

        result = CatalogImageService.upload_images(
            catalog_item["id"], [png_upload("good.png"), png_upload("bad.png")]
        )

        paths = fake_db.storage.paths(BUCKET)
        assert not any("-bad-" in p for p in paths)
        assert len(paths) == 4
        assert [f["filename"] for f in result["failed"]] == ["bad.png"]
        assert result["statistics"]["files_failed"] == 1
        assert "gallery" not in result["image_variants"] or result["image_variants"]["gallery"] == []

    def test_all_files_failing_is_500(self, fake_db, catalog_item):
        fake_db.storage.fail_upload_when = lambda bucket, path: True

        with pytest.raises(ImageProcessingError) as exc_info:
            CatalogImageService.upload_images(catalog_item["id"], [png_upload()])

        assert exc_info.value.status_code == 500
        assert exc_info.value.code == "IMAGE_PROCESSING_FAILED"
        assert fake_db.get("catalog_items", catalog_item["id"])["image_url"] is None

    def test_corrupt_file_reported_not_fatal(self, fake_db, catalog_item):
        broken = ImageUpload(filename="broken.png", content_type="image/png", content=b"nope")

        result = CatalogImageService.upload_images(catalog_item["id"], [png_upload(), broken])

        assert [f["filename"] for f in result["failed"]] == ["broken.png"]
        assert result["statistics"]["files_processed"] == 1

    def test_database_failure_removes_uploads(self, fake_db, catalog_item):
        fake_db.fail("catalog_items", "update")

        with pytest.raises(Exception):
            CatalogImageService.upload_images(catalog_item["id"], [png_upload()])

        assert fake_db.storage.paths(BUCKET) == []

    def test_missing_item(self, fake_db):
        with pytest.raises(CatalogItemNotFoundError):
            CatalogImageService.upload_images("00000000-0000-0000-0000-000000000000", [png_upload()])

    def test_validation_happens_before_processing(self, fake_db, catalog_item):
        pdf = ImageUpload(filename="spec.pdf", content_type="application/pdf", content=b"%PDF")

        with pytest.raises(InvalidFileTypeError):
            CatalogImageService.upload_images(catalog_item["id"], [png_upload(), pdf])

        assert fake_db.storage.uploads == []

    def test_too_many_files(self, fake_db, catalog_item):
        with pytest.raises(TooManyFilesError):
            CatalogImageService.upload_images(catalog_item["id"], [png_upload(f"{i}.png") for i in range(11)])

    def test_no_files(self, fake_db, catalog_item):
        with pytest.raises(BadRequestError):
            CatalogImageService.upload_images(catalog_item["id"], [])


class TestDeleteVariants:
    """Tests for CatalogImageService.delete_variants."""

    def test_delete_selected_variants(self, fake_db, catalog_item):
        CatalogImageService.upload_images(catalog_item["id"], [png_upload()])

        result = CatalogImageService.delete_variants(catalog_item["id"], ["thumbnail", "medium"])

        assert sorted(result["removed_variants"]) == ["medium", "thumbnail"]
        remaining = fake_db.storage.paths(BUCKET)
        assert len(remaining) == 2
        stored = fake_db.get("catalog_items", catalog_item["id"])
        assert set(stored["image_variants"]) == {"large", "original"}
        assert stored["image_url"] is None

    def test_delete_all_including_gallery(self, fake_db, catalog_item):
        CatalogImageService.upload_images(catalog_item["id"], [png_upload("a.png"), png_upload("b.png")])

        CatalogImageService.delete_variants(catalog_item["id"])

        # Gallery entries only reference the medium variant of later files
        remaining = fake_db.storage.paths(BUCKET)
        assert len(remaining) == 3
        assert all("-b-" in p and "/medium-" not in p for p in remaining)
        assert fake_db.get("catalog_items", catalog_item["id"])["image_variants"] == {}

    def test_unknown_variant(self, fake_db, catalog_item):
        with pytest.raises(BadRequestError) as exc_info:
            CatalogImageService.delete_variants(catalog_item["id"], ["poster"])
        assert exc_info.value.code == "INVALID_VARIANT"


class TestCatalogImageEndpoints:
    """HTTP contract of the catalog image endpoints."""

    def url(self, item_id: str) -> str:
        return f"/api/images/catalog/{item_id}/images"

    def test_upload_multipart(self, client, as_role, catalog_item, png_bytes):
        as_role(Role.SALESPERSON)

        response = client.post(
            self.url(catalog_item["id"]),
            files=[("images", ("front.png", png_bytes, "image/png"))],
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["image_url"] == body["image_variants"]["medium"]

    def test_wrong_type_is_400(self, client, as_role, catalog_item):
        as_role(Role.ADMIN)

        response = client.post(
            self.url(catalog_item["id"]),
            files=[("images", ("notes.txt", b"hello", "text/plain"))],
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"

    def test_designer_forbidden(self, client, as_role, catalog_item, png_bytes):
        as_role(Role.DESIGNER)

        response = client.post(
            self.url(catalog_item["id"]),
            files=[("images", ("front.png", png_bytes, "image/png"))],
        )

        assert response.status_code == 403
        assert response.json()["code"] == "INSUFFICIENT_ROLE"

    def test_delete_with_query(self, client, as_role, fake_db, catalog_item):
        CatalogImageService.upload_images(catalog_item["id"], [png_upload()])
        as_role(Role.SALESPERSON)

        response = client.delete(self.url(catalog_item["id"]), params={"variants": "thumbnail"})

        assert response.status_code == 200
        assert response.json()["removed_variants"] == ["thumbnail"]
        assert len(fake_db.storage.paths(BUCKET)) == 3
