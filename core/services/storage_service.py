# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles upload / public URL / delete operations against Supabase Storage
# buckets (catalog-images, uploads).
# =============================================================================

import logging

from lib.supabase_client import SupabaseClient
from app.exceptions import StorageUploadError

logger = logging.getLogger(__name__)


class StorageService:
    """
    Service for Supabase Storage operations.

    Every method takes the bucket explicitly; callers pick it from settings.
    """

    @staticmethod
    def upload_bytes(
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> str:
        """
        Upload raw bytes to storage.

        Args:
            bucket: Storage bucket name
            path: Object path inside the bucket
            content: File bytes
            content_type: MIME type stored with the object
            upsert: Overwrite an existing object at the same path

        Returns:
            Storage path where file was uploaded

        Raises:
            StorageUploadError: If upload fails
        """
        client = SupabaseClient.get_client()

        try:
            client.storage.from_(bucket).upload(
                path=path,
                file=content,
                file_options={
                    "content-type": content_type,
                    "cache-control": "3600",
                    "upsert": "true" if upsert else "false",
                }
            )

            logger.info(f"Uploaded file to storage: {bucket}/{path} ({len(content)} bytes)")
            return path

        except Exception as e:
            logger.error(f"Storage upload failed for {bucket}/{path}: {e}")
            raise StorageUploadError(str(e))

    @staticmethod
    def get_public_url(bucket: str, storage_path: str) -> str:
        """
        Get a public URL for a storage file.

        Some SDK versions append a trailing "?" to the URL; it is stripped.
        """
        client = SupabaseClient.get_client()

        try:
            result = client.storage.from_(bucket).get_public_url(storage_path)
            return result.rstrip("?")
        except Exception as e:
            logger.error(f"Failed to get public URL for {bucket}/{storage_path}: {e}")
            raise

    @staticmethod
    def delete_files(bucket: str, storage_paths: list[str]) -> bool:
        """
        Delete files from storage.

        Args:
            bucket: Storage bucket name
            storage_paths: Object paths to remove

        Returns:
            True if deleted successfully (or nothing to delete)
        """
        if not storage_paths:
            return True

        client = SupabaseClient.get_client()

        try:
            client.storage.from_(bucket).remove(storage_paths)
            logger.info(f"Deleted {len(storage_paths)} file(s) from {bucket}")
            return True

        except Exception as e:
            logger.error(f"Failed to delete files from {bucket}: {e}")
            return False

    @staticmethod
    def path_from_public_url(bucket: str, url: str) -> str | None:
        """
        Extract the object path from a public URL.

        Example:
            ".../storage/v1/object/public/catalog-images/abc/medium-x.webp"
            -> "abc/medium-x.webp"
        """
        if not url:
            return None
        marker = f"{bucket}/"
        index = url.find(marker)
        if index == -1:
            return None
        path = url[index + len(marker):].split("?", 1)[0]
        return path or None
