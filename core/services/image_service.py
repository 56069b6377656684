# =============================================================================
# core/services/image_service.py - Image Decoding & Variant Generation
# =============================================================================
# Pillow-based image processing shared by the catalog and production image
# pipelines:
# - Upload validation (MIME type, size)
# - Variant generation: thumbnail/medium/large center-cropped to a square,
#   plus a full-size copy, all re-encoded as WebP
# - JPEG variants of design mockups
# - Downscaling of large production photos to JPEG
#
# No storage or database access happens here.
# =============================================================================

import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from app.config import settings
from app.exceptions import FileTooLargeError, ImageProcessingError, InvalidFileTypeError
from core.models.image import MOCKUP_VARIANT_SPECS, VARIANT_SPECS, VariantName, VariantSpec

logger = logging.getLogger(__name__)

PRODUCTION_IMAGE_TYPES = ["image/jpeg", "image/png", "image/webp"]
PRODUCTION_JPEG_QUALITY = 85

MIME_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


@dataclass
class ProcessedVariant:
    """One encoded variant ready for upload."""
    variant: VariantName
    width: int
    height: int
    size: int
    data: bytes
    content_type: str = "image/webp"
    extension: str = ".webp"


@dataclass
class ProcessedImage:
    """A production image after optional downscaling."""
    data: bytes
    content_type: str
    extension: str
    width: int
    height: int
    resized: bool


class ImageService:
    """
    Stateless image helpers.

    Example:
        variants = ImageService.generate_variants(content, "jersey.png")
        for v in variants:
            StorageService.upload_bytes(bucket, f"{item_id}/{v.variant.value}.webp", v.data, v.content_type)
    """

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def validate_upload(
        filename: str,
        content_type: str | None,
        size: int,
        allowed_types: list[str],
        max_bytes: int,
    ) -> None:
        """
        Check an upload's MIME type and size.

        Raises:
            InvalidFileTypeError: If the MIME type is not allowed
            FileTooLargeError: If the file exceeds max_bytes
        """
        if (content_type or "").lower() not in allowed_types:
            raise InvalidFileTypeError(filename, allowed_types)
        if size > max_bytes:
            raise FileTooLargeError(size / (1024 * 1024), max_bytes // (1024 * 1024))
        if size == 0:
            raise ImageProcessingError(filename, "File is empty")

    # -------------------------------------------------------------------------
    # Decoding
    # -------------------------------------------------------------------------

    @staticmethod
    def open_image(content: bytes, filename: str) -> Image.Image:
        """
        Decode image bytes, applying EXIF orientation.

        Raises:
            ImageProcessingError: If the bytes are not a decodable image
        """
        try:
            image = Image.open(io.BytesIO(content))
            image.load()
            return ImageOps.exif_transpose(image)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.warning(f"Could not decode image {filename}: {e}")
            raise ImageProcessingError(filename, "Unsupported or corrupted image data")

    @staticmethod
    def to_rgb(image: Image.Image) -> Image.Image:
        """Flatten transparency onto white and convert to RGB."""
        if image.mode in ("RGBA", "LA", "P"):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            return background
        if image.mode != "RGB":
            return image.convert("RGB")
        return image

    @staticmethod
    def crop_to_aspect(image: Image.Image, target_size: tuple[int, int]) -> Image.Image:
        """Crop image to the target aspect ratio (center crop)."""
        target_ratio = target_size[0] / target_size[1]
        image_ratio = image.width / image.height

        if image_ratio > target_ratio:
            # Wider than target - crop sides
            new_width = int(image.height * target_ratio)
            left = (image.width - new_width) // 2
            image = image.crop((left, 0, left + new_width, image.height))
        elif image_ratio < target_ratio:
            # Taller than target - crop top/bottom
            new_height = int(image.width / target_ratio)
            top = (image.height - new_height) // 2
            image = image.crop((0, top, image.width, top + new_height))

        return image

    # -------------------------------------------------------------------------
    # Catalog variants
    # -------------------------------------------------------------------------

    @staticmethod
    def render_variant(image: Image.Image, spec: VariantSpec) -> ProcessedVariant:
        """Resize (cover) and encode a single WebP variant."""
        if spec.size is not None:
            image = ImageService.crop_to_aspect(image, spec.size)
            if image.size != spec.size:
                image = image.resize(spec.size, Image.Resampling.LANCZOS)

        output = io.BytesIO()
        image.save(output, "WEBP", quality=spec.quality, method=6)
        data = output.getvalue()

        return ProcessedVariant(
            variant=spec.name,
            width=image.width,
            height=image.height,
            size=len(data),
            data=data,
        )

    @staticmethod
    def generate_variants(
        content: bytes,
        filename: str,
        specs: tuple[VariantSpec, ...] = VARIANT_SPECS,
    ) -> list[ProcessedVariant]:
        """
        Render every variant of an uploaded image.

        Returns:
            One ProcessedVariant per spec, in spec order

        Raises:
            ImageProcessingError: If decoding or encoding fails
        """
        image = ImageService.to_rgb(ImageService.open_image(content, filename))

        try:
            variants = [ImageService.render_variant(image, spec) for spec in specs]
        except (OSError, ValueError) as e:
            logger.error(f"Failed to encode variants for {filename}: {e}")
            raise ImageProcessingError(filename, f"Failed to encode image: {e}")

        logger.debug(
            f"Generated {len(variants)} variants for {filename} "
            f"({len(content)} -> {sum(v.size for v in variants)} bytes)"
        )
        return variants

    # -------------------------------------------------------------------------
    # Design mockups
    # -------------------------------------------------------------------------

    @staticmethod
    def render_jpeg_variant(image: Image.Image, spec: VariantSpec) -> ProcessedVariant:
        """Resize per spec.fit and encode a single JPEG variant."""
        if spec.fit == "inside":
            image = image.copy()
            image.thumbnail(spec.size, Image.Resampling.LANCZOS)
        else:
            image = ImageService.crop_to_aspect(image, spec.size)
            if image.size != spec.size:
                image = image.resize(spec.size, Image.Resampling.LANCZOS)

        output = io.BytesIO()
        image.save(output, "JPEG", quality=spec.quality, optimize=True)
        data = output.getvalue()

        return ProcessedVariant(
            variant=spec.name,
            width=image.width,
            height=image.height,
            size=len(data),
            data=data,
            content_type="image/jpeg",
            extension=".jpg",
        )

    @staticmethod
    def generate_mockup_variants(content: bytes, filename: str) -> list[ProcessedVariant]:
        """
        Render the large, medium and thumbnail JPEGs of a design mockup.

        Raises:
            ImageProcessingError: If decoding or encoding fails
        """
        image = ImageService.to_rgb(ImageService.open_image(content, filename))

        try:
            return [ImageService.render_jpeg_variant(image, spec) for spec in MOCKUP_VARIANT_SPECS]
        except (OSError, ValueError) as e:
            logger.error(f"Failed to encode mockup variants for {filename}: {e}")
            raise ImageProcessingError(filename, f"Failed to encode image: {e}")

    # -------------------------------------------------------------------------
    # Production images
    # -------------------------------------------------------------------------

    @staticmethod
    def prepare_production_image(
        content: bytes,
        filename: str,
        content_type: str,
        threshold_bytes: int | None = None,
        max_dimension: int | None = None,
    ) -> ProcessedImage:
        """
        Downscale large production photos.

        Files at or under the threshold are stored untouched. Larger files are
        shrunk to fit within max_dimension x max_dimension (aspect preserved,
        never enlarged) and re-encoded as JPEG.
        """
        threshold_bytes = threshold_bytes or settings.production_resize_threshold_bytes
        max_dimension = max_dimension or settings.PRODUCTION_IMAGE_MAX_DIMENSION

        image = ImageService.open_image(content, filename)
        extension = MIME_EXTENSIONS.get(content_type, ".jpg")

        if len(content) <= threshold_bytes:
            return ProcessedImage(
                data=content,
                content_type=content_type,
                extension=extension,
                width=image.width,
                height=image.height,
                resized=False,
            )

        image = ImageService.to_rgb(image)
        image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

        output = io.BytesIO()
        image.save(output, "JPEG", quality=PRODUCTION_JPEG_QUALITY, optimize=True)
        data = output.getvalue()

        logger.info(f"Downscaled production image {filename}: {len(content)} -> {len(data)} bytes")
        return ProcessedImage(
            data=data,
            content_type="image/jpeg",
            extension=".jpg",
            width=image.width,
            height=image.height,
            resized=True,
        )
