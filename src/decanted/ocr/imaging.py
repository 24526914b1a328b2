"""Downscale label photos before OCR."""

from __future__ import annotations

from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

JPEG_QUALITY = 85


class UnsupportedImageError(ValueError):
    pass


def target_size(width: int, height: int, max_edge: int) -> tuple[int, int]:
    """Size with the longest edge clamped to ``max_edge`` and the aspect ratio kept."""
    longest = max(width, height)
    if longest <= max_edge:
        return width, height
    scale = max_edge / longest
    return (
        min(max_edge, max(1, round(width * scale))),
        min(max_edge, max(1, round(height * scale))),
    )


def downscale_image(data: bytes, max_edge: int) -> bytes:
    """Shrink an image so its longest edge is at most ``max_edge`` pixels.

    Images already within bounds are returned untouched. Larger ones are
    re-encoded: PNG stays PNG, everything else becomes JPEG.

    Raises:
        UnsupportedImageError: If Pillow cannot decode the bytes.
    """
    try:
        with Image.open(BytesIO(data)) as image:
            source_format = image.format
            image = ImageOps.exif_transpose(image)
            size = target_size(image.width, image.height, max_edge)
            if size == (image.width, image.height):
                return data

            fmt = "PNG" if source_format == "PNG" else "JPEG"
            if fmt == "JPEG" and image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            resized = image.resize(size, Image.Resampling.BICUBIC)

            out = BytesIO()
            if fmt == "JPEG":
                resized.save(out, format="JPEG", quality=JPEG_QUALITY)
            else:
                resized.save(out, format="PNG")
            return out.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedImageError("Could not decode image") from e
