"""Label OCR API: photo in, label text and vintage/variety hints out."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.dependencies import get_optional_user_id
from decanted.config import Settings
from decanted.database import get_session
from decanted.db.models import WineLabel
from decanted.dependencies import get_app_settings
from decanted.errors import ApiError, bad_request
from decanted.ocr.hints import extract_label_hints
from decanted.ocr.imaging import UnsupportedImageError, downscale_image
from decanted.ocr.vision import VisionClient

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/ocr", tags=["Label OCR"])


class LabelOcrResponse(BaseModel):
    text: str
    labelHints: dict  # noqa: N815
    label_id: str


def get_vision_client(settings: Settings = Depends(get_app_settings)) -> VisionClient | None:
    """Vision client for this request, or None when no API key is configured."""
    if not settings.google_vision_api_key:
        return None
    return VisionClient(settings.google_vision_api_key, settings.google_vision_endpoint)


@router.post("/label", response_model=LabelOcrResponse)
async def ocr_label(
    file: UploadFile | None = File(None),
    user_id: str | None = Depends(get_optional_user_id),
    vision: VisionClient | None = Depends(get_vision_client),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> LabelOcrResponse:
    """Read a wine label photo sent as multipart field ``file``."""
    if file is None:
        raise bad_request("Expected multipart/form-data with a 'file' field")

    data = await file.read()
    if not data:
        raise bad_request("Uploaded file is empty")
    if len(data) > settings.ocr_max_upload_bytes:
        raise ApiError(413, "PAYLOAD_TOO_LARGE", f"Image exceeds {settings.ocr_max_upload_bytes} bytes")
    if vision is None:
        raise ApiError(500, "VISION_NOT_CONFIGURED", "Label OCR is not configured")

    try:
        image = downscale_image(data, settings.ocr_max_edge)
    except UnsupportedImageError as e:
        raise bad_request(str(e)) from e

    text = await vision.detect_text(image)
    hints = extract_label_hints(text, datetime.now(timezone.utc).year)

    label = WineLabel(
        created_by=user_id,
        ocr_text=text,
        vintage_year=hints.vintage_year,
        is_non_vintage=hints.is_non_vintage,
        inferred_variety=hints.inferred_variety,
        inferred_varieties=hints.inferred_varieties,
        inference_meta=hints.as_dict()["inference_meta"],
    )
    db.add(label)
    await db.commit()
    logger.info("label_ocr", label_id=label.id, chars=len(text), bytes_in=len(data), bytes_sent=len(image))
    return LabelOcrResponse(text=text, labelHints=hints.as_dict(), label_id=label.id)
