"""Google Cloud Vision text detection over REST."""

from __future__ import annotations

import base64
from typing import Any

import httpx
import structlog

from decanted.errors import UpstreamError

logger = structlog.get_logger()

VISION_TIMEOUT_SECONDS = 20.0


def extract_text(payload: dict[str, Any]) -> str:
    """Full-text annotation first, then the first text annotation, else empty."""
    responses = payload.get("responses") or [{}]
    first = responses[0] or {}
    full = (first.get("fullTextAnnotation") or {}).get("text")
    if full:
        return full
    annotations = first.get("textAnnotations") or []
    if annotations and annotations[0].get("description"):
        return annotations[0]["description"]
    return ""


class VisionClient:
    """Send images to the ``images:annotate`` endpoint with an API key."""

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint
        self._transport = transport

    async def detect_text(self, image: bytes) -> str:
        body = {
            "requests": [
                {
                    "image": {"content": base64.b64encode(image).decode("ascii")},
                    "features": [{"type": "TEXT_DETECTION"}],
                }
            ]
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=VISION_TIMEOUT_SECONDS) as client:
                response = await client.post(self.endpoint, params={"key": self.api_key}, json=body)
        except httpx.HTTPError as e:
            logger.warning("vision_request_failed", error=str(e))
            raise UpstreamError("Vision API", detail=str(e)) from e

        if response.status_code >= 400:
            logger.warning("vision_error_response", status=response.status_code)
            raise UpstreamError("Vision API", status=response.status_code, detail=response.text[:500])

        payload = response.json()
        error = ((payload.get("responses") or [{}])[0] or {}).get("error")
        if error:
            raise UpstreamError("Vision API", status=response.status_code, detail=error.get("message"))
        return extract_text(payload)
