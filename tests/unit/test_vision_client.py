"""Unit tests for the Vision REST client, against a mock transport."""

import base64
import json

import httpx
import pytest

from decanted.errors import UpstreamError
from decanted.ocr.vision import VisionClient, extract_text

ENDPOINT = "https://vision.test/v1/images:annotate"


class TestExtractText:
    def test_prefers_full_text(self):
        payload = {"responses": [{"fullTextAnnotation": {"text": "FULL"}, "textAnnotations": [{"description": "x"}]}]}
        assert extract_text(payload) == "FULL"

    def test_falls_back_to_first_annotation(self):
        payload = {"responses": [{"textAnnotations": [{"description": "SHIRAZ 2019"}, {"description": "SHIRAZ"}]}]}
        assert extract_text(payload) == "SHIRAZ 2019"

    def test_empty(self):
        assert extract_text({}) == ""
        assert extract_text({"responses": [{}]}) == ""


@pytest.mark.asyncio
class TestVisionClient:
    async def test_sends_key_and_base64_image(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["key"] = request.url.params.get("key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"responses": [{"fullTextAnnotation": {"text": "Merlot 2019"}}]})

        client = VisionClient("k-123", ENDPOINT, transport=httpx.MockTransport(handler))
        text = await client.detect_text(b"\xff\xd8image")

        assert text == "Merlot 2019"
        assert seen["key"] == "k-123"
        req = seen["body"]["requests"][0]
        assert req["features"] == [{"type": "TEXT_DETECTION"}]
        assert base64.b64decode(req["image"]["content"]) == b"\xff\xd8image"

    async def test_http_error_status_raises_upstream(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(403, text="forbidden"))
        client = VisionClient("k", ENDPOINT, transport=transport)

        with pytest.raises(UpstreamError) as exc_info:
            await client.detect_text(b"img")
        assert exc_info.value.status_code == 502
        assert exc_info.value.to_body()["status"] == 403

    async def test_error_inside_response_raises_upstream(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"responses": [{"error": {"message": "Bad image data"}}]})
        )
        client = VisionClient("k", ENDPOINT, transport=transport)

        with pytest.raises(UpstreamError) as exc_info:
            await client.detect_text(b"img")
        assert exc_info.value.to_body()["detail"] == "Bad image data"

    async def test_network_failure_raises_upstream(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        client = VisionClient("k", ENDPOINT, transport=httpx.MockTransport(handler))
        with pytest.raises(UpstreamError):
            await client.detect_text(b"img")
