"""Minimal Stripe REST client (customers only)."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from decanted.errors import UpstreamError

logger = structlog.get_logger()

STRIPE_TIMEOUT_SECONDS = 15.0


def _form_metadata(metadata: dict[str, str | None]) -> dict[str, str]:
    """Stripe wants nested form keys: ``metadata[user_id]=...``."""
    return {f"metadata[{k}]": v for k, v in metadata.items() if v is not None}


class StripeClient:
    def __init__(
        self,
        secret_key: str,
        api_base: str = "https://api.stripe.com",
        api_version: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.secret_key = secret_key
        self.api_base = api_base.rstrip("/")
        self.api_version = api_version
        self._transport = transport

    async def create_customer(
        self,
        email: str | None,
        name: str | None,
        metadata: dict[str, str | None],
        idempotency_key: str | None = None,
    ) -> dict[str, Any]:
        """Create a customer and return Stripe's JSON object."""
        form: dict[str, str] = _form_metadata(metadata)
        if email:
            form["email"] = email
        if name:
            form["name"] = name

        headers = {"Authorization": f"Bearer {self.secret_key}"}
        if self.api_version:
            headers["Stripe-Version"] = self.api_version
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=STRIPE_TIMEOUT_SECONDS) as client:
                response = await client.post(f"{self.api_base}/v1/customers", data=form, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("stripe_request_failed", error=str(e))
            raise UpstreamError("Stripe", detail=str(e)) from e

        if response.status_code >= 400:
            message = response.text[:500]
            try:
                message = response.json().get("error", {}).get("message", message)
            except ValueError:
                pass
            logger.warning("stripe_error_response", status=response.status_code)
            raise UpstreamError("Stripe", status=response.status_code, detail=message)

        return response.json()
