"""Billing API: Stripe customer provisioning."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.dependencies import AuthUser, get_current_user
from decanted.billing.stripe_client import StripeClient
from decanted.config import Settings
from decanted.database import get_session
from decanted.db.base import utcnow
from decanted.db.models import Profile
from decanted.dependencies import get_app_settings
from decanted.errors import ApiError, not_found
from decanted.profiles.service import get_profile

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/billing", tags=["Billing"])


class CreateCustomerRequest(BaseModel):
    name: str | None = None
    locale: str | None = None


class CreateCustomerResponse(BaseModel):
    status: str
    stripe_customer_id: str


def get_stripe_client(settings: Settings = Depends(get_app_settings)) -> StripeClient | None:
    if not settings.stripe_secret_key:
        return None
    return StripeClient(settings.stripe_secret_key, settings.stripe_api_base, settings.stripe_api_version)


@router.post("/customer", response_model=CreateCustomerResponse)
async def create_stripe_customer(
    body: CreateCustomerRequest | None = None,
    user: AuthUser = Depends(get_current_user),
    stripe: StripeClient | None = Depends(get_stripe_client),
    db: AsyncSession = Depends(get_session),
) -> CreateCustomerResponse:
    """Ensure the caller has a Stripe customer; returns the existing one if already linked."""
    body = body or CreateCustomerRequest()
    user_id = user.id
    profile = await get_profile(db, user_id)
    if profile is None:
        raise not_found("Profile not found")
    if profile.stripe_customer_id:
        return CreateCustomerResponse(status="exists", stripe_customer_id=profile.stripe_customer_id)
    if stripe is None:
        raise ApiError(500, "STRIPE_NOT_CONFIGURED", "Billing is not configured")

    customer = await stripe.create_customer(
        email=profile.email or user.email,
        name=(body.name or "").strip() or profile.alias,
        metadata={
            "user_id": user_id,
            "alias": profile.alias,
            "country": profile.country,
            "locale": body.locale or profile.locale,
        },
        idempotency_key=f"customer:{user_id}",
    )
    customer_id = customer["id"]

    # Only link if no concurrent request got there first.
    result = await db.execute(
        update(Profile)
        .where(Profile.id == user_id, Profile.stripe_customer_id.is_(None))
        .values(stripe_customer_id=customer_id, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    if result.rowcount == 0:
        await db.refresh(profile)
        logger.info("stripe_customer_race_lost", user_id=user_id, orphan=customer_id)
        return CreateCustomerResponse(status="exists", stripe_customer_id=profile.stripe_customer_id or customer_id)

    logger.info("stripe_customer_created", user_id=user_id, customer_id=customer_id)
    return CreateCustomerResponse(status="created", stripe_customer_id=customer_id)
