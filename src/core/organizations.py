"""Organization management: creation, webhook keys and members."""

from __future__ import annotations

import secrets
from typing import Optional
from uuid import uuid4

from src.core.config import get_settings
from src.core.logging import get_logger
from src.core.models import Organization, OrganizationMember
from src.db.store import AlarmStore

logger = get_logger("organizations")

API_KEY_PREFIX = "cw_"


class OrganizationNotFound(Exception):
    pass


def generate_api_key() -> str:
    return API_KEY_PREFIX + secrets.token_hex(13)


def webhook_url(organization: Organization, base_url: Optional[str] = None) -> str:
    """URL to paste into an SNS HTTPS subscription for this organization."""
    base = (base_url or get_settings().webhook_base_url).rstrip("/")
    return f"{base}/webhook?apiKey={organization.webhook_api_key}"


async def create_organization(
    store: AlarmStore,
    *,
    name: str,
    owner_id: str,
    owner_email: Optional[str] = None,
) -> Organization:
    organization = await store.create_organization(
        Organization(name=name, owner_id=owner_id, webhook_api_key=generate_api_key())
    )
    await store.add_member(
        OrganizationMember(
            organization_id=organization.id,
            user_id=owner_id,
            user_email=owner_email,
            role="owner",
        )
    )
    logger.info("organization_created", organization_id=organization.id, owner_id=owner_id)
    return organization


async def regenerate_api_key(store: AlarmStore, organization_id: str) -> Organization:
    """Replace the webhook key; existing SNS subscriptions stop authenticating."""
    updated = await store.update_organization(organization_id, webhook_api_key=generate_api_key())
    if updated is None:
        raise OrganizationNotFound(f"Organization {organization_id} not found")
    logger.info("api_key_regenerated", organization_id=organization_id)
    return updated


async def invite_member(
    store: AlarmStore,
    organization_id: str,
    *,
    user_email: str,
) -> OrganizationMember:
    # No invitation email yet; the member is recorded with a placeholder user id
    if await store.get_organization(organization_id) is None:
        raise OrganizationNotFound(f"Organization {organization_id} not found")
    member = await store.add_member(
        OrganizationMember(
            organization_id=organization_id,
            user_id=f"pending-{uuid4().hex[:12]}",
            user_email=user_email,
            role="member",
        )
    )
    logger.info("member_invited", organization_id=organization_id, member_id=member.id)
    return member
