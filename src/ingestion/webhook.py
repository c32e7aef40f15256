"""SNS webhook handling: subscription confirmation and alarm ingestion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx

from src.core.config import get_settings
from src.core.logging import get_logger
from src.db.store import AlarmStore
from src.ingestion.sns import (
    NOTIFICATION,
    SUBSCRIPTION_CONFIRMATION,
    InvalidSNSMessage,
    build_alarm,
    parse_alarm_message,
    parse_envelope,
)

logger = get_logger("webhook")


class WebhookUnauthorized(Exception):
    pass


class UnknownMessageType(InvalidSNSMessage):
    pass


@dataclass(frozen=True)
class WebhookResult:
    message: str
    alarm_id: Optional[str] = None


def is_sns_url(url: str) -> bool:
    parsed = urlparse(url)
    host = parsed.hostname or ""
    return parsed.scheme == "https" and host.endswith(".amazonaws.com")


async def confirm_subscription(subscribe_url: str, *, timeout: Optional[float] = None) -> int:
    """Visit the SubscribeURL so SNS starts delivering to this endpoint."""
    if not is_sns_url(subscribe_url):
        raise InvalidSNSMessage(f"Refusing to confirm subscription at {subscribe_url!r}")
    if timeout is None:
        timeout = get_settings().subscription_confirm_timeout_seconds
    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.get(subscribe_url)
        response.raise_for_status()
    logger.info("subscription_confirmed", status_code=response.status_code)
    return response.status_code


async def handle_sns_body(
    store: AlarmStore,
    body: str | bytes,
    *,
    api_key: Optional[str],
) -> WebhookResult:
    """Process one SNS delivery.

    Raises InvalidSNSMessage for malformed input, UnknownMessageType for
    envelope types other than confirmation/notification, and
    WebhookUnauthorized when a notification's API key matches no
    organization.
    """
    envelope = parse_envelope(body)

    if envelope.type == SUBSCRIPTION_CONFIRMATION and envelope.subscribe_url:
        logger.info("subscription_confirmation_received", topic_arn=envelope.topic_arn)
        await confirm_subscription(envelope.subscribe_url)
        return WebhookResult(message="Subscription confirmed")

    if envelope.type != NOTIFICATION:
        raise UnknownMessageType(f"Unknown message type '{envelope.type}'")

    if not api_key:
        raise WebhookUnauthorized("Missing API key")
    organization = await store.get_organization_by_api_key(api_key)
    if organization is None:
        raise WebhookUnauthorized("Invalid API key")

    message, raw_message = parse_alarm_message(envelope.message)
    alarm = await store.create_alarm(
        build_alarm(envelope, message, raw_message, organization_id=organization.id)
    )
    logger.info(
        "alarm_ingested",
        alarm_id=alarm.id,
        organization_id=organization.id,
        alarm_name=alarm.alarm_name,
        state=alarm.state.value,
        namespace=alarm.namespace,
    )
    return WebhookResult(message="Alarm received", alarm_id=alarm.id)
