"""SNS webhook endpoint for CloudWatch alarm notifications.

SNS posts with ``Content-Type: text/plain``, so the body is read raw and
parsed here rather than through a request model.
"""

from __future__ import annotations

from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from src.api.dependencies import get_store
from src.api.schemas import ErrorResponse, WebhookResponse
from src.core.logging import get_logger
from src.db.store import AlarmStore
from src.ingestion.sns import InvalidSNSMessage
from src.ingestion.webhook import WebhookUnauthorized, handle_sns_body

router = APIRouter()
logger = get_logger("api.webhook")


@router.post(
    "/webhook",
    response_model=WebhookResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def receive_sns_webhook(
    request: Request,
    api_key: Optional[str] = Query(default=None, alias="apiKey"),
    x_api_key: Optional[str] = Header(default=None),
    store: AlarmStore = Depends(get_store),
) -> WebhookResponse:
    body = await request.body()
    try:
        result = await handle_sns_body(store, body, api_key=api_key or x_api_key)
    except WebhookUnauthorized as e:
        logger.warning("webhook_unauthorized", reason=str(e))
        raise HTTPException(status_code=401, detail=str(e))
    except InvalidSNSMessage as e:
        logger.warning("webhook_rejected", reason=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except httpx.HTTPError as e:
        logger.error("subscription_confirmation_failed", error=str(e))
        raise HTTPException(status_code=502, detail="Subscription confirmation failed")
    return WebhookResponse(message=result.message, alarm_id=result.alarm_id)
