"""Parsing of SNS envelopes carrying CloudWatch alarm state changes.

SNS posts a JSON envelope whose ``Message`` field is itself a JSON string
with the CloudWatch alarm. These helpers turn both layers into typed models
and build the ``Alarm`` that gets stored.
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.core.models import Alarm, AlarmState, InvestigationStatus, utcnow

SUBSCRIPTION_CONFIRMATION = "SubscriptionConfirmation"
NOTIFICATION = "Notification"

# CloudWatch writes offsets as +0000
_COMPACT_OFFSET_RE = re.compile(r"([+-]\d{2})(\d{2})$")


class InvalidSNSMessage(ValueError):
    pass


def _normalize_offset(value: Any) -> Any:
    if isinstance(value, str):
        return _COMPACT_OFFSET_RE.sub(r"\1:\2", value.strip())
    return value


class SNSEnvelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = Field(alias="Type")
    message_id: Optional[str] = Field(default=None, alias="MessageId")
    topic_arn: Optional[str] = Field(default=None, alias="TopicArn")
    message: str = Field(default="", alias="Message")
    timestamp: Optional[datetime] = Field(default=None, alias="Timestamp")
    subscribe_url: Optional[str] = Field(default=None, alias="SubscribeURL")

    normalize_timestamp = field_validator("timestamp", mode="before")(_normalize_offset)


class CloudWatchDimension(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    value: str


class CloudWatchTrigger(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    metric_name: Optional[str] = Field(default=None, alias="MetricName")
    namespace: Optional[str] = Field(default=None, alias="Namespace")
    dimensions: list[CloudWatchDimension] = Field(default_factory=list, alias="Dimensions")


class CloudWatchAlarmMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    alarm_name: str = Field(alias="AlarmName")
    alarm_description: Optional[str] = Field(default=None, alias="AlarmDescription")
    new_state_value: AlarmState = Field(alias="NewStateValue")
    new_state_reason: str = Field(default="", alias="NewStateReason")
    state_change_time: Optional[datetime] = Field(default=None, alias="StateChangeTime")
    region: Optional[str] = Field(default=None, alias="Region")
    alarm_arn: Optional[str] = Field(default=None, alias="AlarmArn")
    aws_account_id: Optional[str] = Field(default=None, alias="AWSAccountId")
    trigger: Optional[CloudWatchTrigger] = Field(default=None, alias="Trigger")

    normalize_state_change_time = field_validator("state_change_time", mode="before")(
        _normalize_offset
    )


def _load_json(raw: str | bytes, what: str) -> dict:
    try:
        data = json.loads(raw or "{}")
    except (TypeError, ValueError) as e:
        raise InvalidSNSMessage(f"{what} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidSNSMessage(f"{what} must be a JSON object")
    return data


def parse_envelope(body: str | bytes) -> SNSEnvelope:
    data = _load_json(body, "SNS body")
    try:
        return SNSEnvelope.model_validate(data)
    except ValidationError as e:
        raise InvalidSNSMessage(f"Invalid SNS envelope: {e.error_count()} error(s)") from e


def parse_alarm_message(message: str) -> tuple[CloudWatchAlarmMessage, dict]:
    """Parse the CloudWatch payload; also returns the raw dict for storage."""
    data = _load_json(message, "SNS Message")
    try:
        return CloudWatchAlarmMessage.model_validate(data), data
    except ValidationError as e:
        raise InvalidSNSMessage(f"Invalid CloudWatch alarm message: {e.error_count()} error(s)") from e


def account_id_from_arn(arn: Optional[str]) -> str:
    """arn:aws:cloudwatch:<region>:<account-id>:alarm:<name> -> account id."""
    if not arn:
        return ""
    parts = arn.split(":")
    return parts[4] if len(parts) > 4 else ""


def build_alarm(
    envelope: SNSEnvelope,
    message: CloudWatchAlarmMessage,
    raw_message: dict,
    *,
    organization_id: str,
) -> Alarm:
    trigger = message.trigger or CloudWatchTrigger()
    return Alarm(
        organization_id=organization_id,
        alarm_name=message.alarm_name,
        alarm_description=message.alarm_description,
        state=message.new_state_value,
        state_reason=message.new_state_reason,
        timestamp=message.state_change_time or envelope.timestamp or utcnow(),
        region=message.region,
        account_id=account_id_from_arn(message.alarm_arn) or message.aws_account_id,
        namespace=trigger.namespace,
        metric_name=trigger.metric_name,
        investigation_status=InvestigationStatus.PENDING.value,
        raw_payload=raw_message,
    )
