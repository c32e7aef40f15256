"""Resource parser: groups CloudWatch alarms by the resource they refer to.

Alarm names are free text chosen by operators, so the resource behind an
alarm is inferred with a layered heuristic:

1. the metric namespace decides the resource *type*;
2. an ordered list of name patterns splits "<metric phrase> <resource>"
   names and keeps the resource part as the *identifier*;
3. Lambda alarms may override the identifier from "Function <name>" in the
   alarm name or from a ``prefix:function`` metric name;
4. unparsed long names are truncated so they stay readable.

The precedence of these steps is fixed; changing it regroups real alarms.
Everything here is pure and synchronous, safe to call on every change to
the alarm list.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence, Union

from pydantic import BaseModel, ConfigDict

from src.core.models import (
    Alarm,
    InvestigationStatus,
    normalize_investigation_status,
)

UNKNOWN_TYPE = "Unknown"

# Substring of the CloudWatch namespace -> resource type, in priority order.
NAMESPACE_TYPES: tuple[tuple[str, str], ...] = (
    ("Lambda", "Lambda"),
    ("EC2", "EC2"),
    ("RDS", "RDS"),
    ("S3", "S3"),
    ("DynamoDB", "DynamoDB"),
    ("API Gateway", "API Gateway"),
    ("ECS", "ECS"),
    ("ElastiCache", "ElastiCache"),
    ("CloudFront", "CloudFront"),
    ("SNS", "SNS"),
    ("SQS", "SQS"),
)

METRIC_KEYWORDS: tuple[str, ...] = (
    "High",
    "Low",
    "Error",
    "Warning",
    "Critical",
    "CPU",
    "Memory",
    "Disk",
    "Connection",
    "Pool",
    "Usage",
    "Spiking",
    "Exceeded",
)

MAX_PREFIX_LENGTH = 50
SHORT_PREFIX_LENGTH = 30
MAX_IDENTIFIER_LENGTH = 50
ELLIPSIS = "..."

_LAMBDA_FUNCTION_RE = re.compile(r"Function\s+(.+?)(?:\s|\Z)", re.IGNORECASE)


# ── Public result types ─────────────────────────────────────────


class ResourceInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    identifier: str
    display_name: str
    namespace: str


class ResourceGroup(BaseModel):
    """All alarms that resolved to one (type, identifier) pair."""

    model_config = ConfigDict(frozen=True)

    resource_info: ResourceInfo
    alarms: tuple[Alarm, ...]
    alarm_count: int
    active_alarm_count: int
    latest_alarm: Alarm | None
    investigation_statuses: tuple[str, ...]


class GroupedAlarms(BaseModel):
    model_config = ConfigDict(frozen=True)

    resource_type: str
    resources: tuple[ResourceGroup, ...]

    @property
    def total_alarm_count(self) -> int:
        return sum(r.alarm_count for r in self.resources)


# ── Name pattern matching ───────────────────────────────────────


@dataclass(frozen=True)
class Matched:
    identifier: str


@dataclass(frozen=True)
class NoMatch:
    pass


MatchResult = Union[Matched, NoMatch]
NO_MATCH = NoMatch()


def looks_like_metric_phrase(prefix: str) -> bool:
    """True when the leading part of a name describes the metric, not the resource."""
    if len(prefix) >= MAX_PREFIX_LENGTH:
        return False
    lowered = prefix.lower()
    if any(keyword.lower() in lowered for keyword in METRIC_KEYWORDS):
        return True
    return len(prefix) < SHORT_PREFIX_LENGTH


NamePattern = tuple[re.Pattern[str], Callable[[str], bool]]

# Tried in order; the first accepted match wins. A hyphenated name also
# matches the whitespace pattern, so the order matters. Anchored with \Z:
# "$" would also match before a trailing newline.
NAME_PATTERNS: tuple[NamePattern, ...] = (
    (re.compile(r"^(.+?)\s*-\s*(.+)\Z"), looks_like_metric_phrase),  # "Type - Identifier"
    (re.compile(r"^(.+?):\s*(.+)\Z"), looks_like_metric_phrase),  # "Type: Identifier"
    (re.compile(r"^(.+?)\s+(.+)\Z"), looks_like_metric_phrase),  # "Type Identifier"
)


def match_alarm_name(
    alarm_name: str,
    patterns: Sequence[NamePattern] = NAME_PATTERNS,
) -> MatchResult:
    for pattern, accepts in patterns:
        match = pattern.match(alarm_name)
        if match is None:
            continue
        prefix = match.group(1).strip()
        remainder = match.group(2).strip()
        if remainder and accepts(prefix):
            return Matched(identifier=remainder)
    return NO_MATCH


# ── Extractor ───────────────────────────────────────────────────


def resource_type_for_namespace(namespace: str) -> str:
    for needle, resource_type in NAMESPACE_TYPES:
        if needle in namespace:
            return resource_type
    return UNKNOWN_TYPE


def extract_resource_info(alarm: Alarm) -> ResourceInfo:
    """Infer the resource type and identifier an alarm refers to.

    Never raises: when nothing can be inferred the type is ``Unknown`` and
    the identifier is the alarm name (truncated when longer than 50
    characters).
    """
    alarm_name = alarm.alarm_name or ""
    namespace = alarm.namespace or ""
    metric_name = alarm.metric_name or ""

    resource_type = resource_type_for_namespace(namespace)
    identifier = alarm_name

    result = match_alarm_name(alarm_name)
    if isinstance(result, Matched):
        identifier = result.identifier

    if resource_type == "Lambda" and "Function" in alarm_name:
        lambda_match = _LAMBDA_FUNCTION_RE.search(alarm_name)
        if lambda_match and lambda_match.group(1):
            identifier = lambda_match.group(1).strip()

    if resource_type == "Lambda" and ":" in metric_name:
        identifier = metric_name.rsplit(":", 1)[-1]

    if identifier == alarm_name and len(alarm_name) > MAX_IDENTIFIER_LENGTH:
        identifier = alarm_name[:MAX_IDENTIFIER_LENGTH] + ELLIPSIS

    return ResourceInfo(
        type=resource_type,
        identifier=identifier,
        display_name=identifier,
        namespace=namespace,
    )


# ── Grouper ─────────────────────────────────────────────────────


def _newest_first(alarms: Iterable[Alarm]) -> list[Alarm]:
    # sorted() stays stable with reverse=True, so equal timestamps keep input order
    return sorted(alarms, key=lambda a: a.timestamp, reverse=True)


def _unique_statuses(alarms: Iterable[Alarm]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for alarm in alarms:
        seen.setdefault(normalize_investigation_status(alarm.investigation_status), None)
    return tuple(seen)


def _build_group(resource_info: ResourceInfo, alarms: list[Alarm]) -> ResourceGroup:
    ordered = _newest_first(alarms)
    return ResourceGroup(
        resource_info=resource_info,
        alarms=tuple(ordered),
        alarm_count=len(ordered),
        active_alarm_count=sum(1 for a in ordered if a.is_active),
        latest_alarm=ordered[0] if ordered else None,
        investigation_statuses=_unique_statuses(alarms),
    )


def group_alarms_by_resource(alarms: Iterable[Alarm]) -> list[GroupedAlarms]:
    """Group alarms into resource type -> resource identifier -> alarms.

    Resources are ordered by alarm count and types by their total alarm
    count, both descending; ties keep first-seen order.
    """
    buckets: dict[str, dict[str, tuple[ResourceInfo, list[Alarm]]]] = {}

    for alarm in alarms:
        info = extract_resource_info(alarm)
        by_identifier = buckets.setdefault(info.type, {})
        if info.identifier not in by_identifier:
            by_identifier[info.identifier] = (info, [])
        by_identifier[info.identifier][1].append(alarm)

    grouped: list[GroupedAlarms] = []
    for resource_type, by_identifier in buckets.items():
        resources = [_build_group(info, members) for info, members in by_identifier.values()]
        resources.sort(key=lambda r: r.alarm_count, reverse=True)
        grouped.append(GroupedAlarms(resource_type=resource_type, resources=tuple(resources)))

    grouped.sort(key=lambda g: g.total_alarm_count, reverse=True)
    return grouped


# ── Presentation helpers ────────────────────────────────────────


def count_alarms_by_status(alarms: Iterable[Alarm]) -> dict[str, int]:
    """Count alarms per investigation status, with ACKNOWLEDGED counted as PENDING."""
    counts: dict[str, int] = {status.value: 0 for status in InvestigationStatus}
    for alarm in alarms:
        status = normalize_investigation_status(alarm.investigation_status)
        counts[status] = counts.get(status, 0) + 1
    return counts
