"""Seed data for the demo backend.

Three alarms per resource type (EC2, RDS, Lambda), one in each
investigation status, plus investigations for six of them. Timestamps are
relative to the moment the seed is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from src.core.models import Alarm, AlarmState, Investigation, Organization, utcnow

DEMO_ORGANIZATION_NAME = "Demo Organization"
DEMO_API_KEY = "demo_api_key_12345678"
DEMO_USER_ID = "demo-user"
DEMO_USER_EMAIL = "demo@example.com"
DEMO_ACCOUNT_ID = "123456789012"


@dataclass(frozen=True)
class _AlarmSeed:
    id: str
    name: str
    description: str
    state: AlarmState
    reason: str
    minutes_ago: float
    region: str
    namespace: str
    metric: str
    status: str


@dataclass(frozen=True)
class _InvestigationSeed:
    id: str
    alarm_id: str
    status: str
    notes: str
    minutes_ago: float


_ALARMS: tuple[_AlarmSeed, ...] = (
    # ── EC2 ──────────────────────────────────────────────────────
    _AlarmSeed(
        "demo-1", "High CPU Usage - Production API",
        "CPU utilization exceeded 80% threshold", AlarmState.ALARM,
        "Threshold Crossed: 1 datapoint [85.3 (07/11/24 10:15:00)] was greater than the threshold (80.0).",
        15, "us-east-1", "AWS/EC2", "CPUUtilization", "PENDING",
    ),
    _AlarmSeed(
        "demo-2", "DiskSpace Low - Log Server",
        "Available disk space below 15%", AlarmState.ALARM,
        "Threshold Crossed: Disk space below 15% threshold",
        120, "eu-west-1", "AWS/EC2", "DiskSpaceAvailable", "INVESTIGATING",
    ),
    _AlarmSeed(
        "demo-3", "Memory Usage High - Web Server",
        "Memory utilization exceeded 90% threshold", AlarmState.OK,
        "Threshold Crossed: Memory usage recovered to 65%",
        240, "us-west-2", "AWS/EC2", "MemoryUtilization", "RESOLVED",
    ),
    # ── RDS ──────────────────────────────────────────────────────
    _AlarmSeed(
        "demo-4", "Database Connection Pool Exhausted",
        "RDS connection pool reached maximum capacity", AlarmState.ALARM,
        "Threshold Crossed: Database connections exceeded 95% of pool size",
        45, "us-west-2", "AWS/RDS", "DatabaseConnections", "RESOLVED",
    ),
    _AlarmSeed(
        "demo-5", "High CPU Utilization - Main Database",
        "RDS CPU utilization exceeded 85% threshold", AlarmState.ALARM,
        "Threshold Crossed: CPU utilization at 87% for 5 minutes",
        20, "us-east-1", "AWS/RDS", "CPUUtilization", "PENDING",
    ),
    _AlarmSeed(
        "demo-6", "Read Latency High - Analytics DB",
        "Read latency exceeded 200ms threshold", AlarmState.ALARM,
        "Threshold Crossed: Read latency at 250ms average",
        60, "eu-west-1", "AWS/RDS", "ReadLatency", "INVESTIGATING",
    ),
    # ── Lambda ───────────────────────────────────────────────────
    _AlarmSeed(
        "demo-7", "Lambda Function Errors Spiking",
        "Error rate exceeded 5% threshold", AlarmState.ALARM,
        "Threshold Crossed: 3 datapoints with error rate above 5%",
        30, "us-east-1", "AWS/Lambda", "Errors", "PENDING",
    ),
    _AlarmSeed(
        "demo-8", "High Duration - Data Processing Function",
        "Function duration exceeded 10 second threshold", AlarmState.ALARM,
        "Threshold Crossed: Average duration at 12.5 seconds",
        90, "us-west-2", "AWS/Lambda", "Duration", "INVESTIGATING",
    ),
    _AlarmSeed(
        "demo-9", "Throttles Detected - API Gateway Function",
        "Function throttles exceeded threshold", AlarmState.OK,
        "Threshold Crossed: Throttles resolved, no throttles in last 10 minutes",
        180, "eu-west-1", "AWS/Lambda", "Throttles", "RESOLVED",
    ),
)

_INVESTIGATIONS: tuple[_InvestigationSeed, ...] = (
    _InvestigationSeed(
        "inv-1", "demo-2", "INVESTIGATING",
        "Checking disk usage patterns. Suspecting log file accumulation. Reviewing log rotation policies.",
        108,
    ),
    _InvestigationSeed(
        "inv-2", "demo-3", "RESOLVED",
        "Identified memory leak in application. Applied patch and restarted services. "
        "Memory usage normalized to 65%.",
        210,
    ),
    _InvestigationSeed(
        "inv-3", "demo-4", "RESOLVED",
        "Increased connection pool size from 50 to 100. Monitoring for stability. "
        "No issues observed since change.",
        40,
    ),
    _InvestigationSeed(
        "inv-4", "demo-6", "INVESTIGATING",
        "Analyzing slow query logs. Found several unoptimized queries. Working with dev team to optimize.",
        48,
    ),
    _InvestigationSeed(
        "inv-5", "demo-8", "INVESTIGATING",
        "Reviewing function code for performance bottlenecks. Suspecting inefficient data processing algorithm.",
        78,
    ),
    _InvestigationSeed(
        "inv-6", "demo-9", "RESOLVED",
        "Increased Lambda concurrency limits and optimized function code. Throttles resolved. "
        "Function now handling load efficiently.",
        168,
    ),
)


def demo_organization(organization_id: str, now: Optional[datetime] = None) -> Organization:
    return Organization(
        id=organization_id,
        name=DEMO_ORGANIZATION_NAME,
        webhook_api_key=DEMO_API_KEY,
        owner_id=DEMO_USER_ID,
        created_at=now or utcnow(),
    )


def demo_alarms(organization_id: str, now: Optional[datetime] = None) -> list[Alarm]:
    now = now or utcnow()
    alarms = []
    for seed in _ALARMS:
        ts = now - timedelta(minutes=seed.minutes_ago)
        alarms.append(
            Alarm(
                id=seed.id,
                organization_id=organization_id,
                alarm_name=seed.name,
                alarm_description=seed.description,
                state=seed.state,
                state_reason=seed.reason,
                timestamp=ts,
                region=seed.region,
                account_id=DEMO_ACCOUNT_ID,
                namespace=seed.namespace,
                metric_name=seed.metric,
                investigation_status=seed.status,
                raw_payload={
                    "AlarmName": seed.name,
                    "NewStateValue": seed.state.value,
                    "Trigger": {"MetricName": seed.metric, "Namespace": seed.namespace},
                },
                created_at=ts,
                updated_at=ts,
            )
        )
    return alarms


def demo_investigations(now: Optional[datetime] = None) -> list[Investigation]:
    now = now or utcnow()
    investigations = []
    for seed in _INVESTIGATIONS:
        ts = now - timedelta(minutes=seed.minutes_ago)
        investigations.append(
            Investigation(
                id=seed.id,
                alarm_id=seed.alarm_id,
                user_id=DEMO_USER_ID,
                user_email=DEMO_USER_EMAIL,
                status=seed.status,
                notes=seed.notes,
                timestamp=ts,
                created_at=ts,
                updated_at=ts,
            )
        )
    return investigations
