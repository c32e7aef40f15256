"""Investigation workflow, one investigation record per alarm.

Saving an investigation writes the investigation (creating it on first
save) and then mirrors its status onto the alarm so grouping and status
counts see it without reading the investigation store.
"""

from __future__ import annotations

from typing import Optional

from src.core.logging import get_logger
from src.core.models import (
    LEGACY_ACKNOWLEDGED,
    Alarm,
    Investigation,
    InvestigationStatus,
    normalize_investigation_status,
    utcnow,
)
from src.db.store import AlarmStore

logger = get_logger("investigations")

VALID_STATUSES = frozenset(s.value for s in InvestigationStatus)


class AlarmNotFound(Exception):
    pass


class InvalidInvestigationStatus(ValueError):
    pass


def validate_status(status: str) -> str:
    """Return the canonical status, raising for values outside the workflow."""
    if status not in VALID_STATUSES and status != LEGACY_ACKNOWLEDGED:
        raise InvalidInvestigationStatus(
            f"Unknown investigation status '{status}'. Expected one of {sorted(VALID_STATUSES)}"
        )
    return normalize_investigation_status(status)


async def get_alarm_investigation(store: AlarmStore, alarm_id: str) -> Investigation | None:
    """Most recent investigation recorded for the alarm, if any."""
    investigations = await store.list_investigations(alarm_id=alarm_id)
    return investigations[0] if investigations else None


async def save_investigation(
    store: AlarmStore,
    alarm_id: str,
    *,
    status: str,
    notes: Optional[str],
    user_id: str,
    user_email: Optional[str] = None,
) -> tuple[Alarm, Investigation]:
    """Create or update the alarm's investigation and sync the alarm status."""
    status = validate_status(status)

    alarm = await store.get_alarm(alarm_id)
    if alarm is None:
        raise AlarmNotFound(f"Alarm {alarm_id} not found")

    existing = await get_alarm_investigation(store, alarm_id)
    if existing is not None:
        investigation = await store.update_investigation(
            existing.id,
            status=status,
            notes=notes,
            timestamp=utcnow(),
        )
    else:
        investigation = await store.create_investigation(
            Investigation(
                alarm_id=alarm_id,
                user_id=user_id,
                user_email=user_email,
                status=status,
                notes=notes,
            )
        )

    updated_alarm = await store.update_alarm(alarm_id, investigation_status=status)
    logger.info(
        "investigation_saved",
        alarm_id=alarm_id,
        investigation_id=investigation.id,
        status=status,
        created=existing is None,
    )
    return updated_alarm, investigation
