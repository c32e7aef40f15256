"""CloudWatch Alarm Desk: main entry point.

    python main.py tree [organization_id]   print the resource tree
    python main.py serve                    run the HTTP API
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

from src.core.config import get_settings
from src.core.logging import configure_logging, get_logger
from src.core.resource_parser import GroupedAlarms, count_alarms_by_status, group_alarms_by_resource
from src.data.demo_store import get_demo_store
from src.db.engine import create_tables, dispose_engine, get_session_factory
from src.db.store import AlarmStore, SqlAlarmStore

COMMANDS = ("tree", "serve")


def _format_status_counts(counts: dict[str, int]) -> str:
    parts = [f"{count} {status}" for status, count in counts.items() if count > 0]
    return ", ".join(parts) if parts else "no alarms"


def print_resource_tree(grouped: list[GroupedAlarms]) -> None:
    print("\n" + "=" * 70)
    print("  ALARMS BY RESOURCE")
    print("=" * 70)

    if not grouped:
        print("\n  No alarms yet.")

    for group in grouped:
        active = sum(r.active_alarm_count for r in group.resources)
        print(f"\n  {group.resource_type}  ({group.total_alarm_count} alarms, {active} active)")
        for resource in group.resources:
            counts = count_alarms_by_status(resource.alarms)
            print(
                f"    - {resource.resource_info.display_name}: "
                f"{resource.alarm_count} alarms, {resource.active_alarm_count} active "
                f"[{_format_status_counts(counts)}]"
            )
            for alarm in resource.alarms:
                print(
                    f"        {alarm.timestamp.isoformat()}  {alarm.state.value:<17} {alarm.alarm_name}"
                )

    print("\n" + "=" * 70)


async def _tree_from_store(store: AlarmStore, organization_id: Optional[str]) -> None:
    alarms = await store.list_alarms(organization_id=organization_id)
    print_resource_tree(group_alarms_by_resource(alarms))


async def show_tree(organization_id: Optional[str] = None) -> None:
    """Load alarms from the configured store and print them grouped by resource."""
    configure_logging()
    logger = get_logger("main")
    settings = get_settings()
    logger.info("loading_alarms", storage_backend=settings.storage_backend, organization_id=organization_id)

    if settings.storage_backend == "demo":
        await _tree_from_store(get_demo_store(settings.demo_organization_id), organization_id)
        return

    await create_tables()
    try:
        async with get_session_factory()() as session:
            await _tree_from_store(SqlAlarmStore(session), organization_id)
    finally:
        await dispose_engine()


def serve() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )


def main() -> None:
    """CLI entry point."""
    command = sys.argv[1] if len(sys.argv) > 1 else "tree"
    if command not in COMMANDS:
        print(f"Unknown command: {command}")
        print(f"Available: {list(COMMANDS)}")
        sys.exit(1)

    if command == "serve":
        serve()
    else:
        organization_id = sys.argv[2] if len(sys.argv) > 2 else None
        asyncio.run(show_tree(organization_id))


if __name__ == "__main__":
    main()
