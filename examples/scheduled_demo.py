"""Scheduler demo showing dynamic delays and graceful teardown.

This example demonstrates:
- A delay policy built from environment settings
- Job failures forwarded to the delay calculator
- Lifecycle events
- stop() waiting for the ongoing execution
"""
import asyncio
import random

from loguru import logger

from periodic_scheduler import (
    NonOverlappingPeriodicJobScheduler,
    SchedulerEvent,
    Settings,
    policy_from_settings,
)


async def sync_inventory() -> None:
    """Pretend to sync with a flaky upstream service."""
    await asyncio.sleep(random.uniform(0.1, 0.5))
    if random.random() < 0.3:
        raise ConnectionError("upstream unavailable")


def log_event(event: SchedulerEvent) -> None:
    logger.info(f"[{event.scheduler_name}] {event.type} {event.payload}")


async def main():
    """Run the scheduler for a few seconds, then stop it gracefully."""
    settings = Settings.from_env()

    scheduler = NonOverlappingPeriodicJobScheduler(
        sync_inventory,
        policy_from_settings(settings),
        name=settings.scheduler_name,
    )
    scheduler.events.add_handler(log_event)

    await scheduler.start()
    await asyncio.sleep(12)

    logger.info(f"Stopping, currently executing: {scheduler.is_currently_executing}")
    await scheduler.stop()
    logger.info(f"Stopped, status: {scheduler.status.value}")


if __name__ == "__main__":
    asyncio.run(main())
