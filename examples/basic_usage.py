"""
Basic usage example of the grid dispatch scheduler.
This example demonstrates core functionality including:
- Configuring a session
- Selecting regions and retrying the optimizer
- Listening to session events
"""

import asyncio

from gridsched import SessionController
from gridsched.analysis import snapshot
from gridsched.config import SchedulerConfig, MonitoringConfig, FallbackConfig
from gridsched.events import SessionEvent


def print_event(event: SessionEvent) -> None:
    """Print the event details."""
    print(f"[cycle {event.sequence}] {event.type.name} ({event.region_id})")
    if event.details:
        print("  Details:", event.details)


def print_view(controller: SessionController) -> None:
    view = snapshot(controller.state)

    print(f"\nRegion: {view.region_id}")
    print(f"Status: {view.status_label}")
    print(f"Data source: {view.data_source_label}")
    print(f"Current: {view.current}")
    print(f"Net balance: {view.net_balance:+d} MW")

    print("\nNext 8 hours:")
    for entry in view.schedule_window:
        print(f"  {entry.hour:>5}  {entry.action.value:<9} {entry.amount:>6} MW  "
              f"grid {entry.grid_balance:+d} MW")

    for rec in view.recommendations:
        print(f"  ! {rec['time']} {rec['message']}")


async def main():
    config = SchedulerConfig(
        name="Basic Dispatch Example",
        default_region="california",
        fallback=FallbackConfig(random_seed=42),
        monitoring=MonitoringConfig(log_level="INFO"),
    )

    result = config.validate()
    for warning in result.warnings:
        print(f"Config warning: {warning}")

    controller = SessionController.from_config(config)
    controller.add_listener(print_event)

    print("Starting session...")
    await controller.start()
    print_view(controller)

    print("\nSwitching to Texas...")
    await controller.select_region("texas")
    print_view(controller)

    print("\nRetrying optimizer...")
    await controller.retry()

    print("\nBackend statistics:")
    for key, value in controller.get_backend_stats().items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    asyncio.run(main())
