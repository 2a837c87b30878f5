"""External event-data providers."""

from providers.robotevents import RobotEventsClient

__all__ = ["RobotEventsClient"]
