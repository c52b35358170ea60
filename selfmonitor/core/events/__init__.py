"""In-process events shared across the application."""

from selfmonitor.core.events.event_bus import EventBus, event_bus
from selfmonitor.core.events.event_models import EventRecord

__all__ = ["EventBus", "EventRecord", "event_bus"]
