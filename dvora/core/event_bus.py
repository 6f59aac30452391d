"""
Event Bus
Lets front ends follow a resolution run without coupling to the driver
"""
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List
import threading

Handler = Callable[[Any], None]


class EventBus:
    """Thread-safe publish/subscribe hub; verdicts may be emitted from worker threads"""

    def __init__(self):
        self._handlers: DefaultDict[str, List[Handler]] = defaultdict(list)
        self._lock = threading.RLock()

    def subscribe(self, event_type: str, callback: Handler) -> Callable[[], None]:
        """Register a handler once; returns a function that removes it again."""
        with self._lock:
            handlers = self._handlers[event_type]
            if callback not in handlers:
                handlers.append(callback)
        return lambda: self.unsubscribe(event_type, callback)

    def unsubscribe(self, event_type: str, callback: Handler):
        with self._lock:
            handlers = self._handlers.get(event_type) or []
            if callback in handlers:
                handlers.remove(callback)

    def emit(self, event_type: str, data=None):
        """Call every handler of event_type; a failing handler never stops the run"""
        with self._lock:
            handlers = tuple(self._handlers.get(event_type) or ())
        for handler in handlers:
            try:
                handler(data)
            except Exception as e:
                print(f"Error in event handler for {event_type}: {e}")

    def clear(self):
        with self._lock:
            self._handlers.clear()


class Events:
    """Event names published by the resolution driver and the settings API"""

    # Per-category run
    CHECK_STARTED = "check_started"
    SITE_STARTED = "site_started"
    SITE_CHECKED = "site_checked"
    CATEGORY_COMPLETED = "category_completed"
    CATEGORY_FAILED = "category_failed"

    SETTINGS_CHANGED = "settings_changed"
