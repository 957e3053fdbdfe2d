"""Small publish/subscribe bus used to push session state to the UI."""
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

SESSION_STARTED = "session.started"
SESSION_FEEDBACK = "session.feedback"
SESSION_ADVANCED = "session.advanced"
SESSION_STOPPED = "session.stopped"
SESSION_COMPLETED = "session.completed"
FRAME_MISSING = "session.frame_missing"

SPELLING_STARTED = "spelling.started"
SPELLING_UPDATED = "spelling.updated"
SPELLING_STOPPED = "spelling.stopped"

ALL_TOPICS = "*"

Handler = Callable[[str, Any], None]


class EventBus:
    """
    Synchronous event bus.

    Handlers are called in the publishing thread, in subscription order, with
    ``(topic, payload)``. Subscribing to ``"*"`` receives every topic.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> None:
        self._subscribers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: Handler) -> None:
        handlers = self._subscribers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, topic: str, payload: Any = None) -> None:
        handlers = list(self._subscribers.get(topic, []))
        handlers += self._subscribers.get(ALL_TOPICS, [])
        for handler in handlers:
            try:
                handler(topic, payload)
            except Exception as e:
                # Subscriber errors never reach the publisher
                logger.error(f"Event handler for '{topic}' failed: {e}")
