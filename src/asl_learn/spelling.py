"""
Free spelling mode.

Instead of guiding the user through the alphabet, every confident
classification is appended to a running text. The control labels
``space`` and ``del`` insert a space and remove the last character;
``nothing`` is ignored.
"""
import logging
import threading
from typing import Optional

from asl_learn.classifier import Classification, Classifier
from asl_learn.config import SpellingConfig
from asl_learn.events import EventBus, SPELLING_STARTED, SPELLING_STOPPED, SPELLING_UPDATED
from asl_learn.polling import FramePoller

logger = logging.getLogger(__name__)


class SpellingController:
    """Accumulates confidently recognised signs into text."""

    def __init__(self, frame_source, classifier: Classifier,
                 config: Optional[SpellingConfig] = None,
                 events: Optional[EventBus] = None):
        self.config = config or SpellingConfig()
        self.events = events or EventBus()

        self._lock = threading.RLock()
        self._text = ""
        self._active = False
        self.last_label: Optional[str] = None
        self.last_confidence = 0.0

        self.poller = FramePoller(
            frame_source, classifier,
            on_result=self.submit,
            interval=self.config.poll_interval,
            retry=self.config.retry,
            on_exhausted=self.stop,
            name="SpellingPoller",
        )

    @property
    def text(self) -> str:
        with self._lock:
            return self._text

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    def start(self, clear: bool = True) -> None:
        with self._lock:
            self._active = True
            if clear:
                self._text = ""
            self.events.publish(SPELLING_STARTED, self._text)
            self.poller.start()
        logger.info("✍️ Spelling mode started")

    def stop(self) -> None:
        with self._lock:
            was_active = self._active
            self._active = False
            self.poller.stop(wait=False)
            self.events.publish(SPELLING_STOPPED, self._text)
        if was_active:
            logger.info(f"✍️ Spelling mode stopped: '{self._text}'")

    def clear(self) -> None:
        with self._lock:
            self._text = ""
            self.events.publish(SPELLING_UPDATED, self._text)

    def submit(self, result: Classification) -> str:
        """Apply one classification to the text and return the new text."""
        with self._lock:
            self.last_label = result.label if result.is_signal else result.error
            self.last_confidence = result.confidence

            if not self._active or not result.is_signal:
                return self._text
            if result.confidence <= self.config.confidence_threshold:
                return self._text

            label = result.label
            if label == self.config.delete_label:
                self._text = self._text[:-1]
            elif label == self.config.space_label:
                self._text += " "
            elif label == self.config.nothing_label:
                return self._text
            else:
                self._text += label

            logger.debug(f"Spelling text: '{self._text}'")
            self.events.publish(SPELLING_UPDATED, self._text)
            return self._text
