"""
Frame Polling Loop

Periodically pulls the newest frame from a frame source, classifies it and
hands the result to a session. Runs on a daemon thread that is stopped
through a per-run `threading.Event`, so a stop request also interrupts the
wait between polls.
"""
import logging
import threading
from typing import Callable, Optional

from asl_learn.classifier import Classification, Classifier, classify_frame
from asl_learn.config import RetryPolicy
from asl_learn.errors import FrameUnavailable

logger = logging.getLogger(__name__)


class FramePoller:
    """
    Drives classification at a fixed interval.

    Args:
        frame_source: Object with a non-blocking ``get_current_frame()``
        classifier: Classifier used on each frame
        on_result: Called with every `Classification`
        interval: Seconds between polls
        retry: What to do when no frame is available
        on_missing: Called with the consecutive miss count whenever the
            retry policy asks for a warning
        on_exhausted: Called once when the retry policy gives up
    """

    def __init__(self, frame_source, classifier: Classifier,
                 on_result: Callable[[Classification], None],
                 interval: float = 1.0,
                 retry: Optional[RetryPolicy] = None,
                 on_missing: Optional[Callable[[int], None]] = None,
                 on_exhausted: Optional[Callable[[], None]] = None,
                 name: str = "FramePoller"):
        self.frame_source = frame_source
        self.classifier = classifier
        self.on_result = on_result
        self.interval = interval
        self.retry = retry or RetryPolicy()
        self.on_missing = on_missing
        self.on_exhausted = on_exhausted
        self.name = name

        self.misses = 0
        self.polls = 0
        self._thread: Optional[threading.Thread] = None
        self._last_thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        with self._lock:
            return (self._thread is not None and self._thread.is_alive()
                    and not self._stop_event.is_set())

    def start(self) -> None:
        """Start polling on a background thread. No-op if already running."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set():
                return
            self.misses = 0
            self._stop_event = threading.Event()
            self._thread = threading.Thread(target=self._run, args=(self._stop_event,),
                                            name=self.name, daemon=True)
            self._thread.start()
        logger.info(f"▶️ {self.name} started (interval {self.interval:.2f}s)")

    def stop(self, wait: bool = True, timeout: Optional[float] = 2.0) -> None:
        """
        Stop polling.

        Args:
            wait: Join the polling thread (skipped when called from that thread)
            timeout: Seconds to wait for the thread to exit
        """
        with self._lock:
            thread, stop_event = self._thread, self._stop_event
            self._thread = None
            if thread is not None:
                self._last_thread = thread
        if thread is None:
            return
        stop_event.set()
        logger.info(f"⏹️ {self.name} stopped")
        if wait:
            self._join(thread, timeout)

    def join(self, timeout: Optional[float] = 2.0) -> None:
        """Wait for the most recently stopped polling thread to exit."""
        with self._lock:
            thread = self._last_thread
        if thread is not None:
            self._join(thread, timeout)

    def _join(self, thread: threading.Thread, timeout: Optional[float]) -> None:
        if thread is threading.current_thread() or not thread.is_alive():
            return
        thread.join(timeout)
        if thread.is_alive():
            logger.warning(f"{self.name} did not stop within {timeout}s")

    def next_delay(self) -> float:
        return self.retry.next_delay(self.interval, self.misses)

    def poll_once(self) -> bool:
        """
        Run a single poll.

        Returns:
            True if a frame was classified, False if no frame was available
        """
        self.polls += 1
        frame = self._current_frame()

        if frame is None:
            self.misses += 1
            logger.debug(f"No frame available, retrying (miss #{self.misses})")
            if self.retry.should_warn(self.misses):
                logger.warning(f"📷 No frame for {self.misses} consecutive polls")
                if self.on_missing is not None:
                    self.on_missing(self.misses)
            return False

        self.misses = 0
        result = classify_frame(self.classifier, frame)
        self.on_result(result)
        return True

    def _current_frame(self):
        try:
            return self.frame_source.get_current_frame()
        except FrameUnavailable:
            return None

    def _run(self, stop_event: threading.Event) -> None:
        delay = self.interval
        while not stop_event.wait(delay):
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"❌ Poll failed: {e}")

            if self.retry.exhausted(self.misses):
                logger.error(f"❌ Giving up after {self.misses} polls without a frame")
                stop_event.set()
                if self.on_exhausted is not None:
                    self.on_exhausted()
                break

            try:
                delay = self.next_delay()
            except Exception as e:
                logger.error(f"❌ Could not compute retry delay, using {self.interval:.2f}s: {e}")
                delay = self.interval
