"""
Learning Session Controller

Walks the user through the alphabet one letter at a time. Every classified
frame is compared with the current target letter; a confident match shows
"correct" feedback and, after a short confirmation hold, advances to the
next letter. Finishing "Z" ends the session.

All session state lives in a single `Session` object guarded by one lock.
Every change is published on the event bus as a `SessionSnapshot`.

Pending confirmations are tied to a generation counter: starting, stopping
or advancing bumps the generation and cancels the pending timer, so a
confirmation that fires late is simply dropped. An incorrect result only
changes the feedback; the confirmation checks it when it fires.
"""
import logging
import threading
from dataclasses import asdict, dataclass
from typing import Callable, Optional

from asl_learn.alphabet import ALPHABET, FIRST_INDEX, LAST_INDEX
from asl_learn.classifier import Classification, Classifier
from asl_learn.config import LearningConfig
from asl_learn.events import (
    EventBus,
    FRAME_MISSING,
    SESSION_ADVANCED,
    SESSION_COMPLETED,
    SESSION_FEEDBACK,
    SESSION_STARTED,
    SESSION_STOPPED,
)
from asl_learn.polling import FramePoller

logger = logging.getLogger(__name__)

CORRECT_TEXT = "Correct!"
INCORRECT_TEXT = "Try again"

TimerFactory = Callable[..., "threading.Timer"]


@dataclass
class Session:
    """Mutable learning session state. Only the controller writes to it."""
    active: bool = False
    current_index: int = FIRST_INDEX
    target_letter: str = ALPHABET[FIRST_INDEX]
    last_label: Optional[str] = None
    last_confidence: float = 0.0
    feedback_visible: bool = False
    feedback_correct: bool = False
    feedback_text: str = ""
    completed: bool = False

    def clear_feedback(self):
        self.feedback_visible = False
        self.feedback_correct = False
        self.feedback_text = ""

    def clear_result(self):
        self.last_label = None
        self.last_confidence = 0.0


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only copy of the session handed to subscribers."""
    active: bool
    current_index: int
    target_letter: str
    last_label: Optional[str]
    last_confidence: float
    feedback_visible: bool
    feedback_correct: bool
    feedback_text: str
    completed: bool

    @property
    def progress(self) -> float:
        """Fraction of the alphabet already signed correctly."""
        if self.completed:
            return 1.0
        return self.current_index / len(ALPHABET)

    @classmethod
    def of(cls, session: Session) -> "SessionSnapshot":
        return cls(**asdict(session))


def _default_timer(delay: float, callback: Callable, args=()) -> threading.Timer:
    timer = threading.Timer(delay, callback, args=args)
    timer.daemon = True
    return timer


class SessionController:
    """
    Owns the learning session lifecycle and the match/advance decision.

    Args:
        frame_source: Object with a non-blocking ``get_current_frame()``
        classifier: Classifier used by the polling loop
        config: Thresholds and timings
        events: Bus the session snapshots are published on
        timer_factory: ``(delay, callback, args) -> timer`` with ``start()`` and
            ``cancel()``; defaults to a daemon `threading.Timer`
    """

    def __init__(self, frame_source, classifier: Classifier,
                 config: Optional[LearningConfig] = None,
                 events: Optional[EventBus] = None,
                 timer_factory: Optional[TimerFactory] = None):
        self.config = config or LearningConfig()
        self.events = events or EventBus()
        self._timer_factory = timer_factory or _default_timer

        self._lock = threading.RLock()
        self._session = Session()
        self._generation = 0
        self._pending = None

        self.poller = FramePoller(
            frame_source, classifier,
            on_result=self.submit,
            interval=self.config.poll_interval,
            retry=self.config.retry,
            on_missing=self._on_frame_missing,
            on_exhausted=self.stop,
            name="LearningPoller",
        )

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_pending_advance(self) -> bool:
        with self._lock:
            return self._pending is not None

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot.of(self._session)

    def start(self) -> SessionSnapshot:
        """Start (or restart) a session at letter A and begin polling."""
        with self._lock:
            self._invalidate_pending()
            self._session = Session(active=True)
            snapshot = self._publish(SESSION_STARTED)
            self.poller.start()
        logger.info(f"🎓 Learning session started, target: {snapshot.target_letter}")
        return snapshot

    def stop(self) -> SessionSnapshot:
        """End the session and halt polling. Safe to call repeatedly."""
        with self._lock:
            return self._stop(completed=False)

    def close(self) -> None:
        """Stop the session and wait for the polling thread to exit."""
        self.stop()
        self.poller.join()

    def submit(self, result: Classification) -> SessionSnapshot:
        """Poller callback: feed one classification into the session."""
        label = result.label if result.is_signal else (result.error or result.label)
        return self.submit_classification(result.label, result.confidence, display_label=label)

    def submit_classification(self, label: str, confidence: float,
                              display_label: Optional[str] = None) -> SessionSnapshot:
        """
        Compare a classification with the target letter and update feedback.

        A matching label with confidence above the threshold shows "correct"
        feedback and schedules the delayed advance. Anything else only shows
        "incorrect" feedback; a pending advance re-checks the feedback when it
        fires.
        """
        with self._lock:
            session = self._session
            session.last_label = display_label or label
            session.last_confidence = confidence

            if not session.active:
                logger.debug(f"Ignoring '{label}' ({confidence:.2f}): no active session")
                return SessionSnapshot.of(session)

            target = session.target_letter
            is_match = label.upper() == target.upper()
            is_confident = confidence > self.config.match_threshold
            logger.debug(f"Target {target} | predicted '{label}' ({confidence:.2f}) | "
                         f"match={is_match} confident={is_confident}")

            session.feedback_visible = True
            if is_match and is_confident:
                session.feedback_correct = True
                session.feedback_text = CORRECT_TEXT
                logger.info(f"✅ Correct sign for {target} ({confidence:.2f})")
                self._schedule_advance(target)
            else:
                session.feedback_correct = False
                if display_label and display_label != label:
                    session.feedback_text = display_label
                else:
                    session.feedback_text = INCORRECT_TEXT
                if not is_match:
                    logger.debug(f"❌ '{label}' does not match target {target}")
                else:
                    logger.debug(f"❌ Confidence {confidence:.2f} below {self.config.match_threshold}")

            return self._publish(SESSION_FEEDBACK)

    def advance(self) -> SessionSnapshot:
        """Move to the next letter, or end the session after the last one."""
        with self._lock:
            session = self._session
            if not session.active:
                return SessionSnapshot.of(session)
            self._invalidate_pending()
            session.clear_feedback()

            if session.current_index < LAST_INDEX:
                previous = session.target_letter
                session.current_index += 1
                session.target_letter = ALPHABET[session.current_index]
                logger.info(f"➡️ Advancing from {previous} to {session.target_letter}")
                return self._publish(SESSION_ADVANCED)

            logger.info("🎉 Congratulations! Alphabet complete.")
            return self._stop(completed=True)

    def _stop(self, completed: bool) -> SessionSnapshot:
        # Caller holds the lock: signal the poller, never join it here.
        session = self._session
        was_active = session.active
        self._invalidate_pending()
        session.active = False
        if was_active:
            session.completed = completed
        session.clear_feedback()
        session.clear_result()
        self.poller.stop(wait=False)
        if completed:
            self._publish(SESSION_COMPLETED)
        snapshot = self._publish(SESSION_STOPPED)
        if was_active:
            logger.info(f"🛑 Learning session stopped at {snapshot.target_letter}")
        return snapshot

    def _schedule_advance(self, target: str) -> None:
        if self._pending is not None:
            return
        generation = self._generation
        timer = self._timer_factory(self.config.confirmation_delay, self._confirm_advance,
                                    args=(generation, target))
        self._pending = timer
        timer.start()

    def _confirm_advance(self, generation: int, target: str) -> None:
        with self._lock:
            session = self._session
            if generation != self._generation:
                logger.debug(f"Skipping stale advance for {target} (generation {generation})")
                return
            self._pending = None
            if not (session.active and session.feedback_correct and session.target_letter == target):
                logger.debug(f"Skipping advance: active={session.active}, "
                             f"correct={session.feedback_correct}, target={session.target_letter}")
                return
            self.advance()

    def _invalidate_pending(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _on_frame_missing(self, misses: int) -> None:
        with self._lock:
            if self._session.active:
                self.events.publish(FRAME_MISSING, misses)

    def _publish(self, topic: str) -> SessionSnapshot:
        snapshot = SessionSnapshot.of(self._session)
        self.events.publish(topic, snapshot)
        return snapshot
