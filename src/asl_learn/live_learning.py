#!/usr/bin/env python3
"""
Live ASL Learning

Camera preview with a guided alphabet lesson on top. The learning session
runs in the background and pushes its state over the event bus; this
window only renders the latest state and forwards keyboard commands.

Controls:
- L: Start (or restart) the alphabet lesson at A
- X: Stop the lesson
- T: Toggle free spelling mode
- C: Clear spelled text
- Q: Quit

Author: CV-ASL Team
"""
import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import Dict, Optional

import cv2
import numpy as np

from asl_learn.alphabet import ALPHABET, reference_image_name
from asl_learn.capture import CameraFrameSource
from asl_learn.config import LearningConfig, SpellingConfig, add_config_arguments, configs_from_args
from asl_learn.errors import CameraError, ModelLoadError
from asl_learn.events import (
    ALL_TOPICS,
    EventBus,
    FRAME_MISSING,
    SESSION_COMPLETED,
    SESSION_STARTED,
    SESSION_STOPPED,
    SPELLING_STARTED,
    SPELLING_STOPPED,
    SPELLING_UPDATED,
)
from asl_learn.session import SessionController, SessionSnapshot
from asl_learn.spelling import SpellingController

logger = logging.getLogger(__name__)

WINDOW_NAME = "ASL Alphabet Learning"

GREEN = (0, 255, 0)
RED = (0, 0, 255)
YELLOW = (0, 255, 255)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


class LiveLearningApp:
    """
    Wires camera, classifier, learning session and spelling mode to an
    OpenCV window.
    """

    def __init__(self, classifier, frame_source=None,
                 learning_config: Optional[LearningConfig] = None,
                 spelling_config: Optional[SpellingConfig] = None,
                 reference_dir: Optional[str] = None):
        self.frame_source = frame_source or CameraFrameSource()
        self.events = EventBus()
        self.session = SessionController(self.frame_source, classifier,
                                         config=learning_config, events=self.events)
        self.spelling = SpellingController(self.frame_source, classifier,
                                           config=spelling_config, events=self.events)
        self.reference_dir = Path(reference_dir) if reference_dir else None
        self._reference_cache: Dict[str, Optional[np.ndarray]] = {}

        # --- State pushed by the sessions ---
        self._state_lock = threading.Lock()
        self.snapshot: SessionSnapshot = self.session.snapshot()
        self.spelled_text = ""
        self.spelling_active = False
        self.banner = "Press L to start learning"
        self.missing_frames = 0

        self.events.subscribe(ALL_TOPICS, self._on_event)

    def _on_event(self, topic: str, payload) -> None:
        with self._state_lock:
            if isinstance(payload, SessionSnapshot):
                self.snapshot = payload
                self.missing_frames = 0
                if topic == SESSION_STARTED:
                    self.banner = ""
                elif topic == SESSION_STOPPED and not payload.completed:
                    self.banner = "Press L to start learning"
                elif topic == SESSION_COMPLETED:
                    self.banner = "Congratulations! Alphabet complete."
            elif topic == FRAME_MISSING:
                self.missing_frames = payload
            elif topic in (SPELLING_STARTED, SPELLING_UPDATED, SPELLING_STOPPED):
                self.spelled_text = payload
                self.spelling_active = topic != SPELLING_STOPPED

    # --- Commands ---

    def start_learning(self):
        self.spelling.stop()
        self.session.start()

    def stop_learning(self):
        self.session.stop()

    def toggle_spelling(self):
        if self.spelling.active:
            self.spelling.stop()
        else:
            self.session.stop()
            self.spelling.start()
            with self._state_lock:
                self.banner = ""

    def _handle_keypress(self, key: int) -> bool:
        """Apply a key command. Returns False when the app should quit."""
        if key == ord('q'):
            logger.info("👋 Exiting...")
            return False
        elif key == ord('l'):
            self.start_learning()
        elif key == ord('x'):
            self.stop_learning()
        elif key == ord('t'):
            self.toggle_spelling()
        elif key == ord('c'):
            self.spelling.clear()
        return True

    # --- Rendering ---

    def _reference_image(self, letter: str) -> Optional[np.ndarray]:
        if self.reference_dir is None:
            return None
        if letter not in self._reference_cache:
            image = None
            for ext in (".png", ".jpg", ".jpeg"):
                path = self.reference_dir / f"{reference_image_name(letter)}{ext}"
                if path.exists():
                    image = cv2.imread(str(path))
                    break
            if image is None:
                logger.debug(f"No reference image for {letter} in {self.reference_dir}")
            self._reference_cache[letter] = image
        return self._reference_cache[letter]

    def _draw_ui(self, frame: np.ndarray) -> np.ndarray:
        """Draw the lesson state onto `frame`."""
        with self._state_lock:
            snapshot = self.snapshot
            spelled_text = self.spelled_text
            spelling_active = self.spelling_active
            banner = self.banner
            missing_frames = self.missing_frames

        h, w = frame.shape[:2]

        if snapshot.active:
            cv2.putText(frame, "Sign the letter:", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.8, WHITE, 2)

            letter = snapshot.target_letter
            font_scale, thickness = 4, 8
            (text_w, text_h), baseline = cv2.getTextSize(letter, cv2.FONT_HERSHEY_SIMPLEX, font_scale, thickness)
            text_x = (w - text_w) // 2
            text_y = 60 + text_h
            cv2.rectangle(frame, (text_x - 20, text_y - text_h - 20),
                          (text_x + text_w + 20, text_y + baseline + 20), BLACK, -1)
            cv2.putText(frame, letter, (text_x, text_y), cv2.FONT_HERSHEY_SIMPLEX, font_scale, YELLOW, thickness)

            if snapshot.feedback_visible:
                color = GREEN if snapshot.feedback_correct else RED
                cv2.putText(frame, snapshot.feedback_text, (10, h - 70),
                            cv2.FONT_HERSHEY_SIMPLEX, 1.0, color, 2)

            if snapshot.last_label:
                detected = f"Detected: {snapshot.last_label} ({snapshot.last_confidence:.2f})"
                cv2.putText(frame, detected, (10, h - 40), cv2.FONT_HERSHEY_SIMPLEX, 0.6, WHITE, 1)

            # Progress bar
            bar_right = int((w - 20) * snapshot.progress)
            cv2.rectangle(frame, (10, h - 20), (w - 10, h - 10), (100, 100, 100), -1)
            cv2.rectangle(frame, (10, h - 20), (10 + bar_right, h - 10), GREEN, -1)
            cv2.putText(frame, f"{snapshot.current_index + 1}/{len(ALPHABET)}", (w - 80, h - 30),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, WHITE, 1)

            reference = self._reference_image(letter)
            if reference is not None:
                size = min(120, h // 4, w // 4)
                thumb = cv2.resize(reference, (size, size))
                frame[10:10 + size, w - size - 10:w - 10] = thumb

        elif spelling_active:
            cv2.putText(frame, "Spelling mode (T to stop, C to clear)", (10, 30),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.7, WHITE, 2)
            cv2.putText(frame, spelled_text or "_", (10, h - 30),
                        cv2.FONT_HERSHEY_SIMPLEX, 1.2, YELLOW, 2)

        if banner:
            cv2.putText(frame, banner, (10, h // 2), cv2.FONT_HERSHEY_SIMPLEX, 0.9, YELLOW, 2)

        if missing_frames:
            cv2.putText(frame, f"No camera frame ({missing_frames} polls)", (10, 60),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, RED, 2)

        return frame

    def run(self):
        """Main loop for the application."""
        logger.info("🟢 Starting Live ASL Learning...")
        logger.info("📋 Controls: L=Learn | X=Stop | T=Spelling | C=Clear | Q=Quit")

        self.frame_source.start()
        blank = np.zeros((480, 640, 3), dtype=np.uint8)
        try:
            while True:
                key = cv2.waitKey(30) & 0xFF
                if not self._handle_keypress(key):
                    break

                frame = self.frame_source.get_current_frame()
                ui_frame = self._draw_ui(frame if frame is not None else blank.copy())
                cv2.imshow(WINDOW_NAME, ui_frame)
        finally:
            self.spelling.stop()
            self.session.close()
            self.frame_source.stop()
            cv2.destroyAllWindows()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Live ASL alphabet learning")
    parser.add_argument("--model", "-m", required=True,
                        help="Path to trained landmark classifier checkpoint")
    parser.add_argument("--camera", "-c", type=int, default=0,
                        help="Camera ID (default: 0)")
    parser.add_argument("--reference-dir", type=str, default=None,
                        help="Directory with asl_<letter>_sign reference images")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: INFO)")
    return add_config_arguments(parser)


def main(argv=None) -> int:
    """Entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s - %(levelname)s - %(message)s')

    from asl_learn.vision.pose_classifier import PoseClassifier

    try:
        learning_config, spelling_config = configs_from_args(args)
        classifier = PoseClassifier.from_checkpoint(args.model)
        app = LiveLearningApp(
            classifier,
            frame_source=CameraFrameSource(args.camera),
            learning_config=learning_config,
            spelling_config=spelling_config,
            reference_dir=args.reference_dir,
        )
        app.run()
    except ModelLoadError as e:
        logger.error(f"❌ Could not load model: {e}")
        return 1
    except CameraError as e:
        logger.error(f"❌ Camera error: {e}")
        return 1
    except ValueError as e:
        logger.error(f"❌ Invalid configuration: {e}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
