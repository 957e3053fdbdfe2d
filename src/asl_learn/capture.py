"""
Webcam frame source for ASL learning sessions.

A background thread keeps reading the camera and stores only the newest
frame, so `get_current_frame()` never blocks the session poller.
"""
import logging
import threading
import time
from typing import Optional

import cv2
import numpy as np

from asl_learn.errors import CameraError

logger = logging.getLogger(__name__)


def setup_camera(device_id: int = 0, width: int = 640, height: int = 480) -> cv2.VideoCapture:
    """Initialize the webcam."""
    cap = cv2.VideoCapture(device_id)
    if not cap.isOpened():
        raise CameraError(f"Could not open camera device {device_id}")

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)  # Reduce buffer to minimize lag
    return cap


def mirror_frame(frame: np.ndarray) -> np.ndarray:
    """Flip the frame horizontally so the preview behaves like a mirror."""
    return cv2.flip(frame, 1)


class CameraFrameSource:
    """
    Keeps the most recent camera frame available for polling.

    Args:
        device_id: OpenCV camera index
        mirror: Flip frames horizontally
        capture: Already opened capture object (mainly for tests); opened
            with `setup_camera` on `start()` otherwise
    """

    def __init__(self, device_id: int = 0, mirror: bool = True, capture=None):
        self.device_id = device_id
        self.mirror = mirror
        self.cap = capture

        self.frames_read = 0
        self.read_failures = 0
        self._latest: Optional[np.ndarray] = None
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "CameraFrameSource":
        if self.is_running:
            return self
        if self.cap is None:
            self.cap = setup_camera(self.device_id)

        actual_width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(f"📹 Camera {self.device_id}: {actual_width}x{actual_height}")

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="CameraFrameSource", daemon=True)
        self._thread.start()
        return self

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        if self.cap is not None:
            self.cap.release()
            self.cap = None
        with self._lock:
            self._latest = None

    def read_once(self) -> bool:
        """Grab one frame from the camera. Returns False if the read failed."""
        ret, frame = self.cap.read()
        if not ret or frame is None:
            self.read_failures += 1
            logger.debug("Failed to grab frame")
            return False

        if self.mirror:
            frame = mirror_frame(frame)
        with self._lock:
            self._latest = frame
        self.frames_read += 1
        return True

    def get_current_frame(self) -> Optional[np.ndarray]:
        """Return a copy of the newest frame, or None if nothing was captured yet."""
        with self._lock:
            if self._latest is None:
                return None
            return self._latest.copy()

    def _run(self) -> None:
        while not self._stop_event.is_set():
            if not self.read_once():
                time.sleep(0.05)

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
