"""
MediaPipe hand landmark detection.

Wraps ``mediapipe.solutions.hands`` to return the 21 landmarks of a single
hand as a numpy array.
"""
import logging
from typing import Optional

import numpy as np

from asl_learn.preprocess import LANDMARK_DIMS, NUM_LANDMARKS

logger = logging.getLogger(__name__)


class HandLandmarkDetector:
    """Detects one hand and returns its landmarks in normalized image coordinates."""

    def __init__(self, min_detection_confidence: float = 0.5,
                 min_tracking_confidence: float = 0.5,
                 static_image_mode: bool = True):
        import mediapipe as mp

        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=static_image_mode,
            max_num_hands=1,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        logger.info("🖐️ MediaPipe hand detector ready")

    def detect(self, rgb_image: np.ndarray) -> Optional[np.ndarray]:
        """
        Find a hand in an RGB image.

        Returns:
            Array of shape (21, 3), or None if no hand was found
        """
        results = self.hands.process(rgb_image)
        if not results.multi_hand_landmarks:
            return None

        hand = results.multi_hand_landmarks[0]
        landmarks = np.array([[lm.x, lm.y, lm.z] for lm in hand.landmark], dtype=np.float32)
        if landmarks.shape != (NUM_LANDMARKS, LANDMARK_DIMS):
            logger.warning(f"Unexpected landmark shape: {landmarks.shape}")
            return None
        return landmarks

    def close(self):
        self.hands.close()
