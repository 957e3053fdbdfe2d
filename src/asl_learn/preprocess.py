"""
Preprocessing utilities for landmark-based sign classification.
"""
import cv2
import numpy as np
from typing import Optional

from asl_learn.errors import PreprocessingFailure

NUM_LANDMARKS = 21
LANDMARK_DIMS = 3
FEATURE_SIZE = NUM_LANDMARKS * LANDMARK_DIMS


def prepare_frame(frame: Optional[np.ndarray]) -> np.ndarray:
    """
    Validate a camera frame and convert it to the RGB layout the hand
    detector expects.

    Args:
        frame: BGR frame of shape (H, W, 3)

    Returns:
        Contiguous RGB uint8 frame

    Raises:
        PreprocessingFailure: If the frame is missing, empty or not 3-channel
    """
    if frame is None:
        raise PreprocessingFailure("No image")
    if not isinstance(frame, np.ndarray) or frame.size == 0:
        raise PreprocessingFailure("Empty image")
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise PreprocessingFailure(f"Expected a 3-channel image, got shape {frame.shape}")

    if frame.dtype != np.uint8:
        frame = np.clip(frame, 0, 255).astype(np.uint8)

    try:
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
    except cv2.error as e:
        raise PreprocessingFailure(f"Color conversion error: {e}") from e

    return np.ascontiguousarray(rgb)


def normalize_landmarks(landmarks: np.ndarray) -> np.ndarray:
    """
    Turn 21 hand landmarks into a translation- and scale-invariant feature vector.

    Landmarks are expressed relative to the wrist (landmark 0) and divided by
    the largest distance from the wrist, so the same hand shape gives the same
    features anywhere in the frame and at any distance from the camera.

    Args:
        landmarks: Array of shape (21, 3) with x, y, z per landmark

    Returns:
        Flat float32 vector of length 63
    """
    points = np.asarray(landmarks, dtype=np.float32)
    if points.shape != (NUM_LANDMARKS, LANDMARK_DIMS):
        raise PreprocessingFailure(
            f"Expected landmarks of shape ({NUM_LANDMARKS}, {LANDMARK_DIMS}), got {points.shape}")

    relative = points - points[0]
    scale = float(np.max(np.linalg.norm(relative, axis=1)))
    if scale > 1e-6:
        relative = relative / scale

    return relative.reshape(-1).astype(np.float32)
