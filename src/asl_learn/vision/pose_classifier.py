"""
Hand pose sign classifier.

Detects hand landmarks with MediaPipe and classifies them with a
`LandmarkClassifier`. Each failure stage raises its own
`ClassificationError` so the sessions can tell the user what went wrong.
"""
import logging
from typing import List, Optional

import numpy as np
import torch
import torch.nn.functional as F

from asl_learn.classifier import Classifier, Prediction
from asl_learn.errors import InferenceFailure, NoHandDetected
from asl_learn.preprocess import normalize_landmarks, prepare_frame
from asl_learn.vision.model import LandmarkClassifier, get_device, load_checkpoint

logger = logging.getLogger(__name__)


class PoseClassifier(Classifier):
    """
    Classifies the sign shown by a single hand.

    Args:
        model: Trained landmark classifier
        classes: Label for each model output, in order
        detector: Object with ``detect(rgb) -> (21, 3) array | None``;
            defaults to a MediaPipe `HandLandmarkDetector`
        device: Device the model lives on
    """

    def __init__(self, model: LandmarkClassifier, classes: List[str],
                 detector=None, device: Optional[torch.device] = None):
        if detector is None:
            from asl_learn.vision.hand_landmarks import HandLandmarkDetector
            detector = HandLandmarkDetector()

        self.model = model
        self.classes = list(classes)
        self.detector = detector
        self.device = device or next(model.parameters()).device
        self.model.eval()

    @classmethod
    def from_checkpoint(cls, model_path, detector=None,
                        device: Optional[torch.device] = None) -> "PoseClassifier":
        device = device or get_device()
        model, classes = load_checkpoint(model_path, device)
        return cls(model, classes, detector=detector, device=device)

    def classify(self, image: np.ndarray) -> Prediction:
        rgb = prepare_frame(image)

        landmarks = self.detector.detect(rgb)
        if landmarks is None:
            raise NoHandDetected("No hand detected")

        features = normalize_landmarks(landmarks)

        try:
            input_tensor = torch.from_numpy(features).unsqueeze(0).to(self.device)
            with torch.no_grad():
                outputs = self.model(input_tensor)
                probabilities = F.softmax(outputs, dim=1)[0].cpu().numpy()
        except Exception as e:
            raise InferenceFailure(f"Processing error: {e}") from e

        best = int(np.argmax(probabilities))
        distribution = {label: float(p) for label, p in zip(self.classes, probabilities)}
        return Prediction(label=self.classes[best], probabilities=distribution)

    def close(self):
        if hasattr(self.detector, "close"):
            self.detector.close()
