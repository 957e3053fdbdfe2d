"""
Classifier contract used by the session controllers.

A classifier turns one camera frame into a `Prediction` or raises a
`ClassificationError`. `classify_frame` wraps that call so the sessions
always get a `Classification` back: failures become the reserved
"no signal" result with zero confidence.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from asl_learn.errors import ClassificationError

logger = logging.getLogger(__name__)

NO_SIGNAL = "no signal"


@dataclass
class Prediction:
    """Raw classifier output: best label plus the full distribution."""
    label: str
    probabilities: Dict[str, float] = field(default_factory=dict)

    @property
    def confidence(self) -> float:
        return float(self.probabilities.get(self.label, 0.0))


@dataclass(frozen=True)
class Classification:
    """What the sessions consume: a label, its confidence and an optional failure reason."""
    label: str
    confidence: float
    error: Optional[str] = None

    @property
    def is_signal(self) -> bool:
        return self.error is None

    @classmethod
    def no_signal(cls, reason: str) -> "Classification":
        return cls(label=NO_SIGNAL, confidence=0.0, error=reason)


class Classifier:
    """Interface for frame classifiers."""

    def classify(self, image: np.ndarray) -> Prediction:
        raise NotImplementedError


def classify_frame(classifier: Classifier, frame: np.ndarray) -> Classification:
    """
    Classify a frame, mapping every failure to a no-signal result.

    Args:
        classifier: Anything with a ``classify(image) -> Prediction`` method
        frame: BGR camera frame

    Returns:
        Classification with the predicted label and its confidence, or
        ``Classification.no_signal(reason)`` if classification failed
    """
    try:
        prediction = classifier.classify(frame)
    except ClassificationError as e:
        logger.warning(f"⚠️ Classification failed ({type(e).__name__}): {e}")
        return Classification.no_signal(str(e) or type(e).__name__)
    except Exception as e:
        logger.error(f"❌ Unexpected classifier error: {e}")
        return Classification.no_signal(f"Processing error: {e}")

    confidence = min(max(prediction.confidence, 0.0), 1.0)
    return Classification(label=prediction.label, confidence=confidence)
