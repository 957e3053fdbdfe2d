"""Shared builders for the vision tests."""
import numpy as np
import torch

from asl_learn.vision.model import LandmarkClassifier


def biased_model(classes, favourite, strength=10.0):
    """A model whose output always prefers `favourite`, regardless of input."""
    model = LandmarkClassifier(num_classes=len(classes))
    last = model.classifier[-1]
    with torch.no_grad():
        last.weight.zero_()
        last.bias.zero_()
        last.bias[classes.index(favourite)] = strength
    model.eval()
    return model


def open_hand_landmarks(offset=(0.0, 0.0, 0.0), scale=1.0):
    """Deterministic 21-point hand shape."""
    rng = np.random.default_rng(7)
    points = rng.uniform(-0.1, 0.1, size=(21, 3)).astype(np.float32)
    points[0] = 0.0
    return points * scale + np.asarray(offset, dtype=np.float32)
