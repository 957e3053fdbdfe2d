"""
Landmark sign classifier model and checkpoint handling.

Checkpoints are ``torch.save`` dictionaries::

    {
        'model_state_dict': ...,
        'classes': ['A', 'B', ...],
        'config': {'input_dim': 63, 'hidden_dims': [256, 128, 64], 'dropout': 0.3},
    }
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import torch
import torch.nn as nn

from asl_learn.errors import ModelLoadError
from asl_learn.preprocess import FEATURE_SIZE

logger = logging.getLogger(__name__)


class LandmarkClassifier(nn.Module):
    """Lightweight classifier over normalized MediaPipe hand landmarks"""

    def __init__(self, num_classes: int, input_dim: int = FEATURE_SIZE,
                 hidden_dims: Sequence[int] = (256, 128, 64), dropout: float = 0.3):
        super(LandmarkClassifier, self).__init__()

        layers = []
        in_features = input_dim
        for i, hidden in enumerate(hidden_dims):
            layers += [nn.Linear(in_features, hidden), nn.ReLU()]
            # Dropout after every hidden layer but the last
            if i < len(hidden_dims) - 1:
                layers.append(nn.Dropout(dropout))
            in_features = hidden
        layers.append(nn.Linear(in_features, num_classes))

        self.input_dim = input_dim
        self.hidden_dims = list(hidden_dims)
        self.dropout = dropout
        self.classifier = nn.Sequential(*layers)

    def forward(self, x):
        return self.classifier(x)

    def config(self) -> Dict:
        return {
            'input_dim': self.input_dim,
            'hidden_dims': self.hidden_dims,
            'dropout': self.dropout,
        }


def get_device() -> torch.device:
    """Pick the best available device."""
    if torch.backends.mps.is_available():
        return torch.device("mps")
    if torch.cuda.is_available():
        return torch.device("cuda")
    return torch.device("cpu")


def save_checkpoint(model: LandmarkClassifier, classes: List[str], path) -> Path:
    """Write a checkpoint that `load_checkpoint` can read back."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    torch.save({
        'model_state_dict': model.state_dict(),
        'classes': list(classes),
        'config': model.config(),
    }, path)
    logger.info(f"💾 Model saved to {path}")
    return path


def load_checkpoint(path, device: Optional[torch.device] = None) -> Tuple[LandmarkClassifier, List[str]]:
    """
    Load a trained landmark classifier.

    Args:
        path: Checkpoint file
        device: Device to move the model to (defaults to `get_device()`)

    Returns:
        (model in eval mode, ordered class labels)

    Raises:
        ModelLoadError: If the file is missing or does not hold a usable model
    """
    path = Path(path)
    device = device or get_device()
    if not path.exists():
        raise ModelLoadError(f"Model not found: {path}")

    try:
        checkpoint = torch.load(path, map_location=device)
    except Exception as e:
        raise ModelLoadError(f"Could not read checkpoint {path}: {e}") from e

    if not isinstance(checkpoint, dict) or 'model_state_dict' not in checkpoint:
        raise ModelLoadError(f"Checkpoint {path} has no 'model_state_dict'")
    classes = checkpoint.get('classes')
    if not classes:
        raise ModelLoadError(f"Checkpoint {path} has no class list")

    config = checkpoint.get('config', {})
    model = LandmarkClassifier(
        num_classes=len(classes),
        input_dim=config.get('input_dim', FEATURE_SIZE),
        hidden_dims=config.get('hidden_dims', (256, 128, 64)),
        dropout=config.get('dropout', 0.3),
    )
    try:
        model.load_state_dict(checkpoint['model_state_dict'])
    except RuntimeError as e:
        raise ModelLoadError(f"Checkpoint {path} does not match the model: {e}") from e

    model.to(device)
    model.eval()

    total_params = sum(p.numel() for p in model.parameters())
    logger.info(f"✅ Model loaded from {path}")
    logger.info(f"🎯 Classes: {list(classes)}")
    logger.info(f"Parameters: {total_params:,} | Device: {device}")
    return model, list(classes)
