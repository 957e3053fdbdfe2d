"""Exceptions raised by the ASL learning pipeline."""


class ASLLearnError(Exception):
    """Base class for all errors raised by asl_learn."""


class FrameUnavailable(ASLLearnError):
    """The frame source has no frame to hand out right now."""


class CameraError(ASLLearnError):
    """The camera device could not be opened."""


class ModelLoadError(ASLLearnError):
    """The classifier checkpoint is missing or malformed."""


class ClassificationError(ASLLearnError):
    """A single frame could not be classified."""


class PreprocessingFailure(ClassificationError):
    """The frame could not be turned into model input."""


class NoHandDetected(ClassificationError):
    """No hand was found in the frame."""


class InferenceFailure(ClassificationError):
    """The model raised while running a prediction."""
