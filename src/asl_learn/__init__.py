"""
ASL Learning Module

Guided ASL alphabet practice on top of live hand-pose classification.
Includes the learning session controller, frame polling, spelling mode,
the camera frame source and the landmark-based sign classifier.

Author: CV-ASL Team
"""

__version__ = "0.2.0"
