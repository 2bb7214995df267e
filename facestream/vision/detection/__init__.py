"""Face detection backends.

Detectors receive the NV21 buffer produced by ``rgb_to_nv21`` together with
the image size and return the faces they found.
"""

from .types import DetectedFace
from .base import BaseFaceDetector
from .haar import HaarCascadeDetector

DETECTION_BACKENDS = {
    "haar_cascade": HaarCascadeDetector,
}

__all__ = [
    "DetectedFace",
    "BaseFaceDetector",
    "HaarCascadeDetector",
    "DETECTION_BACKENDS",
]
