"""Base face detector interface."""

from abc import ABC, abstractmethod
from typing import List

import numpy as np

from ..color import ColorFormat
from .types import DetectedFace


class BaseFaceDetector(ABC):
    """Abstract base class for face detectors."""

    @abstractmethod
    def detect(
        self,
        image_bytes: np.ndarray,
        width: int,
        height: int,
        color_format: ColorFormat = ColorFormat.NV21,
    ) -> List[DetectedFace]:
        """Detect faces in an image buffer.

        Args:
            image_bytes: Image buffer in the given color format
            width: Image width in pixels
            height: Image height in pixels
            color_format: Layout of image_bytes

        Returns:
            List of DetectedFace objects, possibly empty
        """
        pass
