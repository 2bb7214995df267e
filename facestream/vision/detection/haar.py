"""Haar Cascade face detector."""

import logging
from typing import List, Tuple

import cv2
import numpy as np

from ..color import ColorFormat, nv21_luma
from .base import BaseFaceDetector
from .types import DetectedFace

logger = logging.getLogger(__name__)


class HaarCascadeDetector(BaseFaceDetector):
    """Face detector using OpenCV Haar Cascades on the NV21 luma plane."""

    def __init__(
        self,
        scale_factor: float = 1.1,
        min_neighbors: int = 5,
        min_size: Tuple[int, int] = (30, 30),
    ):
        """Initialize Haar Cascade detector.

        Args:
            scale_factor: Scale factor for multi-scale detection
            min_neighbors: Minimum neighbors for detection
            min_size: Minimum face size to detect
        """
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = min_size

        # Load pre-trained cascade
        cascade_path = cv2.data.haarcascades + "haarcascade_frontalface_default.xml"  # type: ignore
        self.cascade = cv2.CascadeClassifier(cascade_path)

        if self.cascade.empty():
            raise RuntimeError(f"Failed to load cascade from {cascade_path}")

    def detect(
        self,
        image_bytes: np.ndarray,
        width: int,
        height: int,
        color_format: ColorFormat = ColorFormat.NV21,
    ) -> List[DetectedFace]:
        """Detect faces using Haar Cascade, largest face first."""
        if color_format == ColorFormat.NV21:
            gray = nv21_luma(image_bytes, width, height)
        elif color_format == ColorFormat.RGB:
            rgb = np.asarray(image_bytes, dtype=np.uint8).reshape(height, width, 3)
            gray = cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)
        else:
            raise ValueError(f"Unsupported color format: {color_format}")

        faces = self.cascade.detectMultiScale(
            np.ascontiguousarray(gray),
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=self.min_size,
        )

        detected = [
            DetectedFace(x=int(x), y=int(y), width=int(w), height=int(h))
            for (x, y, w, h) in faces
        ]
        detected.sort(key=lambda f: f.area, reverse=True)
        logger.debug(f"Haar cascade found {len(detected)} face(s) in {width}x{height} image")

        return detected
