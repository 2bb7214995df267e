"""Image loading and cropping helpers."""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def load_rgb_image(path: Union[str, Path]) -> Optional[np.ndarray]:
    """Decode an image file into an RGB uint8 array.

    Returns None if OpenCV cannot read the file.
    """
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        return None
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


def clamp_bbox(
    bbox: Tuple[int, int, int, int],
    image_shape: Tuple[int, ...],
) -> Tuple[int, int, int, int]:
    """Clip an (x, y, w, h) box to the image bounds."""
    img_h, img_w = image_shape[:2]
    x, y, w, h = bbox
    x1 = min(max(0, int(x)), img_w)
    y1 = min(max(0, int(y)), img_h)
    x2 = min(max(0, int(x + w)), img_w)
    y2 = min(max(0, int(y + h)), img_h)
    return x1, y1, x2 - x1, y2 - y1


def crop_face(image: np.ndarray, bbox: Tuple[int, int, int, int]) -> np.ndarray:
    """Crop an (x, y, w, h) box out of an image, clipped to its bounds.

    Raises:
        ValueError: If the clipped box is empty.
    """
    x, y, w, h = clamp_bbox(bbox, image.shape)
    if w <= 0 or h <= 0:
        raise ValueError(f"Bounding box {bbox} lies outside image of shape {image.shape}")
    return image[y:y + h, x:x + w]
