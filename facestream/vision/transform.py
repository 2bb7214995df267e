"""Mapping of detector-space boxes into display coordinates."""

from typing import Optional, Tuple

import numpy as np

VALID_ROTATIONS = (0, 90, 180, 270)

# Exact (cos, sin) for quarter turns
_QUARTER_TURNS = {
    0: (1, 0),
    90: (0, 1),
    180: (-1, 0),
    270: (0, -1),
}


class CoordinateTransform:
    """Maps bounding boxes from image pixels to view coordinates.

    The box is first scaled from the frame size to the view size (when a frame
    size is known), then rotated by the negative of the display rotation about
    the view center, then mirrored horizontally about the view center when the
    active camera is front-facing.
    """

    def __init__(
        self,
        view_width: float,
        view_height: float,
        rotation_degrees: int = 0,
        front_facing: bool = False,
        frame_size: Optional[Tuple[int, int]] = None,
    ):
        """Initialize the transform.

        Args:
            view_width: Width of the display view
            view_height: Height of the display view
            rotation_degrees: Current display rotation (0, 90, 180 or 270)
            front_facing: True when the front camera is active
            frame_size: (width, height) of the analyzed frames, if known
        """
        self.view_width = float(view_width)
        self.view_height = float(view_height)
        self.frame_size = frame_size
        self.front_facing = bool(front_facing)
        self.rotation_degrees = 0
        self.set_rotation(rotation_degrees)

    def set_rotation(self, rotation_degrees: int) -> None:
        """Update the display rotation."""
        if rotation_degrees not in VALID_ROTATIONS:
            raise ValueError(
                f"Rotation must be one of {VALID_ROTATIONS}, got {rotation_degrees}"
            )
        self.rotation_degrees = int(rotation_degrees)

    def set_front_facing(self, front_facing: bool) -> None:
        """Update the camera facing."""
        self.front_facing = bool(front_facing)

    def set_frame_size(self, width: int, height: int) -> None:
        self.frame_size = (int(width), int(height))

    @property
    def matrix(self) -> np.ndarray:
        """Return the 3x3 homogeneous matrix for the current state."""
        cx = self.view_width / 2.0
        cy = self.view_height / 2.0

        scale = np.eye(3)
        if self.frame_size:
            frame_w, frame_h = self.frame_size
            scale[0, 0] = self.view_width / frame_w
            scale[1, 1] = self.view_height / frame_h

        # Rotation by -theta about (cx, cy)
        cos, sin = _QUARTER_TURNS[self.rotation_degrees]
        rotate = np.array([
            [cos, sin, cx - cos * cx - sin * cy],
            [-sin, cos, cy + sin * cx - cos * cy],
            [0, 0, 1],
        ], dtype=np.float64)

        mirror = np.eye(3)
        if self.front_facing:
            mirror[0, 0] = -1.0
            mirror[0, 2] = 2.0 * cx

        return mirror @ rotate @ scale

    def map_point(self, x: float, y: float) -> Tuple[float, float]:
        """Map a single point into view coordinates."""
        px, py, _ = self.matrix @ np.array([x, y, 1.0])
        return float(px), float(py)

    def map_bbox(
        self,
        bbox: Tuple[float, float, float, float],
    ) -> Tuple[float, float, float, float]:
        """Map an (x, y, w, h) box into an axis-aligned view box.

        Args:
            bbox: Box in image pixel coordinates

        Returns:
            (x, y, w, h) in view coordinates
        """
        x, y, w, h = bbox
        corners = np.array([
            [x, y, 1.0],
            [x + w, y, 1.0],
            [x, y + h, 1.0],
            [x + w, y + h, 1.0],
        ])
        mapped = corners @ self.matrix.T
        x1, y1 = mapped[:, 0].min(), mapped[:, 1].min()
        x2, y2 = mapped[:, 0].max(), mapped[:, 1].max()
        return float(x1), float(y1), float(x2 - x1), float(y2 - y1)
