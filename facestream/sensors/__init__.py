"""Camera sources feeding the frame analyzer."""

from .camera import Camera, CameraConfig, Frame

__all__ = [
    "Camera",
    "CameraConfig",
    "Frame",
]
