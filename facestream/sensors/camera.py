"""OpenCV camera source with front/rear lens switching."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

FrameCallback = Callable[["Frame"], None]
FacingListener = Callable[[bool], None]

# Consecutive failed reads before the stream gives up
MAX_READ_FAILURES = 5


@dataclass
class CameraConfig:
    """Camera configuration."""
    width: int = 640
    height: int = 480
    fps: int = 30
    device: Union[int, str] = 0
    buffer_size: int = 1
    # Front-facing cameras deliver mirrored frames
    front_facing: bool = False


@dataclass
class Frame:
    """A captured RGB frame with metadata."""
    image: np.ndarray
    timestamp: float
    frame_number: int
    front_facing: bool = False

    @property
    def height(self) -> int:
        return self.image.shape[0]

    @property
    def width(self) -> int:
        return self.image.shape[1]


def _device_index(device: Union[int, str]) -> Union[int, str]:
    if isinstance(device, str) and device.isdigit():
        return int(device)
    return device


class Camera:
    """Reads RGB frames from a VideoCapture device.

    The active lens is explicit state. ``switch_camera`` reopens the capture on
    another device and tells every facing listener (typically
    ``FrameAnalyzer.set_front_facing``) whether the new lens is front-facing,
    so embedding flip correction and box mirroring follow the switch.
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()

        self._capture: Optional[cv2.VideoCapture] = None
        self._lock = threading.Lock()
        self._frame_count = 0
        self._facing_listeners: List[FacingListener] = []

        self._streaming = False
        self._stream_thread: Optional[threading.Thread] = None
        self._stream_callback: Optional[FrameCallback] = None

    @property
    def front_facing(self) -> bool:
        return self.config.front_facing

    def add_facing_listener(self, listener: FacingListener) -> None:
        """Register a callable receiving the lens facing on every switch.

        The listener is called once immediately with the current facing.
        """
        self._facing_listeners.append(listener)
        listener(self.config.front_facing)

    def _notify_facing(self) -> None:
        for listener in self._facing_listeners:
            try:
                listener(self.config.front_facing)
            except Exception as e:
                logger.error(f"Facing listener error: {e}")

    def open(self) -> bool:
        """Open the configured device.

        Returns:
            True if the device is open
        """
        with self._lock:
            if self._capture is not None:
                return True

            device = _device_index(self.config.device)
            capture = cv2.VideoCapture(device)
            if not capture.isOpened():
                logger.error(f"Failed to open camera device {device}")
                capture.release()
                return False

            for prop, value in (
                (cv2.CAP_PROP_FRAME_WIDTH, self.config.width),
                (cv2.CAP_PROP_FRAME_HEIGHT, self.config.height),
                (cv2.CAP_PROP_FPS, self.config.fps),
                (cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size),
            ):
                capture.set(prop, value)

            self._capture = capture
            facing = "front" if self.config.front_facing else "rear"
            logger.info(f"Starting camera {device} with {facing} facing")
            return True

    def _release(self) -> None:
        with self._lock:
            if self._capture is not None:
                self._capture.release()
                self._capture = None

    def close(self) -> None:
        """Stop streaming and release the device."""
        self.stop_stream()
        self._release()
        logger.info("Camera closed")

    def read(self) -> Optional[Frame]:
        """Grab one frame, converted from BGR to RGB.

        Returns:
            Frame, or None if the device is unavailable or the read failed
        """
        if self._capture is None and not self.open():
            return None

        with self._lock:
            if self._capture is None:
                return None
            ok, image = self._capture.read()
            if not ok or image is None:
                return None

            self._frame_count += 1
            return Frame(
                image=cv2.cvtColor(image, cv2.COLOR_BGR2RGB),
                timestamp=time.time(),
                frame_number=self._frame_count,
                front_facing=self.config.front_facing,
            )

    def switch_camera(self, device: Union[int, str], front_facing: bool) -> bool:
        """Reopen the capture on another lens.

        A running stream is stopped for the switch and restarted with the
        same callback.

        Args:
            device: Device index or path of the new lens
            front_facing: Whether the new lens faces the user

        Returns:
            True if the new device opened
        """
        callback = self._stream_callback if self._streaming else None
        self.stop_stream()
        self._release()

        self.config.device = device
        self.config.front_facing = bool(front_facing)
        self._notify_facing()

        if not self.open():
            return False
        if callback is not None:
            self.start_stream(callback)
        return True

    def start_stream(self, callback: FrameCallback) -> None:
        """Deliver frames to callback from a background thread."""
        if self._streaming:
            return

        self._streaming = True
        self._stream_callback = callback
        self._stream_thread = threading.Thread(
            target=self._stream_loop,
            args=(callback,),
            name="camera-stream",
            daemon=True,
        )
        self._stream_thread.start()
        logger.info("Started camera stream")

    def _stream_loop(self, callback: FrameCallback) -> None:
        failures = 0
        while self._streaming:
            frame = self.read()
            if frame is None:
                failures += 1
                if failures >= MAX_READ_FAILURES:
                    logger.error(f"Camera failed after {MAX_READ_FAILURES} attempts. Stopping.")
                    self._streaming = False
                    break
                time.sleep(0.5)
                continue

            failures = 0
            try:
                callback(frame)
            except Exception as e:
                logger.error(f"Stream callback error: {e}")

    def stop_stream(self) -> None:
        """Stop background streaming."""
        self._streaming = False
        if self._stream_thread is not None:
            self._stream_thread.join(timeout=2.0)
            self._stream_thread = None
            logger.info("Stopped camera stream")

    @property
    def is_open(self) -> bool:
        return self._capture is not None

    @property
    def is_streaming(self) -> bool:
        return self._streaming

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
