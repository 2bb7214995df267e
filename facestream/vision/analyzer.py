"""Live frame analysis: convert, detect, embed, match, emit."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from ..exceptions import EmbeddingDimensionError, ModelNotAvailableError
from .color import ColorFormat, rgb_to_nv21
from .detection import BaseFaceDetector
from .recognition import (
    BaseEmbeddingBackend,
    EnrollmentMode,
    Gallery,
    MatchEngine,
    MatchResult,
)
from .transform import CoordinateTransform

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """What the presentation layer receives for one analyzed frame.

    A result without a match means there is nothing to show for the frame.
    """

    frame_number: int
    timestamp: float
    bbox: Optional[Tuple[float, float, float, float]] = None
    image_bbox: Optional[Tuple[int, int, int, int]] = None
    match: Optional[MatchResult] = None

    @property
    def is_empty(self) -> bool:
        return self.match is None

    @property
    def label(self) -> Optional[str]:
        return self.match.label if self.match else None

    @property
    def distance(self) -> Optional[float]:
        return self.match.distance if self.match else None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "frame_number": self.frame_number,
            "timestamp": self.timestamp,
            "label": self.label,
            "distance": self.distance,
            "bbox": list(self.bbox) if self.bbox else None,
        }


class FrameAnalyzer:
    """Recognizes the first face of each camera frame against a gallery.

    Frames handed to ``submit`` go into a single-slot mailbox drained by one
    worker thread. A frame that arrives while another is being processed
    replaces whatever was waiting, so the worker always continues with the
    most recently delivered frame and never builds a backlog.
    """

    def __init__(
        self,
        detector: BaseFaceDetector,
        embedder: BaseEmbeddingBackend,
        matcher: Optional[MatchEngine] = None,
        threshold: float = 1.0,
        mode: EnrollmentMode = EnrollmentMode.FULL_IMAGE,
        transform: Optional[CoordinateTransform] = None,
        front_facing: bool = False,
        gallery: Optional[Gallery] = None,
        on_result: Optional[Callable[[FrameResult], None]] = None,
    ):
        """Initialize the frame analyzer.

        Args:
            detector: Face detection backend
            embedder: Embedding backend, the same one used for the gallery
            matcher: Match engine (euclidean linear scan if None)
            threshold: Largest distance still accepted as a match
            mode: Enrollment mode the gallery was built with
            transform: Maps face boxes to display coordinates
            front_facing: True when frames come from the front camera
            gallery: Enrolled gallery, or None until enrollment finishes
            on_result: Called with every FrameResult
        """
        self.detector = detector
        self.embedder = embedder
        self.matcher = matcher or MatchEngine()
        self.threshold = float(threshold)
        self.mode = EnrollmentMode(mode)
        self.transform = transform
        self.front_facing = bool(front_facing)
        self._on_result = on_result

        self._dim = embedder.validate_dimension()
        self._gallery: Optional[Gallery] = None
        if gallery is not None:
            self.set_gallery(gallery)

        self._running = False
        self._worker: Optional[threading.Thread] = None
        self._cond = threading.Condition()
        self._pending: Optional[Tuple[int, np.ndarray]] = None
        self._error: Optional[BaseException] = None

        self._stats = {
            "frames_submitted": 0,
            "frames_processed": 0,
            "frames_dropped": 0,
            "faces_detected": 0,
            "start_time": None,
        }

    @property
    def gallery(self) -> Optional[Gallery]:
        return self._gallery

    def set_gallery(self, gallery: Optional[Gallery]) -> None:
        """Hand over a finished gallery (or None to pause matching).

        Raises:
            EmbeddingDimensionError: If the gallery was built with a
                different embedding dimension than this analyzer's backend
        """
        if gallery is not None and gallery.dimension is not None and gallery.dimension != self._dim:
            raise EmbeddingDimensionError(self._dim, gallery.dimension, "gallery handed to analyzer")
        self._gallery = gallery
        if gallery is not None:
            logger.info(f"Analyzer received gallery with {len(gallery)} entries")

    def set_front_facing(self, front_facing: bool) -> None:
        """Switch camera facing for embedding and box mapping."""
        self.front_facing = bool(front_facing)
        if self.transform is not None:
            self.transform.set_front_facing(front_facing)

    def process_frame(self, frame: np.ndarray, frame_number: int = 0) -> FrameResult:
        """Analyze one RGB(A) frame synchronously.

        Args:
            frame: (H, W, 3|4) uint8 RGB(A) image
            frame_number: Caller's frame counter, echoed in the result

        Returns:
            FrameResult, empty when no face is found or no gallery is set
        """
        result = self._analyze(frame, frame_number)

        self._stats["frames_processed"] += 1
        if result.image_bbox is not None:
            self._stats["faces_detected"] += 1

        if self._on_result:
            try:
                self._on_result(result)
            except Exception as e:
                logger.error(f"Result callback error: {e}")

        return result

    def _analyze(self, frame: np.ndarray, frame_number: int) -> FrameResult:
        result = FrameResult(frame_number=frame_number, timestamp=time.time())

        gallery = self._gallery
        if gallery is None:
            logger.debug("No gallery yet, skipping frame")
            return result

        height, width = frame.shape[:2]
        nv21 = rgb_to_nv21(frame)

        try:
            faces = self.detector.detect(nv21, width, height, ColorFormat.NV21)
            if not faces:
                return result

            face = faces[0]
            embedding = self.embedder.embed(
                frame,
                bbox=face.bbox,
                use_bbox=self.mode.use_bbox,
                suppress_flip_correction=not self.front_facing,
            )
        except ModelNotAvailableError:
            raise
        except Exception as e:
            logger.error(f"Frame {frame_number} analysis failed: {e}")
            return result

        result.image_bbox = face.bbox
        result.match = self.matcher.classify(embedding, gallery, self.threshold)
        result.bbox = (
            self.transform.map_bbox(face.bbox)
            if self.transform is not None
            else tuple(float(v) for v in face.bbox)
        )
        return result

    def submit(self, frame: np.ndarray) -> bool:
        """Deliver a frame to the background worker.

        The frame must not be modified by the caller afterwards.

        Returns:
            True if a waiting frame was dropped in favour of this one
        """
        with self._cond:
            self._stats["frames_submitted"] += 1
            frame_number = self._stats["frames_submitted"]
            dropped = self._pending is not None
            if dropped:
                self._stats["frames_dropped"] += 1
                logger.debug(f"Dropping frame {self._pending[0]} for frame {frame_number}")
            self._pending = (frame_number, frame)
            self._cond.notify()
        return dropped

    def start(self) -> None:
        """Start the background worker."""
        if self._running:
            return

        self._running = True
        self._error = None
        self._stats["start_time"] = time.time()

        self._worker = threading.Thread(
            target=self._processing_loop,
            name="frame-analyzer",
            daemon=True,
        )
        self._worker.start()
        logger.info("Frame analyzer started")

    def stop(self) -> None:
        """Stop the background worker, discarding any waiting frame."""
        with self._cond:
            self._running = False
            self._pending = None
            self._cond.notify_all()

        if self._worker:
            self._worker.join(timeout=2.0)
            self._worker = None

        logger.info("Frame analyzer stopped")

    def _processing_loop(self) -> None:
        """Background loop: take the latest frame, process it, repeat."""
        while True:
            with self._cond:
                while self._running and self._pending is None:
                    self._cond.wait(timeout=0.1)
                if not self._running:
                    return
                frame_number, frame = self._pending
                self._pending = None

            try:
                self.process_frame(frame, frame_number)
            except (EmbeddingDimensionError, ModelNotAvailableError) as e:
                logger.critical(f"Frame analyzer halted: {e}")
                self._error = e
                with self._cond:
                    self._running = False
                return
            except Exception as e:
                logger.error(f"Frame processing error: {e}")

    @property
    def error(self) -> Optional[BaseException]:
        """The fatal error that halted the worker, if any."""
        return self._error

    def get_stats(self) -> dict:
        """Get analyzer statistics."""
        stats = self._stats.copy()

        if stats["start_time"]:
            runtime = time.time() - stats["start_time"]
            stats["runtime_seconds"] = runtime
            stats["fps"] = stats["frames_processed"] / runtime if runtime > 0 else 0

        return stats

    @property
    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
