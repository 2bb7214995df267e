"""Visual processing package - color conversion, detection, recognition.

This package holds everything between a decoded camera frame and a label:
- color.py: RGB(A) to NV21 conversion for the detectors
- detection/: Face detection backends
- recognition/: Gallery enrollment, embeddings and matching
- analyzer.py: Per-frame recognition with frame dropping
- transform.py: Detector-space to display-space box mapping
"""

from .color import ColorFormat, nv21_buffer_size, nv21_luma, rgb_to_nv21
from .utils import clamp_bbox, crop_face, load_rgb_image
from .transform import CoordinateTransform

from .detection import (
    DetectedFace,
    BaseFaceDetector,
    HaarCascadeDetector,
    DETECTION_BACKENDS,
)

from .recognition import (
    EnrollmentMode,
    EnrollmentSummary,
    Gallery,
    GalleryEntry,
    LabeledImage,
    MatchResult,
    BaseGalleryIndex,
    DistanceMetric,
    LinearScanIndex,
    MatchEngine,
    EnrollmentState,
    GalleryBuilder,
    scan_directory,
    BaseEmbeddingBackend,
    FaceNetEmbeddingBackend,
    EMBEDDING_BACKENDS,
)

from .analyzer import FrameAnalyzer, FrameResult

__all__ = [
    # Color
    "ColorFormat", "nv21_buffer_size", "nv21_luma", "rgb_to_nv21",
    # Utils
    "clamp_bbox", "crop_face", "load_rgb_image",
    "CoordinateTransform",
    # Detection
    "DetectedFace", "BaseFaceDetector", "HaarCascadeDetector", "DETECTION_BACKENDS",
    # Recognition
    "EnrollmentMode", "EnrollmentSummary", "Gallery", "GalleryEntry",
    "LabeledImage", "MatchResult", "BaseGalleryIndex", "DistanceMetric",
    "LinearScanIndex", "MatchEngine", "EnrollmentState", "GalleryBuilder",
    "scan_directory",
    # Embeddings
    "BaseEmbeddingBackend", "FaceNetEmbeddingBackend", "EMBEDDING_BACKENDS",
    # Analyzer
    "FrameAnalyzer", "FrameResult",
]
