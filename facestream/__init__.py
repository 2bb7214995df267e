"""facestream - real-time face recognition against a labeled photo gallery.

Enroll a directory of labeled photos into an in-memory gallery, then
recognize the face in each live camera frame:

    from facestream import GalleryBuilder, FrameAnalyzer, HaarCascadeDetector

    builder = GalleryBuilder(detector, embedder)
    gallery = builder.build_from_directory("data/images")
    analyzer = FrameAnalyzer(detector, embedder, gallery=gallery)
    result = analyzer.process_frame(rgb_frame)
"""

__version__ = "0.1.0"

from .exceptions import EmbeddingDimensionError, FacestreamError, ModelNotAvailableError
from .vision import (
    CoordinateTransform,
    DistanceMetric,
    EnrollmentMode,
    FaceNetEmbeddingBackend,
    FrameAnalyzer,
    FrameResult,
    Gallery,
    GalleryBuilder,
    HaarCascadeDetector,
    MatchEngine,
    MatchResult,
    rgb_to_nv21,
)

__all__ = [
    "EmbeddingDimensionError",
    "FacestreamError",
    "ModelNotAvailableError",
    "CoordinateTransform",
    "DistanceMetric",
    "EnrollmentMode",
    "FaceNetEmbeddingBackend",
    "FrameAnalyzer",
    "FrameResult",
    "Gallery",
    "GalleryBuilder",
    "HaarCascadeDetector",
    "MatchEngine",
    "MatchResult",
    "rgb_to_nv21",
]
