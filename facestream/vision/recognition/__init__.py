"""Face recognition module.

Contains:
- GalleryBuilder: sequential enrollment of labeled photos
- MatchEngine: nearest-neighbor classification against a gallery
- Embedding backends (FaceNet TFLite)
"""

from .types import (
    EnrollmentMode,
    EnrollmentSummary,
    Gallery,
    GalleryEntry,
    LabeledImage,
    MatchResult,
)
from .matcher import (
    BaseGalleryIndex,
    DistanceMetric,
    LinearScanIndex,
    MatchEngine,
    pairwise_distances,
)
from .gallery import EnrollmentState, GalleryBuilder, scan_directory
from .embeddings import (
    BaseEmbeddingBackend,
    FaceNetEmbeddingBackend,
    EMBEDDING_BACKENDS,
)

__all__ = [
    # Types
    "EnrollmentMode", "EnrollmentSummary", "Gallery", "GalleryEntry",
    "LabeledImage", "MatchResult",
    # Matching
    "BaseGalleryIndex", "DistanceMetric", "LinearScanIndex", "MatchEngine",
    "pairwise_distances",
    # Enrollment
    "EnrollmentState", "GalleryBuilder", "scan_directory",
    # Embeddings
    "BaseEmbeddingBackend", "FaceNetEmbeddingBackend", "EMBEDDING_BACKENDS",
]
