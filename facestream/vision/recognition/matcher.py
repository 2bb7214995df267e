"""Nearest-neighbor matching of query embeddings against a gallery."""

import logging
import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from ...constants import UNKNOWN_LABEL
from ...exceptions import EmbeddingDimensionError
from .types import Gallery, MatchResult

logger = logging.getLogger(__name__)


class DistanceMetric(Enum):
    """Distance used between embeddings (lower means more similar)."""
    EUCLIDEAN = "euclidean"
    COSINE = "cosine"


def pairwise_distances(matrix: np.ndarray, query: np.ndarray, metric: DistanceMetric) -> np.ndarray:
    """Distances from query to every row of an (N, D) matrix."""
    if metric is DistanceMetric.EUCLIDEAN:
        return np.linalg.norm(matrix - query, axis=1)

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    with np.errstate(divide="ignore", invalid="ignore"):
        sims = np.where(norms > 1e-10, dots / norms, 0.0)
    return 1.0 - sims


class BaseGalleryIndex(ABC):
    """Lookup structure answering nearest-entry queries over a gallery."""

    def __init__(self, gallery: Gallery, metric: DistanceMetric):
        self.gallery = gallery
        self.metric = metric

    @abstractmethod
    def nearest(self, query: np.ndarray) -> Tuple[int, float]:
        """Return (entry index, distance) of the closest entry.

        Equidistant entries resolve to the lowest index.
        """
        pass


class LinearScanIndex(BaseGalleryIndex):
    """Exhaustive O(N x D) scan, sufficient for directory-sized galleries."""

    def __init__(self, gallery: Gallery, metric: DistanceMetric):
        super().__init__(gallery, metric)
        self._matrix = gallery.matrix().astype(np.float64)

    def nearest(self, query: np.ndarray) -> Tuple[int, float]:
        distances = pairwise_distances(self._matrix, query, self.metric)
        # argmin returns the first occurrence, i.e. the earliest enrolled entry
        idx = int(np.argmin(distances))
        return idx, float(distances[idx])


class MatchEngine:
    """Classifies query embeddings by their nearest gallery entry."""

    def __init__(
        self,
        metric: DistanceMetric = DistanceMetric.EUCLIDEAN,
        index_factory=LinearScanIndex,
    ):
        """Initialize match engine.

        Args:
            metric: Distance metric, fixed for the engine's lifetime
            index_factory: Callable (gallery, metric) -> BaseGalleryIndex
        """
        self.metric = DistanceMetric(metric)
        self._index_factory = index_factory
        self._index: Optional[BaseGalleryIndex] = None

    def _index_for(self, gallery: Gallery) -> BaseGalleryIndex:
        # Galleries are immutable, so identity is a sufficient cache key
        if self._index is None or self._index.gallery is not gallery:
            self._index = self._index_factory(gallery, self.metric)
            logger.debug(f"Built {type(self._index).__name__} over {len(gallery)} entries")
        return self._index

    def classify(
        self,
        query: np.ndarray,
        gallery: Gallery,
        threshold: float,
    ) -> MatchResult:
        """Return the nearest gallery label, or "unknown" beyond threshold.

        Args:
            query: Query embedding of the gallery's dimension
            gallery: Enrolled entries
            threshold: Largest distance still accepted as a match

        Returns:
            MatchResult with the label and the minimum distance
        """
        query = np.asarray(query, dtype=np.float64).reshape(-1)

        if gallery.dimension is not None and query.size != gallery.dimension:
            raise EmbeddingDimensionError(gallery.dimension, int(query.size), "query embedding")

        if len(gallery) == 0:
            return MatchResult(label=UNKNOWN_LABEL, distance=math.inf)

        idx, distance = self._index_for(gallery).nearest(query)

        if distance > threshold:
            return MatchResult(label=UNKNOWN_LABEL, distance=distance)
        return MatchResult(label=gallery.entries[idx].label, distance=distance)
