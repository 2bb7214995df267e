"""Base class for face embedding backends."""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np

from ....exceptions import EmbeddingDimensionError


class BaseEmbeddingBackend(ABC):
    """Abstract base class for face embedding extraction."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of the embedding backend."""
        pass

    @property
    @abstractmethod
    def embedding_dim(self) -> int:
        """Return the dimensionality of the embedding vector."""
        pass

    @abstractmethod
    def embed(
        self,
        image: np.ndarray,
        bbox: Optional[Tuple[int, int, int, int]] = None,
        use_bbox: bool = False,
        suppress_flip_correction: bool = False,
    ) -> np.ndarray:
        """Extract an embedding from an image.

        Args:
            image: RGB image as numpy array
            bbox: Face box (x, y, w, h) in image pixels
            use_bbox: Crop the image to bbox before embedding
            suppress_flip_correction: Skip the mirror correction applied to
                front-camera frames

        Returns:
            Embedding vector of length embedding_dim
        """
        pass

    def validate_dimension(self) -> int:
        """Check the advertised dimension is usable and return it."""
        dim = int(self.embedding_dim)
        if dim <= 0:
            raise EmbeddingDimensionError(1, dim, f"backend '{self.name}' advertises no dimension")
        return dim
