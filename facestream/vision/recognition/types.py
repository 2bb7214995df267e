"""Face recognition types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Sequence, Tuple

import numpy as np

from ...constants import UNKNOWN_LABEL
from ...exceptions import EmbeddingDimensionError


class EnrollmentMode(Enum):
    """What part of an image is passed to the embedding backend.

    The same mode must be used for the gallery and for live frames so that
    query and gallery embeddings are comparable.
    """
    FULL_IMAGE = "full_image"
    CROP_TO_BOX = "crop_to_box"

    @property
    def use_bbox(self) -> bool:
        return self is EnrollmentMode.CROP_TO_BOX


@dataclass
class LabeledImage:
    """A reference photo and the label of the person in it."""

    label: str
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]


@dataclass(frozen=True)
class GalleryEntry:
    """One enrolled (label, embedding) pair."""

    label: str
    embedding: np.ndarray


@dataclass(frozen=True)
class Gallery:
    """Immutable snapshot of enrolled entries, in enrollment order."""

    entries: Tuple[GalleryEntry, ...] = ()
    dimension: Optional[int] = None

    @classmethod
    def from_entries(
        cls,
        entries: Sequence[GalleryEntry],
        dimension: Optional[int] = None,
    ) -> "Gallery":
        """Build a gallery, checking every embedding has the same dimension."""
        entries = tuple(entries)
        if dimension is None and entries:
            dimension = int(entries[0].embedding.size)
        for entry in entries:
            if entry.embedding.size != dimension:
                raise EmbeddingDimensionError(
                    dimension, int(entry.embedding.size), f"gallery entry '{entry.label}'"
                )
        return cls(entries=entries, dimension=dimension)

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(entry.label for entry in self.entries)

    def matrix(self) -> np.ndarray:
        """Return the embeddings stacked as an (N, D) float32 matrix."""
        if not self.entries:
            return np.zeros((0, self.dimension or 0), dtype=np.float32)
        return np.stack([e.embedding.reshape(-1) for e in self.entries]).astype(np.float32)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[GalleryEntry]:
        return iter(self.entries)


@dataclass(frozen=True)
class MatchResult:
    """Result of classifying one query embedding."""

    label: str
    distance: float

    @property
    def is_known(self) -> bool:
        return self.label != UNKNOWN_LABEL


@dataclass
class EnrollmentSummary:
    """Counts reported when enrollment reaches its terminal state."""

    total: int = 0
    enrolled: int = 0
    not_found: int = 0
    failed: int = 0
    labels: Dict[str, int] = field(default_factory=dict)

    @property
    def processed(self) -> int:
        return self.enrolled + self.not_found + self.failed

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "total": self.total,
            "enrolled": self.enrolled,
            "not_found": self.not_found,
            "failed": self.failed,
            "labels": dict(self.labels),
        }
