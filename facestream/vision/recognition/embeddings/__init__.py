"""Face embedding backends.

Embedding backends extract numerical representations (embeddings) from face images
for comparison and recognition.
"""

from .base import BaseEmbeddingBackend
from .facenet import FaceNetEmbeddingBackend

EMBEDDING_BACKENDS = {
    "facenet": FaceNetEmbeddingBackend,
}

__all__ = [
    "BaseEmbeddingBackend",
    "FaceNetEmbeddingBackend",
    "EMBEDDING_BACKENDS",
]
