"""Exceptions raised by the facestream package."""


class FacestreamError(Exception):
    """Base class for facestream errors."""


class EmbeddingDimensionError(FacestreamError, ValueError):
    """An embedding does not have the dimension the gallery was built with."""

    def __init__(self, expected: int, actual: int, context: str = ""):
        self.expected = expected
        self.actual = actual
        message = f"Expected embedding dimension {expected}, got {actual}"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)


class ModelNotAvailableError(FacestreamError, RuntimeError):
    """The embedding model file or its runtime could not be loaded."""
