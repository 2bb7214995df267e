"""FaceNet TFLite embedding backend."""

import logging
from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np

from ....exceptions import ModelNotAvailableError
from ...utils import crop_face
from .base import BaseEmbeddingBackend

logger = logging.getLogger(__name__)


class FaceNetEmbeddingBackend(BaseEmbeddingBackend):
    """Face embedding using a FaceNet TFLite model."""

    def __init__(self, model_path: Optional[str] = None, embedding_dim: int = 128):
        """Initialize FaceNet embedding backend.

        Args:
            model_path: Path to the FaceNet .tflite model
                       If None, will try default locations
            embedding_dim: Output dimension of the model
        """
        self._interpreter = None
        self._model_path = model_path
        self._embedding_dim = embedding_dim
        self._input_details = None
        self._output_details = None

    @property
    def name(self) -> str:
        return "facenet"

    @property
    def embedding_dim(self) -> int:
        return self._embedding_dim

    def _initialize(self) -> None:
        """Lazy initialization of TFLite interpreter."""
        if self._interpreter is not None:
            return

        try:
            import tflite_runtime.interpreter as tflite
        except ImportError:
            try:
                import tensorflow.lite as tflite
            except ImportError:
                raise ModelNotAvailableError(
                    "TFLite not installed. Install with: "
                    "pip install tflite-runtime or pip install tensorflow"
                )

        model_locations = [
            self._model_path,
            "facenet.tflite",
            "data/models/facenet.tflite",
            Path.home() / ".face_models" / "facenet.tflite",
        ]

        model_file = None
        for loc in model_locations:
            if loc and Path(str(loc)).exists():
                model_file = str(loc)
                break

        if not model_file:
            raise ModelNotAvailableError(
                "FaceNet TFLite model not found. Please provide a valid model path."
            )

        interpreter = tflite.Interpreter(model_path=model_file)
        interpreter.allocate_tensors()
        self._input_details = interpreter.get_input_details()
        self._output_details = interpreter.get_output_details()

        output_dim = int(np.prod(self._output_details[0]["shape"][1:]))
        if output_dim != self._embedding_dim:
            logger.info(f"Model output dimension is {output_dim}, overriding {self._embedding_dim}")
            self._embedding_dim = output_dim

        self._interpreter = interpreter
        logger.info(f"Loaded FaceNet model from {model_file}")

    def validate_dimension(self) -> int:
        """Load the model so the advertised dimension is its real output size."""
        self._initialize()
        return super().validate_dimension()

    def load(self) -> "FaceNetEmbeddingBackend":
        """Load the model now instead of on the first embed call."""
        self._initialize()
        return self

    def embed(
        self,
        image: np.ndarray,
        bbox: Optional[Tuple[int, int, int, int]] = None,
        use_bbox: bool = False,
        suppress_flip_correction: bool = False,
    ) -> np.ndarray:
        """Extract a FaceNet embedding.

        Args:
            image: RGB image
            bbox: Face box (x, y, w, h)
            use_bbox: Crop to bbox before embedding
            suppress_flip_correction: Do not mirror the face back

        Returns:
            L2-normalized embedding vector
        """
        self._initialize()

        face = image[..., :3]
        if use_bbox:
            if bbox is None:
                raise ValueError("use_bbox requires a bounding box")
            face = crop_face(face, bbox)
        if not suppress_flip_correction:
            # Front-camera frames arrive mirrored
            face = cv2.flip(face, 1)

        input_shape = self._input_details[0]["shape"]
        height, width = int(input_shape[1]), int(input_shape[2])
        resized = cv2.resize(np.ascontiguousarray(face), (width, height))

        # Per-image standardization
        input_data = resized.astype(np.float32)
        std = max(float(input_data.std()), 1.0 / np.sqrt(input_data.size))
        input_data = (input_data - input_data.mean()) / std
        input_data = np.expand_dims(input_data, axis=0)

        self._interpreter.set_tensor(self._input_details[0]["index"], input_data)
        self._interpreter.invoke()

        embedding = self._interpreter.get_tensor(self._output_details[0]["index"])
        embedding = embedding.flatten().astype(np.float32)

        norm = np.linalg.norm(embedding)
        if norm > 0:
            embedding = embedding / norm

        return embedding
