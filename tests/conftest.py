"""Pytest configuration and fixtures."""

import sys
import threading
import time
from pathlib import Path

import numpy as np
import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from facestream.vision.color import ColorFormat, nv21_luma  # noqa: E402
from facestream.vision.detection import BaseFaceDetector, DetectedFace  # noqa: E402
from facestream.vision.recognition import BaseEmbeddingBackend, LabeledImage  # noqa: E402


class InFlightCounter:
    """Counts concurrent calls into the stub backends."""

    def __init__(self):
        self._lock = threading.Lock()
        self.current = 0
        self.max_seen = 0
        self.calls = 0

    def __enter__(self):
        with self._lock:
            self.current += 1
            self.calls += 1
            self.max_seen = max(self.max_seen, self.current)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        with self._lock:
            self.current -= 1
        return False


class StubDetector(BaseFaceDetector):
    """Finds one face in any image whose luma plane is not dark."""

    def __init__(self, counter=None, box=(1, 1, 4, 4), delay=0.0, fail_labels_luma=None):
        self.counter = counter or InFlightCounter()
        self.box = box
        self.delay = delay
        self.fail_luma = fail_labels_luma
        self.seen = []

    def detect(self, image_bytes, width, height, color_format=ColorFormat.NV21):
        with self.counter:
            if self.delay:
                time.sleep(self.delay)
            luma = nv21_luma(image_bytes, width, height)
            level = int(luma.max())
            self.seen.append(level)
            if self.fail_luma is not None and level == self.fail_luma:
                raise RuntimeError("detector crashed")
            if level < 50:
                return []
            x, y, w, h = self.box
            return [DetectedFace(x=x, y=y, width=w, height=h)]


class StubEmbedder(BaseEmbeddingBackend):
    """Embeds an image as its mean RGB color, scaled to [0, 1]."""

    def __init__(self, counter=None, dim=3, delay=0.0):
        self.counter = counter or InFlightCounter()
        self.dim = dim
        self.delay = delay
        self.calls = []

    @property
    def name(self):
        return "stub"

    @property
    def embedding_dim(self):
        return self.dim

    def embed(self, image, bbox=None, use_bbox=False, suppress_flip_correction=False):
        with self.counter:
            if self.delay:
                time.sleep(self.delay)
            self.calls.append((bbox, use_bbox, suppress_flip_correction))
            if use_bbox:
                x, y, w, h = bbox
                image = image[y:y + h, x:x + w]
            mean = image[..., :3].reshape(-1, 3).mean(axis=0) / 255.0
            vec = np.zeros(self.dim, dtype=np.float32)
            vec[:3] = mean[: self.dim]
            return vec


def solid_image(color, size=(8, 8)):
    """Create an RGB image filled with one color."""
    h, w = size
    image = np.zeros((h, w, 3), dtype=np.uint8)
    image[:] = color
    return image


@pytest.fixture
def counter():
    return InFlightCounter()


@pytest.fixture
def detector(counter):
    return StubDetector(counter=counter)


@pytest.fixture
def embedder(counter):
    return StubEmbedder(counter=counter)


@pytest.fixture
def labeled_images():
    """Five images, two of them too dark to contain a face."""
    return [
        LabeledImage("alice", solid_image((200, 100, 50))),
        LabeledImage("alice", solid_image((0, 0, 0))),
        LabeledImage("bob", solid_image((50, 100, 200))),
        LabeledImage("carol", solid_image((10, 10, 10))),
        LabeledImage("carol", solid_image((120, 200, 120))),
    ]


@pytest.fixture
def sample_image():
    """Create a sample test image."""
    return np.random.randint(0, 255, (480, 640, 3), dtype=np.uint8)
