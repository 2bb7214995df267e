"""Gallery enrollment from a directory of labeled reference photos."""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from ...constants import IMAGE_EXTENSIONS
from ...exceptions import EmbeddingDimensionError, ModelNotAvailableError
from ..color import ColorFormat, rgb_to_nv21
from ..detection import BaseFaceDetector
from ..utils import load_rgb_image
from .embeddings import BaseEmbeddingBackend
from .types import EnrollmentMode, EnrollmentSummary, Gallery, GalleryEntry, LabeledImage

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
CompleteCallback = Callable[[Gallery, EnrollmentSummary], None]


class EnrollmentState(Enum):
    """Enrollment pipeline states."""
    IDLE = "idle"
    SCANNING = "scanning"
    DONE = "done"


def scan_directory(directory: Union[str, Path]) -> List[LabeledImage]:
    """Load labeled images from a directory structure.

    Expected structure:
        directory/
            person1/
                image1.jpg
                image2.jpg
            person2/
                image1.jpg

    Subdirectories and files are visited in name order. A missing directory
    yields an empty list.

    Args:
        directory: Root of the labeled image tree

    Returns:
        List of LabeledImage in enrollment order
    """
    dir_path = Path(directory)
    if not dir_path.is_dir():
        logger.warning(f"Directory not found: {directory}")
        return []

    images = []

    for person_dir in sorted(p for p in dir_path.iterdir() if p.is_dir()):
        label = person_dir.name
        logger.debug(f"Reading directory -> {label}")

        for image_file in sorted(person_dir.iterdir()):
            if image_file.suffix.lower() not in IMAGE_EXTENSIONS:
                continue

            pixels = load_rgb_image(image_file)
            if pixels is None:
                logger.warning(f"Could not read image: {image_file}")
                continue

            images.append(LabeledImage(label=label, pixels=pixels))

    logger.info(f"Found {len(images)} image(s) in {dir_path}")
    return images


class GalleryBuilder:
    """Turns labeled images into a Gallery, one image at a time.

    Detection and embedding backends are shared and usually stateful, so at
    most one detect or embed call is ever in flight. ``build`` runs the loop on
    the calling thread; ``start`` runs the same loop on a single background
    worker and hands the finished gallery to ``on_complete``.
    """

    def __init__(
        self,
        detector: BaseFaceDetector,
        embedder: BaseEmbeddingBackend,
        mode: EnrollmentMode = EnrollmentMode.FULL_IMAGE,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ):
        """Initialize gallery builder.

        Args:
            detector: Face detection backend
            embedder: Embedding backend
            mode: Whether the whole image or only the face box is embedded
            on_progress: Called with (processed, total) after every image
            on_complete: Called with (gallery, summary) once enrollment is done
        """
        self.detector = detector
        self.embedder = embedder
        self.mode = EnrollmentMode(mode)
        self._on_progress = on_progress
        self._on_complete = on_complete

        self._state = EnrollmentState.IDLE
        self._gallery: Optional[Gallery] = None
        self._summary = EnrollmentSummary()
        self._worker: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None
        self._done = threading.Event()

    @property
    def state(self) -> EnrollmentState:
        return self._state

    @property
    def gallery(self) -> Optional[Gallery]:
        """The finished gallery, or None until enrollment is done."""
        return self._gallery

    @property
    def summary(self) -> EnrollmentSummary:
        return self._summary

    @property
    def error(self) -> Optional[BaseException]:
        """The error that aborted the background run, if any."""
        return self._error

    def build(self, images: Sequence[LabeledImage]) -> Gallery:
        """Enroll images sequentially and return the gallery.

        Args:
            images: Labeled images in enrollment order

        Returns:
            The immutable gallery snapshot
        """
        if self._state is EnrollmentState.SCANNING:
            raise RuntimeError("Enrollment already in progress")

        dim = self.embedder.validate_dimension()
        total = len(images)
        summary = EnrollmentSummary(total=total)
        entries: List[GalleryEntry] = []

        self._state = EnrollmentState.SCANNING
        self._gallery = None
        self._done.clear()
        self._summary = summary
        logger.info(f"Enrolling {total} image(s) ({self.mode.value})")

        try:
            for index, image in enumerate(images):
                entry = self._enroll_one(image, dim, summary)
                if entry is not None:
                    entries.append(entry)
                    summary.labels[entry.label] = summary.labels.get(entry.label, 0) + 1
                self._notify_progress(index + 1, total)
        except Exception:
            self._state = EnrollmentState.IDLE
            raise

        gallery = Gallery.from_entries(entries, dimension=dim)
        self._gallery = gallery
        self._state = EnrollmentState.DONE

        logger.info(
            f"Processing completed. Enrolled {summary.enrolled} of {total} image(s). "
            f"Faces could not be detected in {summary.not_found} image(s), "
            f"{summary.failed} failed."
        )
        self._notify_complete(gallery, summary)
        self._done.set()
        return gallery

    def build_from_directory(self, directory: Union[str, Path]) -> Gallery:
        """Scan a labeled directory tree and enroll its images."""
        return self.build(scan_directory(directory))

    def _enroll_one(
        self,
        image: LabeledImage,
        dim: int,
        summary: EnrollmentSummary,
    ) -> Optional[GalleryEntry]:
        """Detect and embed a single image, updating the summary counts."""
        try:
            nv21 = rgb_to_nv21(image.pixels)
            faces = self.detector.detect(nv21, image.width, image.height, ColorFormat.NV21)

            if not faces:
                summary.not_found += 1
                logger.debug(f"No face detected in image of '{image.label}'")
                return None

            embedding = self.embedder.embed(
                image.pixels,
                bbox=faces[0].bbox,
                use_bbox=self.mode.use_bbox,
                suppress_flip_correction=True,
            )
        except ModelNotAvailableError:
            raise
        except Exception as e:
            summary.failed += 1
            logger.error(f"Enrollment failed for image of '{image.label}': {e}")
            return None

        embedding = np.asarray(embedding, dtype=np.float32).reshape(-1)
        if embedding.size != dim:
            raise EmbeddingDimensionError(dim, int(embedding.size), f"enrolling '{image.label}'")

        summary.enrolled += 1
        return GalleryEntry(label=image.label, embedding=embedding)

    def _notify_progress(self, processed: int, total: int) -> None:
        if self._on_progress:
            try:
                self._on_progress(processed, total)
            except Exception as e:
                logger.error(f"Progress callback error: {e}")

    def _notify_complete(self, gallery: Gallery, summary: EnrollmentSummary) -> None:
        if self._on_complete:
            try:
                self._on_complete(gallery, summary)
            except Exception as e:
                logger.error(f"Completion callback error: {e}")

    def start(self, source: Union[str, Path, Sequence[LabeledImage]]) -> None:
        """Run enrollment on a single background worker.

        Args:
            source: A directory path or an already loaded image sequence
        """
        if self._worker is not None and self._worker.is_alive():
            raise RuntimeError("Enrollment already in progress")

        self._done.clear()
        self._error = None
        self._worker = threading.Thread(
            target=self._run,
            args=(source,),
            name="gallery-enrollment",
            daemon=True,
        )
        self._worker.start()
        logger.info("Started background enrollment")

    def _run(self, source) -> None:
        try:
            if isinstance(source, (str, Path)):
                self.build_from_directory(source)
            else:
                self.build(source)
        except Exception as e:
            self._error = e
            logger.error(f"Background enrollment aborted: {e}")
        finally:
            self._done.set()

    def wait(self, timeout: Optional[float] = None) -> Optional[Gallery]:
        """Block until background enrollment finishes.

        Returns:
            The gallery, or None on timeout

        Raises:
            Whatever aborted the background run
        """
        if not self._done.wait(timeout):
            return None
        if self._error is not None:
            raise self._error
        return self._gallery
