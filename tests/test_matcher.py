"""Tests for nearest-neighbor matching."""

import math
from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from facestream.exceptions import EmbeddingDimensionError
from facestream.vision.recognition import (
    BaseGalleryIndex,
    DistanceMetric,
    Gallery,
    GalleryEntry,
    MatchEngine,
    pairwise_distances,
)


def make_gallery(*pairs):
    return Gallery.from_entries(
        [GalleryEntry(label, np.asarray(vec, dtype=np.float32)) for label, vec in pairs]
    )


class TestMatchEngine:
    """Test cases for MatchEngine.classify."""

    def test_nearest_within_threshold(self):
        gallery = make_gallery(("alice", [2.0, 0.0]), ("bob", [0.0, 5.0]))
        engine = MatchEngine(DistanceMetric.EUCLIDEAN)

        result = engine.classify(np.zeros(2), gallery, threshold=3.0)

        assert result.label == "alice"
        assert result.distance == pytest.approx(2.0)
        assert result.is_known

    def test_nearest_beyond_threshold_is_unknown(self):
        gallery = make_gallery(("alice", [2.0, 0.0]), ("bob", [0.0, 5.0]))
        engine = MatchEngine(DistanceMetric.EUCLIDEAN)

        result = engine.classify(np.zeros(2), gallery, threshold=1.0)

        assert result.label == "unknown"
        assert result.distance == pytest.approx(2.0)
        assert not result.is_known

    def test_distance_equal_to_threshold_matches(self):
        gallery = make_gallery(("alice", [2.0, 0.0]))

        result = MatchEngine().classify(np.zeros(2), gallery, threshold=2.0)

        assert result.label == "alice"

    def test_tie_goes_to_earliest_entry(self):
        gallery = make_gallery(
            ("bob", [0.0, 1.0]),
            ("alice", [1.0, 0.0]),
            ("carol", [0.0, -1.0]),
        )
        engine = MatchEngine()

        labels = {engine.classify(np.zeros(2), gallery, threshold=5.0).label for _ in range(20)}

        assert labels == {"bob"}

    def test_same_label_multiple_entries(self):
        gallery = make_gallery(
            ("alice", [10.0, 0.0]),
            ("bob", [3.0, 0.0]),
            ("alice", [1.0, 0.0]),
        )

        result = MatchEngine().classify(np.zeros(2), gallery, threshold=5.0)

        assert result.label == "alice"
        assert result.distance == pytest.approx(1.0)

    def test_cosine_metric(self):
        gallery = make_gallery(("alice", [1.0, 0.0]), ("bob", [0.0, 1.0]))
        engine = MatchEngine(DistanceMetric.COSINE)

        result = engine.classify(np.array([3.0, 0.1]), gallery, threshold=0.2)

        assert result.label == "alice"
        assert 0.0 <= result.distance < 0.01

    def test_metric_from_string(self):
        assert MatchEngine("cosine").metric is DistanceMetric.COSINE

    def test_empty_gallery(self):
        result = MatchEngine().classify(np.zeros(4), Gallery(), threshold=1.0)

        assert result.label == "unknown"
        assert math.isinf(result.distance)

    def test_dimension_mismatch(self):
        gallery = make_gallery(("alice", [1.0, 0.0, 0.0]))

        with pytest.raises(EmbeddingDimensionError):
            MatchEngine().classify(np.zeros(2), gallery, threshold=1.0)

    def test_custom_index_factory(self):
        """A different index can stand in for the linear scan."""

        class FirstEntryIndex(BaseGalleryIndex):
            def nearest(self, query):
                return 0, 0.5

        gallery = make_gallery(("alice", [9.0, 9.0]), ("bob", [0.0, 0.0]))
        engine = MatchEngine(index_factory=FirstEntryIndex)

        result = engine.classify(np.zeros(2), gallery, threshold=1.0)

        assert result.label == "alice"
        assert result.distance == 0.5

    def test_index_rebuilt_for_new_gallery(self):
        engine = MatchEngine()
        first = make_gallery(("alice", [0.0, 0.0]))
        second = make_gallery(("bob", [0.0, 0.0]))

        assert engine.classify(np.zeros(2), first, 1.0).label == "alice"
        assert engine.classify(np.zeros(2), second, 1.0).label == "bob"


class TestPairwiseDistances:
    """Test cases for the distance helpers."""

    def test_euclidean(self):
        matrix = np.array([[3.0, 4.0], [0.0, 0.0]])
        d = pairwise_distances(matrix, np.zeros(2), DistanceMetric.EUCLIDEAN)
        np.testing.assert_allclose(d, [5.0, 0.0])

    def test_cosine_zero_vector(self):
        matrix = np.array([[0.0, 0.0], [1.0, 0.0]])
        d = pairwise_distances(matrix, np.array([-1.0, 0.0]), DistanceMetric.COSINE)
        np.testing.assert_allclose(d, [1.0, 2.0])


class TestGallery:
    """Test cases for the Gallery snapshot."""

    def test_from_entries_checks_dimension(self):
        with pytest.raises(EmbeddingDimensionError):
            make_gallery(("alice", [1.0, 0.0]), ("bob", [1.0, 0.0, 0.0]))

    def test_labels_keep_order(self):
        gallery = make_gallery(("b", [0.0]), ("a", [1.0]))

        assert gallery.labels == ("b", "a")
        assert gallery.dimension == 1
        assert gallery.matrix().shape == (2, 1)

    def test_is_immutable(self):
        gallery = make_gallery(("a", [0.0]))

        with pytest.raises(FrozenInstanceError):
            gallery.entries = ()
