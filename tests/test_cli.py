"""Tests for the command line interface."""

from unittest.mock import MagicMock, patch

import cv2
import pytest

from conftest import StubDetector, StubEmbedder, solid_image
from facestream import cli
from facestream.exceptions import ModelNotAvailableError
from facestream.vision import DistanceMetric, EnrollmentMode, MatchEngine


@pytest.fixture
def image_dir(tmp_path):
    for label, color in (("alice", (200, 100, 50)), ("bob", (0, 0, 0))):
        (tmp_path / label).mkdir()
        cv2.imwrite(str(tmp_path / label / "1.png"), solid_image(color[::-1]))
    return tmp_path


@pytest.fixture
def stub_components():
    components = (StubDetector(), StubEmbedder(), MatchEngine())
    with patch.object(cli, "_build_components", return_value=components):
        yield components


class TestParser:
    """Test cases for argument parsing."""

    def test_enroll_options(self):
        args = cli.build_parser().parse_args(
            ["enroll", "--images", "photos", "--mode", "crop_to_box", "--metric", "cosine", "-t", "0.5"]
        )

        settings = cli._settings(args)

        assert settings["images"] == "photos"
        assert settings["mode"] is EnrollmentMode.CROP_TO_BOX
        assert settings["metric"] is DistanceMetric.COSINE
        assert settings["threshold"] == 0.5

    def test_recognize_requires_image(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["recognize"])

    def test_live_rejects_bad_rotation(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["live", "--rotation", "45"])

    def test_no_command_prints_help(self):
        with pytest.raises(SystemExit) as exc:
            cli.main([])
        assert exc.value.code == 0


class TestCommands:
    """Test cases for the enroll and recognize commands."""

    def test_enroll(self, image_dir, stub_components):
        args = cli.build_parser().parse_args(["enroll", "--images", str(image_dir)])

        summary = cli.cmd_enroll(args)

        assert summary.total == 2
        assert summary.enrolled == 1
        assert summary.not_found == 1
        assert summary.labels == {"alice": 1}

    def test_recognize(self, image_dir, stub_components, tmp_path):
        query = tmp_path / "query.png"
        cv2.imwrite(str(query), solid_image((200, 100, 50)[::-1]))

        args = cli.build_parser().parse_args(
            ["recognize", "--images", str(image_dir), "-i", str(query), "-t", "0.01"]
        )
        result = cli.cmd_recognize(args)

        assert result.label == "alice"

    def test_recognize_missing_image(self, image_dir, stub_components, tmp_path):
        args = cli.build_parser().parse_args(
            ["recognize", "--images", str(image_dir), "-i", str(tmp_path / "nope.png")]
        )

        with pytest.raises(SystemExit):
            cli.cmd_recognize(args)


class MissingModelEmbedder(StubEmbedder):
    def embed(self, image, bbox=None, use_bbox=False, suppress_flip_correction=False):
        raise ModelNotAvailableError("model file missing")


class TestLiveCommand:
    """Test cases for the live command."""

    def _camera(self):
        camera = MagicMock()
        camera.open.return_value = True
        camera.is_streaming = True
        return camera

    def test_enrollment_failure_exits(self, image_dir):
        components = (StubDetector(), MissingModelEmbedder(), MatchEngine())
        camera = self._camera()
        args = cli.build_parser().parse_args(["live", "--images", str(image_dir)])

        with patch.object(cli, "_build_components", return_value=components), \
                patch.object(cli, "Camera", return_value=camera):
            with pytest.raises(SystemExit) as exc:
                cli.cmd_live(args)

        assert exc.value.code == 1
        camera.close.assert_called_once()

    def test_camera_facing_reaches_analyzer(self, image_dir, stub_components):
        camera = self._camera()
        camera.is_streaming = False
        args = cli.build_parser().parse_args(["live", "--images", str(image_dir), "--front"])

        with patch.object(cli, "Camera", return_value=camera):
            cli.cmd_live(args)

        listener = camera.add_facing_listener.call_args[0][0]
        assert listener.__name__ == "set_front_facing"
        assert listener.__self__.front_facing is True
