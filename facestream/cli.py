"""CLI entry point for facestream.

Usage:
    facestream enroll [--images DIR] [--mode full_image|crop_to_box]
    facestream recognize --image PATH [--images DIR] [--threshold T]
    facestream live [--images DIR] [--camera N] [--front] [--rotation DEG]
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from .constants import get_config
from .exceptions import FacestreamError
from .sensors import Camera, CameraConfig
from .vision import (
    CoordinateTransform,
    DistanceMetric,
    EnrollmentMode,
    FaceNetEmbeddingBackend,
    FrameAnalyzer,
    GalleryBuilder,
    HaarCascadeDetector,
    MatchEngine,
    load_rgb_image,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _settings(args):
    """Merge command line options over the YAML config."""
    config = get_config()
    if getattr(args, "config", None):
        config.reload(Path(args.config))

    enrollment = config.enrollment
    matching = config.matching

    return {
        "images": args.images or enrollment.images_dir,
        "mode": EnrollmentMode(args.mode or enrollment.mode),
        "metric": DistanceMetric(args.metric or matching.metric),
        "threshold": args.threshold if args.threshold is not None else matching.threshold,
        "model": args.model or matching.model_path,
    }


def _build_components(settings):
    detector = HaarCascadeDetector()
    embedder = FaceNetEmbeddingBackend(model_path=settings["model"]).load()
    matcher = MatchEngine(metric=settings["metric"])
    return detector, embedder, matcher


def _log_progress(processed: int, total: int) -> None:
    logger.info(f"Processed {processed}/{total} image(s)")


def cmd_enroll(args):
    """Enroll the labeled image directory and report the summary."""
    settings = _settings(args)
    detector, embedder, _ = _build_components(settings)

    builder = GalleryBuilder(detector, embedder, mode=settings["mode"], on_progress=_log_progress)
    gallery = builder.build_from_directory(settings["images"])
    summary = builder.summary

    logger.info(f"Gallery: {len(gallery)} entries, dimension {gallery.dimension}")
    for label, count in summary.labels.items():
        logger.info(f"  {label}: {count}")
    logger.info(
        f"Enrolled {summary.enrolled}/{summary.total}, "
        f"no face in {summary.not_found}, failed {summary.failed}"
    )
    return summary


def cmd_recognize(args):
    """Recognize the first face of a single image."""
    settings = _settings(args)
    detector, embedder, matcher = _build_components(settings)

    image = load_rgb_image(args.image)
    if image is None:
        logger.error(f"Could not load image: {args.image}")
        sys.exit(1)

    gallery = GalleryBuilder(detector, embedder, mode=settings["mode"]).build_from_directory(
        settings["images"]
    )
    analyzer = FrameAnalyzer(
        detector,
        embedder,
        matcher=matcher,
        threshold=settings["threshold"],
        mode=settings["mode"],
        gallery=gallery,
    )

    result = analyzer.process_frame(image)
    if result.is_empty:
        logger.info("No face detected")
    else:
        logger.info(f"{result.label} (distance {result.distance:.3f}) at {result.image_bbox}")
    return result


def cmd_live(args):
    """Run live recognition on a camera while the gallery enrolls."""
    settings = _settings(args)
    detector, embedder, matcher = _build_components(settings)
    camera_settings = get_config().camera

    front = args.front or camera_settings.front_facing
    rotation = args.rotation if args.rotation is not None else camera_settings.rotation
    device = args.camera if args.camera is not None else camera_settings.device
    width, height = camera_settings.resolution

    transform = CoordinateTransform(width, height, rotation_degrees=rotation, front_facing=front)

    def show(result):
        if not result.is_empty:
            logger.info(f"[{result.frame_number}] {result.label} ({result.distance:.3f}) at {result.bbox}")

    analyzer = FrameAnalyzer(
        detector,
        embedder,
        matcher=matcher,
        threshold=settings["threshold"],
        mode=settings["mode"],
        transform=transform,
        front_facing=front,
        on_result=show,
    )

    def handoff(gallery, summary):
        logger.info(
            f"Processing completed. Found {summary.enrolled} image(s). "
            f"Faces could not be detected in {summary.not_found} images."
        )
        analyzer.set_gallery(gallery)

    # The analyzer skips frames until handoff, so both pipelines can share backends
    builder = GalleryBuilder(
        detector,
        embedder,
        mode=settings["mode"],
        on_progress=_log_progress,
        on_complete=handoff,
    )
    builder.start(settings["images"])

    camera = Camera(CameraConfig(width=width, height=height, device=device, front_facing=front))
    if not camera.open():
        sys.exit(1)

    camera.add_facing_listener(analyzer.set_front_facing)
    analyzer.start()
    camera.start_stream(lambda frame: analyzer.submit(frame.image))
    logger.info("Live recognition running. Press Ctrl+C to quit.")

    try:
        while camera.is_streaming and analyzer.is_running and builder.error is None:
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        camera.close()
        analyzer.stop()
        logger.info(f"Stats: {analyzer.get_stats()}")

    if builder.error is not None:
        logger.error(f"Enrollment aborted, no gallery to match against: {builder.error}")
        sys.exit(1)
    if analyzer.error is not None:
        raise analyzer.error


def _add_common(p):
    p.add_argument("-c", "--config", default=None, help="Config file")
    p.add_argument("--images", default=None, help="Labeled image directory")
    p.add_argument("--mode", default=None, choices=[m.value for m in EnrollmentMode],
                   help="Embed the full image or only the detected face")
    p.add_argument("--metric", default=None, choices=[m.value for m in DistanceMetric],
                   help="Distance metric")
    p.add_argument("-t", "--threshold", type=float, default=None,
                   help="Maximum distance accepted as a match")
    p.add_argument("-m", "--model", default=None, help="FaceNet TFLite model path")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="facestream",
        description="Real-time face recognition against a labeled photo gallery",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  facestream enroll --images data/images       Build and summarize the gallery
  facestream recognize -i photo.jpg            Recognize a face in an image
  facestream live --camera 0 --front           Live recognition
        """,
    )

    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # enroll
    enroll_p = subparsers.add_parser("enroll", help="Enroll the gallery directory")
    _add_common(enroll_p)

    # recognize
    recog_p = subparsers.add_parser("recognize", help="Recognize a face in an image")
    _add_common(recog_p)
    recog_p.add_argument("-i", "--image", required=True, help="Image file")

    # live
    live_p = subparsers.add_parser("live", help="Live camera recognition")
    _add_common(live_p)
    live_p.add_argument("--camera", type=int, default=None, help="Camera device index")
    live_p.add_argument("--front", action="store_true", help="Camera is front-facing")
    live_p.add_argument("--rotation", type=int, default=None, choices=[0, 90, 180, 270],
                        help="Display rotation in degrees")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    commands = {
        "enroll": cmd_enroll,
        "recognize": cmd_recognize,
        "live": cmd_live,
    }

    try:
        commands[args.command](args)
    except FacestreamError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
