#!/usr/bin/env python3
from __future__ import annotations
import argparse, json, logging, os, sys, time

import cv2

from rectscan.core.contracts import DetectionParameters
from rectscan.core.errors import InvalidParameters
from rectscan.geometry.detect import detect_in_image, load_cfg
from rectscan.io.ingest import load_rgba, validate_image_file
from rectscan.viz.overlay import build_report, draw_detections

logger = logging.getLogger("visualize_detect")


def _setup_logging(debug: bool, log_file: str | None) -> None:
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w"))
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
                        handlers=handlers, force=True)
    if log_file:
        logger.info("[logging] Writing debug output to: %s", log_file)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Run rectscan detect() on an image and write an overlay.")
    ap.add_argument("image", help="Path to input image (png/jpg/gif/bmp/webp).")
    ap.add_argument("--config", help="YAML detector config (defaults to built-in settings).")
    ap.add_argument("--sensitivity", type=int, default=None, help="Edge sensitivity, 10..300.")
    ap.add_argument("--min-area", type=int, default=None, help="Minimum rectangle area in px, 100..50000.")
    ap.add_argument("--aspect-ratio", type=float, default=None, help="Maximum aspect ratio, 1..20.")
    ap.add_argument("--out_dir", default="output", help="Directory for outputs.")
    ap.add_argument("--out", default=None, help="Overlay PNG path. Default: <out_dir>/<image_basename>_viz.png")
    ap.add_argument("--json", default=None, help="Also write the report as JSON to this path.")
    ap.add_argument("--highlight", type=int, default=None, help="1-based rank of a detection to highlight.")
    ap.add_argument("--debug", action="store_true", help="Enable debug logging from the detector.")
    ap.add_argument("--log-file", default=None, help="Mirror log output into this file.")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.debug, args.log_file)

    cfg = load_cfg(args.config)
    raw = dict(cfg["params"])
    if args.sensitivity is not None:
        raw["edgeSensitivity"] = args.sensitivity
    if args.min_area is not None:
        raw["minArea"] = args.min_area
    if args.aspect_ratio is not None:
        raw["maxAspectRatio"] = args.aspect_ratio

    try:
        params = DetectionParameters.from_mapping(raw)
        params.validate()
    except InvalidParameters as exc:
        for field, reason in exc.reasons.items():
            print(f"invalid {field}: {reason}", file=sys.stderr)
        return 2

    try:
        validate_image_file(args.image)
        rgba, W, H = load_rgba(args.image)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Could not load image: {exc}", file=sys.stderr)
        return 1

    logger.info("Image loaded: %s (%dx%d), params=%s", args.image, W, H, params.as_dict())
    t0 = time.perf_counter()
    detections = detect_in_image(rgba, params, cfg)
    elapsed_ms = (time.perf_counter() - t0) * 1000.0
    report = build_report(detections, elapsed_ms, (W, H))

    if detections:
        print(f"Found {report['count']} rectangles in {report['processing_ms']}ms "
              f"(average area {report['average_area']} px)")
        for d in detections:
            print(f"  {d.id}: pos=({d.x}, {d.y}) size={d.width}x{d.height} area={d.area} "
                  f"aspect={d.aspect_ratio} confidence={round(d.confidence * 100)}%")
    else:
        print("No rectangles detected. Try a lower edge sensitivity, a smaller minimum area "
              "or a larger aspect ratio.")

    os.makedirs(args.out_dir, exist_ok=True)
    base = os.path.splitext(os.path.basename(args.image))[0]
    out_viz = args.out or os.path.join(args.out_dir, f"{base}_viz.png")
    highlight = args.highlight - 1 if args.highlight else None
    bgr = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR)
    cv2.imwrite(out_viz, draw_detections(bgr, detections, highlight=highlight))
    print(f"Saved visualization → {out_viz}")

    if args.json:
        with open(args.json, "w") as f:
            json.dump(report, f, indent=2)
        print(f"Saved report → {args.json}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
