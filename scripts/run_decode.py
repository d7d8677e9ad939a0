from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import cv2

from posedecoding.io.decoder_config import load_decoder_config
from posedecoding.io.npz_io import load_output_map
from posedecoding.io.poses_json import poses_to_records, save_poses_json
from posedecoding.pose2d.decoder_cache import build_decoder
from posedecoding.viz.pose2d_overlay import OverlayStyle, draw_poses


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Decode pose-network output tensors into poses.")
    ap.add_argument("--outputs", required=True, help=".npz with arrays output_0 .. output_N")
    ap.add_argument("--config", required=True, help='Decoder JSON, e.g. {"decoder": "posenet", "params": {...}}')
    ap.add_argument("--out_json", default=None, help="Write poses here (default: print to stdout)")
    ap.add_argument("--image", default=None, help="Optional image to draw the poses on")
    ap.add_argument("--out_image", default=None, help="Overlay output path (requires --image)")
    ap.add_argument("--conf_thresh", type=float, default=0.3, help="Min keypoint score to draw")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            handlers=[logging.StreamHandler(sys.stderr)],
        )

    if args.out_image and not args.image:
        ap.error("--out_image requires --image")

    params = load_decoder_config(args.config)
    decoder = build_decoder(params)
    output_map = load_output_map(args.outputs)
    print(f"[Decode] {Path(args.outputs).name}: slots={sorted(output_map)} decoder={decoder.name()}", file=sys.stderr)

    poses = decoder.decode(output_map)
    print(f"[Decode] {len(poses)} pose(s)", file=sys.stderr)

    if args.out_json:
        save_poses_json(args.out_json, poses, decoder=decoder.name(), source=str(args.outputs))
        print(f"Wrote:\n  {args.out_json}", file=sys.stderr)
    else:
        print(json.dumps({"decoder": decoder.name(), "poses": poses_to_records(poses)}, indent=2))

    if args.image:
        frame = cv2.imread(args.image, cv2.IMREAD_COLOR)
        if frame is None:
            raise RuntimeError(f"Failed to read image: {args.image}")
        edges = list(zip(decoder.skeleton.parent_ids, decoder.skeleton.child_ids))
        overlay = draw_poses(frame, poses, edges=edges, style=OverlayStyle(conf_thresh=args.conf_thresh))
        out_image = args.out_image or str(Path(args.image).with_suffix(".poses.png"))
        Path(out_image).parent.mkdir(parents=True, exist_ok=True)
        if not cv2.imwrite(out_image, overlay):
            raise RuntimeError(f"Could not write overlay image: {out_image}")
        print(f"Wrote:\n  {out_image}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
