from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from posedecoding.pose2d.datatypes import Pose
from posedecoding.pose2d.skeleton import POSENET_SKELETON


@dataclass
class OverlayStyle:
    radius: int = 4
    thickness: int = 2
    conf_thresh: float = 0.3
    draw_labels: bool = False
    draw_score: bool = True
    label_scale: float = 0.5


def _pt(y: float, x: float) -> Tuple[int, int]:
    # cv2 wants (x, y)
    return int(round(x)), int(round(y))


def draw_poses(
    image_bgr: np.ndarray,
    poses: Sequence[Pose],
    edges: Optional[List[Tuple[int, int]]] = None,
    style: Optional[OverlayStyle] = None,
) -> np.ndarray:
    """
    Returns a copy of image_bgr with keypoints, skeleton edges and pose scores
    drawn on it. Keypoints below style.conf_thresh are skipped.
    """
    style = style or OverlayStyle()
    if image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
        raise ValueError(f"Expected (H, W, 3) image, got shape {image_bgr.shape}")
    if edges is None:
        edges = list(zip(POSENET_SKELETON.parent_ids, POSENET_SKELETON.child_ids))

    frame = image_bgr.copy()
    for pose in poses:
        # skeleton edges
        for i, j in edges:
            a, b = pose.get(i), pose.get(j)
            if a is None or b is None:
                continue
            if a.score < style.conf_thresh or b.score < style.conf_thresh:
                continue
            cv2.line(frame, _pt(a.y, a.x), _pt(b.y, b.x), (255, 0, 0), style.thickness)

        # keypoints
        visible = [kp for kp in pose.keypoints.values() if kp.score >= style.conf_thresh]
        for kp in visible:
            p = _pt(kp.y, kp.x)
            cv2.circle(frame, p, style.radius, (0, 255, 0), -1)
            if style.draw_labels:
                cv2.putText(frame, kp.part, (p[0] + 4, p[1] - 4),
                            cv2.FONT_HERSHEY_SIMPLEX, style.label_scale,
                            (255, 255, 255), 1, cv2.LINE_AA)

        if style.draw_score and visible:
            top = min(visible, key=lambda k: k.y)
            cv2.putText(frame, f"{pose.score:.2f}", _pt(top.y - 10, top.x),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 2, cv2.LINE_AA)

    return frame
