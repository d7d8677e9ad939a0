from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Tuple, Union

import numpy as np

from posedecoding.pose2d.datatypes import FloatCoords, Keypoint, Pose
from posedecoding.pose2d.decoders.base import PoseDecoder
from posedecoding.pose2d.skeleton import CPM_SKELETON, SkeletonGraph
from posedecoding.pose2d.smoothing import gaussian_blur
from posedecoding.pose2d.tensors import HeatmapOutputs
from posedecoding.pose2d.validation import require_int, require_real

LOGGER = logging.getLogger("posedecoding.single_peak")


@dataclass(frozen=True)
class HeatmapParams:
    input_size: Union[int, Tuple[int, int]]   # network input, square side or (H, W)
    threshold: float = 0.0

    def __post_init__(self) -> None:
        if isinstance(self.input_size, list):
            # keep the params hashable (JSON gives lists)
            object.__setattr__(self, "input_size", tuple(self.input_size))
        if isinstance(self.input_size, tuple):
            if len(self.input_size) != 2:
                raise ValueError(f"input_size must be an int or (H, W), got {self.input_size}")
            require_int("input_size[0]", self.input_size[0], 1)
            require_int("input_size[1]", self.input_size[1], 1)
        else:
            require_int("input_size", self.input_size, 1)
        require_real("threshold", self.threshold, 0.0)

    @property
    def input_hw(self) -> Tuple[int, int]:
        if isinstance(self.input_size, tuple):
            return int(self.input_size[0]), int(self.input_size[1])
        return int(self.input_size), int(self.input_size)


class HeatmapPeakDecoder(PoseDecoder):
    """
    Single-person decoder for CPM / Hourglass style heatmaps (1x96x96x14 or
    1x48x48x14).

    Each part's heatmap is Gaussian-smoothed and its global maximum becomes
    that part's keypoint when it exceeds the threshold. Ties resolve to the
    first cell in row-major order (row outer, column inner). Grid cells map to
    image space by dividing by heatmap_size / input_size on each axis.
    """

    def __init__(
        self,
        params: HeatmapParams,
        skeleton: SkeletonGraph = CPM_SKELETON,
        smooth: Callable[[np.ndarray], np.ndarray] = gaussian_blur,
    ) -> None:
        self.params = params
        self.skeleton = skeleton
        self.smooth = smooth

    def name(self) -> str:
        return "heatmap_peak"

    def decode(self, output_map: Mapping[int, Any]) -> List[Pose]:
        heatmaps = HeatmapOutputs.from_output_map(output_map, self.skeleton.num_parts).heatmaps
        H, W = heatmaps.shape[:2]
        in_h, in_w = self.params.input_hw
        ratio_y = H / float(in_h)
        ratio_x = W / float(in_w)

        keypoints: List[Keypoint] = []
        for part_id, part in enumerate(self.skeleton.part_names):
            smoothed = self.smooth(heatmaps[:, :, part_id])
            if smoothed.shape != (H, W):
                raise ValueError(f"Smoothing changed heatmap shape {(H, W)} -> {smoothed.shape}")

            flat_idx = int(np.argmax(smoothed))
            row, col = divmod(flat_idx, W)
            peak = float(smoothed[row, col])
            if peak <= self.params.threshold:
                continue

            coords = FloatCoords(row / ratio_y, col / ratio_x)
            keypoints.append(Keypoint(part, part_id, coords, float(np.clip(peak, 0.0, 1.0))))

        LOGGER.debug("%d/%d parts above threshold %.3f", len(keypoints), self.skeleton.num_parts, self.params.threshold)
        if not keypoints:
            return []

        score = sum(kp.score for kp in keypoints) / self.skeleton.num_parts
        return [Pose.from_keypoints(score, keypoints)]
