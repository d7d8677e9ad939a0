from __future__ import annotations

"""
Multi-person PoseNet decoding.

Seeds come from local maxima of the part heatmaps, strongest first. Each seed
that is not a near-duplicate of the same part in an already accepted pose is
grown into a full skeleton by walking the displacement fields along the
skeleton edges, refining every hop with the short-range offsets.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

import numpy as np

from posedecoding.pose2d.candidates import build_part_with_score_queue
from posedecoding.pose2d.datatypes import FloatCoords, IntCoords, Keypoint, PartCandidate, Pose
from posedecoding.pose2d.decoders.base import PoseDecoder
from posedecoding.pose2d.geometry import (
    grid_to_image,
    offset_at,
    sigmoid,
    squared_distance,
    strided_index_near_point,
)
from posedecoding.pose2d.skeleton import POSENET_SKELETON, SkeletonGraph
from posedecoding.pose2d.tensors import PosenetOutputs
from posedecoding.pose2d.validation import require_int, require_real

LOGGER = logging.getLogger("posedecoding.multi_pose")

OFFSET_REFINE_STEPS = 2


@dataclass(frozen=True)
class PosenetParams:
    output_stride: int = 16
    threshold: float = 0.5
    max_poses: int = 1
    nms_radius: int = 20
    local_maximum_radius: int = 1

    def __post_init__(self) -> None:
        require_int("output_stride", self.output_stride, 1)
        require_real("threshold", self.threshold, 0.0, 1.0)
        require_int("max_poses", self.max_poses, 1)
        require_int("nms_radius", self.nms_radius, 1)
        require_int("local_maximum_radius", self.local_maximum_radius, 0)


def within_nms_radius_of_corresponding_point(
    poses: List[Pose],
    squared_nms_radius: float,
    point: FloatCoords,
    part_id: int,
) -> bool:
    for pose in poses:
        other = pose.get(part_id)
        if other is None:
            continue
        if squared_distance(point, other.coords) <= squared_nms_radius:
            return True
    return False


def get_instance_score(
    keypoints: Dict[int, Keypoint],
    existing_poses: List[Pose],
    squared_nms_radius: float,
    num_parts: int,
) -> float:
    """
    Sum of keypoint scores, ignoring keypoints that land within the NMS radius
    of the same part in an earlier pose, divided by the vocabulary size.
    """
    total = 0.0
    for part_id, kp in keypoints.items():
        if within_nms_radius_of_corresponding_point(existing_poses, squared_nms_radius, kp.coords, part_id):
            continue
        total += kp.score
    return total / num_parts


class PosenetDecoder(PoseDecoder):
    def __init__(self, params: PosenetParams, skeleton: SkeletonGraph = POSENET_SKELETON) -> None:
        self.params = params
        self.skeleton = skeleton

    def name(self) -> str:
        return "posenet"

    # ---- seed localisation ----

    def get_image_coords(self, cand: PartCandidate, offsets: np.ndarray) -> FloatCoords:
        offset = offset_at(offsets, cand.grid, cand.part_id, self.skeleton.num_parts)
        return grid_to_image(cand.grid, offset, self.params.output_stride)

    # ---- graph traversal ----

    def _displacement(self, edge: int, grid: IntCoords, displacements: np.ndarray) -> FloatCoords:
        cell = displacements[grid.y, grid.x]
        return FloatCoords(float(cell[edge]), float(cell[edge + self.skeleton.num_edges]))

    def traverse_to_target_keypoint(
        self,
        edge: int,
        source: Keypoint,
        target_id: int,
        outputs: PosenetOutputs,
        displacements: np.ndarray,
    ) -> Keypoint:
        stride = self.params.output_stride
        H, W = outputs.height, outputs.width

        source_grid = strided_index_near_point(source.coords, stride, H, W)
        disp = self._displacement(edge, source_grid, displacements)
        target = FloatCoords(source.y + disp.y, source.x + disp.x)

        for _ in range(OFFSET_REFINE_STEPS):
            grid = strided_index_near_point(target, stride, H, W)
            offset = offset_at(outputs.offsets, grid, target_id, self.skeleton.num_parts)
            target = grid_to_image(grid, offset, stride)

        grid = strided_index_near_point(target, stride, H, W)
        score = float(sigmoid(float(outputs.scores[grid.y, grid.x, target_id])))
        return Keypoint(self.skeleton.part_names[target_id], target_id, target, score)

    def decode_pose(self, root: PartCandidate, root_point: FloatCoords, outputs: PosenetOutputs) -> Dict[int, Keypoint]:
        sk = self.skeleton
        keypoints: Dict[int, Keypoint] = {
            root.part_id: Keypoint(root.part, root.part_id, root_point, root.score),
        }

        # child -> parent, walking the edge list backwards
        for edge in reversed(range(sk.num_edges)):
            source_id = sk.child_ids[edge]
            target_id = sk.parent_ids[edge]
            if source_id in keypoints and target_id not in keypoints:
                keypoints[target_id] = self.traverse_to_target_keypoint(
                    edge, keypoints[source_id], target_id, outputs, outputs.displacements_bwd)

        # parent -> child
        for edge in range(sk.num_edges):
            source_id = sk.parent_ids[edge]
            target_id = sk.child_ids[edge]
            if source_id in keypoints and target_id not in keypoints:
                keypoints[target_id] = self.traverse_to_target_keypoint(
                    edge, keypoints[source_id], target_id, outputs, outputs.displacements_fwd)

        return keypoints

    # ---- selection ----

    def decode(self, output_map: Mapping[int, Any]) -> List[Pose]:
        p = self.params
        outputs = PosenetOutputs.from_output_map(output_map, self.skeleton.num_parts, self.skeleton.num_edges)

        pq = build_part_with_score_queue(
            outputs.scores, p.threshold, p.local_maximum_radius, self.skeleton.part_names)
        n_candidates = len(pq)

        squared_nms_radius = float(p.nms_radius * p.nms_radius)
        poses: List[Pose] = []
        n_suppressed = 0
        while len(poses) < p.max_poses and pq:
            root = pq.pop()
            root_point = self.get_image_coords(root, outputs.offsets)

            if within_nms_radius_of_corresponding_point(poses, squared_nms_radius, root_point, root.part_id):
                n_suppressed += 1
                continue

            keypoints = self.decode_pose(root, root_point, outputs)
            score = get_instance_score(keypoints, poses, squared_nms_radius, self.skeleton.num_parts)
            poses.append(Pose.from_keypoints(score, list(keypoints.values())))

        LOGGER.debug(
            "decoded %d poses from %d candidates (%d suppressed seeds)",
            len(poses), n_candidates, n_suppressed,
        )
        # stable: equal scores keep acceptance order
        return sorted(poses, key=lambda pose: -pose.score)
