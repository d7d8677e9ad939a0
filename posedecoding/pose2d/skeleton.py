from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

# PoseNet (COCO-17) ordering. Channel k of the score tensor is POSENET_PART_NAMES[k].
POSENET_PART_NAMES = [
    "nose",
    "leftEye", "rightEye",
    "leftEar", "rightEar",
    "leftShoulder", "rightShoulder",
    "leftElbow", "rightElbow",
    "leftWrist", "rightWrist",
    "leftHip", "rightHip",
    "leftKnee", "rightKnee",
    "leftAnkle", "rightAnkle",
]

# (parent, child) edges in displacement-channel order. Edge e uses displacement
# channels e (y) and e + num_edges (x).
POSENET_POSE_CHAIN = [
    ("nose", "leftEye"),
    ("leftEye", "leftEar"),
    ("nose", "rightEye"),
    ("rightEye", "rightEar"),
    ("nose", "leftShoulder"),
    ("leftShoulder", "leftElbow"),
    ("leftElbow", "leftWrist"),
    ("leftShoulder", "leftHip"),
    ("leftHip", "leftKnee"),
    ("leftKnee", "leftAnkle"),
    ("nose", "rightShoulder"),
    ("rightShoulder", "rightElbow"),
    ("rightElbow", "rightWrist"),
    ("rightShoulder", "rightHip"),
    ("rightHip", "rightKnee"),
    ("rightKnee", "rightAnkle"),
]

# CPM / Hourglass single-person heatmap models (14 channels).
CPM_PART_NAMES = [
    "top", "neck",
    "rightShoulder", "rightElbow", "rightWrist",
    "leftShoulder", "leftElbow", "leftWrist",
    "rightHip", "rightKnee", "rightAnkle",
    "leftHip", "leftKnee", "leftAnkle",
]


@dataclass(frozen=True)
class SkeletonGraph:
    """
    Part vocabulary plus a fixed list of (parent, child) edges, resolved to
    part ids once at construction.
    """
    part_names: Tuple[str, ...]
    edges: Tuple[Tuple[str, str], ...]
    part_ids: Dict[str, int]
    parent_ids: Tuple[int, ...]   # edge -> parent part id
    child_ids: Tuple[int, ...]    # edge -> child part id

    @classmethod
    def build(cls, part_names: Sequence[str], edges: Sequence[Tuple[str, str]]) -> "SkeletonGraph":
        part_ids = {name: i for i, name in enumerate(part_names)}
        if len(part_ids) != len(part_names):
            raise ValueError(f"Part names must be unique, got {list(part_names)}")

        parent_ids: List[int] = []
        child_ids: List[int] = []
        for parent, child in edges:
            if parent not in part_ids or child not in part_ids:
                raise ValueError(f"Edge ({parent!r}, {child!r}) references an unknown part")
            parent_ids.append(part_ids[parent])
            child_ids.append(part_ids[child])

        return cls(
            part_names=tuple(part_names),
            edges=tuple((p, c) for p, c in edges),
            part_ids=part_ids,
            parent_ids=tuple(parent_ids),
            child_ids=tuple(child_ids),
        )

    @property
    def num_parts(self) -> int:
        return len(self.part_names)

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    def reachable_from(self, part_id: int) -> List[int]:
        """
        Part ids connected to part_id through the edge table (undirected),
        including part_id itself, in ascending order.
        """
        seen = {part_id}
        frontier = [part_id]
        while frontier:
            cur = frontier.pop()
            for p, c in zip(self.parent_ids, self.child_ids):
                for a, b in ((p, c), (c, p)):
                    if a == cur and b not in seen:
                        seen.add(b)
                        frontier.append(b)
        return sorted(seen)


POSENET_SKELETON = SkeletonGraph.build(POSENET_PART_NAMES, POSENET_POSE_CHAIN)

# Drawing-only edges for the 14-part vocabulary; the heatmap decoder never walks them.
CPM_EDGES = [
    ("top", "neck"),
    ("neck", "rightShoulder"),
    ("rightShoulder", "rightElbow"),
    ("rightElbow", "rightWrist"),
    ("neck", "leftShoulder"),
    ("leftShoulder", "leftElbow"),
    ("leftElbow", "leftWrist"),
    ("rightShoulder", "rightHip"),
    ("rightHip", "rightKnee"),
    ("rightKnee", "rightAnkle"),
    ("leftShoulder", "leftHip"),
    ("leftHip", "leftKnee"),
    ("leftKnee", "leftAnkle"),
]

CPM_SKELETON = SkeletonGraph.build(CPM_PART_NAMES, CPM_EDGES)
