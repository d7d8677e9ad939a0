from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

T = TypeVar("T", int, float)


@dataclass(frozen=True)
class Coords(Generic[T]):
    """
    (row, column) pair. Used as an integer heatmap-grid index (IntCoords)
    and as a float image-space position (FloatCoords).
    """
    y: T
    x: T


IntCoords = Coords[int]
FloatCoords = Coords[float]


@dataclass(frozen=True)
class PartCandidate:
    """
    A local maximum of one part's heatmap, still in grid-index space.
    """
    part: str
    part_id: int
    grid: IntCoords
    score: float  # sigmoid-activated heatmap value


@dataclass(frozen=True)
class Keypoint:
    part: str
    part_id: int
    coords: FloatCoords  # image space
    score: float

    @property
    def y(self) -> float:
        return self.coords.y

    @property
    def x(self) -> float:
        return self.coords.x

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": float(self.score),
            "partId": int(self.part_id),
            "part": self.part,
            "position": {"y": float(self.coords.y), "x": float(self.coords.x)},
        }


@dataclass(frozen=True)
class Pose:
    """
    One assembled skeleton. keypoints is keyed by part id, at most one per part,
    iterated in ascending part id order.
    """
    score: float
    keypoints: Mapping[int, Keypoint] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.keypoints, MappingProxyType):
            object.__setattr__(self, "keypoints", MappingProxyType(dict(self.keypoints)))

    @classmethod
    def from_keypoints(cls, score: float, keypoints: List[Keypoint]) -> "Pose":
        by_id: Dict[int, Keypoint] = {}
        for kp in sorted(keypoints, key=lambda k: k.part_id):
            if kp.part_id in by_id:
                raise ValueError(f"Duplicate keypoint for part_id={kp.part_id} ({kp.part})")
            by_id[kp.part_id] = kp
        return cls(score=float(score), keypoints=MappingProxyType(by_id))

    def get(self, part_id: int) -> Optional[Keypoint]:
        return self.keypoints.get(part_id)

    def __len__(self) -> int:
        return len(self.keypoints)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": float(self.score),
            "keypoints": [kp.to_dict() for kp in self.keypoints.values()],
        }
