"""Shared synthetic network outputs."""

from typing import Dict

import numpy as np
import pytest

from posedecoding.pose2d.skeleton import POSENET_SKELETON

LOW = -5.0


class PosenetTensors:
    """Mutable PoseNet output set: low scores, zero offsets and displacements."""

    def __init__(self, height: int = 8, width: int = 8) -> None:
        P = POSENET_SKELETON.num_parts
        E = POSENET_SKELETON.num_edges
        self.num_parts = P
        self.num_edges = E
        self.scores = np.full((height, width, P), LOW, dtype=np.float32)
        self.offsets = np.zeros((height, width, 2 * P), dtype=np.float32)
        self.fwd = np.zeros((height, width, 2 * E), dtype=np.float32)
        self.bwd = np.zeros((height, width, 2 * E), dtype=np.float32)

    def set_offset(self, y: int, x: int, part_id: int, dy: float, dx: float) -> None:
        self.offsets[y, x, part_id] = dy
        self.offsets[y, x, part_id + self.num_parts] = dx

    def set_displacement(self, field: np.ndarray, y: int, x: int, edge: int, dy: float, dx: float) -> None:
        field[y, x, edge] = dy
        field[y, x, edge + self.num_edges] = dx

    def output_map(self, batched: bool = True) -> Dict[int, np.ndarray]:
        arrays = [self.scores, self.offsets, self.fwd, self.bwd]
        if batched:
            arrays = [a[None] for a in arrays]
        return {slot: a.copy() for slot, a in enumerate(arrays)}


@pytest.fixture
def posenet_tensors() -> PosenetTensors:
    return PosenetTensors()


@pytest.fixture
def heatmap_map():
    """Factory: (H, W) zero heatmaps for 14 parts, peaks given as {part: (row, col, value)}."""

    def _make(height: int = 48, width: int = 48, peaks=None, num_parts: int = 14):
        hm = np.zeros((1, height, width, num_parts), dtype=np.float32)
        for part_id, (row, col, value) in (peaks or {}).items():
            hm[0, row, col, part_id] = value
        return {0: hm}

    return _make


@pytest.fixture
def make_posenet_tensors():
    return PosenetTensors
