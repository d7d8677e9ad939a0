from __future__ import annotations

"""
Typed views over the raw slot -> array map an inference runtime hands back.

Slot layout (PoseNet):
    0: heatmap scores      [H, W, num_parts]
    1: offsets             [H, W, 2 * num_parts]   (y channels, then x)
    2: forward displacement  [H, W, 2 * num_edges] (y channels, then x)
    3: backward displacement [H, W, 2 * num_edges]

Slot layout (CPM / Hourglass):
    0: heatmaps            [H, W, num_parts]

Each array may carry a leading batch dimension of size 1.
"""

from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np


def _as_hwc(output_map: Mapping[int, Any], slot: int, name: str) -> np.ndarray:
    if slot not in output_map:
        raise KeyError(f"Missing output slot {slot} ({name}); available slots: {sorted(output_map)}")

    arr = np.asarray(output_map[slot], dtype=np.float32)
    if arr.ndim == 4:
        if arr.shape[0] != 1:
            raise ValueError(f"{name}: expected batch size 1, got shape {arr.shape}")
        arr = arr[0]
    if arr.ndim != 3:
        raise ValueError(f"{name}: expected [H, W, C] or [1, H, W, C], got shape {arr.shape}")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ValueError(f"{name}: empty spatial dimensions {arr.shape}")
    return arr


def _check_channels(arr: np.ndarray, expected: int, name: str) -> None:
    if arr.shape[2] != expected:
        raise ValueError(f"{name}: expected {expected} channels, got shape {arr.shape}")


def _check_grid(arr: np.ndarray, height: int, width: int, name: str) -> None:
    if arr.shape[:2] != (height, width):
        raise ValueError(f"{name}: grid {arr.shape[:2]} does not match scores grid {(height, width)}")


@dataclass(frozen=True)
class PosenetOutputs:
    scores: np.ndarray
    offsets: np.ndarray
    displacements_fwd: np.ndarray
    displacements_bwd: np.ndarray

    @property
    def height(self) -> int:
        return int(self.scores.shape[0])

    @property
    def width(self) -> int:
        return int(self.scores.shape[1])

    @classmethod
    def from_output_map(cls, output_map: Mapping[int, Any], num_parts: int, num_edges: int) -> "PosenetOutputs":
        scores = _as_hwc(output_map, 0, "scores")
        offsets = _as_hwc(output_map, 1, "offsets")
        fwd = _as_hwc(output_map, 2, "displacements_fwd")
        bwd = _as_hwc(output_map, 3, "displacements_bwd")

        _check_channels(scores, num_parts, "scores")
        _check_channels(offsets, 2 * num_parts, "offsets")
        _check_channels(fwd, 2 * num_edges, "displacements_fwd")
        _check_channels(bwd, 2 * num_edges, "displacements_bwd")

        H, W = scores.shape[:2]
        _check_grid(offsets, H, W, "offsets")
        _check_grid(fwd, H, W, "displacements_fwd")
        _check_grid(bwd, H, W, "displacements_bwd")

        return cls(scores=scores, offsets=offsets, displacements_fwd=fwd, displacements_bwd=bwd)


@dataclass(frozen=True)
class HeatmapOutputs:
    heatmaps: np.ndarray

    @classmethod
    def from_output_map(cls, output_map: Mapping[int, Any], num_parts: int) -> "HeatmapOutputs":
        heatmaps = _as_hwc(output_map, 0, "heatmaps")
        _check_channels(heatmaps, num_parts, "heatmaps")
        return cls(heatmaps=heatmaps)
