from __future__ import annotations

"""
Small numeric helpers shared by the decoders.

Grid indices and image-space positions are kept apart: grid_to_image and
strided_index_near_point are the only conversions between the two.
"""

import math

import numpy as np

from posedecoding.pose2d.datatypes import FloatCoords, IntCoords


def sigmoid(x):
    """
    Logistic activation. Works on python floats and numpy arrays alike.
    """
    if isinstance(x, np.ndarray):
        x = x.astype(np.float32, copy=False)
        with np.errstate(over="ignore"):
            return (1.0 / (1.0 + np.exp(-x))).astype(np.float32)
    x = float(x)
    if x >= 0.0:
        return 1.0 / (1.0 + math.exp(-x))
    e = math.exp(x)
    return e / (1.0 + e)


def squared_distance(a: FloatCoords, b: FloatCoords) -> float:
    dy = a.y - b.y
    dx = a.x - b.x
    return dy * dy + dx * dx


def clamp(v: int, lo: int, hi: int) -> int:
    if v < lo:
        return lo
    if v > hi:
        return hi
    return v


def round_half_up(v: float) -> int:
    # python's round() is banker's rounding; grid snapping needs 2.5 -> 3
    return int(math.floor(v + 0.5))


def strided_index_near_point(point: FloatCoords, output_stride: int, height: int, width: int) -> IntCoords:
    """
    Nearest heatmap cell to an image-space point, clamped to the grid.
    """
    y = clamp(round_half_up(point.y / output_stride), 0, height - 1)
    x = clamp(round_half_up(point.x / output_stride), 0, width - 1)
    return IntCoords(y, x)


def offset_at(offsets: np.ndarray, grid: IntCoords, part_id: int, num_parts: int) -> FloatCoords:
    """
    Offset vector for part_id at a grid cell: y in channel part_id,
    x in channel part_id + num_parts.
    """
    cell = offsets[grid.y, grid.x]
    return FloatCoords(float(cell[part_id]), float(cell[part_id + num_parts]))


def grid_to_image(grid: IntCoords, offset: FloatCoords, output_stride: int) -> FloatCoords:
    return FloatCoords(
        grid.y * output_stride + offset.y,
        grid.x * output_stride + offset.x,
    )
