from __future__ import annotations

"""
Seed extraction for the multi-person decoder.

Every (row, col, part) cell whose activated score clears the threshold and is
not exceeded by any cell of the same part within a (2r+1) x (2r+1) window
(clipped at the grid border) becomes a candidate. Cells equal to their
neighbourhood maximum are kept, so a plateau yields one candidate per cell.
Candidates are pushed in scan order: row outer, column, then part innermost.
"""

import heapq
from typing import List, Sequence, Tuple

import cv2
import numpy as np

from posedecoding.pose2d.datatypes import IntCoords, PartCandidate
from posedecoding.pose2d.geometry import sigmoid


class PartScoreQueue:
    """
    Max-priority queue of PartCandidate by score. Equal scores pop in push
    order, which callers should not rely on.
    """

    def __init__(self) -> None:
        self._heap: List[Tuple[float, int, PartCandidate]] = []
        self._count = 0

    def push(self, cand: PartCandidate) -> None:
        heapq.heappush(self._heap, (-cand.score, self._count, cand))
        self._count += 1

    def pop(self) -> PartCandidate:
        return heapq.heappop(self._heap)[2]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)


def local_maximum_mask(activated: np.ndarray, radius: int) -> np.ndarray:
    """
    (H, W, K) bool mask: True where no cell of the same channel within
    Chebyshev distance `radius` is strictly greater.
    """
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")
    activated = np.asarray(activated, dtype=np.float32)
    if activated.ndim != 3:
        raise ValueError(f"Expected (H, W, K) scores, got shape {activated.shape}")
    kernel = np.ones((2 * radius + 1, 2 * radius + 1), dtype=np.uint8)
    mask = np.zeros(activated.shape, dtype=bool)
    for k in range(activated.shape[2]):
        channel = np.ascontiguousarray(activated[:, :, k])
        # dilate == sliding-window max; the default border never wins the max
        window_max = cv2.dilate(channel, kernel).reshape(channel.shape)
        mask[:, :, k] = channel >= window_max
    return mask


def build_part_with_score_queue(
    scores: np.ndarray,
    threshold: float,
    local_maximum_radius: int,
    part_names: Sequence[str],
) -> PartScoreQueue:
    """
    scores: raw (pre-activation) [H, W, num_parts] tensor.
    """
    activated = sigmoid(scores)
    keep = (activated >= threshold) & local_maximum_mask(activated, local_maximum_radius)

    pq = PartScoreQueue()
    # np.nonzero walks C order: row, col, part
    for y, x, k in zip(*np.nonzero(keep)):
        pq.push(PartCandidate(
            part=part_names[int(k)],
            part_id=int(k),
            grid=IntCoords(int(y), int(x)),
            score=float(activated[y, x, k]),
        ))
    return pq
