from __future__ import annotations

import cv2
import numpy as np

KERNEL_SIZE = 5
BORDER = cv2.BORDER_REFLECT_101


def gaussian_blur(heatmap: np.ndarray, ksize: int = KERNEL_SIZE) -> np.ndarray:
    """
    Separable Gaussian blur of a single-channel (H, W) map.

    Sigma is derived from ksize (sigma=0 in OpenCV terms) and borders are
    reflected without repeating the edge pixel (gfedcb|abcdefgh|gfedcba).
    The array is blurred in its own (row, col) layout; it is never flattened
    or transposed, so the returned map indexes exactly like the input.
    """
    if heatmap.ndim != 2:
        raise ValueError(f"Expected 2D heatmap, got shape {heatmap.shape}")
    if ksize <= 0 or ksize % 2 == 0:
        raise ValueError(f"Kernel size must be a positive odd integer, got {ksize}")

    src = np.ascontiguousarray(heatmap, dtype=np.float32)
    out = cv2.GaussianBlur(src, (ksize, ksize), sigmaX=0.0, sigmaY=0.0, borderType=BORDER)
    return out.reshape(src.shape)
