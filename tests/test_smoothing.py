"""Tests for the 5x5 Gaussian smoothing wrapper."""

import numpy as np
import pytest

from posedecoding.pose2d.smoothing import gaussian_blur


def test_shape_and_dtype_preserved() -> None:
    src = np.zeros((7, 11), dtype=np.float64)
    out = gaussian_blur(src)
    assert out.shape == (7, 11)
    assert out.dtype == np.float32


def test_interior_impulse_spreads_symmetrically() -> None:
    src = np.zeros((9, 9), dtype=np.float32)
    src[4, 4] = 1.0
    out = gaussian_blur(src)
    assert np.unravel_index(int(np.argmax(out)), out.shape) == (4, 4)
    assert out.sum() == pytest.approx(1.0, abs=1e-5)
    np.testing.assert_allclose(out, out.T, atol=1e-7)
    np.testing.assert_allclose(out, out[::-1, ::-1], atol=1e-7)
    assert out[4, 7] == 0.0  # outside the 5x5 support


def test_off_centre_impulse_keeps_its_location() -> None:
    """Row/col are never swapped on a non-square map."""
    src = np.zeros((6, 15), dtype=np.float32)
    src[2, 11] = 1.0
    out = gaussian_blur(src)
    assert np.unravel_index(int(np.argmax(out)), out.shape) == (2, 11)


def test_does_not_modify_input() -> None:
    src = np.zeros((5, 5), dtype=np.float32)
    src[2, 2] = 1.0
    before = src.copy()
    gaussian_blur(src)
    np.testing.assert_array_equal(src, before)


@pytest.mark.parametrize("bad", [np.zeros((4, 4, 1), dtype=np.float32), np.zeros((4,), dtype=np.float32)])
def test_rejects_non_2d(bad) -> None:
    with pytest.raises(ValueError):
        gaussian_blur(bad)


@pytest.mark.parametrize("ksize", [0, 4, -3])
def test_rejects_bad_kernel(ksize) -> None:
    with pytest.raises(ValueError):
        gaussian_blur(np.zeros((5, 5), dtype=np.float32), ksize=ksize)
