"""Tests for the single-person heatmap peak decoder."""

import numpy as np
import pytest

from posedecoding.pose2d.datatypes import FloatCoords
from posedecoding.pose2d.decoders.single_peak import HeatmapParams, HeatmapPeakDecoder
from posedecoding.pose2d.smoothing import gaussian_blur


def _identity(m: np.ndarray) -> np.ndarray:
    return np.array(m, dtype=np.float32)


def test_peak_scaled_to_input_resolution(heatmap_map) -> None:
    """48x48 heatmap for a 192 input: grid cells are 4px apart."""
    out = heatmap_map(48, 48, peaks={0: (10, 20, 1.0), 13: (40, 3, 1.0)})
    poses = HeatmapPeakDecoder(HeatmapParams(input_size=192)).decode(out)

    assert len(poses) == 1
    pose = poses[0]
    assert sorted(pose.keypoints) == [0, 13]
    assert pose.get(0).part == "top"
    assert pose.get(0).coords == FloatCoords(40.0, 80.0)
    assert pose.get(13).part == "leftAnkle"
    assert pose.get(13).coords == FloatCoords(160.0, 12.0)


def test_non_square_heatmap_keeps_row_col_order(heatmap_map) -> None:
    """A transposed buffer would put this peak off-grid or mirrored."""
    out = heatmap_map(40, 24, peaks={2: (30, 5, 1.0)})
    pose = HeatmapPeakDecoder(HeatmapParams(input_size=(160, 96))).decode(out)[0]
    assert pose.get(2).coords == FloatCoords(120.0, 20.0)


def test_emitted_parts_match_smoothed_maxima_above_threshold(heatmap_map) -> None:
    peaks = {0: (5, 5, 0.2), 1: (20, 20, 1.0), 4: (30, 10, 0.6), 9: (2, 40, 2.0)}
    out = heatmap_map(48, 48, peaks=peaks)
    hm = out[0][0]

    for threshold in (0.0, 0.02, 0.05, 0.1, 0.2, 0.5):
        expected = [k for k in range(14) if float(gaussian_blur(hm[:, :, k]).max()) > threshold]
        poses = HeatmapPeakDecoder(HeatmapParams(input_size=192, threshold=threshold)).decode(out)
        got = sorted(poses[0].keypoints) if poses else []
        assert got == expected


def test_raising_threshold_never_adds_keypoints() -> None:
    rng = np.random.default_rng(3)
    out = {0: rng.uniform(0.0, 1.0, size=(1, 24, 24, 14)).astype(np.float32)}
    counts = []
    for threshold in (0.0, 0.3, 0.5, 0.6, 0.7, 0.9):
        poses = HeatmapPeakDecoder(HeatmapParams(input_size=96, threshold=threshold)).decode(out)
        counts.append(len(poses[0]) if poses else 0)
    assert counts == sorted(counts, reverse=True)


def test_scores_are_clipped_and_pose_score_averaged(heatmap_map) -> None:
    out = heatmap_map(48, 48, peaks={3: (24, 24, 50.0)})
    pose = HeatmapPeakDecoder(HeatmapParams(input_size=192)).decode(out)[0]
    assert pose.get(3).score == 1.0
    assert pose.score == pytest.approx(1.0 / 14)


def test_flat_heatmap_ties_resolve_to_first_row_major_cell(heatmap_map) -> None:
    out = heatmap_map(8, 8)
    out[0][0, :, :, 0] = 0.5
    out[0][0, 5, 2, 1] = 0.8
    out[0][0, 3, 7, 1] = 0.8
    dec = HeatmapPeakDecoder(HeatmapParams(input_size=8), smooth=_identity)

    pose = dec.decode(out)[0]
    assert pose.get(0).coords == FloatCoords(0.0, 0.0)
    assert pose.get(1).coords == FloatCoords(3.0, 7.0)


def test_all_zero_heatmaps_give_no_pose(heatmap_map) -> None:
    assert HeatmapPeakDecoder(HeatmapParams(input_size=192)).decode(heatmap_map()) == []


def test_smoothing_must_preserve_shape(heatmap_map) -> None:
    dec = HeatmapPeakDecoder(HeatmapParams(input_size=192), smooth=lambda m: m[:-1])
    with pytest.raises(ValueError):
        dec.decode(heatmap_map(peaks={0: (1, 1, 1.0)}))


def test_decode_is_deterministic(heatmap_map) -> None:
    rng = np.random.default_rng(11)
    out = {0: rng.uniform(0.0, 1.0, size=(1, 16, 16, 14)).astype(np.float32)}
    dec = HeatmapPeakDecoder(HeatmapParams(input_size=64, threshold=0.2))
    assert [p.to_dict() for p in dec.decode(out)] == [p.to_dict() for p in dec.decode(out)]


@pytest.mark.parametrize(
    "kw",
    [
        dict(input_size=0),
        dict(input_size=(96, -1)),
        dict(input_size=96, threshold=-0.5),
        dict(input_size=96.9),
        dict(input_size="96"),
        dict(input_size=(96.0, 96)),
        dict(input_size=(96, 96, 3)),
        dict(input_size=True),
        dict(input_size=96, threshold="0.1"),
    ],
)
def test_params_reject_invalid_values(kw) -> None:
    with pytest.raises(ValueError):
        HeatmapParams(**kw)


def test_list_input_size_is_hashable() -> None:
    p = HeatmapParams(input_size=[96, 128])
    assert p.input_hw == (96, 128)
    assert hash(p) == hash(HeatmapParams(input_size=(96, 128)))
