from __future__ import annotations

"""
Helpers for loading decoder configuration from JSON.
"""

from dataclasses import fields
from pathlib import Path
import json
from typing import Any, Dict, Union

from posedecoding.pose2d.decoders.multi_pose import PosenetParams
from posedecoding.pose2d.decoders.single_peak import HeatmapParams

DecoderParams = Union[PosenetParams, HeatmapParams]

PARAMS_BY_NAME = {
    "posenet": PosenetParams,
    "heatmap": HeatmapParams,
}


def params_from_dict(cfg: Dict[str, Any]) -> DecoderParams:
    """
    Build decoder params from a dict of the form

        {"decoder": "posenet", "params": {"output_stride": 16, "max_poses": 5}}

    Unknown decoder names and unknown parameter keys raise ValueError;
    omitted parameters keep their defaults.
    """
    name = cfg.get("decoder")
    if name not in PARAMS_BY_NAME:
        raise ValueError(f"Unknown decoder {name!r}, expected one of {sorted(PARAMS_BY_NAME)}")

    cls = PARAMS_BY_NAME[name]
    raw = cfg.get("params", {}) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"'params' must be an object, got {type(raw).__name__}")

    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - allowed)
    if unknown:
        raise ValueError(f"Unknown {name} parameters {unknown}; allowed: {sorted(allowed)}")

    return cls(**raw)


def load_decoder_config(path: str) -> DecoderParams:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(cfg).__name__}")
    return params_from_dict(cfg)
