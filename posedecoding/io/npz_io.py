from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, Mapping

import numpy as np

_SLOT_KEY = re.compile(r"^(?:output_)?(\d+)$")


def save_output_map(path: str | Path, output_map: Mapping[int, Any]) -> None:
    """
    Store a slot -> tensor map as a compressed .npz with keys output_<slot>.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    arrays = {f"output_{int(slot)}": np.asarray(arr, dtype=np.float32) for slot, arr in output_map.items()}
    np.savez_compressed(str(path), **arrays)


def load_output_map(path: str | Path) -> Dict[int, np.ndarray]:
    """
    Inverse of save_output_map. Keys may be "output_<slot>" or bare "<slot>".
    """
    out: Dict[int, np.ndarray] = {}
    with np.load(str(path), allow_pickle=False) as data:
        for key in data.files:
            m = _SLOT_KEY.match(key)
            if m is None:
                raise ValueError(f"{path}: unexpected array name {key!r}, expected output_<slot>")
            slot = int(m.group(1))
            if slot in out:
                raise ValueError(f"{path}: slot {slot} stored twice")
            out[slot] = data[key]
    return out
