from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from posedecoding.pose2d.datatypes import Pose


def poses_to_records(poses: Sequence[Pose]) -> List[Dict[str, Any]]:
    return [pose.to_dict() for pose in poses]


def save_poses_json(path: str | Path, poses: Sequence[Pose], **meta: Any) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = dict(meta)
    payload["poses"] = poses_to_records(poses)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
