from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Mapping

from posedecoding.pose2d.datatypes import Pose


class PoseDecoder(ABC):
    """
    Decoder interface: raw network outputs in, poses out.

    Implementations hold only construction-time configuration; everything
    built during decode() is local to the call, so one instance can serve
    any number of calls.
    """

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def decode(self, output_map: Mapping[int, Any]) -> List[Pose]: ...
