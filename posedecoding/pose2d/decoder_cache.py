from __future__ import annotations

from collections import OrderedDict
from typing import Callable, Dict, Hashable, Optional, Type

from posedecoding.pose2d.decoders.base import PoseDecoder
from posedecoding.pose2d.decoders.multi_pose import PosenetDecoder, PosenetParams
from posedecoding.pose2d.decoders.single_peak import HeatmapParams, HeatmapPeakDecoder

DECODER_FACTORIES: Dict[Type, Callable[..., PoseDecoder]] = {
    PosenetParams: PosenetDecoder,
    HeatmapParams: HeatmapPeakDecoder,
}


def build_decoder(params) -> PoseDecoder:
    factory = DECODER_FACTORIES.get(type(params))
    if factory is None:
        raise TypeError(f"No decoder registered for {type(params).__name__}")
    return factory(params)


class DecoderCache:
    """
    Small LRU map from decoder params to a constructed decoder.

    Decoders carry no per-call state, so a cached instance is interchangeable
    with a freshly built one; the cache only saves construction. Owned by the
    caller, never global.
    """

    def __init__(self, capacity: int = 4) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be > 0, got {capacity}")
        self.capacity = int(capacity)
        self._entries: "OrderedDict[Hashable, PoseDecoder]" = OrderedDict()

    def get(self, params) -> PoseDecoder:
        decoder = self._entries.get(params)
        if decoder is not None:
            self._entries.move_to_end(params)
            return decoder

        decoder = build_decoder(params)
        self._entries[params] = decoder
        if len(self._entries) > self.capacity:
            self._entries.popitem(last=False)
        return decoder

    def peek(self, params) -> Optional[PoseDecoder]:
        return self._entries.get(params)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, params) -> bool:
        return params in self._entries
