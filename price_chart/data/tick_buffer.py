# price_chart/data/tick_buffer.py
"""
Coalesces live ticks so only the latest per symbol is merged
"""
import logging
from typing import Dict, List

from .models import Tick

logger = logging.getLogger(__name__)


class TickBuffer:
    """
    Last-write-wins buffer of pending ticks, keyed by symbol

    A newer tick replaces the pending one for its symbol. The traded volume
    of the replaced tick is carried over so coalescing loses no volume.
    """

    def __init__(self):
        self.pending: Dict[str, Tick] = {}
        self.stats = {
            'received': 0,
            'coalesced': 0,
            'out_of_order': 0
        }

    def __len__(self) -> int:
        return len(self.pending)

    def push(self, tick: Tick):
        symbol = tick.symbol.upper()
        self.stats['received'] += 1

        previous = self.pending.get(symbol)
        if previous is None:
            self.pending[symbol] = Tick(symbol, tick.price, tick.timestamp, tick.volume)
            return

        self.stats['coalesced'] += 1
        if tick.timestamp < previous.timestamp:
            # Late delivery: keep the newer price, still count its volume
            self.stats['out_of_order'] += 1
            previous.volume += tick.volume
            return

        self.pending[symbol] = Tick(symbol, tick.price, tick.timestamp, previous.volume + tick.volume)

    def drain(self) -> List[Tick]:
        """Return pending ticks and clear the buffer"""
        ticks = list(self.pending.values())
        self.pending.clear()
        return ticks

    def clear(self):
        self.pending.clear()

    def get_stats(self) -> dict:
        return self.stats.copy()
