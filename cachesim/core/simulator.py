"""CacheSimulator drives the two cache runs in lock-step.

Every trace record goes first to the cache without prefetching, then to the
cache with prefetching, before the next record is looked at.
"""
import logging
from typing import Callable, Iterable, List, Optional, Tuple

from .cache import CacheModel
from .config import CacheConfig
from ..data.stats_export import Statistics

logger = logging.getLogger(__name__)


class CacheSimulator:
    def __init__(self, config: CacheConfig):
        self.config = config
        self.caches: List[CacheModel] = [
            CacheModel.from_config(config, prefetch=False),
            CacheModel.from_config(config, prefetch=True),
        ]
        self.sequence: List[Tuple[int, bool]] = []
        self.index = 0

    @property
    def runs(self) -> List[Tuple[bool, Statistics]]:
        """(prefetch, stats) for each cache, no-prefetch run first."""
        return [(c.prefetch, c.stats) for c in self.caches]

    def reset(self):
        # clear both caches and rewind the sequence pointer
        for c in self.caches:
            c.reset()
        self.index = 0

    def load_sequence(self, addresses: List[int], writes: Optional[List[bool]] = None):
        if writes is None:
            writes = [False] * len(addresses)
        self.sequence = list(zip(addresses, writes))
        self.index = 0

    def has_next(self) -> bool:
        return self.index < len(self.sequence)

    def feed(self, address: int, is_write: bool = False) -> dict:
        """Apply one access to both caches and describe what happened."""
        outcomes = []
        for c in self.caches:
            hit, set_index, line_index, evicted, mem_reads, mem_writes = c.access(address, is_write=is_write)
            outcomes.append({
                'prefetch': c.prefetch,
                'hit': hit,
                'set_index': set_index,
                'line_index': line_index,
                'evicted': evicted,
                'mem_reads': mem_reads,
                'mem_writes': mem_writes,
            })
        return {'address': address, 'is_write': is_write, 'runs': outcomes}

    def step(self) -> Optional[dict]:
        if not self.has_next():
            return None
        address, is_write = self.sequence[self.index]
        self.index += 1
        return self.feed(address, is_write)

    def run_all(self, callback: Optional[Callable[[dict], None]] = None):
        while self.has_next():
            info = self.step()
            if callback:
                callback(info)

    def run_trace(self, records: Iterable[Tuple[bool, int]]) -> int:
        """Feed (is_write, address) records; returns how many were applied."""
        count = 0
        for is_write, address in records:
            self.feed(address, is_write)
            count += 1
        logger.debug("simulated %d trace records", count)
        return count
