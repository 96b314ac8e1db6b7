"""Core cache implementation

Set-associative cache model used by the simulator and the command line.
Behavior:
- The cache is composed of `num_sets` sets; each set has `associativity` lines.
  block_id  = address >> block_offset_bits
  set_index = block_id & (num_sets - 1)
  tag       = address >> (block_offset_bits + set_index_bits)
- Misses load the block into the set (write-allocate); a write always costs
  one memory write, a miss always costs one memory read.
- With `prefetch=True` every demand miss also loads the next sequential block
  if it is not already cached. Prefetches add memory reads only.
- access() returns (hit, set_index, line_index, evicted, mem_reads, mem_writes)
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from cachesim.core.address import AddressLayout, is_power_of_two
from cachesim.core.config import CacheConfig, InvalidConfiguration, ReplacementPolicy
from cachesim.core.replacement_policies import make_policy
from cachesim.data.stats_export import Statistics

logger = logging.getLogger(__name__)


@dataclass
class CacheLine:
    """One line (way) of a set.

    Fields:
    - valid: whether the line currently holds a block
    - tag: the tag of the block held
    - age: replacement order metadata, see replacement_policies
    """

    valid: bool = False
    tag: int = 0
    age: int = 0


def _validate_geometry(cache_size: int, associativity: int, block_size: int) -> int:
    """Check the geometry and return the number of sets it gives."""
    if not is_power_of_two(cache_size) or not is_power_of_two(block_size):
        raise InvalidConfiguration("Cache size and block size must be powers of 2")
    if associativity < 1:
        raise InvalidConfiguration("associativity must be >= 1")
    lines_per_cache = cache_size // block_size
    if associativity > lines_per_cache or lines_per_cache % associativity != 0:
        raise InvalidConfiguration(
            f"associativity {associativity} does not fit {lines_per_cache} lines "
            f"({cache_size} bytes / {block_size} byte blocks)"
        )
    # a divisor of a power of two is one too, so num_sets needs no extra check
    return lines_per_cache // associativity


class CacheModel:
    """Set-associative cache with FIFO/LRU replacement and optional
    next-block prefetching.
    """

    def __init__(
        self,
        cache_size: int = 32,
        associativity: int = 1,
        block_size: int = 4,
        replacement=ReplacementPolicy.LRU,
        prefetch: bool = False,
    ):
        # fail before any storage is allocated
        self.num_sets = _validate_geometry(cache_size, associativity, block_size)
        self.cache_size = cache_size
        self.associativity = associativity
        self.block_size = block_size
        self.prefetch = bool(prefetch)
        self.layout = AddressLayout.for_geometry(block_size, self.num_sets)
        self.policy = make_policy(replacement)
        self.stats = Statistics()

        # allocate the sets matrix: num_sets x associativity
        self.sets: List[List[CacheLine]] = [
            [CacheLine() for _ in range(self.associativity)] for _ in range(self.num_sets)
        ]
        logger.debug(
            "cache: size=%d block=%d assoc=%d sets=%d policy=%s prefetch=%s "
            "offset_bits=%d index_bits=%d",
            cache_size, block_size, associativity, self.num_sets, self.replacement.value,
            self.prefetch, self.block_offset_bits, self.set_index_bits,
        )

    @classmethod
    def from_config(cls, config: CacheConfig, prefetch: bool = False) -> "CacheModel":
        return cls(
            cache_size=config.cache_size,
            associativity=config.associativity,
            block_size=config.block_size,
            replacement=config.policy,
            prefetch=prefetch,
        )

    @property
    def replacement(self) -> ReplacementPolicy:
        return self.policy.policy

    @property
    def block_offset_bits(self) -> int:
        return self.layout.block_offset_bits

    @property
    def set_index_bits(self) -> int:
        return self.layout.set_index_bits

    def find_line(self, address: int) -> Tuple[Optional[int], int]:
        """Return (line_index, set_index); line_index is None on a miss."""
        set_index = self.layout.set_index(address)
        tag = self.layout.tag(address)
        for i, line in enumerate(self.sets[set_index]):
            if line.valid and line.tag == tag:
                return i, set_index
        return None, set_index

    def load_block(self, address: int) -> Tuple[int, Optional[CacheLine]]:
        """Place the block holding `address` into its set.

        Returns (line_index, evicted) where evicted is a copy of the line that
        was replaced, or None if an empty line was used.
        """
        set_index = self.layout.set_index(address)
        cache_set = self.sets[set_index]
        line_index = self.policy.victim(cache_set)
        victim = cache_set[line_index]
        evicted = replace(victim) if victim.valid else None
        if evicted is not None and logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "set %d: evicting line %d (tag %#x), eviction order %s",
                set_index, line_index, evicted.tag, self.policy.peek(cache_set),
            )
        self.policy.insert(cache_set, line_index, self.layout.tag(address))
        return line_index, evicted

    def prefetch_next(self, address: int) -> bool:
        """Load the block after `address`'s block unless already cached.

        Returns True if a memory read was issued.
        """
        next_address = self.layout.next_block_address(address)
        line_index, _ = self.find_line(next_address)
        if line_index is not None:
            return False
        self.stats.memory_reads += 1
        self.stats.prefetches += 1
        self.load_block(next_address)
        return True

    def access(self, address: int, is_write: bool = False):
        """Perform one demand access.

        Returns a tuple:
        (hit, set_index, line_index, evicted, mem_reads, mem_writes)

        - evicted: copy of the line the demand block replaced, if any
        - mem_reads / mem_writes: memory traffic caused by this access,
          including the prefetch read
        """
        reads_before = self.stats.memory_reads
        writes_before = self.stats.memory_writes
        line_index, set_index = self.find_line(address)
        evicted = None

        if line_index is not None:
            # hit: writes go straight through to memory
            hit = True
            self.stats.record_access(True)
            if is_write:
                self.stats.memory_writes += 1
            self.policy.access(self.sets[set_index], line_index)
        else:
            # miss: fetch the block first, then perform the write
            hit = False
            self.stats.record_access(False)
            self.stats.memory_reads += 1
            line_index, evicted = self.load_block(address)
            if is_write:
                self.stats.memory_writes += 1
            if self.prefetch:
                self.prefetch_next(address)

        return (
            hit,
            set_index,
            line_index,
            evicted,
            self.stats.memory_reads - reads_before,
            self.stats.memory_writes - writes_before,
        )

    def read(self, address: int) -> bool:
        return self.access(address, is_write=False)[0]

    def write(self, address: int) -> bool:
        return self.access(address, is_write=True)[0]

    def reset(self):
        """Invalidate every line and clear the statistics."""
        for s in self.sets:
            for line in s:
                line.valid = False
                line.tag = 0
                line.age = 0
        self.stats.reset()
