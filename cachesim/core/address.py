"""Address decomposition helpers.

An address is split (most significant bits first) into:

    [ tag | set index | block offset ]

- block offset: the low `block_offset_bits` bits
- set index:    the next `set_index_bits` bits
- tag:          whatever is left above them

Everything here is pure; the cache validates its geometry before building a
layout, so no checks are made in this module.
"""
from dataclasses import dataclass
from typing import Tuple


def is_power_of_two(x: int) -> bool:
    return x > 0 and (x & (x - 1)) == 0


def log2_int(x: int) -> int:
    """Integer log2 for powers of two (number of shifts to reach 1)."""
    count = 0
    while x > 1:
        x >>= 1
        count += 1
    return count


@dataclass(frozen=True)
class AddressLayout:
    block_offset_bits: int
    set_index_bits: int

    @classmethod
    def for_geometry(cls, block_size: int, num_sets: int) -> "AddressLayout":
        return cls(block_offset_bits=log2_int(block_size), set_index_bits=log2_int(num_sets))

    @property
    def set_mask(self) -> int:
        if self.set_index_bits == 0:
            return 0
        return (1 << self.set_index_bits) - 1

    def block_id(self, address: int) -> int:
        return address >> self.block_offset_bits

    def set_index(self, address: int) -> int:
        return self.block_id(address) & self.set_mask

    def tag(self, address: int) -> int:
        return address >> (self.block_offset_bits + self.set_index_bits)

    def block_offset(self, address: int) -> int:
        return address & ((1 << self.block_offset_bits) - 1)

    def decompose(self, address: int) -> Tuple[int, int, int]:
        """Return (tag, set_index, block_offset) for `address`."""
        return self.tag(address), self.set_index(address), self.block_offset(address)

    def compose(self, tag: int, set_index: int, offset: int = 0) -> int:
        """Inverse of decompose()."""
        address = tag << (self.set_index_bits + self.block_offset_bits)
        address |= (set_index & self.set_mask) << self.block_offset_bits
        address |= offset & ((1 << self.block_offset_bits) - 1)
        return address

    def next_block_address(self, address: int) -> int:
        # first byte of the block that sequentially follows `address`'s block
        return (self.block_id(address) + 1) << self.block_offset_bits
