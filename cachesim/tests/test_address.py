import random

import pytest
from cachesim.core.address import AddressLayout, is_power_of_two, log2_int


def test_power_of_two_helpers():
    assert [x for x in range(0, 70) if is_power_of_two(x)] == [1, 2, 4, 8, 16, 32, 64]
    assert log2_int(1) == 0
    assert log2_int(4) == 2
    assert log2_int(1024) == 10


def test_decompose_direct_mapped_layout():
    # 8 sets of 4-byte blocks: 2 offset bits, 3 index bits
    layout = AddressLayout.for_geometry(block_size=4, num_sets=8)
    assert layout.block_offset_bits == 2
    assert layout.set_index_bits == 3
    # 0b1_011_10 -> tag 1, set 3, offset 2
    addr = 0b101110
    assert layout.block_id(addr) == 0b1011
    assert layout.decompose(addr) == (1, 3, 2)


def test_single_set_has_no_index_bits():
    layout = AddressLayout.for_geometry(block_size=4, num_sets=1)
    assert layout.set_index_bits == 0
    for addr in (0x0, 0x4, 0xFFFC, 0x12345678):
        assert layout.set_index(addr) == 0
        assert layout.tag(addr) == addr >> 2


def test_next_block_address():
    layout = AddressLayout.for_geometry(block_size=16, num_sets=4)
    assert layout.next_block_address(0x0) == 0x10
    assert layout.next_block_address(0x1F) == 0x20
    assert layout.next_block_address(0x7ffe5c) == 0x7ffe60


@pytest.mark.parametrize('block_size,num_sets', [(1, 1), (4, 8), (16, 1), (64, 256), (8, 2)])
def test_compose_reverses_decompose(block_size, num_sets):
    layout = AddressLayout.for_geometry(block_size, num_sets)
    rng = random.Random(1234)
    for _ in range(300):
        addr = rng.getrandbits(48)
        tag, set_index, offset = layout.decompose(addr)
        assert layout.compose(tag, set_index, offset) == addr
