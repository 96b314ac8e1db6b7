"""Entry point for the cache simulator.

Usage:
    python run.py <cache_size> <associativity> <policy> <block_size> <trace_file>
    python run.py --demo   # runs a quick headless check of the core logic
"""
import sys

from cachesim.core.config import CacheConfig, ReplacementPolicy
from cachesim.core.simulator import CacheSimulator
from cachesim.data.stats_export import format_report


def demo():
    # direct-mapped, 8 sets of 4-byte blocks; reads with repeats and neighbours
    config = CacheConfig(cache_size=32, associativity=1, block_size=4, policy=ReplacementPolicy.FIFO)
    sim = CacheSimulator(config)
    seq = [0x0, 0x4, 0x0, 0x8, 0x20, 0x0, 0xC, 0x10]
    sim.load_sequence(seq, writes=[False, False, True, False, False, True, False, False])
    sim.run_all()
    print(format_report(sim.runs))


def main():
    if '--demo' in sys.argv:
        demo()
        return 0
    from cachesim.cli import main as cli_main
    return cli_main()


if __name__ == '__main__':
    sys.exit(main())
