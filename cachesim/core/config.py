"""Cache configuration and its validation.

The command line hands us four strings (size, associativity, policy, block
size). `CacheConfig.from_strings` turns them into a validated `CacheConfig`
in the same order the checks are reported to the user:

1. cache size and block size must be powers of two
2. the policy must be `fifo` or `lru`
3. associativity is `direct`, `assoc` or `assoc:<n>` with n a power of two
"""
import re
from dataclasses import dataclass
from enum import Enum

from cachesim.core.address import is_power_of_two


class InvalidConfiguration(ValueError):
    """Raised for cache geometry or options that cannot be simulated."""


class ReplacementPolicy(Enum):
    FIFO = "FIFO"
    LRU = "LRU"

    @classmethod
    def parse(cls, name: str) -> "ReplacementPolicy":
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            raise InvalidConfiguration("Invalid replacement policy") from None


_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _to_int(text: str) -> int:
    """Read the leading decimal number of `text` ("32abc" -> 32).

    Input without one gives 0, which is then reported like any other bad size.
    """
    m = _LEADING_INT_RE.match(str(text))
    if m is None:
        return 0
    return int(m.group(1), 10)


def parse_associativity(text: str, cache_size: int, block_size: int) -> int:
    """Translate the associativity syntax into a number of lines per set."""
    text = str(text).strip()
    if text == "direct":
        return 1
    if text == "assoc":
        # fully associative: one set holding every line
        return cache_size // block_size
    if text.startswith("assoc:"):
        n = _to_int(text[len("assoc:"):])
        if not is_power_of_two(n):
            raise InvalidConfiguration("Associativity must be a power of 2")
        return n
    raise InvalidConfiguration("Invalid associativity")


@dataclass(frozen=True)
class CacheConfig:
    cache_size: int
    associativity: int
    block_size: int
    policy: ReplacementPolicy = ReplacementPolicy.LRU

    @classmethod
    def from_strings(cls, cache_size: str, associativity: str, policy: str, block_size: str) -> "CacheConfig":
        size = _to_int(cache_size)
        block = _to_int(block_size)
        if not is_power_of_two(size) or not is_power_of_two(block):
            raise InvalidConfiguration("Cache size and block size must be powers of 2")
        replacement = ReplacementPolicy.parse(policy)
        assoc = parse_associativity(associativity, size, block)
        return cls(cache_size=size, associativity=assoc, block_size=block, policy=replacement)
