"""Age based replacement policies for one cache set.

Both policies keep their state in the `age` field of each line, so the rest
of the cache can call them interchangeably:

- victim(lines): index of the line a new block should go into
- insert(lines, index, tag): fill `lines[index]` and age the other lines
- access(lines, index): notify the policy of a hit on `lines[index]`
- peek(lines): line indices ordered from next victim to most recent

FIFO only ages lines on insertion, so age is "how many blocks were loaded
after this one". LRU also ages on every hit, so age becomes "how many
distinct touches happened since this line was used".
"""
from typing import List, Sequence

from cachesim.core.config import ReplacementPolicy


class FIFOReplacement:
    """First-In-First-Out: hits never change the eviction order."""

    policy = ReplacementPolicy.FIFO

    def victim(self, lines: Sequence) -> int:
        replace_idx = -1
        max_age = 0
        for i, line in enumerate(lines):
            if not line.valid:
                # empty way always wins
                return i
            if line.age >= max_age:
                max_age = line.age
                replace_idx = i
        return replace_idx

    def insert(self, lines: Sequence, index: int, tag: int) -> None:
        line = lines[index]
        line.valid = True
        line.tag = tag
        self._make_youngest(lines, index)

    def access(self, lines: Sequence, index: int) -> None:
        return None

    def peek(self, lines: Sequence) -> List[int]:
        valid = [i for i, line in enumerate(lines) if line.valid]
        return sorted(valid, key=lambda i: lines[i].age, reverse=True)

    @staticmethod
    def _make_youngest(lines: Sequence, index: int) -> None:
        # touched line age=0, every other valid line in the set age++
        for i, line in enumerate(lines):
            if not line.valid:
                continue
            if i == index:
                line.age = 0
            else:
                line.age += 1


class LRUReplacement(FIFOReplacement):
    """Least-Recently-Used: a hit makes the line the youngest in its set."""

    policy = ReplacementPolicy.LRU

    def access(self, lines: Sequence, index: int) -> None:
        self._make_youngest(lines, index)


def make_policy(policy) -> FIFOReplacement:
    """Build the policy object for a `ReplacementPolicy` (or its name)."""
    if not isinstance(policy, ReplacementPolicy):
        policy = ReplacementPolicy.parse(policy)
    if policy is ReplacementPolicy.LRU:
        return LRUReplacement()
    return FIFOReplacement()


__all__ = ["FIFOReplacement", "LRUReplacement", "make_policy"]
