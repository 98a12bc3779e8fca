"""Core cache implementation

The cache is an array of S = 2^s sets; each set holds at most E lines kept
in recency order. Lines live directly inside their set's OrderedDict, keyed
by tag, so a lookup is a dict probe and LRU bookkeeping is just
move_to_end / popitem(last=False):

    oldest (LRU) ... newest (MRU)

Behavior of access(set_index, tag, is_write):
- hit: mark dirty on a store, promote to MRU
- miss: evict the LRU line if the set is full, insert the new line as MRU
  with dirty = is_write

The cache itself keeps no counters; it reports what happened through
AccessResult and the simulator does the accounting.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

from csim.core.address import CacheGeometry
from csim.core.errors import ResourceError

logger = logging.getLogger(__name__)

# refuse geometries whose set array could never fit in memory
MAX_SETS = 1 << 20


@dataclass
class CacheLine:
    """container for a cache line (way).

    Fields:
    - tag: the tag stored in the line
    - valid: whether the line currently holds useful data
    - dirty: whether the line was written since it was brought in
    """

    tag: int
    valid: bool = True
    dirty: bool = False


class CacheSet:
    """One associative bucket of at most `capacity` lines, LRU ordered."""

    def __init__(self, capacity: int):
        self.capacity = int(capacity)
        self._lines: "OrderedDict[int, CacheLine]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CacheLine]:
        """Iterate lines from most to least recently used."""
        return reversed(list(self._lines.values()))

    @property
    def is_full(self) -> bool:
        return len(self._lines) >= self.capacity

    def find(self, tag: int) -> Optional[CacheLine]:
        line = self._lines.get(tag)
        if line is not None and line.valid:
            return line
        return None

    def promote(self, line: CacheLine) -> None:
        """Mark `line` as most recently used."""
        self._lines.move_to_end(line.tag)

    def evict_lru(self) -> CacheLine:
        if not self._lines:
            raise IndexError("evict_lru() called on an empty set")
        _, line = self._lines.popitem(last=False)
        return line

    def insert_new(self, tag: int, dirty: bool = False) -> Optional[CacheLine]:
        """Insert a fresh line as MRU, evicting the LRU line first if full.

        Returns the evicted line, or None when there was room.
        """
        # re-inserting a resident tag replaces that line
        self._lines.pop(tag, None)
        evicted = None
        if self.is_full:
            evicted = self.evict_lru()
        self._lines[tag] = CacheLine(tag=tag, valid=True, dirty=bool(dirty))
        return evicted

    def tags(self) -> List[int]:
        """Tags from MRU to LRU (for tests and verbose output)."""
        return [line.tag for line in self]

    def clear(self) -> None:
        self._lines.clear()


class AccessOutcome(Enum):
    HIT = "hit"
    MISS = "miss"
    MISS_EVICT = "miss eviction"


@dataclass(frozen=True)
class AccessResult:
    outcome: AccessOutcome
    evicted_dirty: bool = False
    evicted: Optional[CacheLine] = None

    @property
    def hit(self) -> bool:
        return self.outcome is AccessOutcome.HIT

    @property
    def eviction(self) -> bool:
        return self.outcome is AccessOutcome.MISS_EVICT


class Cache:
    """Set-associative, write-back, LRU cache model.
    """

    def __init__(self, geometry: CacheGeometry):
        self.geometry = geometry.validate()
        self.num_sets = geometry.num_sets
        self.associativity = geometry.E
        self.block_size = geometry.block_size
        self._torn_down = False

        if self.num_sets > MAX_SETS:
            raise ResourceError(
                f"cannot allocate {self.num_sets} sets (s={geometry.s}); limit is {MAX_SETS}"
            )
        try:
            self.sets: List[CacheSet] = [CacheSet(self.associativity) for _ in range(self.num_sets)]
        except MemoryError as exc:
            raise ResourceError(f"cannot allocate {self.num_sets} sets") from exc
        logger.debug(
            "allocated cache: S=%d E=%d B=%d", self.num_sets, self.associativity, self.block_size
        )

    def access(self, set_index: int, tag: int, is_write: bool = False) -> AccessResult:
        """Perform one load (is_write=False) or store (is_write=True)."""
        if self._torn_down:
            raise RuntimeError("cache has already been torn down")
        cache_set = self.sets[set_index]

        line = cache_set.find(tag)
        if line is not None:
            if is_write:
                line.dirty = True
            cache_set.promote(line)
            return AccessResult(AccessOutcome.HIT)

        evicted = cache_set.insert_new(tag, dirty=is_write)
        if evicted is None:
            return AccessResult(AccessOutcome.MISS)
        return AccessResult(AccessOutcome.MISS_EVICT, evicted_dirty=evicted.dirty, evicted=evicted)

    def resident_lines(self) -> Iterator[CacheLine]:
        for cache_set in self.sets:
            yield from cache_set

    def teardown(self) -> int:
        """Empty the cache and return how many resident lines were dirty.

        May only be called once.
        """
        if self._torn_down:
            raise RuntimeError("cache has already been torn down")
        dirty_lines = sum(1 for line in self.resident_lines() if line.dirty)
        for cache_set in self.sets:
            cache_set.clear()
        self._torn_down = True
        logger.debug("cache torn down with %d dirty lines resident", dirty_lines)
        return dirty_lines

    @property
    def torn_down(self) -> bool:
        return self._torn_down


__all__ = ["CacheLine", "CacheSet", "Cache", "AccessOutcome", "AccessResult", "MAX_SETS"]
