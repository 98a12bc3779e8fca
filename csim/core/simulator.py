"""CacheSimulator drives a trace through the cache and keeps the counters.

Feeds each record's address through the decoder into the core Cache and
updates Counters from the AccessResult. finish() runs the end-of-run dirty
sweep once and freezes the counters into a CacheSummary.
"""
import logging
from enum import Enum
from typing import Callable, Iterable, Optional

from csim.core.address import AddressDecoder, CacheGeometry
from csim.core.cache import AccessResult, Cache
from csim.data.stats_export import CacheSummary, Counters
from csim.simulation.trace import Operation, TraceRecord

logger = logging.getLogger(__name__)

AccessCallback = Callable[[TraceRecord, AccessResult], None]


class SimState(Enum):
    RUNNING = "running"
    DONE = "done"


class CacheSimulator:
    def __init__(self, geometry: CacheGeometry):
        self.geometry = geometry.validate()
        self.decoder = AddressDecoder(geometry)
        self.cache = Cache(geometry)
        self.counters = Counters(block_size=geometry.block_size)
        self.state = SimState.RUNNING
        self.summary: Optional[CacheSummary] = None

    def step(self, record: TraceRecord) -> Optional[AccessResult]:
        """Simulate one record. Returns None for operations that are not counted."""
        if self.state is SimState.DONE:
            raise RuntimeError("simulation already finished")
        if record.op is Operation.LOAD:
            is_write = False
        elif record.op is Operation.STORE:
            is_write = True
        else:
            return None

        tag, set_index, _ = self.decoder.decode(record.address)
        result = self.cache.access(set_index, tag, is_write=is_write)
        if result.hit:
            self.counters.record_hit()
        else:
            self.counters.record_miss(evicted=result.eviction, evicted_dirty=result.evicted_dirty)
        return result

    def finish(self) -> CacheSummary:
        if self.state is SimState.DONE:
            raise RuntimeError("simulation already finished")
        self.counters.record_resident_dirty(self.cache.teardown())
        self.state = SimState.DONE
        self.summary = self.counters.snapshot()
        logger.debug("simulation done: %s", self.summary)
        return self.summary

    def run(self, records: Iterable[TraceRecord], callback: Optional[AccessCallback] = None) -> CacheSummary:
        for record in records:
            result = self.step(record)
            if result is not None and callback:
                callback(record, result)
        return self.finish()


def simulate(s: int, E: int, b: int, records: Iterable[TraceRecord],
             callback: Optional[AccessCallback] = None) -> CacheSummary:
    """Build a cache for (s, E, b), run `records` through it and return the summary."""
    return CacheSimulator(CacheGeometry(s=s, E=E, b=b)).run(records, callback)
