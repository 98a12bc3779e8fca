import pytest

from csim.core.address import CacheGeometry
from csim.core.errors import ConfigurationError
from csim.core.simulator import CacheSimulator, SimState, simulate
from csim.simulation.trace import Operation, TraceRecord, parse_trace


def L(addr):
    return TraceRecord(Operation.LOAD, addr, 1, 'L')


def S(addr):
    return TraceRecord(Operation.STORE, addr, 1, 'S')


def test_small_trace_scenario():
    # s=1, E=1, b=1: 0x10, 0x18 and 0x28 all land in set 0
    summary = simulate(1, 1, 1, parse_trace([" L 10,1", " L 10,1", " S 18,1", " L 28,1"]))
    assert summary.hits == 1
    assert summary.misses == 3
    assert summary.evictions == 2
    # the line stored at 0x18 was evicted dirty, one 2-byte block
    assert summary.dirty_eviction_bytes == 2
    assert summary.dirty_bytes == 0


def test_other_operations_are_ignored():
    records = [TraceRecord(Operation.OTHER, 0x10, 8, 'I'), L(0x10), TraceRecord(Operation.OTHER, 0x10, 4, 'M')]
    sim = CacheSimulator(CacheGeometry(s=0, E=1, b=4))
    assert sim.step(records[0]) is None
    summary = sim.run(records[1:])
    assert summary.accesses == 1
    assert summary.misses == 1


def test_dirty_bytes_reflect_end_of_run_residency():
    geometry = CacheGeometry(s=0, E=1, b=4)
    sim = CacheSimulator(geometry)
    sim.step(S(0x00))
    sim.step(L(0x00))
    # still resident and dirty: only counted at finish
    assert sim.counters.dirty_bytes == 0
    summary = sim.finish()
    assert summary.dirty_bytes == 16
    assert summary.dirty_eviction_bytes == 0


def test_repeated_stores_count_one_block():
    summary = simulate(0, 2, 3, [S(0x40)] * 5)
    assert summary.hits == 4
    assert summary.dirty_bytes == 8


def test_dirty_eviction_adds_one_block():
    # E=1, both addresses map to the only set
    summary = simulate(0, 1, 2, [S(0x0), L(0x0), L(0x100)])
    assert summary.evictions == 1
    assert summary.dirty_eviction_bytes == 4
    assert summary.dirty_bytes == 0


def test_lru_scenario_through_addresses():
    # s=0, E=2, b=4: tags are address >> 4
    A, B, C = 0x100, 0x200, 0x300
    summary = simulate(0, 2, 4, [L(A), L(B), L(A), L(C), L(A), L(B)])
    # C evicts B, so the final A hits and B misses again
    assert summary.hits == 2
    assert summary.misses == 4
    assert summary.evictions == 2


def test_callback_sees_each_counted_access():
    seen = []
    simulate(1, 1, 1, [L(0x10), TraceRecord(Operation.OTHER, 0, 0, 'I'), L(0x10)],
             callback=lambda rec, res: seen.append((rec.address, res.hit)))
    assert seen == [(0x10, False), (0x10, True)]


def test_finish_runs_once():
    sim = CacheSimulator(CacheGeometry(s=1, E=1, b=1))
    sim.run([L(0)])
    assert sim.state is SimState.DONE
    with pytest.raises(RuntimeError):
        sim.finish()
    with pytest.raises(RuntimeError):
        sim.step(L(0))


def test_bad_geometry_fails_before_running():
    with pytest.raises(ConfigurationError):
        CacheSimulator(CacheGeometry(s=33, E=1, b=32))


def test_empty_trace_gives_zero_summary():
    summary = simulate(2, 2, 2, [])
    assert (summary.hits, summary.misses, summary.evictions) == (0, 0, 0)
    assert summary.hit_rate == 0.0


def test_simulator_builds_its_own_cache_from_geometry():
    geometry = CacheGeometry(s=2, E=1, b=0)
    sim = CacheSimulator(geometry)
    assert sim.cache.geometry == geometry
    assert sim.cache.num_sets == 4
    assert not sim.step(L(0x3)).hit
    with pytest.raises(TypeError):
        CacheSimulator(geometry, cache=sim.cache)
