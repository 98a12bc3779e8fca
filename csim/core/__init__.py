"""Core cache model: geometry, address decoding, LRU sets and the simulator."""
