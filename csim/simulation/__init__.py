"""Simulation package shim.

Exposes the trace reader at `csim.simulation` so callers can write
`from csim.simulation import read_trace`.
"""
from .trace import Operation, TraceRecord, parse_trace, read_trace

__all__ = ["Operation", "TraceRecord", "parse_trace", "read_trace"]
