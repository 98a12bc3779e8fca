"""Entry point for the cache simulator.

Usage:
    python run.py -s <s> -E <E> -b <b> -t <tracefile> [-v]
    python run.py --demo   # runs a quick built-in scenario, no trace needed
"""
import sys

from csim.core.simulator import simulate
from csim.data.stats_export import format_summary
from csim.simulation.trace import parse_trace


def headless_test():
    # s=1, E=1, b=1: two sets of one 2-byte line each
    trace = [" L 10,1", " L 10,1", " S 18,1", " L 28,1"]
    summary = simulate(1, 1, 1, parse_trace(trace))
    print(format_summary(summary))
    print('Hit rate:', summary.hit_rate)


def main():
    if '--demo' in sys.argv:
        headless_test()
    else:
        from csim.simulation.cli import main as cli_main
        cli_main()


if __name__ == '__main__':
    main()
