"""Command line front end.

Usage:
    python run.py -s 4 -E 2 -b 4 -t traces/yi.trace
    python run.py -v -s 1 -E 1 -b 1 -t traces/yi2.trace --json out/stats.json

Geometry options can also come from CSIM_S, CSIM_E, CSIM_B and CSIM_TRACE.
"""
import logging

import click

from csim.core.address import CacheGeometry
from csim.core.cache import AccessResult
from csim.core.errors import ConfigurationError, CsimError
from csim.core.simulator import CacheSimulator
from csim.data.stats_export import Exporter, export_chart, format_summary
from csim.simulation.trace import TraceRecord, read_trace

logger = logging.getLogger(__name__)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def describe_access(record: TraceRecord, result: AccessResult) -> str:
    text = f"{record} {result.outcome.value}"
    if result.evicted_dirty:
        text += " dirty-eviction"
    return text


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('-s', 'set_bits', type=int, required=True, envvar='CSIM_S',
              help='Number of set index bits (S = 2^s is the number of sets)')
@click.option('-E', 'associativity', type=int, required=True, envvar='CSIM_E',
              help='Associativity (number of lines per set)')
@click.option('-b', 'block_bits', type=int, required=True, envvar='CSIM_B',
              help='Number of block bits (B = 2^b is the block size)')
@click.option('-t', 'trace_file', type=click.Path(exists=True, dir_okay=False), required=True,
              envvar='CSIM_TRACE', help='Name of the valgrind trace to replay')
@click.option('-v', '--verbose', is_flag=True, help='Display trace info for every access')
@click.option('--strict', is_flag=True, help='Abort on malformed trace lines instead of skipping them')
@click.option('--csv', 'csv_path', type=click.Path(dir_okay=False), help='Write the summary as CSV')
@click.option('--json', 'json_path', type=click.Path(dir_okay=False), help='Write the summary as JSON')
@click.option('--chart', 'chart_path', type=click.Path(dir_okay=False),
              help='Save a hit/miss/eviction chart (format from extension)')
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False), default='WARNING',
              show_default=True)
def main(set_bits, associativity, block_bits, trace_file, verbose, strict,
         csv_path, json_path, chart_path, log_level):
    """Simulate a set-associative LRU write-back cache over a memory trace."""
    logging.basicConfig(level=log_level.upper(), format='%(levelname)s %(name)s: %(message)s')
    geometry = CacheGeometry(s=set_bits, E=associativity, b=block_bits)
    callback = (lambda record, result: click.echo(describe_access(record, result))) if verbose else None

    try:
        sim = CacheSimulator(geometry)
        logger.info("simulating %s on %s", geometry, trace_file)
        summary = sim.run(read_trace(trace_file, strict=strict), callback=callback)
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc
    except CsimError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(format_summary(summary))

    if csv_path:
        Exporter.export_stats_csv(csv_path, summary)
    if json_path:
        Exporter.export_stats_json(json_path, summary, extra={
            'geometry': {'s': geometry.s, 'E': geometry.E, 'b': geometry.b},
            'trace': trace_file,
        })
    if chart_path:
        export_chart(summary, chart_path)


if __name__ == '__main__':
    main()
