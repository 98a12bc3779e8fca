"""Statistics and exporter.
"""
import csv
import json
import os
from dataclasses import asdict, dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class CacheSummary:
    """Final, immutable result of one simulation run.

    dirty_bytes and dirty_eviction_bytes are in bytes (lines x block size).
    """

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    dirty_bytes: int = 0
    dirty_eviction_bytes: int = 0

    @property
    def accesses(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return (self.hits / self.accesses) if self.accesses else 0.0

    @property
    def miss_rate(self) -> float:
        return (self.misses / self.accesses) if self.accesses else 0.0

    def as_dict(self) -> Dict[str, float]:
        data = asdict(self)
        data['accesses'] = self.accesses
        data['hit_rate'] = self.hit_rate
        data['miss_rate'] = self.miss_rate
        return data


class Counters:
    def __init__(self, block_size: int = 1):
        self.block_size = block_size
        # counters start from zero and only ever go up
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.dirty_bytes = 0
        self.dirty_eviction_bytes = 0

    def record_hit(self):
        self.hits += 1

    def record_miss(self, evicted: bool = False, evicted_dirty: bool = False):
        self.misses += 1
        if evicted:
            self.evictions += 1
            if evicted_dirty:
                self.dirty_eviction_bytes += self.block_size

    def record_resident_dirty(self, dirty_lines: int):
        # end-of-run sweep of lines still dirty in the cache
        self.dirty_bytes += dirty_lines * self.block_size

    @property
    def accesses(self):
        return self.hits + self.misses

    def snapshot(self) -> CacheSummary:
        return CacheSummary(
            hits=self.hits,
            misses=self.misses,
            evictions=self.evictions,
            dirty_bytes=self.dirty_bytes,
            dirty_eviction_bytes=self.dirty_eviction_bytes,
        )


def format_summary(summary: CacheSummary) -> str:
    return (
        f"hits:{summary.hits} misses:{summary.misses} evictions:{summary.evictions} "
        f"dirty_bytes_in_cache:{summary.dirty_bytes} dirty_bytes_evicted:{summary.dirty_eviction_bytes}"
    )


def export_chart(summary: CacheSummary, fpath: str, title: Optional[str] = None) -> str:
    """Render hits/misses/evictions as a bar chart using matplotlib and save it.

    The output format follows the file extension (png, pdf, svg, ...).
    Returns the saved file path.
    """
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    labels = ['Hits', 'Misses', 'Evictions']
    values = [summary.hits, summary.misses, summary.evictions]
    fig, ax = plt.subplots(figsize=(6, 3))
    bars = ax.bar(labels, values, color=['#23967F', '#E56B70', '#6874E8'])
    ax.bar_label(bars)
    ax.set_ylabel('Count')
    ax.set_title(title or f'Hit rate {summary.hit_rate:.1%}')
    ax.grid(False)
    fig.tight_layout()
    fig.savefig(fpath, dpi=150)
    plt.close(fig)
    return fpath


class Exporter:
    FIELDS = ['hits', 'misses', 'evictions', 'dirty_bytes', 'dirty_eviction_bytes',
              'accesses', 'hit_rate', 'miss_rate']

    @staticmethod
    def export_stats_csv(path: str, summary: CacheSummary):
        data = summary.as_dict()
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(Exporter.FIELDS)
            writer.writerow([data[k] for k in Exporter.FIELDS])
        return path

    @staticmethod
    def export_stats_json(path: str, summary: CacheSummary, extra: Optional[Dict] = None):
        data = {'stats': summary.as_dict()}
        if extra:
            data.update(extra)
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as fh:
            json.dump(data, fh, indent=2)
        return path
