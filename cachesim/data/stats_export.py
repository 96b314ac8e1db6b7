"""Statistics and exporters.

A run is described by a `(prefetch, Statistics)` pair; the command line
produces two of them (prefetch off, prefetch on) and hands them here to be
printed or saved as CSV, JSON or a PDF chart.
"""
import csv
import json
import logging
from typing import Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)

FIELDS = ["accesses", "hits", "misses", "hit_rate", "miss_rate", "memory_reads", "memory_writes", "prefetches"]


class Statistics:
    def __init__(self):
        self.reset()

    def reset(self):
        # counters start from zero
        self.accesses = 0
        self.hits = 0
        self.misses = 0
        self.memory_reads = 0
        self.memory_writes = 0
        self.prefetches = 0

    def record_access(self, hit: bool):
        # call once per demand access; prefetches are not accesses
        self.accesses += 1
        if hit:
            self.hits += 1
        else:
            self.misses += 1

    @property
    def hit_rate(self):
        return (self.hits / self.accesses) if self.accesses else 0.0

    @property
    def miss_rate(self):
        return (self.misses / self.accesses) if self.accesses else 0.0

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in FIELDS}


Run = Tuple[bool, Statistics]


def format_stats(stats: Statistics, prefetch: bool) -> str:
    """Render one run the way the command line prints it."""
    return "\n".join([
        f"Prefetch {int(prefetch)}",
        f"Memory reads: {stats.memory_reads}",
        f"Memory writes: {stats.memory_writes}",
        f"Cache hits: {stats.hits}",
        f"Cache misses: {stats.misses}",
    ])


def format_report(runs: Iterable[Run]) -> str:
    return "\n".join(format_stats(stats, prefetch) for prefetch, stats in runs)


class Exporter:
    @staticmethod
    def export_stats_csv(path: str, runs: Iterable[Run]):
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['prefetch'] + FIELDS)
            for prefetch, stats in runs:
                row = stats.as_dict()
                writer.writerow([int(prefetch)] + [row[name] for name in FIELDS])
        logger.debug("wrote CSV statistics to %s", path)
        return path

    @staticmethod
    def export_stats_json(path: str, runs: Iterable[Run]):
        data: List[dict] = []
        for prefetch, stats in runs:
            entry = {'prefetch': bool(prefetch)}
            entry.update(stats.as_dict())
            data.append(entry)
        with open(path, 'w', encoding='utf-8') as fh:
            json.dump({'runs': data}, fh, indent=2)
        logger.debug("wrote JSON statistics to %s", path)
        return path

    @staticmethod
    def export_chart_pdf(path: str, runs: Iterable[Run]):
        """Draw the traffic and hit/miss counters of every run side by side
        as a grouped bar chart and save it as a PDF.
        """
        # Use matplotlib without a display
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt

        runs = list(runs)
        labels = ['Memory reads', 'Memory writes', 'Cache hits', 'Cache misses']
        width = 0.8 / max(1, len(runs))
        colors = ['#6874E8', '#E56B70', '#23967F', '#FFA500']

        fig, ax = plt.subplots(figsize=(6, 3))
        for n, (prefetch, stats) in enumerate(runs):
            values = [stats.memory_reads, stats.memory_writes, stats.hits, stats.misses]
            xs = [i + n * width for i in range(len(labels))]
            ax.bar(xs, values, width=width, color=colors[n % len(colors)], label=f'Prefetch {int(prefetch)}')
        ax.set_xticks([i + width * (len(runs) - 1) / 2 for i in range(len(labels))])
        ax.set_xticklabels(labels)
        ax.set_ylabel('Count')
        ax.legend()
        fig.tight_layout()
        fig.savefig(path, format='pdf', dpi=150)
        plt.close(fig)
        logger.debug("wrote chart to %s", path)
        return path
