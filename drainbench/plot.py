import matplotlib.pyplot as plt
import numpy as np
import os
from typing import Dict, List

from drainbench.driver import RunResult


def run_label(result: RunResult) -> str:
    c = result.config
    pacing = f"delay {c.delay_ms:g}ms" if c.pacing == "delay" else c.pacing
    size = f"{c.chunk_size // 1024}KiB" if c.chunk_size % 1024 == 0 else f"{c.chunk_size}B"
    return f"{size}/{pacing}"


class SampleAnalyzer:
    def __init__(self, results: List[RunResult]):
        self.results = results

    def _ensure_dir(self, filepath: str):
        parent = os.path.dirname(filepath)
        if parent:
            os.makedirs(parent, exist_ok=True)

    def pending_summary(self) -> List[Dict]:
        """Peak, mean and p90 of the pending byte count for each run."""
        summary = []
        for r in self.results:
            pending = np.array([s.pending_bytes for s in r.samples], dtype=np.int64)
            if pending.size:
                peak = int(pending.max())
                mean = float(pending.mean())
                p90 = float(np.percentile(pending, 90))
            else:
                peak, mean, p90 = 0, 0.0, 0.0
            summary.append({
                "run": run_label(r),
                "samples": int(pending.size),
                "peak_pending": peak,
                "mean_pending": mean,
                "p90_pending": p90,
            })
        return summary

    def plot_pending_bytes(self, filepath: str):
        """Plot the buffered byte count over time, one line per run."""
        self._ensure_dir(filepath)

        plt.figure(figsize=(8, 6))

        for r in self.results:
            if not r.samples:
                continue
            ts = np.array([s.ts for s in r.samples])
            pending = np.array([s.pending_bytes for s in r.samples]) / (1024 ** 2)
            plt.plot(ts - ts[0], pending, 'o-', linewidth=1.5, markersize=3,
                     label=run_label(r))

        plt.title("Pending Bytes in Write Buffer")
        plt.xlabel("Time since first sample (s)")
        plt.ylabel("Pending (MiB)")
        plt.legend(loc='best')
        plt.grid(True, alpha=0.3)
        plt.tight_layout()
        plt.savefig(filepath)
        plt.close()

    def plot_run_times(self, filepath: str):
        """Total time and lag per run - grouped bar chart."""
        self._ensure_dir(filepath)

        labels = [run_label(r) for r in self.results]
        total = np.array([r.total_ms for r in self.results])
        lag = np.array([r.lag_ms for r in self.results])
        x = np.arange(len(labels))
        width = 0.35

        plt.figure(figsize=(8, 6))

        plt.bar(x - width / 2, total, width, color='tab:blue', edgecolor='black', label='Total')
        plt.bar(x + width / 2, lag, width, color='tab:orange', edgecolor='black', label='Lag')

        plt.title("Total Time vs Lag per Run")
        plt.xticks(x, labels)
        plt.ylabel("Time (ms)")
        plt.legend(loc='best')
        plt.grid(axis='y')
        plt.tight_layout()
        plt.savefig(filepath)
        plt.close()
