"""
Matplotlib charts of the merged frequency intervals of each operator.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from matplotlib import colormaps
from matplotlib.figure import Figure

from .anfr_graph import AnfrGraph
from .band_aggregator import FrequencyBandAggregator
from .kml_export import pathable

logger = logging.getLogger(__name__)


def plot_operator_bands(
    aggregator: FrequencyBandAggregator,
    operator_id: int,
    title: str,
    output_path: str | Path,
    *,
    palette_name: str = "viridis",
) -> Path:
    """
    Render one horizontal bar per merged interval of ``operator_id``.

    Bars span ``[f_min, f_max)`` on a logarithmic frequency axis and are
    coloured by their emitter total.
    """
    usages = list(aggregator.intervals(operator_id))
    if not usages:
        raise ValueError(f"Operator {operator_id} has no frequency interval to plot.")

    starts = np.asarray([usage.f_min for usage in usages], dtype=float)
    ends = np.asarray([usage.f_max for usage in usages], dtype=float)
    totals = np.asarray([usage.total for usage in usages], dtype=float)
    # Single frequencies are drawn with a minimal visible width.
    widths = np.maximum(ends - starts, starts * 1e-3)
    positions = np.arange(len(usages))

    figure = Figure(figsize=(10, max(2.5, 0.3 * len(usages) + 1.5)))
    ax = figure.add_subplot(1, 1, 1)
    colors = _colors_for_totals(totals, palette_name)
    ax.barh(positions, widths, left=np.maximum(starts, 1.0), color=colors, edgecolor="0.2", linewidth=0.5)
    ax.set_xscale("log")
    ax.set_yticks(positions)
    ax.set_yticklabels([f"{usage.label} ({usage.total})" for usage in usages], fontsize=7)
    ax.invert_yaxis()
    ax.set_xlabel("Frequency (Hz)")
    ax.set_title(title)
    ax.grid(True, axis="x", alpha=0.3)
    figure.tight_layout()

    destination = Path(output_path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    figure.savefig(destination)
    return destination


def _colors_for_totals(totals: np.ndarray, palette_name: str) -> np.ndarray:
    palette = colormaps[palette_name]
    span = totals.max() - totals.min()
    scaled = (totals - totals.min()) / span if span > 0 else np.full_like(totals, 0.5)
    return palette(scaled)


def plot_all_operators(
    graph: AnfrGraph,
    aggregator: FrequencyBandAggregator,
    output_dir: str | Path,
) -> list[Path]:
    """
    Write one chart per operator under ``output_dir``.
    """
    output_dir = Path(output_dir)
    paths: list[Path] = []
    for operator_id in aggregator.operators():
        name = graph.operator_name(operator_id)
        path = output_dir / f"anfr_frequences_{operator_id}_{pathable(name)}.png"
        if path.exists():
            raise FileExistsError(f"Frequency chart already exists: {path}")
        paths.append(plot_operator_bands(aggregator, operator_id, f"{name} ({operator_id})", path))
    logger.info("created %d frequency charts", len(paths))
    return paths


__all__ = ["plot_all_operators", "plot_operator_bands"]
