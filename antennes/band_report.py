"""
CSV report of merged frequency intervals per operator.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterator

from .anfr_graph import AnfrGraph
from .band_aggregator import FrequencyBandAggregator

logger = logging.getLogger(__name__)

REPORT_HEADER = ["operator_id", "operator", "f_min_hz", "f_max_hz", "band", "total", "systems"]


def _format_hz(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def band_report_rows(graph: AnfrGraph, aggregator: FrequencyBandAggregator) -> Iterator[list[str]]:
    """
    Report rows, operators ascending by id and intervals ascending.
    """
    for operator_id in aggregator.operators():
        operator_name = graph.operator_name(operator_id)
        for usage in aggregator.intervals(operator_id):
            systems = ", ".join(
                f"{graph.systems.label(system_id)} ({count})"
                for system_id, count in aggregator.ranked_systems(usage)
            )
            yield [
                str(operator_id),
                operator_name,
                _format_hz(usage.f_min),
                _format_hz(usage.f_max),
                usage.label,
                str(usage.total),
                systems,
            ]


def save_band_report(
    graph: AnfrGraph,
    aggregator: FrequencyBandAggregator,
    output_path: str | Path,
) -> Path:
    """
    Persist the per-operator frequency usage table as CSV.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Frequency report already exists: {destination}")
    destination.parent.mkdir(parents=True, exist_ok=True)

    row_count = 0
    with destination.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(REPORT_HEADER)
        for row in band_report_rows(graph, aggregator):
            writer.writerow(row)
            row_count += 1
    logger.info(
        "wrote %d frequency intervals for %d exploitants to %s",
        row_count,
        len(aggregator.operators()),
        destination,
    )
    return destination


__all__ = ["REPORT_HEADER", "band_report_rows", "save_band_report"]
