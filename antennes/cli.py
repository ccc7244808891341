#!/usr/bin/env python3
"""
Load an ANFR extraction and export KML maps, frequency reports and charts.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .anfr_graph import AnfrGraph
from .anfr_stats import compute_graph_stats, render_stats
from .band_aggregator import FrequencyBandAggregator
from .band_report import save_band_report
from .config import AnfrConfig, setup_logging
from .errors import AnfrFatalError
from .kml_export import export_kml

logger = logging.getLogger(__name__)

REPORT_NAME = "anfr_frequences.csv"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="antennes",
        description="Build the ANFR radio-site graph and export KML, frequency reports and charts.",
    )
    parser.add_argument(
        "data_dir",
        type=Path,
        help="Directory containing the SUP_*.txt tables of an ANFR extraction.",
    )
    parser.add_argument(
        "-C",
        "--no-color",
        action="store_true",
        help="Do not style placemarks by station freshness.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Trace every loaded row.",
    )
    parser.add_argument(
        "-s",
        "--stats",
        action="store_true",
        help="Print dataset statistics and the emitter systems ranked by count.",
    )
    parser.add_argument(
        "-k",
        "--kml-dir",
        type=Path,
        help="Write KML files under this directory.",
    )
    parser.add_argument(
        "-f",
        "--freq-dir",
        type=Path,
        help=f"Write the per-operator frequency report ({REPORT_NAME}) under this directory.",
    )
    parser.add_argument(
        "-p",
        "--plot-dir",
        type=Path,
        help="Write one frequency chart per operator under this directory.",
    )
    return parser


def run(args: argparse.Namespace, config: AnfrConfig) -> AnfrGraph:
    """
    Load the dataset and produce the requested outputs.
    """
    graph = AnfrGraph.from_directory(args.data_dir, config)

    if args.stats:
        render_stats(graph, compute_graph_stats(graph), source_name=args.data_dir.name)

    if args.kml_dir is not None:
        export_kml(graph, args.kml_dir, args.data_dir.name)

    if args.freq_dir is not None or args.plot_dir is not None:
        aggregator = FrequencyBandAggregator.from_graph(graph)
        logger.info("%d frequency intervals aggregated", len(aggregator))
        if args.freq_dir is not None:
            save_band_report(graph, aggregator, args.freq_dir / REPORT_NAME)
        if args.plot_dir is not None:
            # Imported lazily, matplotlib is only needed for charts.
            from .band_plot import plot_all_operators

            plot_all_operators(graph, aggregator, args.plot_dir)

    return graph


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    config = AnfrConfig(no_color=args.no_color, verbose=args.verbose)

    try:
        graph = run(args, config)
    except (AnfrFatalError, FileNotFoundError, FileExistsError) as exc:
        logger.error("%s", exc)
        return 1

    if graph.incoherent.count:
        logger.warning("%d incoherent data entries ignored", graph.incoherent.count)
    else:
        logger.info("no incoherent data")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
