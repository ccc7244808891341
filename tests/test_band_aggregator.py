from __future__ import annotations

from pathlib import Path

import pytest

from antennes.anfr_graph import AnfrGraph
from antennes.band_aggregator import FrequencyBandAggregator


def _write_lines(path: Path, rows: list[list[object]]) -> Path:
    path.write_text("\n".join(";".join(map(str, row)) for row in rows) + "\n", encoding="iso-8859-1")
    return path


def test_equal_intervals_merge_with_per_system_counts() -> None:
    aggregator = FrequencyBandAggregator(system_capacity=4)

    first = aggregator.add(1, 925e6, 935e6, system_id=0, label="925-935M")
    second = aggregator.add(1, 925e6, 935e6, system_id=2)

    assert first is second
    assert first.total == 2
    assert list(aggregator.ranked_systems(first)) == [(0, 1), (2, 1)]
    assert first.label == "925-935M"
    assert len(aggregator) == 1


def test_intervals_are_kept_ascending_per_operator() -> None:
    aggregator = FrequencyBandAggregator(system_capacity=2)
    for f_min, f_max in [(1800e6, 1805e6), (791e6, 801e6), (925e6, 935e6), (791e6, 796e6), (925e6, 935e6)]:
        aggregator.add(7, f_min, f_max, system_id=1)
    aggregator.add(3, 2110e6, 2120e6, system_id=0)

    assert [usage.interval for usage in aggregator.intervals(7)] == [
        (791e6, 796e6),
        (791e6, 801e6),
        (925e6, 935e6),
        (1800e6, 1805e6),
    ]
    assert [usage.total for usage in aggregator.intervals(7)] == [1, 1, 2, 1]
    assert aggregator.operators() == [3, 7]
    assert list(aggregator.intervals(99)) == []


def test_interval_below_head_is_rejected() -> None:
    aggregator = FrequencyBandAggregator(system_capacity=2)
    aggregator.add(1, 925e6, 935e6, system_id=0)

    with pytest.raises(ValueError):
        aggregator.add(1, -1.0, 10.0, system_id=0)


def test_non_finite_interval_is_rejected() -> None:
    aggregator = FrequencyBandAggregator(system_capacity=2)

    with pytest.raises(ValueError):
        aggregator.add(1, float("nan"), 1.0, system_id=0)
    with pytest.raises(ValueError):
        aggregator.add(1, 1.0, float("inf"), system_id=0)
    assert len(aggregator) == 0


def test_orphan_station_bands_are_counted(tmp_path: Path) -> None:
    graph = AnfrGraph()
    graph.load_supports(_write_lines(tmp_path / "SUP_SUPPORT.txt", []))
    graph.load_stations(
        _write_lines(tmp_path / "SUP_STATION.txt", [["0750010001", 3, 1, "01/01/2010", "", "01/02/2010"]])
    )
    graph.load_antennas(_write_lines(tmp_path / "SUP_ANTENNE.txt", []))
    graph.load_emitters(_write_lines(tmp_path / "SUP_EMETTEUR.txt", [[42, "FM", "0750010001", 0, ""]]))
    graph.load_bands(_write_lines(tmp_path / "SUP_BANDE.txt", [["0750010001", 5, 42, 100, 101, "M"]]))

    aggregator = FrequencyBandAggregator.from_graph(graph)

    assert not graph.supports
    assert aggregator.operators() == [3]
    assert [usage.interval for usage in aggregator.intervals(3)] == [(100e6, 101e6)]


def test_unknown_system_is_rejected() -> None:
    aggregator = FrequencyBandAggregator(system_capacity=2)

    with pytest.raises(ValueError):
        aggregator.add(1, 925e6, 935e6, system_id=2)


def test_from_graph_attributes_bands_to_station_operators(graph) -> None:
    aggregator = FrequencyBandAggregator.from_graph(graph)
    gsm = graph.systems.id_for("GSM 900")
    lte = graph.systems.id_for("LTE 800")

    assert aggregator.operators() == [1, 2]
    orange = list(aggregator.intervals(1))
    assert [usage.interval for usage in orange] == [(791e6, 801e6), (925e6, 935e6)]
    assert [usage.total for usage in orange] == [1, 2]
    assert list(aggregator.ranked_systems(orange[0])) == [(lte, 1)]
    assert list(aggregator.ranked_systems(orange[1])) == [(gsm, 2)]

    sfr = list(aggregator.intervals(2))
    assert len(sfr) == 1 and sfr[0].total == 1 and sfr[0].label == "925-935M"
