"""
Inspect ANFR datasets using in-memory AnfrGraph structures.
"""

from __future__ import annotations

from collections import Counter

from .anfr_graph import AnfrGraph


def compute_graph_stats(graph: AnfrGraph) -> dict[str, object]:
    """
    Calculate descriptive statistics for an AnfrGraph instance.
    """
    supports = list(graph.supports.values())
    station_counts = [support.station_count for support in supports]
    stations = list(graph.stations)
    emitter_counts = [station.emitter_count for station in stations]

    supports_by_region: Counter[str] = Counter(support.region_code for support in supports)
    stations_by_operator: Counter[int] = Counter(station.operator_id for station in stations)
    orphan_stations = sum(1 for station in stations if not station.emitter_ids)
    emitters_without_antenna = sum(1 for emitter in graph.emitters.values() if emitter.antenna_id is None)

    return {
        "nature_count": len(graph.natures),
        "owner_count": len(graph.owners),
        "operator_count": len(graph.operators),
        "antenna_type_count": len(graph.antenna_types),
        "support_count": len(supports),
        "support_station_max": max(station_counts) if station_counts else 0,
        "station_count": graph.stations.count(),
        "region_count": graph.stations.region_count,
        "zone_count": graph.stations.zone_count,
        "station_emitter_avg": sum(emitter_counts) / len(stations) if stations else 0.0,
        "station_emitter_max": max(emitter_counts) if emitter_counts else 0,
        "orphan_station_count": orphan_stations,
        "antenna_count": len(graph.antennas),
        "emitter_count": len(graph.emitters),
        "emitter_without_antenna_count": emitters_without_antenna,
        "band_count": len(graph.bands),
        "system_count": len(graph.systems),
        "systems_ranked": list(graph.systems.ranked()),
        "supports_by_region": supports_by_region,
        "stations_by_operator": stations_by_operator,
        "latest": graph.latest,
        "incoherent_count": graph.incoherent.count,
    }


def render_stats(
    graph: AnfrGraph,
    stats: dict[str, object],
    *,
    source_name: str = "",
    top_k: int = 10,
) -> None:
    """
    Print formatted statistics and the ranked emitter systems.
    """
    if source_name:
        print(f"file name : {source_name}\n")
    print("ANFR Dataset Statistics")
    print("=======================")
    print(f"Natures / owners / operators / antenna types: "
          f"{stats['nature_count']} / {stats['owner_count']} / {stats['operator_count']} / "
          f"{stats['antenna_type_count']}")
    print(f"Supports             : {stats['support_count']:,} (max {stats['support_station_max']} stations)")
    print(
        f"Stations             : {stats['station_count']:,} in {stats['region_count']} departements "
        f"and {stats['zone_count']} zones"
    )
    print(
        "Emitters per station (avg/max): "
        f"{stats['station_emitter_avg']:.2f} / {stats['station_emitter_max']}"
    )
    print(f"Stations without emitter: {stats['orphan_station_count']:,}")
    print(f"Antennas             : {stats['antenna_count']:,}")
    print(
        f"Emitters             : {stats['emitter_count']:,} "
        f"({stats['emitter_without_antenna_count']:,} without antenna)"
    )
    print(f"Bands                : {stats['band_count']:,}")
    latest = stats["latest"]
    print(f"Latest station change: {latest.isoformat() if latest is not None else 'n/a'}")

    systems_ranked: list[tuple[str, int]] = stats["systems_ranked"]  # type: ignore[assignment]
    print(f"\nemetteurs systemes count ({stats['system_count']}):")
    for label, count in systems_ranked:
        print(f"{count:6d} {label}")

    by_operator: Counter[int] = stats["stations_by_operator"]  # type: ignore[assignment]
    if top_k > 0 and by_operator:
        print(f"\nTop {top_k} operators by station count:")
        for operator_id, count in sorted(by_operator.items(), key=lambda item: (-item[1], item[0]))[:top_k]:
            print(f"  {count:>8,}  {graph.operator_name(operator_id)} ({operator_id})")

    by_region: Counter[str] = stats["supports_by_region"]  # type: ignore[assignment]
    if top_k > 0 and by_region:
        print(f"\nTop {top_k} departements by support count:")
        for region, count in sorted(by_region.items(), key=lambda item: (-item[1], item[0]))[:top_k]:
            print(f"  {region:<4} {count:>8,}")

    if stats["incoherent_count"]:
        print(f"\n⚠️  {stats['incoherent_count']:,} incoherent data entries ignored while loading.")
    else:
        print("\n✅ No incoherent data found.")


__all__ = ["compute_graph_stats", "render_stats"]
