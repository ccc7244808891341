"""
KML export of ANFR supports.

Every support becomes one placemark, written into the aggregated ``anfr.kml``
file and into one file per owner, per departement and per emitter system.
Inside each file placemarks are grouped into one ``Document`` per owner.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as etree
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Iterator

import numpy as np

from .anfr_graph import AnfrGraph, Station, Support
from .errors import CapacityExceeded
from .recency import Tier, latest_date

logger = logging.getLogger(__name__)

KML_NAMESPACE = "http://www.opengis.net/kml/2.2"
KML_DOC_MAX = 200

# KML colors are AABBGGRR
STYLE_COLORS = {
    Tier.BLUE.style: "ffff0000",
    Tier.ORANGE.style: "ff0088ff",
    Tier.RED.style: "ff0000ff",
}

STATION_SEPARATOR = "-------------------"


@dataclass(frozen=True)
class Placemark:
    """
    Point placemark of one support.
    """

    placemark_id: int
    name: str
    description: str
    lat: float
    lon: float
    height: float
    style: str | None = None
    begin: date | None = None


class KmlWriter:
    """
    KML file writer collecting placemarks into per-id documents.

    Intended to be used as context manager; the file is written on exit.
    """

    def __init__(self, path: str | Path, name: str, generated: str = "") -> None:
        self.path = Path(path)
        if self.path.exists():
            raise FileExistsError(f"KML file already exists: {self.path}")
        self.name = name
        self.generated = generated
        self._documents: dict[int, tuple[str, list[Placemark]]] = {}
        logger.debug("creating kml file %s", self.path)

    def __enter__(self) -> "KmlWriter":
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, exc_tb: Any) -> None:
        if exc_type is None:
            self.write()

    @property
    def placemark_count(self) -> int:
        return sum(len(placemarks) for _, placemarks in self._documents.values())

    def add_placemark(self, doc_id: int, doc_name: str, placemark: Placemark) -> None:
        """
        Append ``placemark`` to the document ``doc_id``, creating it on first use.
        """
        document = self._documents.get(doc_id)
        if document is None:
            if len(self._documents) >= KML_DOC_MAX:
                raise CapacityExceeded(f"kml {self.path} reached maximum document count {KML_DOC_MAX}")
            document = self._documents[doc_id] = (doc_name, [])
        document[1].append(placemark)

    def write(self) -> None:
        root = etree.Element("kml", attrib={"xmlns": KML_NAMESPACE})
        folder = self._make_tag(root, "Folder", attrs={"id": f"ANFR antennes {self.name}"})
        self._make_tag(folder, "name", text=f"ANFR antennes {self.name}")
        self._make_tag(folder, "Snippet", text="KML export of french emetteurs based on ANFR data")
        if self.generated:
            self._make_tag(folder, "description", text=f"Generated on {self.generated}")
        for style_id, color in STYLE_COLORS.items():
            style = self._make_tag(folder, "Style", attrs={"id": style_id})
            icon_style = self._make_tag(style, "IconStyle")
            self._make_tag(icon_style, "color", text=color)

        for doc_id, (doc_name, placemarks) in self._documents.items():
            document = self._make_tag(folder, "Document", attrs={"id": str(doc_id)})
            self._make_tag(document, "name", text=doc_name)
            for placemark in placemarks:
                self._add_placemark_tag(document, placemark)

        tree = etree.ElementTree(root)
        etree.indent(tree, space="\t")
        tree.write(self.path, encoding="utf-8", xml_declaration=True)

    def _add_placemark_tag(self, parent: etree.Element, placemark: Placemark) -> None:
        element = self._make_tag(parent, "Placemark", attrs={"id": str(placemark.placemark_id)})
        self._make_tag(element, "name", text=placemark.name)
        self._make_tag(element, "description", text=placemark.description)
        if placemark.style is not None:
            self._make_tag(element, "styleUrl", text=f"#{placemark.style}")
        if placemark.begin is not None:
            timespan = self._make_tag(element, "TimeSpan", attrs={"id": f"ts{placemark.placemark_id}"})
            self._make_tag(timespan, "begin", text=placemark.begin.isoformat())
        point = self._make_tag(element, "Point")
        self._make_tag(point, "altitudeMode", text="relativeToGround")
        self._make_tag(
            point,
            "coordinates",
            text=f"{placemark.lon:f},{placemark.lat:f},{placemark.height:f}",
        )

    @staticmethod
    def _make_tag(
        parent: etree.Element,
        tag: str,
        text: str | None = None,
        attrs: dict[str, str] | None = None,
    ) -> etree.Element:
        element = etree.SubElement(parent, tag, attrib=attrs or {})
        if text is not None:
            element.text = text
        return element


def pathable(value: str) -> str:
    """
    Make ``value`` usable inside a file name.
    """
    chars: list[str] = []
    for char in value[:254]:
        if not char.isascii() or char == " ":
            char = "_"
        elif char in "/'":
            char = "-"
        chars.append(char)
    return "".join(chars)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def station_description(graph: AnfrGraph, station: Station) -> str:
    """
    Detailed text of a station: dates, emitters with bands and antennas.
    """
    lines = [
        f"   implementation: {station.implementation_text}",
        f"   modification: {station.modification_text}",
        f"   en service: {station.service_text}",
        _plural(station.emitter_count, "emetteur"),
    ]
    for n, emitter in enumerate(graph.station_emitters(station), start=1):
        bands = "".join(f"{band.label} " for band in graph.emitter_bands(emitter))
        lines.append(f">{n} {emitter.id_text} {emitter.system_label} {emitter.service_text} {bands}")

    lines.append(_plural(len(station.antenna_ids), "antenne"))
    for n, antenna in enumerate(graph.station_antennas(station), start=1):
        directivity = antenna.directivity_label
        directivity = f" {directivity} " if directivity else ""
        lines.append(
            f">{n} {antenna.id_text} {graph.antenna_type_name(antenna.type_id)} "
            f"{antenna.dimension_text}m{directivity}{antenna.azimuth_text}d +{antenna.height_text}"
        )
    return "\n".join(lines) + "\n"


def station_systems(graph: AnfrGraph, station: Station) -> str:
    """
    Emitter systems of a station with their counts, most frequent first.
    """
    return ", ".join(f"{label} ({count})" for label, count in graph.station_systems(station))


def support_placemark(graph: AnfrGraph, support: Support) -> tuple[Placemark, list[Station]]:
    """
    Build the placemark of ``support`` and return it with its resolved stations.
    """
    owner_name = graph.owner_name(support.owner_id)
    summary = [f"support {support.support_id} '{owner_name}' {graph.nature_name(support.nature_id)}"]
    summary.extend(text for text in (*support.address, support.place, support.postal_code) if text)

    stations = list(graph.stations_chronological(graph.support_stations(support)))
    operators: list[str] = []
    details: list[str] = []
    for n, station in enumerate(stations, start=1):
        operator_name = graph.operator_name(station.operator_id)
        operators.append(f"{operator_name} ({station.emitter_count})")
        summary.append(
            f"#{n} {station.key} '{operator_name}' {station.modification_text} "
            f"{station.service_text} ({station.emitter_count})\n    {station_systems(graph, station)}"
        )
        details.append(f"{STATION_SEPARATOR}\nstation #{n} {station.key} '{operator_name}'\n")
        details.append(station_description(graph, station))

    prefix = f"[{support.station_count}] " if support.station_count > 1 else ""
    tier = graph.support_tier(stations)
    placemark = Placemark(
        placemark_id=support.support_id,
        name=prefix + ", ".join(operators),
        description="\n".join(summary) + "\n" + "".join(details),
        lat=support.lat,
        lon=support.lon,
        height=float(support.height),
        style=tier.style if tier is not None else None,
        begin=latest_date(*(station.latest for station in stations)) if stations else None,
    )
    return placemark, stations


def support_placemarks(graph: AnfrGraph) -> Iterator[tuple[Support, Placemark, list[Station]]]:
    """
    Placemarks of every support in ascending support id order.
    """
    for support_id in sorted(graph.supports):
        support = graph.supports[support_id]
        placemark, stations = support_placemark(graph, support)
        yield support, placemark, stations


class KmlExporter:
    """
    Write the KML file tree of a loaded graph under ``output_dir``.
    """

    def __init__(self, graph: AnfrGraph, output_dir: str | Path, source_name: str) -> None:
        self.graph = graph
        self.output_dir = Path(output_dir)
        self.source_name = source_name
        self._writers: dict[tuple[str, int], KmlWriter] = {}

    def export(self) -> list[Path]:
        """
        Write every KML file and return their paths.
        """
        for subdir in ("anfr_proprietaire", "anfr_departement", "anfr_systeme"):
            (self.output_dir / subdir).mkdir(parents=True, exist_ok=True)
        generated = self.graph.config.now.isoformat()
        all_writer = KmlWriter(self.output_dir / "anfr.kml", self.source_name, generated)

        for support, placemark, stations in support_placemarks(self.graph):
            owner_name = self.graph.owner_name(support.owner_id)
            targets = [
                all_writer,
                self._owner_writer(support.owner_id, owner_name, generated),
                self._region_writer(support.region, generated),
            ]
            for system_id in self._support_systems(stations):
                targets.append(self._system_writer(system_id, generated))
            for writer in targets:
                writer.add_placemark(support.owner_id, owner_name, placemark)

        writers = [all_writer, *self._writers.values()]
        for writer in writers:
            writer.write()
        logger.info("created %d kml files", len(writers))
        return [writer.path for writer in writers]

    def _owner_writer(self, owner_id: int, owner_name: str, generated: str) -> KmlWriter:
        writer = self._writers.get(("owner", owner_id))
        if writer is None:
            name = pathable(owner_name)
            path = self.output_dir / "anfr_proprietaire" / f"anfr_proprietaire_{owner_id}_{name}.kml"
            writer = KmlWriter(path, f"{self.source_name} {name} ({owner_id})", generated)
            self._writers[("owner", owner_id)] = writer
        return writer

    def _region_writer(self, region: int, generated: str) -> KmlWriter:
        writer = self._writers.get(("region", region))
        if writer is None:
            path = self.output_dir / "anfr_departement" / f"anfr_departement_{region:02X}.kml"
            writer = KmlWriter(path, f"{self.source_name} {region:02X}", generated)
            self._writers[("region", region)] = writer
        return writer

    def _system_writer(self, system_id: int, generated: str) -> KmlWriter:
        writer = self._writers.get(("system", system_id))
        if writer is None:
            name = pathable(self.graph.systems.label(system_id))
            path = self.output_dir / "anfr_systeme" / f"anfr_systeme_{system_id}_{name}.kml"
            writer = KmlWriter(path, f"{self.source_name} {name}", generated)
            self._writers[("system", system_id)] = writer
        return writer

    @staticmethod
    def _support_systems(stations: list[Station]) -> list[int]:
        if not stations:
            return []
        counts = np.sum([station.system_counts for station in stations], axis=0)
        return [int(system_id) for system_id in np.flatnonzero(counts)]


def export_kml(graph: AnfrGraph, output_dir: str | Path, source_name: str) -> list[Path]:
    return KmlExporter(graph, output_dir, source_name).export()


__all__ = [
    "KmlExporter",
    "KmlWriter",
    "Placemark",
    "export_kml",
    "pathable",
    "station_description",
    "support_placemark",
    "support_placemarks",
]
