"""
Core data structures for representing the ANFR radio-site dataset.

``AnfrGraph`` loads the ``SUP_*.txt`` tables of an ANFR extraction in
dependency order and cross-links supports, stations, antennas, emitters and
bands. Cross references are stored as ids or station keys into the graph's own
tables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator

import numpy as np

from .config import AnfrConfig
from .errors import CapacityExceeded, IncoherentData, LoadOrderError, check_capacity
from .ordinal import iter_in_order, iter_ranked
from .recency import Tier, approx_day_number, classify, latest_date, update_dataset_latest
from .records import (
    DATA_ENCODING,
    LABEL_ENCODING,
    Record,
    RecordTable,
    dms_to_decimal,
    parse_date,
    parse_frequency,
    parse_hex,
    parse_int,
)
from .station_index import StationIndex
from .station_key import StationKey, parse_station_key

logger = logging.getLogger(__name__)

NATURE_ID_MAX = 100
OWNER_ID_MAX = 100
OPERATOR_ID_MAX = 500
ANTENNA_TYPE_ID_MAX = 150
SUPPORT_ID_MAX = 4 * 1000 * 1000
SUPPORT_STATION_MAX = 100
STATION_EMITTER_MAX = 500
STATION_ANTENNA_MAX = 100
SYSTEM_ID_MAX = 100
EMITTER_ID_MAX = 30 * 1000 * 1000
EMITTER_BAND_MAX = 50
BAND_ID_MAX = 100 * 1000 * 1000
ANTENNA_ID_MAX = 10 * 1000 * 1000

# "Support non décrit" natures and antenna types recovered from electronic records.
UNDESCRIBED_ID = 999999999

TABLE_FILES = {
    "natures": "SUP_NATURE.txt",
    "owners": "SUP_PROPRIETAIRE.txt",
    "operators": "SUP_EXPLOITANT.txt",
    "antenna_types": "SUP_TYPE_ANTENNE.txt",
    "supports": "SUP_SUPPORT.txt",
    "stations": "SUP_STATION.txt",
    "antennas": "SUP_ANTENNE.txt",
    "emitters": "SUP_EMETTEUR.txt",
    "bands": "SUP_BANDE.txt",
}

# Tables whose rows are resolved against other tables while loading.
TABLE_DEPENDENCIES = {
    "antennas": ("stations",),
    "emitters": ("stations", "antennas"),
    "bands": ("emitters",),
}


@dataclass
class Support:
    """
    Physical site carrying one or more stations.
    """

    support_id: int
    station_keys: list[StationKey]
    nature_id: int
    lat: float
    lon: float
    height: int
    owner_id: int
    place: str = ""
    address: tuple[str, str, str] = ("", "", "")
    postal_code: str = ""
    insee: int = 0

    @property
    def region(self) -> int:
        """
        Departement number, the two leading hex digits of the INSEE code.
        """
        return self.insee >> 12

    @property
    def region_code(self) -> str:
        return f"{self.region:02X}"

    @property
    def station_count(self) -> int:
        return len(self.station_keys)


@dataclass
class Station:
    """
    Regulatory transmission point attached to one or more supports.
    """

    key: StationKey
    operator_id: int
    consistency: str = ""
    implementation_date: date | None = None
    implementation_text: str = ""
    modification_date: date | None = None
    modification_text: str = ""
    service_date: date | None = None
    service_text: str = ""
    latest: date | None = None
    emitter_ids: list[int] = field(default_factory=list)
    antenna_ids: list[int] = field(default_factory=list)
    system_counts: np.ndarray = field(
        default_factory=lambda: np.zeros(SYSTEM_ID_MAX, dtype=np.int32), repr=False
    )

    @property
    def sort_date(self) -> date | None:
        """
        Modification date, or in-service date for never modified stations.
        """
        if self.modification_text:
            return self.modification_date
        return self.service_date

    @property
    def emitter_count(self) -> int:
        return len(self.emitter_ids)


@dataclass
class Antenna:
    """
    Antenna stored once by id and shared by every station deploying it.
    """

    antenna_id: int
    id_text: str
    type_id: int
    dimension_text: str = ""
    directivity: str = ""
    azimuth_text: str = ""
    height_text: str = ""
    support_id_text: str = ""
    station_keys: list[StationKey] = field(default_factory=list)
    emitter_ids: list[int] = field(default_factory=list)

    @property
    def directivity_label(self) -> str:
        if self.directivity.startswith("D"):
            return "Directional"
        if self.directivity.startswith("N"):
            return "Omnidirectional"
        return ""


@dataclass
class Emitter:
    """
    Transmitter of a station, classified into an emitter system.
    """

    emitter_id: int
    id_text: str
    system_label: str
    system_id: int
    station_key: StationKey
    antenna_id: int | None = None
    service_text: str = ""
    band_ids: list[int] = field(default_factory=list)


@dataclass
class Band:
    """
    Frequency interval ``[f_min, f_max)`` in Hz used by one emitter.
    """

    band_id: int
    emitter_id: int
    station_key: StationKey
    f_min: float
    f_max: float
    start_text: str = ""
    end_text: str = ""
    unit: str = ""

    @property
    def label(self) -> str:
        return f"{self.start_text}-{self.end_text}{self.unit}"


class LabelTable:
    """
    Small lookup table of labels indexed by a bounded integer id.
    """

    def __init__(self, name: str, capacity: int, fallback: str, overflow: str | None = None) -> None:
        self.name = name
        self.capacity = capacity
        self.fallback = fallback
        self.overflow = overflow if overflow is not None else fallback
        self._labels: dict[int, str] = {}

    def add(self, label_id: int, label: str) -> bool:
        check_capacity(label_id, self.capacity, f"{self.name} id")
        if label_id in self._labels:
            return False
        self._labels[label_id] = label
        return True

    def get(self, label_id: int) -> str:
        if label_id < 0 or label_id >= self.capacity:
            return self.overflow
        return self._labels.get(label_id, self.fallback)

    def ids(self) -> list[int]:
        return sorted(self._labels)

    def __contains__(self, label_id: int) -> bool:
        return label_id in self._labels

    def __len__(self) -> int:
        return len(self._labels)


class SystemTable:
    """
    Emitter system labels interned in first-seen order.
    """

    def __init__(self, capacity: int = SYSTEM_ID_MAX) -> None:
        self.capacity = capacity
        self.labels: list[str] = []
        self._ids: dict[str, int] = {}
        self.counts = np.zeros(capacity, dtype=np.int32)

    def intern(self, label: str) -> int:
        system_id = self._ids.get(label)
        if system_id is None:
            system_id = len(self.labels)
            if system_id >= self.capacity:
                raise CapacityExceeded(f"exceeded system count {self.capacity} with system {label!r}")
            self.labels.append(label)
            self._ids[label] = system_id
        return system_id

    def label(self, system_id: int) -> str:
        return self.labels[system_id]

    def id_for(self, label: str) -> int | None:
        return self._ids.get(label)

    def ranked(self) -> Iterator[tuple[str, int]]:
        """
        ``(label, emitter count)`` pairs, most frequent system first.
        """
        for system_id, count in iter_ranked(self.counts):
            yield self.labels[system_id], count

    def __len__(self) -> int:
        return len(self.labels)


class AnfrGraph:
    """
    Container for supports, stations, antennas, emitters and bands loaded from ANFR tables.
    """

    def __init__(self, config: AnfrConfig | None = None) -> None:
        self.config = config if config is not None else AnfrConfig()
        self.incoherent = IncoherentData()

        self.natures = LabelTable("nature", NATURE_ID_MAX, "Support non décrit")
        self.owners = LabelTable("proprietaire", OWNER_ID_MAX, "unknown", overflow="invalid id")
        self.operators = LabelTable("exploitant", OPERATOR_ID_MAX, "unknown")
        self.antenna_types = LabelTable("type antenne", ANTENNA_TYPE_ID_MAX, "unknown")
        self.systems = SystemTable()

        self.supports: dict[int, Support] = {}
        self.stations: StationIndex[Station] = StationIndex()
        self.antennas: dict[int, Antenna] = {}
        self.emitters: dict[int, Emitter] = {}
        self.bands: dict[int, Band] = {}

        self.latest: date | None = None
        self._loaded: set[str] = set()

    @classmethod
    def from_directory(cls, dataset: str | Path, config: AnfrConfig | None = None) -> "AnfrGraph":
        """
        Load every table of an extraction directory in dependency order.
        """
        root = cls._resolve_input_directory(dataset)
        graph = cls(config)
        logger.info("loading files from %s", root)
        graph.load_natures(root / TABLE_FILES["natures"])
        graph.load_owners(root / TABLE_FILES["owners"])
        graph.load_operators(root / TABLE_FILES["operators"])
        graph.load_antenna_types(root / TABLE_FILES["antenna_types"])
        graph.load_supports(root / TABLE_FILES["supports"])
        graph.load_stations(root / TABLE_FILES["stations"])
        graph.load_antennas(root / TABLE_FILES["antennas"])
        graph.load_emitters(root / TABLE_FILES["emitters"])
        graph.load_bands(root / TABLE_FILES["bands"])
        return graph

    # Table loaders

    def load_natures(self, path: str | Path) -> None:
        for record in self._data_records("natures", path, LABEL_ENCODING):
            nature_id = parse_int(record[0])
            if nature_id == UNDESCRIBED_ID:
                continue
            self._add_label(self.natures, nature_id, record)
        logger.info("%d natures of support", len(self.natures))

    def load_owners(self, path: str | Path) -> None:
        for record in self._data_records("owners", path, LABEL_ENCODING):
            self._add_label(self.owners, parse_int(record[0]), record)
        logger.info("%d proprietaires", len(self.owners))

    def load_operators(self, path: str | Path) -> None:
        for record in self._data_records("operators", path, LABEL_ENCODING):
            self._add_label(self.operators, parse_int(record[0]), record)
        logger.info("%d exploitants", len(self.operators))

    def load_antenna_types(self, path: str | Path) -> None:
        for record in self._data_records("antenna_types", path, LABEL_ENCODING):
            type_id = parse_int(record[0])
            if type_id == UNDESCRIBED_ID:
                type_id = ANTENNA_TYPE_ID_MAX - 1
            self._add_label(self.antenna_types, type_id, record)
        logger.info("%d types of antenne", len(self.antenna_types))

    def load_supports(self, path: str | Path) -> None:
        for record in self._data_records("supports", path, DATA_ENCODING):
            support_id = parse_int(record[0])
            check_capacity(support_id, SUPPORT_ID_MAX, "support id")
            key = parse_station_key(record[1])

            support = self.supports.get(support_id)
            if support is not None:
                self._trace("existing support %d", support_id)
                if support.station_count >= SUPPORT_STATION_MAX:
                    raise CapacityExceeded(
                        f"maximum stations {SUPPORT_STATION_MAX} reached for support {support_id}"
                    )
                support.station_keys.append(key)
                continue

            lat = dms_to_decimal(parse_int(record[3]), parse_int(record[4]), parse_int(record[5]), record[6])
            lon = dms_to_decimal(parse_int(record[7]), parse_int(record[8]), parse_int(record[9]), record[10])
            support = Support(
                support_id=support_id,
                station_keys=[key],
                nature_id=parse_int(record[2]),
                lat=lat,
                lon=lon,
                height=parse_int(record[11]),
                owner_id=parse_int(record[12]),
                place=record[13],
                address=(record[14], record[15], record[16]),
                postal_code=record[17],
                insee=parse_hex(record[18]),
            )
            self.supports[support_id] = support
            self._trace(
                "new support %d: owner=%d place=%r cp=%s insee=%X",
                support_id,
                support.owner_id,
                support.place,
                support.postal_code,
                support.insee,
            )
        logger.info("%d supports", len(self.supports))

    def load_stations(self, path: str | Path) -> None:
        now = self.config.now
        for record in self._data_records("stations", path, DATA_ENCODING):
            key = parse_station_key(record[0])
            station = Station(
                key=key,
                operator_id=parse_int(record[1]),
                consistency=record[2],
                implementation_date=parse_date(record[3]),
                implementation_text=record[3],
                modification_date=parse_date(record[4]),
                modification_text=record[4],
                service_date=parse_date(record[5]),
                service_text=record[5],
            )
            station.latest = latest_date(
                station.implementation_date, station.modification_date, station.service_date
            )
            if not self.stations.insert(key, station):
                self.incoherent.warn("line %d: station %s already exists, ignoring", record.line, key)
                continue
            self.latest = update_dataset_latest(self.latest, station.latest, now)
            self._trace("new station %s: exploitant=%d latest=%s", key, station.operator_id, station.latest)
        logger.info(
            "%d stations in %d departements and %d zones",
            self.stations.count(),
            self.stations.region_count,
            self.stations.zone_count,
        )

    def load_antennas(self, path: str | Path) -> None:
        for record in self._data_records("antennas", path, DATA_ENCODING):
            key = parse_station_key(record[0])
            antenna_id = parse_int(record[1])
            check_capacity(antenna_id, ANTENNA_ID_MAX, "antenne id")

            station = self.stations.lookup(key)
            if station is None:
                self.incoherent.warn("station %s not found for antenne %d, ignoring", key, antenna_id)
                continue
            if len(station.antenna_ids) >= STATION_ANTENNA_MAX:
                raise CapacityExceeded(
                    f"maximum antenne count {STATION_ANTENNA_MAX} reached for station {key}"
                )

            # The same antenna is listed once per station using it; keep the first description.
            antenna = self.antennas.get(antenna_id)
            if antenna is None:
                antenna = Antenna(
                    antenna_id=antenna_id,
                    id_text=record[1],
                    type_id=parse_int(record[2]),
                    dimension_text=record[3],
                    directivity=record[4],
                    azimuth_text=record[5],
                    height_text=record[6],
                    support_id_text=record[7],
                )
                self.antennas[antenna_id] = antenna
            antenna.station_keys.append(key)
            station.antenna_ids.append(antenna_id)
        logger.info("%d antennes", len(self.antennas))

    def load_emitters(self, path: str | Path) -> None:
        for record in self._data_records("emitters", path, DATA_ENCODING):
            emitter_id = parse_int(record[0])
            check_capacity(emitter_id, EMITTER_ID_MAX, "emetteur id")
            if emitter_id in self.emitters:
                self.incoherent.warn("line %d: emetteur %d already exists, ignoring", record.line, emitter_id)
                continue

            key = parse_station_key(record[2])
            station = self.stations.lookup(key)
            if station is None:
                self.incoherent.warn("station %s not found for emetteur %d, ignoring", key, emitter_id)
                continue
            if station.emitter_count >= STATION_EMITTER_MAX:
                raise CapacityExceeded(
                    f"maximum emetteur count {STATION_EMITTER_MAX} reached for station {key}"
                )

            antenna_id: int | None = parse_int(record[3]) or None
            if antenna_id is not None:
                antenna = self.antennas.get(antenna_id)
                if antenna is None:
                    self.incoherent.warn(
                        "antenne %d not found for emetteur %d, keeping emetteur without antenne",
                        antenna_id,
                        emitter_id,
                    )
                    antenna_id = None
                else:
                    antenna.emitter_ids.append(emitter_id)

            label = record[1]
            system_id = self.systems.intern(label)
            self.systems.counts[system_id] += 1
            station.system_counts[system_id] += 1
            station.emitter_ids.append(emitter_id)

            self.emitters[emitter_id] = Emitter(
                emitter_id=emitter_id,
                id_text=record[0],
                system_label=label,
                system_id=system_id,
                station_key=key,
                antenna_id=antenna_id,
                service_text=record[4],
            )
        logger.info("%d emetteurs and %d systemes", len(self.emitters), len(self.systems))

    def load_bands(self, path: str | Path) -> None:
        for record in self._data_records("bands", path, DATA_ENCODING):
            key = parse_station_key(record[0])
            band_id = parse_int(record[1])
            check_capacity(band_id, BAND_ID_MAX, "bande id")
            if band_id in self.bands:
                self.incoherent.warn("line %d: bande %d already exists, ignoring", record.line, band_id)
                continue

            emitter_id = parse_int(record[2])
            emitter = self.emitters.get(emitter_id)
            if emitter is None:
                self.incoherent.warn("emetteur %d not found for bande %d, ignoring", emitter_id, band_id)
                continue
            try:
                f_min = parse_frequency(record[3], record[5])
                f_max = parse_frequency(record[4], record[5])
            except ValueError as exc:
                self.incoherent.warn("line %d: bande %d: %s, ignoring", record.line, band_id, exc)
                continue
            if len(emitter.band_ids) >= EMITTER_BAND_MAX:
                raise CapacityExceeded(
                    f"maximum band count {EMITTER_BAND_MAX} reached for emetteur {emitter_id}"
                )

            emitter.band_ids.append(band_id)
            self.bands[band_id] = Band(
                band_id=band_id,
                emitter_id=emitter_id,
                station_key=key,
                f_min=f_min,
                f_max=f_max,
                start_text=record[3],
                end_text=record[4],
                unit=record[5],
            )
        logger.info("%d bandes", len(self.bands))

    # Lookups

    def station(self, key: StationKey) -> Station | None:
        return self.stations.lookup(key)

    def support_stations(self, support: Support) -> list[Station]:
        """
        Resolve the stations of ``support``, dropping dangling references.
        """
        stations: list[Station] = []
        for key in support.station_keys:
            station = self.stations.lookup(key)
            if station is None:
                self.incoherent.warn("station %s not found for support %d, ignoring", key, support.support_id)
                continue
            stations.append(station)
        return stations

    def stations_chronological(self, stations: list[Station]) -> Iterator[Station]:
        """
        Walk ``stations`` from the oldest to the most recently changed.
        """
        return iter_in_order(
            stations,
            key=lambda station: (approx_day_number(station.sort_date), station.key.number),
        )

    def station_emitters(self, station: Station) -> Iterator[Emitter]:
        emitters = [self.emitters[emitter_id] for emitter_id in station.emitter_ids]
        return iter_in_order(emitters, key=lambda emitter: emitter.emitter_id)

    def station_antennas(self, station: Station) -> Iterator[Antenna]:
        antennas = [self.antennas[antenna_id] for antenna_id in station.antenna_ids]
        return iter_in_order(antennas, key=lambda antenna: antenna.antenna_id)

    def station_systems(self, station: Station) -> Iterator[tuple[str, int]]:
        """
        ``(system label, emitter count)`` of a station, most frequent first.
        """
        for system_id, count in iter_ranked(station.system_counts):
            yield self.systems.label(system_id), count

    def emitter_bands(self, emitter: Emitter) -> list[Band]:
        return [self.bands[band_id] for band_id in emitter.band_ids]

    def support_tier(self, stations: Iterable[Station]) -> Tier | None:
        """
        Freshness tier of a support, ``None`` when styles are disabled.
        """
        if self.config.no_color:
            return None
        return classify((station.latest for station in stations), self.latest, self.config.now)

    def nature_name(self, nature_id: int) -> str:
        return self.natures.get(nature_id)

    def owner_name(self, owner_id: int) -> str:
        return self.owners.get(owner_id)

    def operator_name(self, operator_id: int) -> str:
        return self.operators.get(operator_id)

    def antenna_type_name(self, type_id: int) -> str:
        if type_id == UNDESCRIBED_ID:
            type_id = ANTENNA_TYPE_ID_MAX - 1
        return self.antenna_types.get(type_id)

    # Loading helpers

    def _data_records(self, table: str, path: str | Path, encoding: str) -> Iterator[Record]:
        self._begin(table)
        records = RecordTable(path, encoding)
        logger.debug("reading %s from %s", table, records.path)
        return (record for record in records if record.is_data)

    def _begin(self, table: str) -> None:
        if table in self._loaded:
            raise LoadOrderError(f"{table} table already loaded")
        missing = [name for name in TABLE_DEPENDENCIES.get(table, ()) if name not in self._loaded]
        if missing:
            raise LoadOrderError(f"{table} table requires {', '.join(missing)} to be loaded first")
        self._loaded.add(table)

    def _trace(self, message: str, *args: object) -> None:
        """
        Per-row debug trace, emitted only for verbose runs.
        """
        if self.config.verbose:
            logger.debug(message, *args)

    def _add_label(self, table: LabelTable, label_id: int, record: Record) -> None:
        if not table.add(label_id, record[1]):
            self.incoherent.warn("line %d: %s %d already exists, ignoring", record.line, table.name, label_id)
            return
        self._trace("%s id %d : %s", table.name, label_id, record[1])

    @staticmethod
    def _resolve_input_directory(path: str | Path) -> Path:
        resolved = Path(path).resolve()
        if not resolved.is_dir():
            raise FileNotFoundError(f"Input directory not found: {resolved}")
        return resolved


__all__ = [
    "AnfrGraph",
    "Antenna",
    "Band",
    "Emitter",
    "LabelTable",
    "Station",
    "Support",
    "SystemTable",
    "TABLE_FILES",
]
