"""
Sparse region -> zone -> local id lookup of stations.
"""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

from .station_key import StationKey

T = TypeVar("T")


class StationIndex(Generic[T]):
    """
    Three-level index of stations keyed by their decoded identifier.

    Region and zone levels are allocated on the first station that needs them;
    the addressable space is far larger than the occupied one.
    """

    def __init__(self) -> None:
        self._regions: dict[int, dict[int, dict[int, T]]] = {}
        self._keys: dict[int, StationKey] = {}
        self.zone_count = 0
        self.rejected = 0

    def insert(self, key: StationKey, station: T) -> bool:
        """
        Store ``station`` at ``key``.

        Returns ``False`` and counts a rejection when the slot is already
        taken; the existing station is never overwritten.
        """
        zones = self._regions.get(key.region)
        if zones is None:
            zones = self._regions[key.region] = {}
        stations = zones.get(key.zone)
        if stations is None:
            stations = zones[key.zone] = {}
            self.zone_count += 1
        if key.local_id in stations:
            self.rejected += 1
            return False
        stations[key.local_id] = station
        self._keys[key.number] = key
        return True

    def lookup(self, key: StationKey) -> T | None:
        """
        Station stored at ``key`` or ``None`` for a dangling reference.
        """
        zones = self._regions.get(key.region)
        if zones is None:
            return None
        stations = zones.get(key.zone)
        if stations is None:
            return None
        return stations.get(key.local_id)

    def __contains__(self, key: StationKey) -> bool:
        return self.lookup(key) is not None

    def count(self) -> int:
        """
        Number of stations stored.
        """
        return len(self._keys)

    def __len__(self) -> int:
        return self.count()

    @property
    def region_count(self) -> int:
        return len(self._regions)

    def keys(self) -> Iterator[StationKey]:
        """
        Stored keys in ascending identifier order.
        """
        for number in sorted(self._keys):
            yield self._keys[number]

    def __iter__(self) -> Iterator[T]:
        for key in self.keys():
            station = self.lookup(key)
            if station is not None:
                yield station


__all__ = ["StationIndex"]
