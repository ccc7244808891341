"""
Per-operator merge of observed frequency intervals.

Each operator owns an ascending singly-linked list of ``BandUsage`` nodes.
Incoming intervals either hit an equal node, whose counters are incremented,
or are inserted in order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

import numpy as np

from .ordinal import iter_ranked

if TYPE_CHECKING:  # pragma: no cover
    from .anfr_graph import AnfrGraph


@dataclass(eq=False)
class BandUsage:
    """
    One merged interval ``[f_min, f_max)`` of an operator.
    """

    f_min: float
    f_max: float
    label: str = ""
    total: int = 0
    system_counts: np.ndarray | None = field(default=None, repr=False)
    next: "BandUsage | None" = field(default=None, repr=False)

    @property
    def interval(self) -> tuple[float, float]:
        return self.f_min, self.f_max


class FrequencyBandAggregator:
    """
    Deduplicated ascending interval lists with per-system counts, by operator.
    """

    def __init__(self, system_capacity: int) -> None:
        self.system_capacity = system_capacity
        self._heads: dict[int, BandUsage] = {}

    @classmethod
    def from_graph(cls, graph: AnfrGraph) -> "FrequencyBandAggregator":
        """
        Aggregate every band reachable through emitter -> station -> operator.
        """
        aggregator = cls(graph.systems.capacity)
        for station in graph.stations:
            for emitter_id in station.emitter_ids:
                emitter = graph.emitters[emitter_id]
                for band in graph.emitter_bands(emitter):
                    aggregator.add(
                        station.operator_id,
                        band.f_min,
                        band.f_max,
                        emitter.system_id,
                        label=band.label,
                    )
        return aggregator

    def add(
        self,
        operator_id: int,
        f_min: float,
        f_max: float,
        system_id: int,
        label: str = "",
    ) -> BandUsage:
        """
        Count one observation of ``[f_min, f_max)`` for ``operator_id``.

        Returns the node holding the interval.
        """
        if not 0 <= system_id < self.system_capacity:
            raise ValueError(f"System id {system_id} out of range 0..{self.system_capacity - 1}.")
        if not (np.isfinite(f_min) and np.isfinite(f_max)):
            raise ValueError(f"Interval [{f_min}, {f_max}) of operator {operator_id} is not finite.")

        head = self._heads.get(operator_id)
        if head is None:
            # Sentinel at [0, 0): frequencies are never negative.
            head = self._heads[operator_id] = BandUsage(0.0, 0.0)
        incoming = (f_min, f_max)
        if incoming < head.interval:
            raise ValueError(
                f"Interval [{f_min}, {f_max}) of operator {operator_id} sorts below the list head."
            )

        previous = head
        node = head.next
        while node is not None:
            if node.interval == incoming:
                node.total += 1
                node.system_counts[system_id] += 1
                return node
            if node.interval > incoming:
                break
            previous, node = node, node.next

        created = BandUsage(
            f_min=f_min,
            f_max=f_max,
            label=label,
            total=1,
            system_counts=np.zeros(self.system_capacity, dtype=np.int32),
            next=node,
        )
        created.system_counts[system_id] = 1
        previous.next = created
        return created

    def operators(self) -> list[int]:
        """
        Operators with at least one interval, ascending.
        """
        return sorted(self._heads)

    def intervals(self, operator_id: int) -> Iterator[BandUsage]:
        """
        Merged intervals of ``operator_id`` in ascending order.
        """
        head = self._heads.get(operator_id)
        node = head.next if head is not None else None
        while node is not None:
            yield node
            node = node.next

    def ranked_systems(self, usage: BandUsage) -> Iterator[tuple[int, int]]:
        """
        ``(system id, count)`` of an interval, most frequent first.
        """
        return iter_ranked(usage.system_counts)

    def __len__(self) -> int:
        return sum(1 for operator_id in self._heads for _ in self.intervals(operator_id))


__all__ = ["BandUsage", "FrequencyBandAggregator"]
