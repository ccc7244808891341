"""
Freshness classification of supports from their stations' dates.

Day distances use the approximate calendar metric of the ANFR tooling:
``365 * years + 30 * months + days``. Freshness thresholds (30 and 90 days)
are calibrated against this metric, not against an exact day count.
"""

from __future__ import annotations

import enum
from datetime import date
from typing import Iterable

RED_DAYS = 30
ORANGE_DAYS = 90

# A missing date compares like a zeroed calendar date.
_MISSING_DATE_PARTS = (1900, 1, 0)


class Tier(enum.IntEnum):
    """
    Support freshness, ordered so that escalation is ``max``.
    """

    BLUE = 1
    ORANGE = 2
    RED = 3

    @property
    def style(self) -> str:
        return self.name.lower()


def _parts(value: date | None) -> tuple[int, int, int]:
    if value is None:
        return _MISSING_DATE_PARTS
    return value.year, value.month, value.day


def approx_day_number(value: date | None) -> int:
    """
    Position of ``value`` on the approximate day scale.
    """
    year, month, day = _parts(value)
    return year * 365 + month * 30 + day


def day_diff(a: date | None, b: date | None) -> int:
    """
    Approximate number of days from ``b`` to ``a``.

    Positive when ``a`` is more recent than ``b``, negative when it is older,
    zero when both fall on the same approximate day.
    """
    return approx_day_number(a) - approx_day_number(b)


def latest_date(*dates: date | None) -> date | None:
    """
    Most recent of ``dates`` by the approximate metric, first one on ties.
    """
    latest: date | None = None
    for index, value in enumerate(dates):
        if index == 0 or day_diff(value, latest) > 0:
            latest = value
    return latest


def update_dataset_latest(current: date | None, candidate: date | None, now: date) -> date | None:
    """
    Fold a station date into the dataset latest date.

    Dates that are not strictly before ``now`` are incoherent and left out.
    """
    if candidate is None:
        return current
    if day_diff(now, candidate) > 0 and (current is None or day_diff(candidate, current) > 0):
        return candidate
    return current


def classify(
    station_dates: Iterable[date | None],
    dataset_latest: date | None,
    now: date,
) -> Tier:
    """
    Freshness tier of a support from the latest dates of its stations.

    The tier only escalates while scanning: a station dated after ``now`` or
    within ``RED_DAYS`` of the dataset latest makes the support red; within
    ``ORANGE_DAYS`` makes it orange.
    """
    tier = Tier.BLUE
    for station_latest in station_dates:
        if tier is Tier.RED:
            break
        if day_diff(now, station_latest) < 0:
            tier = Tier.RED
            continue
        diff = day_diff(dataset_latest, station_latest)
        if diff < RED_DAYS:
            tier = Tier.RED
        elif diff < ORANGE_DAYS:
            tier = max(tier, Tier.ORANGE)
    return tier


__all__ = [
    "ORANGE_DAYS",
    "RED_DAYS",
    "Tier",
    "approx_day_number",
    "classify",
    "day_diff",
    "latest_date",
    "update_dataset_latest",
]
