"""
Decoding of the composite ``STA_NM_ANFR`` station identifier.

The identifier is a fixed-width code of 10 characters::

    | 0 1 2 | 3 4 5 | 6 7 8 9 |
    |region | zone  | local id|

The region is read as hexadecimal (so that Corsican departements ``2A`` and
``2B`` stay distinct), zone and local id are decimal.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field

from .errors import MalformedIdentifier

STATION_KEY_LEN = 10
REGION_LEN = 3
ZONE_LEN = 3

REGION_MAX = 0x999
ZONE_MAX = 600
LOCAL_ID_MAX = 10 * 10 * 10 * 10

_HEX_DIGITS = frozenset(string.hexdigits.upper()) | frozenset(string.digits)


@dataclass(frozen=True, order=True)
class StationKey:
    """
    Decoded station identifier. Instances order by their radix-16 ``number``.
    """

    number: int
    region: int = field(compare=False)
    zone: int = field(compare=False)
    local_id: int = field(compare=False)
    text: str = field(compare=False)

    @property
    def parts(self) -> tuple[int, int, int]:
        return self.region, self.zone, self.local_id

    def __str__(self) -> str:
        return self.text


def parse_station_key(text: str) -> StationKey:
    """
    Decode a 10-character station identifier.

    Raises
    ------
    MalformedIdentifier
        When the text does not have the fixed width, carries characters that
        are not digits of the expected radix, or when a component falls outside
        its declared bound.
    """
    if len(text) != STATION_KEY_LEN:
        raise MalformedIdentifier(f"Invalid station identifier length: {text!r}")
    if not set(text) <= _HEX_DIGITS:
        raise MalformedIdentifier(f"Invalid characters in station identifier: {text!r}")

    region_text = text[:REGION_LEN]
    zone_text = text[REGION_LEN:REGION_LEN + ZONE_LEN]
    local_text = text[REGION_LEN + ZONE_LEN:]
    if not (zone_text.isdigit() and local_text.isdigit()):
        raise MalformedIdentifier(f"Zone and local id must be decimal in station identifier: {text!r}")

    region = int(region_text, 16)
    zone = int(zone_text)
    local_id = int(local_text)
    if region > REGION_MAX:
        raise MalformedIdentifier(f"Invalid station region {region:X} in {text!r}")
    if zone >= ZONE_MAX:
        raise MalformedIdentifier(f"Invalid station zone {zone} in {text!r}")
    if local_id >= LOCAL_ID_MAX:
        raise MalformedIdentifier(f"Invalid station local id {local_id} in {text!r}")

    return StationKey(
        number=int(text, 16),
        region=region,
        zone=zone,
        local_id=local_id,
        text=text,
    )


def format_station_key(region: int, zone: int, local_id: int) -> str:
    """
    Build the identifier text for a region, zone and local id.
    """
    if not 0 <= region <= REGION_MAX:
        raise MalformedIdentifier(f"Invalid station region {region:X}")
    if not 0 <= zone < ZONE_MAX:
        raise MalformedIdentifier(f"Invalid station zone {zone}")
    if not 0 <= local_id < LOCAL_ID_MAX:
        raise MalformedIdentifier(f"Invalid station local id {local_id}")
    return f"{region:03X}{zone:03d}{local_id:04d}"


__all__ = [
    "LOCAL_ID_MAX",
    "REGION_MAX",
    "STATION_KEY_LEN",
    "ZONE_MAX",
    "StationKey",
    "format_station_key",
    "parse_station_key",
]
