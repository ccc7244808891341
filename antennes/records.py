"""
Reading of semicolon-delimited ANFR tables and parsing of their field formats.
"""

from __future__ import annotations

import csv
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterator

# Tables carrying free-text labels are published as UTF-8, the others as Latin-1.
LABEL_ENCODING = "utf-8"
DATA_ENCODING = "iso-8859-1"

FREQUENCY_UNITS = {
    "K": Decimal(10) ** 3,
    "M": Decimal(10) ** 6,
    "G": Decimal(10) ** 9,
}

_LEADING_DIGITS = re.compile(r"[0-9]*")
_LEADING_HEX_DIGITS = re.compile(r"[0-9A-F]*")


@dataclass
class Record:
    """
    One source line split into its positional fields.
    """

    line: int
    fields: list[str] = field(default_factory=list)

    def __getitem__(self, position: int) -> str:
        # Older extractions miss trailing columns; absent fields read as empty.
        if position < len(self.fields):
            return self.fields[position]
        return ""

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def is_data(self) -> bool:
        """
        Whether the line holds data rather than a header or comment.
        """
        return bool(self.fields) and self.fields[0][:1].isdigit()


class RecordTable:
    """
    Restartable sequence of records read from one ANFR table file.
    """

    def __init__(self, path: str | Path, encoding: str = DATA_ENCODING) -> None:
        self.path = Path(path)
        self.encoding = encoding
        if not self.path.exists():
            raise FileNotFoundError(f"ANFR table not found: {self.path}")

    def __iter__(self) -> Iterator[Record]:
        with self.path.open("r", newline="", encoding=self.encoding, errors="replace") as handle:
            reader = csv.reader(handle, delimiter=";", quoting=csv.QUOTE_NONE)
            for row in reader:
                if not row:
                    continue
                row[0] = _strip_bom(row[0])
                yield Record(reader.line_num, row)

    def __repr__(self) -> str:
        return f"RecordTable({str(self.path)!r}, encoding={self.encoding!r})"


def parse_int(value: str) -> int:
    """
    Decimal value of the leading digits of ``value``, 0 when there are none.
    """
    digits = _LEADING_DIGITS.match(value.strip()).group()
    return int(digits) if digits else 0


def parse_hex(value: str) -> int:
    """
    Hexadecimal value of the leading upper-case hex digits of ``value``.
    """
    digits = _LEADING_HEX_DIGITS.match(value.strip()).group()
    return int(digits, 16) if digits else 0


def parse_decimal(value: str) -> Decimal:
    """
    Parse a finite decimal number written with a comma separator.
    """
    text = value.strip().replace(",", ".")
    if not text:
        return Decimal(0)
    try:
        result = Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid decimal value: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Non-finite decimal value: {value!r}")
    return result


def parse_date(value: str) -> date | None:
    """
    Parse a ``dd/mm/YYYY`` date, returning ``None`` for empty or invalid text.
    """
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, "%d/%m/%Y").date()
    except ValueError:
        return None


def parse_frequency(value: str, unit: str) -> float:
    """
    Convert a frequency expressed in ``unit`` (K, M or G) to Hz.
    """
    try:
        multiplier = FREQUENCY_UNITS[unit.strip().upper()]
    except KeyError as exc:
        raise ValueError(f"Unknown frequency unit: {unit!r}") from exc
    try:
        return float(parse_decimal(value) * multiplier)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid frequency value: {value!r}") from exc


def dms_to_decimal(degrees: int, minutes: int, seconds: int, hemisphere: str) -> float:
    """
    Convert degree/minute/second coordinates to signed decimal degrees.
    """
    value = degrees + (minutes + seconds / 60.0) / 60.0
    if hemisphere[:1] in ("S", "W"):
        return -value
    return value


def _strip_bom(value: str) -> str:
    if value.startswith("\ufeff"):
        return value.lstrip("\ufeff")
    return value


__all__ = [
    "DATA_ENCODING",
    "FREQUENCY_UNITS",
    "LABEL_ENCODING",
    "Record",
    "RecordTable",
    "dms_to_decimal",
    "parse_date",
    "parse_decimal",
    "parse_frequency",
    "parse_hex",
    "parse_int",
]
