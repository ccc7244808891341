"""
Shared fixtures: a small but complete ANFR extraction written into ``tmp_path``.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from antennes.anfr_graph import AnfrGraph
from antennes.config import AnfrConfig


def _write_lines(path: Path, rows: list[list[object]], encoding: str = "utf-8") -> None:
    path.write_text("\n".join(";".join(map(str, row)) for row in rows) + "\n", encoding=encoding)


SUPPORT_HEADER = [
    "SUP_ID", "STA_NM_ANFR", "NAT_ID", "COR_NB_DG_LAT", "COR_NB_MN_LAT", "COR_NB_SC_LAT",
    "COR_CD_NS_LAT", "COR_NB_DG_LON", "COR_NB_MN_LON", "COR_NB_SC_LON", "COR_CD_EW_LON",
    "SUP_NM_HAUT", "TPO_ID", "ADR_LB_LIEU", "ADR_LB_ADD1", "ADR_LB_ADD2", "ADR_LB_ADD3",
    "ADR_NM_CP", "COM_CD_INSEE",
]


def write_dataset(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    _write_lines(
        root / "SUP_NATURE.txt",
        [["NAT_ID", "NAT_LB_NOM"], [1, "Pylône"], [2, "Château d'eau"], [999999999, "Support non décrit"]],
    )
    _write_lines(root / "SUP_PROPRIETAIRE.txt", [["TPO_ID", "TPO_LB"], [1, "TDF"], [2, "Commune"]])
    _write_lines(root / "SUP_EXPLOITANT.txt", [["ADM_ID", "ADM_LB_NOM"], [1, "ORANGE"], [2, "SFR"]])
    _write_lines(
        root / "SUP_TYPE_ANTENNE.txt",
        [["TAE_ID", "TAE_LB"], [1, "Panneau"], [999999999, "Type non décrit"]],
    )
    _write_lines(
        root / "SUP_SUPPORT.txt",
        [
            SUPPORT_HEADER,
            [10, "0750010001", 1, 48, 51, 24, "N", 2, 21, 7, "E", 30, 1, "Tour", "1 rue A", "", "", "75001", "75056"],
            [10, "0750010002", 1, 48, 51, 24, "N", 2, 21, 7, "E", 30, 1, "Tour", "1 rue A", "", "", "75001", "75056"],
            [20, "0130020001", 2, 43, 17, 48, "N", 5, 22, 12, "E", 45, 2, "Colline", "", "", "", "13001", "13055"],
            [30, "0750010002", 1, 48, 50, 0, "N", 2, 20, 0, "W", 25, 1, "", "", "", "", "75002", "75056"],
        ],
        encoding="iso-8859-1",
    )
    _write_lines(
        root / "SUP_STATION.txt",
        [
            ["STA_NM_ANFR", "ADM_ID", "DEM_NM_CONSIS", "DTE_IMPLANTATION", "DTE_MODIF", "DTE_EN_SERVICE"],
            ["0750010001", 1, 1, "01/01/2010", "15/06/2024", "01/02/2010"],
            ["0750010002", 2, 1, "01/01/2015", "", "10/04/2024"],
            ["0130020001", 1, 1, "01/01/2000", "01/01/2001", "01/01/2001"],
        ],
        encoding="iso-8859-1",
    )
    _write_lines(
        root / "SUP_ANTENNE.txt",
        [
            ["STA_NM_ANFR", "AER_ID", "TAE_ID", "AER_NB_DIMENSION", "AER_FG_RAYON", "AER_NB_AZIMUT",
             "AER_NB_ALT_BAS", "SUP_ID"],
            ["0750010001", 100, 1, "2,5", "D", 120, 28, 10],
            ["0750010002", 100, 1, "2,5", "D", 120, 28, 10],
            ["0130020001", 200, 999999999, 1, "N", 0, 40, 20],
        ],
        encoding="iso-8859-1",
    )
    _write_lines(
        root / "SUP_EMETTEUR.txt",
        [
            ["EMR_ID", "EMR_LB_SYSTEME", "STA_NM_ANFR", "AER_ID", "EMR_DT_SERVICE"],
            [1001, "LTE 800", "0750010001", 100, "01/02/2015"],
            [1000, "GSM 900", "0750010001", 100, "01/02/2010"],
            [1002, "GSM 900", "0750010002", "", "10/04/2024"],
            [1003, "GSM 900", "0130020001", 200, "01/01/2001"],
        ],
        encoding="iso-8859-1",
    )
    _write_lines(
        root / "SUP_BANDE.txt",
        [
            ["STA_NM_ANFR", "BAN_ID", "EMR_ID", "BAN_NB_F_DEB", "BAN_NB_F_FIN", "BAN_FG_UNITE"],
            ["0750010001", 1, 1000, 925, 935, "M"],
            ["0750010001", 2, 1001, 791, 801, "M"],
            ["0750010002", 3, 1002, 925, 935, "M"],
            ["0130020001", 4, 1003, 925, 935, "M"],
        ],
        encoding="iso-8859-1",
    )
    return root


@pytest.fixture
def now() -> date:
    return date(2024, 6, 30)


@pytest.fixture
def config(now: date) -> AnfrConfig:
    return AnfrConfig(now=now)


@pytest.fixture
def dataset_dir(tmp_path: Path) -> Path:
    return write_dataset(tmp_path / "anfr")


@pytest.fixture
def graph(dataset_dir: Path, config: AnfrConfig) -> AnfrGraph:
    return AnfrGraph.from_directory(dataset_dir, config)
