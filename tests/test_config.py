from __future__ import annotations

import logging
from pathlib import Path

import pytest

from antennes.anfr_graph import AnfrGraph
from antennes.config import CONSOLE_HANDLER_NAME, AnfrConfig, setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_installs_one_console_handler(root_logger) -> None:
    setup_logging()
    setup_logging(verbose=True)

    consoles = [handler for handler in root_logger.handlers if handler.get_name() == CONSOLE_HANDLER_NAME]
    assert len(consoles) == 1
    assert root_logger.level == logging.DEBUG


@pytest.mark.parametrize("verbose", [False, True])
def test_row_traces_follow_verbose_flag(dataset_dir: Path, now, caplog, verbose: bool) -> None:
    caplog.set_level(logging.DEBUG, logger="antennes")

    AnfrGraph.from_directory(dataset_dir, AnfrConfig(now=now, verbose=verbose))

    traces = [record for record in caplog.records if record.getMessage().startswith("new station ")]
    assert len(traces) == (3 if verbose else 0)
    assert any(record.getMessage() == "3 stations in 2 departements and 2 zones" for record in caplog.records)
