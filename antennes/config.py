"""
Run configuration for the ANFR loaders and exporters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

CONSOLE_HANDLER_NAME = "antennes.console"


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass(frozen=True)
class AnfrConfig:
    """
    Explicit settings threaded into the graph builder and the exporters.

    Parameters
    ----------
    now:
        Reference day of the run. Station dates after it are treated as
        incoherent when computing the dataset latest date.
    no_color:
        Disable support freshness styles in KML output.
    verbose:
        Emit per-row debug traces while loading. The traces are logged at
        DEBUG, so the logging level must let them through as well.
    """

    now: date = field(default_factory=_utc_today)
    no_color: bool = False
    verbose: bool = False


def setup_logging(verbose: bool = False) -> None:
    """
    Install the console handler used by the command line tools.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == CONSOLE_HANDLER_NAME:
            root.removeHandler(handler)
    console_handler = logging.StreamHandler()
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setFormatter(logging.Formatter("antennes. %(levelname)s: %(message)s"))
    root.addHandler(console_handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)


__all__ = ["CONSOLE_HANDLER_NAME", "AnfrConfig", "setup_logging"]
