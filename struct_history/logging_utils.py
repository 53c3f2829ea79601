"""
Logging setup for the struct-history command line.

Every module logs through its own `logging.getLogger(__name__)`. The
verbosity count only adjusts the levels of the package loggers, so
third-party libraries stay at WARNING whatever `-v` says. The git
adapter logs one line per git invocation, which drowns the walk itself,
so that chatter needs one more `-v` than the rest of the debug output.
"""

from __future__ import annotations

import logging
from typing import Dict

PACKAGE_LOGGER = "struct_history"
GIT_LOGGER = "struct_history.git_adapter"

LOG_FORMAT = "%(relativeCreated)6dms %(levelname)s %(name)s: %(message)s"


def levels_for(verbosity: int) -> Dict[str, int]:
    """
    Map a verbosity count to the levels of the package loggers.

    0 -> WARNING everywhere
    1 -> INFO (start revision, stop reason, revisions examined)
    2 -> DEBUG (skipped commits, per-revision signatures); git at INFO
    3 -> DEBUG including every git command
    """

    if verbosity <= 0:
        package = logging.WARNING
    elif verbosity == 1:
        package = logging.INFO
    else:
        package = logging.DEBUG

    git = logging.DEBUG if verbosity >= 3 else max(package, logging.INFO)
    return {PACKAGE_LOGGER: package, GIT_LOGGER: git}


def configure_logging(verbosity: int) -> None:
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    for name, level in levels_for(verbosity).items():
        logging.getLogger(name).setLevel(level)
