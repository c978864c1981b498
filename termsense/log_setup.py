from __future__ import annotations

import logging
import os
import sys
from datetime import datetime

TRACE = 5
TRACE_DIR = "debug"
LOGGER_NAME = "termsense"

logging.addLevelName(TRACE, "TRACE")

_CONSOLE_FMT = "%(levelname)s %(name)s: %(message)s"
_FILE_FMT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s:%(funcName)s:%(lineno)d %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _console_level(debug: bool, trace: bool, verbose: bool) -> int:
    if trace and verbose:
        return TRACE
    if debug or trace:
        return logging.DEBUG
    return logging.INFO


def setup_logging(
    *, debug: bool, trace: bool, verbose: bool, trace_dir: str | None = None
) -> logging.Logger:
    """Configure the ``termsense`` logger tree.

    The console handler always writes to stderr; stdout is reserved for the
    JSON protocol lines. Trace mode adds a timestamped file that records
    everything down to TRACE (per-chunk buffer activity).

    Args:
        debug: Lower the console level to DEBUG.
        trace: Enable the trace file (and DEBUG on the console).
        verbose: With ``trace``, also send TRACE records to the console.
        trace_dir: Directory for trace files. Defaults to :data:`TRACE_DIR`.

    Returns:
        The configured ``termsense`` logger.
    """
    root = logging.getLogger(LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(TRACE)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_console_level(debug, trace, verbose))
    console.setFormatter(logging.Formatter(_CONSOLE_FMT))
    root.addHandler(console)

    if trace:
        directory = trace_dir or TRACE_DIR
        os.makedirs(directory, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
        fh = logging.FileHandler(os.path.join(directory, f"trace-{timestamp}.log"))
        fh.setLevel(TRACE)
        fh.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
        root.addHandler(fh)

    return root
