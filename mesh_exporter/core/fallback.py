"""
Ordered-attempt combinator.

Two places in the pipeline follow the same "try this, else that" shape:

    texture extraction   authoring source data, else platform data
    texture encoding     primary image container, else the fallback one

Both are written as a list of (label, callable) attempts handed to
first_success(). An attempt succeeds by returning a value and fails by
raising ExportError; any other exception is a bug and propagates.
"""

import logging
from typing import Callable, Iterable

from mesh_exporter.core.errors import ExportError

logger = logging.getLogger(__name__)


def first_success(attempts: Iterable[tuple[str, Callable[[], object]]]):
    """
    Run attempts in order and return the result of the first that succeeds.

    Args:
        attempts: (label, zero-argument callable) pairs. Labels only appear
                  in log output.

    Returns:
        (label, result) of the first successful attempt.

    Raises:
        ExportError: The last attempt's error when every attempt fails (of the
                     same subclass, so callers can still tell FormatError from
                     ExportIOError), or a plain ExportError if there were no
                     attempts at all.
    """
    last_error = None

    for label, attempt in attempts:
        try:
            result = attempt()
        except ExportError as e:
            logger.info("%s failed: %s", label, e)
            last_error = e
            continue
        return label, result

    if last_error is None:
        raise ExportError("No attempts to run")
    raise last_error
