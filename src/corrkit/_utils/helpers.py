"""
General-purpose context managers.

Methods
-------
temp_log_level(logger, level)
    Temporarily sets the logging level of a logger within a context.
temp_random_state(seed)
    Temporarily seeds NumPy's global random generator within a context.

Examples
--------
>>> import logging
>>> from corrkit._utils import temp_log_level
>>> with temp_log_level(logging.getLogger("corrkit"), logging.DEBUG):
...     pass
"""

from contextlib import contextmanager

import numpy as np


@contextmanager
def temp_log_level(logger, level):
    """
    Temporarily sets the logging level of a logger within a context.

    Parameters
    ----------
    logger : logging.Logger
        The logger whose level will be temporarily changed.
    level : int
        The logging level to set (e.g., logging.INFO, logging.DEBUG).

    Notes
    -----
    After exiting the context, the original log level is always restored,
    even if an exception occurs.
    """
    old_level = logger.level
    logger.setLevel(level)
    try:
        yield
    finally:
        logger.setLevel(old_level)


@contextmanager
def temp_random_state(seed):
    """
    Temporarily seeds NumPy's legacy global random generator.

    Some delegates (e.g. the bootstrap in Shepherd's Pi) draw from
    ``numpy.random`` directly and cannot be given a generator. This context
    seeds the global state for their call and restores the previous state
    afterwards, so the caller's random stream is left untouched.

    Parameters
    ----------
    seed : int or None
        Seed to use. ``None`` leaves the global state as it is.
    """
    if seed is None:
        yield
        return
    old_state = np.random.get_state()
    np.random.seed(seed)
    try:
        yield
    finally:
        np.random.set_state(old_state)
