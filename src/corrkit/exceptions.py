"""
Exceptions raised by corrkit.

Configuration errors (:class:`UnsupportedCombinationError`) abort a request
before any computation. Per-pair errors (:class:`DegenerateVarianceError`,
:class:`InsufficientDataError`, :class:`ModelConvergenceError`) are raised by
the pairwise machinery and turned into NA rows by
:func:`corrkit.correlation`, so a single bad pair does not lose the table.
"""


class CorrelationError(Exception):
    """Base class of all corrkit errors."""


class UnsupportedCombinationError(CorrelationError, ValueError):
    """A method, option or variable-type combination cannot be computed."""


class PairError(CorrelationError):
    """An error confined to one pair (or one pair within one group)."""


class DegenerateVarianceError(PairError):
    """A column of the pair has zero variance."""


class InsufficientDataError(PairError):
    """Fewer than 3 complete paired observations."""


class ModelConvergenceError(PairError):
    """A mixed model used for adjustment failed to converge."""
