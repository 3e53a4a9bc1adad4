"""
corrkit: correlation analysis for tabular data.

Features include:
- Frequentist and Bayesian correlations with sixteen methods
- Partial and multilevel (mixed model) adjustment
- Stratification by grouping columns
- Multiple testing correction and matrix views
"""
import logging

from .adjust import cor_to_pcor, partial_to_full, pcor_to_cor
from .correlation import cor_test, correlation
from .exceptions import (
    CorrelationError,
    DegenerateVarianceError,
    InsufficientDataError,
    ModelConvergenceError,
    UnsupportedCombinationError,
)
from .results import CorrelationTable
from .types import CorrelationOptions, Method, TestResult, VariableKind

__version__ = "0.1.0"

__all__ = [
    "correlation",
    "cor_test",
    "cor_to_pcor",
    "pcor_to_cor",
    "partial_to_full",
    "CorrelationOptions",
    "CorrelationTable",
    "TestResult",
    "Method",
    "VariableKind",
    "CorrelationError",
    "UnsupportedCombinationError",
    "DegenerateVarianceError",
    "InsufficientDataError",
    "ModelConvergenceError",
]

logger = logging.getLogger("corrkit")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
logger.setLevel(logging.WARNING)
