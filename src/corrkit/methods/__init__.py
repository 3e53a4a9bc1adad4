"""
Correlation methods: selection, estimation and inference.

This subpackage turns a method name and two columns into a
:class:`~corrkit.types.TestResult`. Method selection and validation live in
:mod:`.resolver`, the estimators in :mod:`.estimators`,
:mod:`.polychoric` and :mod:`.bayesian`, shared inference in
:mod:`.inference` and the per-pair driver in :mod:`.runner`.
"""

from .inference import cor_to_ci, cor_to_p
from .resolver import (
    BAYESIAN_METHODS,
    METHODS,
    auto_method,
    normalize_options,
    resolve_method,
)
from .runner import diagonal_result, na_result, run_pair

__all__ = [
    "BAYESIAN_METHODS",
    "METHODS",
    "auto_method",
    "normalize_options",
    "resolve_method",
    "cor_to_p",
    "cor_to_ci",
    "run_pair",
    "diagonal_result",
    "na_result",
]
