"""
Selection of the statistical test for a pair of variables.

The module maps a requested method name (or ``'auto'``) together with the
analysis flags and the kinds of the two variables onto an immutable
:class:`~corrkit.types.TestSpec`. Every incompatible combination is
rejected with :class:`~corrkit.exceptions.UnsupportedCombinationError`
before any computation starts.

Functions
---------
normalize_options(options)
    Validate a :class:`CorrelationOptions` and map aliases to canonical names.
auto_method(kind_x, kind_y)
    Method chosen by ``method='auto'`` for two variable kinds.
resolve_method(options, kind_x, kind_y, names)
    Build the :class:`TestSpec` of one pair.

Notes
-----
``auto`` mapping:

=====================  =====================  ===============
kind x                 kind y                 method
=====================  =====================  ===============
continuous             continuous             pearson
continuous             ordinal                spearman
continuous             binary                 point_biserial
continuous             categorical            polychoric
binary                 binary                 tetrachoric
binary/ordinal/categ.  ordinal/categorical    polychoric
=====================  =====================  ===============
"""

import dataclasses
import math
from numbers import Number
from typing import NamedTuple, Optional

from corrkit._utils import (
    convert_from_alias,
    read_config,
    validate_natural_number,
    validate_open_interval,
    validate_string_flag,
)
from corrkit.exceptions import UnsupportedCombinationError
from corrkit.types import CorrelationOptions, Method, TestSpec, VariableKind

_errors = read_config("messages")["errors"]
_combination = _errors["combination"]


class MethodInfo(NamedTuple):
    """Static description of a method."""

    label: str
    estimate_name: str
    handles_nominal: bool = False
    bayesian: bool = False
    tuning: Optional[float] = None
    tuning_bounds: Optional[tuple] = None


METHODS = {
    Method.PEARSON: MethodInfo("Pearson correlation", "r", bayesian=True),
    Method.SPEARMAN: MethodInfo("Spearman correlation", "rho", bayesian=True),
    Method.KENDALL: MethodInfo("Kendall correlation", "tau"),
    Method.BIWEIGHT: MethodInfo(
        "Biweight correlation", "r", tuning=9.0, tuning_bounds=(0, math.inf)
    ),
    Method.DISTANCE: MethodInfo("Distance correlation", "Dcor"),
    Method.PERCENTAGE_BEND: MethodInfo(
        "Percentage Bend correlation", "r", tuning=0.2, tuning_bounds=(0, 0.5)
    ),
    Method.SHEPHERD: MethodInfo("Shepherd's Pi correlation", "rho"),
    Method.BLOMQVIST: MethodInfo("Blomqvist's coefficient", "beta"),
    Method.HOEFFDING: MethodInfo("Hoeffding's D", "D"),
    Method.GAMMA: MethodInfo("Goodman-Kruskal's gamma", "gamma"),
    Method.GAUSSIAN: MethodInfo("Gaussian rank correlation", "r", bayesian=True),
    Method.BISERIAL: MethodInfo("Biserial correlation", "r"),
    Method.POINT_BISERIAL: MethodInfo(
        "Point-biserial correlation", "r", bayesian=True
    ),
    Method.WINSORIZED: MethodInfo(
        "Winsorized correlation",
        "r",
        bayesian=True,
        tuning=0.2,
        tuning_bounds=(0, 0.5),
    ),
    Method.POLYCHORIC: MethodInfo("Polychoric correlation", "rho", handles_nominal=True),
    Method.TETRACHORIC: MethodInfo(
        "Tetrachoric correlation", "rho", handles_nominal=True
    ),
}

BAYESIAN_METHODS = tuple(m.value for m, info in METHODS.items() if info.bayesian)

PRIOR_SCALES = {
    "medium.narrow": 1 / math.sqrt(27),
    "medium": 1 / 3,
    "wide": 1 / math.sqrt(3),
    "ultrawide": 1.0,
}

_LATENT = (Method.POLYCHORIC, Method.TETRACHORIC)
_DICHOTOMOUS = (Method.BISERIAL, Method.POINT_BISERIAL)


def prior_scale(prior) -> float:
    """
    Scale of the stretched beta prior on rho.

    Parameters
    ----------
    prior : str or float
        A named prior (see ``PRIOR_SCALES``) or a positive number.

    Returns
    -------
    float

    Raises
    ------
    ValueError
        If ``prior`` is neither a known name nor a positive number.
    """
    if isinstance(prior, str):
        key = prior.lower()
        validate_string_flag(
            key,
            PRIOR_SCALES,
            _errors["prior_invalid_f"].format(prior, list(PRIOR_SCALES)),
        )
        return PRIOR_SCALES[key]
    validate_open_interval(
        prior,
        (0, math.inf),
        _errors["prior_invalid_f"].format(prior, list(PRIOR_SCALES)),
    )
    return float(prior)


def normalize_options(options: CorrelationOptions) -> CorrelationOptions:
    """
    Validate options and replace aliases by canonical names.

    Parameters
    ----------
    options : CorrelationOptions
        User options.

    Returns
    -------
    CorrelationOptions
        A new options object with canonical ``method``, ``alternative`` and
        ``p_adjust`` values.

    Raises
    ------
    ValueError
        If a value is not supported (unknown method, ``ci`` outside
        ``(0, 1)``, non positive ``n_boot`` ...).
    UnsupportedCombinationError
        If ``bayesian=True`` is requested with a method lacking a Bayesian
        implementation.
    """
    supported_methods = [m.value for m in Method]
    method = convert_from_alias(options.method, supported_methods, path="method")
    validate_string_flag(
        method,
        supported_methods,
        _errors["unsupported_method_f"].format(options.method, supported_methods),
    )
    alternative = convert_from_alias(options.alternative, path="alternative")
    validate_string_flag(
        alternative,
        ("two-sided", "greater", "less"),
        _errors["unsupported_option_f"].format(
            options.alternative, "alternative", ["two-sided", "greater", "less"]
        ),
    )
    p_adjust = convert_from_alias(options.p_adjust, path="p_adjust")
    supported_adjust = list(read_config("aliases")["p_adjust"])
    validate_string_flag(
        p_adjust,
        supported_adjust,
        _errors["unsupported_option_f"].format(
            options.p_adjust, "p_adjust", supported_adjust
        ),
    )
    validate_open_interval(options.ci, (0, 1), _errors["ci_out_of_range_f"].format(options.ci))
    validate_natural_number(options.n_boot, "n_boot")
    validate_natural_number(options.n_draws, "n_draws")
    prior_scale(options.bayesian_prior)

    info = METHODS.get(Method(method))
    if options.tuning is not None and info is not None and info.tuning_bounds:
        lower, upper = info.tuning_bounds
        if not isinstance(options.tuning, Number) or not lower < options.tuning <= upper:
            raise ValueError(
                _errors["tuning_out_of_range_f"].format(
                    method, info.tuning_bounds, options.tuning
                )
            )
    if options.bayesian and method != Method.AUTO.value and not info.bayesian:
        raise UnsupportedCombinationError(
            _combination["bayesian_not_available_f"].format(method, BAYESIAN_METHODS)
        )
    return dataclasses.replace(
        options, method=method, alternative=alternative, p_adjust=p_adjust
    )


def auto_method(kind_x: VariableKind, kind_y: VariableKind) -> Method:
    """
    Method selected by ``method='auto'`` for a pair of variable kinds.

    Examples
    --------
    >>> auto_method(VariableKind.CONTINUOUS, VariableKind.BINARY)
    <Method.POINT_BISERIAL: 'point_biserial'>
    """
    kinds = {kind_x, kind_y}
    if kinds == {VariableKind.CONTINUOUS}:
        return Method.PEARSON
    if kinds == {VariableKind.CONTINUOUS, VariableKind.ORDINAL}:
        return Method.SPEARMAN
    if kinds == {VariableKind.CONTINUOUS, VariableKind.BINARY}:
        return Method.POINT_BISERIAL
    if kinds == {VariableKind.BINARY}:
        return Method.TETRACHORIC
    return Method.POLYCHORIC


def _check_kinds(method: Method, names, kinds) -> None:
    (name_x, name_y), (kind_x, kind_y) = names, kinds
    if method is Method.POLYCHORIC and not (kind_x.is_factor or kind_y.is_factor):
        raise UnsupportedCombinationError(
            _combination["polychoric_requires_categorical_f"].format(
                method.value, name_x, name_y
            )
        )
    if method is Method.TETRACHORIC and not (
        kind_x is VariableKind.BINARY and kind_y is VariableKind.BINARY
    ):
        raise UnsupportedCombinationError(
            _combination["tetrachoric_requires_binary_f"].format(
                name_x, kind_x.value, name_y, kind_y.value
            )
        )
    if method in _DICHOTOMOUS and VariableKind.BINARY not in (kind_x, kind_y):
        raise UnsupportedCombinationError(
            _combination["requires_binary_f"].format(
                method.value, name_x, kind_x.value, name_y, kind_y.value
            )
        )
    if not METHODS[method].handles_nominal:
        for name, kind in zip(names, kinds):
            if kind is VariableKind.CATEGORICAL:
                raise UnsupportedCombinationError(
                    _combination["numeric_method_on_categorical_f"].format(
                        method.value, name
                    )
                )


def resolve_method(
    options: CorrelationOptions,
    kind_x: VariableKind,
    kind_y: VariableKind,
    names: tuple = ("x", "y"),
) -> TestSpec:
    """
    Build the test specification of one pair.

    Parameters
    ----------
    options : CorrelationOptions
        Normalised options (see :func:`normalize_options`).
    kind_x, kind_y : VariableKind
        Kinds of the two variables.
    names : tuple, default=('x', 'y')
        Variable names, used in error messages.

    Returns
    -------
    TestSpec

    Raises
    ------
    UnsupportedCombinationError
        If the method cannot be applied to these variables with these
        flags (see :mod:`corrkit.methods.resolver`).
    """
    method = Method(options.method)
    if method is Method.AUTO:
        method = auto_method(kind_x, kind_y)
    info = METHODS[method]
    _check_kinds(method, names, (kind_x, kind_y))

    if options.bayesian and not info.bayesian:
        raise UnsupportedCombinationError(
            _combination["bayesian_not_available_f"].format(
                method.value, BAYESIAN_METHODS
            )
        )
    if method in _LATENT + _DICHOTOMOUS:
        for flag in ("partial", "multilevel"):
            if getattr(options, flag):
                raise UnsupportedCombinationError(
                    _combination["adjustment_on_categorical_f"].format(
                        method.value, flag
                    )
                )
    if method in _LATENT and options.ranktransform:
        raise UnsupportedCombinationError(
            _combination["ranktransform_on_categorical_f"].format(method.value)
        )

    tuning = options.tuning if options.tuning is not None else info.tuning
    return TestSpec(
        method=method,
        alternative=options.alternative,
        ci=options.ci,
        bayesian=options.bayesian,
        partial=options.partial,
        multilevel=options.multilevel,
        ranktransform=options.ranktransform,
        tuning=tuning if info.tuning is not None else None,
        prior_scale=prior_scale(options.bayesian_prior),
        n_boot=int(options.n_boot),
        n_draws=int(options.n_draws),
        seed=options.seed,
    )
