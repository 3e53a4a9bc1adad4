"""
Stratification of a dataset by grouping columns.

Functions
---------
group_label(key)
    Label of a group key tuple, e.g. ``"a - b"``.
split_groups(dataset, by)
    Partition a :class:`~corrkit.dataset.Dataset` by grouping columns.
"""

import logging
from typing import Sequence

from corrkit.dataset import Dataset

logger = logging.getLogger(__name__)


def group_label(key) -> str:
    """
    Label of a group key.

    Examples
    --------
    >>> group_label(("a", 1))
    'a - 1'
    >>> group_label("setosa")
    'setosa'
    """
    if not isinstance(key, tuple):
        key = (key,)
    return " - ".join(str(value) for value in key)


def split_groups(dataset: Dataset, by: Sequence = None) -> list:
    """
    Partition a dataset by the distinct value combinations of ``by``.

    Parameters
    ----------
    dataset : Dataset
        Dataset whose ``factors`` hold the grouping columns.
    by : Sequence of str, optional
        Grouping columns. When empty, the whole dataset is returned as a
        single unlabelled group.

    Returns
    -------
    list of (str or None, Dataset)
        Groups in order of first appearance of their key. Rows with a
        missing key are dropped.

    Examples
    --------
    >>> import pandas as pd
    >>> from corrkit.dataset import build_dataset
    >>> df = pd.DataFrame({"x": [1, 2, 3, 4], "g": ["b", "a", "b", "a"]})
    >>> [label for label, _ in split_groups(build_dataset(df, keep=["g"]), ["g"])]
    ['b', 'a']
    """
    if not by:
        return [(None, dataset)]
    by = list(by)
    keys = dataset.factors[by]
    complete = keys.notna().all(axis=1)
    if not complete.all():
        logger.info(
            "%d row(s) with missing values in %s are dropped.", (~complete).sum(), by
        )
    keys = keys[complete]

    groups = []
    for key, rows in keys.groupby(by, sort=False, observed=True):
        groups.append((group_label(key), dataset.take(rows.index)))
    logger.debug("Data split into %d group(s) by %s.", len(groups), by)
    return groups
