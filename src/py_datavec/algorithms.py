"""Derived algorithms over vectors: unique/levels, table and cut."""

from __future__ import annotations
from bisect import bisect_left
from statistics import quantiles
from typing import Any, Dict, Iterable, List

from .builder import distinct
from .errors import DataVecValueError
from .na import NA, isna
from .pooled import PooledDataVec
from .typing import DataType
from .vector import AbstractDataVec
from .vector import DataVec
from .vector import _materialize


def _elements(v) -> List[Any]:
    """Elements of a vector or plain iterable, with None read as NA."""
    if isinstance(v, AbstractDataVec):
        return list(v)
    return [NA if isna(x) else x for x in _materialize(v)]


def unique(v):
    """
    Distinct elements in first-seen order, NA included once if present.

    Pooled vectors answer from their pool instead (pool order, NA last).
    """
    if isinstance(v, PooledDataVec):
        return v.unique()

    elements = _elements(v)
    out = distinct(elements)
    if NA in elements:
        first = elements.index(NA)
        out.insert(len(distinct(elements[:first])), NA)

    if isinstance(v, AbstractDataVec):
        return DataVec(out, dtype=v.schema().with_nullable(True), name=v.name)
    return DataVec(out)


levels = unique


def table(v) -> Dict[Any, int]:
    """
    Count occurrences of each element, NA included as its own key.

    The counts always sum to len(v).

    >>> table(DataVec(["a", NA, "a"]))
    {'a': 2, NA: 1}
    """
    counts: Dict[Any, int] = {}
    for x in _elements(v):
        counts[x] = counts.get(x, 0) + 1
    return counts


def _format_break(x) -> str:
    if isinstance(x, float):
        return f"{x:.1f}" if x.is_integer() else f"{x:g}"
    return str(x)


def cut(x, breaks) -> PooledDataVec:
    """
    Bin numeric values into labelled intervals.

    Parameters
    ----------
    x : iterable or vector of numbers
        Values to bin; NA stays missing
    breaks : iterable of numbers, or int
        Breakpoints, or a number of groups whose breakpoints are the
        1/n, 2/n, ... quantiles of x

    Returns
    -------
    PooledDataVec
        One interval label per element. Intervals are (b[k], b[k+1]]; the
        first is closed on the left, "[b0,b1]", when b0 is the minimum of x.
        The minimum and maximum of x are added to the breakpoints when they
        fall outside them.

    Examples
    --------
    >>> list(cut([1, 5, 10], [3, 7]))
    ['[1,3]', '(3,7]', '(7,10]']
    """
    elements = _elements(x)
    present = [e for e in elements if e is not NA]
    if not present:
        raise DataVecValueError("cut needs at least one non-missing value")

    if isinstance(breaks, int) and not isinstance(breaks, bool):
        breaks = _quantile_breaks(present, breaks)
    else:
        breaks = [b for b in _materialize(breaks) if not isna(b)]

    breaks = sorted(set(breaks))
    min_x, max_x = min(present), max(present)
    if not breaks or breaks[0] > min_x:
        breaks.insert(0, min_x)
    if breaks[-1] < max_x:
        breaks.append(max_x)
    if len(breaks) == 1:
        breaks.append(breaks[0])

    codes = []
    for e in elements:
        if e is NA:
            codes.append(0)
        elif e == min_x:
            codes.append(1)
        else:
            codes.append(bisect_left(breaks, e))

    labels = [_format_break(b) for b in breaks]
    pool = [f"({lo},{hi}]" for lo, hi in zip(labels[:-1], labels[1:])]
    if breaks[0] == min_x:
        pool[0] = f"[{labels[0]},{labels[1]}]"

    return PooledDataVec.from_codes(codes, pool, dtype=DataType(str))


def _quantile_breaks(values: Iterable[Any], ngroups: int) -> List[float]:
    """Interior ngroups-quantiles, linearly interpolated between order statistics."""
    if ngroups < 1:
        raise DataVecValueError(f"ngroups must be at least 1, not {ngroups}")
    values = list(values)
    if ngroups == 1 or len(values) < 2:
        return []
    return quantiles(values, n=ngroups, method="inclusive")
