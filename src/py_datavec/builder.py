"""
Encoding builder: turns raw values into (codes, pool) pairs.

A pool is the ascending, de-duplicated list of the non-missing values; a code
is the 1-based position of a value in the pool, with 0 reserved for NA.
Equal sets of distinct values always give the same pool, whatever their
input order or multiplicity. Every float NaN counts as one value and
sorts after the rest of the pool.
"""

from __future__ import annotations
from typing import Any, Iterable, List, Optional, Tuple

from .errors import PoolOverflowError
from .errors import ValueNotInPoolError
from .na import NA, isna
from .storage import MAX_POOL_SIZE
from .storage import new_codes
from .typing import infer_dtype
from .vector import AbstractDataVec
from .vector import _apply_mask
from .vector import _coerce_all
from .vector import _materialize


def _is_nan(x: Any) -> bool:
    return isinstance(x, float) and x != x


def sorted_levels(values: Iterable[Any]) -> List[Any]:
    """
    Ascending order; unorderable mixes fall back to a deterministic
    repr-keyed order. NaN sorts last.
    """
    values = list(values)
    nans = [v for v in values if _is_nan(v)]
    values = [v for v in values if not _is_nan(v)]
    try:
        return sorted(values) + nans
    except TypeError:
        return sorted(values, key=repr) + nans


def argsort_levels(values: List[Any]) -> List[int]:
    """Positions of values in ascending order (same fallback as sorted_levels)."""
    nans = [i for i, v in enumerate(values) if _is_nan(v)]
    rest = [i for i, v in enumerate(values) if not _is_nan(v)]
    try:
        return sorted(rest, key=values.__getitem__) + nans
    except TypeError:
        return sorted(rest, key=lambda i: repr(values[i])) + nans


def distinct(values: Iterable[Any]) -> List[Any]:
    """Distinct non-missing values in first-seen order; all NaNs count as one."""
    values = [v for v in values if not isna(v)]
    nan = next((v for v in values if _is_nan(v)), None)
    if nan is not None:
        values = [nan if _is_nan(v) else v for v in values]
    # Fast path: hashable
    try:
        return list(dict.fromkeys(values))
    except TypeError:
        pass   # fall through → slow path

    # Slow path: unhashables
    out = []
    for x in values:
        if not any(x is y or x == y for y in out):
            out.append(x)
    return out


def check_pool_size(n: int) -> None:
    if n > MAX_POOL_SIZE:
        raise PoolOverflowError(
            f"Cannot construct a PooledDataVec with such a large pool: {n} > {MAX_POOL_SIZE} levels"
        )


def level_index(pool: List[Any]) -> Optional[dict]:
    """
    value -> code lookup for a pool. The first slot wins for repeated
    values, matching a left-to-right scan. None when the pool holds
    unhashable values.
    """
    index = {}
    try:
        for i, p in enumerate(pool):
            index.setdefault(p, i + 1)
    except TypeError:
        return None
    return index


def find_level(index: Optional[dict], pool: List[Any], value: Any) -> int:
    """Code of value in pool, 0 if absent."""
    if _is_nan(value):
        for i, p in enumerate(pool):
            if _is_nan(p):
                return i + 1
        return 0
    if index is not None:
        try:
            return index.get(value, 0)
        except TypeError:
            pass
    for i, p in enumerate(pool):
        if p == value:
            return i + 1
    return 0


def _with_mask(values: Iterable[Any], mask) -> List[Any]:
    return _apply_mask(list(values), mask)


def encode(values: Iterable[Any], mask=None) -> Tuple[Any, List[Any]]:
    """
    Build (codes, pool) from raw values.

    Parameters
    ----------
    values : iterable
        Raw values; NA or None are missing
    mask : iterable of bool, optional
        Explicit missing mask, same length as values

    Examples
    --------
    >>> codes, pool = encode(["b", "a", "b", NA])
    >>> list(codes), pool
    ([2, 1, 2, 0], ['a', 'b'])
    """
    values = _with_mask(values, mask)
    pool = sorted_levels(distinct(values))
    check_pool_size(len(pool))

    index = level_index(pool)
    codes = new_codes(0 if v is NA else find_level(index, pool, v) for v in values)
    return codes, pool


def encode_with_pool(values: Iterable[Any], pool: Iterable[Any], mask=None) -> Tuple[Any, List[Any]]:
    """
    Build (codes, pool) against a caller-supplied pool.

    The pool is sorted and de-duplicated; it never grows. Every
    non-missing value must already be in it.

    Raises
    ------
    ValueNotInPoolError
        If a value is absent from the pool
    """
    values = _with_mask(values, mask)
    pool = sorted_levels(distinct(pool))
    check_pool_size(len(pool))

    index = level_index(pool)
    codes = new_codes()
    for v in values:
        if v is NA:
            codes.append(0)
            continue
        code = find_level(index, pool, v)
        if not code:
            raise ValueNotInPoolError(f"Vector contains elements not in provided pool: {v!r}")
        codes.append(code)
    return codes, pool


def pooled_data_vecs(v1, v2):
    """
    Encode two vectors against one shared pool.

    The pool is the sorted union of the distinct non-missing values of both
    inputs; NA maps to code 0 in either result. Each result owns its own copy
    of the pool, so later mutation of one never reaches the other.

    Parameters
    ----------
    v1, v2 : DataVec, PooledDataVec or iterable

    Returns
    -------
    (PooledDataVec, PooledDataVec)

    Examples
    --------
    >>> a, b = pooled_data_vecs([1, 2], [2, 3])
    >>> a.pool, a.codes, b.codes
    ((1, 2, 3), (1, 2), (2, 3))
    """
    from .pooled import PooledDataVec

    values1 = _with_mask(_materialize(v1), None)
    values2 = _with_mask(_materialize(v2), None)

    dtypes = [v.schema() for v in (v1, v2) if isinstance(v, AbstractDataVec)]
    if len(dtypes) == 2 and dtypes[0] == dtypes[1]:
        dtype = dtypes[0]
    else:
        dtype = infer_dtype(values1 + values2)
    values1 = _coerce_all(values1, dtype)
    values2 = _coerce_all(values2, dtype)

    pool = sorted_levels(distinct(values1 + values2))
    check_pool_size(len(pool))

    index = level_index(pool)
    codes1 = new_codes(0 if v is NA else find_level(index, pool, v) for v in values1)
    codes2 = new_codes(0 if v is NA else find_level(index, pool, v) for v in values2)

    return (
        PooledDataVec._from_parts(codes1, list(pool), dtype, getattr(v1, 'name', None)),
        PooledDataVec._from_parts(codes2, list(pool), dtype, getattr(v2, 'name', None)),
    )
