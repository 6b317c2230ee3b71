"""
Storage backends for DataVec and PooledDataVec.

Pure Python implementation using array.array for numeric data, missing
masks and pool codes, falling back to lists for everything else.
"""

from __future__ import annotations
from array import array
from typing import Any, Iterator
from collections.abc import Iterable

from .errors import LengthMismatchError
from .na import NA


# Pool codes are unsigned 16-bit; code 0 is reserved for NA
REF_TYPECODE = 'H'
MAX_POOL_SIZE = 65535

# Map Python types to array.array typecodes
TYPECODE_MAP = {
    int: 'q',      # signed long long
    float: 'd',    # double
}


def new_data(values: Iterable[Any], kind: type):
    """Contiguous array for numeric kinds, list for everything else."""
    typecode = TYPECODE_MAP.get(kind)
    values = list(values)
    if typecode is None:
        return values
    try:
        return array(typecode, values)
    except (OverflowError, TypeError):
        # ints beyond 64 bits, or objects posing as the kind
        return values


def new_mask(n: int, missing: bool = False) -> array:
    """Mask of n entries, all set (missing) or all clear."""
    return array('B', bytes([1 if missing else 0]) * n)


def new_codes(values: Iterable[int] = ()) -> array:
    return array(REF_TYPECODE, values)


class MaskedStorage:
    """
    Raw values plus a same-length missing mask (1 = missing, 0 = valid).

    The slot under a set mask bit holds the dtype's base value and is never
    read as meaningful. All mutators touch data and mask together.
    """

    __slots__ = ('_data', '_mask')

    def __init__(self, data, mask: array):
        if len(data) != len(mask):
            raise LengthMismatchError(
                f"Data and missingness vectors not the same length: {len(data)} != {len(mask)}"
            )
        self._data = data
        self._mask = mask

    @classmethod
    def from_values(cls, values: Iterable[Any], kind: type, base: Any) -> MaskedStorage:
        """Create from an iterable where NA marks missing entries."""
        data_list = []
        mask_list = []
        for v in values:
            if v is NA:
                mask_list.append(1)
                data_list.append(base)
            else:
                mask_list.append(0)
                data_list.append(v)
        return cls(new_data(data_list, kind), array('B', mask_list))

    @property
    def data(self):
        return self._data

    @property
    def mask(self) -> array:
        return self._mask

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, i: int) -> Any:
        if self._mask[i]:
            return NA
        return self._data[i]

    def __iter__(self) -> Iterator[Any]:
        data = self._data
        for i, m in enumerate(self._mask):
            yield NA if m else data[i]

    def is_na(self, i: int) -> bool:
        return bool(self._mask[i])

    def any_na(self) -> bool:
        return any(self._mask)

    def _as_list(self):
        if not isinstance(self._data, list):
            self._data = list(self._data)

    def set(self, i: int, value: Any) -> None:
        try:
            self._data[i] = value
        except (OverflowError, TypeError):
            self._as_list()
            self._data[i] = value
        self._mask[i] = 0

    def set_na(self, i: int, base: Any) -> None:
        try:
            self._data[i] = base
        except (OverflowError, TypeError):
            self._as_list()
            self._data[i] = base
        self._mask[i] = 1

    def append(self, value: Any, missing: bool = False) -> None:
        try:
            self._data.append(value)
        except (OverflowError, TypeError):
            self._as_list()
            self._data.append(value)
        self._mask.append(1 if missing else 0)

    def appendleft(self, value: Any, missing: bool = False) -> None:
        try:
            self._data.insert(0, value)
        except (OverflowError, TypeError):
            self._as_list()
            self._data.insert(0, value)
        self._mask.insert(0, 1 if missing else 0)

    def pop(self, i: int = -1) -> Any:
        d, m = self._data.pop(i), self._mask.pop(i)
        return NA if m else d

    def take(self, indices: Iterable[int]) -> MaskedStorage:
        """New storage holding the given positions, in order."""
        data, mask = self._data, self._mask
        indices = list(indices)
        new = [data[i] for i in indices]
        if isinstance(data, array):
            new = array(data.typecode, new)
        return MaskedStorage(new, array('B', (mask[i] for i in indices)))

    def slice(self, slc: slice) -> MaskedStorage:
        """array.array and list slices are already copies."""
        return MaskedStorage(self._data[slc], self._mask[slc])

    def copy(self) -> MaskedStorage:
        return MaskedStorage(self._data[:], self._mask[:])

    def convert(self, fn, kind: type, base: Any) -> MaskedStorage:
        """New storage with every valid value passed through fn (promotion)."""
        data, mask = self._data, self._mask
        converted = [base if mask[i] else fn(data[i]) for i in range(len(data))]
        return MaskedStorage(new_data(converted, kind), mask[:])
