"""
py-datavec: nullable and dictionary-encoded vectors for tabular data

The foundational column containers of a data-analysis library: a sequence
of values of one element type where any position may hold NA instead.

Main classes:
    - DataVec: values plus a missing mask
    - PooledDataVec: codes into a pool of distinct values (categorical data)

Both share one interface (indexing, bulk assignment, NA strategies, lazy
iteration) and convert freely into each other.

Zero external dependencies - pure Python stdlib only.
"""

from .na import NA, NAType, isna
from .typing import DataType
from .vector import AbstractDataVec, DataVec
from .pooled import PooledDataVec
from .builder import encode, encode_with_pool, pooled_data_vecs
from .algorithms import cut, levels, table, unique
from .errors import (
	DataVecError,
	DataVecTypeError,
	DataVecValueError,
	DataVecIndexError,
	LengthMismatchError,
	OutOfRangeError,
	PoolOverflowError,
	HasMissingValueError,
	ValueNotFoundError,
	ValueNotInPoolError,
)

__version__ = "0.1.0"
__all__ = [
	"NA",
	"NAType",
	"isna",
	"DataType",
	"AbstractDataVec",
	"DataVec",
	"PooledDataVec",
	"encode",
	"encode_with_pool",
	"pooled_data_vecs",
	"cut",
	"levels",
	"table",
	"unique",
	"DataVecError",
	"DataVecTypeError",
	"DataVecValueError",
	"DataVecIndexError",
	"LengthMismatchError",
	"OutOfRangeError",
	"PoolOverflowError",
	"HasMissingValueError",
	"ValueNotFoundError",
	"ValueNotInPoolError",
]
