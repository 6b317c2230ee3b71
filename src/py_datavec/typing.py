"""
DataType system for DataVec / PooledDataVec.

Pure metadata design:
  - DataType describes element semantics (type + nullable flag + base value)
  - Missing masks and codes live on the vectors, not in DataType
  - Promotion is functional (immutable DataType instances)
  - The base value is an explicit capability of the DataType, so filling
    the slot under a missing mask never consults a global registry
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Optional, Type
import warnings

from .errors import DataVecTypeError
from .na import NA, isna


# Element kind used when nothing can be inferred (empty or all-NA input)
DEFAULT_KIND = float


class _Unset:
    def __repr__(self):
        return "<unset>"


_UNSET = _Unset()


@dataclass(frozen=True)
class DataType:
    """
    Describes the element type of a DataVec or PooledDataVec.

    Attributes
    ----------
    kind : Type
        Python type (int, float, str, date, etc.)
    nullable : bool
        Whether the vector may hold NA
    default : Any
        Explicit base value used to fill slots under the missing mask.
        When unset, ``base_value()`` derives one from ``kind``.

    Examples
    --------
    >>> DataType(int)
    <int nullable>
    >>> DataType(int, nullable=False)
    <int>
    >>> DataType(int).base_value()
    0
    >>> DataType(str, default="?").base_value()
    '?'
    """

    kind: Type[Any]
    nullable: bool = True
    default: Any = field(default=_UNSET, compare=False)

    def __repr__(self):
        if self.nullable:
            return f"<{self.kind.__name__} nullable>"
        return f"<{self.kind.__name__}>"

    @property
    def is_numeric(self) -> bool:
        """True if kind is bool, int, float, or complex."""
        try:
            return issubclass(self.kind, (int, float, complex, bool))
        except TypeError:
            return False

    @property
    def is_temporal(self) -> bool:
        """True if kind is date or datetime."""
        try:
            return issubclass(self.kind, (date, datetime))
        except TypeError:
            return False

    def with_nullable(self, nullable: bool) -> "DataType":
        return DataType(self.kind, nullable, self.default)

    def with_default(self, default: Any) -> "DataType":
        return DataType(self.kind, self.nullable, default)

    def base_value(self) -> Any:
        """
        Placeholder stored in a data slot whose mask bit is set.

        Raises
        ------
        DataVecTypeError
            If no default was supplied and none can be derived from kind
        """
        if self.default is not _UNSET:
            return self.default
        kind = self.kind
        if kind is object:
            return None
        # datetime before date (datetime is a subclass of date)
        if issubclass(kind, datetime):
            return datetime.min
        if issubclass(kind, date):
            return date.min
        try:
            return kind()
        except Exception:
            raise DataVecTypeError(
                f"No base value for {kind.__name__}; "
                f"pass DataType({kind.__name__}, default=...)"
            )

    def widen(self, value: Any) -> Optional["DataType"]:
        """
        DataType able to hold both the current kind and value, following the
        numeric (bool -> int -> float -> complex) and temporal (date -> datetime)
        ladders. None if value sits on neither ladder.
        """
        vtype = type(value)
        if vtype is self.kind:
            return self

        if self.is_numeric and isinstance(value, (int, float, complex, bool)):
            if self.kind is complex or vtype is complex:
                new_kind = complex
            elif self.kind is float or vtype is float:
                new_kind = float
            elif self.kind is int or vtype is int:
                new_kind = int
            else:
                new_kind = bool
            return self if new_kind is self.kind else DataType(new_kind, self.nullable)

        if self.is_temporal and isinstance(value, (date, datetime)):
            if self.kind is datetime or vtype is datetime:
                new_kind = datetime
            else:
                new_kind = date
            return self if new_kind is self.kind else DataType(new_kind, self.nullable)

        return None

    def promote_with(self, value: Any) -> "DataType":
        """
        Promote this DataType to accommodate a new Python value.

        Never mutates; always returns new DataType. Values that fit no ladder
        degrade the kind to object, with a warning.
        """
        # NA just lifts nullability
        if isna(value):
            if self.nullable:
                return self
            return DataType(self.kind, nullable=True)

        if self.kind is object:
            return self

        widened = self.widen(value)
        if widened is not None:
            return widened

        warnings.warn(
            f"Degrading vector<{self.kind.__name__}> to vector<object> "
            f"due to incompatible value of type {type(value).__name__}",
            stacklevel=3,
        )
        return DataType(object, self.nullable)


def infer_kind(value: Any) -> Optional[Type]:
    """
    Infer Python type for a single scalar.

    Returns None for missing values.
    """
    if isna(value):
        return None

    # Check bool BEFORE int (bool is subclass of int)
    if isinstance(value, bool):
        return bool
    if isinstance(value, int):
        return int
    if isinstance(value, float):
        return float
    if isinstance(value, complex):
        return complex
    if isinstance(value, str):
        return str
    if isinstance(value, bytes):
        return bytes

    # Check datetime BEFORE date (datetime is subclass of date)
    if isinstance(value, datetime):
        return datetime
    if isinstance(value, date):
        return date

    if isinstance(value, tuple):
        return tuple

    return object


def infer_dtype(values: Iterable[Any]) -> DataType:
    """
    Infer a DataType from an iterable of Python scalars, skipping NA.

    Examples
    --------
    >>> infer_dtype([1, 2, 3])
    <int nullable>
    >>> infer_dtype([1, 2.5, NA])
    <float nullable>
    >>> infer_dtype([])
    <float nullable>
    """
    dtype: Optional[DataType] = None

    for v in values:
        if isna(v):
            continue
        if dtype is None:
            dtype = DataType(infer_kind(v))
        else:
            dtype = dtype.promote_with(v)

    if dtype is None:
        return DataType(DEFAULT_KIND)

    return dtype


def validate_scalar(value: Any, dtype: DataType) -> Any:
    """
    Validate (and possibly coerce) a scalar before writing into a vector.

    Returns NA for missing input.

    Raises
    ------
    TypeError
        If value is incompatible with dtype
    """
    if isna(value):
        if not dtype.nullable:
            raise TypeError(
                f"Cannot store NA in non-nullable {dtype.kind.__name__} vector"
            )
        return NA

    vtype = type(value)
    kind = dtype.kind

    # Exact match
    if vtype is kind or kind is object:
        return value

    # Numeric coercions
    if kind is float and vtype in (int, bool):
        return float(value)
    if kind is int and vtype is bool:
        return int(value)
    if kind is complex and vtype in (int, float, bool):
        return complex(value)

    # Temporal promotion
    if kind is datetime and vtype is date:
        return datetime.combine(value, datetime.min.time())

    # User-defined kinds accept their subclasses
    if kind not in (bool, int, float, complex, str, bytes, date, datetime) and isinstance(value, kind):
        return value

    raise TypeError(
        f"Incompatible value {value!r} for vector<{kind.__name__}>"
    )


def resolve_dtype(dtype) -> Optional[DataType]:
    """ Accept a DataType, a Python type or None """
    if dtype is None or isinstance(dtype, DataType):
        return dtype
    if isinstance(dtype, type):
        return DataType(dtype)
    raise DataVecTypeError(f"dtype must be a DataType instance or Python type, not {type(dtype).__name__}")
