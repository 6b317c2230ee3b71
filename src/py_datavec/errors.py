class DataVecError(Exception):
    """Base exception for py-datavec library."""
    pass


class DataVecTypeError(DataVecError, TypeError):
    """Raised for invalid types in API calls."""
    pass


class DataVecValueError(DataVecError, ValueError):
    """Raised for invalid argument values."""
    pass


class DataVecIndexError(DataVecError, IndexError):
    """Raised for positions outside the vector."""
    pass


class LengthMismatchError(DataVecValueError):
    """Raised when two sequences that must line up have different lengths."""
    pass


class OutOfRangeError(DataVecValueError):
    """Raised when a code points outside its pool."""
    pass


class PoolOverflowError(DataVecError, OverflowError):
    """Raised when a pool would outgrow the code type."""
    pass


class HasMissingValueError(DataVecValueError):
    """Raised when NA is found where no missing values are allowed."""
    pass


class ValueNotFoundError(DataVecError, KeyError):
    """Raised when a value is not present in a pool."""
    pass


class ValueNotInPoolError(ValueNotFoundError):
    """Raised when input contains a value absent from a caller-supplied pool."""
    pass
