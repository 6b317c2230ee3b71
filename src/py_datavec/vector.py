import math
import warnings

from .errors import DataVecTypeError
from .errors import DataVecIndexError
from .errors import HasMissingValueError
from .errors import LengthMismatchError
from .na import NA
from .na import isna
from .storage import MaskedStorage
from .storage import new_data
from .storage import new_mask
from .typing import DataType
from .typing import DEFAULT_KIND
from .typing import infer_dtype
from .typing import resolve_dtype
from .typing import validate_scalar

from typing import Any
from typing import List


# ============================================================
# Small helpers
# ============================================================

def _is_sequence(value: Any) -> bool:
	""" Iterable values are spread over positions; strings are scalars """
	return hasattr(value, '__iter__') and not isinstance(value, (str, bytes, bytearray))


def _materialize(initial) -> list:
	""" Read generators once; copy everything else """
	if isinstance(initial, (str, bytes, bytearray)):
		raise DataVecTypeError(f"Cannot build a vector from a bare {type(initial).__name__}; wrap it in a list")
	return list(initial)


def _apply_mask(values: list, mask) -> list:
	""" Fold an explicit missing mask into the values as NA marks """
	if mask is None:
		return [NA if isna(v) else v for v in values]
	mask = [bool(m) for m in mask]
	if len(mask) != len(values):
		raise LengthMismatchError(
			f"Data and missingness vectors not the same length: {len(values)} != {len(mask)}"
		)
	return [NA if (m or isna(v)) else v for v, m in zip(values, mask)]


def _coerce_all(values: list, dtype: DataType) -> list:
	try:
		return [validate_scalar(v, dtype) for v in values]
	except TypeError as e:
		raise DataVecTypeError(str(e)) from None


# ============================================================
# Restartable NA-strategy iterables
# ============================================================

class EachFailNA:
	""" Iterable over a vector that raises HasMissingValueError on the first NA """
	def __init__(self, vector):
		self._vector = vector

	def __iter__(self):
		for i, x in enumerate(self._vector):
			if x is NA:
				raise HasMissingValueError(f"NA encountered at position {i}")
			yield x


class EachDropNA:
	""" Iterable over the non-missing values of a vector """
	def __init__(self, vector):
		self._vector = vector

	def __iter__(self):
		for x in self._vector:
			if x is not NA:
				yield x


class EachReplaceNA:
	""" Iterable over a vector yielding a replacement value in place of NA """
	def __init__(self, vector, replacement):
		self._vector = vector
		self._replacement = replacement

	def __iter__(self):
		replacement = self._replacement
		for x in self._vector:
			yield replacement if x is NA else x


# ============================================================
# Shared contract
# ============================================================

class AbstractDataVec():
	"""
	Behaviour shared by DataVec and PooledDataVec.

	Subclasses supply storage through a handful of hooks:
		__len__, _get(i), _set(i, value), _take(positions), _promote(dtype),
		copy(), similar(n)
	Everything else (key resolution, bulk read/write, NA strategies) is
	written once here against those hooks.
	"""
	_dtype = None
	_name = None

	def schema(self):
		"""Get the DataType schema of this vector."""
		return self._dtype

	@property
	def dtype(self):
		return self._dtype

	@property
	def name(self):
		return self._name

	def rename(self, new_name):
		"""Rename this vector (returns self for chaining)"""
		self._name = new_name
		return self

	def size(self):
		if not len(self):
			return tuple()
		return (len(self),)

	def ndims(self):
		return 1

	def __len__(self):
		raise NotImplementedError

	def _get(self, i):
		raise NotImplementedError

	def _set(self, i, value):
		raise NotImplementedError

	def _take(self, positions):
		raise NotImplementedError

	def _promote(self, dtype):
		raise NotImplementedError

	def _reserve(self, values, dtype):
		""" Raise before any write if values cannot all be stored """

	def __iter__(self):
		for i in range(len(self)):
			yield self._get(i)

	def __bool__(self):
		"""
		Standard Python truthiness: returns True if the vector is not empty.

		Emits a warning for boolean vectors, where 'if vec' is usually meant
		as 'if vec.any()'.
		"""
		is_non_empty = len(self) > 0
		if is_non_empty and self._dtype is not None and self._dtype.kind is bool:
			warnings.warn(
				f"{type(self).__name__} is being used in a boolean context (e.g., 'if vector:'). "
				"This checks for emptiness (len > 0), not element-wise truth.",
				stacklevel=2
			)
		return is_non_empty

	#-----------------------------------------------------
	# Key resolution
	#-----------------------------------------------------

	def _normalize_index(self, i: int) -> int:
		n = len(self)
		idx = i + n if i < 0 else i
		if not (0 <= idx < n):
			raise DataVecIndexError(f"Index {i} out of range for vector length {n}")
		return idx

	def _mask_positions(self, flags) -> List[int]:
		""" Positions where a boolean key is True; NA counts as False """
		flags = list(flags)
		if len(flags) != len(self):
			raise LengthMismatchError(
				f"Boolean mask length {len(flags)} must match vector length {len(self)}"
			)
		return [i for i, flag in enumerate(flags) if flag is not NA and flag is not None and flag]

	def _index_positions(self, indices) -> List[int]:
		""" Normalized integer positions; NA entries are dropped """
		return [self._normalize_index(i) for i in indices if not isna(i)]

	def _positions(self, key) -> List[int]:
		if isinstance(key, slice):
			return list(range(*key.indices(len(self))))
		if isinstance(key, range):
			return self._index_positions(key)
		if isinstance(key, AbstractDataVec):
			kind = key.schema().kind
			if kind is bool:
				return self._mask_positions(key)
			if kind is int or not key.drop_na():
				return self._index_positions(key)
			raise DataVecTypeError(f"Vector indices must be boolean or integer vectors, not vector<{kind.__name__}>")
		if isinstance(key, (list, tuple)):
			present = [e for e in key if not isna(e)]
			if present and all(isinstance(e, bool) for e in present):
				return self._mask_positions(key)
			if all(isinstance(e, int) and not isinstance(e, bool) for e in present):
				return self._index_positions(key)
		raise DataVecTypeError(
			f"Vector indices must be boolean vectors, integer vectors, slices or integers, not {type(key).__name__}"
		)

	#-----------------------------------------------------
	# Read / write
	#-----------------------------------------------------

	def __getitem__(self, key):
		""" Get item(s) from self. Behavior varies by input type:
		The following return a vector of the same class:
			# boolean vector / list of bools: logical indexing, NA entries select nothing
			# integer vector / list / range of ints: positions in order, NA entries dropped
			# slice: the elements of the slice
		Special: indexing a single integer returns the value or NA
		"""
		if isinstance(key, int):
			return self._get(self._normalize_index(key))
		return self._take(self._positions(key))

	def _prepare(self, values: list, reserve=True) -> list:
		"""
		Coerce values to this vector's dtype, widening the dtype first when a
		value needs it. Raises before anything is written.
		"""
		dtype = self._dtype
		for v in values:
			try:
				validate_scalar(v, dtype)
			except TypeError as e:
				if isna(v):
					raise DataVecTypeError(str(e)) from None
				widened = dtype.widen(v)
				if widened is None:
					raise DataVecTypeError(
						f"Cannot set {type(v).__name__} in {dtype.kind.__name__} vector. "
						f"Promotion not supported."
					) from e
				dtype = widened
		coerced = [validate_scalar(v, dtype) for v in values]
		if reserve:
			self._reserve(coerced, dtype)
		if dtype != self._dtype:
			self._promote(dtype)
		return coerced

	def __setitem__(self, key, value):
		"""
		In-place assignment for:
		- single integer positions
		- boolean masks (NA entries select nothing)
		- integer index vectors/lists (NA entries dropped)
		- slices

		A sequence value is paired element-wise with the selected positions;
		outside slices the shorter side bounds the pairing. NA or a scalar is
		broadcast to every selected position.
		"""
		if isinstance(key, int):
			idx = self._normalize_index(key)
			self._set(idx, self._prepare([value])[0])
			return

		positions = self._positions(key)

		sequence = _is_sequence(value)
		if sequence:
			value = list(value)
			if isinstance(key, slice) and len(value) != len(positions):
				raise LengthMismatchError("Slice length and value length must match.")

		# nothing selected: leave the dtype alone too
		if not positions:
			return

		if isna(value):
			self._prepare([NA])
			for idx in positions:
				self._set(idx, NA)
			return

		if sequence:
			pairs = list(zip(positions, value))
			prepared = self._prepare([v for _, v in pairs])
			for (idx, _), v in zip(pairs, prepared):
				self._set(idx, v)
			return

		v = self._prepare([value])[0]
		for idx in positions:
			self._set(idx, v)

	#-----------------------------------------------------
	# Missingness
	#-----------------------------------------------------

	def isna(self):
		"""
		Return boolean mask of missing values.

		Examples
		--------
		>>> DataVec([1, NA, 3]).isna()
		DataVec([False, True, False])
		"""
		return DataVec([x is NA for x in self], dtype=DataType(bool))

	def any_na(self) -> bool:
		for x in self:
			if x is NA:
				return True
		return False

	def fail_na(self) -> list:
		""" All values, or HasMissingValueError if any is missing """
		out = []
		for x in self:
			if x is NA:
				raise HasMissingValueError("Failing after encountering an NA")
			out.append(x)
		return out

	def drop_na(self) -> list:
		""" Non-missing values in their original order """
		return [x for x in self if x is not NA]

	def replace_na(self, replacement) -> list:
		""" All values, with replacement standing in for NA """
		return [replacement if x is NA else x for x in self]

	def each_fail_na(self):
		return EachFailNA(self)

	def each_drop_na(self):
		return EachDropNA(self)

	def each_replace_na(self, replacement):
		return EachReplaceNA(self, replacement)

	def to_list(self) -> list:
		return self.fail_na()

	#-----------------------------------------------------
	# Element-wise helpers
	#-----------------------------------------------------

	def find(self) -> List[int]:
		""" Positions of True entries in a boolean vector """
		if self._dtype.kind is not bool:
			raise DataVecTypeError(f"find() needs a bool vector, not vector<{self._dtype.kind.__name__}>")
		return [i for i, x in enumerate(self) if x is not NA and x]

	def isnan(self):
		return DataVec([NA if x is NA else math.isnan(x) for x in self], dtype=DataType(bool))

	def isfinite(self):
		return DataVec([NA if x is NA else math.isfinite(x) for x in self], dtype=DataType(bool))

	def map(self, fn):
		""" Apply fn to every element (NA included) into an object vector; NA results stay missing """
		return DataVec([fn(x) for x in self], dtype=DataType(object))

	def unique(self):
		from .algorithms import unique
		return unique(self)

	def levels(self):
		return self.unique()

	def table(self) -> dict:
		from .algorithms import table
		return table(self)


# ============================================================
# Nullable vector
# ============================================================

class DataVec(AbstractDataVec):
	"""
	Nullable vector: raw values plus a same-length missing mask.

	>>> v = DataVec([1, NA, 3])
	>>> v[1]
	NA
	>>> v.drop_na()
	[1, 3]
	"""
	_storage = None

	def __init__(self, initial=(), mask=None, dtype=None, name=None):
		"""
		Parameters
		----------
		initial : iterable
			Values; NA or None mark missing entries. A DataVec is copied and a
			PooledDataVec decoded.
		mask : iterable of bool, optional
			Explicit missing mask, same length as initial. Values under a set
			bit are ignored.
		dtype : DataType or type, optional
			Inferred from the non-missing values when omitted.
		"""
		dtype = resolve_dtype(dtype)
		if isinstance(initial, AbstractDataVec):
			if dtype is None:
				dtype = initial.schema()
			if name is None:
				name = initial.name
		values = _apply_mask(_materialize(initial), mask)
		if dtype is None:
			dtype = infer_dtype(values)
		values = _coerce_all(values, dtype)

		base = dtype.base_value() if any(v is NA for v in values) else None
		self._storage = MaskedStorage.from_values(values, dtype.kind, base)
		self._dtype = dtype
		self._name = name

	@classmethod
	def _from_storage(cls, storage, dtype, name=None):
		instance = cls.__new__(cls)
		instance._storage = storage
		instance._dtype = dtype
		instance._name = name
		return instance

	@classmethod
	def na(cls, length, dtype=None, name=None):
		""" All-missing vector; data slots hold the dtype's base value """
		dtype = resolve_dtype(dtype) or DataType(DEFAULT_KIND)
		dtype = dtype.with_nullable(True)
		base = dtype.base_value()
		storage = MaskedStorage(new_data([base] * length, dtype.kind), new_mask(length, missing=True))
		return cls._from_storage(storage, dtype, name)

	@classmethod
	def zeros(cls, length, kind=float):
		return cls([kind(0)] * length, dtype=kind)

	@classmethod
	def ones(cls, length, kind=float):
		return cls([kind(1)] * length, dtype=kind)

	@classmethod
	def falses(cls, length):
		return cls([False] * length, dtype=bool)

	@classmethod
	def trues(cls, length):
		return cls([True] * length, dtype=bool)

	@property
	def data(self) -> tuple:
		""" Raw values; slots under the mask hold the base value """
		return tuple(self._storage.data)

	@property
	def mask(self) -> tuple:
		return tuple(bool(m) for m in self._storage.mask)

	def __len__(self):
		return len(self._storage)

	def __iter__(self):
		return iter(self._storage)

	def __repr__(self):
		return f"DataVec({list(self)!r})"

	def _base(self):
		return self._dtype.base_value()

	def _get(self, i):
		return self._storage[i]

	def _set(self, i, value):
		if value is NA:
			self._storage.set_na(i, self._base())
		else:
			self._storage.set(i, value)

	def _take(self, positions):
		return DataVec._from_storage(self._storage.take(positions), self._dtype, self._name)

	def __getitem__(self, key):
		if isinstance(key, slice):
			return DataVec._from_storage(self._storage.slice(key), self._dtype, self._name)
		return super().__getitem__(key)

	def _promote(self, dtype):
		""" Convert stored values in place (int -> float, float -> complex, date -> datetime) """
		base = dtype.base_value() if self._storage.any_na() else None
		self._storage = self._storage.convert(lambda x: validate_scalar(x, dtype), dtype.kind, base)
		self._dtype = dtype

	#-----------------------------------------------------
	# Fast paths over the raw stores
	#-----------------------------------------------------

	def isna(self):
		return DataVec(self.mask, dtype=DataType(bool))

	def any_na(self) -> bool:
		return self._storage.any_na()

	def fail_na(self) -> list:
		if self._storage.any_na():
			raise HasMissingValueError("Failing after encountering an NA")
		return list(self._storage.data)

	def drop_na(self) -> list:
		return [d for d, m in zip(self._storage.data, self._storage.mask) if not m]

	def replace_na(self, replacement) -> list:
		return [replacement if m else d for d, m in zip(self._storage.data, self._storage.mask)]

	#-----------------------------------------------------
	# Container operations
	#-----------------------------------------------------

	def append(self, value):
		""" Add value (or NA) at the end """
		v = self._prepare([value])[0]
		if v is NA:
			self._storage.append(self._base(), missing=True)
		else:
			self._storage.append(v)
		return v

	def appendleft(self, value):
		""" Add value (or NA) at the front """
		v = self._prepare([value])[0]
		if v is NA:
			self._storage.appendleft(self._base(), missing=True)
		else:
			self._storage.appendleft(v)
		return v

	def pop(self):
		""" Remove and return the last element """
		if not len(self):
			raise DataVecIndexError("pop from empty DataVec")
		return self._storage.pop()

	def popleft(self):
		""" Remove and return the first element """
		if not len(self):
			raise DataVecIndexError("pop from empty DataVec")
		return self._storage.pop(0)

	def copy(self, name=...):
		# Use sentinel value (...) to distinguish between name=None (clear) and not passing name (preserve)
		use_name = self._name if name is ... else name
		return DataVec._from_storage(self._storage.copy(), self._dtype, use_name)

	def values(self):
		return self.copy()

	def similar(self, length=None):
		""" All-missing vector of the same dtype """
		n = len(self) if length is None else length
		return DataVec.na(n, dtype=self._dtype, name=self._name)

	def to_pooled(self):
		from .pooled import PooledDataVec
		return PooledDataVec(self)
