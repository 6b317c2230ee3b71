from .builder import argsort_levels
from .builder import check_pool_size
from .builder import distinct
from .builder import encode
from .builder import encode_with_pool
from .builder import find_level
from .builder import level_index
from .errors import DataVecTypeError
from .errors import OutOfRangeError
from .errors import PoolOverflowError
from .errors import ValueNotFoundError
from .na import NA
from .na import isna
from .storage import MAX_POOL_SIZE
from .storage import new_codes
from .typing import DataType
from .typing import DEFAULT_KIND
from .typing import infer_dtype
from .typing import resolve_dtype
from .typing import validate_scalar
from .vector import AbstractDataVec
from .vector import DataVec
from .vector import _apply_mask
from .vector import _coerce_all
from .vector import _materialize

from typing import Any
from typing import Dict
from typing import List


class PooledDataVec(AbstractDataVec):
	"""
	Dictionary-encoded nullable vector.

	Holds a pool of distinct values and one code per element: 0 is NA,
	otherwise the element is pool[code - 1]. Writing a value not yet pooled
	appends it to the pool; nothing is ever removed from the pool, so entries
	orphaned by assignment or replace() stay behind unreferenced.

	>>> v = PooledDataVec(["b", "a", "b", NA])
	>>> v.pool, v.codes
	(('a', 'b'), (2, 1, 2, 0))
	"""
	_codes = None
	_pool = None
	# value -> code; None means rebuild on next lookup, False means pool is unhashable
	_lookup = None

	def __init__(self, initial=(), mask=None, pool=None, dtype=None, name=None):
		"""
		Parameters
		----------
		initial : iterable
			Values; NA or None mark missing entries. A DataVec is encoded and a
			PooledDataVec copied.
		mask : iterable of bool, optional
			Explicit missing mask, same length as initial
		pool : iterable, optional
			Allowed values. Every non-missing value must be in it.
		dtype : DataType or type, optional
			Inferred from the values (or the pool) when omitted
		"""
		dtype = resolve_dtype(dtype)
		if isinstance(initial, PooledDataVec) and mask is None and pool is None:
			self._codes = initial._codes[:]
			self._pool = list(initial._pool)
			self._dtype = dtype or initial.schema()
			self._name = initial.name if name is None else name
			if self._dtype != initial.schema():
				self._promote_pool(self._dtype)
			return

		if isinstance(initial, AbstractDataVec):
			if dtype is None:
				dtype = initial.schema()
			if name is None:
				name = initial.name
		values = _apply_mask(_materialize(initial), mask)
		if pool is not None:
			pool = [p for p in _materialize(pool) if not isna(p)]
		if dtype is None:
			dtype = infer_dtype(values if pool is None else pool + values)
		values = _coerce_all(values, dtype)

		if pool is None:
			codes, pool = encode(values)
		else:
			codes, pool = encode_with_pool(values, _coerce_all(pool, dtype))
		self._codes = codes
		self._pool = pool
		self._dtype = dtype
		self._name = name

	@classmethod
	def _from_parts(cls, codes, pool, dtype, name=None):
		instance = cls.__new__(cls)
		instance._codes = codes
		instance._pool = pool
		instance._dtype = dtype
		instance._name = name
		return instance

	@classmethod
	def from_codes(cls, codes, pool, dtype=None, name=None):
		"""
		Build from an explicit (codes, pool) pair, taken as given: the pool is
		neither sorted nor de-duplicated.

		Raises
		------
		PoolOverflowError
			If the pool has more than MAX_POOL_SIZE entries
		OutOfRangeError
			If a code is outside [0, len(pool)]
		"""
		pool = list(pool)
		check_pool_size(len(pool))
		codes = list(codes)
		p = len(pool)
		for i, c in enumerate(codes):
			if not isinstance(c, int) or not (0 <= c <= p):
				raise OutOfRangeError(
					f"Reference vector points beyond the end of the pool: code {c!r} at position {i}, pool length {p}"
				)
		dtype = resolve_dtype(dtype) or infer_dtype(pool)
		pool = _coerce_all(pool, dtype)
		return cls._from_parts(new_codes(codes), pool, dtype, name)

	@classmethod
	def na(cls, length, dtype=None, name=None):
		""" All-missing vector with an empty pool """
		dtype = resolve_dtype(dtype) or DataType(DEFAULT_KIND)
		return cls._from_parts(new_codes([0] * length), [], dtype.with_nullable(True), name)

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
	def codes(self) -> tuple:
		return tuple(self._codes)

	@property
	def pool(self) -> tuple:
		return tuple(self._pool)

	def get_indices(self) -> tuple:
		return self.codes

	def index_to_level(self) -> Dict[int, Any]:
		return {i + 1: p for i, p in enumerate(self._pool)}

	def level_to_index(self) -> Dict[Any, int]:
		return {p: i + 1 for i, p in enumerate(self._pool)}

	def __len__(self):
		return len(self._codes)

	def __repr__(self):
		return f"PooledDataVec({list(self)!r}, levels={list(self._pool)!r})"

	#-----------------------------------------------------
	# Storage hooks
	#-----------------------------------------------------

	def _get(self, i):
		code = self._codes[i]
		if code == 0:
			return NA
		return self._pool[code - 1]

	def _level_index(self):
		if self._lookup is None:
			index = level_index(self._pool)
			self._lookup = False if index is None else index
		return self._lookup if self._lookup is not False else None

	def _find(self, value) -> int:
		""" Code of value in the pool, 0 if absent """
		return find_level(self._level_index(), self._pool, value)

	def _add_level(self, value) -> int:
		""" Append value to the pool and return its code """
		if len(self._pool) >= MAX_POOL_SIZE:
			raise PoolOverflowError(f"Pool is full ({MAX_POOL_SIZE} levels); cannot add {value!r}")
		self._pool.append(value)
		code = len(self._pool)
		if self._lookup:
			try:
				self._lookup.setdefault(value, code)
			except TypeError:
				self._lookup = False
		else:
			self._lookup = None
		return code

	def _set(self, i, value):
		if value is NA:
			self._codes[i] = 0
			return
		self._codes[i] = self._find(value) or self._add_level(value)

	def _take(self, positions):
		codes = self._codes
		return PooledDataVec._from_parts(
			new_codes(codes[i] for i in positions), list(self._pool), self._dtype, self._name
		)

	def _promote_pool(self, dtype):
		try:
			self._pool = [validate_scalar(p, dtype) for p in self._pool]
		except TypeError as e:
			raise DataVecTypeError(str(e)) from None
		self._dtype = dtype
		self._lookup = None

	def _promote(self, dtype):
		self._promote_pool(dtype)

	def _reserve(self, values, dtype):
		""" PoolOverflowError up front when the new distinct values would not fit """
		pool = self._pool
		if dtype != self._dtype:
			pool = [validate_scalar(p, dtype) for p in pool]
			index = level_index(pool)
		else:
			index = self._level_index()
		new = [v for v in distinct(values) if not find_level(index, pool, v)]
		if len(pool) + len(new) > MAX_POOL_SIZE:
			raise PoolOverflowError(
				f"Pool is full ({MAX_POOL_SIZE} levels); cannot add {len(new)} new values to {len(pool)}"
			)

	#-----------------------------------------------------
	# Missingness
	#-----------------------------------------------------

	def isna(self):
		return DataVec([c == 0 for c in self._codes], dtype=DataType(bool))

	def any_na(self) -> bool:
		return 0 in self._codes

	#-----------------------------------------------------
	# Conversions
	#-----------------------------------------------------

	def decode(self):
		""" Materialize as a DataVec of the same dtype """
		return DataVec(list(self), dtype=self._dtype, name=self._name)

	def values(self):
		return self.decode()

	def unique(self):
		"""
		Every pool entry once, plus a trailing NA when any element is missing.
		"""
		levels = list(self._pool)
		if self.any_na():
			levels.append(NA)
		return DataVec(levels, dtype=self._dtype.with_nullable(True), name=self._name)

	def copy(self, name=...):
		use_name = self._name if name is ... else name
		return PooledDataVec._from_parts(self._codes[:], list(self._pool), self._dtype, use_name)

	def similar(self, length=None):
		""" All-missing vector sharing a copy of this pool """
		n = len(self) if length is None else length
		return PooledDataVec._from_parts(
			new_codes([0] * n), list(self._pool), self._dtype.with_nullable(True), self._name
		)

	#-----------------------------------------------------
	# Replacement
	#-----------------------------------------------------

	def replace(self, fromval, toval):
		"""
		Replace every occurrence of fromval with toval, in place.

		- NA -> NA: nothing happens
		- value -> NA: elements holding value become missing; the pool entry stays
		- NA -> value: missing elements take value, pooled if it is new
		- value -> value: if toval is already pooled the two levels merge,
		  otherwise the pool entry is renamed in place

		Raises
		------
		ValueNotFoundError
			If fromval is a value that is not in the pool
		"""
		from_na, to_na = isna(fromval), isna(toval)
		if from_na and to_na:
			return NA

		codes = self._codes
		if not from_na:
			fromidx = self._find(fromval)
			if not fromidx:
				raise ValueNotFoundError(f"Can't replace a value not in the pool: {fromval!r}")

		if to_na:
			self._prepare([NA])
			for i, c in enumerate(codes):
				if c == fromidx:
					codes[i] = 0
			return NA

		# merging or renaming never grows the pool
		toval = self._prepare([toval], reserve=from_na)[0]
		toidx = self._find(toval)

		if from_na:
			if not toidx:
				toidx = self._add_level(toval)
			for i, c in enumerate(codes):
				if c == 0:
					codes[i] = toidx
			return toval

		if toidx:
			if toidx != fromidx:
				for i, c in enumerate(codes):
					if c == fromidx:
						codes[i] = toidx
		else:
			self._pool[fromidx - 1] = toval
			self._lookup = None
		return toval

	#-----------------------------------------------------
	# Sorting
	#-----------------------------------------------------

	def order(self, na_last=True) -> List[int]:
		"""
		Stable sorting permutation.

		Elements are bucketed by their code's rank among the pool values, so
		the result is a total order over the decoded values even after the
		pool has grown out of order. NA forms its own group at the end (or
		the start with na_last=False).
		"""
		pool = self._pool
		rank = [0] * (len(pool) + 1)
		for r, idx in enumerate(argsort_levels(pool)):
			rank[idx + 1] = r + 1

		buckets = [[] for _ in range(len(pool) + 1)]
		for i, c in enumerate(self._codes):
			buckets[rank[c]].append(i)

		out = []
		if not na_last:
			out.extend(buckets[0])
		for bucket in buckets[1:]:
			out.extend(bucket)
		if na_last:
			out.extend(buckets[0])
		return out

	def sort(self, na_last=True):
		""" New PooledDataVec in sorted order, same pool """
		return self._take(self.order(na_last=na_last))
