"""
The missing-value marker.

NA is a singleton with no payload. It compares equal only to itself, hashes
so it can key a dict, and reports a length of 1 and an empty shape so it can
stand in for a scalar in bulk assignment.

None is accepted on input wherever NA is, since that is how plain Python
data spells "no value". The library itself only ever hands back NA.
"""

from __future__ import annotations
from typing import Any


class NAType:
	""" Type of the NA singleton """
	_instance = None

	def __new__(cls):
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __repr__(self):
		return "NA"

	__str__ = __repr__

	def __eq__(self, other):
		return other is self

	def __ne__(self, other):
		return other is not self

	def __hash__(self):
		return 0x4E41

	def __len__(self):
		return 1

	def size(self):
		return tuple()

	def __copy__(self):
		return self

	def __deepcopy__(self, memo):
		return self

	def __reduce__(self):
		return (NAType, ())


NA = NAType()


def isna(x: Any) -> bool:
	""" True for NA and None, False for everything else (including vectors) """
	return x is NA or x is None
