"""DataVec: construction, indexing, assignment and NA strategies"""
from datetime import date, datetime

import pytest
from py_datavec import NA, DataType, DataVec, PooledDataVec
from py_datavec.errors import (
    DataVecIndexError,
    DataVecTypeError,
    HasMissingValueError,
    LengthMismatchError,
)


def assert_synced(v):
    assert len(v.data) == len(v.mask) == len(v)


class TestCreation:
    """Test basic vector creation"""

    @pytest.mark.parametrize("initial,expected_len,expected_kind", [
        ([1, 2, 3], 3, int),
        ([1.5, 2.5, 3.5], 3, float),
        (['a', 'b', 'c'], 3, str),
        ([1, NA, 3], 3, int),
        ([], 0, float),
    ])
    def test_creation_from_list(self, initial, expected_len, expected_kind):
        v = DataVec(initial)
        assert len(v) == expected_len
        assert v.schema().kind is expected_kind
        assert list(v) == initial
        assert_synced(v)

    def test_none_is_missing(self):
        v = DataVec([1, None, 3])
        assert v[1] is NA
        assert v.mask == (False, True, False)

    def test_explicit_mask(self):
        v = DataVec([1, 2, 3], mask=[False, True, False])
        assert list(v) == [1, NA, 3]

    def test_mask_length_mismatch(self):
        with pytest.raises(LengthMismatchError):
            DataVec([1, 2, 3], mask=[False, True])

    def test_missing_slots_hold_base_value(self):
        v = DataVec([1, NA, 3])
        assert v.data == (1, 0, 3)

    def test_generator_input(self):
        v = DataVec(x * 2 for x in range(3))
        assert list(v) == [0, 2, 4]

    def test_bare_string_rejected(self):
        with pytest.raises(DataVecTypeError):
            DataVec("abc")

    def test_int_promoted_to_float(self):
        v = DataVec([1, 2, 3.5])
        assert v.schema().kind is float
        assert list(v) == [1.0, 2.0, 3.5]

    def test_with_dtype(self):
        v = DataVec([1, 2], dtype=float)
        assert v.schema().kind is float
        assert list(v) == [1.0, 2.0]

    def test_incompatible_dtype(self):
        with pytest.raises(DataVecTypeError):
            DataVec(["a"], dtype=int)

    def test_name(self):
        v = DataVec([1], name="x")
        assert v.name == "x"
        assert v.rename("y") is v
        assert v.name == "y"


class TestConstructors:
    """Alternative constructors"""

    def test_all_missing(self):
        v = DataVec.na(3, dtype=int)
        assert list(v) == [NA, NA, NA]
        assert v.data == (0, 0, 0)
        assert_synced(v)

    def test_all_missing_default_kind(self):
        assert DataVec.na(2).schema().kind is float

    def test_all_missing_explicit_default(self):
        v = DataVec.na(2, dtype=DataType(str, default="?"))
        assert v.data == ("?", "?")

    def test_zeros_ones(self):
        assert list(DataVec.zeros(2)) == [0.0, 0.0]
        assert list(DataVec.ones(2, int)) == [1, 1]

    def test_falses_trues(self):
        assert list(DataVec.falses(2)) == [False, False]
        assert list(DataVec.trues(2)) == [True, True]

    def test_from_pooled_decodes(self):
        p = PooledDataVec(["b", NA, "a"])
        v = DataVec(p)
        assert isinstance(v, DataVec)
        assert list(v) == ["b", NA, "a"]


class TestIndexing:
    """Single and bulk reads"""

    def test_single(self):
        v = DataVec([10, NA, 30])
        assert v[0] == 10
        assert v[1] is NA
        assert v[-1] == 30

    @pytest.mark.parametrize("idx", [3, -4, 100])
    def test_out_of_bounds(self, idx):
        with pytest.raises(DataVecIndexError):
            DataVec([1, 2, 3])[idx]

    def test_out_of_bounds_is_index_error(self):
        with pytest.raises(IndexError):
            DataVec([])[0]

    def test_boolean_list(self):
        v = DataVec([1, 2, 3])
        assert list(v[[True, False, True]]) == [1, 3]

    def test_boolean_vector_with_missing(self):
        v = DataVec([1, NA, 3, 4])
        key = DataVec([True, True, NA, False])
        out = v[key]
        assert isinstance(out, DataVec)
        assert list(out) == [1, NA]
        assert_synced(out)

    def test_boolean_length_mismatch(self):
        with pytest.raises(LengthMismatchError):
            DataVec([1, 2, 3])[[True, False]]

    def test_integer_list_keeps_order(self):
        v = DataVec(['a', 'b', 'c'])
        assert list(v[[2, 0, 2]]) == ['c', 'a', 'c']

    def test_integer_vector_drops_missing(self):
        v = DataVec(['a', 'b', 'c'])
        assert list(v[DataVec([2, NA, 0])]) == ['c', 'a']

    def test_integer_list_with_none(self):
        v = DataVec(['a', 'b', 'c'])
        assert list(v[[1, None]]) == ['b']

    def test_range_and_slice(self):
        v = DataVec([0, 1, NA, 3])
        assert list(v[range(1, 3)]) == [1, NA]
        assert list(v[1:]) == [1, NA, 3]
        assert list(v[::-1]) == [3, NA, 1, 0]

    def test_bulk_get_is_a_copy(self):
        v = DataVec([1, 2, 3])
        sub = v[[0, 1]]
        v[0] = 100
        assert sub[0] == 1

    def test_invalid_key(self):
        with pytest.raises(DataVecTypeError):
            DataVec([1, 2])["a"]

    def test_string_vector_is_not_an_index(self):
        with pytest.raises(DataVecTypeError):
            DataVec([1, 2])[DataVec(["a", "b"])]


class TestAssignment:
    """Single and bulk writes"""

    def test_set_missing_and_back(self):
        v = DataVec([1, 2, 3])
        v[1] = NA
        assert v[1] is NA
        v[1] = 5
        assert v[1] == 5
        assert_synced(v)

    def test_set_none(self):
        v = DataVec([1, 2])
        v[0] = None
        assert v[0] is NA

    def test_set_out_of_bounds(self):
        v = DataVec([1, 2])
        with pytest.raises(DataVecIndexError):
            v[2] = 1

    def test_set_promotes(self):
        v = DataVec([1, 2, NA])
        v[0] = 2.5
        assert v.schema().kind is float
        assert list(v) == [2.5, 2.0, NA]
        assert_synced(v)

    def test_set_incompatible_leaves_vector_untouched(self):
        v = DataVec([1, 2])
        with pytest.raises(DataVecTypeError):
            v[0] = "a"
        assert list(v) == [1, 2]
        assert v.schema().kind is int

    def test_non_nullable_rejects_missing(self):
        v = DataVec([1, 2], dtype=DataType(int, nullable=False))
        with pytest.raises(DataVecTypeError):
            v[0] = NA
        assert list(v) == [1, 2]

    def test_bulk_values(self):
        v = DataVec([0, 0, 0, 0])
        v[[1, 3]] = [10, 30]
        assert list(v) == [0, 10, 0, 30]

    def test_bulk_values_lenient_length(self):
        v = DataVec([0, 0, 0])
        v[[0, 1, 2]] = [7, 8]
        assert list(v) == [7, 8, 0]
        v[[0]] = [1, 2, 3]
        assert list(v) == [1, 8, 0]

    def test_bulk_values_with_missing(self):
        v = DataVec([1, 2, 3])
        v[[0, 2]] = [NA, 9]
        assert list(v) == [NA, 2, 9]

    def test_bulk_scalar_broadcast(self):
        v = DataVec([1.0, 2.0, 3.0])
        v[[True, False, True]] = 0
        assert list(v) == [0.0, 2.0, 0.0]
        assert isinstance(v[0], float)

    def test_bulk_missing_broadcast(self):
        v = DataVec([1, 2, 3])
        v[DataVec([0, 2])] = NA
        assert list(v) == [NA, 2, NA]
        assert_synced(v)

    def test_bulk_string_is_scalar(self):
        v = DataVec(['a', 'b'])
        v[[0, 1]] = "zz"
        assert list(v) == ["zz", "zz"]

    def test_bulk_incompatible_is_all_or_nothing(self):
        v = DataVec([1, 2, 3])
        with pytest.raises(DataVecTypeError):
            v[[0, 1]] = [5, "x"]
        assert list(v) == [1, 2, 3]

    def test_slice_assignment(self):
        v = DataVec([1, 2, 3, 4])
        v[1:3] = [20, 30]
        assert list(v) == [1, 20, 30, 4]
        v[:2] = NA
        assert list(v) == [NA, NA, 30, 4]

    def test_slice_length_mismatch(self):
        v = DataVec([1, 2, 3])
        with pytest.raises(LengthMismatchError):
            v[0:2] = [1, 2, 3]

    def test_empty_selection_leaves_dtype(self):
        v = DataVec([1, 2])
        v[[]] = 2.5
        v[[False, False]] = "x"
        assert v.schema().kind is int
        assert list(v) == [1, 2]

    def test_empty_slice_still_checks_length(self):
        with pytest.raises(LengthMismatchError):
            DataVec([1, 2])[2:] = [1]

    def test_self_assignment(self):
        v = DataVec([1, 2, 3])
        v[[2, 1, 0]] = v
        assert list(v) == [3, 2, 1]


class TestMissingness:
    """isna, any_na and the three strategies"""

    def test_isna(self):
        v = DataVec([1, NA, 3])
        m = v.isna()
        assert list(m) == [False, True, False]
        assert m.schema().kind is bool

    def test_isna_is_a_copy(self):
        v = DataVec([1, NA])
        m = v.isna()
        v[1] = 2
        assert list(m) == [False, True]

    def test_any_na(self):
        assert DataVec([1, NA]).any_na()
        assert not DataVec([1, 2]).any_na()
        assert not DataVec([]).any_na()

    def test_scenario_strategies(self):
        v = DataVec([1, NA, 3])
        assert v.drop_na() == [1, 3]
        assert v.replace_na(0) == [1, 0, 3]
        with pytest.raises(HasMissingValueError):
            v.fail_na()

    def test_fail_na_without_missing(self):
        assert DataVec([1, 2]).fail_na() == [1, 2]
        assert DataVec([1, 2]).to_list() == [1, 2]

    def test_has_missing_is_value_error(self):
        with pytest.raises(ValueError):
            DataVec([NA]).fail_na()


class TestLazySequences:
    """each_* iterables restart on every pass"""

    def test_each_drop_na(self):
        it = DataVec([1, NA, 3]).each_drop_na()
        assert list(it) == [1, 3]
        assert list(it) == [1, 3]

    def test_each_replace_na(self):
        it = DataVec([NA, 2]).each_replace_na(-1)
        assert list(it) == [-1, 2]
        assert list(it) == [-1, 2]

    def test_each_fail_na_raises_lazily(self):
        seen = []
        with pytest.raises(HasMissingValueError):
            for x in DataVec([1, 2, NA, 4]).each_fail_na():
                seen.append(x)
        assert seen == [1, 2]

    def test_each_fail_na_clean(self):
        assert list(DataVec([1, 2]).each_fail_na()) == [1, 2]

    def test_independent_passes(self):
        it = DataVec([1, 2, 3]).each_drop_na()
        a, b = iter(it), iter(it)
        assert next(a) == 1
        assert next(a) == 2
        assert next(b) == 1


class TestContainerOps:
    """Append/remove at both ends"""

    def test_append_and_pop(self):
        v = DataVec([1, 2])
        v.append(3)
        v.append(NA)
        assert list(v) == [1, 2, 3, NA]
        assert v.data[-1] == 0
        assert_synced(v)
        assert v.pop() is NA
        assert v.pop() == 3
        assert_synced(v)

    def test_appendleft_and_popleft(self):
        v = DataVec(['b'])
        v.appendleft('a')
        v.appendleft(None)
        assert list(v) == [NA, 'a', 'b']
        assert v.popleft() is NA
        assert v.popleft() == 'a'
        assert list(v) == ['b']
        assert_synced(v)

    def test_append_promotes(self):
        v = DataVec([1])
        v.append(1.5)
        assert list(v) == [1.0, 1.5]

    def test_pop_empty(self):
        with pytest.raises(DataVecIndexError):
            DataVec([]).pop()
        with pytest.raises(DataVecIndexError):
            DataVec([]).popleft()


class TestCopy:
    """Copies own their storage"""

    def test_copy_independent(self):
        v1 = DataVec([1, NA, 3], name="a")
        v2 = v1.copy()
        v2[0] = 100
        v2[1] = 2
        assert list(v1) == [1, NA, 3]
        assert v2.name == "a"

    def test_copy_name_override(self):
        assert DataVec([1], name="a").copy(name=None).name is None

    def test_values_is_copy(self):
        v = DataVec([1])
        assert v.values() is not v
        assert list(v.values()) == [1]

    def test_similar(self):
        v = DataVec([1, 2, 3], dtype=DataType(int, nullable=False))
        s = v.similar()
        assert list(s) == [NA, NA, NA]
        assert s.schema().kind is int
        assert len(v.similar(5)) == 5


class TestElementwise:
    """find, isnan, isfinite, map"""

    def test_find(self):
        v = DataVec([True, NA, False, True])
        assert v.find() == [0, 3]

    def test_find_requires_bool(self):
        with pytest.raises(DataVecTypeError):
            DataVec([1, 2]).find()

    def test_isnan_isfinite(self):
        v = DataVec([1.0, float("nan"), NA, float("inf")])
        assert list(v.isnan()) == [False, True, NA, False]
        assert list(v.isfinite()) == [True, False, NA, False]

    def test_map(self):
        v = DataVec([1, NA, 3])
        out = v.map(lambda x: NA if x is NA else x * 10)
        assert list(out) == [10, NA, 30]
        assert out.dtype.kind is object
        out[0] = "s"
        assert out[0] == "s"

    def test_map_mixed_results_stay_quiet(self, recwarn):
        out = DataVec([1, 2]).map(lambda x: x if x == 1 else "two")
        assert list(out) == [1, "two"]
        assert out.dtype.kind is object
        assert len(recwarn) == 0


class TestShape:
    """size/ndims and truthiness"""

    def test_size(self):
        assert DataVec([1, 2]).size() == (2,)
        assert DataVec([]).size() == ()
        assert DataVec([1]).ndims() == 1

    def test_empty_is_falsy(self):
        assert not DataVec([])

    def test_bool_vector_truthiness_warns(self):
        with pytest.warns(UserWarning, match="boolean context"):
            assert DataVec([False])

    def test_repr(self):
        assert repr(DataVec([1, NA])) == "DataVec([1, NA])"

    def test_temporal(self):
        v = DataVec([date(2020, 1, 1), NA])
        v[1] = datetime(2020, 1, 2, 12)
        assert v.schema().kind is datetime
        assert v[0] == datetime(2020, 1, 1)
