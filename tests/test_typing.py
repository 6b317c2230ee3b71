"""DataType inference, coercion, promotion and base values"""
from datetime import date, datetime
from decimal import Decimal

import pytest
from py_datavec import NA, DataType
from py_datavec.errors import DataVecTypeError
from py_datavec.typing import DEFAULT_KIND, infer_dtype, infer_kind, validate_scalar


class TestInference:
    """Inference skips missing values"""

    @pytest.mark.parametrize("values,expected", [
        ([1, 2, 3], int),
        ([1, 2.5], float),
        ([True, False], bool),
        ([True, 1], int),
        (["a", NA, "b"], str),
        ([1, None, 3], int),
        ([date(2020, 1, 1), datetime(2020, 1, 2)], datetime),
        ([], DEFAULT_KIND),
        ([NA, None], DEFAULT_KIND),
    ])
    def test_infer_dtype(self, values, expected):
        assert infer_dtype(values).kind is expected

    def test_inferred_dtype_is_nullable(self):
        assert infer_dtype([1, 2]).nullable

    def test_mixed_degrades_to_object_with_warning(self):
        with pytest.warns(UserWarning, match="Degrading"):
            dtype = infer_dtype([1, "a"])
        assert dtype.kind is object

    def test_infer_kind_missing(self):
        assert infer_kind(NA) is None
        assert infer_kind(None) is None


class TestValidateScalar:
    """Coercion on write"""

    def test_int_to_float(self):
        out = validate_scalar(1, DataType(float))
        assert out == 1.0
        assert isinstance(out, float)

    def test_date_to_datetime(self):
        assert validate_scalar(date(2020, 1, 1), DataType(datetime)) == datetime(2020, 1, 1)

    def test_missing_returns_na(self):
        assert validate_scalar(None, DataType(int)) is NA

    def test_missing_in_non_nullable_raises(self):
        with pytest.raises(TypeError):
            validate_scalar(NA, DataType(int, nullable=False))

    def test_incompatible_raises(self):
        with pytest.raises(TypeError):
            validate_scalar("a", DataType(int))

    def test_object_accepts_anything(self):
        marker = object()
        assert validate_scalar(marker, DataType(object)) is marker


class TestWiden:
    """Numeric and temporal ladders"""

    def test_int_widens_to_float(self):
        assert DataType(int).widen(2.5).kind is float

    def test_float_widens_to_complex(self):
        assert DataType(float).widen(1j).kind is complex

    def test_date_widens_to_datetime(self):
        assert DataType(date).widen(datetime(2020, 1, 1)).kind is datetime

    def test_no_ladder(self):
        assert DataType(int).widen("a") is None

    def test_widen_keeps_nullability(self):
        assert not DataType(int, nullable=False).widen(1.5).nullable


class TestBaseValue:
    """The base value fills slots under the missing mask"""

    @pytest.mark.parametrize("kind,expected", [
        (int, 0),
        (float, 0.0),
        (str, ""),
        (bool, False),
        (bytes, b""),
        (date, date.min),
        (datetime, datetime.min),
        (object, None),
        (Decimal, Decimal(0)),
    ])
    def test_derived_base_value(self, kind, expected):
        assert DataType(kind).base_value() == expected

    def test_explicit_default_wins(self):
        assert DataType(int, default=-1).base_value() == -1

    def test_default_does_not_affect_equality(self):
        assert DataType(int, default=-1) == DataType(int)

    def test_kind_without_default_raises(self):
        class Point:
            def __init__(self, x, y):
                self.x, self.y = x, y

        with pytest.raises(DataVecTypeError, match="No base value"):
            DataType(Point).base_value()

    def test_with_helpers(self):
        dtype = DataType(int).with_nullable(False).with_default(7)
        assert not dtype.nullable
        assert dtype.base_value() == 7
