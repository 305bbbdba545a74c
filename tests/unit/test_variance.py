"""
Tests for the variance descriptor.

Tests cover:
- Rank and slot access
- concat / contract / swap / flipped
- Rejection of invalid contractions
- Value semantics (equality, hashing)
"""
import pytest

from diffgeom import (
    IndexType,
    Variance,
    CONTRA,
    CO,
    SCALAR,
    VECTOR,
    COVECTOR,
    MATRIX,
    TWO_FORM,
    INV_TWO_FORM,
    InvalidContraction,
    IndexOutOfBounds,
    TensorError,
)


class TestIndexType:

    def test_other_is_involution(self):
        for kind in IndexType:
            assert kind.other.other is kind
            assert kind.other is not kind

    def test_symbols(self):
        assert CONTRA.symbol == "^"
        assert CO.symbol == "_"


class TestVarianceBasics:

    def test_common_ranks(self):
        assert SCALAR.rank == 0
        assert VECTOR.rank == 1
        assert COVECTOR.rank == 1
        assert MATRIX.rank == 2
        assert TWO_FORM.rank == 2
        assert INV_TWO_FORM.rank == 2

    def test_slot_access(self):
        v = Variance(CONTRA, CO, CO)
        assert v[0] is CONTRA
        assert v[2] is CO
        assert list(v) == [CONTRA, CO, CO]
        assert len(v) == 3

    def test_value_equality_and_hash(self):
        assert Variance(CONTRA, CO) == MATRIX
        assert Variance(CO, CONTRA) != MATRIX
        assert hash(Variance(CONTRA, CO)) == hash(MATRIX)
        assert {MATRIX: 1}[Variance.of(CONTRA, CO)] == 1

    def test_rejects_non_index_slots(self):
        with pytest.raises(TypeError):
            Variance(CONTRA, "co")

    def test_repr(self):
        assert repr(MATRIX) == "Variance(^, _)"
        assert repr(SCALAR) == "Variance()"


class TestIndexManipulation:

    def test_concat_preserves_order(self):
        assert MATRIX.concat(VECTOR) == Variance(CONTRA, CO, CONTRA)
        assert VECTOR.concat(MATRIX) == Variance(CONTRA, CONTRA, CO)
        assert SCALAR.concat(TWO_FORM) == TWO_FORM

    def test_contract_removes_both_slots(self):
        v = Variance(CO, CONTRA, CO, CONTRA)
        assert v.contract(0, 1) == Variance(CO, CONTRA)
        assert v.contract(0, 3) == Variance(CONTRA, CO)
        assert v.contract(1, 2) == Variance(CO, CONTRA)
        assert MATRIX.contract(0, 1) == SCALAR

    def test_contract_same_kind_rejected(self):
        with pytest.raises(InvalidContraction):
            TWO_FORM.contract(0, 1)
        with pytest.raises(InvalidContraction):
            INV_TWO_FORM.contract(0, 1)

    @pytest.mark.parametrize("lo,hi", [(1, 0), (0, 0), (0, 3), (-1, 1)])
    def test_contract_bad_positions_rejected(self, lo, hi):
        v = Variance(CONTRA, CO, CONTRA)
        with pytest.raises(InvalidContraction):
            v.contract(lo, hi)

    def test_invalid_contraction_is_type_error(self):
        with pytest.raises(TypeError):
            TWO_FORM.contract(0, 1)
        with pytest.raises(TensorError):
            TWO_FORM.contract(0, 1)

    def test_swap(self):
        assert MATRIX.swap(0, 1) == Variance(CO, CONTRA)
        v = Variance(CONTRA, CONTRA, CO)
        assert v.swap(0, 2) == Variance(CO, CONTRA, CONTRA)
        assert v.swap(1, 1) == v

    @pytest.mark.parametrize("i, j", [(0, 2), (2, 0), (-1, 0), (0, -2)])
    def test_swap_out_of_range(self, i, j):
        with pytest.raises(IndexOutOfBounds):
            MATRIX.swap(i, j)
        with pytest.raises(IndexError):
            SCALAR.swap(0, 0)

    def test_flipped(self):
        assert MATRIX.flipped() == Variance(CO, CONTRA)
        assert TWO_FORM.flipped() == INV_TWO_FORM
        assert SCALAR.flipped() == SCALAR
