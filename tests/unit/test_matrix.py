import numpy as np
import pytest

from neuralnet.core import matrix as mx
from neuralnet.core.errors import AliasingError, DimensionMismatch, OutOfRange


def test_zeros_has_requested_dims_and_entries():
    m = mx.zeros(3, 2)
    assert m.dims() == (3, 2)
    assert all(m.at(r, c) == 0.0 for r in range(3) for c in range(2))


def test_non_positive_dims_are_rejected():
    with pytest.raises(DimensionMismatch):
        mx.zeros(0, 2)
    with pytest.raises(DimensionMismatch):
        mx.random(2, -1, 1.0)


def test_transpose_swaps_indices_without_copy():
    m = mx.from_rows([[1, 2, 3], [4, 5, 6]])
    t = m.transpose()
    assert t.dims() == (3, 2)
    assert t.is_transposed
    for r in range(2):
        for c in range(3):
            assert t.at(c, r) == m.at(r, c)
    assert t.shares_storage(m)
    back = t.transpose()
    assert not back.is_transposed
    assert np.array_equal(back.values, m.values)


def test_views_observe_owner_mutations():
    m = mx.zeros(2, 2)
    view = m.view()
    transposed = m.transpose()
    m.set(0, 1, 9.0)
    assert view.at(0, 1) == 9.0
    assert transposed.at(1, 0) == 9.0


def test_views_are_read_only():
    m = mx.zeros(2, 2)
    with pytest.raises(ValueError):
        m.view().values[0, 0] = 1.0


def test_random_unit_entries_are_zero_or_one():
    rng = np.random.default_rng(0)
    m = mx.random_unit(20, 30, 0.3, rng)
    values = m.values
    assert np.all((values == 0.0) | (values == 1.0))
    assert 0.1 < values.mean() < 0.5


def test_random_stays_within_scale():
    m = mx.random(10, 10, 0.25, np.random.default_rng(1))
    assert np.all(m.values >= 0.0)
    assert np.all(m.values < 0.25)


def test_random_is_reproducible_for_a_seed():
    a = mx.random(4, 4, 1.0, np.random.default_rng(3))
    b = mx.random(4, 4, 1.0, np.random.default_rng(3))
    assert np.array_equal(a.values, b.values)


def test_row_sum_and_normalized_row_sum():
    src = mx.from_rows([[1, 2, 3], [4, 5, 6]])
    dest = mx.zeros(2, 1)
    dest.row_sum(src)
    assert dest.values.reshape(-1).tolist() == [6.0, 15.0]
    dest.row_sum(src, normalize=True)
    assert dest.values.reshape(-1).tolist() == [2.0, 5.0]


def test_row_sum_over_many_rows_matches_numpy():
    rng = np.random.default_rng(5)
    data = rng.normal(size=(103, 7))
    dest = mx.zeros(103, 1)
    dest.row_sum(mx.from_numpy(data))
    np.testing.assert_allclose(dest.values.reshape(-1), data.sum(axis=1))


def test_row_sum_rejects_wrong_destination():
    with pytest.raises(DimensionMismatch):
        mx.zeros(3, 1).row_sum(mx.zeros(2, 4))


def test_horizontal_stack_places_vectors_in_columns():
    m = mx.horizontal_stack([[1, 2], [3, 4], [5, 6]])
    assert m.dims() == (2, 3)
    assert [m.at(0, c) for c in range(3)] == [1.0, 3.0, 5.0]
    with pytest.raises(DimensionMismatch):
        mx.horizontal_stack([[1, 2], [3]])


def test_horizontal_stack_of_two_feature_vectors():
    m = mx.horizontal_stack([[1.1, 2.2, 3.3], [4.4, 5.5, 6.6]])
    assert m.dims() == (3, 2)
    assert [m.at(r, 0) for r in range(3)] == [1.1, 2.2, 3.3]
    assert [m.at(r, 1) for r in range(3)] == [4.4, 5.5, 6.6]


def test_column_and_row_vectors():
    assert mx.column_vector([1, 2, 3]).dims() == (3, 1)
    assert mx.row_vector([1, 2, 3]).dims() == (1, 3)


def test_out_of_range_access():
    m = mx.zeros(2, 2)
    with pytest.raises(OutOfRange):
        m.at(2, 0)
    with pytest.raises(OutOfRange):
        m.set(0, -1, 1.0)
    with pytest.raises(OutOfRange):
        m.columns(1, 3)


def test_columns_view_shares_storage():
    m = mx.from_rows([[1, 2, 3, 4], [5, 6, 7, 8]])
    window = m.columns(1, 3)
    assert window.dims() == (2, 2)
    assert window.at(1, 0) == 6.0
    m.set(1, 1, -1.0)
    assert window.at(1, 0) == -1.0


def test_multiply_into_checks_shapes():
    a = mx.from_rows([[1, 2], [3, 4]])
    b = mx.from_rows([[1], [1]])
    dest = mx.zeros(2, 1)
    dest.multiply_into(a, b)
    assert dest.values.reshape(-1).tolist() == [3.0, 7.0]
    with pytest.raises(DimensionMismatch):
        dest.multiply_into(b, a)
    with pytest.raises(DimensionMismatch):
        mx.zeros(2, 2).multiply_into(a, b)


def test_multiply_into_with_transposed_operand():
    a = mx.from_rows([[1, 2, 3], [4, 5, 6]])
    dest = mx.zeros(3, 3)
    dest.multiply_into(a.transpose(), a)
    np.testing.assert_allclose(dest.values, a.values.T @ a.values)


def test_multiply_into_may_read_its_own_buffer():
    m = mx.from_rows([[1, 1], [0, 1]])
    m.multiply_into(m, m)
    assert m.values.tolist() == [[1.0, 2.0], [0.0, 1.0]]


def test_elementwise_and_combine():
    src = mx.from_rows([[-1, 2], [3, -4]])
    dest = mx.zeros(2, 2)
    dest.elementwise(src, np.abs)
    assert dest.values.tolist() == [[1.0, 2.0], [3.0, 4.0]]
    dest.combine(dest, src, np.add)
    assert dest.values.tolist() == [[0.0, 4.0], [6.0, 0.0]]
    with pytest.raises(DimensionMismatch):
        dest.combine(dest, mx.zeros(1, 2), np.add)


def test_in_place_update_through_transposed_alias_is_rejected():
    m = mx.from_rows([[1, 2], [3, 4]])
    before = m.to_numpy()
    with pytest.raises(AliasingError):
        m.elementwise(m.transpose(), np.negative)
    with pytest.raises(AliasingError):
        m.combine(m, m.transpose(), np.add)
    assert np.array_equal(m.values, before)


def test_add_column_vector_broadcasts_bias():
    a = mx.zeros(2, 3)
    a.add_column_vector(a, mx.column_vector([1, -1]))
    assert a.values.tolist() == [[1.0, 1.0, 1.0], [-1.0, -1.0, -1.0]]
    with pytest.raises(DimensionMismatch):
        a.add_column_vector(a, mx.column_vector([1, 2, 3]))


def test_frobenius_norm_squared():
    assert mx.from_rows([[1, 2], [2, 0]]).frobenius_norm_squared() == 9.0
