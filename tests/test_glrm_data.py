"""
Tests for GLRMData table adaptation and row partitioning.
"""

import numpy as np
import pandas as pd
import pytest
from glrm.data import (
    GLRMData,
    is_categorical,
    partition_bounds,
    make_loading_frame,
    partition_frame
)
from glrm.exceptions import ConfigurationError, ShapeMismatch


@pytest.fixture
def mixed_frame():
    """Numeric, string and categorical columns with missing values."""
    return pd.DataFrame({
        'age': [25.0, 32.0, np.nan, 51.0],
        'color': ['red', 'blue', 'red', None],
        'income': [40.0, 52.0, 61.0, 47.0],
        'size': pd.Categorical(['S', 'L', 'M', 'S'], categories=['S', 'M', 'L']),
    })


class TestLayout:
    """Test the categorical-first layout."""

    def test_column_kinds(self, mixed_frame):
        data = GLRMData(mixed_frame)
        assert data.cat_names == ['color', 'size']
        assert data.num_names == ['age', 'income']
        assert data.ncats == 2
        assert data.nnums == 2
        assert list(data.permutation) == [1, 3, 0, 2]

    def test_domains_and_offsets(self, mixed_frame):
        data = GLRMData(mixed_frame)
        assert data.domains[0] == ['blue', 'red']
        assert data.domains[1] == ['S', 'M', 'L']
        assert list(data.cat_offsets) == [0, 2, 5]
        assert data.m_expanded == 7

    def test_expanded_names(self, mixed_frame):
        data = GLRMData(mixed_frame)
        assert data.names_expanded == [
            'color.blue', 'color.red', 'size.S', 'size.M', 'size.L', 'age', 'income'
        ]

    def test_all_numeric(self):
        data = GLRMData(pd.DataFrame({'a': [1.0, 2.0], 'b': [3, 4]}))
        assert data.ncats == 0
        assert list(data.cat_offsets) == [0]
        assert data.m_expanded == 2

    def test_bool_is_categorical(self):
        assert is_categorical(pd.Series([True, False]))
        assert not is_categorical(pd.Series([1.0, 2.0]))
        assert is_categorical(pd.Series(['x', 'y']))

    def test_empty_frame(self):
        with pytest.raises(ValueError):
            GLRMData(pd.DataFrame())

    def test_unknown_transform(self, mixed_frame):
        with pytest.raises(ConfigurationError, match="Unknown transform"):
            GLRMData(mixed_frame, transform='whiten')


class TestAdapt:
    """Test the adapted matrix."""

    def test_level_indices_and_missing(self, mixed_frame):
        data = GLRMData(mixed_frame)
        A = data.A
        assert A.shape == (4, 4)
        # color: red=1, blue=0, missing=NaN
        assert A[0, 0] == 1.0 and A[1, 0] == 0.0 and np.isnan(A[3, 0])
        # size keeps its declared category order
        assert list(A[:, 1]) == [0.0, 2.0, 1.0, 0.0]
        assert np.isnan(A[2, 2])
        assert A[1, 3] == 52.0

    def test_unknown_level_becomes_missing(self, mixed_frame):
        data = GLRMData(mixed_frame)
        new = mixed_frame.copy()
        new['color'] = ['green', 'red', 'blue', 'red']
        A = data.adapt(new)
        assert np.isnan(A[0, 0])
        assert A[1, 0] == 1.0

    def test_missing_column(self, mixed_frame):
        data = GLRMData(mixed_frame)
        with pytest.raises(ShapeMismatch, match="missing columns"):
            data.adapt(mixed_frame.drop(columns=['income']))

    def test_expanded_matrix(self, mixed_frame):
        data = GLRMData(mixed_frame)
        E = data.expanded_matrix()
        assert E.shape == (4, data.m_expanded)
        assert np.array_equal(E[0, :2], [0.0, 1.0])
        assert np.all(np.isnan(E[3, :2]))
        assert np.array_equal(E[1, 2:5], [0.0, 0.0, 1.0])
        assert E[1, 6] == 52.0


class TestTransforms:
    """Test numeric transforms."""

    def test_none(self, mixed_frame):
        data = GLRMData(mixed_frame)
        assert np.allclose(data.norm_sub, 0.0)
        assert np.allclose(data.norm_mul, 1.0)

    def test_standardize(self):
        df = pd.DataFrame({'x': [1.0, 2.0, 3.0, np.nan]})
        data = GLRMData(df, transform='standardize')
        assert data.norm_sub[0] == pytest.approx(2.0)
        assert data.norm_mul[0] == pytest.approx(1.0)
        assert np.allclose(data.A[:3, 0], [-1.0, 0.0, 1.0])
        assert np.isnan(data.A[3, 0])

    def test_normalize(self):
        data = GLRMData(pd.DataFrame({'x': [0.0, 5.0, 10.0]}), transform='normalize')
        assert np.allclose(data.A[:, 0], [-0.5, 0.0, 0.5])

    def test_demean_and_descale(self):
        df = pd.DataFrame({'x': [2.0, 4.0, 6.0]})
        assert np.allclose(GLRMData(df, transform='demean').A[:, 0], [-2.0, 0.0, 2.0])
        assert np.allclose(GLRMData(df, transform='descale').A[:, 0], [1.0, 2.0, 3.0])

    def test_constant_column(self):
        data = GLRMData(pd.DataFrame({'x': [3.0, 3.0]}), transform='standardize')
        assert data.norm_mul[0] == 1.0
        assert np.allclose(data.A[:, 0], 0.0)


class TestToFrame:
    """Test turning predictions back into a table."""

    def test_original_order(self, mixed_frame):
        data = GLRMData(mixed_frame)
        P = np.array([[1.0, 2.0, 30.0, 45.0]])
        table = data.to_frame(P)
        assert list(table.columns) == ['age', 'color', 'income', 'size']
        assert table['color'].iloc[0] == 1
        assert table['size'].iloc[0] == 2
        assert table['age'].iloc[0] == 30.0
        assert table['color'].dtype == np.int64

    def test_wrong_width(self, mixed_frame):
        with pytest.raises(ShapeMismatch):
            GLRMData(mixed_frame).to_frame(np.zeros((1, 3)))


class TestPartitions:
    """Test row partitioning of the loading frame."""

    def test_bounds_cover_all_rows(self):
        for n in (0, 1, 7, 10, 101):
            for p in (1, 2, 3, 8):
                bounds = partition_bounds(n, p)
                covered = [i for start, stop in bounds for i in range(start, stop)]
                assert covered == list(range(n))
                assert all(stop > start for start, stop in bounds)
                assert len(bounds) == min(n, p)

    def test_bounds_balanced(self):
        assert partition_bounds(5, 2) == [(0, 3), (3, 5)]
        sizes = [b - a for a, b in partition_bounds(103, 10)]
        assert max(sizes) - min(sizes) <= 1

    def test_invalid_count(self):
        with pytest.raises(ValueError):
            partition_bounds(10, 0)

    def test_loading_frame(self):
        X = np.array([[1.0, 2.0], [3.0, 4.0]])
        frame = make_loading_frame(X, 3)
        assert frame.shape == (2, 5)
        assert np.array_equal(frame[:, :2], X)
        assert np.all(frame[:, 2:] == 0.0)

    def test_partitions_are_views(self):
        frame = make_loading_frame(np.arange(10, dtype=float).reshape(5, 2), 2)
        parts = partition_frame(frame, k=2, n_partitions=2)
        assert [(p.start, p.stop) for p in parts] == [(0, 3), (3, 5)]
        parts[1].output[:] = 7.0
        assert np.all(frame[3:, 2:] == 7.0)
        assert np.all(frame[:3, 2:] == 0.0)
        assert np.array_equal(parts[0].X, frame[:3, :2])

    def test_observed_shape_checked(self):
        frame = make_loading_frame(np.ones((4, 1)), 2)
        with pytest.raises(ShapeMismatch):
            partition_frame(frame, k=1, n_partitions=2, observed=np.zeros((4, 3)))

    def test_observed_attached(self):
        frame = make_loading_frame(np.ones((4, 1)), 2)
        observed = np.arange(8, dtype=float).reshape(4, 2)
        parts = partition_frame(frame, k=1, n_partitions=2, observed=observed)
        assert np.array_equal(parts[1].observed, observed[2:])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
