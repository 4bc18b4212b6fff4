import numpy as np
import pytest

from impurity import gini_impurity
from split_search import SplitSearchParams, candidate_positions, find_best_split


def test_candidate_positions_are_evenly_spaced():
    np.testing.assert_array_equal(candidate_positions(100, 10), np.arange(0, 99, 10))
    np.testing.assert_array_equal(candidate_positions(5, 10), [0, 1, 2, 3])
    np.testing.assert_array_equal(candidate_positions(7, None), np.arange(6))
    assert candidate_positions(1, 10).size == 0
    assert candidate_positions(0, None).size == 0


def test_perfect_separation_is_found_at_midpoint():
    X = np.array([[1.0], [2.0], [3.0], [4.0]])
    y = np.array([0, 0, 1, 1])

    result = find_best_split(X, y, np.arange(4), [0], n_classes=2)

    assert result.is_valid
    assert result.feature == 0
    assert result.threshold == 2.5
    assert result.impurity_decrease == pytest.approx(0.5)
    np.testing.assert_array_equal(result.left_rows, [0, 1])
    np.testing.assert_array_equal(result.right_rows, [2, 3])


def test_reported_decrease_matches_independent_recomputation():
    rng = np.random.default_rng(13)
    X = rng.normal(size=(60, 3))
    y = rng.integers(0, 3, size=60)
    rows = rng.integers(0, 60, size=60)

    for max_thresholds in (None, 10, 3):
        result = find_best_split(
            X, y, rows, [0, 1, 2], n_classes=3,
            params=SplitSearchParams(max_thresholds=max_thresholds),
        )
        assert result.feature is not None
        left, right = result.left_rows, result.right_rows
        assert left.size > 0 and right.size > 0
        np.testing.assert_array_equal(np.sort(np.concatenate([left, right])), np.sort(rows))
        assert np.all(X[left, result.feature] <= result.threshold)
        assert np.all(X[right, result.feature] > result.threshold)

        n = rows.size
        expected = gini_impurity(y[rows]) - (
            left.size / n * gini_impurity(y[left]) + right.size / n * gini_impurity(y[right])
        )
        assert result.impurity_decrease == pytest.approx(expected, abs=1e-12)
        assert result.parent_impurity == pytest.approx(gini_impurity(y[rows]))


def test_identical_feature_values_yield_no_valid_split():
    X = np.full((8, 2), 5.0)
    y = np.array([0, 1] * 4)

    result = find_best_split(X, y, np.arange(8), [0, 1], n_classes=2)

    assert result.feature is None
    assert result.impurity_decrease <= 0.0
    assert not result.is_valid
    assert result.left_rows.size == 0 and result.right_rows.size == 0


def test_ties_go_to_first_feature_in_candidate_order():
    column = np.array([1.0, 2.0, 3.0, 4.0])
    X = np.column_stack([column, column])
    y = np.array([0, 0, 1, 1])

    assert find_best_split(X, y, np.arange(4), [0, 1], n_classes=2).feature == 0
    assert find_best_split(X, y, np.arange(4), [1, 0], n_classes=2).feature == 1


def test_duplicated_rows_stay_on_the_same_side():
    X = np.array([[0.0], [1.0], [10.0], [11.0]])
    y = np.array([0, 0, 1, 1])
    rows = np.array([0, 0, 1, 2, 2, 2, 3])

    result = find_best_split(X, y, rows, [0], n_classes=2,
                             params=SplitSearchParams(max_thresholds=None))

    np.testing.assert_array_equal(result.left_rows, [0, 0, 1])
    np.testing.assert_array_equal(result.right_rows, [2, 2, 2, 3])


def test_invalid_params_rejected():
    with pytest.raises(ValueError):
        SplitSearchParams(max_thresholds=0)
