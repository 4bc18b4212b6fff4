from dataclasses import replace

import numpy as np
import pytest

from forest_builder import build_forest
from oob_evaluation import cumulative_oob_curve, oob_error, per_tree_oob_error
from predictor import majority_vote, predict_one
from sample_data import make_two_clusters


def _noisy_forest(num_trees=10, seed=6):
    dataset = make_two_clusters(100, noise_fraction=0.2, rng=np.random.default_rng(seed))
    forest = build_forest(dataset, num_trees=num_trees, max_depth=3, random_state=seed)
    return dataset, forest


def test_per_tree_error_matches_direct_count():
    dataset, forest = _noisy_forest()

    for tree in forest.trees:
        wrong = sum(
            predict_one(dataset.sample(i), tree) != dataset.labels[i] for i in tree.oob_indices
        )
        expected = wrong / tree.oob_indices.size
        assert per_tree_oob_error(tree, dataset) == pytest.approx(expected)


def test_tree_without_oob_samples_has_no_error():
    dataset, forest = _noisy_forest(num_trees=1)
    tree = replace(forest.trees[0], oob_indices=np.array([], dtype=np.int64))
    assert per_tree_oob_error(tree, dataset) is None


def test_cumulative_curve_votes_only_among_oob_trees():
    dataset, forest = _noisy_forest()
    curve = cumulative_oob_curve(forest, dataset)

    assert [point.forest_size for point in curve] == list(range(1, forest.num_trees + 1))
    evaluated = [point.n_evaluated for point in curve]
    assert evaluated == sorted(evaluated)
    assert evaluated[-1] <= len(dataset)

    for point in (curve[0], curve[4], curve[-1]):
        prefix = forest.trees[: point.forest_size]
        wrong = 0
        n_evaluated = 0
        for i in range(len(dataset)):
            voters = [tree for tree in prefix if forest.membership.is_oob(tree.tree_id, i)]
            if not voters:
                continue
            n_evaluated += 1
            labels = [predict_one(dataset.sample(i), tree) for tree in voters]
            wrong += majority_vote(labels, forest.classes) != dataset.labels[i]

        assert point.n_evaluated == n_evaluated
        assert point.error == pytest.approx(wrong / n_evaluated)

    assert oob_error(forest, dataset) == curve[-1].error


def test_first_point_equals_first_tree_error():
    dataset, forest = _noisy_forest(num_trees=3, seed=14)
    curve = cumulative_oob_curve(forest, dataset)

    assert curve[0].n_evaluated == forest.trees[0].oob_indices.size
    assert curve[0].error == pytest.approx(forest.trees[0].oob_error)


def test_prefix_without_oob_samples_reports_none():
    dataset, forest = _noisy_forest(num_trees=2)
    forest.trees = [
        replace(tree, oob_indices=np.array([], dtype=np.int64)) for tree in forest.trees
    ]

    curve = cumulative_oob_curve(forest, dataset)

    assert [(p.error, p.n_evaluated) for p in curve] == [(None, 0), (None, 0)]
    assert oob_error(forest, dataset) is None
