import numpy as np
import pytest

from data_structures import (
    FeatureImportance,
    Forest,
    InternalNode,
    Leaf,
    MembershipTable,
    Sample,
    Tree,
)
from predictor import (
    decision_path,
    majority_vote,
    predict,
    predict_codes,
    predict_forest,
    predict_one,
    vote,
)

CLASSES = ("A", "B")
FEATURES = ("x1", "x2")


def _leaf(node_id, depth, label):
    class_index = CLASSES.index(label)
    counts = [0, 0]
    counts[class_index] = 1
    return Leaf(
        node_id=node_id,
        depth=depth,
        rows=np.array([0]),
        n_samples=1,
        impurity=0.0,
        class_counts=tuple(counts),
        class_index=class_index,
        majority_class=label,
    )


def _stump(tree_id, feature_index, threshold, left_label, right_label):
    prefix = f"tree{tree_id}_"
    root = InternalNode(
        node_id=prefix,
        depth=0,
        rows=np.array([0, 1]),
        n_samples=2,
        impurity=0.5,
        feature=FEATURES[feature_index],
        feature_index=feature_index,
        threshold=threshold,
        impurity_decrease=0.5,
        importance=1.0,
        left=_leaf(prefix + "L", 1, left_label),
        right=_leaf(prefix + "R", 1, right_label),
    )
    return Tree(
        tree_id=tree_id,
        root=root,
        sampled_indices=np.array([0, 1]),
        features=FEATURES,
        oob_indices=np.array([], dtype=np.int64),
        n_features=len(FEATURES),
    )


def _forest(trees):
    return Forest(
        trees=trees,
        feature_names=FEATURES,
        classes=CLASSES,
        membership=MembershipTable(len(trees), 2),
        feature_importance=[FeatureImportance(f, 0.0) for f in FEATURES],
        raw_importance={f: 0.0 for f in FEATURES},
    )


def test_predict_one_goes_left_on_equality():
    tree = _stump(0, 0, 50.0, "A", "B")

    assert predict_one({"x1": 50.0, "x2": 0.0}, tree) == "A"
    assert predict_one({"x1": 50.0001, "x2": 0.0}, tree) == "B"
    assert predict_one(np.array([10.0, 90.0]), tree) == "A"
    assert predict_one(Sample(7, {"x1": 80.0, "x2": 10.0}), tree.root) == "B"


def test_decision_path_lists_visited_nodes():
    tree = _stump(4, 1, 30.0, "A", "B")
    path = decision_path({"x1": 0.0, "x2": 31.0}, tree)
    assert [node.node_id for node in path] == ["tree4_", "tree4_R"]


def test_majority_vote_plurality_and_tie_break():
    assert majority_vote(["B", "B", "A"], CLASSES) == "B"
    assert majority_vote(["B", "A"], CLASSES) == "A"
    assert majority_vote(["B", "A"], ("B", "A")) == "B"
    assert majority_vote(["C", "C", "A"], CLASSES) == "C"
    with pytest.raises(ValueError):
        majority_vote([], CLASSES)


def test_vote_over_code_matrix_breaks_ties_to_lowest_code():
    codes = np.array([[0, 1, 1], [1, 1, 0]])
    np.testing.assert_array_equal(vote(codes, 2), [0, 1, 0])


def test_predict_forest_reports_per_tree_votes():
    forest = _forest([
        _stump(0, 0, 50.0, "A", "B"),
        _stump(1, 1, 40.0, "A", "B"),
        _stump(2, 0, 60.0, "A", "B"),
    ])

    result = predict_forest({"x1": 55.0, "x2": 45.0}, forest)

    assert [(v.tree_id, v.prediction) for v in result.votes] == [(0, "B"), (1, "B"), (2, "A")]
    assert result.vote_counts == {"A": 1, "B": 2}
    assert result.prediction == "B"


def test_batch_prediction_matches_single_sample_prediction():
    forest = _forest([
        _stump(0, 0, 50.0, "A", "B"),
        _stump(1, 1, 40.0, "B", "A"),
    ])
    X = np.random.default_rng(0).uniform(0.0, 100.0, size=(30, 2))

    labels = predict(forest, X)
    codes = predict_codes(forest, X)

    assert codes.shape == (2, 30)
    for i, row in enumerate(X):
        assert labels[i] == predict_forest(row, forest).prediction
        for t, tree in enumerate(forest.trees):
            assert CLASSES[codes[t, i]] == predict_one(row, tree)


def test_wrong_feature_count_rejected():
    forest = _forest([_stump(0, 0, 50.0, "A", "B")])
    with pytest.raises(ValueError):
        predict_forest(np.array([1.0, 2.0, 3.0]), forest)
    with pytest.raises(ValueError):
        predict(forest, np.zeros((4, 3)))


def test_missing_named_feature_rejected():
    tree = _stump(0, 1, 50.0, "A", "B")
    forest = _forest([tree])

    with pytest.raises(ValueError):
        predict_forest(Sample(0, {"x1": 50.0}), forest)
    with pytest.raises(ValueError):
        predict_one({"x1": 50.0}, tree)
    with pytest.raises(ValueError):
        decision_path({"x1": 50.0}, tree.root)


def test_vector_width_checked_for_single_trees():
    tree = _stump(0, 1, 50.0, "A", "B")

    with pytest.raises(ValueError):
        predict_one(np.array([1.0]), tree)
    with pytest.raises(ValueError):
        predict_one([1.0, 2.0, 3.0], tree)
    with pytest.raises(ValueError):
        decision_path(np.zeros((1, 2)), tree)
    # A bare node has no known width, but a short vector still fails cleanly.
    with pytest.raises(ValueError):
        decision_path([1.0], tree.root)
    assert predict_one([1.0, 2.0, 3.0], tree.root) == "A"
