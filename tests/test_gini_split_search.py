import numpy as np

from dataset_checks import candidate_thresholds
from gini import calculate_gini_impurity, gini_from_counts, majority_label, split_reduces_impurity
from gini_split_search import GiniSplitSearch, SplitCandidate


def _brute_force_impurity(X, y, feature, threshold):
    left = y[X[:, feature] <= threshold]
    right = y[X[:, feature] > threshold]
    return (
        left.size * calculate_gini_impurity(left) + right.size * calculate_gini_impurity(right)
    ) / y.size


def _search(X, y):
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.int64)
    return GiniSplitSearch(np.arange(y.size), X, y).search()


def test_gini_impurity_known_values():
    assert calculate_gini_impurity(np.array([5, 5, 5])) == 0.0
    assert np.isclose(calculate_gini_impurity(np.array([0, 0, 1, 1])), 0.5)
    assert np.isclose(calculate_gini_impurity(np.array([0, 1, 2])), 2.0 / 3.0)
    assert calculate_gini_impurity(np.array([], dtype=np.int64)) == 0.0


def test_gini_impurity_stays_in_unit_interval():
    rng = np.random.default_rng(5)
    for _ in range(50):
        labels = rng.integers(0, rng.integers(1, 6), size=rng.integers(1, 40))
        gini = calculate_gini_impurity(labels)
        assert 0.0 <= gini < 1.0
        assert (gini == 0.0) == (np.unique(labels).size == 1)


def test_gini_from_counts_treats_empty_groups_as_pure():
    out = gini_from_counts(np.array([[0, 0], [2, 2], [3, 0]]))
    assert np.allclose(out, [0.0, 0.5, 0.0])


def test_majority_label_breaks_ties_on_smallest_label():
    assert majority_label(np.array([3, 1, 3, 1])) == 1
    assert majority_label(np.array([7, 2, 7])) == 7
    assert majority_label(np.array([4])) == 4


def test_candidate_thresholds_are_midpoints_of_distinct_values():
    thresholds = candidate_thresholds(np.array([3.0, 1.0, 3.0, 2.0]))
    assert np.array_equal(thresholds, [1.5, 2.5])
    assert candidate_thresholds(np.array([4.0, 4.0])).size == 0


def test_separable_dataset_splits_on_first_feature():
    result = _search([[1, 2], [2, 3], [10, 10], [11, 11]], [0, 0, 1, 1])

    assert result.candidate == SplitCandidate(feature=0, threshold=6.0)
    assert result.weighted_impurity == 0.0
    assert np.isclose(result.parent_impurity, 0.5)
    assert np.isclose(result.gain, 0.5)


def test_ties_keep_earliest_feature_then_earliest_threshold():
    result = _search([[0, 0], [1, 1]], [0, 1])
    assert result.candidate == SplitCandidate(feature=0, threshold=0.5)

    # Thresholds 0.5 and 2.5 both isolate one row of the minority pattern.
    result = _search([[0], [1], [2], [3]], [0, 1, 1, 0])
    assert result.candidate == SplitCandidate(feature=0, threshold=0.5)
    assert np.isclose(result.weighted_impurity, 1.0 / 3.0)


def test_constant_features_give_no_candidate():
    result = _search([[1, 4], [1, 4], [1, 4]], [0, 1, 1])

    assert result.candidate is None
    assert result.gain == -float("inf")
    assert result.metrics.candidates_evaluated == 0
    assert result.metrics.features_scanned == 2


def test_partitions_by_row_position_with_large_labels():
    result = _search([[0.0], [1.0], [2.0], [3.0]], [100, 100, 200, 200])

    assert result.candidate == SplitCandidate(feature=0, threshold=1.5)
    assert result.weighted_impurity == 0.0


def test_matches_brute_force_minimum():
    rng = np.random.default_rng(13)
    X = np.round(rng.normal(size=(40, 3)), 1)
    y = rng.integers(0, 3, size=40)

    result = _search(X, y)

    brute = [
        _brute_force_impurity(X, y, f, t)
        for f in range(X.shape[1])
        for t in candidate_thresholds(X[:, f])
    ]
    assert result.candidate is not None
    assert np.isclose(result.weighted_impurity, min(brute))
    assert np.isclose(
        _brute_force_impurity(X, y, result.candidate.feature, result.candidate.threshold),
        min(brute),
    )
    assert result.metrics.candidates_evaluated == len(brute)


def test_search_respects_node_rows_and_candidate_features():
    X = np.array([[0.0, 5.0], [1.0, 6.0], [2.0, 7.0], [3.0, 8.0]])
    y = np.array([0, 1, 0, 1])

    result = GiniSplitSearch(
        np.array([2, 3]), X, y, candidate_features=np.array([1])
    ).search()

    assert result.candidate == SplitCandidate(feature=1, threshold=7.5)
    assert result.metrics.features_scanned == 1


def test_improvement_verdict_is_exact_on_tied_class_mix():
    result = _search([[0]] * 3 + [[1]] * 6, [0, 1, 2, 0, 0, 1, 1, 2, 2])

    assert result.candidate == SplitCandidate(feature=0, threshold=0.5)
    assert not result.improves


def test_improvement_verdict_on_separable_data():
    assert _search([[1, 2], [2, 3], [10, 10], [11, 11]], [0, 0, 1, 1]).improves
    assert not _search([[1, 4], [1, 4]], [0, 1]).improves


def test_split_reduces_impurity_counts():
    assert split_reduces_impurity([2, 0], [0, 2])
    assert not split_reduces_impurity([1, 1, 1], [2, 2, 2])
    assert not split_reduces_impurity([0, 0], [3, 1])
    # Large counts stay exact where float64 would round.
    assert not split_reduces_impurity([10**9, 10**9], [3 * 10**9, 3 * 10**9])
