import argparse
import logging
import time
import sys
from pathlib import Path

import numpy as np

# Allow running as: python experiments/quick_forest_eval.py
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from random_forest import RandomForestParams, RandomForest
from tree_visualizer import print_tree

SAMPLE_X = np.array(
    [
        [1.0, 2.0], [2.0, 3.0], [3.0, 4.0], [1.5, 2.5], [2.5, 3.5],
        [5.0, 6.0], [6.0, 7.0], [7.0, 8.0], [5.5, 6.5], [6.5, 7.5],
        [10.0, 10.0], [11.0, 11.0], [12.0, 12.0], [10.5, 10.5], [11.5, 11.5],
    ],
    dtype=np.float64,
)
SAMPLE_Y = np.array([0] * 5 + [1] * 5 + [2] * 5, dtype=np.int64)
SAMPLE_QUERIES = np.array([[4.0, 5.0], [1.0, 1.0]], dtype=np.float64)


SKLEARN_LOADERS = {"iris": "load_iris", "breast_cancer": "load_breast_cancer"}


def _limit_rows(X, y, max_samples, rng):
    if max_samples is None or y.size <= max_samples:
        return X, y
    keep = np.sort(rng.choice(y.size, size=max_samples, replace=False))
    return X[keep], y[keep]


def _stratified_holdout(X, y, test_size, random_state):
    """Hold out ``test_size`` of every class, at least one row per class."""
    rng = np.random.default_rng(random_state)
    held_out = np.zeros(y.size, dtype=bool)
    for label in np.unique(y):
        members = rng.permutation(np.flatnonzero(y == label))
        n_test = max(1, int(round(members.size * test_size)))
        held_out[members[:n_test]] = True
    return X[~held_out], X[held_out], y[~held_out], y[held_out]


def _accuracy(y_true, y_pred):
    return float(np.mean(y_true == y_pred))


def _load_sklearn_dataset(name):
    try:
        from sklearn import datasets
    except ModuleNotFoundError as e:
        raise ModuleNotFoundError(
            f"The '{name}' dataset is fetched through scikit-learn. "
            "Install cartforest[experiments], or use --datasets sample,synthetic_clf."
        ) from e

    bunch = getattr(datasets, SKLEARN_LOADERS[name])()
    return bunch.data.astype(np.float64), bunch.target.astype(np.int64)


def load_dataset(name: str, random_state: int, max_samples: int | None):
    rng = np.random.default_rng(random_state)
    key = name.lower()

    if key == "sample":
        return SAMPLE_X.copy(), SAMPLE_Y.copy()
    if key in SKLEARN_LOADERS:
        X, y = _load_sklearn_dataset(key)
    elif key == "synthetic_clf":
        n_samples = 600
        n_features = 4
        centers = rng.normal(scale=4.0, size=(3, n_features))
        y = rng.integers(0, 3, size=n_samples)
        X = centers[y] + rng.normal(size=(n_samples, n_features))
        X = X.astype(np.float64)
        y = y.astype(np.int64)
    else:
        raise ValueError(
            f"Unknown dataset '{name}'. Choose from: sample, synthetic_clf, iris, breast_cancer"
        )

    return _limit_rows(X, y, max_samples=max_samples, rng=rng)


def evaluate_one(X, y, n_trees, max_depth, test_size, random_state):
    X_train, X_test, y_train, y_test = _stratified_holdout(
        X,
        y,
        test_size=test_size,
        random_state=random_state,
    )

    model = RandomForest(RandomForestParams(n_trees=n_trees, max_depth=max_depth))
    t0 = time.perf_counter()
    model.train(X_train, y_train)
    fit_time = time.perf_counter() - t0

    pred = model.predict(X_test)
    return model, {
        "fit_time_sec": fit_time,
        "accuracy": _accuracy(y_test, pred),
        "train_accuracy": _accuracy(y_train, model.predict(X_train)),
        "nodes_split": model.metrics["nodes_split"],
        "candidates_evaluated": model.metrics["candidates_evaluated"],
        "split_search_time_sec": model.metrics["split_search_time_sec"],
    }


def main():
    parser = argparse.ArgumentParser(description="Quick CART random forest checks on small datasets")
    parser.add_argument(
        "--datasets",
        type=str,
        default="sample,synthetic_clf",
        help="Comma-separated: sample, synthetic_clf, iris, breast_cancer",
    )
    parser.add_argument("--max-samples", type=int, default=2000)
    parser.add_argument("--n-trees", type=int, default=10)
    parser.add_argument("--max-depth", type=int, default=5)
    parser.add_argument("--test-size", type=float, default=0.2)
    parser.add_argument("--random-state", type=int, default=42)
    parser.add_argument(
        "--print-tree",
        action="store_true",
        help="Print the first member tree of each trained forest.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    datasets = [d.strip() for d in args.datasets.split(",") if d.strip()]
    if not datasets:
        raise ValueError("No datasets provided")

    for ds_name in datasets:
        X, y = load_dataset(ds_name, args.random_state, args.max_samples)
        print(f"\nDataset={ds_name} n={X.shape[0]} d={X.shape[1]} classes={np.unique(y).size}")

        if ds_name == "sample":
            # Fit on every sample point and query two unseen ones.
            model = RandomForest(RandomForestParams(n_trees=args.n_trees, max_depth=args.max_depth))
            model.train(X, y)
            print(f"Predictions: {model.predict(SAMPLE_QUERIES).tolist()}")
            if args.print_tree:
                print_tree(model.trees[0])
            continue

        model, out = evaluate_one(
            X,
            y,
            n_trees=args.n_trees,
            max_depth=args.max_depth,
            test_size=args.test_size,
            random_state=args.random_state,
        )
        print(
            "RandomForest"
            f" time={out['fit_time_sec']:.3f}s"
            f" split_search_time={out['split_search_time_sec']:.3f}s"
            f" nodes_split={out['nodes_split']}"
            f" candidates={out['candidates_evaluated']}"
            f" train_accuracy={out['train_accuracy']:.3f}"
            f" accuracy={out['accuracy']:.3f}"
        )
        if args.print_tree:
            print_tree(model.trees[0])


if __name__ == "__main__":
    main()
