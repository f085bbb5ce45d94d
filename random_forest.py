from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np

from dataset_checks import as_instance, check_dataset, check_depth
from decision_tree import DecisionTree
from gini import majority_label
from tree_errors import UnresolvedNodeError

logger = logging.getLogger(__name__)


@dataclass
class RandomForestParams:
    n_trees: int = 10
    max_depth: int = 5

    def __post_init__(self) -> None:
        if self.n_trees < 1:
            raise ValueError("n_trees must be at least 1")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")


class RandomForest:
    """Majority-vote ensemble of CART trees.

    Every member is trained on the same full dataset with the same depth
    limit, so members grow identical trees and the vote is unanimous.
    """

    def __init__(self, params: RandomForestParams | None = None) -> None:
        self.params = params or RandomForestParams()
        self.trees = [DecisionTree() for _ in range(self.params.n_trees)]
        self.metrics: dict = {}

    @property
    def is_trained(self) -> bool:
        return all(tree.is_trained for tree in self.trees)

    def train(self, X, y, max_depth: int | None = None) -> "RandomForest":
        X, y = check_dataset(X, y)
        if max_depth is None:
            max_depth = self.params.max_depth
        max_depth = check_depth(max_depth)

        self.metrics = {
            "max_depth": max_depth,
            "nodes_split": 0,
            "candidates_evaluated": 0,
            "split_search_time_sec": 0.0,
            "tree_metrics": [],
        }

        for tree_idx, tree in enumerate(self.trees):
            tree._train_checked(X, y, max_depth)

            self.metrics["nodes_split"] += tree.metrics.nodes_split
            self.metrics["candidates_evaluated"] += tree.metrics.candidates_evaluated
            self.metrics["split_search_time_sec"] += tree.metrics.split_search_time_sec
            self.metrics["tree_metrics"].append(
                {
                    "tree_idx": tree_idx,
                    "nodes_visited": tree.metrics.nodes_visited,
                    "nodes_split": tree.metrics.nodes_split,
                    "leaves": tree.metrics.leaves,
                    "node_metrics": tree.metrics.node_metrics,
                }
            )

        logger.info(
            "Trained %d trees on %d rows x %d features (max_depth=%d)",
            len(self.trees),
            X.shape[0],
            X.shape[1],
            max_depth,
        )
        return self

    def predict_instance(self, instance) -> int:
        x = as_instance(instance)
        votes = np.array([tree.predict_instance(x) for tree in self.trees], dtype=np.int64)
        return majority_label(votes)

    def predict(self, X) -> np.ndarray:
        if not self.is_trained:
            raise UnresolvedNodeError("Model must be fitted before prediction")

        preds = np.zeros(len(X), dtype=np.int64)
        for i, instance in enumerate(X):
            preds[i] = self.predict_instance(instance)
        return preds


def create_random_forest(n_trees: int) -> RandomForest:
    return RandomForest(RandomForestParams(n_trees=n_trees))
