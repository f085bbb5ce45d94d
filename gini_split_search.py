from __future__ import annotations

from dataclasses import dataclass
import logging
import time

import numpy as np

from dataset_checks import candidate_thresholds
from gini import calculate_gini_impurity, gini_from_counts, split_reduces_impurity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitCandidate:
    feature: int
    threshold: float


@dataclass
class SplitSearchMetrics:
    features_scanned: int = 0
    candidates_evaluated: int = 0
    time_spent_sec: float = 0.0


@dataclass
class SplitSearchResult:
    candidate: SplitCandidate | None
    weighted_impurity: float
    parent_impurity: float
    metrics: SplitSearchMetrics
    # Exact verdict on the chosen candidate; the float impurities only rank.
    improves: bool = False

    @property
    def gain(self) -> float:
        return self.parent_impurity - self.weighted_impurity


class GiniSplitSearch:
    """Exhaustive CART split search for one node using weighted Gini impurity.

    Every midpoint between adjacent distinct values of every candidate
    feature is scored. Partitioning is by row position: ``node_rows`` index
    into both ``X`` and ``y``.
    """

    def __init__(
        self,
        node_rows: np.ndarray,
        X: np.ndarray,
        y: np.ndarray,
        candidate_features: np.ndarray | None = None,
    ) -> None:
        self.node_rows = np.asarray(node_rows, dtype=np.int64)
        self.X = np.asarray(X, dtype=np.float64)
        self.y = np.asarray(y, dtype=np.int64)
        if candidate_features is None:
            candidate_features = np.arange(self.X.shape[1], dtype=np.int64)
        self.candidate_features = np.asarray(candidate_features, dtype=np.int64)

        self.n_node = int(self.node_rows.size)
        self.node_labels = self.y[self.node_rows]
        self.classes, self.class_index = np.unique(self.node_labels, return_inverse=True)

    def _score_feature(self, feature: int) -> tuple[np.ndarray, np.ndarray]:
        """Candidate thresholds of one feature and their weighted impurities."""
        column = self.X[self.node_rows, feature]
        thresholds = candidate_thresholds(column)
        if thresholds.size == 0:
            return thresholds, np.array([], dtype=np.float64)

        order = np.argsort(column, kind="stable")
        sorted_column = column[order]

        one_hot = np.zeros((self.n_node, self.classes.size), dtype=np.float64)
        one_hot[np.arange(self.n_node), self.class_index[order]] = 1.0
        cumulative = np.vstack(
            [np.zeros((1, self.classes.size), dtype=np.float64), np.cumsum(one_hot, axis=0)]
        )

        # Rows with value <= threshold form a sorted prefix.
        n_left = np.searchsorted(sorted_column, thresholds, side="right")
        left_counts = cumulative[n_left]
        right_counts = cumulative[-1] - left_counts
        n_right = self.n_node - n_left

        weighted = (
            n_left * gini_from_counts(left_counts) + n_right * gini_from_counts(right_counts)
        ) / self.n_node
        return thresholds, weighted

    def search(self) -> SplitSearchResult:
        start = time.perf_counter()
        metrics = SplitSearchMetrics()
        parent_impurity = calculate_gini_impurity(self.node_labels)

        best: SplitCandidate | None = None
        best_impurity = float("inf")

        for feature in self.candidate_features:
            thresholds, weighted = self._score_feature(int(feature))
            metrics.features_scanned += 1
            metrics.candidates_evaluated += int(thresholds.size)
            if thresholds.size == 0:
                continue

            idx = int(np.argmin(weighted))
            if weighted[idx] < best_impurity:
                best_impurity = float(weighted[idx])
                best = SplitCandidate(feature=int(feature), threshold=float(thresholds[idx]))

        improves = best is not None and split_reduces_impurity(*self._split_counts(best))
        metrics.time_spent_sec = time.perf_counter() - start

        if best is None:
            logger.debug("No split candidate among %d rows", self.n_node)
        else:
            logger.debug(
                "Best split: feature=%d threshold=%g gini=%.6f (parent %.6f) improves=%s",
                best.feature,
                best.threshold,
                best_impurity,
                parent_impurity,
                improves,
            )

        return SplitSearchResult(best, best_impurity, parent_impurity, metrics, improves)

    def _split_counts(self, candidate: SplitCandidate) -> tuple[np.ndarray, np.ndarray]:
        """Integer class counts on each side of ``candidate`` for this node."""
        go_left = self.X[self.node_rows, candidate.feature] <= candidate.threshold
        n_classes = self.classes.size
        left = np.bincount(self.class_index[go_left], minlength=n_classes)
        right = np.bincount(self.class_index[~go_left], minlength=n_classes)
        return left, right
