from __future__ import annotations

from dataclasses import dataclass, field
import logging

import numpy as np

from dataset_checks import as_instance, check_dataset, check_depth
from gini import all_same, majority_label
from gini_split_search import GiniSplitSearch, SplitCandidate
from tree_errors import FeatureIndexError, UnresolvedNodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeafNode:
    label: int


@dataclass(frozen=True)
class InternalNode:
    feature: int
    threshold: float
    left: Node
    right: Node


Node = LeafNode | InternalNode


@dataclass
class TreeBuildMetrics:
    nodes_visited: int = 0
    nodes_split: int = 0
    leaves: int = 0
    candidates_evaluated: int = 0
    split_search_time_sec: float = 0.0
    node_metrics: list[dict] = field(default_factory=list)


@dataclass
class _GrowingNode:
    rows: np.ndarray
    depth: int
    fallback_label: int
    label: int | None = None
    split: SplitCandidate | None = None
    left: _GrowingNode | None = None
    right: _GrowingNode | None = None


class TreeBuilder:
    """Greedy CART construction over a validated dataset.

    Nodes hold row indices into ``X``/``y`` while growing and are frozen into
    ``LeafNode``/``InternalNode`` once the whole tree is decided.
    """

    def __init__(self, X: np.ndarray, y: np.ndarray) -> None:
        self.X = X
        self.y = y
        self.n_samples = self.X.shape[0]
        self.metrics = TreeBuildMetrics()

    def _partition_rows(
        self, rows: np.ndarray, split: SplitCandidate
    ) -> tuple[np.ndarray, np.ndarray]:
        left_mask = self.X[rows, split.feature] <= split.threshold
        return rows[left_mask], rows[~left_mask]

    def _decide(self, node: _GrowingNode, max_depth: int) -> None:
        self.metrics.nodes_visited += 1

        if node.rows.size == 0:
            # Empty side of a split still predicts the parent's majority.
            node.label = node.fallback_label
            return

        labels = self.y[node.rows]
        majority = majority_label(labels)
        if node.depth >= max_depth or all_same(labels):
            node.label = majority
            return

        result = GiniSplitSearch(node.rows, self.X, self.y).search()
        self.metrics.candidates_evaluated += result.metrics.candidates_evaluated
        self.metrics.split_search_time_sec += result.metrics.time_spent_sec
        self.metrics.node_metrics.append(
            {
                "depth": node.depth,
                "node_size": int(node.rows.size),
                "candidates": result.metrics.candidates_evaluated,
                "gini": result.parent_impurity,
                "gain": result.gain,
            }
        )

        if result.candidate is None or not result.improves:
            node.label = majority
            return

        left_rows, right_rows = self._partition_rows(node.rows, result.candidate)
        node.split = result.candidate
        node.left = _GrowingNode(rows=left_rows, depth=node.depth + 1, fallback_label=majority)
        node.right = _GrowingNode(rows=right_rows, depth=node.depth + 1, fallback_label=majority)
        self.metrics.nodes_split += 1

    def build_tree(self, max_depth: int, rows: np.ndarray | None = None) -> Node:
        if rows is None:
            rows = np.arange(self.n_samples, dtype=np.int64)
        else:
            rows = np.asarray(rows, dtype=np.int64)

        root = _GrowingNode(rows=rows, depth=0, fallback_label=majority_label(self.y[rows]))
        stack = [root]
        grown: list[_GrowingNode] = []

        while stack:
            node = stack.pop()
            self._decide(node, max_depth)
            grown.append(node)
            if node.split is not None:
                stack.append(node.right)
                stack.append(node.left)

        # Children are always grown after their parent, so freezing in
        # reverse order sees every child before the node that owns it.
        frozen: dict[int, Node] = {}
        for node in reversed(grown):
            if node.split is None:
                self.metrics.leaves += 1
                frozen[id(node)] = LeafNode(label=int(node.label))
            else:
                frozen[id(node)] = InternalNode(
                    feature=node.split.feature,
                    threshold=node.split.threshold,
                    left=frozen.pop(id(node.left)),
                    right=frozen.pop(id(node.right)),
                )

        logger.debug(
            "Built tree: %d nodes, %d splits, %d leaves",
            self.metrics.nodes_visited,
            self.metrics.nodes_split,
            self.metrics.leaves,
        )
        return frozen[id(root)]


class DecisionTree:
    """Binary classification tree trained with CART and Gini impurity."""

    def __init__(self) -> None:
        self.root: Node | None = None
        self.n_features: int | None = None
        self.metrics = TreeBuildMetrics()

    @property
    def is_trained(self) -> bool:
        return self.root is not None

    def train(self, X, y, max_depth: int) -> "DecisionTree":
        X, y = check_dataset(X, y)
        return self._train_checked(X, y, check_depth(max_depth))

    def _train_checked(self, X: np.ndarray, y: np.ndarray, max_depth: int) -> "DecisionTree":
        builder = TreeBuilder(X, y)
        self.root = builder.build_tree(max_depth)
        self.n_features = int(X.shape[1])
        self.metrics = builder.metrics
        return self

    def predict_instance(self, instance) -> int:
        node = self.root
        if node is None:
            raise UnresolvedNodeError("Model must be fitted before prediction")

        x = as_instance(instance)
        while not isinstance(node, LeafNode):
            if not isinstance(node, InternalNode):
                raise UnresolvedNodeError(f"Traversal reached an undecided node: {node!r}")
            if node.feature >= x.shape[0]:
                raise FeatureIndexError(
                    f"Instance has {x.shape[0]} features but the tree splits on feature {node.feature}"
                )
            node = node.left if x[node.feature] <= node.threshold else node.right

        return node.label

    def predict(self, X) -> np.ndarray:
        if self.root is None:
            raise UnresolvedNodeError("Model must be fitted before prediction")

        preds = np.zeros(len(X), dtype=np.int64)
        for i, instance in enumerate(X):
            preds[i] = self.predict_instance(instance)
        return preds

    def depth(self) -> int:
        """Number of splits on the longest root-to-leaf path."""
        if self.root is None:
            raise UnresolvedNodeError("Model must be fitted before inspecting it")

        deepest = 0
        stack = [(self.root, 0)]
        while stack:
            node, depth = stack.pop()
            if isinstance(node, InternalNode):
                stack.append((node.left, depth + 1))
                stack.append((node.right, depth + 1))
            else:
                deepest = max(deepest, depth)
        return deepest

    def n_leaves(self) -> int:
        if self.root is None:
            raise UnresolvedNodeError("Model must be fitted before inspecting it")

        count = 0
        stack = [self.root]
        while stack:
            node = stack.pop()
            if isinstance(node, InternalNode):
                stack.append(node.left)
                stack.append(node.right)
            else:
                count += 1
        return count
