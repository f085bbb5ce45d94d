import numpy as np


def class_counts(labels: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Distinct labels in ascending order and how often each occurs."""
    labels = np.asarray(labels, dtype=np.int64)
    return np.unique(labels, return_counts=True)


def gini_from_counts(counts: np.ndarray) -> np.ndarray:
    """Gini impurity for class-count vectors along the last axis.

    Empty groups (all counts zero) have impurity 0.
    """
    counts = np.asarray(counts, dtype=np.float64)
    totals = counts.sum(axis=-1)
    safe_totals = np.where(totals > 0, totals, 1.0)
    p = counts / safe_totals[..., None]
    return np.where(totals > 0, 1.0 - np.sum(p * p, axis=-1), 0.0)


def calculate_gini_impurity(labels: np.ndarray) -> float:
    _, counts = class_counts(labels)
    if counts.size == 0:
        return 0.0
    return float(gini_from_counts(counts))


def split_reduces_impurity(left_counts, right_counts) -> bool:
    """Exact test that a split's weighted Gini is strictly below the parent's.

    With ``A = sum(cL**2)``, ``B = sum(cR**2)`` and ``C = sum(c**2)`` over the
    parent counts, weighted < parent iff ``(A * nR + B * nL) * n > C * nL * nR``.
    Evaluated on Python ints so ties stay ties.
    """
    left = [int(c) for c in left_counts]
    right = [int(c) for c in right_counts]
    n_left = sum(left)
    n_right = sum(right)
    if n_left == 0 or n_right == 0:
        return False

    n = n_left + n_right
    sq_left = sum(c * c for c in left)
    sq_right = sum(c * c for c in right)
    sq_parent = sum((l + r) * (l + r) for l, r in zip(left, right))
    return (sq_left * n_right + sq_right * n_left) * n > sq_parent * n_left * n_right


def majority_label(labels: np.ndarray) -> int:
    """Most frequent label; the smallest label wins a tie."""
    values, counts = class_counts(labels)
    if values.size == 0:
        raise ValueError("majority_label requires at least one label")
    # np.unique sorts, and argmax returns the first maximum.
    return int(values[np.argmax(counts)])


def all_same(labels: np.ndarray) -> bool:
    labels = np.asarray(labels)
    return bool(labels.size == 0 or np.all(labels == labels[0]))
