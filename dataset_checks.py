import numpy as np

from tree_errors import FeatureIndexError, InvalidInputError

INT64_MAX = int(np.iinfo(np.int64).max)
LABEL_BOUND_MESSAGE = "Labels must fit in a signed 64-bit integer (at most 2**63 - 1)"


def check_dataset(X, y) -> tuple[np.ndarray, np.ndarray]:
    """Validate a labeled dataset and return float64 features and int64 labels."""
    try:
        X = np.asarray(X, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError("X must be a rectangular array of numbers") from e
    if X.ndim != 2:
        raise InvalidInputError("X must be 2D")
    if X.shape[0] == 0:
        raise InvalidInputError("Training requires at least one instance")
    if X.shape[1] == 0:
        raise InvalidInputError("Feature vectors must have at least one value")
    if not np.all(np.isfinite(X)):
        raise InvalidInputError("X contains missing or non-finite values")

    y = check_labels(y)
    if y.shape[0] != X.shape[0]:
        raise InvalidInputError("y must be a 1D array with the same number of rows as X")

    return X, y


def check_labels(y) -> np.ndarray:
    y = np.asarray(y)
    if y.ndim != 1:
        raise InvalidInputError("y must be 1D")
    if y.dtype.kind == "f":
        if not np.all(np.isfinite(y)) or np.any(np.mod(y, 1.0) != 0.0):
            raise InvalidInputError("Labels must be integers")
        if y.size and np.max(y) >= 2.0**63:
            raise InvalidInputError(LABEL_BOUND_MESSAGE)
    elif y.dtype.kind == "u":
        if y.size and int(np.max(y)) > INT64_MAX:
            raise InvalidInputError(LABEL_BOUND_MESSAGE)
    elif y.dtype.kind not in {"i", "b"}:
        # Python ints past int64 arrive here as an object array.
        raise InvalidInputError(f"Labels must be integers; {LABEL_BOUND_MESSAGE.lower()}")

    y = y.astype(np.int64)
    if np.any(y < 0):
        raise InvalidInputError("Labels must be non-negative")
    return y


def check_depth(max_depth) -> int:
    if isinstance(max_depth, bool) or not isinstance(max_depth, (int, np.integer)):
        raise InvalidInputError("max_depth must be an integer")
    if max_depth < 0:
        raise InvalidInputError("max_depth must be >= 0")
    return int(max_depth)


def as_instance(instance) -> np.ndarray:
    """Convert one prediction instance to a 1D float64 vector.

    Lengths are not checked here; traversal reports a short instance only
    when it reaches a feature the instance does not have.
    """
    try:
        x = np.asarray(instance, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise FeatureIndexError("Instance must be a 1D sequence of numbers") from e
    if x.ndim != 1:
        raise FeatureIndexError("Instance must be a 1D sequence of numbers")
    return x


def candidate_thresholds(column: np.ndarray) -> np.ndarray:
    """Midpoints between adjacent distinct values of one feature column."""
    values = np.unique(column)
    if values.size <= 1:
        return np.array([], dtype=np.float64)
    return (values[:-1] + values[1:]) * 0.5
