class InvalidInputError(ValueError):
    """Malformed training data or depth limit."""


class FeatureIndexError(IndexError):
    """Prediction instance too short for a feature referenced by the tree."""


class UnresolvedNodeError(RuntimeError):
    """Traversal reached a node that was never decided."""
