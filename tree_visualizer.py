from decision_tree import DecisionTree, InternalNode, LeafNode
from tree_errors import UnresolvedNodeError


def _format_threshold(threshold: float) -> str:
    # Shortest round-tripping repr, with whole numbers printed as "4".
    text = repr(float(threshold))
    return text[:-2] if text.endswith(".0") else text


def _tree_lines(node, depth: int, indent: int) -> list[str]:
    pad = " " * (depth * indent)
    if isinstance(node, LeafNode):
        return [f"{pad}Leaf: Class {node.label}"]
    if not isinstance(node, InternalNode):
        raise UnresolvedNodeError(f"Cannot render undecided node: {node!r}")

    lines = [f"{pad}Feature {node.feature}: <= {_format_threshold(node.threshold)}", f"{pad}Left:"]
    lines.extend(_tree_lines(node.left, depth + 1, indent))
    lines.append(f"{pad}Right:")
    lines.extend(_tree_lines(node.right, depth + 1, indent))
    return lines


def format_tree(tree, indent: int = 4) -> str:
    """Render a trained tree (or any node) as indented text."""
    node = tree.root if isinstance(tree, DecisionTree) else tree
    if node is None:
        raise UnresolvedNodeError("Cannot render a tree that has not been trained")
    return "\n".join(_tree_lines(node, 0, indent))


def print_tree(tree, indent: int = 4) -> None:
    print(format_tree(tree, indent=indent))
