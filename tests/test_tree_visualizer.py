import pytest

from decision_tree import DecisionTree, InternalNode, LeafNode
from tree_errors import UnresolvedNodeError
from tree_visualizer import format_tree, print_tree

SAMPLE_X = [
    [1.0, 2.0], [2.0, 3.0], [3.0, 4.0], [1.5, 2.5], [2.5, 3.5],
    [5.0, 6.0], [6.0, 7.0], [7.0, 8.0], [5.5, 6.5], [6.5, 7.5],
    [10.0, 10.0], [11.0, 11.0], [12.0, 12.0], [10.5, 10.5], [11.5, 11.5],
]
SAMPLE_Y = [0] * 5 + [1] * 5 + [2] * 5


def test_format_trained_sample_tree():
    tree = DecisionTree().train(SAMPLE_X, SAMPLE_Y, max_depth=5)

    assert format_tree(tree).splitlines() == [
        "Feature 0: <= 4",
        "Left:",
        "    Leaf: Class 0",
        "Right:",
        "    Feature 0: <= 8.5",
        "    Left:",
        "        Leaf: Class 1",
        "    Right:",
        "        Leaf: Class 2",
    ]


def test_format_node_with_custom_indent():
    node = InternalNode(feature=1, threshold=0.25, left=LeafNode(3), right=LeafNode(7))

    assert format_tree(node, indent=2) == "\n".join(
        [
            "Feature 1: <= 0.25",
            "Left:",
            "  Leaf: Class 3",
            "Right:",
            "  Leaf: Class 7",
        ]
    )


def test_print_tree_writes_leaf(capsys):
    print_tree(LeafNode(4))
    assert capsys.readouterr().out == "Leaf: Class 4\n"


def test_untrained_tree_cannot_be_rendered():
    with pytest.raises(UnresolvedNodeError):
        format_tree(DecisionTree())


def test_rendering_does_not_change_tree():
    tree = DecisionTree().train(SAMPLE_X, SAMPLE_Y, max_depth=5)
    before = tree.root
    format_tree(tree)
    assert tree.root is before
    assert tree.predict([[4.0, 5.0]]).tolist() == [0]


def test_thresholds_render_at_full_precision():
    node = InternalNode(feature=0, threshold=1.2345678, left=LeafNode(0), right=LeafNode(1))
    assert format_tree(node).splitlines()[0] == "Feature 0: <= 1.2345678"

    whole = InternalNode(feature=2, threshold=-3.0, left=LeafNode(0), right=LeafNode(1))
    assert format_tree(whole).splitlines()[0] == "Feature 2: <= -3"
