from __future__ import annotations

from typing import List, Optional

from .models import TreeNode


def _node_text(t: TreeNode, show_collapsed_marker: bool) -> str:
    text = t.node.label()
    if show_collapsed_marker and t.collapsed and t.children:
        text += " +"
    return text


def render_tree_ascii(
    tree: Optional[TreeNode],
    *,
    show_collapsed_marker: bool = True,
    show_hidden: bool = False,
) -> str:
    """
    Indented genealogy tree, root at the top, one batch per line:

        BST-2023-001 G1 [excellent]
        |-- BST-2023-087 G2 [excellent]
        |   `-- BST-2024-001 G3 [excellent]
        `-- BST-2023-089 G2 [good] +

    Symbols:
      |--  /  `--  = child / last child
      +            = collapsed node that has children (hidden below)

    Children of a collapsed node are not printed unless show_hidden=True.
    """
    if tree is None:
        return ""

    lines: List[str] = [_node_text(tree, show_collapsed_marker)]

    def draw(t: TreeNode, prefix: str) -> None:
        if t.collapsed and not show_hidden:
            return

        for i, child in enumerate(t.children):
            last = i == len(t.children) - 1
            connector = "`-- " if last else "|-- "
            lines.append(prefix + connector + _node_text(child, show_collapsed_marker))
            draw(child, prefix + ("    " if last else "|   "))

    draw(tree, "")
    return "\n".join(lines)
