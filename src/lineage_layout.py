from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional, Tuple, Union

from .models import Spacing, TreeNode

DEFAULT_SPACING = Spacing(x=200.0, y=100.0)

# Where the dashboard anchors the root node on its canvas
DEFAULT_ORIGIN = (400.0, 50.0)


def _coerce_spacing(spacing: Union[Spacing, Mapping[str, Any], None]) -> Spacing:
    if spacing is None:
        return DEFAULT_SPACING
    if isinstance(spacing, Spacing):
        return spacing
    # None counts as missing
    x = spacing.get("x")
    y = spacing.get("y")
    return Spacing(
        x=float(DEFAULT_SPACING.x if x is None else x),
        y=float(DEFAULT_SPACING.y if y is None else y),
    )


def _hide(tree: TreeNode) -> TreeNode:
    return replace(
        tree,
        x=None,
        y=None,
        visible=False,
        children=[_hide(c) for c in tree.children],
    )


def layout(
    tree: TreeNode,
    x: float = 0.0,
    y: float = 0.0,
    spacing: Union[Spacing, Mapping[str, Any], None] = None,
) -> TreeNode:
    """
    Position a genealogy tree top-down. Returns a new tree; input untouched.

    - The node sits at (x, y).
    - Expanded node with n children: child i goes to
        x - (n - 1) * spacing.x / 2 + i * spacing.x,  y + spacing.y
      i.e. siblings are centred under their parent.
    - Collapsed node: its subtree stays in the structure but every
      descendant gets x = y = None and visible = False.

    Sibling subtrees are spaced by count only, not by their width, so wide
    unbalanced trees can overlap.
    """
    sp = _coerce_spacing(spacing)

    if tree.collapsed or not tree.children:
        return replace(
            tree,
            x=x,
            y=y,
            visible=True,
            children=[_hide(c) for c in tree.children],
        )

    n = len(tree.children)
    first_x = x - ((n - 1) * sp.x) / 2

    children = [
        layout(child, first_x + i * sp.x, y + sp.y, sp)
        for i, child in enumerate(tree.children)
    ]

    return replace(tree, x=x, y=y, visible=True, children=children)


def layout_bounds(tree: Optional[TreeNode]) -> Optional[Tuple[float, float, float, float]]:
    """
    (min_x, min_y, max_x, max_y) over visible positioned nodes, or None.
    """
    if tree is None:
        return None

    xs: list[float] = []
    ys: list[float] = []
    stack = [tree]
    while stack:
        t = stack.pop()
        if t.visible and t.x is not None and t.y is not None:
            xs.append(t.x)
            ys.append(t.y)
        stack.extend(t.children)

    if not xs:
        return None
    return min(xs), min(ys), max(xs), max(ys)
