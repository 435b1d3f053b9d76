from __future__ import annotations

from ..pass_base import Transform, Context
from ...dsl import ir


def reposition(enclosing: ir.Pos, pos: ir.Pos) -> ir.Pos:
    """Map `pos`, relative to an expression parsed on its own, into the
    coordinates of the text it was embedded in at `enclosing`.

    Lines are 1-indexed, so line 1 of the expression is `enclosing.first_line`.
    Columns only shift while still on that first line.
    """
    return ir.Pos(
        first_line=enclosing.first_line + pos.first_line - 1,
        first_column=pos.first_column if pos.first_line != 1 else enclosing.first_column + pos.first_column,
        last_line=enclosing.first_line + pos.last_line - 1,
        last_column=pos.last_column if pos.last_line != 1 else enclosing.first_column + pos.last_column,
    )


class RepositionPass(Transform):
    """Rewrites the position of every node in a tree with `reposition`."""
    requires = ()
    produces = ()
    name = "reposition"

    def __init__(self, enclosing: ir.Pos):
        self.enclosing = enclosing

    def run(self, root: ir.Node, ctx: Context) -> ir.Node:
        return self.visit(root)

    def visit(self, node: ir.Node) -> ir.Node:
        new_children = self.visit_children(node)
        if "pos" not in node._fields:
            return node.replace(*new_children)
        return node.replace(*new_children, pos=reposition(self.enclosing, node.pos))
