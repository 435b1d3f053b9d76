from __future__ import annotations

import logging

from ..pass_base import Analysis, AnalysisObject, Context
from ...dsl import ir

logger = logging.getLogger(__name__)


class PrintedTree(AnalysisObject):
    def __init__(self, text: str):
        self.text = text


class TreePrinterPass(Analysis):
    """Render a tree as text.

    - One node per line
    - A vertical line segment at each indentation level ("│   ")
    - Each typed node is annotated with its type, constant expressions with
      a trailing `const`
    """
    requires = ()
    produces = (PrintedTree,)
    name = "tree_printer"
    enable_memoization = False

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        self.depth = 0
        rendered = self.visit(root)
        logger.debug("tree:\n%s", rendered)
        return PrintedTree(rendered)

    def visit(self, node: ir.Node):
        fields = {
            k: v for k, v in node.field_dict.items()
            if k not in ("pos", "T", "const", "input") and v is not None
        }
        fstr = ", ".join(f"{k}={v!r}" for k, v in fields.items())
        line = "│   " * self.depth + f"{node.__class__.__name__}"
        if fstr:
            line += f"[{fstr}]"
        T = getattr(node, "T", None)
        if T is not None:
            line += f": {T}"
        if getattr(node, "const", None):
            line += " const"
        self.depth += 1
        children_strs = self.visit_children(node)
        self.depth -= 1
        return "\n".join((line, *children_strs))
