from __future__ import annotations

import ast
import typing as tp

from ..passes.pass_base import Analysis, AnalysisObject, Context, handles
from ..dsl import ir, ir_types as irT
from .context import EmitContext


class EmittedExpression(AnalysisObject):
    def __init__(self, node: ast.expr):
        self.node = node


class ExpressionEmitter(Analysis):
    """Turns a typed expression tree into a Python expression.

    Numeric operations use native operators. A `+` that is not provably
    numeric goes through the `plus_op` helper, which decides between
    addition and concatenation at runtime.
    """
    requires = (EmitContext,)
    produces = (EmittedExpression,)
    name = "emit_expression"
    # ast nodes must not be shared between parents
    enable_memoization = False

    _binops = {
        ir.Add: ast.Add,
        ir.Sub: ast.Sub,
        ir.Mul: ast.Mult,
        ir.Div: ast.Div,
    }

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        self.ectx: EmitContext = ctx.get(EmitContext)
        return EmittedExpression(self.visit(root))

    def visit(self, node: ir.Node):
        raise ValueError(f"Cannot emit {node}")

    @handles(ir.Number, ir.StringLit)
    def _(self, node: ir.ExprNode):
        return ast.Constant(value=node.value)

    @handles(ir.Var)
    def _(self, node: ir.Var):
        return self.ectx.param_lookup(node.name)

    @handles(*_binops.keys())
    def _(self, node: ir.BinaryOp):
        lhs = self.visit(node.lhs)
        rhs = self.visit(node.rhs)
        if node.is_constant or node.T is irT.Number:
            return ast.BinOp(left=lhs, op=self._binops[type(node)](), right=rhs)
        return self.ectx.plus_op(lhs, rhs)

    @handles(ir.Neg)
    def _(self, node: ir.Neg):
        return ast.UnaryOp(op=ast.USub(), operand=self.visit(node.operand))

    @handles(ir.Call)
    def _(self, node: ir.Call):
        callee = ast.Subscript(value=self.ectx.fns_expr(), slice=ast.Constant(value=node.name), ctx=ast.Load())
        args: tp.List[ast.expr] = [self.ectx.ctx_expr()]
        args.extend(self.visit(p) for p in node.params)
        return ast.Call(func=callee, args=args, keywords=[])


def emit_expression(node: ir.ExprNode, ectx: EmitContext) -> ast.expr:
    ctx = Context()
    ctx.add(ectx)
    return ExpressionEmitter()(node, ctx).node
