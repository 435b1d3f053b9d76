from __future__ import annotations

import typing as tp

from ..pass_base import Transform, Context, handles
from ...dsl import ir, ir_types as irT
from ...errors import ConstantFoldError


def number_text(value: tp.Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_literal(node: ir.Node) -> bool:
    return isinstance(node, (ir.Number, ir.StringLit))


def _literal_text(node: tp.Union[ir.Number, ir.StringLit]) -> str:
    if isinstance(node, ir.Number):
        return number_text(node.value)
    return node.value


def _make_literal(value: tp.Union[int, float, str], pos: ir.Pos) -> ir.ExprNode:
    if isinstance(value, str):
        return ir.StringLit(value=value, pos=pos, T=irT.String, const=True)
    return ir.Number(value=value, pos=pos, T=irT.Number, const=True)


def _numeric(op: str, lhs, rhs):
    if isinstance(lhs, str) or isinstance(rhs, str):
        raise ConstantFoldError(
            "Could not constant fold expression. "
            f"{op.capitalize()} operation between {type(lhs).__name__} and {type(rhs).__name__}. "
            "Only allowed between 2 numbers."
        )


def _divide(lhs, rhs):
    _numeric("divide", lhs, rhs)
    if rhs == 0:
        raise ConstantFoldError("Could not constant fold expression. Division by zero.")
    q = lhs / rhs
    if isinstance(lhs, int) and isinstance(rhs, int) and q.is_integer():
        return int(q)
    return q


def _plus(lhs, rhs):
    if isinstance(lhs, str) or isinstance(rhs, str):
        lhs = lhs if isinstance(lhs, str) else number_text(lhs)
        rhs = rhs if isinstance(rhs, str) else number_text(rhs)
    return lhs + rhs


def _minus(lhs, rhs):
    _numeric("minus", lhs, rhs)
    return lhs - rhs


def _multiply(lhs, rhs):
    _numeric("multiply", lhs, rhs)
    return lhs * rhs


class ConstFoldPass(Transform):
    """Constant Folding
    - Binary and unary operations over literals fold to a literal
    - `(x * c1) * c2` folds to `x * (c1 * c2)`
    - Function calls only fold their arguments
    - In a text, constant `{{ }}` fragments are merged with neighbouring
      literal text, so an all-constant text becomes one Literal

    Runs on typed trees. Arithmetic on strings is rejected with a
    ConstantFoldError; type checking rules it out for trees built by the
    TypedTreePass. Division by a constant zero is a ConstantFoldError too,
    the emitted code raises ZeroDivisionError when the divisor is only known
    at runtime.
    """

    requires: tp.Tuple[type, ...] = ()
    produces: tp.Tuple[type, ...] = ()
    name = "const_fold"

    def run(self, root: ir.Node, ctx: Context):
        return self.visit(root)

    _binops = {
        ir.Add: _plus,
        ir.Sub: _minus,
        ir.Mul: _multiply,
        ir.Div: _divide,
    }

    @handles(ir.Neg)
    def _(self, node: ir.Neg) -> ir.Node:
        operand = self.visit(node.operand)
        if isinstance(operand, ir.StringLit):
            raise ConstantFoldError(
                "Could not constant fold expression. "
                "Unary minus on a string. This should have been caught during type inference."
            )
        if isinstance(operand, ir.Number):
            return _make_literal(-operand.value, node.pos)
        return node.replace(operand)

    @handles(*_binops.keys())
    def _(self, node: ir.BinaryOp) -> ir.Node:
        lhs, rhs = self.visit_children(node)
        if _is_literal(lhs) and _is_literal(rhs):
            return _make_literal(self._binops[type(node)](lhs.value, rhs.value), node.pos)
        # (x * c1) * c2 => x * (c1 * c2)
        if (
            isinstance(node, ir.Mul)
            and isinstance(rhs, ir.Number)
            and isinstance(lhs, ir.Mul)
            and isinstance(lhs.rhs, ir.Number)
        ):
            factor = _make_literal(lhs.rhs.value * rhs.value, lhs.rhs.pos.combine(rhs.pos))
            return node.replace(lhs.lhs, factor)
        return node.replace(lhs, rhs)

    @handles(ir.TextRoot)
    def _(self, node: ir.TextRoot) -> ir.Node:
        nodes: tp.List[ir.TextNode] = []
        # Index into `nodes` of the literal that following constants merge into
        current: tp.Optional[int] = None
        for child in self.visit_children(node):
            if isinstance(child, ir.TextExpr) and _is_literal(child.expr):
                text, pos = _literal_text(child.expr), child.pos
            elif isinstance(child, ir.Literal) and current is None:
                nodes.append(child)
                current = len(nodes) - 1
                continue
            elif isinstance(child, ir.Literal):
                text, pos = child.value, child.pos
            else:
                nodes.append(child)
                current = None
                continue
            if current is None:
                nodes.append(ir.Literal(value=text, pos=pos, T=irT.String))
                current = len(nodes) - 1
            else:
                prev = nodes[current]
                nodes[current] = prev.replace(value=prev.value + text, pos=prev.pos.combine(pos))
        return ir.TextRoot(*nodes, input=node.input)


def fold_expression(node: ir.ExprNode) -> ir.ExprNode:
    return ConstFoldPass()(node, Context())


def fold_text(root: ir.TextRoot) -> ir.TextRoot:
    return ConstFoldPass()(root, Context())
