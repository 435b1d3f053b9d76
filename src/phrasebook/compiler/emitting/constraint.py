from __future__ import annotations

import ast
import typing as tp

from ..dsl import ir
from .context import EmitContext

_COMPARE_OPS = {
    "=": ast.Eq,
    "!=": ast.NotEq,
    "<": ast.Lt,
    "<=": ast.LtE,
    ">": ast.Gt,
    ">=": ast.GtE,
}


def constraint_test(constraint: ir.Constraint, ectx: EmitContext) -> tp.Optional[ast.expr]:
    # `!x` generates no code
    if isinstance(constraint, ir.Ignore):
        return None
    if isinstance(constraint, (ir.Equality, ir.Inequality)):
        return ast.Compare(
            left=ectx.param_lookup(constraint.name),
            ops=[_COMPARE_OPS[constraint.op]()],
            comparators=[ast.Constant(value=constraint.rhs.value)],
        )
    raise ValueError(f"Unknown constraint: {constraint}")


def emit_constrained_translation(constraints: ir.ConstraintRoot, expr: ast.expr, ectx: EmitContext) -> ast.stmt:
    """`if <tests>: return <expr>`, or a bare `return <expr>` for a rule
    without tests."""
    tests = [t for t in (constraint_test(c, ectx) for c in constraints.nodes) if t is not None]
    ret = ast.Return(value=expr)
    if not tests:
        return ret
    test = tests[0] if len(tests) == 1 else ast.BoolOp(op=ast.And(), values=tests)
    return ast.If(test=test, body=[ret], orelse=[])
