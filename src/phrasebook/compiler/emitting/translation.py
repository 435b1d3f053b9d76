from __future__ import annotations

import ast
import logging
import sys
import typing as tp

from ..passes.pass_base import Analysis, AnalysisObject, Context
from ..passes.envobj import TypeMapObj
from ..dsl import ir, ir_types as irT
from .context import EmitContext
from .constraint import emit_constrained_translation
from .expression import emit_expression
from .type_guards import type_guard_statements

logger = logging.getLogger(__name__)


class EmittedTranslation(AnalysisObject):
    """`node` is an `ast.Constant` for a translation without any runtime
    dependency, otherwise an `ast.FunctionDef` taking `(params, fns, ctx)`."""
    def __init__(self, node: tp.Union[ast.Constant, ast.FunctionDef]):
        self.node = node

    @property
    def is_constant(self) -> bool:
        return isinstance(self.node, ast.Constant)


def emit_text_expression(root: ir.TextRoot, ectx: EmitContext) -> ast.expr:
    """The expression rendering a typed text.

    Runs of literal text and numbers are concatenated natively and encoded
    with one `ctx.encode` call. Everything else may already be a safe string
    and is wrapped on its own in `encode_if_string`.
    """
    # (expression, groupable)
    parts: tp.List[tp.Tuple[ast.expr, bool]] = []
    for node in root.nodes:
        if isinstance(node, ir.Literal):
            parts.append((ast.Constant(value=node.value), True))
        elif isinstance(node, ir.TextVar):
            exp = ectx.param_lookup(node.name)
            parts.append((ectx.number_text(exp), True) if node.T is irT.Number else (exp, False))
        elif isinstance(node, ir.TextExpr):
            exp = emit_expression(node.expr, ectx)
            parts.append((ectx.number_text(exp), True) if node.expr.T is irT.Number else (exp, False))
        else:
            raise ValueError(f"Unknown node type: {node}")

    encoded: tp.List[ast.expr] = []
    group: tp.Optional[ast.expr] = None
    for exp, groupable in parts:
        if groupable:
            group = exp if group is None else ast.BinOp(left=group, op=ast.Add(), right=exp)
            continue
        if group is not None:
            encoded.append(ectx.ctx_method("encode", group))
            group = None
        encoded.append(ectx.encode_if_string(exp))
    if group is not None:
        encoded.append(ectx.ctx_method("encode", group))

    if not encoded:
        return ast.Constant(value="")
    result = encoded[0]
    for exp in encoded[1:]:
        result = ast.BinOp(left=result, op=ast.Add(), right=exp)
    return result


def function_def(name: str, statements: tp.List[ast.stmt], ectx: EmitContext) -> ast.FunctionDef:
    args = ast.arguments(
        posonlyargs=[],
        args=[ast.arg(arg=n) for n in (ectx.params_name, ectx.fns_name, ectx.ctx_name)],
        vararg=None,
        kwonlyargs=[],
        kw_defaults=[],
        kwarg=None,
        defaults=[],
    )
    kwargs = {}
    if sys.version_info >= (3, 12):
        kwargs["type_params"] = []
    fn = ast.FunctionDef(name=name, args=args, body=statements, decorator_list=[], returns=None, **kwargs)
    return ast.fix_missing_locations(fn)


def _no_match() -> ast.Raise:
    exc = ast.Call(
        func=ast.Name(id="ValueError", ctx=ast.Load()),
        args=[ast.Constant(value="No translation matched the parameters")],
        keywords=[],
    )
    return ast.Raise(exc=exc, cause=None)


class EmitTranslationPass(Analysis):
    """Emits a typed, folded translation.

    A text that folded down to a single literal (or to nothing) is emitted as
    a constant. Anything else becomes a function that first checks the
    runtime types of its parameters and functions, then returns the encoded
    text. Rules are tried in order; when no rule matches unconditionally the
    function ends by raising.
    """
    requires = (TypeMapObj, EmitContext)
    produces = (EmittedTranslation,)
    name = "emit_translation"
    enable_memoization = False

    def __init__(self, function_name: str = "translation"):
        self.function_name = function_name

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        self.type_map = ctx.get(TypeMapObj).type_map
        self.ectx: EmitContext = ctx.get(EmitContext)
        if isinstance(root, ir.TextRoot):
            node = self.emit_simple(root)
        elif isinstance(root, ir.RuleSet):
            node = self.emit_constrained(root)
        else:
            raise ValueError(f"Cannot emit {type(root).__name__}, expected a TextRoot or RuleSet")
        logger.debug("emitted %s", self.function_name)
        return EmittedTranslation(node)

    def emit_simple(self, root: ir.TextRoot):
        nodes = root.nodes
        if len(nodes) == 0:
            return ast.Constant(value="")
        if len(nodes) == 1 and isinstance(nodes[0], ir.Literal):
            return ast.Constant(value=nodes[0].value)
        statements = type_guard_statements(self.type_map, self.ectx)
        statements.append(ast.Return(value=emit_text_expression(root, self.ectx)))
        return function_def(self.function_name, statements, self.ectx)

    def emit_constrained(self, root: ir.RuleSet):
        if len(root.rules) == 0:
            raise ValueError("No constraints found")
        statements = type_guard_statements(self.type_map, self.ectx)
        unconditionally_returned = False
        for rule in root.rules:
            expr = emit_text_expression(rule.translation, self.ectx)
            stmt = emit_constrained_translation(rule.constraints, expr, self.ectx)
            if isinstance(stmt, ast.Return):
                unconditionally_returned = True
            statements.append(stmt)
        if not unconditionally_returned:
            statements.append(_no_match())
        return function_def(self.function_name, statements, self.ectx)
