from __future__ import annotations

import ast

from ..passes.pass_base import AnalysisObject


class EmitContext(AnalysisObject):
    """Names used by emitted code and which module level helpers it needs.

    One context is shared by every translation emitted into the same module,
    so the helpers are defined once.
    """

    def __init__(
        self,
        params_name: str = "params",
        fns_name: str = "fns",
        ctx_name: str = "ctx",
        scratch_name: str = "_",
        encode_if_string_name: str = "encode_if_string",
        plus_op_name: str = "plus_op",
        number_text_name: str = "number_text",
    ):
        self.params_name = params_name
        self.fns_name = fns_name
        self.ctx_name = ctx_name
        self.scratch_name = scratch_name
        self.encode_if_string_name = encode_if_string_name
        self.plus_op_name = plus_op_name
        self.number_text_name = number_text_name
        self.uses_type_guard_scratch_variable = False
        self.uses_encode_if_string = False
        self.uses_plus_op = False
        self.uses_number_text = False

    def params_expr(self) -> ast.Name:
        return ast.Name(id=self.params_name, ctx=ast.Load())

    def fns_expr(self) -> ast.Name:
        return ast.Name(id=self.fns_name, ctx=ast.Load())

    def ctx_expr(self) -> ast.Name:
        return ast.Name(id=self.ctx_name, ctx=ast.Load())

    def ctx_method(self, method: str, *args: ast.expr) -> ast.Call:
        return ast.Call(
            func=ast.Attribute(value=self.ctx_expr(), attr=method, ctx=ast.Load()),
            args=list(args),
            keywords=[],
        )

    def param_lookup(self, name: str) -> ast.Subscript:
        """`params['x']`"""
        return ast.Subscript(value=self.params_expr(), slice=ast.Constant(value=name), ctx=ast.Load())

    def param_get(self, name: str) -> ast.Call:
        """`params.get('x')`, used by guards so a missing key fails the guard"""
        return ast.Call(
            func=ast.Attribute(value=self.params_expr(), attr="get", ctx=ast.Load()),
            args=[ast.Constant(value=name)],
            keywords=[],
        )

    def number_text(self, exp: ast.expr) -> ast.Call:
        self.uses_number_text = True
        return ast.Call(func=ast.Name(id=self.number_text_name, ctx=ast.Load()), args=[exp], keywords=[])

    def encode_if_string(self, exp: ast.expr) -> ast.Call:
        # encode_if_string renders numbers with number_text
        self.uses_encode_if_string = True
        self.uses_number_text = True
        return ast.Call(
            func=ast.Name(id=self.encode_if_string_name, ctx=ast.Load()),
            args=[self.ctx_expr(), exp],
            keywords=[],
        )

    def plus_op(self, lhs: ast.expr, rhs: ast.expr) -> ast.Call:
        # plus_op is defined in terms of encode_if_string
        self.uses_plus_op = True
        self.uses_encode_if_string = True
        self.uses_number_text = True
        return ast.Call(
            func=ast.Name(id=self.plus_op_name, ctx=ast.Load()),
            args=[self.ctx_expr(), lhs, rhs],
            keywords=[],
        )
