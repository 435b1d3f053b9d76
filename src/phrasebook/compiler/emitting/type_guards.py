from __future__ import annotations

import ast
import typing as tp

from ..dsl import ir_types as irT
from ..dsl.ir_types import InferredType
from ..dsl.type_map import TypeMap
from .context import EmitContext


def _not(exp: ast.expr) -> ast.UnaryOp:
    return ast.UnaryOp(op=ast.Not(), operand=exp)


def _isinstance(exp: ast.expr, *types: str) -> ast.Call:
    if len(types) == 1:
        classinfo: ast.expr = ast.Name(id=types[0], ctx=ast.Load())
    else:
        classinfo = ast.Tuple(elts=[ast.Name(id=t, ctx=ast.Load()) for t in types], ctx=ast.Load())
    return ast.Call(func=ast.Name(id="isinstance", ctx=ast.Load()), args=[exp, classinfo], keywords=[])


def _raise_type_error(message: str) -> ast.Raise:
    exc = ast.Call(func=ast.Name(id="TypeError", ctx=ast.Load()), args=[ast.Constant(value=message)], keywords=[])
    return ast.Raise(exc=exc, cause=None)


def negative_type_test(ectx: EmitContext, var_name: str, T: InferredType) -> ast.expr:
    """Expression that is true when `params[var_name]` does NOT have type T."""
    if T is irT.Unknown:
        # Only presence is checked
        return ast.Compare(
            left=ast.Constant(value=var_name),
            ops=[ast.NotIn()],
            comparators=[ectx.params_expr()],
        )
    if T in (irT.String, irT.Enum):
        # An enum is a plain string at runtime
        return ast.BoolOp(op=ast.And(), values=[
            _not(_isinstance(ectx.param_get(var_name), "str")),
            _not(ectx.ctx_method("is_safe_string", ectx.param_get(var_name))),
        ])
    if T is irT.Number:
        # bool is an int subclass but not a number here
        return ast.BoolOp(op=ast.Or(), values=[
            _not(_isinstance(ectx.param_get(var_name), "int", "float")),
            _isinstance(ectx.param_get(var_name), "bool"),
        ])
    if T is irT.NumberOrString:
        ectx.uses_type_guard_scratch_variable = True
        scratch = ast.NamedExpr(
            target=ast.Name(id=ectx.scratch_name, ctx=ast.Store()),
            value=ectx.param_get(var_name),
        )
        return _not(ast.BoolOp(op=ast.Or(), values=[
            ast.BoolOp(op=ast.And(), values=[
                _isinstance(scratch, "str", "int", "float"),
                _not(_isinstance(ast.Name(id=ectx.scratch_name, ctx=ast.Load()), "bool")),
            ]),
            ectx.ctx_method("is_safe_string", ast.Name(id=ectx.scratch_name, ctx=ast.Load())),
        ]))
    if T is irT.Gender:
        return ast.Compare(
            left=ectx.param_get(var_name),
            ops=[ast.NotIn()],
            comparators=[ast.Tuple(elts=[ast.Constant(value=g) for g in ("M", "F", "N")], ctx=ast.Load())],
        )
    if T is irT.Error:
        raise ValueError("Cannot generate type guards for an error type!")
    raise ValueError(f"Unknown type: {T}")


def type_guard_statement(ectx: EmitContext, var_name: str, T: InferredType) -> ast.If:
    return ast.If(
        test=negative_type_test(ectx, var_name, T),
        body=[_raise_type_error(f"Variable {var_name} must be of type {T}")],
        orelse=[],
    )


def function_guard_statement(ectx: EmitContext, function_name: str) -> ast.If:
    fn = ast.Call(
        func=ast.Attribute(value=ectx.fns_expr(), attr="get", ctx=ast.Load()),
        args=[ast.Constant(value=function_name)],
        keywords=[],
    )
    is_callable = ast.Call(func=ast.Name(id="callable", ctx=ast.Load()), args=[fn], keywords=[])
    return ast.If(
        test=_not(is_callable),
        body=[_raise_type_error(f"Translation requires function {function_name} to exist")],
        orelse=[],
    )


def type_guard_statements(type_map: TypeMap, ectx: EmitContext) -> tp.List[ast.stmt]:
    """One guard per variable then one per function, in first-use order."""
    result: tp.List[ast.stmt] = []
    for var_name in type_map.variables():
        result.append(type_guard_statement(ectx, var_name, type_map.get_variable_type(var_name)))
    for function_name in type_map.function_names():
        result.append(function_guard_statement(ectx, function_name))
    return result
