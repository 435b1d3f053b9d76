from __future__ import annotations

import ast
import typing as tp

from .context import EmitContext


# Same rendering as the constant folder's `number_text`, so a folded number
# and one computed at runtime print alike.
_NUMBER_TEXT = """
def {name}(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
"""

# Re-encodes plain values, passes values a function already marked safe
# through without escaping them twice.
_ENCODE_IF_STRING = """
def {name}({ctx}, value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return {ctx}.encode({number_text}(value))
    if not {ctx}.is_safe_string(value):
        return {ctx}.encode(str(value))
    return {ctx}.convert_safe_string(value)
"""

# `+` whose operands may be numbers or strings at runtime
_PLUS_OP = """
def {name}({ctx}, lhs, rhs):
    if isinstance(lhs, (int, float)) and isinstance(rhs, (int, float)):
        return lhs + rhs
    return {ctx}.make_safe_string({encode_if_string}({ctx}, lhs) + {encode_if_string}({ctx}, rhs))
"""


def number_text_function(ectx: EmitContext) -> ast.FunctionDef:
    return ast.parse(_NUMBER_TEXT.format(name=ectx.number_text_name)).body[0]


def encode_if_string_function(ectx: EmitContext) -> ast.FunctionDef:
    src = _ENCODE_IF_STRING.format(
        name=ectx.encode_if_string_name,
        ctx=ectx.ctx_name,
        number_text=ectx.number_text_name,
    )
    return ast.parse(src).body[0]


def plus_op_function(ectx: EmitContext) -> ast.FunctionDef:
    src = _PLUS_OP.format(
        name=ectx.plus_op_name,
        ctx=ectx.ctx_name,
        encode_if_string=ectx.encode_if_string_name,
    )
    return ast.parse(src).body[0]


def helper_functions(ectx: EmitContext) -> tp.List[ast.FunctionDef]:
    """The helpers the code emitted with `ectx` so far refers to."""
    helpers = []
    if ectx.uses_number_text:
        helpers.append(number_text_function(ectx))
    if ectx.uses_encode_if_string:
        helpers.append(encode_if_string_function(ectx))
    if ectx.uses_plus_op:
        helpers.append(plus_op_function(ectx))
    return helpers
