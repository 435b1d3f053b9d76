from __future__ import annotations

import ast
import typing as tp

from .context import EmitContext
from .helpers import helper_functions
from .translation import EmittedTranslation


def _assign(name: str, value: ast.expr) -> ast.Assign:
    return ast.Assign(targets=[ast.Name(id=name, ctx=ast.Store())], value=value)


def translation_module(emitted: EmittedTranslation, ectx: EmitContext, name: str = "translation") -> ast.Module:
    """A module defining `name`, as a function or a string constant, and the
    helpers it uses."""
    body: tp.List[ast.stmt] = list(helper_functions(ectx))
    if emitted.is_constant:
        body.append(_assign(name, emitted.node))
    else:
        body.append(emitted.node)
    return ast.fix_missing_locations(ast.Module(body=body, type_ignores=[]))


def translations_module(
    emitted: tp.Mapping[str, EmittedTranslation],
    ectx: EmitContext,
    variable: str = "translations",
) -> ast.Module:
    """A module with every emitted translation and a `translations` dict
    mapping each key to its function or constant.

    All translations must have been emitted with `ectx` so the helpers they
    use are known.
    """
    body: tp.List[ast.stmt] = list(helper_functions(ectx))
    keys: tp.List[ast.expr] = []
    values: tp.List[ast.expr] = []
    for key, e in emitted.items():
        keys.append(ast.Constant(value=key))
        if e.is_constant:
            values.append(e.node)
        else:
            body.append(e.node)
            values.append(ast.Name(id=e.node.name, ctx=ast.Load()))
    body.append(_assign(variable, ast.Dict(keys=keys, values=values)))
    return ast.fix_missing_locations(ast.Module(body=body, type_ignores=[]))
