import ast

import pytest

from phrasebook.compiler.dsl import ir
from phrasebook.compiler.emitting import EmitContext, translation_module
from phrasebook.compiler.passes.utils import compile_translation
from phrasebook.runtime import HtmlContext, SafeString, load_translations


def load(emitted, ectx):
    return load_translations(translation_module(emitted, ectx), variable="translation")


def n_rule(op, value, *nodes):
    cls = ir.Equality if op in ("=", "!=") else ir.Inequality
    return ir.Rule(
        ir.ConstraintRoot(cls(ir.Ident(name="n"), ir.NumberValue(value=value), op=op)),
        ir.TextRoot(*nodes),
    )


def plural():
    return ir.RuleSet(
        n_rule("=", 0, ir.Literal(value="You have nothing")),
        n_rule("=", 1, ir.Literal(value="You have one item")),
        n_rule(">", 1, ir.Literal(value="You have "), ir.TextVar(name="n"), ir.Literal(value=" items")),
    )


def test_constant_translation():
    emitted = compile_translation(ir.TextRoot(ir.Literal(value="Some translation")))
    assert emitted.is_constant
    assert emitted.node.value == "Some translation"


def test_constant_folded_translation():
    root = ir.TextRoot(
        ir.Literal(value="Here's one million: "),
        ir.TextExpr(ir.Mul(ir.Mul(ir.Number(value=1), ir.Number(value=1000)), ir.Number(value=1000))),
    )
    emitted = compile_translation(root)
    assert emitted.is_constant
    assert emitted.node.value == "Here's one million: 1000000"


def test_empty_translation():
    emitted = compile_translation(ir.TextRoot())
    assert emitted.is_constant
    assert emitted.node.value == ""


def test_constrained_translation_shape():
    emitted = compile_translation(plural(), name="items")
    fn = emitted.node
    assert isinstance(fn, ast.FunctionDef)
    assert fn.name == "items"
    assert [a.arg for a in fn.args.args] == ["params", "fns", "ctx"]
    guard, *rules, fallback = fn.body
    assert ast.unparse(guard.test) == "not isinstance(params.get('n'), (int, float)) or isinstance(params.get('n'), bool)"
    assert [ast.unparse(r.test) for r in rules] == ["params['n'] == 0", "params['n'] == 1", "params['n'] > 1"]
    assert all(isinstance(r.body[0], ast.Return) for r in rules)
    assert ast.unparse(fallback) == "raise ValueError('No translation matched the parameters')"


def test_constrained_translation_runs():
    ectx = EmitContext()
    fn = load(compile_translation(plural(), ctx=ectx), ectx)
    ctx = HtmlContext()
    assert fn({"n": 0}, {}, ctx) == "You have nothing"
    assert fn({"n": 1}, {}, ctx) == "You have one item"
    assert fn({"n": 5}, {}, ctx) == "You have 5 items"
    with pytest.raises(ValueError, match="No translation matched the parameters"):
        fn({"n": -1}, {}, ctx)
    with pytest.raises(TypeError, match="Variable n must be of type number"):
        fn({"n": "5"}, {}, ctx)


def test_catch_all_rule_is_a_bare_return():
    root = ir.RuleSet(
        n_rule("=", 1, ir.Literal(value="one")),
        ir.Rule(ir.ConstraintRoot(ir.Ignore(ir.Ident(name="n"))), ir.TextRoot(ir.Literal(value="many"))),
    )
    fn = compile_translation(root).node
    last = fn.body[-1]
    assert isinstance(last, ast.Return)
    assert not any(isinstance(stmt, ast.Raise) for stmt in fn.body)
    assert ast.unparse(fn.body[0].test) == "not isinstance(params.get('n'), (int, float)) or isinstance(params.get('n'), bool)"


def test_multiple_constraints_are_conjoined():
    root = ir.RuleSet(ir.Rule(
        ir.ConstraintRoot(
            ir.Equality(ir.Ident(name="g"), ir.GenderValue(value="F"), op="="),
            ir.Inequality(ir.Ident(name="n"), ir.NumberValue(value=10), op="<="),
            ir.Ignore(ir.Ident(name="x")),
        ),
        ir.TextRoot(ir.Literal(value="few")),
    ))
    fn = compile_translation(root).node
    rule = fn.body[-2]
    assert ast.unparse(rule.test) == "params['g'] == 'F' and params['n'] <= 10"


def test_escaping():
    root = ir.TextRoot(ir.Literal(value="<b>"), ir.TextVar(name="name"), ir.Literal(value="</b>"))
    ectx = EmitContext()
    emitted = compile_translation(root, ctx=ectx)
    ret = emitted.node.body[-1]
    assert ast.unparse(ret.value) == "ctx.encode('<b>') + encode_if_string(ctx, params['name']) + ctx.encode('</b>')"
    fn = load(emitted, ectx)
    ctx = HtmlContext()
    assert fn({"name": "<i>"}, {}, ctx) == "&lt;b&gt;&lt;i&gt;&lt;/b&gt;"
    assert fn({"name": SafeString("<i>")}, {}, ctx) == "&lt;b&gt;<i>&lt;/b&gt;"


def test_numbers_are_grouped():
    root = ir.TextRoot(
        ir.Literal(value="a"),
        ir.TextExpr(ir.Mul(ir.Var(name="n"), ir.Number(value=2))),
        ir.Literal(value="b"),
    )
    emitted = compile_translation(root)
    ret = emitted.node.body[-1]
    assert ast.unparse(ret.value) == "ctx.encode('a' + number_text(params['n'] * 2) + 'b')"


def test_plus_op_at_runtime():
    root = ir.TextRoot(ir.TextExpr(ir.Add(ir.Var(name="a"), ir.Var(name="b"))))
    ectx = EmitContext()
    fn = load(compile_translation(root, ctx=ectx), ectx)
    ctx = HtmlContext()
    assert fn({"a": 1, "b": 2}, {}, ctx) == "3"
    assert fn({"a": "x", "b": 1}, {}, ctx) == "x1"
    assert fn({"a": "<", "b": 1}, {}, ctx) == "&lt;1"


def test_function_calls():
    root = ir.TextRoot(ir.Literal(value="Go "), ir.TextExpr(ir.Call(ir.Var(name="x"), name="link")))
    ectx = EmitContext()
    fn = load(compile_translation(root, ctx=ectx), ectx)
    ctx = HtmlContext()
    fns = {"link": lambda c, x: c.make_safe_string(f"<a>{c.encode(x)}</a>")}
    assert fn({"x": "a&b"}, fns, ctx) == "Go <a>a&amp;b</a>"
    with pytest.raises(TypeError, match="Translation requires function link to exist"):
        fn({"x": "a"}, {}, ctx)


def test_helpers_only_when_used():
    ectx = EmitContext()
    emitted = compile_translation(ir.TextRoot(ir.Literal(value="plain")), ctx=ectx)
    module = translation_module(emitted, ectx)
    assert [type(stmt) for stmt in module.body] == [ast.Assign]

    ectx = EmitContext()
    root = ir.TextRoot(ir.TextVar(name="x"), ir.Literal(value="!"))
    module = translation_module(compile_translation(root, ctx=ectx), ectx)
    names = [stmt.name for stmt in module.body if isinstance(stmt, ast.FunctionDef)]
    assert names == ["number_text", "encode_if_string", "translation"]
