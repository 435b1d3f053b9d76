import ast

import pytest

from phrasebook.compiler.dsl import ir
from phrasebook.compiler.errors import DeadCodeError, UnknownVariableError
from phrasebook.compiler.passes.utils import compile_translation, compile_translations
from phrasebook.runtime import HtmlContext, load_translations, translate


def translations():
    return {
        "greeting": ir.TextRoot(ir.Literal(value="Hello "), ir.TextVar(name="name")),
        "sum": ir.TextRoot(ir.TextExpr(ir.Add(ir.Var(name="a"), ir.Var(name="b")))),
        "title": ir.TextRoot(ir.Literal(value="Tom & Jerry")),
    }


def test_module_defines_helpers_once():
    module = compile_translations(translations())
    defs = [stmt.name for stmt in module.body if isinstance(stmt, ast.FunctionDef)]
    assert defs.count("encode_if_string") == 1
    assert defs.count("plus_op") == 1
    assert isinstance(module.body[-1], ast.Assign)
    assert module.body[-1].targets[0].id == "translations"


def test_module_runs():
    loaded = load_translations(compile_translations(translations()))
    ctx = HtmlContext()
    assert set(loaded) == {"greeting", "sum", "title"}
    assert loaded["title"] == "Tom & Jerry"
    assert translate(loaded, "title", {}, {}, ctx) == "Tom &amp; Jerry"
    assert translate(loaded, "greeting", {"name": "<Al>"}, {}, ctx) == "Hello &lt;Al&gt;"
    assert translate(loaded, "sum", {"a": 2, "b": 3}, {}, ctx) == "5"


def test_rendered_source_compiles():
    source = ast.unparse(compile_translations(translations()))
    namespace = {}
    exec(compile(source, "<rendered>", "exec"), namespace)
    assert "greeting" in namespace["translations"]


def test_checks_are_applied_per_translation():
    dead = ir.RuleSet(
        ir.Rule(ir.ConstraintRoot(ir.Ignore(ir.Ident(name="n"))), ir.TextRoot(ir.Literal(value="a"))),
        ir.Rule(ir.ConstraintRoot(ir.Equality(ir.Ident(name="n"), ir.NumberValue(value=1), op="=")), ir.TextRoot(ir.Literal(value="b"))),
    )
    with pytest.raises(DeadCodeError):
        compile_translations({"dead": dead})
    compile_translations({"dead": dead}, check_dead_code=False)
    with pytest.raises(UnknownVariableError):
        compile_translations(translations(), allowed_variables=["a", "b"])


def test_pre_frozen_type_map_is_used_as_is():
    from phrasebook.compiler.dsl.type_map import TypeMap, CustomUsage
    from phrasebook.compiler.dsl import ir_types as irT

    tm = TypeMap()
    tm.add_type_usage("n", irT.Number, CustomUsage(irT.Number))
    tm.freeze()
    emitted = compile_translation(ir.TextRoot(ir.TextVar(name="n"), ir.Literal(value="!")), type_map=tm)
    assert ast.unparse(emitted.node.body[0].test) == "not isinstance(params.get('n'), (int, float)) or isinstance(params.get('n'), bool)"
