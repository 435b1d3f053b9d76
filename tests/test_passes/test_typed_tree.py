import pytest

from phrasebook.compiler.dsl import ir, ir_types as irT
from phrasebook.compiler.dsl.type_map import TypeMap
from phrasebook.compiler.errors import FrozenTypeMapError, TranslationTypeError
from phrasebook.compiler.passes import Context, transforms as T
from phrasebook.compiler.passes.envobj import TypeMapObj
from phrasebook.compiler.passes.utils import infer_translation_types


def typed(root, **kwargs):
    tm = infer_translation_types(root, **kwargs).freeze()
    ctx = Context()
    ctx.add(TypeMapObj(tm))
    return T.TypedTreePass()(root, ctx)


def test_requires_type_map():
    with pytest.raises(RuntimeError):
        T.TypedTreePass()(ir.TextRoot(), Context())


def test_requires_frozen_map():
    ctx = Context()
    ctx.add(TypeMapObj(TypeMap()))
    with pytest.raises(FrozenTypeMapError):
        T.TypedTreePass()(ir.TextRoot(ir.Literal(value="a")), ctx)


def test_annotations():
    root = typed(ir.TextRoot(
        ir.Literal(value="Total: "),
        ir.TextExpr(ir.Mul(ir.Var(name="n"), ir.Number(value=2))),
        ir.TextVar(name="unit"),
    ))
    lit, expr, tvar = root.nodes
    assert lit.T is irT.String
    assert expr.T is irT.Number
    mul = expr.expr
    assert mul.T is irT.Number and mul.const is False
    assert mul.lhs.T is irT.Number and mul.lhs.const is False
    assert mul.rhs.T is irT.Number and mul.rhs.const is True
    assert tvar.T is irT.NumberOrString


def test_constancy():
    root = typed(ir.TextRoot(ir.TextExpr(ir.Add(ir.Number(value=1), ir.StringLit(value="a")))))
    add = root.nodes[0].expr
    assert add.const is True
    assert add.T is irT.NumberOrString


def test_call_is_string_and_not_constant():
    root = typed(ir.TextRoot(ir.TextExpr(ir.Call(ir.Number(value=1), name="f"))))
    call = root.nodes[0].expr
    assert call.T is irT.String
    assert call.const is False


def test_refined_types_narrow_in_expressions():
    root = ir.RuleSet(ir.Rule(
        ir.ConstraintRoot(ir.Equality(ir.Ident(name="g"), ir.GenderValue(value="F"), op="=")),
        ir.TextRoot(ir.TextVar(name="g"), ir.TextExpr(ir.Call(ir.Var(name="g"), name="f"))),
    ))
    rule = typed(root).rules[0]
    tvar, expr = rule.translation.nodes
    assert tvar.T is irT.Gender
    assert expr.expr.params[0].T is irT.String


def test_operator_misuse_without_variable():
    text = '{{-"abc"}}'
    root = ir.TextRoot(
        ir.TextExpr(ir.Neg(ir.StringLit(value="abc", pos=ir.Pos(1, 3, 1, 8)), pos=ir.Pos(1, 2, 1, 8))),
        input=text,
    )
    with pytest.raises(TranslationTypeError) as excinfo:
        typed(root)
    err = excinfo.value
    assert err.variable is None
    assert err.expected_type is irT.Number
    assert err.found_type is irT.String
    assert "Expression was expected to have type: number, found: string." in str(err)


def test_errors_reported_at_leaf():
    root = ir.TextRoot(ir.TextExpr(ir.Neg(ir.Mul(ir.StringLit(value="a"), ir.Number(value=2)))))
    tm = infer_translation_types(root).freeze()
    ctx = Context()
    ctx.add(TypeMapObj(tm))
    p = T.TypedTreePass()
    with pytest.raises(TranslationTypeError):
        p(root, ctx)
    assert len(p.errors) == 1
    assert p.errors[0].node == ir.StringLit(value="a", T=irT.String, const=True)


def test_plus_operand_check():
    root = ir.TextRoot(ir.TextExpr(ir.Add(ir.Neg(ir.StringLit(value="a")), ir.Number(value=1))))
    with pytest.raises(TranslationTypeError) as excinfo:
        typed(root)
    assert excinfo.value.found_type is irT.String
