import pytest

from phrasebook.compiler.dsl import ir, ir_types as irT
from phrasebook.compiler.errors import ConstantFoldError
from phrasebook.compiler.passes.transforms.const_fold import fold_expression, fold_text
from phrasebook.compiler.passes.utils import analyze_translation


def n(v, col=0):
    return ir.Number(value=v, pos=ir.Pos(1, col, 1, col + len(str(v))), T=irT.Number, const=True)


def s(v):
    return ir.StringLit(value=v, T=irT.String, const=True)


def x(name="x", T=irT.Number):
    return ir.Var(name=name, T=T, const=False)


def mul(l, r):
    return ir.Mul(l, r, T=irT.Number, const=l.const and r.const)


def test_one_million():
    root = ir.TextRoot(
        ir.Literal(value="Here's one million: "),
        ir.TextExpr(ir.Mul(ir.Mul(ir.Number(value=1), ir.Number(value=1000)), ir.Number(value=1000))),
    )
    folded = analyze_translation(root)
    assert len(folded.nodes) == 1
    assert isinstance(folded.nodes[0], ir.Literal)
    assert folded.nodes[0].value == "Here's one million: 1000000"


def test_binary_ops():
    assert fold_expression(ir.Add(n(1), n(2), T=irT.Number, const=True)).value == 3
    assert fold_expression(ir.Sub(n(1), n(2), T=irT.Number, const=True)).value == -1
    assert fold_expression(ir.Div(n(4), n(2), T=irT.Number, const=True)) == ir.Number(value=2, T=irT.Number, const=True)
    assert fold_expression(ir.Div(n(1), n(2), T=irT.Number, const=True)).value == 0.5
    concat = fold_expression(ir.Add(s("a"), n(1), T=irT.NumberOrString, const=True))
    assert isinstance(concat, ir.StringLit)
    assert concat.value == "a1"


def test_unary_minus():
    assert fold_expression(ir.Neg(n(5), T=irT.Number, const=True)).value == -5
    neg_var = ir.Neg(x(), T=irT.Number, const=False)
    assert fold_expression(neg_var) is neg_var


def test_scalar_multiplication_is_reassociated():
    expr = mul(mul(x(), n(2, 5)), n(3, 9))
    folded = fold_expression(expr)
    assert isinstance(folded, ir.Mul)
    assert folded.lhs == x()
    assert folded.rhs.value == 6
    assert folded.rhs.pos == ir.Pos(1, 5, 1, 10)


def test_call_folds_arguments_only():
    call = ir.Call(ir.Add(n(1), n(2), T=irT.Number, const=True), name="f", T=irT.String, const=False)
    folded = fold_expression(call)
    assert isinstance(folded, ir.Call)
    assert folded.params[0].value == 3


def test_text_merging():
    root = ir.TextRoot(
        ir.Literal(value="a", pos=ir.Pos(1, 0, 1, 1)),
        ir.TextExpr(ir.Add(n(1), n(1), T=irT.Number, const=True), pos=ir.Pos(1, 1, 1, 8), T=irT.Number),
        ir.Literal(value="b", pos=ir.Pos(1, 8, 1, 9)),
        ir.TextVar(name="x", T=irT.NumberOrString),
        ir.Literal(value="c"),
        ir.TextExpr(ir.Call(name="f", T=irT.String, const=False), T=irT.String),
        ir.TextExpr(s("d"), T=irT.String),
    )
    folded = fold_text(root)
    kinds = [type(node) for node in folded.nodes]
    assert kinds == [ir.Literal, ir.TextVar, ir.Literal, ir.TextExpr, ir.Literal]
    first = folded.nodes[0]
    assert first.value == "a2b"
    assert first.pos == ir.Pos(1, 0, 1, 9)
    assert folded.nodes[2].value == "c"
    assert folded.nodes[4].value == "d"


def test_empty_text():
    assert fold_text(ir.TextRoot(input="")).nodes == ()


def test_idempotent():
    trees = [
        ir.TextRoot(ir.Literal(value="a"), ir.Literal(value="b"), ir.TextVar(name="x", T=irT.Number)),
        ir.TextRoot(ir.TextExpr(mul(mul(mul(x(), n(2)), n(3)), n(4)), T=irT.Number)),
        ir.TextRoot(ir.TextExpr(ir.Neg(ir.Add(n(1), n(2), T=irT.Number, const=True), T=irT.Number, const=True), T=irT.Number)),
    ]
    for tree in trees:
        once = fold_text(tree)
        assert fold_text(once) == once


@pytest.mark.parametrize("expr", [
    ir.Neg(s("a"), T=irT.Number, const=True),
    ir.Sub(s("a"), n(1), T=irT.Number, const=True),
    ir.Mul(n(1), s("a"), T=irT.Number, const=True),
    ir.Div(n(1), n(0), T=irT.Number, const=True),
])
def test_defensive_checks(expr):
    with pytest.raises(ConstantFoldError):
        fold_expression(expr)


def test_fixed_point_converges():
    from phrasebook.compiler.passes import PassManager, transforms as T

    root = ir.TextRoot(
        ir.Literal(value="x"),
        ir.TextExpr(mul(mul(x(), n(2)), n(3)), T=irT.Number),
        ir.TextExpr(ir.Sub(n(5), n(2), T=irT.Number, const=True), T=irT.Number),
    )
    folded = PassManager(T.ConstFoldPass()).run(root, fixed_point=True)
    assert folded == fold_text(root)
    assert folded.nodes[-1].value == "3"
