import pytest

from phrasebook.compiler.dsl import ir
from phrasebook.compiler.errors import DeadCodeError
from phrasebook.compiler.passes import Context, analyses as A


def catch_all():
    return ir.Rule(ir.ConstraintRoot(ir.Ignore(ir.Ident(name="n"))), ir.TextRoot(ir.Literal(value="any")))


def n_is(v):
    return ir.Rule(
        ir.ConstraintRoot(ir.Equality(ir.Ident(name="n"), ir.NumberValue(value=v), op="=")),
        ir.TextRoot(ir.Literal(value=str(v))),
    )


def test_rule_after_catch_all_is_dead():
    rules = ir.RuleSet(catch_all(), n_is(5))
    with pytest.raises(DeadCodeError) as excinfo:
        A.DeadCodeAnalysis()(rules, Context())
    assert excinfo.value.dead_rule == n_is(5)
    assert excinfo.value.rules == rules.rules


def test_catch_all_last_is_fine():
    rules = ir.RuleSet(n_is(5), catch_all())
    live = A.DeadCodeAnalysis()(rules, Context())
    assert live.rules == rules.rules


def test_no_range_reasoning():
    rules = ir.RuleSet(n_is(5), n_is(5), n_is(3))
    A.DeadCodeAnalysis()(rules, Context())


def test_empty_constraints_are_catch_all():
    rules = ir.RuleSet(ir.Rule(ir.ConstraintRoot(), ir.TextRoot()), n_is(1))
    with pytest.raises(DeadCodeError):
        A.DeadCodeAnalysis()(rules, Context())


def test_simple_translation_has_no_dead_code():
    live = A.DeadCodeAnalysis()(ir.TextRoot(ir.Literal(value="a")), Context())
    assert live.rules == ()
