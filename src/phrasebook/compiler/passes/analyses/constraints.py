from __future__ import annotations

import typing as tp

from ..pass_base import Analysis, AnalysisObject, Context
from ...dsl import ir
from ...errors import DeadCodeError


class LiveRules(AnalysisObject):
    def __init__(self, rules: tp.Sequence[ir.Rule]):
        self.rules = tuple(rules)


def is_definite_return(constraints: ir.ConstraintRoot) -> bool:
    return constraints.is_catch_all


class DeadCodeAnalysis(Analysis):
    """Reports a rule that follows a rule which always matches.

    Only catch-all rules (nothing but `!x` constraints) are considered. Value
    ranges are not compared, so

        n = 5: $n is 5
        n != 5: $n is not 5
        n = 3: never reached

    passes.
    """
    requires = ()
    produces = (LiveRules,)
    name = "dead_code"

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        if not isinstance(root, ir.RuleSet):
            return LiveRules(())
        definite_return = False
        for rule in root.rules:
            if definite_return:
                raise DeadCodeError("Dead code", root.rules, rule)
            definite_return = is_definite_return(rule.constraints)
        return LiveRules(root.rules)
