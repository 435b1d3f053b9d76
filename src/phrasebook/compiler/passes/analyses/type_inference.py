from __future__ import annotations

import logging
import typing as tp

from ..pass_base import Context, AnalysisObject, Analysis, handles
from ..envobj import TypeMapObj, FunctionSignatures
from ...dsl import ir, ir_types as irT
from ...dsl.ir_types import InferredType
from ...dsl.type_map import TypeMap, ConstraintUsage, ExpressionUsage, TextUsage

logger = logging.getLogger(__name__)


class TypeInferencePass(Analysis):
    """Feeds the type usages of a translation into a TypeMap.

    The map is taken from the context when one is present (so several
    translations can share it), otherwise a fresh one is created. Declared
    function signatures are registered before the walk.

    Expression inference is context sensitive: the type the enclosing
    expression expects is carried down in `self.expected`.
    """
    requires = ()
    produces = (TypeMapObj,)
    name = "type_inference"
    # Every usage must be recorded, even for structurally equal subtrees
    enable_memoization = False

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        tmo = ctx.try_get(TypeMapObj)
        self.type_map: TypeMap = tmo.type_map if tmo is not None else TypeMap()
        sigs = ctx.try_get(FunctionSignatures)
        if sigs is not None:
            for fname, types in sigs.signatures.items():
                # A shared map already holds the signatures of earlier runs
                if self.type_map.function_parameter_types(fname) == types:
                    continue
                self.type_map.add_typed_function(fname, types)
        self.text: tp.Optional[ir.TextRoot] = None
        self.constraints: tp.Optional[ir.ConstraintRoot] = None
        self.expected: tp.Optional[InferredType] = None
        self.visit(root)
        logger.debug("inferred %r", self.type_map)
        return TypeMapObj(self.type_map)

    def infer(self, node: ir.ExprNode, expected: tp.Optional[InferredType] = None) -> InferredType:
        prev, self.expected = self.expected, expected
        T = self.visit(node)
        self.expected = prev
        return T

    ##############################
    ## Translations
    ##############################

    @handles(ir.Rule)
    def _(self, node: ir.Rule):
        self.visit(node.constraints)
        self.visit(node.translation)
        self.constraints = None
        self.text = None

    @handles(ir.TextRoot)
    def _(self, node: ir.TextRoot):
        self.text = node
        self.visit_children(node)

    @handles(ir.ConstraintRoot)
    def _(self, node: ir.ConstraintRoot):
        self.constraints = node
        self.visit_children(node)

    ##############################
    ## Constraints
    ##############################

    @handles(ir.Ignore)
    def _(self, node: ir.Ignore):
        # Nothing is learnt from `!n`, the usage is still recorded
        T = irT.Unknown
        self.type_map.add_type_usage(node.name, T, ConstraintUsage(node, self.constraints, T))

    @handles(ir.Equality, ir.Inequality)
    def _(self, node: ir.Constraint):
        T = node.rhs.implied_type
        self.type_map.add_type_usage(node.name, T, ConstraintUsage(node, self.constraints, T))

    ##############################
    ## Text
    ##############################

    @handles(ir.Literal)
    def _(self, node: ir.Literal):
        return None

    @handles(ir.TextVar)
    def _(self, node: ir.TextVar):
        usage = TextUsage(node, self.text, self.constraints)
        self.type_map.add_type_usage(node.name, usage.type, usage)

    @handles(ir.TextExpr)
    def _(self, node: ir.TextExpr):
        self.infer(node.expr)

    ##############################
    ## Expressions
    ##############################

    @handles(ir.Number)
    def _(self, node: ir.Number):
        return irT.Number

    @handles(ir.StringLit)
    def _(self, node: ir.StringLit):
        return irT.String

    @handles(ir.Var)
    def _(self, node: ir.Var):
        T = self.expected if self.expected is not None else irT.Unknown
        usage = ExpressionUsage(node, self.text, self.constraints, T)
        return irT.narrow(self.type_map.add_type_usage(node.name, T, usage))

    @handles(ir.Neg)
    def _(self, node: ir.Neg):
        self.infer(node.operand, irT.Number)
        return irT.Number

    @handles(ir.Add)
    def _(self, node: ir.Add):
        # `+` is both addition and concatenation, so operands stay ambiguous
        # unless the context already demands a number
        T = irT.Number if self.expected is irT.Number else irT.NumberOrString
        lhsT = self.infer(node.lhs, T)
        rhsT = self.infer(node.rhs, T)
        return irT.plus_result(lhsT, rhsT)

    @handles(ir.Sub, ir.Mul, ir.Div)
    def _(self, node: ir.BinaryOp):
        self.infer(node.lhs, irT.Number)
        self.infer(node.rhs, irT.Number)
        return irT.Number

    @handles(ir.Call)
    def _(self, node: ir.Call):
        param_types = self.type_map.function_parameter_types(node.name)
        for i, param in enumerate(node.params):
            if param_types is not None and i < len(param_types):
                self.infer(param, param_types[i])
            else:
                self.infer(param)
        self.type_map.add_function(node.name)
        # Functions produce markup, never numbers
        return irT.String
