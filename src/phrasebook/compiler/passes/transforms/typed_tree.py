from __future__ import annotations

import typing as tp

from ..pass_base import Transform, Context, handles
from ..envobj import TypeMapObj
from ...dsl import ir, ir_types as irT
from ...dsl.ir_types import InferredType
from ...errors import FrozenTypeMapError, TranslationTypeError


class TypedTreePass(Transform):
    """Annotates every expression and text node with its type (`T`) and,
    for expressions, its constancy (`const`).

    The TypeMap must be frozen. Conflicts already recorded in the map are
    raised before anything is built. Operator misuse that involves no
    variable (e.g. `-"abc"`) is found here and reported at the leaf; only
    the first such error is raised.
    """
    requires = (TypeMapObj,)
    produces = ()
    name = "typed_tree"

    def run(self, root: ir.Node, ctx: Context) -> ir.Node:
        self.type_map = ctx.get(TypeMapObj).type_map
        if not self.type_map.is_frozen:
            raise FrozenTypeMapError("Type map passed must be frozen. Use TypeMap.freeze()")
        self.type_map.throw_type_errors()
        self.text: tp.Optional[ir.TextRoot] = None
        self.constraints: tp.Optional[ir.ConstraintRoot] = None
        self.errors: tp.List[TranslationTypeError] = []
        new_root = self.visit(root)
        if self.errors:
            raise self.errors[0]
        return new_root

    def _add_error(self, expected: tp.Union[InferredType, tp.Sequence[InferredType]], node: ir.ExprNode):
        # The error was already reported further down the tree
        if node.T is irT.Error:
            return
        self.errors.append(TranslationTypeError(
            expected, node.T,
            variable=node.name if isinstance(node, ir.Var) else None,
            node=node,
            text=self.text.input if self.text is not None else None,
            constraint_text=self.constraints.input if self.constraints is not None else None,
        ))

    @handles(ir.Rule)
    def _(self, node: ir.Rule):
        self.constraints = node.constraints
        new_node = node.replace(node.constraints, self.visit(node.translation))
        self.constraints = None
        return new_node

    @handles(ir.TextRoot)
    def _(self, node: ir.TextRoot):
        self.text = node
        return node.replace(*self.visit_children(node))

    @handles(ir.ConstraintRoot)
    def _(self, node: ir.ConstraintRoot):
        return node

    ##############################
    ## Text
    ##############################

    @handles(ir.Literal)
    def _(self, node: ir.Literal):
        return node.replace(T=irT.String)

    @handles(ir.TextVar)
    def _(self, node: ir.TextVar):
        # Bare variables keep their refined type, the emitter guards on it
        return node.replace(T=self.type_map.get_variable_type(node.name))

    @handles(ir.TextExpr)
    def _(self, node: ir.TextExpr):
        expr = self.visit(node.expr)
        return node.replace(expr, T=expr.T)

    ##############################
    ## Expressions
    ##############################

    @handles(ir.Number)
    def _(self, node: ir.Number):
        return node.replace(T=irT.Number, const=True)

    @handles(ir.StringLit)
    def _(self, node: ir.StringLit):
        return node.replace(T=irT.String, const=True)

    @handles(ir.Var)
    def _(self, node: ir.Var):
        T = irT.narrow(self.type_map.get_variable_type(node.name))
        return node.replace(T=T, const=False)

    @handles(ir.Neg)
    def _(self, node: ir.Neg):
        operand = self.visit(node.operand)
        T = irT.Number
        if operand.T is not irT.Number:
            self._add_error(irT.Number, operand)
            T = irT.Error
        return node.replace(operand, T=T, const=operand.const)

    @handles(ir.Add)
    def _(self, node: ir.Add):
        lhs, rhs = self.visit_children(node)
        if not irT.is_plus_operand(lhs.T):
            self._add_error((irT.Number, irT.String), lhs)
            T = irT.Error
        elif not irT.is_plus_operand(rhs.T):
            self._add_error((irT.Number, irT.String), rhs)
            T = irT.Error
        else:
            T = irT.plus_result(lhs.T, rhs.T)
        return node.replace(lhs, rhs, T=T, const=lhs.const and rhs.const)

    @handles(ir.Sub, ir.Mul, ir.Div)
    def _(self, node: ir.BinaryOp):
        lhs, rhs = self.visit_children(node)
        T = irT.Number
        for operand in (lhs, rhs):
            if operand.T is not irT.Number:
                self._add_error(irT.Number, operand)
                T = irT.Error
                break
        return node.replace(lhs, rhs, T=T, const=lhs.const and rhs.const)

    @handles(ir.Call)
    def _(self, node: ir.Call):
        params = self.visit_children(node)
        # Calls only ever produce strings
        T = irT.Error if any(p.T is irT.Error for p in params) else irT.String
        if params:
            return node.replace(*params, T=T, const=False)
        return node.replace(T=T, const=False)
