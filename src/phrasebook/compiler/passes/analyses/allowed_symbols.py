from __future__ import annotations

import typing as tp

from ..pass_base import Analysis, AnalysisObject, Context, handles
from ..envobj import AllowedSymbols
from ...dsl import ir
from ...errors import UnknownFunctionError, UnknownVariableError


class UsedSymbols(AnalysisObject):
    def __init__(self, variables: tp.Sequence[str], functions: tp.Sequence[str]):
        self.variables = tuple(variables)
        self.functions = tuple(functions)


class AllowedSymbolsPass(Analysis):
    """Checks every variable and function referenced by the translation texts
    against the AllowedSymbols in the context. Constraints and literal text
    are not checked.

    Produces the symbols seen, in first-use order.
    """
    requires = (AllowedSymbols,)
    produces = (UsedSymbols,)
    name = "allowed_symbols"
    enable_memoization = False

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        allowed = ctx.get(AllowedSymbols)
        self.allowed_vars = set(allowed.variables) if allowed.variables is not None else None
        self.allowed_funs = set(allowed.functions) if allowed.functions is not None else None
        self.allowed = allowed
        self.text: tp.Optional[ir.TextRoot] = None
        self.constraints: tp.Optional[ir.ConstraintRoot] = None
        self.variables: tp.Dict[str, None] = {}
        self.functions: tp.Dict[str, None] = {}
        self.visit(root)
        return UsedSymbols(list(self.variables), list(self.functions))

    def _check_variable(self, node: tp.Union[ir.TextVar, ir.Var]):
        self.variables.setdefault(node.name)
        if self.allowed_vars is not None and node.name not in self.allowed_vars:
            raise UnknownVariableError(
                node.name, self.allowed.variables,
                node=node,
                text=self.text.input if self.text is not None else None,
                constraint_text=self.constraints.input if self.constraints is not None else None,
            )

    @handles(ir.Rule)
    def _(self, node: ir.Rule):
        self.constraints = node.constraints
        self.visit(node.translation)
        self.constraints = None

    @handles(ir.TextRoot)
    def _(self, node: ir.TextRoot):
        self.text = node
        self.visit_children(node)

    @handles(ir.ConstraintRoot, ir.Literal)
    def _(self, node: ir.Node):
        return None

    @handles(ir.TextVar, ir.Var)
    def _(self, node: ir.Node):
        self._check_variable(node)

    @handles(ir.Call)
    def _(self, node: ir.Call):
        self.functions.setdefault(node.name)
        if self.allowed_funs is not None and node.name not in self.allowed_funs:
            raise UnknownFunctionError(
                node.name, self.allowed.functions,
                node=node,
                text=self.text.input if self.text is not None else None,
                constraint_text=self.constraints.input if self.constraints is not None else None,
            )
        self.visit_children(node)
