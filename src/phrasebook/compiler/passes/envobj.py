from __future__ import annotations
import typing as tp

from .pass_base import AnalysisObject
from ..dsl.ir_types import InferredType
from ..dsl.type_map import TypeMap


# Common Analysis Objects
class TypeMapObj(AnalysisObject):
    def __init__(self, type_map: TypeMap):
        self.type_map = type_map


class AllowedSymbols(AnalysisObject):
    """Allow-lists checked by the unknown symbol validator. None means any
    name is accepted."""
    def __init__(self, variables: tp.Optional[tp.Iterable[str]] = None, functions: tp.Optional[tp.Iterable[str]] = None):
        self.variables = list(variables) if variables is not None else None
        self.functions = list(functions) if functions is not None else None


class FunctionSignatures(AnalysisObject):
    def __init__(self, signatures: tp.Mapping[str, tp.Sequence[tp.Union[InferredType, str]]]):
        self.signatures = {
            name: tuple(InferredType.parse(t) for t in types)
            for name, types in signatures.items()
        }
