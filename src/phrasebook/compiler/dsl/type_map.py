from __future__ import annotations
import logging
import typing as tp
from dataclasses import dataclass, field

from . import ir
from . import ir_types as irT
from .ir_types import InferredType
from ..errors import (
    FrozenTypeMapError,
    FunctionRedeclarationError,
    TranslationTypeError,
    UnknownVariableError,
)

logger = logging.getLogger(__name__)


# Type usages record why a variable got the type it has. They are only ever
# appended, and are what type errors point at.
@dataclass(frozen=True)
class ConstraintUsage:
    node: ir.Constraint
    constraints: ir.ConstraintRoot
    type: InferredType
    node_type: tp.ClassVar[str] = "constraint"


@dataclass(frozen=True)
class ExpressionUsage:
    node: ir.ExprNode
    text: tp.Optional[ir.TextRoot]
    constraints: tp.Optional[ir.ConstraintRoot]
    type: InferredType
    node_type: tp.ClassVar[str] = "expression"


@dataclass(frozen=True)
class TextUsage:
    node: ir.TextVar
    text: tp.Optional[ir.TextRoot]
    constraints: tp.Optional[ir.ConstraintRoot]
    type: InferredType = irT.NumberOrString
    node_type: tp.ClassVar[str] = "text"


# For integrators that know the types of their variables up front, e.g. from
# metadata stored next to the translations.
@dataclass(frozen=True)
class CustomUsage:
    type: InferredType = irT.Unknown
    node_type: tp.ClassVar[str] = "custom"


TypeUsage = tp.Union[ConstraintUsage, ExpressionUsage, TextUsage, CustomUsage]


@dataclass
class TypeInfo:
    type: InferredType = irT.Unknown
    usages: tp.List[TypeUsage] = field(default_factory=list)


FunctionParameterTypes = tp.Optional[tp.Tuple[InferredType, ...]]


def _usage_error(variable: str, expected: InferredType, found: InferredType, usage: TypeUsage) -> TranslationTypeError:
    if isinstance(usage, ConstraintUsage):
        return TranslationTypeError(
            expected, found,
            variable=variable,
            node=usage.node,
            constraint_text=usage.constraints.input,
            in_constraints=True,
        )
    if isinstance(usage, (ExpressionUsage, TextUsage)):
        return TranslationTypeError(
            expected, found,
            variable=variable,
            node=usage.node,
            text=usage.text.input if usage.text is not None else None,
            constraint_text=usage.constraints.input if usage.constraints is not None else None,
        )
    return TranslationTypeError(expected, found, variable=variable)


class TypeMap:
    """Type state of one translation compile.

    The map is built up by type inference and then frozen. Every mutator
    raises once the map is frozen, and typed trees may only be built from a
    frozen map.
    """

    def __init__(self):
        self._map: tp.Dict[str, TypeInfo] = {}
        self._functions: tp.Dict[str, FunctionParameterTypes] = {}
        self._frozen = False
        self._errors: tp.List[TranslationTypeError] = []

    @staticmethod
    def merge_type_info(existing: InferredType, new: InferredType) -> InferredType:
        return irT.merge(existing, new)

    @property
    def size(self) -> int:
        return len(self._map)

    def __len__(self):
        return len(self._map)

    def __contains__(self, variable: str):
        return variable in self._map

    def __repr__(self):
        entries = ", ".join(f"{k}: {v.type}" for k, v in self._map.items())
        return f"TypeMap({{{entries}}}{', frozen' if self._frozen else ''})"

    def get_variable_type_info(self, variable: str) -> TypeInfo:
        info = self._map.get(variable)
        if info is not None:
            return info
        if self._frozen:
            raise UnknownVariableError(variable)
        info = TypeInfo()
        self._map[variable] = info
        return info

    def get_variable_type(self, variable: str) -> InferredType:
        return self.get_variable_type_info(variable).type

    def has_info_for_type(self, variable: str) -> bool:
        return variable in self._map

    def variables(self) -> tp.List[str]:
        return list(self._map)

    def freeze(self) -> 'TypeMap':
        self._frozen = True
        return self

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def add_type_usage(self, variable: str, T: tp.Union[InferredType, str], usage: TypeUsage) -> InferredType:
        self._throw_if_frozen(f"Cannot add type usage for {variable} when type map is frozen")
        T = InferredType.parse(T)
        info = self.get_variable_type_info(variable)
        previous = info.type
        info.type = irT.merge(previous, T)
        info.usages.append(usage)
        if info.type is irT.Error and previous is not irT.Error:
            err = _usage_error(variable, T, previous, usage)
            logger.debug("type conflict on $%s: %s then %s", variable, previous, T)
            self._errors.append(err)
        return info.type

    def add_function(self, name: str) -> None:
        self._throw_if_frozen(f"Cannot add function {name} after map is frozen")
        self._functions.setdefault(name, None)

    def add_typed_function(self, name: str, parameter_types: tp.Sequence[tp.Union[InferredType, str]]) -> None:
        self._throw_if_frozen(f"Cannot add function {name} after map is frozen")
        if name in self._functions:
            raise FunctionRedeclarationError(f"Function {name} has already been declared")
        self._functions[name] = tuple(InferredType.parse(t) for t in parameter_types)

    def function_parameter_types(self, name: str) -> FunctionParameterTypes:
        return self._functions.get(name)

    def has_function(self, name: str) -> bool:
        return name in self._functions

    def function_names(self) -> tp.List[str]:
        return list(self._functions)

    @property
    def errors(self) -> tp.Tuple[TranslationTypeError, ...]:
        return tuple(self._errors)

    def has_type_errors(self) -> bool:
        return len(self._errors) > 0

    def throw_type_errors(self) -> None:
        # Only the first error is surfaced, the rest stay in `errors`
        if self._errors:
            raise self._errors[0]

    def _throw_if_frozen(self, msg: str) -> None:
        if self._frozen:
            raise FrozenTypeMapError(msg)
