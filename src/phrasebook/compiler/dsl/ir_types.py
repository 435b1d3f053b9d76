from __future__ import annotations
import enum
import typing as tp

import numpy as np


class InferredType(enum.Enum):
    """The seven types a translation variable or expression can have.

    They form a merge lattice (see `merge`): `unknown` is the bottom element,
    `error` is absorbing, `number-or-string` widens to whatever refinement comes
    along later.
    """
    UNKNOWN = "unknown"
    NUMBER = "number"
    STRING = "string"
    ENUM = "enum"
    GENDER = "gender"
    NUMBER_OR_STRING = "number-or-string"
    ERROR = "error"

    def __str__(self):
        return self.value

    def __repr__(self):
        return self.value

    @property
    def idx(self) -> int:
        return _MEMBERS.index(self)

    @classmethod
    def parse(cls, name: tp.Union[str, 'InferredType']) -> 'InferredType':
        if isinstance(name, InferredType):
            return name
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown type name: {name}") from None


Unknown = InferredType.UNKNOWN
Number = InferredType.NUMBER
String = InferredType.STRING
Enum = InferredType.ENUM
Gender = InferredType.GENDER
NumberOrString = InferredType.NUMBER_OR_STRING
Error = InferredType.ERROR

_MEMBERS: tp.Tuple[InferredType, ...] = tuple(InferredType)

# Rows are the existing type, columns the newly observed one, both in
# declaration order. Cells hold the ordinal of the merged type.
_U, _N, _S, _EN, _G, _NS, _E = range(len(_MEMBERS))
_MERGE_TABLE = np.array([
    #  U    N    S    EN   G    NS   E
    [_U,  _N,  _S,  _EN, _G,  _NS, _E],  # unknown
    [_N,  _N,  _E,  _E,  _E,  _N,  _E],  # number
    [_S,  _E,  _S,  _EN, _G,  _S,  _E],  # string
    [_EN, _E,  _EN, _EN, _E,  _EN, _E],  # enum
    [_G,  _E,  _G,  _E,  _G,  _G,  _E],  # gender
    [_NS, _N,  _S,  _EN, _G,  _NS, _E],  # number-or-string
    [_E,  _E,  _E,  _E,  _E,  _E,  _E],  # error
], dtype=np.int8)
_MERGE_TABLE.setflags(write=False)


def merge(existing: InferredType, new: InferredType) -> InferredType:
    if new is Unknown:
        return existing
    return _MEMBERS[int(_MERGE_TABLE[existing.idx, new.idx])]


def merge_table() -> np.ndarray:
    return _MERGE_TABLE


# Expressions never see the refined constraint types, an enum or a gender is
# a plain string once it is interpolated.
def narrow(T: InferredType) -> InferredType:
    if T in (Gender, Enum):
        return String
    return T


def plus_result(lhsT: InferredType, rhsT: InferredType) -> InferredType:
    if lhsT is Number and rhsT is Number:
        return Number
    if lhsT is not rhsT:
        return NumberOrString
    return lhsT


_PLUS_OPERAND_TYPES = frozenset((Number, String, NumberOrString))


def is_plus_operand(T: InferredType) -> bool:
    return T in _PLUS_OPERAND_TYPES
