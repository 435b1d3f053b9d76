from __future__ import annotations
import typing as tp
from dataclasses import dataclass

from .ir_types import InferredType


@dataclass(frozen=True)
class Pos:
    """Source span of a node. Lines are 1-indexed, columns are 0-indexed and
    half-open (`last_column` points one past the last character)."""
    first_line: int = 1
    first_column: int = 0
    last_line: int = 1
    last_column: int = 0

    def combine(self, last: 'Pos') -> 'Pos':
        return Pos(self.first_line, self.first_column, last.last_line, last.last_column)


EMPTY_POS = Pos()


# Base class for all tree nodes
class Node:
    _fields: tp.Tuple[str, ...] = ()
    _defaults: tp.Dict[str, tp.Any] = {}
    _numc: int = -1

    def __init__(self, *children: 'Node', **fields: tp.Any):
        for child in children:
            if not isinstance(child, Node):
                raise TypeError(f"Expected Node, got {child}")
        if self._numc >= 0 and len(children) != self._numc:
            raise TypeError(f"{type(self).__name__} expected {self._numc} children, got {len(children)}")
        unknown = set(fields) - set(self._fields)
        if unknown:
            raise TypeError(f"{type(self).__name__} got unexpected fields {sorted(unknown)}")
        for f in self._fields:
            setattr(self, f, fields[f] if f in fields else self._defaults.get(f))
        self._children: tp.Tuple[Node, ...] = children
        self._key = self._gen_key()

    def _gen_key(self):
        child_keys = tuple(c._key for c in self._children)
        fields = tuple(getattr(self, field) for field in self._fields)
        return (self.__class__.__name__, fields, child_keys)

    def __iter__(self):
        return iter(self._children)

    def __len__(self):
        return len(self._children)

    def __eq__(self, other):
        return isinstance(other, Node) and self._key == other._key

    def __hash__(self):
        return hash(self._key)

    def __repr__(self):
        field_str = ",".join(f"{k}={v}" for k, v in self.field_dict.items() if k != "pos" and v is not None)
        if field_str:
            field_str = f"[{field_str}]"
        return f"{self.__class__.__name__}{field_str}({', '.join(repr(c) for c in self._children)})"

    @property
    def field_dict(self):
        return {f: getattr(self, f) for f in self._fields}

    def replace(self, *new_children: 'Node', **kwargs: tp.Any) -> 'Node':
        # Fields only: keep the children
        if not new_children:
            new_children = self._children
        new_fields = {**self.field_dict, **kwargs}
        if new_children == self._children and new_fields == self.field_dict:
            return self
        return type(self)(*new_children, **new_fields)


def walk(node: Node) -> tp.Iterator[Node]:
    """Depth first, pre-order iteration over a tree."""
    yield node
    for child in node:
        yield from walk(child)


##############################
## Expression nodes
##############################

class ExprNode(Node):
    """Base of the expression nodes found inside `{{ }}` fragments.

    Untyped and typed nodes share the same classes. A typed node carries its
    resolved type in `T` and its constancy in `const`, both are None on an
    untyped node.
    """
    _fields = ("pos", "T", "const")
    _defaults = {"pos": EMPTY_POS}

    @property
    def typed(self) -> bool:
        return self.T is not None

    @property
    def is_constant(self) -> bool:
        return bool(self.const)


class Number(ExprNode):
    _fields = ("value", "pos", "T", "const")
    _numc = 0


class StringLit(ExprNode):
    _fields = ("value", "pos", "T", "const")
    _numc = 0


class Var(ExprNode):
    _fields = ("name", "pos", "T", "const")
    _numc = 0


class Neg(ExprNode):
    _numc = 1

    @property
    def operand(self) -> ExprNode:
        return self._children[0]


class BinaryOp(ExprNode):
    op: str

    @property
    def lhs(self) -> ExprNode:
        return self._children[0]

    @property
    def rhs(self) -> ExprNode:
        return self._children[1]

    @staticmethod
    def make(op: str, lhs: ExprNode, rhs: ExprNode, **fields) -> 'BinaryOp':
        if op not in BINARY_OPS:
            raise ValueError(f"Unknown binary operator: {op}")
        return BINARY_OPS[op](lhs, rhs, **fields)


class Add(BinaryOp):
    op = "plus"
    _numc = 2


class Sub(BinaryOp):
    op = "minus"
    _numc = 2


class Mul(BinaryOp):
    op = "multiply"
    _numc = 2


class Div(BinaryOp):
    op = "divide"
    _numc = 2


BINARY_OPS: tp.Dict[str, tp.Type[BinaryOp]] = {cls.op: cls for cls in (Add, Sub, Mul, Div)}


class Call(ExprNode):
    _fields = ("name", "pos", "T", "const")
    _numc = -1

    @property
    def params(self) -> tp.Tuple[ExprNode, ...]:
        return self._children


##############################
## Text nodes
##############################

class TextNode(Node):
    """A fragment of a translation text: literal text, a bare `$variable` or
    an interpolated `{{expression}}`."""
    _defaults = {"pos": EMPTY_POS}

    @property
    def typed(self) -> bool:
        return self.T is not None


class Literal(TextNode):
    _fields = ("value", "pos", "T")
    _numc = 0


class TextVar(TextNode):
    _fields = ("name", "pos", "T")
    _numc = 0


class TextExpr(TextNode):
    _fields = ("pos", "T")
    _numc = 1

    @property
    def expr(self) -> ExprNode:
        return self._children[0]


class TextRoot(Node):
    """A parsed translation text. `input` is the original source, kept for
    error pointers."""
    _fields = ("input",)
    _defaults = {"input": ""}
    _numc = -1

    @property
    def nodes(self) -> tp.Tuple[TextNode, ...]:
        return self._children


##############################
## Constraint nodes
##############################

class Ident(Node):
    _fields = ("name", "pos")
    _defaults = {"pos": EMPTY_POS}
    _numc = 0


class Value(Node):
    _fields = ("value", "pos")
    _defaults = {"pos": EMPTY_POS}
    # The type a comparison against this value implies for the variable
    implied_type: InferredType


class NumberValue(Value):
    implied_type = InferredType.NUMBER
    _numc = 0


class EnumValue(Value):
    implied_type = InferredType.ENUM
    _numc = 0


class GenderValue(Value):
    implied_type = InferredType.GENDER
    _numc = 0

    def __init__(self, **fields):
        if fields.get("value") not in ("F", "M", "N"):
            raise ValueError(f"Gender must be one of F, M, N, got {fields.get('value')!r}")
        super().__init__(**fields)


class Constraint(Node):
    _defaults = {"pos": EMPTY_POS}

    @property
    def ident(self) -> Ident:
        return self._children[0]

    @property
    def name(self) -> str:
        return self._children[0].name


class Ignore(Constraint):
    """`!n`, matches any value of `n` and generates no runtime test."""
    _fields = ("pos",)
    _numc = 1


class Equality(Constraint):
    _fields = ("op", "pos")
    _numc = 2

    def __init__(self, *children: Node, **fields):
        if fields.get("op") not in ("=", "!="):
            raise ValueError(f"Invalid equality operator: {fields.get('op')!r}")
        super().__init__(*children, **fields)
        if not isinstance(self.rhs, Value):
            raise TypeError(f"Equality must compare against a value, got {self.rhs}")

    @property
    def rhs(self) -> Value:
        return self._children[1]


class Inequality(Constraint):
    _fields = ("op", "pos")
    _numc = 2

    def __init__(self, *children: Node, **fields):
        if fields.get("op") not in ("<", "<=", ">", ">="):
            raise ValueError(f"Invalid inequality operator: {fields.get('op')!r}")
        super().__init__(*children, **fields)
        if not isinstance(self.rhs, NumberValue):
            raise TypeError(f"Inequality must compare against a number, got {self.rhs}")

    @property
    def rhs(self) -> NumberValue:
        return self._children[1]


class ConstraintRoot(Node):
    _fields = ("input",)
    _defaults = {"input": ""}
    _numc = -1

    @property
    def nodes(self) -> tp.Tuple[Constraint, ...]:
        return self._children

    @property
    def is_catch_all(self) -> bool:
        return all(isinstance(c, Ignore) for c in self._children)


##############################
## Translations
##############################

class Rule(Node):
    """One row of a constrained translation: if `constraints` match, render
    `translation`."""
    _numc = 2

    @property
    def constraints(self) -> ConstraintRoot:
        return self._children[0]

    @property
    def translation(self) -> TextRoot:
        return self._children[1]


class RuleSet(Node):
    """An ordered constrained translation. Rules are tried first to last and
    the first match wins."""
    _numc = -1

    @property
    def rules(self) -> tp.Tuple[Rule, ...]:
        return self._children


Translation = tp.Union[TextRoot, RuleSet]
