from __future__ import annotations
import typing as tp

if tp.TYPE_CHECKING:
    from .dsl import ir
    from .dsl.ir_types import InferredType


def show_error_location(input: str, err_text: str, line: int, column: int) -> str:
    """Render `input` with line numbers and point at (`line`, `column`).

        1: first line
        2: You have $n items
           ---------^
           <err_text>

    Lines are 1-indexed, columns 0-indexed. The pointer is clamped to the
    source so a position past the end still renders.
    """
    lines = input.split("\n")
    width = len(str(len(lines)))
    numbered = [
        f"{i}:{' ' * (width - len(str(i)) + 1)}{text}"
        for i, text in enumerate(lines, start=1)
    ]
    pad = " " * (width + 2)
    line = min(max(line, 1), len(lines))
    column = min(max(column, 0), len(lines[line - 1]))
    numbered[line:line] = [f"{pad}{'-' * column}^", f"{pad}{err_text}"]
    return "\n".join(numbered)


def _print_types(t: tp.Union[InferredType, tp.Sequence[InferredType]]) -> str:
    if not isinstance(t, (list, tuple)):
        return str(t)
    return ", ".join(str(e) for e in t)


class PhrasebookError(Exception):
    """Base class of every error raised while compiling a translation."""


class ParseError(PhrasebookError, ValueError):
    """Raised by a parser front end for malformed text, expressions or
    constraints."""

    def __init__(
        self,
        message: str,
        *,
        text: tp.Optional[str] = None,
        token: tp.Optional[str] = None,
        expected: tp.Optional[tp.Sequence[str]] = None,
        pos: tp.Optional[ir.Pos] = None,
    ):
        if text is not None and pos is not None:
            message = (
                f"Parse error on line {pos.first_line}:\n"
                + show_error_location(text, message, pos.first_line, pos.first_column)
            )
        super().__init__(message)
        self.text = text
        self.token = token
        self.expected = list(expected) if expected is not None else None
        self.pos = pos


class TranslationTypeError(PhrasebookError, TypeError):
    """A type conflict found during inference or typed-tree construction.

    `variable` is None when the offending node is a sub-expression that does
    not involve a variable (e.g. `-"text"`).
    """

    def __init__(
        self,
        expected: tp.Union[InferredType, tp.Sequence[InferredType]],
        found: InferredType,
        *,
        variable: tp.Optional[str] = None,
        node: tp.Optional[ir.Node] = None,
        text: tp.Optional[str] = None,
        constraint_text: tp.Optional[str] = None,
        in_constraints: bool = False,
    ):
        pos = getattr(node, "pos", None)
        if variable is not None:
            detail = f"Variable ${variable} was expected to have type: {_print_types(expected)}, found: {found}."
        else:
            detail = f"Expression was expected to have type: {_print_types(expected)}, found: {found}."
        source = constraint_text if in_constraints else text
        if pos is not None and source is not None:
            message = (
                f"Type error at line {pos.first_line}:\n"
                + show_error_location(source, detail, pos.first_line, pos.first_column)
            )
        else:
            message = f"Type error: {detail}"
        super().__init__(message)
        self.expected_type = expected
        self.found_type = found
        self.variable = variable
        self.node = node
        self.position = pos
        self.text = text
        self.constraint_text = constraint_text


class UnknownVariableError(PhrasebookError, LookupError):
    def __init__(
        self,
        variable: str,
        allowed_variables: tp.Optional[tp.Sequence[str]] = None,
        *,
        node: tp.Optional[ir.Node] = None,
        text: tp.Optional[str] = None,
        constraint_text: tp.Optional[str] = None,
    ):
        pos = getattr(node, "pos", None)
        if allowed_variables is None:
            message = (
                f"No type information for variable ${variable}. "
                "Are you sure you ran the type inference phase first?"
            )
        elif pos is not None and text is not None:
            known = ", ".join(f"${v}" for v in allowed_variables)
            message = (
                f"Unknown variable ${variable} used on line {pos.first_line}:\n"
                + show_error_location(
                    text,
                    f"Variable ${variable} is not known to this translation. Known variables are: {known}",
                    pos.first_line,
                    pos.first_column,
                )
            )
        else:
            known = ", ".join(f"${v}" for v in allowed_variables)
            message = f"Unknown variable ${variable}. Known variables are: {known}"
        super().__init__(message)
        self.variable = variable
        self.allowed_variables = list(allowed_variables) if allowed_variables is not None else None
        self.line = pos.first_line if pos is not None else None
        self.column = pos.first_column if pos is not None else None
        self.input = text
        self.constraints = constraint_text


class UnknownFunctionError(PhrasebookError, LookupError):
    def __init__(
        self,
        function_name: str,
        allowed_functions: tp.Sequence[str],
        *,
        node: tp.Optional[ir.Node] = None,
        text: tp.Optional[str] = None,
        constraint_text: tp.Optional[str] = None,
    ):
        pos = getattr(node, "pos", None)
        known = ", ".join(allowed_functions)
        detail = f"Function {function_name} is not known to this translation. Known functions are: {known}"
        if pos is not None and text is not None:
            message = (
                f"Unknown function {function_name} used on line {pos.first_line}:\n"
                + show_error_location(text, detail, pos.first_line, pos.first_column)
            )
        else:
            message = f"Unknown function {function_name}. {detail}"
        super().__init__(message)
        self.function_name = function_name
        self.allowed_functions = list(allowed_functions)
        self.line = pos.first_line if pos is not None else None
        self.column = pos.first_column if pos is not None else None
        self.input = text
        self.constraints = constraint_text


class DeadCodeError(PhrasebookError):
    """A rule of a constrained translation follows a rule that always
    matches and can therefore never be reached."""

    def __init__(self, message: str, rules: tp.Sequence[ir.Rule], dead_rule: ir.Rule):
        super().__init__(message)
        self.rules = tuple(rules)
        self.dead_rule = dead_rule


class FrozenTypeMapError(PhrasebookError, RuntimeError):
    pass


class FunctionRedeclarationError(PhrasebookError, ValueError):
    pass


class ConstantFoldError(PhrasebookError, ValueError):
    """Raised for arithmetic the folder cannot evaluate. Arithmetic on strings
    is rejected by type checking first, so that case only fires for trees
    that skipped it. Division by a constant zero fires through the pipeline."""
