# Tree nodes
from .compiler.dsl.ir import (
    Pos, Number, StringLit, Var, Neg, Add, Sub, Mul, Div, Call,
    Literal, TextVar, TextExpr, TextRoot,
    Ident, NumberValue, EnumValue, GenderValue, Ignore, Equality, Inequality, ConstraintRoot,
    Rule, RuleSet, walk,
)
_nodes = [
    'Pos', 'Number', 'StringLit', 'Var', 'Neg', 'Add', 'Sub', 'Mul', 'Div', 'Call',
    'Literal', 'TextVar', 'TextExpr', 'TextRoot',
    'Ident', 'NumberValue', 'EnumValue', 'GenderValue', 'Ignore', 'Equality', 'Inequality', 'ConstraintRoot',
    'Rule', 'RuleSet', 'walk',
]

# Types
from .compiler.dsl.ir_types import InferredType
from .compiler.dsl.type_map import TypeMap, CustomUsage
_types = ['InferredType', 'TypeMap', 'CustomUsage']

# Errors
from .compiler.errors import (
    PhrasebookError, ParseError, TranslationTypeError, UnknownVariableError, UnknownFunctionError,
    DeadCodeError, FrozenTypeMapError, FunctionRedeclarationError, ConstantFoldError, show_error_location,
)
_errors = [
    'PhrasebookError', 'ParseError', 'TranslationTypeError', 'UnknownVariableError', 'UnknownFunctionError',
    'DeadCodeError', 'FrozenTypeMapError', 'FunctionRedeclarationError', 'ConstantFoldError', 'show_error_location',
]

# Pipeline
from .compiler.passes.utils import (
    infer_translation_types, analyze_only_translation, analyze_translation,
    compile_translation, compile_translations,
)
from .compiler.emitting import EmitContext
_pipeline = [
    'infer_translation_types', 'analyze_only_translation', 'analyze_translation',
    'compile_translation', 'compile_translations', 'EmitContext',
]

# Runtime
from .runtime import SafeString, HtmlContext, translate, load_translations, TranslationNotFoundError
_runtime = ['SafeString', 'HtmlContext', 'translate', 'load_translations', 'TranslationNotFoundError']

__all__ = [
    *_nodes,
    *_types,
    *_errors,
    *_pipeline,
    *_runtime,
]
