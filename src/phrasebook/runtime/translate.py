from __future__ import annotations

import ast
import typing as tp

from .context import TranslationContext

Translation = tp.Union[str, tp.Callable[[tp.Mapping[str, tp.Any], tp.Mapping[str, tp.Callable], TranslationContext], str]]


class TranslationNotFoundError(KeyError):
    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self):
        return f"Unknown translation: {self.key}"


def load_translations(module: ast.Module, variable: str = "translations", filename: str = "<translations>") -> tp.Dict[str, Translation]:
    """Execute a compiled translations module and return its `translations`
    dict."""
    code = compile(module, filename, "exec")
    namespace: tp.Dict[str, tp.Any] = {}
    exec(code, namespace)
    return namespace[variable]


def translate(
    translations: tp.Mapping[str, Translation],
    key: str,
    params: tp.Mapping[str, tp.Any],
    functions: tp.Mapping[str, tp.Callable],
    context: TranslationContext,
) -> str:
    """Render `key`. Errors raised by a compiled translation, such as the
    TypeError of a failed parameter guard or a ZeroDivisionError, propagate
    to the caller."""
    if key not in translations:
        raise TranslationNotFoundError(key)
    tr = translations[key]
    # Constant translations are stored unencoded
    if isinstance(tr, str):
        return context.encode(tr)
    return tr(params, functions, context)
