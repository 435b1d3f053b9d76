from __future__ import annotations

import html
import typing as tp

from .safe_string import SafeString


class TranslationContext(tp.Protocol):
    def encode(self, value: str) -> str: ...

    def is_safe_string(self, value: tp.Any) -> bool: ...

    def convert_safe_string(self, value: tp.Any) -> str: ...

    def make_safe_string(self, value: str) -> tp.Any: ...


class HtmlContext:
    """Encodes translations for HTML output."""

    def __init__(self, quote: bool = True):
        self.quote = quote

    def encode(self, value: str) -> str:
        return html.escape(value, quote=self.quote)

    def is_safe_string(self, value: tp.Any) -> bool:
        return isinstance(value, SafeString)

    def convert_safe_string(self, value: tp.Any) -> str:
        return str(value)

    def make_safe_string(self, value: str) -> SafeString:
        return SafeString(value)
