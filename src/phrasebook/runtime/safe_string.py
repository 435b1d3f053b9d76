from __future__ import annotations


class SafeString:
    """Content that is already encoded for the output format and must not be
    encoded again."""
    __slots__ = ("_contents",)

    def __init__(self, contents: str):
        self._contents = contents

    def __str__(self):
        return self._contents

    def __repr__(self):
        return f"SafeString({self._contents!r})"

    def __eq__(self, other):
        return isinstance(other, SafeString) and self._contents == other._contents

    def __hash__(self):
        return hash(self._contents)
