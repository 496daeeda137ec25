from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class GrammarError(Exception):
    """Base error envelope for grammar loading, validation and expansion."""

    code: str
    message: str
    rule: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.rule:
            parts.append(self.rule)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<grammar>"
        return f"{loc}: {self.code}: {self.message}"

    def within(self, frame: str) -> "GrammarError":
        """Return a copy with `frame` prepended to the context path."""
        path = frame if not self.path else f"{frame} > {self.path}"
        return replace(self, path=path)


class GrammarLoadError(GrammarError):
    pass


class GrammarValidationError(GrammarError):
    pass


class UnknownRule(GrammarError):
    pass


class UnknownHandler(GrammarError):
    pass


class HandlerTypeMismatch(GrammarError):
    pass


class WrongParameterCount(GrammarError):
    pass


class ModifierSignatureError(GrammarError):
    pass
