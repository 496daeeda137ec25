from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from tracerz.core.errors import GrammarValidationError


@dataclass(frozen=True)
class LiteralRule:
    text: str


@dataclass(frozen=True)
class ChoiceRule:
    options: tuple[str, ...]


@dataclass(frozen=True)
class TaggedRule:
    handler: Optional[str]
    fields: dict[str, Any] = field(default_factory=dict)


RuleContents = Union[LiteralRule, ChoiceRule, TaggedRule]


def parse_rule_contents(raw: Any, rule: Optional[str] = None) -> RuleContents:
    """Convert a grammar (or runtime dictionary) value into its rule-contents variant.

    Raises GrammarValidationError for values that are none of string, non-empty
    list of strings, or mapping.
    """

    if isinstance(raw, str):
        return LiteralRule(text=raw)

    if isinstance(raw, (list, tuple)):
        if not raw:
            raise GrammarValidationError(
                code="E_EMPTY_CHOICE",
                message="alternatives list must not be empty",
                rule=rule,
            )
        for i, item in enumerate(raw):
            if not isinstance(item, str):
                raise GrammarValidationError(
                    code="E_INVALID_RULE",
                    message=f"alternative must be a string, got {type(item).__name__}",
                    rule=rule,
                    path=f"[{i}]",
                )
        return ChoiceRule(options=tuple(raw))

    if isinstance(raw, dict):
        handler = raw.get("handler")
        if handler is not None and not isinstance(handler, str):
            raise GrammarValidationError(
                code="E_INVALID_RULE",
                message="handler must be a string",
                rule=rule,
                path="handler",
            )
        return TaggedRule(handler=handler, fields=dict(raw))

    raise GrammarValidationError(
        code="E_INVALID_RULE",
        message=f"rule must be a string, a list of strings or a mapping, got {type(raw).__name__}",
        rule=rule,
    )
