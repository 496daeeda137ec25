from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from tracerz.core.errors import GrammarValidationError
from tracerz.core.handlers import HandlerMap
from tracerz.core.model import ChoiceRule, LiteralRule, TaggedRule, parse_rule_contents
from tracerz.core.patterns import ASSIGNED_KEY_RE, BARE_REFERENCE_RE, NAME_RE, REFERENCE_RE


def validate_grammar(
    rules: Mapping[str, Any],
    handlers: Optional[HandlerMap] = None,
    extra_texts: Iterable[str] = (),
) -> list[GrammarValidationError]:
    """Check rule names, rule contents and rule references.

    A reference is satisfied by a grammar rule or by a key that some action in
    the grammar, or in `extra_texts` (e.g. the text about to be expanded),
    assigns. Handler names are only checked when `handlers` is given.
    """

    errors: list[GrammarValidationError] = []
    texts_by_rule: dict[str, list[str]] = {}

    for name, raw in rules.items():
        if not isinstance(name, str) or not NAME_RE.match(name):
            errors.append(
                GrammarValidationError(
                    code="E_INVALID_RULE_NAME",
                    message="rule names must be non-empty and alphanumeric",
                    rule=str(name),
                )
            )
            continue

        try:
            contents = parse_rule_contents(raw, rule=name)
        except GrammarValidationError as e:
            errors.append(e)
            continue

        if isinstance(contents, LiteralRule):
            texts_by_rule[name] = [contents.text]
        elif isinstance(contents, ChoiceRule):
            texts_by_rule[name] = list(contents.options)
        else:
            texts_by_rule[name] = _tagged_texts(contents)
            errors.extend(_check_handler(name, contents, handlers))

    all_texts = [t for texts in texts_by_rule.values() for t in texts] + list(extra_texts)
    assigned = {key for t in all_texts for key in ASSIGNED_KEY_RE.findall(t)}
    known = {n for n in rules if isinstance(n, str)} | assigned

    for name, texts in texts_by_rule.items():
        for ref in _references(texts):
            if ref not in known:
                errors.append(
                    GrammarValidationError(
                        code="E_UNKNOWN_REFERENCE",
                        message=f"reference to undefined rule: {ref}",
                        rule=name,
                    )
                )

    return _sorted(_dedupe(errors))


def summarize_grammar(rules: Mapping[str, Any]) -> str:
    counts = {"literal": 0, "choice": 0, "tagged": 0}
    for name, raw in rules.items():
        contents = parse_rule_contents(raw, rule=name)
        if isinstance(contents, LiteralRule):
            counts["literal"] += 1
        elif isinstance(contents, ChoiceRule):
            counts["choice"] += 1
        else:
            counts["tagged"] += 1
    lines = [f"OK: {len(rules)} rules"]
    lines.append(", ".join(f"{k}={v}" for k, v in counts.items()))
    return "\n".join(lines)


def _tagged_texts(contents: TaggedRule) -> list[str]:
    options = contents.fields.get("options")
    if isinstance(options, list):
        return [o for o in options if isinstance(o, str)]
    return []


def _check_handler(
    name: str, contents: TaggedRule, handlers: Optional[HandlerMap]
) -> list[GrammarValidationError]:
    if contents.handler is None:
        return [
            GrammarValidationError(
                code="E_MISSING_HANDLER",
                message="rule object has no 'handler' field",
                rule=name,
                path="handler",
            )
        ]
    if handlers is not None and contents.handler not in handlers:
        return [
            GrammarValidationError(
                code="E_UNKNOWN_HANDLER",
                message=f"handler is not registered: {contents.handler} (choose one of: {', '.join(sorted(handlers))})",
                rule=name,
                path="handler",
            )
        ]
    return []


def _references(texts: Iterable[str]) -> list[str]:
    # REFERENCE_RE skips references nested inside leading actions; the bare pattern finds those.
    refs: list[str] = []
    for t in texts:
        refs.extend(m.group(1) for m in REFERENCE_RE.finditer(t))
        refs.extend(m.group(1) for m in BARE_REFERENCE_RE.finditer(t))
    return refs


def _dedupe(errors: list[GrammarValidationError]) -> list[GrammarValidationError]:
    seen: set[tuple[str, str, str, str]] = set()
    out: list[GrammarValidationError] = []
    for e in errors:
        k = (e.rule or "", e.path or "", e.code, e.message)
        if k not in seen:
            seen.add(k)
            out.append(e)
    return out


def _sorted(errors: list[GrammarValidationError]) -> list[GrammarValidationError]:
    return sorted(errors, key=lambda e: (e.rule or "", e.path or "", e.code, e.message))
