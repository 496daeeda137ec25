from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Optional


ShapeKind = Literal[
    "literal",
    "rule",
    "rule_with_actions",
    "keyless_rule_action",
    "key_rule_action",
    "key_text_action",
    "actions",
    "mixed",
]

_NAME = r"[A-Za-z0-9]+"
_MODS = r"(?:\.[^.#]+)*"
_ACTION = r"\[[^\]]*\]"

ACTION_RE = re.compile(_ACTION)
MODIFIER_RE = re.compile(r"\.([^.]+)")
PARAMETRIC_MODIFIER_RE = re.compile(r"^([^(]+)\((.*)\)$", re.DOTALL)
RULE_RE = re.compile(rf"#(?:{_ACTION})*{_NAME}{_MODS}#")
ONLY_RULE_RE = re.compile(rf"^#({_NAME})({_MODS})#$")
ONLY_RULE_WITH_ACTIONS_RE = re.compile(rf"^#((?:{_ACTION})+)({_NAME})({_MODS})#$")
ONLY_KEYLESS_RULE_ACTION_RE = re.compile(rf"^\[(#{_NAME}{_MODS}#)\]$")
ONLY_KEY_WITH_RULE_ACTION_RE = re.compile(rf"^\[({_NAME}):(#{_NAME}{_MODS}#)\]$")
ONLY_KEY_WITH_TEXT_ACTION_RE = re.compile(rf"^\[({_NAME}):([^#\]]+)\]$")
ONLY_ACTIONS_RE = re.compile(rf"^(?:{_ACTION})+$")
NAME_RE = re.compile(rf"^{_NAME}$")
REFERENCE_RE = re.compile(rf"#(?:{_ACTION})*({_NAME}){_MODS}#")
BARE_REFERENCE_RE = re.compile(rf"#({_NAME}){_MODS}#")
ASSIGNED_KEY_RE = re.compile(rf"\[({_NAME}):")


@dataclass(frozen=True)
class Shape:
    """Result of classifying a node's raw text.

    Only the fields relevant to `kind` are populated:
      - rule: name, modifiers
      - rule_with_actions: actions, rule (the rewrapped reference)
      - keyless_rule_action: rule
      - key_rule_action: key, rule
      - key_text_action: key, values
      - actions / mixed: parts
    """

    kind: ShapeKind
    name: Optional[str] = None
    modifiers: tuple[str, ...] = ()
    key: Optional[str] = None
    rule: Optional[str] = None
    actions: Optional[str] = None
    values: tuple[str, ...] = ()
    parts: tuple[str, ...] = ()


def contains_rule(text: str) -> bool:
    return RULE_RE.search(text) is not None


def contains_only_actions(text: str) -> bool:
    return ONLY_ACTIONS_RE.match(text) is not None


def needs_expansion(text: str) -> bool:
    return contains_rule(text) or contains_only_actions(text)


def split_modifiers(mods: str) -> tuple[str, ...]:
    """Split `.a.s.replace(x,y)` into `("a", "s", "replace(x,y)")`."""
    return tuple(MODIFIER_RE.findall(mods))


def parse_modifier_call(call: str) -> tuple[str, list[str]]:
    """Return (name, params) for `name` or `name(p1,p2,...)`.

    Parameters are split on commas and never trimmed; `name()` has no parameters.
    """

    m = PARAMETRIC_MODIFIER_RE.match(call)
    if not m:
        return call, []
    name, body = m.group(1), m.group(2)
    return name, body.split(",") if body else []


def classify(text: str) -> Shape:
    """Classify `text` into exactly one shape; the most specific pattern wins."""

    m = ONLY_RULE_RE.match(text)
    if m:
        return Shape(kind="rule", name=m.group(1), modifiers=split_modifiers(m.group(2)))

    m = ONLY_RULE_WITH_ACTIONS_RE.match(text)
    if m:
        return Shape(
            kind="rule_with_actions",
            actions=m.group(1),
            rule=f"#{m.group(2)}{m.group(3)}#",
        )

    m = ONLY_KEYLESS_RULE_ACTION_RE.match(text)
    if m:
        return Shape(kind="keyless_rule_action", rule=m.group(1))

    m = ONLY_KEY_WITH_RULE_ACTION_RE.match(text)
    if m:
        return Shape(kind="key_rule_action", key=m.group(1), rule=m.group(2))

    m = ONLY_KEY_WITH_TEXT_ACTION_RE.match(text)
    if m:
        return Shape(kind="key_text_action", key=m.group(1), values=tuple(m.group(2).split(",")))

    if contains_only_actions(text):
        groups = tuple(ACTION_RE.findall(text))
        # A lone bracket group that is none of the actions above stays literal text.
        if len(groups) == 1:
            return Shape(kind="literal")
        return Shape(kind="actions", parts=groups)

    if contains_rule(text):
        return Shape(kind="mixed", parts=tuple(_split_mixed(text)))

    return Shape(kind="literal")


def _split_mixed(text: str) -> list[str]:
    parts: list[str] = []
    pos = 0
    for m in RULE_RE.finditer(text):
        if m.start() > pos:
            parts.append(text[pos : m.start()])
        parts.append(m.group(0))
        pos = m.end()
    if pos < len(text):
        parts.append(text[pos:])
    return parts
