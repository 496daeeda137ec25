from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Literal, Optional, Union

from tracerz.core.errors import GrammarError, ModifierSignatureError, WrongParameterCount
from tracerz.core.patterns import parse_modifier_call

if TYPE_CHECKING:
    from tracerz.core.node import Node
    from tracerz.core.tree import Tree


logger = logging.getLogger(__name__)

ModifierKind = Literal["string", "tree", "node"]

# Leading positional arguments each kind receives before its extra parameters.
_LEADING_ARGS: dict[str, int] = {"string": 1, "tree": 2, "node": 2}


@dataclass(frozen=True)
class Modifier:
    """A registered modifier.

    - string: func(text, *params) -> str
    - tree:   func(tree, rule, *params) -> str (return value discarded)
    - node:   func(node, rule, *params) -> str (return value discarded)
    """

    func: Callable[..., Any]
    arity: int = 0
    kind: ModifierKind = "string"


ModifierMap = dict[str, Modifier]


def make_modifier(
    func: Callable[..., Any],
    *,
    kind: ModifierKind = "string",
    arity: Optional[int] = None,
    name: Optional[str] = None,
) -> Modifier:
    """Build a Modifier, inferring arity from the callable's signature when not given.

    Raises ModifierSignatureError when the callable cannot accept the declared arity.
    """

    if kind not in _LEADING_ARGS:
        raise ModifierSignatureError(
            code="E_MODIFIER_SIGNATURE",
            message=f"unknown modifier kind: {kind} (choose one of: string, tree, node)",
            path=name,
        )

    leading = _LEADING_ARGS[kind]
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        sig = None

    if arity is None:
        if sig is None:
            arity = 0
        else:
            positional = [
                p
                for p in sig.parameters.values()
                if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
            ]
            arity = max(0, len(positional) - leading)

    if arity < 0:
        raise ModifierSignatureError(
            code="E_MODIFIER_SIGNATURE",
            message=f"arity must be >= 0, got {arity}",
            path=name,
        )

    if sig is not None:
        try:
            sig.bind(*([None] * (leading + arity)))
        except TypeError as e:
            raise ModifierSignatureError(
                code="E_MODIFIER_SIGNATURE",
                message=f"{kind} modifier cannot take {arity} parameter(s): {e}",
                path=name,
            ) from e

    return Modifier(func=func, arity=arity, kind=kind)


def string_modifier(func: Callable[..., str], arity: Optional[int] = None) -> Modifier:
    return make_modifier(func, kind="string", arity=arity)


def tree_modifier(func: Callable[..., Any], arity: Optional[int] = None) -> Modifier:
    return make_modifier(func, kind="tree", arity=arity)


def node_modifier(func: Callable[..., Any], arity: Optional[int] = None) -> Modifier:
    return make_modifier(func, kind="node", arity=arity)


def as_modifier(mod: Union[Modifier, Callable[..., Any]], name: Optional[str] = None) -> Modifier:
    if isinstance(mod, Modifier):
        return mod
    return make_modifier(mod, kind="string", name=name)


def apply_modifier(
    modifiers: ModifierMap,
    call: str,
    text: str,
    tree: "Tree",
    node: "Node",
    run_effects: bool = True,
) -> str:
    """Apply one modifier invocation `call` to `text`.

    Unknown modifier names leave `text` unchanged. Tree and node modifiers
    always yield ""; their functions are only called when `run_effects` is set.
    """

    name, params = parse_modifier_call(call)
    mod = modifiers.get(name)
    if mod is None:
        logger.debug("skipping unknown modifier %r on rule %r", name, node.rule)
        return text

    if len(params) != mod.arity:
        raise WrongParameterCount(
            code="E_WRONG_PARAMETER_COUNT",
            message=f"modifier '{name}' expects {mod.arity} parameter(s), got {len(params)} in '{call}'",
            rule=node.rule,
        )

    if mod.kind == "string":
        try:
            return mod.func(text, *params)
        except GrammarError as e:
            if e.rule:
                raise
            raise replace(e, rule=node.rule) from e
    if not run_effects:
        return ""
    if mod.kind == "tree":
        mod.func(tree, node.rule, *params)
    else:
        mod.func(node, node.rule, *params)
    return ""
