from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Iterator, Mapping, Optional

from tracerz.core.errors import (
    GrammarValidationError,
    HandlerTypeMismatch,
    UnknownHandler,
    UnknownRule,
)
from tracerz.core.handlers import HandlerMap
from tracerz.core.model import ChoiceRule, LiteralRule, TaggedRule, parse_rule_contents
from tracerz.core.modifiers.registry import ModifierMap
from tracerz.core.node import Node


logger = logging.getLogger(__name__)

# sampler(rng, low, high) -> int in [low, high]
Sampler = Callable[[Any, int, int], int]


def uniform_sampler(rng: Any, low: int, high: int) -> int:
    return rng.randint(low, high)


class Tree:
    """An expansion tree for one input string.

    Expansion is depth-first and left-to-right, one node per `expand()` call.
    `_pending` holds nodes waiting to be classified (top = next). `_expanding`
    holds the chain of nodes whose subtrees are still being expanded; when a
    node's subtree finishes, it and every ancestor whose last expandable child
    just finished are popped, and keyed nodes are captured into the runtime
    dictionary in that order.
    """

    def __init__(
        self,
        text: str,
        rules: Mapping[str, Any],
        rng: Any,
        *,
        sampler: Sampler = uniform_sampler,
        modifiers: Optional[ModifierMap] = None,
        handlers: Optional[HandlerMap] = None,
    ) -> None:
        self.root = Node(text)
        self.rules = rules
        self.rng = rng
        self.sampler = sampler
        self.modifiers: ModifierMap = modifiers if modifiers is not None else {}
        self.handlers: HandlerMap = handlers if handlers is not None else {}
        self.runtime: dict[str, list[Any]] = {}
        self._pending: list[Node] = [] if self.root.complete else [self.root]
        self._expanding: list[Node] = []

    # Runtime dictionary

    def push(self, key: str, value: Any) -> None:
        logger.debug("push %r = %r", key, value)
        self.runtime.setdefault(key, []).append(value)

    def pop(self, key: str) -> Optional[Any]:
        stack = self.runtime.get(key)
        if not stack:
            logger.debug("pop %r: nothing to pop", key)
            return None
        value = stack.pop()
        if not stack:
            del self.runtime[key]
        logger.debug("pop %r -> %r", key, value)
        return value

    def lookup(self, key: str) -> Optional[Any]:
        stack = self.runtime.get(key)
        return stack[-1] if stack else None

    # Rule resolution

    def resolve(self, name: str) -> str:
        """Return one expansion for rule `name`, preferring runtime overrides."""

        stack = self.runtime.get(name)
        if stack:
            raw = stack[-1]
        elif name in self.rules:
            raw = self.rules[name]
        else:
            raise UnknownRule(code="E_UNKNOWN_RULE", message=f"rule is not defined: {name}", rule=name)

        contents = parse_rule_contents(raw, rule=name)

        if isinstance(contents, LiteralRule):
            return contents.text

        if isinstance(contents, ChoiceRule):
            index = self.sampler(self.rng, 0, len(contents.options) - 1)
            return contents.options[index]

        assert isinstance(contents, TaggedRule)
        if contents.handler is None:
            raise UnknownHandler(
                code="E_MISSING_HANDLER",
                message="rule object has no 'handler' field",
                rule=name,
            )
        handler = self.handlers.get(contents.handler)
        if handler is None:
            raise UnknownHandler(
                code="E_UNKNOWN_HANDLER",
                message=f"handler is not registered: {contents.handler}",
                rule=name,
            )
        try:
            output = handler(contents.fields, self.rng)
        except GrammarValidationError as e:
            if e.rule:
                raise
            raise replace(e, rule=name) from e
        if not isinstance(output, str):
            raise HandlerTypeMismatch(
                code="E_HANDLER_TYPE",
                message=f"handler '{contents.handler}' returned {type(output).__name__}, expected str",
                rule=name,
            )
        return output

    # Expansion

    def expand(self) -> bool:
        """Expand the next pending node. Returns True while more work remains."""

        if not self._pending:
            return False

        node = self._pending.pop()
        self._expanding.append(node)
        node.expand(self)
        logger.debug("expanded %r into %d child(ren)", node.text, len(node.children))

        unexpanded = [child for child in node.children if not child.expanded]
        self._pending.extend(reversed(unexpanded))

        if not unexpanded:
            self._finish()

        return bool(self._pending)

    def expand_all(self) -> "Tree":
        while self.expand():
            pass
        return self

    def expand_breadth_first(self) -> bool:
        """Expand every unexpanded leaf once, left to right.

        Each call goes one level deeper across the whole tree. Nodes expanded this
        way never trigger key capture, so `[key:#rule#]` bindings are not recorded;
        text actions still push. Returns True while more work remains.
        """

        frontier = [leaf for leaf in self.leaves() if not leaf.expanded]
        if not frontier:
            self._pending = []
            return False

        for node in frontier:
            node.expand(self)
        logger.debug("breadth-first pass expanded %d node(s)", len(frontier))

        self._expanding.clear()
        self._pending = [leaf for leaf in self.leaves() if not leaf.expanded]
        self._pending.reverse()
        return bool(self._pending)

    def is_expanded(self) -> bool:
        return not self._pending

    def _finish(self) -> None:
        finished = self._expanding.pop()
        self._capture(finished)
        while self._expanding and self._expanding[-1].last_expandable_child() is finished:
            finished = self._expanding.pop()
            self._capture(finished)

    def _capture(self, node: Node) -> None:
        if node.key is None:
            return
        # The keyed node inherits its action parent's hidden flag; nested actions stay out of the value.
        value = node.flatten(self, ignore_hidden=False, skip_actions=True)
        if node.key:
            self.push(node.key, value)
        else:
            logger.debug("discarded keyless capture of %r", node.text)

    # Introspection

    def leaves(self) -> Iterator[Node]:
        return self.root.iter_leaves()

    def pending(self) -> list[Node]:
        return list(reversed(self._pending))

    def flatten(
        self,
        node: Optional[Node] = None,
        *,
        ignore_hidden: bool = True,
        ignore_modifiers: bool = False,
    ) -> str:
        target = node if node is not None else self.root
        return target.flatten(self, ignore_hidden, ignore_modifiers)
