from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, Optional

from tracerz.core.errors import WrongParameterCount
from tracerz.core.modifiers.registry import apply_modifier
from tracerz.core.patterns import classify, needs_expansion

if TYPE_CHECKING:
    from tracerz.core.tree import Tree


class Node:
    """One unit of the expansion tree.

    `complete` is fixed at construction: True when the text holds no rule
    reference and no action syntax. `expanded` flips once, when the node is
    classified and split into children.
    """

    def __init__(self, text: str, *, hidden: bool = False) -> None:
        self.text = text
        self.complete = not needs_expansion(text)
        self.expanded = self.complete
        self.children: list[Node] = []
        self.key: Optional[str] = None
        self.hidden = hidden
        self.is_action = False
        self.modifiers: list[str] = []
        self.rule: Optional[str] = None
        self.effects_fired = False

    def __repr__(self) -> str:
        return f"Node({self.text!r}, children={len(self.children)}, key={self.key!r}, hidden={self.hidden})"

    def add_child(self, text: str) -> "Node":
        child = Node(text, hidden=self.hidden)
        self.children.append(child)
        return child

    def has_children(self) -> bool:
        return bool(self.children)

    def children_complete(self) -> bool:
        return all(child.complete for child in self.children)

    def last_expandable_child(self) -> Optional["Node"]:
        for child in reversed(self.children):
            if not child.complete:
                return child
        return None

    def iter_leaves(self) -> Iterator["Node"]:
        if not self.children:
            yield self
            return
        for child in self.children:
            yield from child.iter_leaves()

    def expand(self, tree: "Tree") -> None:
        """Classify this node's text and create its children in one step."""

        if self.expanded:
            return

        shape = classify(self.text)

        if shape.kind == "rule":
            assert shape.name is not None
            child = self.add_child(tree.resolve(shape.name))
            child.rule = shape.name
            child.modifiers.extend(shape.modifiers)

        elif shape.kind == "rule_with_actions":
            assert shape.actions is not None and shape.rule is not None
            self.add_child(shape.actions)
            self.add_child(shape.rule)

        elif shape.kind == "keyless_rule_action":
            assert shape.rule is not None
            self.hidden = True
            self.is_action = True
            # Empty key: flattened on completion only to run modifier side effects.
            self.add_child(shape.rule).key = ""

        elif shape.kind == "key_rule_action":
            assert shape.rule is not None
            self.hidden = True
            self.is_action = True
            self.add_child(shape.rule).key = shape.key

        elif shape.kind == "key_text_action":
            assert shape.key is not None
            self.hidden = True
            self.is_action = True
            for value in shape.values:
                self.add_child(value)
            tree.push(shape.key, list(shape.values))

        elif shape.kind in ("actions", "mixed"):
            for part in shape.parts:
                self.add_child(part)

        self.expanded = True

    def flatten(
        self,
        tree: "Tree",
        ignore_hidden: bool = True,
        ignore_modifiers: bool = False,
        skip_actions: bool = False,
    ) -> str:
        """Concatenate leaf text below this node, applying modifiers bottom-up.

        Hidden leaves contribute "" when `ignore_hidden` is set. Modifiers never
        run on an empty base string. Tree and node modifiers fire at most once per
        node, normally when a keyed subtree is captured, so flattening an expanded
        tree again leaves the runtime dictionary alone. With `skip_actions`, action
        subtrees below this node contribute "" whatever their hidden flag.
        """
        try:
            return self._flatten(tree, ignore_hidden, ignore_modifiers, skip_actions)
        except WrongParameterCount as e:
            raise e.within(repr(self.text)) from None

    def _flatten(self, tree: "Tree", ignore_hidden: bool, ignore_modifiers: bool, skip_actions: bool) -> str:
        if skip_actions and self.is_action:
            return ""
        if self.modifiers and not ignore_modifiers:
            output = self._flatten(tree, ignore_hidden, True, skip_actions)
            if not output:
                return ""
            run_effects = not self.effects_fired
            self.effects_fired = True
            for call in self.modifiers:
                output = apply_modifier(tree.modifiers, call, output, tree, self, run_effects)
            return output

        if not self.children:
            if ignore_hidden and self.hidden:
                return ""
            return self.text

        return "".join(child.flatten(tree, ignore_hidden, False, skip_actions) for child in self.children)
