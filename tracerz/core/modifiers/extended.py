from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from tracerz.core.modifiers.registry import ModifierMap, tree_modifier

if TYPE_CHECKING:
    from tracerz.core.tree import Tree


def pop(tree: "Tree", rule: Optional[str]) -> str:
    """Drop the latest runtime override for `rule`, restoring the previous definition."""
    if rule:
        tree.pop(rule)
    return ""


def base_extended_modifiers() -> ModifierMap:
    return {
        "pop!!": tree_modifier(pop),
    }
