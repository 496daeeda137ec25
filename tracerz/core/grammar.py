from __future__ import annotations

import random
from typing import Any, Callable, Mapping, Optional, Union

from tracerz.core.handlers import Handler, HandlerMap
from tracerz.core.modifiers.registry import Modifier, ModifierMap, as_modifier
from tracerz.core.tree import Sampler, Tree, uniform_sampler


class Grammar:
    """Rule table plus the random source and registries shared by every generation.

    Each call creates a fresh Tree; the random source is shared, so repeated
    calls continue the same random sequence.
    """

    def __init__(
        self,
        rules: Optional[Mapping[str, Any]] = None,
        rng: Any = None,
        *,
        sampler: Sampler = uniform_sampler,
    ) -> None:
        self.rules: dict[str, Any] = dict(rules or {})
        self.rng = rng if rng is not None else random.Random()
        self.sampler = sampler
        self.modifiers: ModifierMap = {}
        self.handlers: HandlerMap = {}

    def add_modifier(self, name: str, mod: Union[Modifier, Callable[..., Any]]) -> None:
        """Register `mod` under `name`. Plain callables become string modifiers."""
        self.modifiers[name] = as_modifier(mod, name=name)

    def add_modifiers(self, mods: Mapping[str, Union[Modifier, Callable[..., Any]]]) -> None:
        for name, mod in mods.items():
            self.add_modifier(name, mod)

    def add_handler(self, name: str, handler: Handler) -> None:
        self.handlers[name] = handler

    def add_handlers(self, handlers: Mapping[str, Handler]) -> None:
        for name, handler in handlers.items():
            self.add_handler(name, handler)

    def get_tree(self, text: str) -> Tree:
        """Return an unexpanded tree for `text`."""
        return Tree(
            text,
            self.rules,
            self.rng,
            sampler=self.sampler,
            modifiers=self.modifiers,
            handlers=self.handlers,
        )

    def expanded_tree(self, text: str) -> Tree:
        return self.get_tree(text).expand_all()

    def flatten(self, text: str) -> str:
        return self.expanded_tree(text).flatten()
