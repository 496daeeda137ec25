"""Tracerz: a generative grammar expander.

    >>> grammar = Grammar({"animal": "fox", "origin": "the #animal.s#"})
    >>> grammar.add_modifiers(base_english_modifiers())
    >>> grammar.flatten("#origin#")
    'the foxes'
"""

from tracerz.core.errors import (
    GrammarError,
    GrammarLoadError,
    GrammarValidationError,
    HandlerTypeMismatch,
    ModifierSignatureError,
    UnknownHandler,
    UnknownRule,
    WrongParameterCount,
)
from tracerz.core.grammar import Grammar
from tracerz.core.handlers import base_handlers
from tracerz.core.modifiers.english import base_english_modifiers
from tracerz.core.modifiers.extended import base_extended_modifiers
from tracerz.core.modifiers.registry import (
    Modifier,
    make_modifier,
    node_modifier,
    string_modifier,
    tree_modifier,
)
from tracerz.core.node import Node
from tracerz.core.tree import Tree, uniform_sampler

__all__ = [
    "Grammar",
    "GrammarError",
    "GrammarLoadError",
    "GrammarValidationError",
    "HandlerTypeMismatch",
    "Modifier",
    "ModifierSignatureError",
    "Node",
    "Tree",
    "UnknownHandler",
    "UnknownRule",
    "WrongParameterCount",
    "base_english_modifiers",
    "base_extended_modifiers",
    "base_handlers",
    "make_modifier",
    "node_modifier",
    "string_modifier",
    "tree_modifier",
    "uniform_sampler",
]
