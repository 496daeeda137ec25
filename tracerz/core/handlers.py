from __future__ import annotations

from typing import Any, Callable

from tracerz.core.errors import GrammarValidationError


Handler = Callable[[dict[str, Any], Any], Any]
HandlerMap = dict[str, Handler]


def _options(obj: dict[str, Any], handler: str) -> list[str]:
    options = obj.get("options")
    if not isinstance(options, list) or not options or not all(isinstance(o, str) for o in options):
        raise GrammarValidationError(
            code="E_INVALID_RULE",
            message=f"'{handler}' handler needs options: a non-empty list of strings",
            path="options",
        )
    return options


def weighted(obj: dict[str, Any], rng: Any) -> str:
    """Pick one of `options` with probability proportional to `weights`."""

    options = _options(obj, "weighted")
    weights = obj.get("weights")
    if (
        not isinstance(weights, list)
        or len(weights) != len(options)
        or any(isinstance(w, bool) or not isinstance(w, (int, float)) or w < 0 for w in weights)
    ):
        raise GrammarValidationError(
            code="E_INVALID_RULE",
            message="'weighted' handler needs weights: non-negative numbers, one per option",
            path="weights",
        )

    total = sum(weights)
    if total <= 0:
        return options[rng.randrange(len(options))]
    r = rng.random() * total
    acc = 0.0
    for option, w in zip(options, weights):
        acc += w
        if r < acc:
            return option
    return options[-1]


def binomial(obj: dict[str, Any], rng: Any) -> str:
    """Pick the option indexed by the successes in len(options)-1 trials of probability p."""

    options = _options(obj, "binomial")
    p = obj.get("p", 0.5)
    if isinstance(p, bool) or not isinstance(p, (int, float)) or not 0 <= p <= 1:
        raise GrammarValidationError(
            code="E_INVALID_RULE",
            message="'binomial' handler needs p between 0 and 1",
            path="p",
        )
    successes = sum(1 for _ in range(len(options) - 1) if rng.random() < p)
    return options[successes]


def base_handlers() -> HandlerMap:
    return {
        "weighted": weighted,
        "binomial": binomial,
    }
