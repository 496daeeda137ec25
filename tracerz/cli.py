from __future__ import annotations

import json
import random
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.tree import Tree as RichTree

from tracerz.core.config import ConfigError, Settings, load_and_merge
from tracerz.core.errors import GrammarError, GrammarLoadError, GrammarValidationError
from tracerz.core.grammar import Grammar
from tracerz.core.handlers import base_handlers
from tracerz.core.io.load_grammar import load_grammar
from tracerz.core.logger import LOG_LEVELS, setup_logging
from tracerz.core.modifiers.english import base_english_modifiers
from tracerz.core.modifiers.extended import base_extended_modifiers
from tracerz.core.node import Node
from tracerz.core.validate.validate_grammar import summarize_grammar, validate_grammar

app = typer.Typer(add_completion=False, no_args_is_help=True)

MODIFIER_SETS = {
    "english": base_english_modifiers,
    "extended": base_extended_modifiers,
}

HANDLER_SETS = {
    "builtin": base_handlers,
}


@app.callback()
def _callback(
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level: DEBUG|INFO|WARNING|ERROR"),
) -> None:
    """Tracerz grammar expander CLI."""
    if log_level.upper() not in LOG_LEVELS:
        _print_errors(
            [
                GrammarValidationError(
                    code="E_UNKNOWN_LOG_LEVEL",
                    message=f"unknown log level: {log_level} (choose one of: {', '.join(LOG_LEVELS)})",
                    path="log_level",
                )
            ]
        )
        raise typer.Exit(code=2)
    setup_logging(log_level)


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a grammar file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Validate a grammar file: rule shapes, handlers and references."""
    if format not in ("text", "json"):
        _print_errors([_unknown_format(format)])
        raise typer.Exit(code=2)

    def _to_item(e: GrammarError) -> dict:
        return {
            "code": e.code,
            "message": e.message,
            "rule": e.rule,
            "path": e.path,
            "severity": "error",
            "source": "load" if isinstance(e, GrammarLoadError) else "validate",
        }

    def _emit_json(ok: bool, errors: list[GrammarError], exit_code: int, rule_count: int | None) -> None:
        payload = {
            "tool": "tracerz",
            "command": "validate",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
            "rule_count": rule_count,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        rules = load_grammar(path)
    except GrammarLoadError as e:
        if format == "json":
            _emit_json(False, [e], 1, None)
        _print_errors([e])
        raise typer.Exit(code=1)

    errors = validate_grammar(rules, handlers=base_handlers())
    if errors:
        if format == "json":
            _emit_json(False, list(errors), 2, len(rules))
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    if format == "json":
        _emit_json(True, [], 0, len(rules))
    typer.echo(summarize_grammar(rules))


@app.command("expand")
def expand(
    path: str = typer.Argument(..., help="Path to a grammar file (.yaml/.yml/.json)"),
    input: Optional[str] = typer.Option(None, "--input", "-i", help="Text to expand (default: #origin#)"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Number of outputs to generate"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible output"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional YAML settings file"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Expand text against a grammar and print the results."""
    if format not in ("text", "json"):
        _print_errors([_unknown_format(format)])
        raise typer.Exit(code=2)

    settings = _load_settings(config)
    text = input if input is not None else settings.origin
    rules = _load_rules(path, text)
    grammar = _build_grammar(rules, settings, seed)

    n = count if count is not None else settings.count
    if n < 1:
        _print_errors(
            [
                GrammarValidationError(
                    code="E_EXPAND_INVALID_COUNT",
                    message=f"--count must be >= 1, got {n}",
                    path="count",
                )
            ]
        )
        raise typer.Exit(code=2)

    try:
        outputs = [grammar.flatten(text) for _ in range(n)]
    except GrammarError as e:
        _print_errors([e])
        raise typer.Exit(code=2)

    if format == "json":
        payload = {
            "tool": "tracerz",
            "command": "expand",
            "input": text,
            "seed": seed if seed is not None else settings.seed,
            "outputs": outputs,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    for out in outputs:
        typer.echo(out)


@app.command("tree")
def tree(
    path: str = typer.Argument(..., help="Path to a grammar file (.yaml/.yml/.json)"),
    input: Optional[str] = typer.Option(None, "--input", "-i", help="Text to expand (default: #origin#)"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible output"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional YAML settings file"),
) -> None:
    """Show the fully expanded tree for one generation."""
    settings = _load_settings(config)
    text = input if input is not None else settings.origin
    rules = _load_rules(path, text)
    grammar = _build_grammar(rules, settings, seed)

    try:
        expanded = grammar.expanded_tree(text)
        output = expanded.flatten()
    except GrammarError as e:
        _print_errors([e])
        raise typer.Exit(code=2)

    view = RichTree(_label(expanded.root))
    _render(expanded.root, view)

    console = Console()
    console.print(view)
    console.print(f"\nOutput: {output}", markup=False)


@app.command("modifiers")
def modifiers() -> None:
    """List the built-in modifiers."""
    table = Table(title="Modifiers")
    table.add_column("set")
    table.add_column("name")
    table.add_column("kind")
    table.add_column("params", justify="right")

    for set_name in sorted(MODIFIER_SETS):
        for name, mod in sorted(MODIFIER_SETS[set_name]().items()):
            table.add_row(set_name, name, mod.kind, str(mod.arity))

    Console().print(table)


def _label(node: Node) -> Text:
    parts = [repr(node.text)]
    if node.rule:
        parts.append(f"rule={node.rule}")
    if node.modifiers:
        parts.append("mods=" + ",".join(node.modifiers))
    if node.key is not None:
        parts.append(f"key={node.key!r}")
    if node.hidden:
        parts.append("hidden")
    return Text(" ".join(parts))


def _render(node: Node, branch: Any) -> None:
    for child in node.children:
        sub = branch.add(_label(child))
        _render(child, sub)


def _load_settings(config: Optional[str]) -> Settings:
    try:
        return load_and_merge(config)
    except FileNotFoundError:
        _print_errors(
            [
                GrammarLoadError(
                    code="E_CONFIG_FILE_NOT_FOUND",
                    message=f"config file not found: {config}",
                    path="config",
                )
            ]
        )
        raise typer.Exit(code=1)
    except ConfigError as e:
        _print_errors(
            [
                GrammarValidationError(
                    code="E_CONFIG_INVALID",
                    message=str(e),
                    path="config",
                )
            ]
        )
        raise typer.Exit(code=2)


def _load_rules(path: str, text: str) -> dict[str, Any]:
    try:
        rules = load_grammar(path)
    except GrammarLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    errors = validate_grammar(rules, handlers=base_handlers(), extra_texts=[text])
    if errors:
        _print_errors(list(errors))
        raise typer.Exit(code=2)
    return rules


def _build_grammar(rules: dict[str, Any], settings: Settings, seed: Optional[int]) -> Grammar:
    use_seed = seed if seed is not None else settings.seed
    grammar = Grammar(rules, random.Random(use_seed))
    for set_name in settings.modifier_sets:
        grammar.add_modifiers(MODIFIER_SETS[set_name]())
    for set_name in settings.handler_sets:
        grammar.add_handlers(HANDLER_SETS[set_name]())
    return grammar


def _unknown_format(format: str) -> GrammarValidationError:
    return GrammarValidationError(
        code="E_UNKNOWN_FORMAT",
        message=f"unknown format: {format} (choose one of: text, json)",
        path="format",
    )


def _print_errors(errors: list[GrammarError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.rule or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="tracerz")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
