from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import yaml

from tracerz.core.errors import GrammarLoadError

# suffix -> (parse error code, parser)
_PARSERS: dict[str, tuple[str, Callable[[str], Any]]] = {
    ".yaml": ("E_YAML_PARSE", yaml.safe_load),
    ".yml": ("E_YAML_PARSE", yaml.safe_load),
    ".json": ("E_JSON_PARSE", json.loads),
}


def load_grammar(path: str) -> dict[str, Any]:
    """Load a YAML/JSON grammar file into a rule table.

    Rule names must be strings: YAML turns bare keys such as `1` or `yes` into
    int/bool, which no `#name#` reference can reach. Rule contents are returned
    as-is; validate_grammar owns shape checking.
    """

    p = Path(path)
    if not p.exists():
        raise GrammarLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            path=str(p),
        )

    suffix = p.suffix.lower()
    if suffix not in _PARSERS:
        raise GrammarLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message="supported formats are .yaml/.yml and .json",
            path=str(p),
        )

    try:
        raw_text = p.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:  # pragma: no cover
        raise GrammarLoadError(code="E_FILE_READ", message=str(e), path=str(p)) from e

    code, parse = _PARSERS[suffix]
    try:
        data = parse(raw_text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise GrammarLoadError(code=code, message=str(e), path=str(p)) from e

    if not isinstance(data, dict):
        raise GrammarLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping of rule name -> contents",
            path=str(p),
        )

    bad_keys = sorted(repr(k) for k in data if not isinstance(k, str))
    if bad_keys:
        raise GrammarLoadError(
            code="E_INVALID_RULE_NAME",
            message=f"rule names must be strings, got {', '.join(bad_keys)}",
            path=str(p),
        )

    if not data:
        raise GrammarLoadError(
            code="E_EMPTY_GRAMMAR",
            message="grammar defines no rules",
            path=str(p),
        )

    return data
