from __future__ import annotations

import re

from tracerz.core.errors import GrammarValidationError
from tracerz.core.modifiers.registry import ModifierMap, string_modifier


def _is_vowel(ch: str) -> bool:
    return ch.lower() in "aeiou"


def _is_alnum(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ("0" <= ch <= "9")


def a(text: str) -> str:
    """Prefix the indefinite article."""
    if not text:
        return text
    # "union", "unicorn": a leading u..i reads as a consonant sound.
    if len(text) > 2 and text[0].lower() == "u" and text[2].lower() == "i":
        return "a " + text
    if _is_vowel(text[0]):
        return "an " + text
    return "a " + text


def capitalize_all(text: str) -> str:
    out: list[str] = []
    cap_next = True
    for ch in text:
        if _is_alnum(ch):
            out.append(ch.upper() if cap_next else ch)
            cap_next = False
        else:
            cap_next = True
            out.append(ch)
    return "".join(out)


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def s(text: str) -> str:
    """Pluralize by suffix."""
    if not text:
        return text
    last = text[-1]
    if last in "shx":
        return text + "es"
    if last == "y":
        if len(text) > 1 and _is_vowel(text[-2]):
            return text + "s"
        return text[:-1] + "ies"
    return text + "s"


def ed(text: str) -> str:
    """Past tense by suffix."""
    if not text:
        return text
    last = text[-1]
    if last == "e":
        return text + "d"
    if last == "y":
        if len(text) > 1 and _is_vowel(text[-2]):
            return text + "ed"
        return text[:-1] + "ied"
    return text + "ed"


def replace(text: str, target: str, replacement: str) -> str:
    """Regex-replace every match of `target`.

    `replacement` uses Python `re.sub` syntax: groups are `\\1` or `\\g<name>`, not `$1`.
    """
    try:
        return re.sub(target, replacement, text)
    except re.error as e:
        raise GrammarValidationError(
            code="E_INVALID_MODIFIER_PARAM",
            message=f"replace({target},{replacement}): {e}",
        ) from e


def base_english_modifiers() -> ModifierMap:
    return {
        "a": string_modifier(a),
        "capitalizeAll": string_modifier(capitalize_all),
        "capitalize": string_modifier(capitalize),
        "s": string_modifier(s),
        "ed": string_modifier(ed),
        "replace": string_modifier(replace),
    }
