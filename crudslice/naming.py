"""Name derivation for generated artifacts."""
from __future__ import annotations

from typing import List

ENTITY_SUFFIX = "Entity"


def _char_kind(ch: str) -> int:
    if ch.isupper():
        return 1
    if ch.islower():
        return 2
    if ch.isdigit():
        return 3
    return 0


def split_camel_case(identifier: str) -> List[str]:
    """Split on character-type changes; ``XMLParser`` -> ``["XML", "Parser"]``.

    Anything that is not a letter or digit acts as a separator.
    """
    if not identifier or not identifier.strip():
        return []

    words: List[str] = []
    start = 0
    prev = _char_kind(identifier[0])
    for pos in range(1, len(identifier)):
        kind = _char_kind(identifier[pos])
        if kind == prev:
            continue
        if kind == 2 and prev == 1:
            # "XMLParser": the last capital belongs to the lowercase run
            if pos - 1 != start:
                words.append(identifier[start:pos - 1])
                start = pos - 1
        else:
            words.append(identifier[start:pos])
            start = pos
        prev = kind
    words.append(identifier[start:])

    return [w for w in words if w and _char_kind(w[0]) != 0]


def strip_entity_suffix(name: str) -> str:
    if not name or not name.strip():
        return ""
    name = name.strip()
    if name.endswith(ENTITY_SUFFIX):
        return name[: -len(ENTITY_SUFFIX)]
    return name


def to_snake_case(identifier: str) -> str:
    return "_".join(w.lower() for w in split_camel_case(identifier))


def to_kebab_case(identifier: str) -> str:
    return first_letter_to_lower("-".join(w.lower() for w in split_camel_case(identifier)))


def first_letter_to_lower(identifier: str) -> str:
    if not identifier or not identifier.strip():
        return ""
    return identifier[:1].lower() + identifier[1:]


def first_letter_to_upper(identifier: str) -> str:
    if not identifier or not identifier.strip():
        return ""
    return identifier[:1].upper() + identifier[1:]


def default_table_name(base_name: str) -> str:
    return "t_" + to_snake_case(base_name)
