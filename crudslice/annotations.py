"""Validation and formatting annotations derived from a field's column definition."""
from __future__ import annotations

import re
from typing import List, Set, Tuple

from .model import STRING_TYPES, FieldDescriptor

LENGTH_RE = re.compile(r"\b(?:var)?char\s*\(\s*(\d+)\s*\)", re.I)
NOT_NULL_RE = re.compile(r"\bnot\s+null\b", re.I)

LENGTH_IMPORT = "org.hibernate.validator.constraints.Length"
NOT_BLANK_IMPORT = "javax.validation.constraints.NotBlank"
NOT_NULL_IMPORT = "javax.validation.constraints.NotNull"
JSON_FORMAT_IMPORT = "com.fasterxml.jackson.annotation.JsonFormat"

DATE_PATTERNS = {
    "localdate": "yyyy-MM-dd",
    "localdatetime": "yyyy-MM-dd HH:mm:ss",
}


def max_length(column_definition: str) -> int:
    m = LENGTH_RE.search(column_definition or "")
    return int(m.group(1)) if m else 0


def is_type_marker(f: FieldDescriptor) -> bool:
    return f.is_enum or "type" in f.raw_type.lower()


def infer_field_annotations(f: FieldDescriptor) -> Tuple[List[str], Set[str]]:
    ann: List[str] = []
    imps: Set[str] = set()

    is_string = f.raw_type in STRING_TYPES
    text = f.column_definition or ""

    if is_string:
        length = max_length(text)
        if length > 0:
            imps.add(LENGTH_IMPORT)
            ann.append(f"@Length(max = {length})")

    if NOT_NULL_RE.search(text) and not is_type_marker(f):
        if is_string:
            imps.add(NOT_BLANK_IMPORT)
            ann.append("@NotBlank")
        else:
            imps.add(NOT_NULL_IMPORT)
            ann.append("@NotNull")

    pattern = DATE_PATTERNS.get(f.raw_type.lower())
    if pattern:
        imps.add(JSON_FORMAT_IMPORT)
        ann.append(f'@JsonFormat(pattern = "{pattern}")')

    return ann, imps
