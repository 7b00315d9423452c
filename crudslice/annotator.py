"""Turn a plain class into a JPA entity by adding the persistence annotations."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import EntityParseError
from .introspect import read_entity
from .model import FieldDescriptor
from .naming import default_table_name, to_snake_case

log = logging.getLogger(__name__)

SKIP_FIELD_ANNOTATIONS = {"Column", "Id", "Transient", "JoinColumn", "OneToMany", "ManyToOne", "ManyToMany", "OneToOne"}


@dataclass
class AnnotationResult:
    source: str
    changes: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def column_definition(f: FieldDescriptor) -> str:
    t = f.type_name
    if "String" in t or "Char" in t or "char" in t:
        return "varchar(255)"
    if any(k in t for k in ("Float", "float", "Double", "double", "BigDecimal")):
        return "numeric(24, 4)"
    if "LocalDateTime" in t or "Date" in t or "Instant" in t:
        if "update" in f.name.lower():
            return "timestamp not null default current_timestamp on update current_timestamp"
        return "timestamp not null default current_timestamp"
    if "Long" in t or t == "long":
        return "bigint"
    if f.is_enum or t.lower() == "boolean":
        return "int(1) default 0"
    return "integer"


def persistence_namespace(source: str) -> str:
    return "jakarta.persistence" if re.search(r"(?m)^\s*import\s+jakarta\.persistence\.", source) else "javax.persistence"


def ensure_import(lines: List[str], fqn: str) -> bool:
    txt = "\n".join(lines)
    if re.search(rf"(?m)^\s*import\s+{re.escape(fqn)}\s*;\s*$", txt):
        return False
    pkg = fqn.rsplit(".", 1)[0]
    if re.search(rf"(?m)^\s*import\s+{re.escape(pkg)}\.\*\s*;\s*$", txt):
        return False

    pkg_idx = None
    last_import = None
    for i, line in enumerate(lines):
        s = line.strip()
        if s.startswith("package ") and pkg_idx is None:
            pkg_idx = i
        elif s.startswith("import "):
            last_import = i
    if last_import is not None:
        lines.insert(last_import + 1, f"import {fqn};")
    elif pkg_idx is not None:
        lines[pkg_idx + 1:pkg_idx + 1] = ["", f"import {fqn};"]
    else:
        lines[0:0] = [f"import {fqn};", ""]
    return True


def _field_line(lines: List[str], start: int, name: str) -> Optional[int]:
    pattern = re.compile(
        rf"^\s*(?!return\b|throw\b)(?:(?:private|protected|public|final|transient|volatile)\s+)*"
        rf"[\w.$<>\[\],?\s]+?\s+{re.escape(name)}\s*(?:=[^;]*)?;"
    )
    for i in range(start, len(lines)):
        if pattern.match(lines[i]):
            return i
    return None


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def annotate_entity_source(source: str) -> AnnotationResult:
    """Add ``@Entity``/``@Table`` and per-field ``@Id``/``@Column`` annotations.

    Classes already annotated with ``@Entity`` come back unchanged.
    """
    entity = read_entity(source)
    if entity.is_entity:
        return AnnotationResult(source)

    lines = source.splitlines()
    class_idx = None
    for i, line in enumerate(lines):
        if re.search(rf"\bclass\s+{re.escape(entity.name)}\b", line):
            class_idx = i
            break
    if class_idx is None:
        raise EntityParseError(f"Declaration of {entity.name} not found")

    ns = persistence_namespace(source)
    changes: List[str] = []
    table = default_table_name(entity.base_name)
    comment = (entity.comment or "").replace('"', "")

    # fields, bottom-up so earlier line numbers stay valid
    inserts: List[Tuple[int, List[str], str]] = []
    for f in entity.fields:
        if SKIP_FIELD_ANNOTATIONS.intersection(f.annotations):
            continue
        idx = _field_line(lines, class_idx + 1, f.name)
        if idx is None:
            log.debug("Field %s not found on its own line, leaving it alone", f.name)
            continue
        pad = _indent_of(lines[idx])
        column = to_snake_case(f.name)
        if column == "id":
            ann = [f"{pad}@Id", f"{pad}@GeneratedValue(strategy = GenerationType.IDENTITY)"]
            inserts.append((idx, ann, f"added @Id on {f.name}"))
        else:
            ann = [f'{pad}@Column(name = "{column}", columnDefinition = "{column_definition(f)} comment \'\'")']
            inserts.append((idx, ann, f"added @Column on {f.name}"))

    needs_id = False
    needs_column = False
    for idx, ann, change in sorted(inserts, key=lambda x: x[0], reverse=True):
        lines[idx:idx] = ann
        changes.append(change)
        needs_id = needs_id or change.startswith("added @Id")
        needs_column = needs_column or change.startswith("added @Column")
    changes.reverse()

    class_ann = [
        "@Entity",
        f'@Table(name = "{table}")',
        f'@org.hibernate.annotations.Table(appliesTo = "{table}", comment = "{comment}")',
    ]
    lines[class_idx:class_idx] = class_ann
    changes.insert(0, f"added @Entity and @Table({table})")

    imports = [f"{ns}.Entity", f"{ns}.Table"]
    if needs_id:
        imports += [f"{ns}.Id", f"{ns}.GeneratedValue", f"{ns}.GenerationType"]
    if needs_column:
        imports.append(f"{ns}.Column")
    for fqn in imports:
        if ensure_import(lines, fqn):
            changes.append(f"import {fqn}")

    out = "\n".join(lines)
    if source.endswith("\n"):
        out += "\n"
    return AnnotationResult(out, changes)


def annotate_entity_file(path: Path, dry_run: bool = False) -> AnnotationResult:
    try:
        source = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise EntityParseError(f"Cannot read {path}: {e}") from e
    result = annotate_entity_source(source)
    if result.changed and not dry_run:
        path.write_text(result.source, encoding="utf-8")
        log.info("Annotated %s (%d change(s))", path, len(result.changes))
    return result
