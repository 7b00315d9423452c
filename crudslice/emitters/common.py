from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from ..model import ArtifactKind, FieldDescriptor
from ..naming import first_letter_to_upper

JAVA_TIME_TYPES = {"LocalDate", "LocalDateTime", "LocalTime", "Instant", "OffsetDateTime", "ZonedDateTime"}
KNOWN_IMPORTS = {
    "BigDecimal": "java.math.BigDecimal",
    "BigInteger": "java.math.BigInteger",
    "UUID": "java.util.UUID",
    "Date": "java.util.Date",
    "List": "java.util.List",
    "Set": "java.util.Set",
    "Map": "java.util.Map",
}
GENERIC_ARGS_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass
class Template:
    """Rendered artifact waiting for a directory."""

    kind: ArtifactKind
    name: str
    file_name: str
    content: str
    package: Optional[str] = None


def _import_for(simple: str) -> Optional[str]:
    if simple in JAVA_TIME_TYPES:
        return f"java.time.{simple}"
    return KNOWN_IMPORTS.get(simple)


def add_type_imports(f: FieldDescriptor, imports: Set[str]) -> None:
    if f.qualified_type and not f.qualified_type.startswith("java.lang."):
        imports.add(f.qualified_type)
    else:
        fqn = _import_for(f.raw_type)
        if fqn:
            imports.add(fqn)
    # generic arguments, e.g. List<LocalDate>
    if "<" in f.type_name:
        inner = f.type_name.split("<", 1)[1]
        for word in GENERIC_ARGS_RE.findall(inner):
            fqn = _import_for(word)
            if fqn:
                imports.add(fqn)


def render_import_block(items: Iterable[str], package: str = "") -> str:
    """Sorted, de-duplicated ``import`` lines.

    Items may be fully qualified names or ``import`` lines with or without ``;``.
    Same-package and ``java.lang`` imports are dropped.
    """
    out: Set[str] = set()
    for raw in items or []:
        if not raw:
            continue
        s = re.sub(r"^\s*import\s+", "", str(raw).strip()).rstrip(";").strip()
        if not s or "." not in s:
            continue
        owner = s.rsplit(".", 1)[0]
        if owner == package or owner == "java.lang":
            continue
        out.add(f"import {s};")
    return ("\n".join(sorted(out)) + "\n") if out else ""


def java_file(package: str, imports: Iterable[str], body: str) -> str:
    head = f"package {package};\n\n" if package else ""
    imp = render_import_block(imports, package)
    if imp:
        head += imp + "\n"
    return head + body.strip() + "\n"


def indent(text: str, n: int = 4) -> str:
    pad = " " * n
    return "\n".join(pad + line if line.strip() else "" for line in text.splitlines())


def render_accessors(class_name: str, fields: Sequence[Tuple[str, str]]) -> str:
    """Fluent setter, setter and getter for each ``(type, name)``."""
    blocks: List[str] = []
    for t, name in fields:
        cap = first_letter_to_upper(name)
        blocks.append(f"""    public {class_name} {name}({t} {name}) {{
        this.{name} = {name};
        return this;
    }}

    public void set{cap}({t} {name}) {{
        this.{name} = {name};
    }}

    public {t} get{cap}() {{
        return this.{name};
    }}""")
    return "\n\n".join(blocks)


def simple_name(qualified: str) -> str:
    return qualified.rsplit(".", 1)[-1]


def java_string(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')
