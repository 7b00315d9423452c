"""Read Java sources (via javalang) into entity descriptors and class handles."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, TYPE_CHECKING

import javalang

from .errors import EntityParseError
from .model import (
    ID_ANNOT,
    ClassHandle,
    ClassKind,
    EntityDescriptor,
    FieldDescriptor,
    TableInfo,
)

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .symbols import SymbolResolver

PARSE_ERRORS = (javalang.parser.JavaSyntaxError, javalang.tokenizer.LexerError)

HIBERNATE_TABLE = "org.hibernate.annotations.Table"
MAX_SUPER_DEPTH = 16

# ---------------- javalang helpers ----------------


def parse_source(text: str) -> "javalang.tree.CompilationUnit":
    try:
        return javalang.parse.parse(text)
    except PARSE_ERRORS as e:
        raise EntityParseError(f"Java source could not be parsed: {e!r}") from e


def _last_segment(t):
    node = t
    while getattr(node, "sub_type", None) is not None:
        node = node.sub_type
    return node


def type_to_str(t) -> str:
    if t is None:
        return "Object"
    node = _last_segment(t)
    base = node.name
    args = getattr(node, "arguments", None) or []
    if args:
        inner = []
        for a in args:
            at = getattr(a, "type", None)
            inner.append(type_to_str(at) if at is not None else "?")
        base = f"{base}<{', '.join(inner)}>"
    dims = getattr(t, "dimensions", None) or []
    return base + "[]" * len(dims)


def written_qualified_name(t) -> Optional[str]:
    parts: List[str] = []
    node = t
    while node is not None:
        parts.append(node.name)
        node = getattr(node, "sub_type", None)
    return ".".join(parts) if len(parts) > 1 else None


def annotation_simple_name(ann) -> str:
    return ann.name.rsplit(".", 1)[-1]


def element_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, javalang.tree.Literal):
        s = str(value.value)
        if len(s) >= 2 and s[0] == '"' and s[-1] == '"':
            return s[1:-1].replace('\\"', '"')
        return s
    if isinstance(value, javalang.tree.BinaryOperation) and value.operator == "+":
        return element_text(value.operandl) + element_text(value.operandr)
    if isinstance(value, javalang.tree.MemberReference):
        return f"{value.qualifier}.{value.member}" if value.qualifier else value.member
    return str(getattr(value, "value", ""))


def annotation_values(ann) -> Dict[str, str]:
    kv: Dict[str, str] = {}
    el = getattr(ann, "element", None)
    if el is None:
        return kv
    if isinstance(el, list):
        for e in el:
            if hasattr(e, "name") and hasattr(e, "value"):
                kv[e.name] = element_text(e.value)
    else:
        kv["value"] = element_text(el)
    return kv


def find_annotation(annotations, simple_name: str, qualified: Optional[str] = None):
    for a in annotations or []:
        if qualified and a.name == qualified:
            return a
        if not qualified and annotation_simple_name(a) == simple_name:
            return a
    return None


def import_map(tree) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for imp in tree.imports or []:
        if imp.static or imp.wildcard:
            continue
        out[imp.path.rsplit(".", 1)[-1]] = imp.path
    return out


def _declared_enums(decl) -> Set[str]:
    names: Set[str] = set()
    for _, node in decl.filter(javalang.tree.EnumDeclaration):
        names.add(node.name)
    return names


def _kind_of(decl) -> ClassKind:
    if isinstance(decl, javalang.tree.EnumDeclaration):
        return ClassKind.ENUM
    if isinstance(decl, (javalang.tree.InterfaceDeclaration, javalang.tree.AnnotationDeclaration)):
        return ClassKind.INTERFACE
    return ClassKind.CLASS


def _superclass_name(decl) -> Optional[str]:
    ext = getattr(decl, "extends", None)
    if ext is None or isinstance(ext, list):
        return None
    return written_qualified_name(ext) or _last_segment(ext).name


def _qualify(pkg: str, name: str) -> str:
    return f"{pkg}.{name}" if pkg else name


def _member_declarations(decl) -> list:
    body = getattr(decl, "body", None)
    if body is None:
        return []
    if isinstance(body, list):
        return body
    # enum bodies keep members under ``declarations``
    return list(getattr(body, "declarations", None) or [])


# ---------------- fields ----------------


def read_fields(
    decl,
    imports: Dict[str, str],
    local_enums: Set[str],
    resolver: Optional["SymbolResolver"] = None,
    owner: Optional[str] = None,
) -> Tuple[FieldDescriptor, ...]:
    fields: List[FieldDescriptor] = []
    for node in _member_declarations(decl):
        if not isinstance(node, javalang.tree.FieldDeclaration):
            continue
        if "static" in (node.modifiers or set()):
            continue

        ftype = type_to_str(node.type)
        qualified = written_qualified_name(node.type)
        raw = _last_segment(node.type).name
        if qualified is None:
            qualified = imports.get(raw)

        anns = node.annotations or []
        ann_names = tuple(annotation_simple_name(a) for a in anns)

        column_definition = None
        column_name = None
        col = find_annotation(anns, "Column")
        if col is not None:
            kv = annotation_values(col)
            column_definition = kv.get("columnDefinition") or None
            column_name = kv.get("name") or None

        is_enum = raw in local_enums
        if is_enum and qualified is None and owner:
            qualified = f"{owner}.{raw}"
        if not is_enum and resolver is not None:
            h = resolver.resolve(qualified or raw)
            if h is not None:
                is_enum = h.is_enum
                qualified = qualified or h.qualified_name

        for d in node.declarators:
            fields.append(FieldDescriptor(
                name=d.name,
                type_name=ftype,
                qualified_type=qualified,
                column_definition=column_definition,
                column_name=column_name,
                is_enum=is_enum,
                is_id=ID_ANNOT in ann_names,
                annotations=ann_names,
            ))
    return tuple(fields)


def _method_names(decl) -> Tuple[str, ...]:
    return tuple(
        m.name for m in _member_declarations(decl)
        if isinstance(m, javalang.tree.MethodDeclaration)
    )


# ---------------- class handles ----------------


def handles_from_source(
    text: str,
    path: Optional[str] = None,
    resolver: Optional["SymbolResolver"] = None,
) -> List[ClassHandle]:
    """Every type declared in a compilation unit, nested ones included."""
    tree = parse_source(text)
    pkg = tree.package.name if tree.package else ""
    imports = import_map(tree)
    out: List[ClassHandle] = []

    def visit(decls: Iterable) -> None:
        for decl in decls:
            if not isinstance(decl, javalang.tree.TypeDeclaration):
                continue
            local_enums = _declared_enums(decl)
            out.append(ClassHandle(
                name=decl.name,
                package=pkg,
                kind=_kind_of(decl),
                fields=read_fields(decl, imports, local_enums, resolver, _qualify(pkg, decl.name)),
                methods=_method_names(decl),
                superclass=_superclass_name(decl),
                path=path,
            ))
            visit(_member_declarations(decl))

    visit(tree.types)
    return out


# ---------------- entity ----------------


def _inherited(
    superclass: Optional[str],
    imports: Dict[str, str],
    resolver: Optional["SymbolResolver"],
) -> Tuple[Tuple[str, ...], Tuple[FieldDescriptor, ...]]:
    chain: List[str] = []
    layers: List[Tuple[FieldDescriptor, ...]] = []
    seen: Set[str] = set()
    name = superclass
    while name and len(chain) < MAX_SUPER_DEPTH:
        simple = name.rsplit(".", 1)[-1]
        if simple in seen:
            break
        seen.add(simple)
        chain.append(simple)
        if resolver is None:
            break
        h = resolver.resolve(name if "." in name else imports.get(name, name))
        if h is None:
            break
        layers.append(h.fields)
        name = h.superclass

    inherited: List[FieldDescriptor] = []
    for layer in reversed(layers):
        inherited.extend(layer)
    return tuple(chain), tuple(inherited)


def read_entity(text: str, resolver: Optional["SymbolResolver"] = None) -> EntityDescriptor:
    """Describe the first top-level class of a Java source."""
    tree = parse_source(text)
    classes = [t for t in tree.types if isinstance(t, javalang.tree.ClassDeclaration)]
    if not classes:
        raise EntityParseError("No class declaration found")
    decl = classes[0]

    pkg = tree.package.name if tree.package else ""
    imports = import_map(tree)
    anns = decl.annotations or []
    ann_names = tuple(annotation_simple_name(a) for a in anns)

    table: Optional[TableInfo] = None
    comment: Optional[str] = None
    hib = find_annotation(anns, "Table", qualified=HIBERNATE_TABLE)
    if hib is not None:
        comment = annotation_values(hib).get("comment") or None
    for a in anns:
        if annotation_simple_name(a) == "Table" and a is not hib:
            kv = annotation_values(a)
            if kv.get("name"):
                table = TableInfo(name=kv["name"], comment=comment)
    cm = find_annotation(anns, "Comment")
    if cm is not None and not comment:
        kv = annotation_values(cm)
        comment = kv.get("value") or kv.get("entityName") or None
        if table is not None and comment:
            table = TableInfo(name=table.name, comment=comment)

    chain, inherited = _inherited(_superclass_name(decl), imports, resolver)

    return EntityDescriptor(
        name=decl.name,
        package=pkg,
        fields=read_fields(decl, imports, _declared_enums(decl), resolver, _qualify(pkg, decl.name)),
        inherited_fields=inherited,
        superclasses=chain,
        table=table,
        annotations=ann_names,
        imports=tuple(sorted(imports.items())),
        comment=comment,
    )


def read_entity_file(path: Path, resolver: Optional["SymbolResolver"] = None) -> EntityDescriptor:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise EntityParseError(f"Cannot read {path}: {e}") from e
    return read_entity(text, resolver)
