from __future__ import annotations

from typing import Optional, Set

from ..model import ArtifactKind, ClassHandle, EntityDescriptor
from .common import Template, java_file, render_accessors

BASE_QUERY = "BaseQuery"

PAGING_FIELDS = (
    ("Integer", "page", "1"),
    ("Integer", "size", "10"),
    ("String", "orderBy", None),
)


def _paging_members(class_name: str) -> str:
    decl = []
    for t, name, default in PAGING_FIELDS:
        init = f" = {default}" if default is not None else ""
        decl.append(f"    private {t} {name}{init};")
    accessors = render_accessors(class_name, [(t, n) for t, n, _ in PAGING_FIELDS])
    return "\n".join(decl) + "\n\n" + accessors


def gen_base_query(package: str) -> Template:
    body = f"""public class {BASE_QUERY} {{
{_paging_members(BASE_QUERY)}
}}
"""
    return Template(
        kind=ArtifactKind.BASE_QUERY,
        name=BASE_QUERY,
        file_name=f"{BASE_QUERY}.java",
        content=java_file(package, (), body),
        package=package,
    )


def gen_query(entity: EntityDescriptor, package: str, base_query: Optional[ClassHandle] = None) -> Template:
    name = f"{entity.base_name}Query"
    id_type = entity.id_type
    imports: Set[str] = {"java.util.List"}
    id_field = entity.id_field
    if id_field is not None and id_field.qualified_type:
        imports.add(id_field.qualified_type)

    own = [(f"List<{id_type}>", "ids"), (id_type, "id"), (id_type, "idNot")]
    decl = "\n".join(f"    private {t} {n};" for t, n in own)
    accessors = render_accessors(name, own)

    extends = ""
    paging = ""
    if base_query is not None:
        imports.add(base_query.qualified_name)
        extends = f" extends {base_query.name}"
    else:
        paging = "\n\n" + _paging_members(name)

    body = f"""public class {name}{extends} {{
{decl}

{accessors}{paging}
}}
"""
    return Template(
        kind=ArtifactKind.QUERY,
        name=name,
        file_name=f"{name}.java",
        content=java_file(package, imports, body),
        package=package,
    )
