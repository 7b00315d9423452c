"""DTO emitters: the main DTO and, in super-class mode, its add/update variants."""
from __future__ import annotations

from typing import List, Optional, Sequence, Set, Tuple

from ..annotations import infer_field_annotations
from ..config import FeatureConfig
from ..model import ArtifactKind, ClassHandle, EntityDescriptor, FieldDescriptor
from .common import Template, add_type_imports, java_file, java_string, render_accessors

TECHNICAL_FIELDS = {"deleted"}
AUDIT_FIELDS = (
    "createTime", "updateTime", "createBy", "updateBy",
    "createUser", "updateUser", "deleted", "version",
)

EXCEL_PROPERTY = "com.alibaba.excel.annotation.ExcelProperty"
EXCEL_IGNORE = "com.alibaba.excel.annotation.ExcelIgnore"


def dto_fields(entity: EntityDescriptor, base_dto: Optional[ClassHandle] = None) -> Tuple[FieldDescriptor, ...]:
    """Fields a DTO carries. A resolvable base DTO already holds the inherited ones."""
    source = entity.fields if base_dto is not None else entity.all_fields
    return tuple(f for f in source if f.name not in TECHNICAL_FIELDS)


def field_title(f: FieldDescriptor) -> str:
    return f.comment or f.name


def _render_field(f: FieldDescriptor, excel: bool, imports: Set[str]) -> str:
    add_type_imports(f, imports)
    lines: List[str] = []
    anns, imps = infer_field_annotations(f)
    imports.update(imps)
    lines.extend(anns)
    if excel:
        if f.is_id:
            imports.add(EXCEL_IGNORE)
            lines.append("@ExcelIgnore")
        else:
            imports.add(EXCEL_PROPERTY)
            lines.append(f'@ExcelProperty("{java_string(field_title(f))}")')
    lines.append(f"private {f.wrapper_type} {f.name};")
    return "\n".join("    " + line for line in lines)


def _render_dto(
    name: str,
    kind: ArtifactKind,
    package: str,
    fields: Sequence[FieldDescriptor],
    excel: bool,
    base: Optional[ClassHandle] = None,
) -> Template:
    imports: Set[str] = set()
    declarations = [_render_field(f, excel, imports) for f in fields]
    extends = ""
    if base is not None:
        imports.add(base.qualified_name)
        extends = f" extends {base.name}"

    members = "\n\n".join(declarations)
    accessors = render_accessors(name, [(f.wrapper_type, f.name) for f in fields])
    parts = [p for p in (members, accessors) if p]
    inner = "\n\n".join(parts)
    body = f"""public class {name}{extends} {{
{inner}
}}
"""
    return Template(
        kind=kind,
        name=name,
        file_name=f"{name}.java",
        content=java_file(package, imports, body),
        package=package,
    )


def gen_dtos(
    entity: EntityDescriptor,
    config: FeatureConfig,
    package: str,
    base_dto: Optional[ClassHandle] = None,
) -> List[Template]:
    fields = dto_fields(entity, base_dto)
    base = entity.base_name
    out = [_render_dto(f"{base}DTO", ArtifactKind.DTO, package, fields, config.excel_func, base_dto)]
    if config.with_super:
        editable = [f for f in fields if f.name not in AUDIT_FIELDS]
        out.append(_render_dto(
            f"{base}AddDTO", ArtifactKind.DTO_ADD, package,
            [f for f in editable if not f.is_id], False,
        ))
        out.append(_render_dto(f"{base}UpdateDTO", ArtifactKind.DTO_UPDATE, package, editable, False))
    return out
