"""Service emitters.

The service is either one concrete ``{Base}Service`` class or, with
``service.interface=true``, an interface plus ``impl/{Base}ServiceImpl``.
The method set depends on the entity flags:

* ``deleted``    -> ``delete`` flips the flag and saves, ``findOne`` hides flagged rows
* ``createTime`` -> ``save`` stamps new records
* ``userId``     -> ``add``/``update``/``delete`` overloads checking ownership

In super-class mode the implementation extends the configured service and only
emits what the flags change; the rest is inherited.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Set

from ..config import FeatureConfig
from ..model import ArtifactKind, BOOLEAN_TYPES, PRIMITIVE_TO_WRAPPER, ClassHandle, EntityDescriptor, FieldDescriptor
from ..naming import first_letter_to_upper
from .common import Template, add_type_imports, indent, java_file, simple_name

ACCESS_DENIED = "org.springframework.security.access.AccessDeniedException"
PAGE_HELPER = "com.github.pagehelper.PageHelper"
PAGE_INFO = "com.github.pagehelper.PageInfo"

NOW_EXPRESSIONS = {
    "Date": "new Date()",
    "Timestamp": "new Timestamp(System.currentTimeMillis())",
    "Long": "System.currentTimeMillis()",
    "long": "System.currentTimeMillis()",
}

FLAG_VALUES = {
    "long": "1L",
    "Long": "1L",
    "short": "(short) 1",
    "Short": "(short) 1",
    "byte": "(byte) 1",
    "Byte": "(byte) 1",
}


@dataclass
class ServiceDeps:
    dto: ClassHandle
    query: ClassHandle
    mapper: ClassHandle
    repository: ClassHandle
    dao: ClassHandle


@dataclass
class Method:
    signature: str
    body: str
    inherited: bool = False
    private: bool = False
    owned: bool = False


def getter(f: FieldDescriptor) -> str:
    prefix = "is" if f.type_name == "boolean" else "get"
    return f"{prefix}{first_letter_to_upper(f.name)}"


def setter(f: FieldDescriptor) -> str:
    return f"set{first_letter_to_upper(f.name)}"


def unset_check(f: FieldDescriptor, var: str) -> str:
    """Java condition that holds while ``var`` has no value in ``f`` yet."""
    if f.type_name in PRIMITIVE_TO_WRAPPER:
        return f"{var}.{getter(f)}() == 0"
    return f"{var}.{getter(f)}() == null"


def now_expression(f: FieldDescriptor) -> str:
    return NOW_EXPRESSIONS.get(f.raw_type, f"{f.raw_type}.now()")


def flag_value(f: FieldDescriptor) -> str:
    if f.raw_type in BOOLEAN_TYPES:
        return "true"
    return FLAG_VALUES.get(f.raw_type, "1")


def is_flagged(f: FieldDescriptor, var: str, imports: Set[str]) -> str:
    """Java expression that is true when ``var``'s soft-delete flag is set."""
    if f.type_name == "boolean":
        return f"{var}.{getter(f)}()"
    if f.type_name == "Boolean":
        return f"Boolean.TRUE.equals({var}.{getter(f)}())"
    if f.type_name in ("int", "long", "short", "byte"):
        return f"{var}.{getter(f)}() == 1"
    imports.add("java.util.Objects")
    return f"Objects.equals({var}.{getter(f)}(), {flag_value(f)})"


def _methods(entity: EntityDescriptor, config: FeatureConfig, deps: ServiceDeps, imports: Set[str]) -> List[Method]:
    e, d, q = entity.name, deps.dto.name, deps.query.name
    id_type = entity.id_type
    id_field = entity.id_field or FieldDescriptor(name="id", type_name=id_type)
    super_mode = config.super_service_enabled

    out: List[Method] = []

    # save
    stamp = ""
    if config.with_create_time:
        ct = entity.find_field("createTime")
        add_type_imports(ct, imports)
        if ct.raw_type == "Timestamp" and not ct.qualified_type:
            imports.add("java.sql.Timestamp")
        stamp = f"""
if ({unset_check(id_field, "entity")}) {{
    entity.{setter(ct)}({now_expression(ct)});
}}"""
    out.append(Method(
        f"void save({d} dto)",
        f"{e} entity = mapper.toEntity(dto);{stamp}\nrepository.save(entity);",
        inherited=super_mode and not config.with_create_time,
    ))
    if config.with_create_time:
        list_body = f"for ({d} dto : dtos) {{\n    save(dto);\n}}"
    else:
        list_body = "repository.saveAll(mapper.toEntity(dtos));"
    out.append(Method(
        f"void save(List<{d}> dtos)",
        list_body,
        inherited=super_mode and not config.with_create_time,
    ))

    # delete / findOne
    deleted = entity.find_field("deleted") if config.with_deleted else None
    if deleted is not None:
        delete_body = f"""repository.findById(id).ifPresent(entity -> {{
    entity.{setter(deleted)}({flag_value(deleted)});
    repository.save(entity);
}});"""
        find_one_body = (
            f"return repository.findById(id)\n"
            f"        .filter(entity -> !({is_flagged(deleted, 'entity', imports)}))\n"
            f"        .map(mapper::toDto);"
        )
    else:
        delete_body = "repository.deleteById(id);"
        find_one_body = "return repository.findById(id).map(mapper::toDto);"
    out.append(Method(f"void delete({id_type} id)", delete_body, inherited=super_mode and deleted is None))
    out.append(Method(f"Optional<{d}> findOne({id_type} id)", find_one_body, inherited=super_mode and deleted is None))

    # reads
    out.append(Method(f"List<{d}> findAll()", "return mapper.toDto(dao.findAll());", inherited=super_mode))
    out.append(Method(f"List<{d}> query({q} query)", "return mapper.toDto(dao.query(query));", inherited=super_mode))
    out.append(Method(
        f"PageInfo<{d}> pageQuery({q} query)",
        f"""PageHelper.startPage(query.getPage(), query.getSize());
PageInfo<{e}> page = new PageInfo<>(dao.query(query));
PageInfo<{d}> result = new PageInfo<>(mapper.toDto(page.getList()));
result.setTotal(page.getTotal());
result.setPageNum(page.getPageNum());
result.setPageSize(page.getPageSize());
result.setPages(page.getPages());
return result;""",
        inherited=super_mode,
    ))
    out.append(Method(f"long count({q} query)", "return dao.count(query);", inherited=super_mode))

    # ownership
    owner = entity.find_field("userId") if config.with_user_id else None
    if owner is not None:
        imports.add(ACCESS_DENIED)
        add_type_imports(owner, imports)
        u = owner.wrapper_type
        id_get = getter(id_field)
        load = (
            f"{e} entity = repository.findById({{id}})\n"
            f"        .orElseThrow(() -> new AccessDeniedException(\"Record not found: \" + {{id}}));\n"
            f"checkOwner(userId, entity);"
        )
        out.append(Method(
            f"void add({u} userId, {d} dto)",
            f"dto.{setter(id_field)}(null);\ndto.{setter(owner)}(userId);\nsave(dto);",
            owned=True,
        ))
        out.append(Method(
            f"void update({u} userId, {d} dto)",
            f"if (dto.{id_get}() == null) {{\n"
            f"    throw new AccessDeniedException(\"Record id is required\");\n"
            f"}}\n"
            + load.format(id=f"dto.{id_get}()") + f"\ndto.{setter(owner)}(userId);\nsave(dto);",
            owned=True,
        ))
        out.append(Method(
            f"void delete({u} userId, {id_type} id)",
            load.format(id="id") + "\ndelete(id);",
            owned=True,
        ))
        imports.add("java.util.Objects")
        out.append(Method(
            f"void checkOwner({u} userId, {e} entity)",
            f"""if (!Objects.equals(userId, entity.{getter(owner)}())) {{
    throw new AccessDeniedException("No permission to modify this record");
}}""",
            private=True,
            owned=True,
        ))
    return out


def _render_method(m: Method, override: bool) -> str:
    head = "private" if m.private else "public"
    ann = "    @Override\n" if override and not m.private else ""
    return f"""{ann}    {head} {m.signature} {{
{indent(m.body, 8)}
    }}"""


def _base_imports(entity: EntityDescriptor, deps: ServiceDeps) -> Set[str]:
    imports = {
        "java.util.List",
        "java.util.Optional",
        PAGE_INFO,
        entity.qualified_name,
        deps.dto.qualified_name,
        deps.query.qualified_name,
    }
    id_field = entity.id_field
    if id_field is not None:
        add_type_imports(id_field, imports)
    return imports


def _render_fields(class_name: str, deps: ServiceDeps, super_mode: bool, imports: Set[str]) -> str:
    imports.update({deps.repository.qualified_name, deps.mapper.qualified_name, deps.dao.qualified_name})
    members = [
        (deps.repository.name, "repository"),
        (deps.mapper.name, "mapper"),
        (deps.dao.name, "dao"),
    ]
    if not super_mode:
        imports.add("javax.annotation.Resource")
        return "\n\n".join(f"    @Resource\n    private {t} {n};" for t, n in members)

    decl = "\n".join(f"    private final {t} {n};" for t, n in members)
    params = ", ".join(f"{t} {n}" for t, n in members)
    assigns = "\n".join(f"        this.{n} = {n};" for _, n in members)
    return f"""{decl}

    public {class_name}({params}) {{
        super(repository, mapper, dao);
{assigns}
    }}"""


def _render_impl(
    name: str,
    package: str,
    kind: ArtifactKind,
    entity: EntityDescriptor,
    config: FeatureConfig,
    deps: ServiceDeps,
    interface: Optional[ClassHandle],
) -> Template:
    imports = _base_imports(entity, deps)
    imports.update({
        "org.springframework.stereotype.Service",
        "org.springframework.transaction.annotation.Transactional",
    })
    methods = _methods(entity, config, deps, imports)
    super_mode = config.super_service_enabled

    heritage = ""
    if super_mode:
        super_service = config.super_service or ""
        if "." in super_service:
            imports.add(super_service)
        heritage = f" extends {simple_name(super_service)}<{deps.dto.name}, {entity.name}, {deps.query.name}>"
    if interface is not None:
        imports.add(interface.qualified_name)
        heritage += f" implements {interface.name}"

    emitted = [m for m in methods if not m.inherited]
    if any(m.signature.startswith("PageInfo") for m in emitted):
        imports.add(PAGE_HELPER)
    blocks = [_render_fields(name, deps, super_mode, imports)]
    for m in emitted:
        override = interface is not None or (super_mode and not m.owned)
        blocks.append(_render_method(m, override))
    inner = "\n\n".join(blocks)

    body = f"""@Service
@Transactional
public class {name}{heritage} {{
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


def gen_service_interface(entity: EntityDescriptor, config: FeatureConfig, package: str, deps: ServiceDeps) -> Template:
    name = f"{entity.base_name}Service"
    imports = _base_imports(entity, deps)
    methods = [m for m in _methods(entity, config, deps, set()) if not m.private]
    owner = entity.find_field("userId") if config.with_user_id else None
    if owner is not None:
        add_type_imports(owner, imports)
    inner = "\n\n".join(f"    {m.signature};" for m in methods)
    body = f"""public interface {name} {{
{inner}
}}
"""
    return Template(
        kind=ArtifactKind.SERVICE,
        name=name,
        file_name=f"{name}.java",
        content=java_file(package, imports, body),
        package=package,
    )


def gen_service_impl(
    entity: EntityDescriptor,
    config: FeatureConfig,
    package: str,
    deps: ServiceDeps,
    interface: ClassHandle,
) -> Template:
    return _render_impl(
        f"{entity.base_name}ServiceImpl", package, ArtifactKind.SERVICE_IMPL,
        entity, config, deps, interface,
    )


def gen_service_class(entity: EntityDescriptor, config: FeatureConfig, package: str, deps: ServiceDeps) -> Template:
    return _render_impl(
        f"{entity.base_name}Service", package, ArtifactKind.SERVICE,
        entity, config, deps, None,
    )
