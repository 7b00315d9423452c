from __future__ import annotations

from ..model import ArtifactKind, ClassHandle, EntityDescriptor
from .common import Template, java_file

ENTITY_MAPPER = "EntityMapper"


def gen_entity_mapper(package: str) -> Template:
    body = f"""public interface {ENTITY_MAPPER}<D, E> {{
    E toEntity(D dto);

    D toDto(E entity);

    List<E> toEntity(List<D> dtoList);

    List<D> toDto(List<E> entityList);
}}
"""
    return Template(
        kind=ArtifactKind.ENTITY_MAPPER,
        name=ENTITY_MAPPER,
        file_name=f"{ENTITY_MAPPER}.java",
        content=java_file(package, {"java.util.List"}, body),
        package=package,
    )


def gen_mapper(entity: EntityDescriptor, package: str, dto: ClassHandle, entity_mapper: ClassHandle) -> Template:
    name = f"{entity.base_name}Mapper"
    imports = {
        "org.mapstruct.Mapper",
        entity.qualified_name,
        dto.qualified_name,
        entity_mapper.qualified_name,
    }
    body = f"""@Mapper(componentModel = "spring")
public interface {name} extends {entity_mapper.name}<{dto.name}, {entity.name}> {{
}}
"""
    return Template(
        kind=ArtifactKind.MAPPER,
        name=name,
        file_name=f"{name}.java",
        content=java_file(package, imports, body),
        package=package,
    )
