from __future__ import annotations

from ..model import ArtifactKind, ClassHandle, EntityDescriptor
from .common import Template, java_file

BASE_REPOSITORY = "BaseRepository"


def gen_base_repository(package: str) -> Template:
    imports = {
        "org.springframework.data.jpa.repository.JpaRepository",
        "org.springframework.data.jpa.repository.JpaSpecificationExecutor",
        "org.springframework.data.repository.NoRepositoryBean",
    }
    body = f"""@NoRepositoryBean
public interface {BASE_REPOSITORY}<E> extends JpaRepository<E, Long>, JpaSpecificationExecutor<E> {{
}}
"""
    return Template(
        kind=ArtifactKind.BASE_REPOSITORY,
        name=BASE_REPOSITORY,
        file_name=f"{BASE_REPOSITORY}.java",
        content=java_file(package, imports, body),
        package=package,
    )


def gen_repository(entity: EntityDescriptor, package: str, base: ClassHandle) -> Template:
    name = f"{entity.base_name}Repository"
    imports = {entity.qualified_name, base.qualified_name}
    body = f"""public interface {name} extends {base.name}<{entity.name}> {{
}}
"""
    return Template(
        kind=ArtifactKind.REPOSITORY,
        name=name,
        file_name=f"{name}.java",
        content=java_file(package, imports, body),
        package=package,
    )
