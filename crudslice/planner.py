"""The generation pipeline.

One run walks a fixed sequence of stages for a single entity. Every stage emits
its artifacts through the sink and registers the resulting classes with the
resolver before the next stage starts, so later templates always reference the
names and packages that were actually written (or already existed).
"""
from __future__ import annotations

import enum
import logging
import posixpath
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .config import FeatureConfig
from .emitters import (
    BASE_QUERY,
    BASE_REPOSITORY,
    ENTITY_MAPPER,
    ControllerDeps,
    ControllerOptions,
    ServiceDeps,
    Template,
    controller_path,
    dto_fields,
    gen_base_query,
    gen_base_repository,
    gen_controller,
    gen_dao,
    gen_dao_xml,
    gen_dtos,
    gen_entity_mapper,
    gen_mapper,
    gen_page,
    gen_query,
    gen_repository,
    gen_service_class,
    gen_service_impl,
    gen_service_interface,
)
from .errors import EntityParseError, GenerationError, GenerationInProgress, SinkError
from .model import (
    ArtifactKind,
    ClassHandle,
    ClassKind,
    Directories,
    EntityDescriptor,
    GeneratedArtifact,
    GenerationContext,
)
from .sink import CodeSink, join
from .symbols import SymbolResolver

log = logging.getLogger(__name__)

ABSTRACT_BASE_DTO = "AbstractBaseDTO"
BASE_CONTROLLER = "BaseController"
BASE_RESOURCE = "BaseResource"
SECURITY_UTILS = "SecurityUtils"
SWAGGER_API = "io.swagger.annotations.Api"


class Stage(str, enum.Enum):
    VALIDATE_ENTITY = "validate_entity"
    REPOSITORY = "repository"
    DTO = "dto"
    MAPPER = "mapper"
    QUERY = "query"
    DAO = "dao"
    SERVICE = "service"
    CONTROLLER = "controller"
    PAGE = "page"


class GenerationStatus(str, enum.Enum):
    SKIPPED = "skipped"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class GenerationResult:
    """Outcome of one run. ``failed_stage`` names the stage that ended a skipped or aborted run."""

    status: GenerationStatus
    context: Optional[GenerationContext] = None
    failed_stage: Optional[Stage] = None
    error: Optional[str] = None

    @property
    def artifacts(self) -> List[GeneratedArtifact]:
        return list(self.context.artifacts) if self.context else []


def entity_handle(entity: EntityDescriptor) -> ClassHandle:
    return ClassHandle(
        name=entity.name,
        package=entity.package,
        kind=ClassKind.CLASS,
        fields=entity.all_fields,
    )


class GenerationPlanner:
    """Runs the pipeline for one entity at a time.

    ``java_root`` and ``resources_root`` are sink paths; packages are derived
    from directory paths relative to ``java_root``.
    """

    def __init__(
        self,
        resolver: SymbolResolver,
        sink: CodeSink,
        config: Optional[FeatureConfig] = None,
        java_root: str = "",
        resources_root: Optional[str] = None,
        project_root: str = "",
    ) -> None:
        self.resolver = resolver
        self.sink = sink
        self.config = config or FeatureConfig()
        self.java_root = java_root.strip("/")
        self.resources_root = (resources_root if resources_root is not None else project_root).strip("/")
        self.project_root = project_root.strip("/")
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    # ---------------- entry point ----------------

    def run(self, entity: EntityDescriptor, entity_dir: str) -> GenerationResult:
        """Generate the CRUD slice for ``entity`` declared in directory ``entity_dir``.

        Raises :class:`GenerationInProgress` when another run holds this planner.
        """
        if not self._lock.acquire(blocking=False):
            raise GenerationInProgress("A generation run is already in progress")
        try:
            return self._run(entity, entity_dir.strip("/"))
        finally:
            self._lock.release()

    def _run(self, entity: EntityDescriptor, entity_dir: str) -> GenerationResult:
        if not entity.is_entity:
            log.info("%s is not annotated with @Entity; nothing to generate", entity.name)
            return GenerationResult(GenerationStatus.SKIPPED, failed_stage=Stage.VALIDATE_ENTITY)

        config = self.config.for_entity(entity)
        ctx = GenerationContext(
            entity=entity,
            config=config,
            dirs=Directories(
                java_root=self.java_root,
                resources_root=self.resources_root,
                project_root=self.project_root,
                container=entity_dir,
            ),
            entity_handle=entity_handle(entity),
        )
        log.debug("Generating %s with %s", entity.qualified_name, config)

        for stage, step in self._stages(config):
            log.debug("Stage %s", stage.value)
            try:
                step(ctx)
            except (GenerationError, SinkError) as e:
                log.error("Generation of %s aborted at stage %s: %s", entity.name, stage.value, e)
                return GenerationResult(GenerationStatus.ABORTED, ctx, failed_stage=stage, error=str(e))

        log.info("Generated %d artifact(s) for %s (%d kept)", len(ctx.artifacts), entity.name, len(ctx.reused))
        return GenerationResult(GenerationStatus.COMPLETED, ctx)

    def _stages(self, config: FeatureConfig) -> List[Tuple[Stage, Callable[[GenerationContext], None]]]:
        stages = [
            (Stage.REPOSITORY, self._repository),
            (Stage.DTO, self._dto),
            (Stage.MAPPER, self._mapper),
            (Stage.QUERY, self._query),
            (Stage.DAO, self._dao),
            (Stage.SERVICE, self._service),
            (Stage.CONTROLLER, self._controller),
        ]
        if config.with_page:
            stages.append((Stage.PAGE, self._page))
        return stages

    # ---------------- directories ----------------

    def package_of(self, directory: str) -> str:
        root = self.java_root
        rel = directory
        if root:
            if directory == root:
                rel = ""
            elif directory.startswith(root + "/"):
                rel = directory[len(root) + 1:]
        return rel.strip("/").replace("/", ".")

    def _parent(self, directory: str) -> Optional[str]:
        """Parent directory, or ``None`` at the Java source root."""
        if directory == self.java_root or not directory:
            return None
        return posixpath.dirname(directory)

    def _subdir(self, parent: str, name: str) -> str:
        try:
            return self.sink.create_or_get_subdirectory(parent, name)
        except SinkError as e:
            log.warning("Cannot create %s, using %s instead: %s", join(parent, name), parent or ".", e)
            return parent

    def _service_dir(self, ctx: GenerationContext) -> str:
        if not ctx.dirs.service:
            container = ctx.dirs.container
            parent = self._parent(container)
            grandparent = self._parent(parent) if parent is not None else None
            base = grandparent if grandparent is not None else (parent if parent is not None else container)
            ctx.dirs.service = self._subdir(base, "service")
        return ctx.dirs.service

    def _sibling_of_container(self, ctx: GenerationContext, name: str) -> str:
        parent = self._parent(ctx.dirs.container)
        if parent is None:
            return ctx.dirs.container
        return self._subdir(parent, name)

    def _controller_dir(self, ctx: GenerationContext) -> str:
        parent = self._parent(self._service_dir(ctx))
        if parent is None:
            parent = self.java_root
        found = self.sink.find_subdirectory(parent, "controller")
        if found is None:
            web = self.sink.find_subdirectory(parent, "web")
            if web is not None:
                found = self.sink.find_subdirectory(web, "rest") or web
        return found if found is not None else self._subdir(parent, "controller")

    # ---------------- placing artifacts ----------------

    def _place(self, ctx: GenerationContext, template: Template, directory: str) -> Optional[ClassHandle]:
        fh = self.sink.create_or_get_file(directory, template.file_name, template.content)
        if fh.created:
            log.info("Created %s", fh.path)
        else:
            log.info("Keeping existing %s", fh.path)
        ctx.artifacts.append(GeneratedArtifact(
            kind=template.kind,
            name=template.name,
            virtual_path=fh.path,
            content=fh.content,
            created=fh.created,
        ))
        if not template.file_name.endswith(".java"):
            return None

        handle = self._register(template, fh.content, fh.path, directory)
        ctx.handles[template.kind] = handle
        return handle

    def _register(self, template: Template, content: str, path: str, directory: str) -> ClassHandle:
        try:
            for h in self.resolver.register_source(content, path):
                if h.name == template.name:
                    return h
            log.warning("%s does not declare %s; referencing it by name", path, template.name)
        except EntityParseError as e:
            log.warning("Cannot parse %s, referencing it by name: %s", path, e)
        handle = ClassHandle(
            name=template.name,
            package=template.package if template.package is not None else self.package_of(directory),
            path=path,
        )
        self.resolver.register(handle)
        return handle

    def _resolve_or_create(
        self,
        ctx: GenerationContext,
        kind: ArtifactKind,
        name: str,
        directory: str,
        factory: Callable[[str], Template],
        kind_filter: Optional[ClassKind] = None,
    ) -> ClassHandle:
        predicate = (lambda h: h.kind == kind_filter) if kind_filter is not None else None
        handle = self.resolver.resolve(name, predicate)
        if handle is None:
            log.debug("%s not found, creating it in %s", name, directory or ".")
            handle = self._place(ctx, factory(self.package_of(directory)), directory)
        if handle is None:
            raise GenerationError(f"{name} could not be created")
        ctx.handles[kind] = handle
        return handle

    # ---------------- stages ----------------

    def _repository(self, ctx: GenerationContext) -> None:
        directory = self._sibling_of_container(ctx, "repository")
        ctx.dirs.repository = directory
        base = self._resolve_or_create(
            ctx, ArtifactKind.BASE_REPOSITORY, BASE_REPOSITORY, directory,
            gen_base_repository, ClassKind.INTERFACE,
        )
        self._place(ctx, gen_repository(ctx.entity, self.package_of(directory), base), directory)

    def _dto(self, ctx: GenerationContext) -> None:
        directory = self._subdir(self._service_dir(ctx), "dto")
        ctx.dirs.dto = directory
        base_dto = self.resolver.resolve(ABSTRACT_BASE_DTO)
        for template in gen_dtos(ctx.entity, ctx.config, self.package_of(directory), base_dto):
            self._place(ctx, template, directory)

    def _mapper(self, ctx: GenerationContext) -> None:
        directory = self._subdir(self._service_dir(ctx), "mapper")
        ctx.dirs.mapper = directory
        entity_mapper = self._resolve_or_create(
            ctx, ArtifactKind.ENTITY_MAPPER, ENTITY_MAPPER, directory,
            gen_entity_mapper, ClassKind.INTERFACE,
        )
        dto = ctx.require(ArtifactKind.DTO)
        self._place(ctx, gen_mapper(ctx.entity, self.package_of(directory), dto, entity_mapper), directory)

    def _query(self, ctx: GenerationContext) -> None:
        directory = self._subdir(self._service_dir(ctx), "query")
        ctx.dirs.query = directory
        base_query = self.resolver.resolve(BASE_QUERY, lambda h: h.kind == ClassKind.CLASS)
        if base_query is None and ctx.config.with_super:
            base_query = self._resolve_or_create(
                ctx, ArtifactKind.BASE_QUERY, BASE_QUERY, directory, gen_base_query,
            )
        elif base_query is not None:
            ctx.handles[ArtifactKind.BASE_QUERY] = base_query
        self._place(ctx, gen_query(ctx.entity, self.package_of(directory), base_query), directory)

    def _dao(self, ctx: GenerationContext) -> None:
        directory = self._sibling_of_container(ctx, "dao")
        ctx.dirs.dao = directory
        query = ctx.require(ArtifactKind.QUERY)
        self._place(ctx, gen_dao(ctx.entity, ctx.config, self.package_of(directory), query), directory)

        dao = ctx.require(ArtifactKind.DAO)
        mappers = self._subdir(self.resources_root, "mappers")
        ctx.dirs.mappers = mappers
        self._place(ctx, gen_dao_xml(ctx.entity, dao, ctx.config.with_deleted), mappers)
        ctx.dao_xml_path = ctx.artifacts[-1].virtual_path

    def _service(self, ctx: GenerationContext) -> None:
        directory = self._service_dir(ctx)
        deps = ServiceDeps(
            dto=ctx.require(ArtifactKind.DTO),
            query=ctx.require(ArtifactKind.QUERY),
            mapper=ctx.require(ArtifactKind.MAPPER),
            repository=ctx.require(ArtifactKind.REPOSITORY),
            dao=ctx.require(ArtifactKind.DAO),
        )
        package = self.package_of(directory)
        if not ctx.config.with_interface:
            self._place(ctx, gen_service_class(ctx.entity, ctx.config, package, deps), directory)
            return

        interface = self._place(ctx, gen_service_interface(ctx.entity, ctx.config, package, deps), directory)
        impl_dir = self._subdir(directory, "impl")
        ctx.dirs.service_impl = impl_dir
        impl = gen_service_impl(ctx.entity, ctx.config, self.package_of(impl_dir), deps, interface)
        self._place(ctx, impl, impl_dir)

    def _controller(self, ctx: GenerationContext) -> None:
        directory = self._controller_dir(ctx)
        ctx.dirs.controller = directory

        options = ControllerOptions(
            swagger=self.resolver.resolve(SWAGGER_API) is not None,
            security=self.resolver.resolve(SECURITY_UTILS),
        )
        base = self.resolver.resolve(BASE_CONTROLLER)
        if base is None:
            base = self.resolver.resolve(BASE_RESOURCE)
            if base is not None:
                options.suffix = "Resource"
        options.base = base

        deps = ControllerDeps(
            service=ctx.require(ArtifactKind.SERVICE),
            dto=ctx.require(ArtifactKind.DTO),
            query=ctx.require(ArtifactKind.QUERY),
            dto_add=ctx.handle(ArtifactKind.DTO_ADD),
            dto_update=ctx.handle(ArtifactKind.DTO_UPDATE),
        )
        template = gen_controller(ctx.entity, ctx.config, self.package_of(directory), deps, options)
        self._place(ctx, template, directory)

    def _page(self, ctx: GenerationContext) -> None:
        views = self._subdir(self._subdir(self.project_root, "ui"), "views")
        ctx.dirs.pages = views
        url = controller_path(ctx.config.controller_prefix, ctx.entity.base_name)
        self._place(ctx, gen_page(ctx.entity, dto_fields(ctx.entity), url), views)
        ctx.page_path = ctx.artifacts[-1].virtual_path
