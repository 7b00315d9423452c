from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from .errors import GenerationError
from .naming import strip_entity_suffix, to_snake_case

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import FeatureConfig

ENTITY_ANNOT = "Entity"
ID_ANNOT = "Id"

COMMENT_RE = re.compile(r"comment\s+'((?:[^'\\]|\\.)*)'", re.I)

STRING_TYPES = {"String", "CharSequence"}
BOOLEAN_TYPES = {"boolean", "Boolean"}
INTEGER_TYPES = {
    "int", "Integer", "long", "Long", "short", "Short", "byte", "Byte", "BigInteger",
}
PRIMITIVE_TO_WRAPPER = {
    "int": "Integer",
    "long": "Long",
    "double": "Double",
    "float": "Float",
    "short": "Short",
    "byte": "Byte",
    "boolean": "Boolean",
    "char": "Character",
}

# ---------------- entity ----------------


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    type_name: str
    qualified_type: Optional[str] = None
    column_definition: Optional[str] = None
    column_name: Optional[str] = None
    is_enum: bool = False
    is_id: bool = False
    annotations: Tuple[str, ...] = ()

    @property
    def raw_type(self) -> str:
        t = self.type_name.strip().replace("[]", "")
        if "<" in t:
            t = t.split("<", 1)[0].strip()
        return t

    @property
    def wrapper_type(self) -> str:
        return PRIMITIVE_TO_WRAPPER.get(self.type_name, self.type_name)

    @property
    def column(self) -> str:
        return self.column_name or to_snake_case(self.name)

    @property
    def comment(self) -> Optional[str]:
        if not self.column_definition:
            return None
        m = COMMENT_RE.search(self.column_definition)
        if not m or not m.group(1).strip():
            return None
        return m.group(1).strip()


@dataclass(frozen=True)
class TableInfo:
    name: str
    comment: Optional[str] = None


@dataclass(frozen=True)
class EntityFlags:
    has_deleted: bool = False
    has_create_time: bool = False
    has_user_id: bool = False


@dataclass(frozen=True)
class EntityDescriptor:
    name: str
    package: str
    fields: Tuple[FieldDescriptor, ...]
    inherited_fields: Tuple[FieldDescriptor, ...] = ()
    superclasses: Tuple[str, ...] = ()
    table: Optional[TableInfo] = None
    annotations: Tuple[str, ...] = ()
    imports: Tuple[Tuple[str, str], ...] = ()
    comment: Optional[str] = None

    @property
    def base_name(self) -> str:
        return strip_entity_suffix(self.name)

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name

    @property
    def is_entity(self) -> bool:
        return ENTITY_ANNOT in self.annotations

    @property
    def all_fields(self) -> Tuple[FieldDescriptor, ...]:
        own = {f.name for f in self.fields}
        return tuple(f for f in self.inherited_fields if f.name not in own) + self.fields

    @property
    def id_field(self) -> Optional[FieldDescriptor]:
        for f in self.all_fields:
            if f.is_id:
                return f
        for f in self.all_fields:
            if f.name == "id":
                return f
        return None

    @property
    def id_name(self) -> str:
        f = self.id_field
        return f.name if f else "id"

    @property
    def id_type(self) -> str:
        f = self.id_field
        return f.wrapper_type if f else "Long"

    @property
    def flags(self) -> EntityFlags:
        names = {f.name for f in self.all_fields}
        return EntityFlags(
            has_deleted="deleted" in names,
            has_create_time="createTime" in names,
            has_user_id="userId" in names,
        )

    def find_field(self, name: str) -> Optional[FieldDescriptor]:
        for f in self.all_fields:
            if f.name == name:
                return f
        return None

    def import_map(self) -> Dict[str, str]:
        return dict(self.imports)


# ---------------- symbols ----------------


class ClassKind(str, enum.Enum):
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"


@dataclass(frozen=True)
class ClassHandle:
    """Identity of a class the generator can reference: name, package, members."""

    name: str
    package: str
    kind: ClassKind = ClassKind.CLASS
    fields: Tuple[FieldDescriptor, ...] = ()
    methods: Tuple[str, ...] = ()
    superclass: Optional[str] = None
    path: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name

    @property
    def is_enum(self) -> bool:
        return self.kind == ClassKind.ENUM

    def has_field(self, name: str) -> bool:
        return any(f.name == name for f in self.fields)

    def has_method(self, name: str) -> bool:
        return name in self.methods


# ---------------- artifacts ----------------


class ArtifactKind(str, enum.Enum):
    DTO = "DTO"
    DTO_ADD = "DTO_ADD"
    DTO_UPDATE = "DTO_UPDATE"
    MAPPER = "MAPPER"
    ENTITY_MAPPER = "ENTITY_MAPPER"
    REPOSITORY = "REPOSITORY"
    QUERY = "QUERY"
    DAO = "DAO"
    DAO_XML = "DAO_XML"
    SERVICE = "SERVICE"
    SERVICE_IMPL = "SERVICE_IMPL"
    CONTROLLER = "CONTROLLER"
    PAGE = "PAGE"
    BASE_REPOSITORY = "BASE_REPOSITORY"
    BASE_QUERY = "BASE_QUERY"


@dataclass
class GeneratedArtifact:
    kind: ArtifactKind
    name: str
    virtual_path: str
    content: str
    created: bool = True


@dataclass
class Directories:
    java_root: str
    resources_root: str
    project_root: str = ""
    container: str = ""
    repository: str = ""
    service: str = ""
    dto: str = ""
    mapper: str = ""
    query: str = ""
    dao: str = ""
    service_impl: str = ""
    controller: str = ""
    mappers: str = ""
    pages: str = ""


@dataclass
class GenerationContext:
    """Running state of one generation: every artifact identity produced so far."""

    entity: EntityDescriptor
    config: "FeatureConfig"
    dirs: Directories
    handles: Dict[ArtifactKind, ClassHandle] = field(default_factory=dict)
    entity_handle: Optional[ClassHandle] = None
    dao_xml_path: Optional[str] = None
    page_path: Optional[str] = None
    artifacts: List[GeneratedArtifact] = field(default_factory=list)

    def handle(self, kind: ArtifactKind) -> Optional[ClassHandle]:
        return self.handles.get(kind)

    def require(self, kind: ArtifactKind) -> ClassHandle:
        h = self.handles.get(kind)
        if h is None:
            raise GenerationError(f"{kind.value} has not been generated yet")
        return h

    @property
    def reused(self) -> List[GeneratedArtifact]:
        return [a for a in self.artifacts if not a.created]
