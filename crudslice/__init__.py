"""Generate a Spring/MyBatis CRUD slice from a JPA entity."""

from .config import FeatureConfig, load_config
from .errors import (
    CrudSliceError,
    EntityParseError,
    GenerationError,
    GenerationInProgress,
    SinkError,
)
from .introspect import read_entity, read_entity_file
from .model import (
    ArtifactKind,
    ClassHandle,
    EntityDescriptor,
    FieldDescriptor,
    GeneratedArtifact,
    GenerationContext,
)
from .planner import GenerationPlanner, GenerationResult, GenerationStatus, Stage
from .sink import CodeSink, DiskSink, MemorySink
from .symbols import SymbolResolver, SymbolTable

__version__ = "0.1.0"

__all__ = [
    "ArtifactKind",
    "ClassHandle",
    "CodeSink",
    "CrudSliceError",
    "DiskSink",
    "EntityDescriptor",
    "EntityParseError",
    "FeatureConfig",
    "FieldDescriptor",
    "GeneratedArtifact",
    "GenerationContext",
    "GenerationError",
    "GenerationInProgress",
    "GenerationPlanner",
    "GenerationResult",
    "GenerationStatus",
    "MemorySink",
    "SinkError",
    "Stage",
    "SymbolResolver",
    "SymbolTable",
    "load_config",
    "read_entity",
    "read_entity_file",
]
