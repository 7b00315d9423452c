from __future__ import annotations


class CrudSliceError(Exception):
    pass


class EntityParseError(CrudSliceError):
    """Java source could not be read into an entity description."""


class SinkError(CrudSliceError):
    """A file or directory could not be created."""


class GenerationError(CrudSliceError):
    """A pipeline stage cannot proceed."""


class GenerationInProgress(CrudSliceError):
    """Another generation run holds the planner."""
