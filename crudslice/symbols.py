from __future__ import annotations

import abc
import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .errors import EntityParseError
from .introspect import handles_from_source
from .model import ClassHandle

log = logging.getLogger(__name__)

Predicate = Callable[[ClassHandle], bool]

EXCLUDE_DIRS = {
    ".crudslice",
    ".git", ".idea", ".vscode",
    "target", "build", "out", ".gradle",
    "node_modules", "__pycache__", ".mvn",
}


class SymbolResolver(abc.ABC):
    """Looks up classes by simple or fully qualified name."""

    @abc.abstractmethod
    def resolve(self, name: str, predicate: Optional[Predicate] = None) -> Optional[ClassHandle]:
        ...

    @abc.abstractmethod
    def register(self, handle: ClassHandle) -> None:
        ...

    def register_source(self, text: str, path: Optional[str] = None) -> List[ClassHandle]:
        handles = handles_from_source(text, path, resolver=self)
        for h in handles:
            self.register(h)
        return handles


class SymbolTable(SymbolResolver):
    def __init__(self, handles: Optional[List[ClassHandle]] = None) -> None:
        self._by_name: Dict[str, List[ClassHandle]] = {}
        for h in handles or []:
            self.register(h)

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_name.values())

    def __contains__(self, name: str) -> bool:
        return self.resolve(name) is not None

    def register(self, handle: ClassHandle) -> None:
        bucket = self._by_name.setdefault(handle.name, [])
        bucket[:] = [h for h in bucket if h.package != handle.package]
        bucket.append(handle)

    def resolve(self, name: str, predicate: Optional[Predicate] = None) -> Optional[ClassHandle]:
        if not name or not name.strip():
            return None
        name = name.strip()
        pkg: Optional[str] = None
        simple = name
        if "." in name:
            pkg, simple = name.rsplit(".", 1)

        for h in self._by_name.get(simple, []):
            if pkg is not None and h.package != pkg:
                continue
            if predicate is None or predicate(h):
                return h
        return None

    def all(self) -> List[ClassHandle]:
        return [h for bucket in self._by_name.values() for h in bucket]

    def scan(self, root: Path) -> int:
        """Register every type declared in ``.java`` files below ``root``."""
        count = 0
        for pth in iter_java_files(root):
            try:
                text = pth.read_text(encoding="utf-8", errors="replace")
                count += len(self.register_source(text, relpath(pth, root)))
            except (OSError, EntityParseError) as e:
                log.warning("Skipping %s: %s", pth, e)
        log.debug("Scanned %d type(s) below %s", count, root)
        return count


def relpath(pth: Path, root: Path) -> str:
    try:
        return pth.relative_to(root).as_posix()
    except ValueError:
        return pth.as_posix()


def iter_java_files(root: Path) -> List[Path]:
    out: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in EXCLUDE_DIRS]
        for fn in filenames:
            if fn.endswith(".java"):
                out.append(Path(dirpath) / fn)
    return sorted(out)
