from __future__ import annotations

import abc
import hashlib
import json
import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Set

from .errors import SinkError

log = logging.getLogger(__name__)

MANIFEST_DIR = ".crudslice"
MANIFEST_NAME = "manifest.json"


@dataclass(frozen=True)
class FileHandle:
    path: str
    content: str
    created: bool


def join(parent: str, name: str) -> str:
    if not parent:
        return name
    return posixpath.join(parent, name)


def sha256_text(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8", errors="ignore")).hexdigest()


def normalize_content(content: str) -> str:
    return content.rstrip() + "\n"


class CodeSink(abc.ABC):
    """Persists generated files. Never overwrites an existing file."""

    @abc.abstractmethod
    def is_dir(self, path: str) -> bool:
        ...

    @abc.abstractmethod
    def read_file(self, path: str) -> Optional[str]:
        ...

    @abc.abstractmethod
    def _make_dir(self, path: str) -> None:
        ...

    @abc.abstractmethod
    def _write_file(self, path: str, content: str) -> None:
        ...

    def find_subdirectory(self, parent: str, name: str) -> Optional[str]:
        path = join(parent, name)
        return path if self.is_dir(path) else None

    def create_or_get_subdirectory(self, parent: str, name: str) -> str:
        path = join(parent, name)
        if not self.is_dir(path):
            self._make_dir(path)
        return path

    def create_or_get_file(self, directory: str, file_name: str, content: str) -> FileHandle:
        path = join(directory, file_name)
        existing = self.read_file(path)
        if existing is not None:
            log.debug("Keeping existing %s", path)
            return FileHandle(path=path, content=existing, created=False)
        if directory and not self.is_dir(directory):
            self._make_dir(directory)
        content = normalize_content(content)
        self._write_file(path, content)
        return FileHandle(path=path, content=content, created=True)


class MemorySink(CodeSink):
    def __init__(self, files: Optional[Dict[str, str]] = None) -> None:
        self.files: Dict[str, str] = dict(files or {})
        self.dirs: Set[str] = set()
        for path in self.files:
            self._add_parents(path)

    def _add_parents(self, path: str) -> None:
        parent = posixpath.dirname(path)
        while parent:
            self.dirs.add(parent)
            parent = posixpath.dirname(parent)

    def is_dir(self, path: str) -> bool:
        return path == "" or path in self.dirs

    def read_file(self, path: str) -> Optional[str]:
        return self.files.get(path)

    def _make_dir(self, path: str) -> None:
        self.dirs.add(path)
        self._add_parents(path)

    def _write_file(self, path: str, content: str) -> None:
        self.files[path] = content
        self._add_parents(path)


class DiskSink(CodeSink):
    """Writes below ``root``; ``dry_run`` keeps everything in memory."""

    def __init__(self, root: Path, dry_run: bool = False) -> None:
        self.root = root
        self.dry_run = dry_run
        self.manifest: Dict[str, str] = load_manifest(root)
        self._pending: Dict[str, str] = {}
        self._pending_dirs: Set[str] = set()

    def _abs(self, path: str) -> Path:
        return self.root / Path(path)

    def is_dir(self, path: str) -> bool:
        return path in self._pending_dirs or self._abs(path).is_dir()

    def read_file(self, path: str) -> Optional[str]:
        if path in self._pending:
            return self._pending[path]
        pth = self._abs(path)
        if not pth.is_file():
            return None
        try:
            return pth.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise SinkError(f"Cannot read {pth}: {e}") from e

    def _make_dir(self, path: str) -> None:
        if self.dry_run:
            self._pending_dirs.add(path)
            return
        try:
            self._abs(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SinkError(f"Cannot create directory {path}: {e}") from e

    def _write_file(self, path: str, content: str) -> None:
        self.manifest[path] = sha256_text(content)
        if self.dry_run:
            self._pending[path] = content
            return
        pth = self._abs(path)
        try:
            pth.parent.mkdir(parents=True, exist_ok=True)
            pth.write_text(content, encoding="utf-8")
        except OSError as e:
            raise SinkError(f"Cannot write {path}: {e}") from e

    def save_manifest(self) -> None:
        if self.dry_run:
            return
        save_manifest(self.root, self.manifest)


# ---------------- manifest ----------------


def manifest_path(root: Path) -> Path:
    return root / MANIFEST_DIR / MANIFEST_NAME


def load_manifest(root: Path) -> Dict[str, str]:
    mf = manifest_path(root)
    if not mf.exists():
        return {}
    try:
        data = json.loads(mf.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("Ignoring unreadable manifest %s: %s", mf, e)
        return {}
    return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}


def save_manifest(root: Path, manifest: Dict[str, str]) -> None:
    mf = manifest_path(root)
    try:
        mf.parent.mkdir(parents=True, exist_ok=True)
        mf.write_text(json.dumps(manifest, indent=2, ensure_ascii=False, sort_keys=True), encoding="utf-8")
    except OSError as e:
        log.warning("Could not save manifest %s: %s", mf, e)
