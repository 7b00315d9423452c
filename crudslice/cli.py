"""Command line entry point.

    crudslice generate path/to/OrderEntity.java --root path/to/project
    crudslice annotate path/to/Order.java
    crudslice init-config --root path/to/project
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .annotator import annotate_entity_file
from .config import CONFIG_FILE_NAME, load_config, write_default_config
from .console import p, setup_logging, show_artifacts
from .errors import CrudSliceError, EntityParseError, GenerationInProgress
from .introspect import read_entity_file
from .planner import GenerationPlanner, GenerationStatus
from .sink import DiskSink
from .symbols import EXCLUDE_DIRS, SymbolTable

log = logging.getLogger(__name__)

JAVA_SOURCES = "src/main/java"
RESOURCES = "src/main/resources"


def strip_quotes(s: str) -> str:
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        return s[1:-1]
    return s


def find_first_dir(root: Path, rel: str) -> Optional[Path]:
    cand = root / rel
    if cand.exists() and cand.is_dir():
        return cand
    for pth in root.rglob(rel):
        if pth.is_dir() and not any(x in pth.parts for x in EXCLUDE_DIRS):
            return pth
    return None


def virtual_path(pth: Path, root: Path) -> str:
    rel = pth.resolve().relative_to(root).as_posix()
    return "" if rel == "." else rel


def _resolve_root(value: Optional[str]) -> Path:
    return Path(strip_quotes(value)).expanduser().resolve() if value else Path.cwd().resolve()


# ---------------- commands ----------------


def cmd_generate(args: argparse.Namespace) -> int:
    root = _resolve_root(args.root)
    if not root.is_dir():
        p(f"[ERROR] Folder not found: {root}")
        return 2
    entity_file = Path(strip_quotes(args.entity_file)).expanduser().resolve()
    if not entity_file.is_file():
        p(f"[ERROR] File not found: {entity_file}")
        return 2
    try:
        entity_dir = virtual_path(entity_file.parent, root)
    except ValueError:
        p(f"[ERROR] {entity_file} is not inside {root}")
        return 2

    java_dir = find_first_dir(root, JAVA_SOURCES)
    if java_dir is None:
        log.warning("%s not found, using the project root for Java sources", JAVA_SOURCES)
        java_dir = root
    resources_dir = find_first_dir(root, RESOURCES)
    if resources_dir is None:
        log.warning("%s not found, mapping files go to the project root", RESOURCES)
        resources_dir = root

    table = SymbolTable()
    table.scan(root)
    config = load_config(root)

    try:
        entity = read_entity_file(entity_file, table)
    except EntityParseError as e:
        p(f"[ERROR] {e}")
        return 2

    p("\nProject detected")
    p(f"- Root: {root}")
    p(f"- Java sources: {java_dir}")
    p(f"- Resources: {resources_dir}")
    p(f"- Known types: {len(table)}")
    p(f"- Entity: {entity.qualified_name}")
    p(f"- Dry run: {args.dry_run}")

    sink = DiskSink(root, dry_run=args.dry_run)
    planner = GenerationPlanner(
        table,
        sink,
        config,
        java_root=virtual_path(java_dir, root),
        resources_root=virtual_path(resources_dir, root),
        project_root="",
    )
    try:
        result = planner.run(entity, entity_dir)
    except GenerationInProgress as e:
        p(f"[ERROR] {e}")
        return 1

    if result.artifacts:
        show_artifacts(result.artifacts, title=f"{entity.name} ({'dry run' if args.dry_run else 'written'})")
    sink.save_manifest()

    if result.status == GenerationStatus.SKIPPED:
        p(f"[WARN] {entity.name} is not an @Entity; nothing generated.")
        return 0
    if result.status == GenerationStatus.ABORTED:
        stage = result.failed_stage.value if result.failed_stage else "?"
        p(f"[FAIL] Generation aborted at stage '{stage}': {result.error}")
        return 1

    created = sum(1 for a in result.artifacts if a.created)
    p(f"[OK] {created} file(s) created, {len(result.artifacts) - created} kept.")
    return 0


def cmd_annotate(args: argparse.Namespace) -> int:
    path = Path(strip_quotes(args.entity_file)).expanduser().resolve()
    if not path.is_file():
        p(f"[ERROR] File not found: {path}")
        return 2
    try:
        result = annotate_entity_file(path, dry_run=args.dry_run)
    except EntityParseError as e:
        p(f"[ERROR] {e}")
        return 2

    if not result.changed:
        p(f"{path.name} is already an entity; nothing to do.")
        return 0
    p(f"\n{path.name}{' (dry run)' if args.dry_run else ''}:")
    for c in result.changes:
        p(f" - {c}")
    return 0


def cmd_init_config(args: argparse.Namespace) -> int:
    root = _resolve_root(args.root)
    if not root.is_dir():
        p(f"[ERROR] Folder not found: {root}")
        return 2
    path = root / CONFIG_FILE_NAME
    if path.exists():
        p(f"{path} already exists.")
        return 0
    if not write_default_config(path):
        return 1
    p(f"Created {path}")
    return 0


# ---------------- argparse ----------------


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="crudslice", description="CRUD slice generator for JPA entities")
    ap.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate the CRUD slice for an entity")
    gen.add_argument("entity_file", help="Path to the entity's .java file")
    gen.add_argument("--root", type=str, default=None, help="Project root path (default: current directory)")
    gen.add_argument("--dry-run", action="store_true", help="Do not write files")
    gen.add_argument("--verbose", "-v", action="store_true", default=argparse.SUPPRESS, help="Debug logging")
    gen.set_defaults(func=cmd_generate)

    ann = sub.add_parser("annotate", help="Add JPA annotations to a plain class")
    ann.add_argument("entity_file", help="Path to the class's .java file")
    ann.add_argument("--dry-run", action="store_true", help="Only report the changes")
    ann.set_defaults(func=cmd_annotate)

    init = sub.add_parser("init-config", help=f"Create {CONFIG_FILE_NAME} with default settings")
    init.add_argument("--root", type=str, default=None, help="Project root path (default: current directory)")
    init.set_defaults(func=cmd_init_config)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    try:
        args = ap.parse_args(argv)
    except SystemExit as e:
        return int(e.code or 0) if isinstance(e.code, int) else 2

    setup_logging(args.verbose)
    try:
        return args.func(args)
    except CrudSliceError as e:
        p(f"[ERROR] {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
