from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

from .model import EntityDescriptor

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "codeGenerator.properties"

PROPERTY_RE = re.compile(r"^\s*([^=:\s]+)\s*[=:]\s*(.*?)\s*$")

DEFAULT_CONFIG_LINES = [
    "# Generate Excel import/export handlers",
    "common.func.excel=false",
    "# Generate the service as interface + implementation",
    "service.interface=false",
    "# Controller path prefix",
    "controller.prefix=/api",
    "# Extend the configured super classes",
    "common.super=false",
    "common.super.service=",
    "common.super.controller=",
    "common.super.dao=",
    "# Generate a frontend page",
    "ui.enable=false",
]


@dataclass(frozen=True)
class FeatureConfig:
    excel_func: bool = False
    with_super: bool = False
    super_service: Optional[str] = None
    super_controller: Optional[str] = None
    super_dao: Optional[str] = None
    controller_prefix: str = "/api"
    with_page: bool = False
    with_interface: bool = False
    with_deleted: bool = False
    with_create_time: bool = False
    with_user_id: bool = False

    def for_entity(self, entity: EntityDescriptor) -> "FeatureConfig":
        flags = entity.flags
        return replace(
            self,
            with_deleted=flags.has_deleted,
            with_create_time=flags.has_create_time,
            with_user_id=flags.has_user_id,
        )

    @property
    def super_service_enabled(self) -> bool:
        return self.with_super and bool(self.super_service)

    @property
    def super_controller_enabled(self) -> bool:
        return self.with_super and bool(self.super_controller)

    @property
    def super_dao_enabled(self) -> bool:
        return self.with_super and bool(self.super_dao)


def parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def _optional(value: str) -> Optional[str]:
    v = value.strip()
    return v or None


def parse_properties(text: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for line in text.splitlines():
        s = line.strip()
        if not s or s.startswith("#") or s.startswith("!"):
            continue
        m = PROPERTY_RE.match(s)
        if m:
            out[m.group(1)] = m.group(2)
    return out


def config_from_properties(props: Dict[str, str]) -> FeatureConfig:
    cfg = FeatureConfig()
    for k, v in props.items():
        if k == "common.func.excel":
            cfg = replace(cfg, excel_func=parse_bool(v))
        elif k == "service.interface":
            cfg = replace(cfg, with_interface=parse_bool(v))
        elif k == "controller.prefix":
            cfg = replace(cfg, controller_prefix=v.strip() or "/api")
        elif k == "common.super":
            cfg = replace(cfg, with_super=parse_bool(v))
        elif k == "common.super.service":
            cfg = replace(cfg, super_service=_optional(v))
        elif k == "common.super.controller":
            cfg = replace(cfg, super_controller=_optional(v))
        elif k == "common.super.dao":
            cfg = replace(cfg, super_dao=_optional(v))
        elif k == "ui.enable":
            cfg = replace(cfg, with_page=parse_bool(v))
    return cfg


def write_default_config(path: Path) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(DEFAULT_CONFIG_LINES) + "\n", encoding="utf-8")
    except OSError as e:
        log.warning("Could not create %s: %s", path, e)
        return False
    return True


def load_config(project_root: Path) -> FeatureConfig:
    """Read ``codeGenerator.properties`` from the project root.

    A missing file is created with the defaults; the defaults are returned.
    """
    path = project_root / CONFIG_FILE_NAME
    if not path.exists():
        if write_default_config(path):
            log.info("Created %s with default settings", path)
        return FeatureConfig()

    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        log.warning("Could not read %s: %s", path, e)
        return FeatureConfig()
    return config_from_properties(parse_properties(text))
