"""Frontend page: a Vue single-file component around the shared ``crud-page``."""
from __future__ import annotations

import json
from typing import Dict, List, Sequence

from ..model import ArtifactKind, BOOLEAN_TYPES, INTEGER_TYPES, EntityDescriptor, FieldDescriptor
from ..naming import to_kebab_case
from .common import Template

COLUMN_WIDTHS = {"checkbox": 80, "number": 100, "text": 120}


def column_type(f: FieldDescriptor) -> str:
    if f.raw_type in BOOLEAN_TYPES:
        return "checkbox"
    if f.raw_type in INTEGER_TYPES:
        return "number"
    return "text"


def column_descriptor(f: FieldDescriptor) -> Dict[str, object]:
    kind = column_type(f)
    return {
        "field": f.name,
        "type": kind,
        "title": f.comment or f.name,
        "width": COLUMN_WIDTHS[kind],
    }


def gen_page(entity: EntityDescriptor, fields: Sequence[FieldDescriptor], url: str) -> Template:
    columns: List[Dict[str, object]] = [column_descriptor(f) for f in fields]
    name = f"{to_kebab_case(entity.base_name)}.vue"
    rendered = json.dumps(columns, ensure_ascii=False, indent=2)
    rendered = "\n".join("      " + line if i else line for i, line in enumerate(rendered.splitlines()))
    content = f"""<template>
  <crud-page :url="url" :columns="columns"/>
</template>

<script>
export default {{
  name: "{entity.base_name}Page",
  data() {{
    return {{
      url: {json.dumps(url)},
      columns: {rendered}
    }}
  }}
}}
</script>
"""
    return Template(kind=ArtifactKind.PAGE, name=name, file_name=name, content=content)
