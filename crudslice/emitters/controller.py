from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Set

from ..config import FeatureConfig
from ..model import ArtifactKind, ClassHandle, EntityDescriptor
from ..naming import first_letter_to_lower, to_kebab_case
from .common import Template, add_type_imports, indent, java_file, java_string, simple_name

WEB = "org.springframework.web.bind.annotation"
SWAGGER_API = "io.swagger.annotations.Api"
SWAGGER_OPERATION = "io.swagger.annotations.ApiOperation"
EXCEL_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass
class ControllerDeps:
    service: ClassHandle
    dto: ClassHandle
    query: ClassHandle
    dto_add: Optional[ClassHandle] = None
    dto_update: Optional[ClassHandle] = None


@dataclass
class ControllerOptions:
    suffix: str = "Controller"
    base: Optional[ClassHandle] = None
    swagger: bool = False
    security: Optional[ClassHandle] = None


@dataclass
class Handler:
    mapping: str
    path: str
    summary: str
    signature: str
    body: str
    throws: str = ""
    override: bool = False


def controller_path(prefix: str, base_name: str) -> str:
    parts = [s for s in (prefix or "").split("/") if s]
    parts.append(to_kebab_case(base_name))
    return "/" + "/".join(parts)


def _user_lookup(
    entity: EntityDescriptor,
    options: ControllerOptions,
    imports: Set[str],
):
    """(extra parameter, leading statement) that bring ``userId`` into scope."""
    owner = entity.find_field("userId")
    u = owner.wrapper_type if owner else "Long"
    if owner is not None:
        add_type_imports(owner, imports)
    if options.security is not None:
        imports.add(options.security.qualified_name)
        return "", f"{u} userId = {options.security.name}.getCurrentUserId();\n"
    imports.add(f"{WEB}.RequestAttribute")
    return f', @RequestAttribute("userId") {u} userId', ""


def _crud_handlers(
    entity: EntityDescriptor,
    config: FeatureConfig,
    deps: ControllerDeps,
    options: ControllerOptions,
    svc: str,
    imports: Set[str],
) -> List[Handler]:
    d, q = deps.dto.name, deps.query.name
    id_type = entity.id_type
    if entity.id_field is not None:
        add_type_imports(entity.id_field, imports)
    imports.update({
        "javax.validation.Valid",
        "java.util.List",
        "com.github.pagehelper.PageInfo",
        f"{WEB}.RequestBody",
        f"{WEB}.PathVariable",
        f"{WEB}.PostMapping",
        f"{WEB}.PutMapping",
        f"{WEB}.DeleteMapping",
        f"{WEB}.GetMapping",
    })

    if config.with_user_id:
        param, lookup = _user_lookup(entity, options, imports)
        add_body = f"{lookup}{svc}.add(userId, dto);"
        update_body = f"{lookup}{svc}.update(userId, dto);"
        delete_body = f"{lookup}{svc}.delete(userId, id);"
    else:
        param = ""
        add_body = f"{svc}.save(dto);"
        update_body = f"{svc}.save(dto);"
        delete_body = f"{svc}.delete(id);"

    return [
        Handler("PostMapping", "/add", "Add",
                f"void add(@RequestBody @Valid {d} dto{param})", add_body),
        Handler("PutMapping", "/update", "Update",
                f"void update(@RequestBody @Valid {d} dto{param})", update_body),
        Handler("DeleteMapping", "/delete/{id}", "Delete",
                f'void delete(@PathVariable("id") {id_type} id{param})', delete_body),
        Handler("GetMapping", "/list", "List all",
                f"List<{d}> list()", f"return {svc}.findAll();"),
        Handler("PostMapping", "/page-query", "Page query",
                f"PageInfo<{d}> pageQuery(@RequestBody {q} query)", f"return {svc}.pageQuery(query);"),
        Handler("PostMapping", "/count", "Count",
                f"long count(@RequestBody {q} query)", f"return {svc}.count(query);"),
    ]


def _owner_overrides(
    entity: EntityDescriptor,
    deps: ControllerDeps,
    options: ControllerOptions,
    svc: str,
    imports: Set[str],
) -> List[Handler]:
    """Replace the inherited add/update/delete with ones that go through the ownership overloads.

    The signatures match the super controller's, so the current user is looked up
    in the body instead of arriving as a parameter.
    """
    owner = entity.find_field("userId")
    u = owner.wrapper_type if owner else "Long"
    if owner is not None:
        add_type_imports(owner, imports)
    if options.security is not None:
        imports.add(options.security.qualified_name)
        lookup = f"{u} userId = {options.security.name}.getCurrentUserId();\n"
    else:
        imports.update({
            "org.springframework.web.context.request.RequestAttributes",
            "org.springframework.web.context.request.RequestContextHolder",
        })
        lookup = (
            f'{u} userId = ({u}) RequestContextHolder.currentRequestAttributes()\n'
            f'        .getAttribute("userId", RequestAttributes.SCOPE_REQUEST);\n'
        )
    if entity.id_field is not None:
        add_type_imports(entity.id_field, imports)
    imports.update({
        "javax.validation.Valid",
        f"{WEB}.RequestBody",
        f"{WEB}.PathVariable",
        f"{WEB}.PostMapping",
        f"{WEB}.PutMapping",
        f"{WEB}.DeleteMapping",
    })

    d = deps.dto.name

    def call(incoming: Optional[ClassHandle], method: str) -> str:
        if incoming is None or incoming.name == d:
            return f"{lookup}{svc}.{method}(userId, dto);"
        imports.add("org.springframework.beans.BeanUtils")
        return (
            f"{lookup}{d} target = new {d}();\n"
            f"BeanUtils.copyProperties(dto, target);\n"
            f"{svc}.{method}(userId, target);"
        )

    add_type = deps.dto_add or deps.dto
    update_type = deps.dto_update or deps.dto
    return [
        Handler("PostMapping", "/add", "Add",
                f"void add(@RequestBody @Valid {add_type.name} dto)", call(deps.dto_add, "add"), override=True),
        Handler("PutMapping", "/update", "Update",
                f"void update(@RequestBody @Valid {update_type.name} dto)", call(deps.dto_update, "update"),
                override=True),
        Handler("DeleteMapping", "/delete/{id}", "Delete",
                f'void delete(@PathVariable("id") {entity.id_type} id)', f"{lookup}{svc}.delete(userId, id);",
                override=True),
    ]


def _excel_handlers(
    entity: EntityDescriptor,
    config: FeatureConfig,
    deps: ControllerDeps,
    options: ControllerOptions,
    svc: str,
    imports: Set[str],
) -> List[Handler]:
    d, q = deps.dto.name, deps.query.name
    kebab = to_kebab_case(entity.base_name)
    imports.update({
        "com.alibaba.excel.EasyExcel",
        "java.io.IOException",
        "java.util.ArrayList",
        "java.util.List",
        "javax.servlet.http.HttpServletResponse",
        "org.springframework.web.multipart.MultipartFile",
        f"{WEB}.GetMapping",
        f"{WEB}.PostMapping",
        f"{WEB}.RequestBody",
        f"{WEB}.RequestParam",
    })

    read = f"List<{d}> dtos = EasyExcel.read(file.getInputStream()).head({d}.class).sheet().doReadSync();\n"
    if config.with_user_id:
        param, lookup = _user_lookup(entity, options, imports)
        upload_body = f"{lookup}{read}for ({d} dto : dtos) {{\n    {svc}.add(userId, dto);\n}}"
    else:
        param = ""
        upload_body = f"{read}{svc}.save(dtos);"

    return [
        Handler("GetMapping", "/template", "Download the import template",
                "void template(HttpServletResponse response)",
                f'writeExcel(response, "{kebab}-template", new ArrayList<>());', throws="IOException"),
        Handler("PostMapping", "/upload", "Import from Excel",
                f'void upload(@RequestParam("file") MultipartFile file{param})', upload_body, throws="IOException"),
        Handler("PostMapping", "/download", "Export to Excel",
                f"void download(@RequestBody {q} query, HttpServletResponse response)",
                f'writeExcel(response, "{kebab}", {svc}.query(query));', throws="IOException"),
    ]


def _write_excel(entity: EntityDescriptor, deps: ControllerDeps, imports: Set[str]) -> str:
    imports.update({"java.net.URLEncoder", "java.nio.charset.StandardCharsets"})
    d = deps.dto.name
    return f"""    private void writeExcel(HttpServletResponse response, String fileName, List<{d}> data) throws IOException {{
        response.setContentType("{EXCEL_MIME}");
        response.setCharacterEncoding("utf-8");
        String encoded = URLEncoder.encode(fileName, StandardCharsets.UTF_8.name());
        response.setHeader("Content-disposition", "attachment;filename=" + encoded + ".xlsx");
        EasyExcel.write(response.getOutputStream(), {d}.class).sheet("{entity.base_name}").doWrite(data);
    }}"""


def _render_handler(h: Handler, swagger: bool) -> str:
    lines = ["    @Override"] if h.override else []
    lines.append(f'    @{h.mapping}("{h.path}")')
    if swagger:
        lines.append(f'    @ApiOperation("{java_string(h.summary)}")')
    throws = f" throws {h.throws}" if h.throws else ""
    lines.append(f"    public {h.signature}{throws} {{")
    lines.append(indent(h.body, 8))
    lines.append("    }")
    return "\n".join(lines)


def gen_controller(
    entity: EntityDescriptor,
    config: FeatureConfig,
    package: str,
    deps: ControllerDeps,
    options: ControllerOptions,
) -> Template:
    base = entity.base_name
    name = f"{base}{options.suffix}"
    svc_type = deps.service.name
    svc = first_letter_to_lower(svc_type)
    imports: Set[str] = {
        f"{WEB}.RestController",
        f"{WEB}.RequestMapping",
        deps.service.qualified_name,
        deps.dto.qualified_name,
        deps.query.qualified_name,
    }

    heritage = ""
    super_mode = config.super_controller_enabled
    if super_mode:
        super_controller = config.super_controller or ""
        if "." in super_controller:
            imports.add(super_controller)
        generics = [deps.dto]
        generics += [h for h in (deps.dto_add, deps.dto_update) if h is not None]
        generics.append(deps.query)
        for h in generics:
            imports.add(h.qualified_name)
        heritage = f" extends {simple_name(super_controller)}<{', '.join(h.name for h in generics)}>"
        fields = f"""    private final {svc_type} {svc};

    public {name}({svc_type} service) {{
        super(service);
        this.{svc} = service;
    }}"""
    else:
        if options.base is not None:
            imports.add(options.base.qualified_name)
            heritage = f" extends {options.base.name}"
        imports.add("javax.annotation.Resource")
        fields = f"""    @Resource
    private {svc_type} {svc};"""

    handlers: List[Handler] = []
    if not super_mode:
        handlers.extend(_crud_handlers(entity, config, deps, options, svc, imports))
    elif config.with_user_id:
        handlers.extend(_owner_overrides(entity, deps, options, svc, imports))
    if config.excel_func:
        handlers.extend(_excel_handlers(entity, config, deps, options, svc, imports))

    class_annotations = ["@RestController", f'@RequestMapping("{controller_path(config.controller_prefix, base)}")']
    if options.swagger:
        imports.add(SWAGGER_API)
        if handlers:
            imports.add(SWAGGER_OPERATION)
        tag = entity.comment or base
        class_annotations.append(f'@Api(tags = "{java_string(tag)}")')

    blocks = [fields]
    blocks.extend(_render_handler(h, options.swagger) for h in handlers)
    if config.excel_func:
        blocks.append(_write_excel(entity, deps, imports))
    inner = "\n\n".join(blocks)

    header = "\n".join(class_annotations)
    body = f"""{header}
public class {name}{heritage} {{
{inner}
}}
"""
    return Template(
        kind=ArtifactKind.CONTROLLER,
        name=name,
        file_name=f"{name}.java",
        content=java_file(package, imports, body),
        package=package,
    )
