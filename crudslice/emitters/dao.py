"""MyBatis DAO interface and its XML mapping document."""
from __future__ import annotations

from typing import List, Set

from ..config import FeatureConfig
from ..model import ArtifactKind, ClassHandle, EntityDescriptor, FieldDescriptor
from ..naming import default_table_name
from .common import Template, java_file, simple_name

ENUM_TYPE_HANDLER = "org.apache.ibatis.type.EnumOrdinalTypeHandler"

XML_HEADER = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE mapper PUBLIC "-//mybatis.org//DTD Mapper 3.0//EN" "http://mybatis.org/dtd/mybatis-3-mapper.dtd">"""


def table_name(entity: EntityDescriptor) -> str:
    if entity.table is not None and entity.table.name:
        return entity.table.name
    return default_table_name(entity.base_name)


def gen_dao(
    entity: EntityDescriptor,
    config: FeatureConfig,
    package: str,
    query: ClassHandle,
) -> Template:
    name = f"{entity.base_name}Dao"
    imports: Set[str] = {entity.qualified_name, query.qualified_name}

    if config.super_dao_enabled:
        super_dao = config.super_dao or ""
        if "." in super_dao:
            imports.add(super_dao)
        body = f"""public interface {name} extends {simple_name(super_dao)}<{entity.name}, {query.name}> {{
}}
"""
    else:
        imports.add("java.util.List")
        body = f"""public interface {name} {{
    List<{entity.name}> query({query.name} query);

    long count({query.name} query);

    List<{entity.name}> findAll();

    void batchAdd(List<{entity.name}> list);
}}
"""
    return Template(
        kind=ArtifactKind.DAO,
        name=name,
        file_name=f"{name}.java",
        content=java_file(package, imports, body),
        package=package,
    )


# ---------------- XML ----------------


def _type_handler(f: FieldDescriptor) -> str:
    return f' typeHandler="{ENUM_TYPE_HANDLER}"' if f.is_enum else ""


def _result_map(entity: EntityDescriptor) -> str:
    rows: List[str] = []
    id_field = entity.id_field
    for f in entity.all_fields:
        tag = "id" if f is id_field else "result"
        rows.append(f'        <{tag} column="{f.column}" property="{f.name}"{_type_handler(f)}/>')
    inner = "\n".join(rows)
    return f"""    <resultMap id="resultMap" type="{entity.qualified_name}">
{inner}
    </resultMap>"""


def _columns(entity: EntityDescriptor) -> str:
    cols = ",\n".join(f"        t1.{f.column}" for f in entity.all_fields)
    return f"""    <sql id="columns">
{cols}
    </sql>"""


def _conditions(entity: EntityDescriptor, soft_delete: bool) -> str:
    id_col = entity.id_field.column if entity.id_field else "id"
    deleted = ""
    if soft_delete:
        deleted_field = entity.find_field("deleted")
        deleted_col = deleted_field.column if deleted_field else "deleted"
        deleted = f"\n            and t1.{deleted_col} = 0"
    return f"""    <sql id="conditions">
        <where>
            <if test="id != null">
                and t1.{id_col} = #{{id}}
            </if>
            <if test="idNot != null">
                and t1.{id_col} != #{{idNot}}
            </if>
            <if test="ids != null and ids.size() > 0">
                and t1.{id_col} in
                <foreach collection="ids" item="item" open="(" separator="," close=")">
                    #{{item}}
                </foreach>
            </if>{deleted}
        </where>
    </sql>"""


def _batch_add(entity: EntityDescriptor, table: str) -> str:
    id_field = entity.id_field
    fields = [f for f in entity.all_fields if f is not id_field]
    cols = ", ".join(f.column for f in fields)
    values = ", ".join(
        f"#{{item.{f.name}, typeHandler={ENUM_TYPE_HANDLER}}}" if f.is_enum else f"#{{item.{f.name}}}"
        for f in fields
    )
    return f"""    <insert id="batchAdd">
        insert into {table} ({cols})
        values
        <foreach collection="list" item="item" separator=",">
            ({values})
        </foreach>
    </insert>"""


def gen_dao_xml(entity: EntityDescriptor, dao: ClassHandle, soft_delete: bool = False) -> Template:
    """MyBatis mapper for ``dao``; the namespace is the DAO's registered qualified name."""
    table = table_name(entity)
    name = f"{dao.name}.xml"

    find_all_where = ""
    if soft_delete:
        deleted_field = entity.find_field("deleted")
        find_all_where = f"\n        where t1.{deleted_field.column if deleted_field else 'deleted'} = 0"

    content = f"""{XML_HEADER}
<mapper namespace="{dao.qualified_name}">
{_result_map(entity)}

{_columns(entity)}

    <sql id="tables">
        from {table} t1
    </sql>

{_conditions(entity, soft_delete)}

    <sql id="baseSelect">
        select
        <include refid="columns"/>
        <include refid="tables"/>
    </sql>

    <select id="query" resultMap="resultMap">
        <include refid="baseSelect"/>
        <include refid="conditions"/>
        <if test="orderBy != null and orderBy != ''">
            order by ${{orderBy}}
        </if>
    </select>

    <select id="count" resultType="long">
        select count(*)
        <include refid="tables"/>
        <include refid="conditions"/>
    </select>

    <select id="findAll" resultMap="resultMap">
        <include refid="baseSelect"/>{find_all_where}
    </select>

{_batch_add(entity, table)}
</mapper>
"""
    return Template(kind=ArtifactKind.DAO_XML, name=name, file_name=name, content=content)
