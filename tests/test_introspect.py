import textwrap

import pytest

from crudslice.errors import EntityParseError
from crudslice.introspect import handles_from_source, read_entity
from crudslice.model import ClassKind
from crudslice.symbols import SymbolTable

BASE_ENTITY = textwrap.dedent(
    """\
    package com.acme.shop.domain;

    import java.time.LocalDateTime;
    import javax.persistence.Id;
    import javax.persistence.MappedSuperclass;

    @MappedSuperclass
    public abstract class BaseEntity {
        @Id
        private Long id;

        private LocalDateTime createTime;
    }
    """
)

CHILD_ENTITY = textwrap.dedent(
    """\
    package com.acme.shop.domain.entity;

    import com.acme.shop.domain.BaseEntity;
    import javax.persistence.Entity;

    @javax.persistence.Entity
    public class ProductEntity extends BaseEntity {
        private static final long serialVersionUID = 1L;

        private String name;

        private ProductKind kind;
    }
    """
)


def test_read_order_entity(order_entity):
    assert order_entity.name == "OrderEntity"
    assert order_entity.base_name == "Order"
    assert order_entity.package == "com.acme.shop.domain.entity"
    assert order_entity.qualified_name == "com.acme.shop.domain.entity.OrderEntity"
    assert order_entity.is_entity
    assert order_entity.table is not None and order_entity.table.name == "t_order"
    assert [f.name for f in order_entity.fields] == ["id", "amount"]

    amount = order_entity.find_field("amount")
    assert amount.type_name == "Double"
    assert amount.column_definition == "numeric(24,4) not null comment 'Amount'"
    assert amount.comment == "Amount"
    assert amount.column == "amount"

    assert order_entity.id_field.name == "id"
    assert order_entity.id_type == "Long"
    flags = order_entity.flags
    assert not (flags.has_deleted or flags.has_create_time or flags.has_user_id)


def test_read_note_entity(note_entity):
    status = note_entity.find_field("status")
    assert status.is_enum
    assert status.qualified_type == "com.acme.shop.domain.entity.NoteEntity.Status"
    create_time = note_entity.find_field("createTime")
    assert create_time.qualified_type == "java.time.LocalDateTime"
    assert create_time.column == "create_time"
    assert note_entity.table is None
    flags = note_entity.flags
    assert flags.has_deleted and flags.has_create_time and flags.has_user_id


def test_inherited_fields_come_from_resolvable_superclasses():
    symbols = SymbolTable()
    symbols.register_source(BASE_ENTITY, "BaseEntity.java")
    symbols.register_source("package com.acme.shop.domain.entity;\npublic enum ProductKind { A, B }\n")

    entity = read_entity(CHILD_ENTITY, symbols)
    assert entity.is_entity
    assert entity.superclasses == ("BaseEntity",)
    assert [f.name for f in entity.inherited_fields] == ["id", "createTime"]
    assert [f.name for f in entity.all_fields] == ["id", "createTime", "name", "kind"]
    assert entity.id_field.name == "id"
    assert entity.flags.has_create_time
    # static fields are not columns
    assert entity.find_field("serialVersionUID") is None

    kind = entity.find_field("kind")
    assert kind.is_enum
    assert kind.qualified_type == "com.acme.shop.domain.entity.ProductKind"


def test_unresolvable_superclass_is_still_named():
    entity = read_entity(CHILD_ENTITY)
    assert entity.superclasses == ("BaseEntity",)
    assert entity.inherited_fields == ()


def test_table_comment_from_hibernate_table():
    src = textwrap.dedent(
        """\
        package x;

        @Entity
        @Table(name = "t_order")
        @org.hibernate.annotations.Table(appliesTo = "t_order", comment = "Orders")
        public class OrderEntity {
            private Long id;
        }
        """
    )
    entity = read_entity(src)
    assert entity.comment == "Orders"
    assert entity.table.name == "t_order"
    assert entity.table.comment == "Orders"


def test_comment_annotation():
    src = 'package x;\n@Comment(entityName = "Customer")\npublic class Customer { private Long id; }\n'
    entity = read_entity(src)
    assert entity.comment == "Customer"
    assert not entity.is_entity


def test_parse_errors_are_reported():
    with pytest.raises(EntityParseError):
        read_entity("public class {")
    with pytest.raises(EntityParseError):
        read_entity("package x;\npublic enum Only { A }\n")


def test_handles_include_nested_types(note_source):
    handles = handles_from_source(note_source, "NoteEntity.java")
    by_name = {h.name: h for h in handles}
    assert set(by_name) == {"NoteEntity", "Status"}
    assert by_name["Status"].kind == ClassKind.ENUM
    assert by_name["NoteEntity"].has_field("title")
    assert by_name["NoteEntity"].path == "NoteEntity.java"


def test_handles_record_methods_and_interfaces():
    src = "package a.b;\npublic interface Repo<E> extends Base<E> { void save(E e); }\n"
    (h,) = handles_from_source(src)
    assert h.kind == ClassKind.INTERFACE
    assert h.qualified_name == "a.b.Repo"
    assert h.has_method("save")
