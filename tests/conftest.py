"""
tests/conftest.py
Shared fixtures for the crudslice test suite.

Entity sources are plain Java text; generation runs against an in-memory
symbol table and sink unless a test needs the real file system (tmp_path).
"""

from __future__ import annotations

import textwrap
from typing import Callable, Optional

import pytest

from crudslice.config import FeatureConfig
from crudslice.introspect import read_entity
from crudslice.model import EntityDescriptor
from crudslice.planner import GenerationPlanner
from crudslice.sink import MemorySink
from crudslice.symbols import SymbolTable


# ---------------------------------------------------------------------------
# Project layout
# ---------------------------------------------------------------------------

JAVA_ROOT = "src/main/java"
RESOURCES_ROOT = "src/main/resources"
ENTITY_DIR = f"{JAVA_ROOT}/com/acme/shop/domain/entity"
SERVICE_DIR = f"{JAVA_ROOT}/com/acme/shop/service"
REPOSITORY_DIR = f"{JAVA_ROOT}/com/acme/shop/domain/repository"
DAO_DIR = f"{JAVA_ROOT}/com/acme/shop/domain/dao"
CONTROLLER_DIR = f"{JAVA_ROOT}/com/acme/shop/controller"
MAPPERS_DIR = f"{RESOURCES_ROOT}/mappers"


# ---------------------------------------------------------------------------
# Entity sources
# ---------------------------------------------------------------------------

ORDER_SOURCE = textwrap.dedent(
    """\
    package com.acme.shop.domain.entity;

    import javax.persistence.Column;
    import javax.persistence.Entity;
    import javax.persistence.Id;
    import javax.persistence.Table;

    @Entity
    @Table(name = "t_order")
    public class OrderEntity {
        @Id
        private Long id;

        @Column(columnDefinition = "numeric(24,4) not null comment 'Amount'")
        private Double amount;
    }
    """
)

NOTE_SOURCE = textwrap.dedent(
    """\
    package com.acme.shop.domain.entity;

    import java.time.LocalDateTime;
    import javax.persistence.Column;
    import javax.persistence.Entity;
    import javax.persistence.Id;

    @Entity
    public class NoteEntity {
        @Id
        private Long id;

        @Column(columnDefinition = "varchar(64) not null comment 'Title'")
        private String title;

        @Column(columnDefinition = "int not null comment 'Status'")
        private Status status;

        private Boolean deleted;

        private LocalDateTime createTime;

        private Long userId;

        public enum Status {
            OPEN, DONE
        }
    }
    """
)

PLAIN_SOURCE = textwrap.dedent(
    """\
    package com.acme.shop.domain.entity;

    public class Customer {
        private Long id;

        private String name;

        private Double credit;

        private LocalDateTime updateTime;

        private Boolean active;

        public String getName() {
            return name;
        }
    }
    """
)


@pytest.fixture()
def order_source() -> str:
    return ORDER_SOURCE


@pytest.fixture()
def note_source() -> str:
    return NOTE_SOURCE


@pytest.fixture()
def plain_source() -> str:
    return PLAIN_SOURCE


@pytest.fixture()
def order_entity() -> EntityDescriptor:
    return read_entity(ORDER_SOURCE)


@pytest.fixture()
def note_entity() -> EntityDescriptor:
    return read_entity(NOTE_SOURCE)


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


@pytest.fixture()
def symbols() -> SymbolTable:
    return SymbolTable()


@pytest.fixture()
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture()
def make_planner(symbols: SymbolTable, sink: MemorySink) -> Callable[..., GenerationPlanner]:
    """Build a planner over the shared symbol table and memory sink."""

    def _make(config: Optional[FeatureConfig] = None, target_sink=None) -> GenerationPlanner:
        return GenerationPlanner(
            symbols,
            target_sink if target_sink is not None else sink,
            config or FeatureConfig(),
            java_root=JAVA_ROOT,
            resources_root=RESOURCES_ROOT,
        )

    return _make
