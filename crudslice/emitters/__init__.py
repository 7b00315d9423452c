"""One emitter per artifact kind. Each returns a :class:`Template` for the planner to place."""
from .common import Template
from .controller import ControllerDeps, ControllerOptions, controller_path, gen_controller
from .dao import gen_dao, gen_dao_xml, table_name
from .dto import AUDIT_FIELDS, dto_fields, gen_dtos
from .mapper import ENTITY_MAPPER, gen_entity_mapper, gen_mapper
from .page import gen_page
from .query import BASE_QUERY, gen_base_query, gen_query
from .repository import BASE_REPOSITORY, gen_base_repository, gen_repository
from .service import ServiceDeps, gen_service_class, gen_service_impl, gen_service_interface

__all__ = [
    "AUDIT_FIELDS",
    "BASE_QUERY",
    "BASE_REPOSITORY",
    "ENTITY_MAPPER",
    "ControllerDeps",
    "ControllerOptions",
    "ServiceDeps",
    "Template",
    "controller_path",
    "dto_fields",
    "gen_base_query",
    "gen_base_repository",
    "gen_controller",
    "gen_dao",
    "gen_dao_xml",
    "gen_dtos",
    "gen_entity_mapper",
    "gen_mapper",
    "gen_page",
    "gen_query",
    "gen_repository",
    "gen_service_class",
    "gen_service_impl",
    "gen_service_interface",
    "table_name",
]
