import pytest

from crudslice.naming import (
    default_table_name,
    first_letter_to_lower,
    first_letter_to_upper,
    split_camel_case,
    strip_entity_suffix,
    to_kebab_case,
    to_snake_case,
)


@pytest.mark.parametrize("name", ["OrderEntity", "UserOrderEntity", "Entity", "XEntity"])
def test_strip_entity_suffix_removes_one_suffix_and_is_idempotent(name):
    stripped = strip_entity_suffix(name)
    assert stripped == name[: -len("Entity")]
    if not stripped.endswith("Entity"):
        assert strip_entity_suffix(stripped) == stripped


def test_strip_entity_suffix_only_once():
    assert strip_entity_suffix("EntityEntity") == "Entity"
    assert strip_entity_suffix("Order") == "Order"


def test_snake_case():
    assert to_snake_case("userId") == "user_id"
    assert to_snake_case("ID") == "id"
    assert to_snake_case("createTime") == "create_time"
    assert to_snake_case("XMLParser") == "xml_parser"


def test_kebab_case():
    assert to_kebab_case("UserOrder") == "user-order"
    assert to_kebab_case("Order") == "order"


def test_split_camel_case_keeps_last_capital_with_next_word():
    assert split_camel_case("XMLParser") == ["XML", "Parser"]
    assert split_camel_case("userId") == ["user", "Id"]
    assert split_camel_case("order2Items") == ["order", "2", "Items"]


def test_first_letter_helpers():
    assert first_letter_to_lower("OrderService") == "orderService"
    assert first_letter_to_upper("orderService") == "OrderService"


@pytest.mark.parametrize("fn", [
    strip_entity_suffix, to_snake_case, to_kebab_case, first_letter_to_lower, first_letter_to_upper,
])
@pytest.mark.parametrize("blank", ["", "   "])
def test_blank_input_yields_empty_string(fn, blank):
    assert fn(blank) == ""


def test_default_table_name():
    assert default_table_name("UserOrder") == "t_user_order"
